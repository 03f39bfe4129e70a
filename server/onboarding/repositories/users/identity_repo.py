"""Candidate Identity Repository - both user collections behind one interface"""
import re
from typing import Dict, Iterable, List, Optional, Tuple
from onboarding.central_db import COLLECTIONS, get_db
from onboarding.config.constants import USER_SECRET_FIELDS
from onboarding.config.settings import IdentityConfig
from onboarding.repositories.core.base_repo import BaseRepo
from onboarding.utils.processing.parallel_processor import ParallelProcessor
from onboarding.utils.validation.input_validator import to_object_id

LEGACY = "legacy"
CURRENT = "current"

class CandidateIdentityRepo:
    """
    Data access for candidate identities.

    Reads consult the legacy collection and the current collection until the
    backfill has retired the legacy one (IdentityConfig.LEGACY_USERS_RETIRED),
    after which only the current collection is read. Writes name the source
    collection explicitly so a record is always persisted where it lives.
    """

    def __init__(self, db=None, legacy_retired: Optional[bool] = None):
        db = db if db is not None else get_db()
        self.repos = {
            LEGACY: BaseRepo(db[COLLECTIONS["legacy_users_collection"]]),
            CURRENT: BaseRepo(db[COLLECTIONS["current_users_collection"]]),
        }
        self.legacy_retired = IdentityConfig.LEGACY_USERS_RETIRED if legacy_retired is None else legacy_retired

    def sources(self) -> Tuple[str, ...]:
        """Read order: legacy first, current overlays it"""
        return (CURRENT,) if self.legacy_retired else (LEGACY, CURRENT)

    def _fan_out(self, fn) -> Dict[str, object]:
        return ParallelProcessor.run_all({source: (lambda s=source: fn(s)) for source in self.sources()})

    # ---- reads ----

    def find_by_author_id(self, author_id: str) -> Dict[str, Optional[Dict]]:
        """{source: doc or None} for the trimmed author_id"""
        query = {"author_id": author_id.strip()}
        return self._fan_out(lambda s: self.repos[s].find_one(query, USER_SECRET_FIELDS))

    def find_by_author_ids(self, author_ids: Iterable[str]) -> Dict[str, List[Dict]]:
        """{source: [docs]} with one $in query per collection"""
        ids = sorted({a.strip() for a in author_ids if a and a.strip()})
        if not ids:
            return {source: [] for source in self.sources()}
        query = {"author_id": {"$in": ids}}
        return self._fan_out(lambda s: self.repos[s].find_many(query, USER_SECRET_FIELDS))

    def find_by_id(self, user_id) -> Tuple[Optional[str], Optional[Dict]]:
        """(source, doc) looking in the current collection first"""
        oid = to_object_id(user_id)
        if oid is None:
            return None, None
        for source in reversed(self.sources()):
            doc = self.repos[source].find_one({"_id": oid}, USER_SECRET_FIELDS)
            if doc:
                return source, doc
        return None, None

    def find_by_email(self, source: str, email: str, projection: Optional[Dict] = USER_SECRET_FIELDS) -> Optional[Dict]:
        if not email:
            return None
        pattern = {"$regex": f"^{re.escape(email.strip())}$", "$options": "i"}
        return self.repos[source].find_one({"email": pattern}, projection)

    def email_exists(self, email: str) -> bool:
        return any(self.find_by_email(source, email) for source in self.sources())

    def find_many(self, query: Dict) -> Dict[str, List[Dict]]:
        return self._fan_out(lambda s: self.repos[s].find_many(query, USER_SECRET_FIELDS))

    def find_by_ids(self, ids: Iterable) -> Dict[str, List[Dict]]:
        oids = [oid for oid in (to_object_id(i) for i in ids) if oid is not None]
        if not oids:
            return {source: [] for source in self.sources()}
        return self.find_many({"_id": {"$in": oids}})

    def aggregate(self, source: str, pipeline: List[Dict]) -> List[Dict]:
        return self.repos[source].aggregate(pipeline)

    # ---- writes ----

    def update_by_id(self, source: str, user_id, fields: Dict) -> bool:
        return self.repos[source].update_one({"_id": to_object_id(user_id)}, {"$set": fields})

    def update_by_email(self, source: str, email: str, fields: Dict) -> bool:
        if not email:
            return False
        pattern = {"$regex": f"^{re.escape(email.strip())}$", "$options": "i"}
        return self.repos[source].update_one({"email": pattern}, {"$set": fields})

    def update_many(self, source: str, query: Dict, fields: Dict) -> int:
        return self.repos[source].update_many(query, {"$set": fields})

    def insert(self, source: str, document: Dict):
        return self.repos[source].insert_one(document)

    def iter_legacy(self) -> List[Dict]:
        """Raw legacy documents for the backfill (secrets included)"""
        return self.repos[LEGACY].find_many({})
