"""Report Repository - one live record per (author_id, kind)"""
from typing import Dict, Iterable, List, Optional
from pymongo.errors import PyMongoError
from onboarding.central_db import get_db
from onboarding.exceptions.exceptions import PersistenceError
from onboarding.models.report_schemas import SCHEMA_VERSION, get_schema
from onboarding.repositories.core.base_repo import BaseRepo
from onboarding.utils.time.timeutils import utc_now
from onboarding.utils.validation.input_validator import to_object_id

class ReportRepo(BaseRepo):
    def __init__(self, kind: str, db=None):
        schema = get_schema(kind)
        db = db if db is not None else get_db()
        super().__init__(db[schema.collection])
        self.kind = kind

    def find_by_author_id(self, author_id: str) -> Optional[Dict]:
        return self.find_one({"author_id": author_id})

    def find_by_author_ids(self, author_ids: Iterable[str]) -> Dict[str, Dict]:
        ids = list({a for a in author_ids if a})
        if not ids:
            return {}
        return {doc["author_id"]: doc for doc in self.find_many({"author_id": {"$in": ids}})}

    def find_for_candidate(self, user_id, author_id: str) -> Optional[Dict]:
        """Match on the linked user or on author_id"""
        clauses = [{"author_id": author_id}]
        oid = to_object_id(user_id)
        if oid is not None:
            clauses.append({"user": oid})
        return self.find_one({"$or": clauses})

    def find_for_candidates(self, user_ids: Iterable, author_ids: Iterable[str]) -> List[Dict]:
        oids = [oid for oid in (to_object_id(u) for u in user_ids) if oid is not None]
        return self.find_many({"$or": [{"user": {"$in": oids}}, {"author_id": {"$in": list(author_ids)}}]})

    def find_all(self) -> List[Dict]:
        return self.find_many({})

    def latest_for_author(self, author_id: str) -> Optional[Dict]:
        docs = self.find_many({"author_id": author_id}, sort=[("uploadedAt", -1)], limit=1)
        return docs[0] if docs else None

    def build_document(self, author_id: str, user_id, payload, uploaded_by) -> Dict:
        now = utc_now()
        return {
            "kind": self.kind,
            "schemaVersion": SCHEMA_VERSION,
            "author_id": author_id,
            "user": to_object_id(user_id),
            "reportData": payload,
            "uploadedBy": to_object_id(uploaded_by) or uploaded_by,
            "uploadedAt": now,
            "lastUpdatedAt": now,
        }

    def create_bulk(self, documents: List[Dict]) -> int:
        return self.insert_many(documents)

    def replace_payload(self, author_id: str, payload, uploaded_by, user_id=None) -> bool:
        """Whole-document payload overwrite; concurrent writers: last one wins"""
        now = utc_now()
        fields = {
            "kind": self.kind,
            "schemaVersion": SCHEMA_VERSION,
            "reportData": payload,
            "uploadedBy": to_object_id(uploaded_by) or uploaded_by,
            "uploadedAt": now,
            "lastUpdatedAt": now,
        }
        if user_id is not None:
            fields["user"] = to_object_id(user_id)
        return self.update_one({"author_id": author_id}, {"$set": fields})

    def upsert_payload(self, author_id: str, user_id, payload, uploaded_by) -> bool:
        """Create on first write, update in place afterwards. Returns True when created."""
        now = utc_now()
        try:
            result = self.collection.update_one(
                {"author_id": author_id},
                {
                    "$set": {
                        "kind": self.kind,
                        "schemaVersion": SCHEMA_VERSION,
                        "user": to_object_id(user_id),
                        "reportData": payload,
                        "uploadedBy": to_object_id(uploaded_by) or uploaded_by,
                        "lastUpdatedAt": now,
                    },
                    "$setOnInsert": {"uploadedAt": now},
                },
                upsert=True,
            )
        except PyMongoError as e:
            raise PersistenceError(f"Database upsert failed: {str(e)}")
        return result.upserted_id is not None

    def update_record(self, record_id, payload, author_id: str, user_id=None) -> bool:
        """Save a read-modify-write result back onto the record it was read from"""
        fields = {
            "kind": self.kind,
            "schemaVersion": SCHEMA_VERSION,
            "author_id": author_id,
            "reportData": payload,
            "lastUpdatedAt": utc_now(),
        }
        if user_id is not None:
            fields["user"] = to_object_id(user_id)
        return self.update_one({"_id": record_id}, {"$set": fields})
