"""User Directory Merger - one logical record per candidate identity"""
from typing import Dict, Iterable, List, Optional, Tuple
from onboarding.config.constants import PENDING_ASSIGNMENT, ROLE_TRAINEE, ROLE_TRAINER
from onboarding.exceptions.exceptions import NotFoundError
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.repositories.users.identity_repo import CURRENT, LEGACY
from onboarding.services.identity.identity_merger import (
    candidate_summary, dedup_records, merge_by_author_id, merge_pair,
)

logger = get_logger("services.identity")

def is_active(user: Optional[Dict]) -> bool:
    return bool(user) and user.get("isActive") is not False

class IdentityService:
    def __init__(self, identity_repo=None):
        self.identity_repo = identity_repo or RepositoryFactory.get_identity_repo()

    # ---- lookups ----

    def resolve(self, author_id: str) -> Dict:
        """Merged record for one author_id or NotFoundError"""
        if not author_id or not str(author_id).strip():
            raise NotFoundError("author_id is required")
        found = self.identity_repo.find_by_author_id(str(author_id))
        merged = merge_pair(found.get(LEGACY), found.get(CURRENT))
        if merged is None:
            raise NotFoundError(f"User not found with author_id {author_id}")
        return merged

    def resolve_many(self, author_ids: Iterable[str]) -> Dict[str, Dict]:
        """Batch lookup: {trimmed author_id: merged record} for the ids that exist"""
        found = self.identity_repo.find_by_author_ids(author_ids)
        return merge_by_author_id(found.get(LEGACY, []), found.get(CURRENT, []))

    def validate_author_id(self, author_id: str) -> Dict:
        return {"success": True, "data": candidate_summary(self.resolve(author_id))}

    def list_merged(self, query: Optional[Dict] = None) -> List[Dict]:
        """Both collections, current records first, de-duplicated by email"""
        found = self.identity_repo.find_many(query or {})
        return dedup_records(list(found.get(CURRENT, [])) + list(found.get(LEGACY, [])))

    def get_by_id(self, user_id) -> Tuple[str, Dict]:
        source, user = self.identity_repo.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return source, user

    # ---- self-healing reads ----

    def load_with_cleanup(self, user_id) -> Dict:
        """Fetch a user and repair stale trainer/trainee assignments on the way"""
        source, user = self.get_by_id(user_id)
        if user.get("role") == ROLE_TRAINER:
            self.heal_trainer(source, user)
        elif user.get("role") == ROLE_TRAINEE:
            self.heal_trainee(source, user)
        return user

    def heal_trainer(self, source: str, trainer: Dict) -> List:
        """
        Drop inactive or vanished trainees from assignedTrainees and persist it.

        When nothing is left, rebuild the list from active trainees whose
        assignedTrainer points at this trainer.
        """
        assigned = list(trainer.get("assignedTrainees") or [])
        if assigned:
            found = self.identity_repo.find_by_ids(assigned)
            active_ids = {
                str(doc["_id"])
                for docs in found.values() for doc in docs
                if is_active(doc)
            }
            cleaned = [ref for ref in assigned if str(ref) in active_ids]
        else:
            cleaned = []

        if not cleaned:
            rebuilt = self.identity_repo.find_many({
                "role": ROLE_TRAINEE,
                "assignedTrainer": trainer["_id"],
                "isActive": {"$ne": False},
            })
            cleaned = list({str(d["_id"]): d["_id"] for docs in rebuilt.values() for d in docs}.values())

        if [str(r) for r in cleaned] != [str(r) for r in assigned]:
            self.identity_repo.update_by_id(source, trainer["_id"], {"assignedTrainees": cleaned})
            logger.info(f"Healed assignedTrainees of trainer {trainer['_id']}: {len(assigned)} -> {len(cleaned)}")
        trainer["assignedTrainees"] = cleaned
        return cleaned

    def heal_trainee(self, source: str, trainee: Dict) -> Dict:
        trainer_id = trainee.get("assignedTrainer")
        if not trainer_id:
            return trainee
        _, trainer = self.identity_repo.find_by_id(trainer_id)
        if is_active(trainer):
            return trainee
        fields = {"assignedTrainer": None, "status": PENDING_ASSIGNMENT}
        self.identity_repo.update_by_id(source, trainee["_id"], fields)
        logger.info(f"Cleared inactive trainer {trainer_id} from trainee {trainee['_id']}")
        trainee.update(fields)
        return trainee

    def trainer_has_access(self, trainer: Dict, trainee_id) -> bool:
        return any(str(ref) == str(trainee_id) for ref in trainer.get("assignedTrainees") or [])
