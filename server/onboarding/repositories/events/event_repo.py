"""Domain event outbox storage"""
from typing import Dict, List, Optional
from onboarding.central_db import COLLECTIONS, get_db
from onboarding.repositories.core.base_repo import BaseRepo
from onboarding.utils.time.timeutils import utc_now

PENDING = "pending"
APPLIED = "applied"
FAILED = "failed"

class DomainEventRepo(BaseRepo):
    def __init__(self, db=None):
        db = db if db is not None else get_db()
        super().__init__(db[COLLECTIONS["domain_events_collection"]])

    def append(self, event_type: str, payload: Dict) -> Dict:
        event = {
            "type": event_type,
            "payload": payload,
            "status": PENDING,
            "attempts": 0,
            "lastError": None,
            "createdAt": utc_now(),
            "appliedAt": None,
        }
        event["_id"] = self.insert_one(event)
        return event

    def mark_applied(self, event_id) -> bool:
        return self.update_one(
            {"_id": event_id},
            {"$set": {"status": APPLIED, "appliedAt": utc_now(), "lastError": None}, "$inc": {"attempts": 1}},
        )

    def mark_failed(self, event_id, error: str) -> bool:
        return self.update_one(
            {"_id": event_id},
            {"$set": {"status": FAILED, "lastError": error}, "$inc": {"attempts": 1}},
        )

    def retryable(self, max_attempts: int, limit: int) -> List[Dict]:
        return self.find_many(
            {"status": {"$in": [PENDING, FAILED]}, "attempts": {"$lt": max_attempts}},
            sort=[("createdAt", 1)],
            limit=limit,
        )

    def find_by_id(self, event_id) -> Optional[Dict]:
        return self.find_one({"_id": event_id})
