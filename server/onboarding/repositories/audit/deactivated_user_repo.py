"""Audit trail of deactivated accounts"""
from typing import Dict
from onboarding.central_db import COLLECTIONS, get_db
from onboarding.repositories.core.base_repo import BaseRepo

class DeactivatedUserRepo(BaseRepo):
    def __init__(self, db=None):
        db = db if db is not None else get_db()
        super().__init__(db[COLLECTIONS["deactivated_users_collection"]])

    def record(self, event_id, entry: Dict) -> bool:
        """One audit row per deactivation event, so replays do not duplicate it"""
        return self.update_one({"eventId": event_id}, {"$setOnInsert": {**entry, "eventId": event_id}}, upsert=True)
