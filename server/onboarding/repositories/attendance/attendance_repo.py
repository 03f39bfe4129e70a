"""Attendance Repository - daily clock records, one per user per day"""
from datetime import datetime
from typing import Dict, List, Optional
from onboarding.central_db import COLLECTIONS, get_db
from onboarding.repositories.core.base_repo import BaseRepo
from onboarding.utils.validation.input_validator import to_object_id

class AttendanceRepo(BaseRepo):
    def __init__(self, db=None):
        db = db if db is not None else get_db()
        super().__init__(db[COLLECTIONS["attendance_collection"]])

    def find_for_day(self, user_id, day: datetime) -> Optional[Dict]:
        return self.find_one({"user": to_object_id(user_id), "date": day})

    def find_by_id(self, record_id) -> Optional[Dict]:
        oid = to_object_id(record_id)
        return self.find_one({"_id": oid}) if oid is not None else None

    def create(self, user_id, day: datetime, fields: Dict):
        document = {"user": to_object_id(user_id), "date": day, **fields}
        document["_id"] = self.insert_one(document)
        return document

    def update_fields(self, record_id, fields: Dict) -> bool:
        return self.update_one({"_id": record_id}, {"$set": fields})

    def history(self, user_id, start: Optional[datetime], end: Optional[datetime], page: int, limit: int):
        query: Dict = {"user": to_object_id(user_id)}
        if start or end:
            query["date"] = {}
            if start:
                query["date"]["$gte"] = start
            if end:
                query["date"]["$lte"] = end
        total = self.count_documents(query)
        records = self.find_many(query, sort=[("date", -1)], skip=(page - 1) * limit, limit=limit)
        return records, total

    def for_users(self, user_ids: List, day: Optional[datetime] = None) -> List[Dict]:
        query: Dict = {"user": {"$in": [to_object_id(u) for u in user_ids]}}
        if day is not None:
            query["date"] = day
        return self.find_many(query, sort=[("date", -1)])

    def count_present(self, user_id, start: datetime, end: datetime) -> int:
        return self.count_documents({
            "user": to_object_id(user_id),
            "date": {"$gte": start, "$lte": end},
            "status": "present",
        })
