"""Joiner Repository - Data Access Layer (SoC)"""
import re
from typing import Dict, List, Optional, Tuple
from onboarding.central_db import COLLECTIONS, get_db
from onboarding.repositories.core.base_repo import BaseRepo
from onboarding.utils.validation.input_validator import to_object_id

class JoinerRepo(BaseRepo):
    def __init__(self, db=None):
        db = db if db is not None else get_db()
        super().__init__(db[COLLECTIONS["joiners_collection"]])

    @staticmethod
    def id_query(joiner_id: str) -> Dict:
        """ObjectId when the id looks like one, author_id otherwise"""
        oid = to_object_id(joiner_id)
        return {"_id": oid} if oid is not None else {"author_id": joiner_id}

    def find_by_id(self, joiner_id: str) -> Optional[Dict]:
        return self.find_one(self.id_query(joiner_id))

    def find_by_email(self, email: str, exclude_id=None) -> Optional[Dict]:
        if not email:
            return None
        query = {"email": {"$regex": f"^{re.escape(email.strip())}$", "$options": "i"}}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return self.find_one(query)

    def find_for_candidate(self, author_id: str, email: Optional[str]) -> Optional[Dict]:
        """Joiner by author_id, falling back to the (personal) email"""
        joiner = self.find_one({"author_id": author_id})
        if joiner or not email:
            return joiner
        email = email.strip().lower()
        return self.find_one({"$or": [{"email": email}, {"candidate_personal_mail_id": email}]})

    def find_by_email_or_name(self, email: Optional[str], name: Optional[str]) -> Optional[Dict]:
        clauses = []
        if email:
            clauses.append({"email": {"$regex": f"^{re.escape(email.strip())}$", "$options": "i"}})
        if name:
            clauses.append({"name": name})
        return self.find_one({"$or": clauses}) if clauses else None

    def list_page(self, query: Dict, sort: List[Tuple[str, int]], page: int, limit: int) -> Tuple[List[Dict], int]:
        total = self.count_documents(query)
        docs = self.find_many(query, sort=sort, skip=(page - 1) * limit, limit=limit)
        return docs, total

    def update_fields(self, joiner_id, fields: Dict) -> bool:
        return self.update_one({"_id": joiner_id}, {"$set": fields})

    def delete(self, joiner_id) -> bool:
        return self.delete_one({"_id": joiner_id})
