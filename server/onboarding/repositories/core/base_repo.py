"""
Base Repository Class
Common database operations following DRY principle
"""
from typing import Dict, List, Optional
from pymongo.errors import PyMongoError
from onboarding.exceptions.exceptions import PersistenceError

class BaseRepo:
    """Wraps one collection; driver errors surface as PersistenceError"""

    def __init__(self, collection):
        self.collection = collection

    def find_one(self, query: Dict, projection: Optional[Dict] = None) -> Optional[Dict]:
        try:
            return self.collection.find_one(query, projection)
        except PyMongoError as e:
            raise PersistenceError(f"Database query failed: {str(e)}")

    def find_many(self, query: Dict, projection: Optional[Dict] = None, sort: Optional[List] = None,
                  skip: int = 0, limit: int = 0) -> List[Dict]:
        try:
            cursor = self.collection.find(query, projection)
            if sort:
                cursor = cursor.sort(sort)
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            raise PersistenceError(f"Database query failed: {str(e)}")

    def insert_one(self, document: Dict):
        try:
            return self.collection.insert_one(document).inserted_id
        except PyMongoError as e:
            raise PersistenceError(f"Database insert failed: {str(e)}")

    def insert_many(self, documents: List[Dict]) -> int:
        if not documents:
            return 0
        try:
            return len(self.collection.insert_many(documents).inserted_ids)
        except PyMongoError as e:
            raise PersistenceError(f"Database bulk insert failed: {str(e)}")

    def update_one(self, query: Dict, update: Dict, upsert: bool = False) -> bool:
        try:
            result = self.collection.update_one(query, update, upsert=upsert)
            return result.matched_count > 0 or result.upserted_id is not None
        except PyMongoError as e:
            raise PersistenceError(f"Database update failed: {str(e)}")

    def update_many(self, query: Dict, update: Dict) -> int:
        try:
            return self.collection.update_many(query, update).modified_count
        except PyMongoError as e:
            raise PersistenceError(f"Database update failed: {str(e)}")

    def delete_one(self, query: Dict) -> bool:
        try:
            return self.collection.delete_one(query).deleted_count > 0
        except PyMongoError as e:
            raise PersistenceError(f"Database delete failed: {str(e)}")

    def count_documents(self, query: Dict) -> int:
        try:
            return self.collection.count_documents(query)
        except PyMongoError as e:
            raise PersistenceError(f"Database count failed: {str(e)}")

    def aggregate(self, pipeline: List[Dict]) -> List[Dict]:
        try:
            return list(self.collection.aggregate(pipeline))
        except PyMongoError as e:
            raise PersistenceError(f"Database aggregation failed: {str(e)}")
