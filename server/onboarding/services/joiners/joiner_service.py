"""Joiner Service - new-joiner roster and account provisioning"""
import re
import secrets
import string
from typing import Dict, Optional
import bcrypt
from onboarding.config.constants import ROLE_TRAINEE
from onboarding.exceptions.exceptions import ConflictError, NotFoundError, ValidationError
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.repositories.users.identity_repo import CURRENT
from onboarding.services.events.event_publisher import EventPublisher
from onboarding.services.events.mirror_consumer import SHEETS_SYNC_REQUESTED
from onboarding.utils.pagination.pagination_utils import pagination_meta
from onboarding.utils.time.timeutils import date_key, parse_date, utc_now
from onboarding.utils.validation.input_validator import require_fields

logger = get_logger("services.joiners")

JOINER_FIELDS = (
    "name", "email", "phone", "department", "role", "employeeId", "author_id",
    "genre", "joiningDate", "qualification", "notes", "status",
)
SORTABLE_FIELDS = ("createdAt", "joiningDate", "name", "email", "department", "status")
TEMP_PASSWORD_LENGTH = 8

def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))

class JoinerService:
    def __init__(self, joiner_repo=None, identity_repo=None, publisher=None):
        self.joiner_repo = joiner_repo or RepositoryFactory.get_joiner_repo()
        self.identity_repo = identity_repo or RepositoryFactory.get_identity_repo()
        self.publisher = publisher or EventPublisher()

    def _request_sync(self) -> None:
        self.publisher.emit(SHEETS_SYNC_REQUESTED, {"target": "joiners"})

    def _get(self, joiner_id: str) -> Dict:
        joiner = self.joiner_repo.find_by_id(joiner_id)
        if not joiner:
            raise NotFoundError("Joiner not found")
        return joiner

    def create(self, data: Dict, actor: Dict) -> Dict:
        require_fields(data, "name", "email")
        email = data["email"].strip().lower()
        if self.joiner_repo.find_by_email(email):
            raise ConflictError("Joiner with this email already exists")

        now = utc_now()
        joiner = {k: data.get(k) for k in JOINER_FIELDS if k in data}
        joiner.update({
            "email": email,
            "role": data.get("role") or ROLE_TRAINEE,
            "joiningDate": parse_date(data["joiningDate"]) if data.get("joiningDate") else now,
            "status": data.get("status") or "pending",
            "accountCreated": False,
            "notes": data.get("notes") or "",
            "createdBy": actor.get("id"),
            "createdAt": now,
            "updatedAt": now,
        })
        joiner["_id"] = self.joiner_repo.insert_one(joiner)
        logger.info(f"Joiner {email} created by {actor.get('id')}")
        self._request_sync()
        return {"message": "Joiner added successfully", "joiner": joiner}

    def list_joiners(self, params: Dict, page: int = 1, limit: int = 10) -> Dict:
        query: Dict = {}
        for field in ("department", "status", "role"):
            if params.get(field):
                query[field] = params[field]
        if params.get("search"):
            pattern = {"$regex": re.escape(params["search"]), "$options": "i"}
            query["$or"] = [{"name": pattern}, {"email": pattern}, {"employeeId": pattern}]
        if params.get("startDate") and params.get("endDate"):
            query["joiningDate"] = {"$gte": parse_date(params["startDate"]), "$lte": parse_date(params["endDate"])}

        sort_by = params.get("sortBy") or "createdAt"
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(f"sortBy must be one of {', '.join(SORTABLE_FIELDS)}")
        direction = -1 if (params.get("sortOrder") or "desc") == "desc" else 1

        joiners, total = self.joiner_repo.list_page(query, [(sort_by, direction)], page, limit)
        return {"joiners": joiners, **pagination_meta(total, page, limit)}

    def get(self, joiner_id: str) -> Dict:
        return {"joiner": self._get(joiner_id)}

    def update(self, joiner_id: str, data: Dict) -> Dict:
        joiner = self._get(joiner_id)
        fields = {k: data[k] for k in JOINER_FIELDS if k in data}
        if "email" in fields:
            fields["email"] = str(fields["email"]).strip().lower()
            if self.joiner_repo.find_by_email(fields["email"], exclude_id=joiner["_id"]):
                raise ConflictError("Email already exists")
        if fields.get("joiningDate"):
            fields["joiningDate"] = parse_date(fields["joiningDate"])
        fields["updatedAt"] = utc_now()

        self.joiner_repo.update_fields(joiner["_id"], fields)
        joiner.update(fields)
        self._request_sync()
        return {"message": "Joiner updated successfully", "joiner": joiner}

    def delete(self, joiner_id: str) -> Dict:
        joiner = self._get(joiner_id)
        self.joiner_repo.delete(joiner["_id"])
        logger.info(f"Joiner {joiner.get('email')} deleted")
        self._request_sync()
        return {"message": "Joiner deleted successfully"}

    def create_account(self, joiner_id: str) -> Dict:
        """Provision a current-schema user for the joiner and return the one-time password"""
        joiner = self._get(joiner_id)
        if joiner.get("accountCreated"):
            raise ValidationError("User account already created for this joiner")
        if self.identity_repo.email_exists(joiner.get("email")):
            raise ConflictError("User with this email already exists")

        password = generate_temp_password()
        now = utc_now()
        user = {
            "name": joiner.get("name"),
            "email": joiner.get("email"),
            "password": bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8"),
            "role": joiner.get("role") or ROLE_TRAINEE,
            "phone": joiner.get("phone"),
            "department": joiner.get("department"),
            "employeeId": joiner.get("employeeId"),
            "author_id": joiner.get("author_id"),
            "genre": joiner.get("genre"),
            "joiningDate": joiner.get("joiningDate"),
            "isActive": True,
            "accountStatus": "active",
            "createdAt": now,
        }
        user_id = self.identity_repo.insert(CURRENT, user)
        self.joiner_repo.update_fields(joiner["_id"], {
            "accountCreated": True,
            "accountCreatedAt": now,
            "userId": user_id,
            "status": "active",
        })
        self.publisher.emit(SHEETS_SYNC_REQUESTED, {"target": "all"})
        return {
            "message": "User account created successfully",
            "user": {
                "_id": user_id,
                "name": user["name"],
                "email": user["email"],
                "role": user["role"],
                "password": password,
            },
        }

    def stats(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict:
        match: Dict = {"status": {"$ne": "inactive"}}
        if start_date and end_date:
            match["joiningDate"] = {"$gte": parse_date(start_date), "$lte": parse_date(end_date)}

        overview = self.joiner_repo.aggregate([
            {"$match": match},
            {"$group": {
                "_id": None,
                "total": {"$sum": 1},
                "pending": {"$sum": {"$cond": [{"$eq": ["$status", "pending"]}, 1, 0]}},
                "active": {"$sum": {"$cond": [{"$eq": ["$status", "active"]}, 1, 0]}},
                "completed": {"$sum": {"$cond": [{"$eq": ["$status", "completed"]}, 1, 0]}},
                "accountCreated": {"$sum": {"$cond": ["$accountCreated", 1, 0]}},
            }},
        ])
        departments = self.joiner_repo.aggregate([
            {"$match": match},
            {"$group": {"_id": "$department", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
        ])
        daily = self.joiner_repo.aggregate([
            {"$match": match},
            {"$group": {
                "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$joiningDate"}},
                "count": {"$sum": 1},
            }},
            {"$sort": {"_id": 1}},
        ])

        summary = overview[0] if overview else {
            "total": 0, "pending": 0, "active": 0, "completed": 0, "accountCreated": 0,
        }
        summary.pop("_id", None)
        return {
            "overview": summary,
            "departmentStats": departments,
            "dailyJoiners": [{"date": d["_id"], "count": d["count"]} for d in daily if d.get("_id")],
            "generatedOn": date_key(utc_now()),
        }
