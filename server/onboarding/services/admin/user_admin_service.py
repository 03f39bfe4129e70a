"""User Admin Service - listings, stats and account lifecycle over both user collections"""
from collections import Counter
from typing import Dict, Optional
from onboarding.config.constants import (
    PENDING_ASSIGNMENT, ROLE_ADMIN, ROLE_MASTER_TRAINER, ROLE_TRAINEE, ROLE_TRAINER,
    USER_UPDATABLE_FIELDS, VALID_ROLES,
)
from onboarding.exceptions.exceptions import NotFoundError, PersistenceError, ValidationError
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.users.identity_repo import CURRENT, LEGACY
from onboarding.services.events.event_publisher import EventPublisher
from onboarding.services.events.mirror_consumer import (
    USER_DEACTIVATED, USER_REACTIVATED, USER_ROLE_CHANGED, USER_UPDATED,
)
from onboarding.services.identity.identity_merger import author_key
from onboarding.services.identity.identity_service import IdentityService, is_active
from onboarding.utils.pagination.pagination_utils import paginate_data
from onboarding.utils.time.timeutils import utc_now

logger = get_logger("services.user_admin")

USER_STATUSES = ("active", "inactive", "all")

class UserAdminService:
    def __init__(self, identity_service=None, publisher=None):
        self.identity_service = identity_service or IdentityService()
        self.identity_repo = self.identity_service.identity_repo
        self.publisher = publisher or EventPublisher()

    # ---- reads ----

    def list_users(self, role: Optional[str] = None, status: str = "active", page: int = 1, limit: int = 50) -> Dict:
        status = status or "active"
        if status not in USER_STATUSES:
            raise ValidationError(f"status must be one of {', '.join(USER_STATUSES)}")
        if role and role not in VALID_ROLES:
            raise ValidationError(f"Invalid role: {role}")

        query = {"role": role} if role else {}
        users = self.identity_service.list_merged(query)
        if status == "active":
            users = [u for u in users if is_active(u)]
        elif status == "inactive":
            users = [u for u in users if not is_active(u)]

        result = paginate_data(users, page, limit)
        return {"success": True, "users": result["data"], "pagination": result["pagination"]}

    def get_user(self, user_id: str) -> Dict:
        return {"success": True, "user": self.identity_service.load_with_cleanup(user_id)}

    def system_stats(self) -> Dict:
        users = self.identity_service.list_merged()
        # Stats count only records explicitly flagged active
        active = [u for u in users if u.get("isActive") is True]
        roles = Counter(u.get("role") for u in active)
        statuses = Counter(u.get("accountStatus") or "active" for u in active)
        return {
            "totalUsers": len(active),
            "activeUsers": len(active),
            "deactivatedUsers": sum(1 for u in users if u.get("isActive") is False),
            "roleStats": [{"_id": r, "count": c} for r, c in roles.items()],
            "statusStats": [{"_id": s, "count": c} for s, c in statuses.items()],
        }

    # ---- writes ----

    def _locate(self, user_id: str):
        source, user = self.identity_repo.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return source, user

    def update_by_author_id(self, author_id: str, data: Dict, actor: Dict) -> Dict:
        if not author_id or not author_id.strip():
            raise ValidationError("Author ID is required")
        fields = {k: v for k, v in (data or {}).items() if k in USER_UPDATABLE_FIELDS}
        if not fields:
            raise ValidationError(f"Nothing to update. Allowed fields: {', '.join(USER_UPDATABLE_FIELDS)}")
        fields["updatedAt"] = utc_now()

        found = self.identity_repo.find_by_author_id(author_id)
        for source in (CURRENT, LEGACY):
            user = found.get(source)
            if user is None:
                continue
            if not self.identity_repo.update_by_id(source, user["_id"], fields):
                raise PersistenceError("Failed to update user")
            self.publisher.emit(USER_UPDATED, {"source": source, "email": user.get("email"), "fields": fields})
            logger.info(f"User {author_id} updated by {actor.get('id')}")
            user.update(fields)
            return {"success": True, "message": "User updated successfully", "user": user}
        raise NotFoundError("User not found")

    def deactivate(self, user_id: str, actor: Dict, reason: Optional[str] = None) -> Dict:
        source, user = self._locate(user_id)
        if user.get("isActive") is False:
            raise ValidationError("User account is already deactivated")

        reason = reason or "Account deactivated by admin"
        now = utc_now()
        fields = {
            "isActive": False,
            "accountStatus": "deactivated",
            "deactivatedAt": now,
            "deactivatedBy": actor.get("id"),
            "deactivationReason": reason,
        }
        self.identity_repo.update_by_id(source, user["_id"], fields)

        if user.get("role") == ROLE_TRAINER:
            self._unassign_trainees(user)

        self.publisher.emit(USER_DEACTIVATED, {
            "source": source,
            "email": user.get("email"),
            "name": user.get("name"),
            "fields": fields,
            "audit": self._audit_entry(source, user, actor, reason, now),
        })
        logger.info(f"User {user['_id']} deactivated by {actor.get('id')}")
        return {"success": True, "message": "User account deactivated and all access removed successfully"}

    def _unassign_trainees(self, trainer: Dict) -> None:
        query = {"assignedTrainer": trainer["_id"], "role": ROLE_TRAINEE}
        for source in self.identity_repo.sources():
            self.identity_repo.update_many(source, query, {"assignedTrainer": None, "status": PENDING_ASSIGNMENT})
        for source in self.identity_repo.sources():
            self.identity_repo.update_many(source, {"_id": trainer["_id"]}, {"assignedTrainees": []})

    @staticmethod
    def _audit_entry(source: str, user: Dict, actor: Dict, reason: str, when) -> Dict:
        return {
            "originalUserId": user["_id"] if source == LEGACY else None,
            "originalUserNewId": user["_id"] if source == CURRENT else None,
            "userInfo": {
                "author_id": author_key(user),
                "name": user.get("name"),
                "email": user.get("email"),
                "role": user.get("role"),
                "department": user.get("department"),
                "phone": user.get("phone"),
                "joiningDate": user.get("joiningDate"),
                "employeeId": user.get("employeeId"),
            },
            "deactivationDetails": {
                "deactivatedAt": when,
                "deactivatedBy": actor.get("id"),
                "deactivatedByEmail": actor.get("email"),
                "reason": reason,
            },
            "assignmentInfo": {
                "assignedTrainer": user.get("assignedTrainer"),
                "assignedTrainees": list(user.get("assignedTrainees") or []),
                "status": "inactive",
            },
            "status": "deactivated",
        }

    def reactivate(self, user_id: str, actor: Dict) -> Dict:
        source, user = self._locate(user_id)
        if is_active(user):
            raise ValidationError("User account is already active")

        fields = {
            "isActive": True,
            "accountStatus": "active",
            "reactivatedAt": utc_now(),
            "reactivatedBy": actor.get("id"),
            "deactivatedAt": None,
            "deactivatedBy": None,
            "deactivationReason": None,
        }
        self.identity_repo.update_by_id(source, user["_id"], fields)
        self.publisher.emit(USER_REACTIVATED, {"source": source, "email": user.get("email"), "fields": fields})
        return {"success": True, "message": "User account reactivated successfully"}

    def change_role(self, user_id: str, new_role: str, actor: Dict, reason: Optional[str] = None) -> Dict:
        if new_role not in VALID_ROLES:
            raise ValidationError("Invalid role. Valid roles: trainee, trainer, master_trainer, boa, admin")
        source, user = self._locate(user_id)
        original_role = user.get("role")
        if original_role == ROLE_ADMIN:
            raise ValidationError("Admin role cannot be changed to prevent system lockout")
        if original_role == new_role:
            raise ValidationError("User is already in the specified role")

        if original_role == ROLE_TRAINER and new_role == ROLE_MASTER_TRAINER:
            self._unassign_trainees(user)

        history = list(user.get("roleHistory") or [])
        history.append({
            "fromRole": original_role,
            "toRole": new_role,
            "changedBy": actor.get("id"),
            "changedAt": utc_now(),
            "reason": reason,
        })
        fields = {"role": new_role, "roleHistory": history}
        if original_role == ROLE_TRAINER:
            fields["assignedTrainees"] = []
        self.identity_repo.update_by_id(source, user["_id"], fields)

        self.publisher.emit(USER_ROLE_CHANGED, {"source": source, "email": user.get("email"), "fields": {"role": new_role}})
        logger.info(f"User {user['_id']} role {original_role} -> {new_role}")
        return {
            "success": True,
            "message": f"User successfully promoted to {new_role}",
            "user": {"_id": user["_id"], "name": user.get("name"), "email": user.get("email"), "role": new_role},
        }
