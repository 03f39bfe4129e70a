"""Applies domain events to the secondary records that mirror a primary write"""
from typing import Callable, Dict, Optional
from onboarding.config.settings import SheetsConfig
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory

logger = get_logger("services.events.mirror_consumer")

USER_UPDATED = "user.updated"
USER_DEACTIVATED = "user.deactivated"
USER_REACTIVATED = "user.reactivated"
USER_ROLE_CHANGED = "user.role_changed"
SHEETS_SYNC_REQUESTED = "sheets.sync_requested"

class UnknownEventError(Exception):
    pass

class MirrorEventConsumer:
    """Single consumer for cross-collection consistency updates"""

    def __init__(self, identity_repo=None, joiner_repo=None, deactivated_repo=None,
                 sheets_sync: Optional[Callable[[str], Dict]] = None, auto_sync: Optional[bool] = None):
        self.identity_repo = identity_repo or RepositoryFactory.get_identity_repo()
        self.joiner_repo = joiner_repo or RepositoryFactory.get_joiner_repo()
        self.deactivated_repo = deactivated_repo or RepositoryFactory.get_deactivated_user_repo()
        self.sheets_sync = sheets_sync
        self.auto_sync = SheetsConfig.AUTO_SYNC if auto_sync is None else auto_sync
        self.handlers = {
            USER_UPDATED: self._mirror_user,
            USER_REACTIVATED: self._mirror_user,
            USER_ROLE_CHANGED: self._mirror_user,
            USER_DEACTIVATED: self._deactivated,
            SHEETS_SYNC_REQUESTED: self._sheets_sync,
        }

    def apply(self, event: Dict) -> None:
        handler = self.handlers.get(event.get("type"))
        if handler is None:
            raise UnknownEventError(f"No handler for event type {event.get('type')}")
        handler(event)

    def _mirror_user(self, event: Dict) -> None:
        """$set the same fields on the record in every other collection, matched by email"""
        payload = event["payload"]
        for source in self.identity_repo.sources():
            if source == payload.get("source"):
                continue
            if self.identity_repo.update_by_email(source, payload.get("email"), payload["fields"]):
                logger.info(f"Mirrored {event['type']} for {payload.get('email')} into {source}")

    def _deactivated(self, event: Dict) -> None:
        payload = event["payload"]
        self._mirror_user(event)
        self.deactivated_repo.record(event["_id"], payload["audit"])
        joiner = self.joiner_repo.find_by_email_or_name(payload.get("email"), payload.get("name"))
        if joiner:
            self.joiner_repo.update_fields(joiner["_id"], {"status": "inactive", "accountCreated": False})

    def _sheets_sync(self, event: Dict) -> None:
        if not self.auto_sync or self.sheets_sync is None:
            return
        target = event["payload"].get("target", "all")
        result = self.sheets_sync(target)
        logger.info(f"Auto-synced {target} to Google Sheets: {result.get('message', '')}")
