"""Outbox publisher: store the event, then dispatch it to the mirror consumer"""
from typing import Dict, Optional
from onboarding.config.settings import OutboxConfig
from onboarding.exceptions.exceptions import PersistenceError
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory

logger = get_logger("services.events.event_publisher")

class EventPublisher:
    def __init__(self, event_repo=None, consumer=None):
        self.event_repo = event_repo or RepositoryFactory.get_event_repo()
        self._consumer = consumer

    @property
    def consumer(self):
        if self._consumer is None:
            from onboarding.services.events.mirror_consumer import MirrorEventConsumer
            from onboarding.services.sheets.sheets_export_service import SheetsExportService
            self._consumer = MirrorEventConsumer(sheets_sync=SheetsExportService().sync_target)
        return self._consumer

    def emit(self, event_type: str, payload: Dict) -> Optional[Dict]:
        """
        Record a domain event and apply it right away.

        The primary write has already happened when this runs, so nothing here
        raises: a failed dispatch leaves the event "failed" for replay_pending.
        """
        try:
            event = self.event_repo.append(event_type, payload)
        except PersistenceError as e:
            logger.error(f"Could not record {event_type} event: {e}")
            return None
        self._dispatch(event)
        return event

    def _dispatch(self, event: Dict) -> bool:
        try:
            self.consumer.apply(event)
            self.event_repo.mark_applied(event["_id"])
            return True
        except Exception as e:
            logger.warning(f"Event {event['type']} ({event['_id']}) failed: {e}")
            try:
                self.event_repo.mark_failed(event["_id"], str(e)[:500])
            except PersistenceError as mark_error:
                logger.error(f"Could not mark event {event['_id']} failed: {mark_error}")
            return False

    def replay_pending(self, limit: Optional[int] = None) -> Dict:
        """Retry pending and failed events below the attempt limit"""
        events = self.event_repo.retryable(OutboxConfig.MAX_ATTEMPTS, limit or OutboxConfig.REPLAY_BATCH)
        applied = sum(1 for event in events if self._dispatch(event))
        logger.info(f"Replayed {len(events)} events: {applied} applied, {len(events) - applied} failed")
        return {"success": True, "replayed": len(events), "applied": applied, "failed": len(events) - applied}
