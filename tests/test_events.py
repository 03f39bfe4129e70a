from unittest.mock import MagicMock

import pytest

from onboarding.repositories.users.identity_repo import CURRENT, LEGACY
from onboarding.services.events.event_publisher import EventPublisher
from onboarding.services.events.mirror_consumer import (
    SHEETS_SYNC_REQUESTED, USER_DEACTIVATED, USER_UPDATED, MirrorEventConsumer, UnknownEventError,
)


@pytest.fixture
def consumer(identities, joiners):
    return MirrorEventConsumer(identities, joiners, deactivated_repo=MagicMock(), sheets_sync=MagicMock(), auto_sync=True)


def test_emit_records_and_applies(events):
    consumer = MagicMock()

    event = EventPublisher(events, consumer).emit(USER_UPDATED, {"email": "a@example.com", "fields": {}})

    consumer.apply.assert_called_once()
    assert events.docs[0]["status"] == "applied"
    assert event["type"] == USER_UPDATED


def test_failed_dispatch_is_kept_for_replay(events):
    consumer = MagicMock()
    consumer.apply.side_effect = RuntimeError("mirror down")
    publisher = EventPublisher(events, consumer)

    publisher.emit(USER_UPDATED, {"email": "a@example.com", "fields": {}})

    assert events.docs[0]["status"] == "failed"
    assert events.docs[0]["lastError"] == "mirror down"

    consumer.apply.side_effect = None
    result = publisher.replay_pending()

    assert result == {"success": True, "replayed": 1, "applied": 1, "failed": 0}
    assert events.docs[0]["status"] == "applied"
    assert events.docs[0]["attempts"] == 2


def test_user_update_is_mirrored_into_the_other_collection(consumer, identities):
    legacy = identities.add(LEGACY, email="asha@example.com", name="Old")
    current = identities.add(CURRENT, email="asha@example.com", name="Old")

    consumer.apply({"_id": 1, "type": USER_UPDATED,
                    "payload": {"source": CURRENT, "email": "ASHA@example.com", "fields": {"name": "New"}}})

    assert identities.get(LEGACY, legacy["_id"])["name"] == "New"
    assert identities.get(CURRENT, current["_id"])["name"] == "Old"


def test_deactivation_writes_audit_and_closes_joiner(consumer, identities, joiners):
    identities.add(LEGACY, email="asha@example.com", isActive=True)
    joiner = joiners.add(email="asha@example.com", status="active", accountCreated=True)
    audit = {"status": "deactivated"}

    consumer.apply({"_id": "evt-1", "type": USER_DEACTIVATED, "payload": {
        "source": CURRENT, "email": "asha@example.com", "name": "Asha",
        "fields": {"isActive": False}, "audit": audit,
    }})

    consumer.deactivated_repo.record.assert_called_once_with("evt-1", audit)
    assert identities.docs[LEGACY][0]["isActive"] is False
    stored = joiners.find_by_id(str(joiner["_id"]))
    assert stored["status"] == "inactive"
    assert stored["accountCreated"] is False


def test_sheets_sync_only_when_enabled(consumer):
    consumer.sheets_sync.return_value = {"message": "Synced 3 joiners"}
    event = {"_id": 2, "type": SHEETS_SYNC_REQUESTED, "payload": {"target": "joiners"}}

    consumer.apply(event)
    consumer.sheets_sync.assert_called_once_with("joiners")

    consumer.auto_sync = False
    consumer.apply(event)
    assert consumer.sheets_sync.call_count == 1


def test_unknown_event_type(consumer):
    with pytest.raises(UnknownEventError):
        consumer.apply({"_id": 3, "type": "user.exploded", "payload": {}})
