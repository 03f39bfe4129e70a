import bcrypt
import pytest

from onboarding.exceptions.exceptions import ConflictError, NotFoundError, ValidationError
from onboarding.repositories.users.identity_repo import CURRENT
from onboarding.services.events.mirror_consumer import SHEETS_SYNC_REQUESTED
from onboarding.services.joiners.joiner_service import JoinerService, generate_temp_password

BOA = {"id": "boa-1", "role": "boa"}


@pytest.fixture
def service(joiners, identities, publisher):
    return JoinerService(joiners, identities, publisher)


def test_create_normalises_email_and_rejects_duplicates(service, joiners, publisher):
    result = service.create({"name": "Asha", "email": " Asha@Example.com ", "department": "Java"}, BOA)

    assert result["joiner"]["email"] == "asha@example.com"
    assert result["joiner"]["status"] == "pending"
    assert result["joiner"]["accountCreated"] is False
    assert publisher.events == [(SHEETS_SYNC_REQUESTED, {"target": "joiners"})]

    with pytest.raises(ConflictError):
        service.create({"name": "Asha again", "email": "ASHA@example.com"}, BOA)
    with pytest.raises(ValidationError, match="Missing required fields: email"):
        service.create({"name": "No Email"}, BOA)


def test_list_builds_filters_and_sort(service, joiners):
    joiners.add(name="Asha", email="asha@example.com")

    result = service.list_joiners(
        {"department": "Java", "search": "as+", "sortBy": "name", "sortOrder": "asc"}, page=2, limit=5
    )

    query, sort, page, limit = joiners.last_list
    assert query["department"] == "Java"
    assert query["$or"][0] == {"name": {"$regex": r"as\+", "$options": "i"}}
    assert sort == [("name", 1)]
    assert (page, limit) == (2, 5)
    assert result["total"] == 1

    with pytest.raises(ValidationError):
        service.list_joiners({"sortBy": "password"})


def test_get_update_delete(service, joiners):
    joiner = joiners.add(name="Asha", email="asha@example.com", author_id="A1")
    joiners.add(name="Kiran", email="kiran@example.com")

    assert service.get("A1")["joiner"]["name"] == "Asha"

    updated = service.update(str(joiner["_id"]), {"phone": "999", "unknown": "x"})
    assert updated["joiner"]["phone"] == "999"
    assert "unknown" not in updated["joiner"]

    with pytest.raises(ConflictError):
        service.update(str(joiner["_id"]), {"email": "KIRAN@example.com"})

    service.delete(str(joiner["_id"]))
    with pytest.raises(NotFoundError):
        service.get(str(joiner["_id"]))


def test_create_account_provisions_current_user(service, joiners, identities):
    joiner = joiners.add(name="Asha", email="asha@example.com", author_id="A1", role="trainee")

    result = service.create_account(str(joiner["_id"]))

    password = result["user"]["password"]
    stored = identities.docs[CURRENT][0]
    assert stored["author_id"] == "A1"
    assert stored["isActive"] is True
    assert bcrypt.checkpw(password.encode("utf-8"), stored["password"].encode("utf-8"))
    assert joiners.find_by_id(str(joiner["_id"]))["accountCreated"] is True

    with pytest.raises(ValidationError, match="already created"):
        service.create_account(str(joiner["_id"]))


def test_create_account_rejects_existing_user_email(service, joiners, identities):
    identities.add(CURRENT, email="asha@example.com")
    joiner = joiners.add(name="Asha", email="asha@example.com")

    with pytest.raises(ConflictError):
        service.create_account(str(joiner["_id"]))


def test_stats_shape_without_joiners(service):
    stats = service.stats()

    assert stats["overview"]["total"] == 0
    assert stats["departmentStats"] == []
    assert stats["dailyJoiners"] == []


def test_temp_password():
    password = generate_temp_password()

    assert len(password) == 8
    assert password.isalnum()
