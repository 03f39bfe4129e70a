from unittest.mock import MagicMock

import pytest

from onboarding.exceptions.exceptions import NotFoundError, PersistenceError, ValidationError
from onboarding.repositories.users.identity_repo import CURRENT
from onboarding.services.identity.identity_service import IdentityService
from onboarding.services.upload.bulk_upload_service import BulkUploadService, UploadSelection

ATTENDANCE = {"Total Working Days": {"NOV'25": 20}, "No of days attended": {"NOV'25": 18}}


@pytest.fixture
def service(identities, report_repos):
    identities.add(CURRENT, author_id="A1", email="a1@example.com", name="Asha")
    identities.add(CURRENT, author_id="A3", email="a3@example.com", name="Kiran")
    return BulkUploadService(IdentityService(identities), report_repos, fetcher=MagicMock())


def upload_request(rows, data_sets="all"):
    return {"spread_sheet_name": "November", "data_sets_to_be_loaded": data_sets, "candidate_reports_data": rows}


def test_unresolved_row_is_reported_and_others_are_stored(service, report_repos):
    rows = [
        {"author_id": "A1", "attendanceReport": ATTENDANCE},
        {"author_id": "ZZ", "attendanceReport": ATTENDANCE},
        {"author_id": "A3", "attendanceReport": ATTENDANCE},
    ]

    result = service.bulk_upload(upload_request(rows), "boa-1")

    assert result["createdCount"] + result["updatedCount"] == 2
    assert result["errors"] == ["Row 2: User not found with author_id ZZ"]
    assert result["skippedCount"] == 1
    assert [r["author_id"] for r in result["processedReports"]] == ["A1", "A3"]
    assert {d["author_id"] for d in report_repos["attendance"].docs} == {"A1", "A3"}


def test_existing_reports_are_updated_not_duplicated(service, report_repos):
    report_repos["attendance"].add("A1", {"Total Working Days": {"OCT'25": 23}})
    rows = [{"author_id": "A1", "attendanceReport": ATTENDANCE}, {"author_id": "A3", "attendanceReport": ATTENDANCE}]

    result = service.bulk_upload(upload_request(rows), "boa-1")

    assert result["createdCount"] == 1
    assert result["updatedCount"] == 1
    assert report_repos["attendance"].replaced == ["A1"]
    assert report_repos["attendance"].by_author("A1")["reportData"] == ATTENDANCE


def test_learning_rows_are_stored_canonical(service, report_repos):
    rows = [{"author_id": "A1", "learningReport": {"DailyQuizReports": {"Topic1": {"Daily Quiz counts": 4}}}}]

    service.bulk_upload(upload_request(rows, "DailyQuizReports"), "boa-1")

    stored = report_repos["learning"].by_author("A1")["reportData"]
    assert stored == {"Daily Quiz counts": {"Topic1": 4}, "skills": ["Topic1"]}


def test_selection_skips_kinds_not_requested(service, report_repos):
    rows = [{"author_id": "A1", "attendanceReport": ATTENDANCE, "groomingReport": {"2025-11-01": "x"}}]

    result = service.bulk_upload(upload_request(rows, ["GroomingReports"]), "boa-1")

    assert result["createdCount"] == 1
    assert report_repos["attendance"].docs == []


def test_row_without_author_id_and_bad_payload(service):
    rows = [
        {"attendanceReport": ATTENDANCE},
        {"author_id": "A1", "learningReport": {"DailyQuizReports": {"Topic1": 3}}},
    ]

    result = service.bulk_upload(upload_request(rows), "boa-1")

    assert result["errors"][0] == "Row 1: author_id is required"
    assert result["errors"][1].startswith("Row 2: learning report skipped:")
    assert result["skippedCount"] == 2
    assert result["totalProcessed"] == 0


def test_grouped_row_without_author_id_names_its_sheet(service):
    rows = [
        {"author_id": "A1", "attendanceReport": ATTENDANCE},
        {"author_id": None, "sourceSheet": "AttendanceReports", "sourceRow": 2, "attendanceReport": ATTENDANCE},
    ]

    result = service.bulk_upload(upload_request(rows), "boa-1")

    assert result["errors"] == ["Row 2 (AttendanceReports row 2): author_id is required"]
    assert result["createdCount"] == 1


def test_selection_parsing():
    assert UploadSelection.parse("all").kinds == ("learning", "attendance", "grooming", "interactions")

    selection = UploadSelection.parse("DailyQuizReports, AttendanceReports")
    assert selection.kinds == ("learning", "attendance")
    assert selection.learning_sheets == ["DailyQuizReports"]

    with pytest.raises(ValidationError, match="Unknown data sets: Payroll"):
        UploadSelection.parse(["Payroll"])


def test_request_validation(service):
    with pytest.raises(ValidationError, match="spread_sheet_name and data_sets_to_be_loaded are required"):
        service.bulk_upload({"data_sets_to_be_loaded": "all"}, "boa-1")

    with pytest.raises(ValidationError, match="Either google_sheet_url or candidate_reports_data"):
        service.bulk_upload({"spread_sheet_name": "x", "data_sets_to_be_loaded": "all"}, "boa-1")

    with pytest.raises(ValidationError, match="No candidate reports data found"):
        service.bulk_upload(upload_request([]), "boa-1")


def test_sheet_url_is_fetched(service):
    service.fetcher.fetch.return_value = [{"author_id": "A1", "attendanceReport": ATTENDANCE}]
    data = {"spread_sheet_name": "x", "data_sets_to_be_loaded": "all", "google_sheet_url": "https://script.example/exec"}

    result = service.bulk_upload(data, "boa-1")

    service.fetcher.fetch.assert_called_once_with("https://script.example/exec", author_id=None)
    assert result["createdCount"] == 1


def test_validate_sheets_writes_nothing(service, report_repos):
    rows = [{"author_id": "A1", "attendanceReport": ATTENDANCE}, {"author_id": "ZZ", "attendanceReport": ATTENDANCE}]

    result = service.validate_sheets(upload_request(rows))

    assert result["totalRows"] == 2
    assert result["validRows"][0]["reports"] == ["attendance"]
    assert len(result["errors"]) == 1
    assert all(not repo.docs for repo in report_repos.values())


def test_upload_candidate_keeps_only_that_candidate(service, report_repos):
    rows = [{"author_id": "A1", "attendanceReport": ATTENDANCE}, {"author_id": "A3", "attendanceReport": ATTENDANCE}]

    result = service.upload_candidate("A3", {"candidate_reports_data": rows}, "boa-1")

    assert result["createdCount"] == 1
    assert [d["author_id"] for d in report_repos["attendance"].docs] == ["A3"]

    with pytest.raises(NotFoundError):
        service.upload_candidate("ZZ", {"candidate_reports_data": rows}, "boa-1")


def test_upsert_report_creates_then_updates(service, report_repos):
    first = service.upsert_report("A1", "attendance", ATTENDANCE, "admin-1")
    second = service.upsert_report("A1", "attendance", {"Total Working Days": {"DEC'25": 22}}, "admin-1")

    assert first["created"] is True
    assert second["created"] is False
    assert len(report_repos["attendance"].docs) == 1

    with pytest.raises(ValidationError):
        service.upsert_report("A1", "attendance", {}, "admin-1")
    with pytest.raises(ValidationError, match="Unknown report kind"):
        service.upsert_report("A1", "payroll", ATTENDANCE, "admin-1")


LEARNING = {"DailyQuizReports": {"Topic1": {"Daily Quiz counts": 4}}}


def test_lookup_failure_in_one_kind_keeps_the_rest(service, report_repos, monkeypatch):
    monkeypatch.setattr(
        report_repos["attendance"], "find_by_author_ids",
        MagicMock(side_effect=PersistenceError("attendance collection unreachable")),
    )
    rows = [
        {"author_id": "A1", "learningReport": LEARNING, "attendanceReport": ATTENDANCE},
        {"author_id": "ZZ", "attendanceReport": ATTENDANCE},
    ]

    result = service.bulk_upload(upload_request(rows), "boa-1")

    assert result["createdCount"] == 1
    assert "Row 2: User not found with author_id ZZ" in result["errors"]
    assert "attendance reports: attendance collection unreachable" in result["errors"]
    assert [d["author_id"] for d in report_repos["learning"].docs] == ["A1"]
    assert report_repos["attendance"].docs == []


def test_insert_failure_in_one_kind_keeps_the_rest(service, report_repos, monkeypatch):
    monkeypatch.setattr(
        report_repos["learning"], "create_bulk",
        MagicMock(side_effect=PersistenceError("Database operation failed")),
    )
    rows = [{"author_id": "A1", "learningReport": LEARNING, "attendanceReport": ATTENDANCE}]

    result = service.bulk_upload(upload_request(rows), "boa-1")

    assert result["createdCount"] == 1
    assert result["errors"] == ["learning reports: Database operation failed"]
    assert [d["author_id"] for d in report_repos["attendance"].docs] == ["A1"]


def test_one_failed_update_does_not_block_the_others(service, report_repos, monkeypatch):
    repo = report_repos["attendance"]
    repo.add("A1", {"Total Working Days": {"OCT'25": 23}})
    repo.add("A3", {"Total Working Days": {"OCT'25": 23}})
    replace = repo.replace_payload

    def flaky_replace(author_id, *args, **kwargs):
        if author_id == "A1":
            raise PersistenceError("write timed out")
        return replace(author_id, *args, **kwargs)

    monkeypatch.setattr(repo, "replace_payload", flaky_replace)
    rows = [{"author_id": "A1", "attendanceReport": ATTENDANCE}, {"author_id": "A3", "attendanceReport": ATTENDANCE}]

    result = service.bulk_upload(upload_request(rows), "boa-1")

    assert result["updatedCount"] == 1
    assert result["errors"] == ["attendance report for A1: write timed out"]
    assert repo.by_author("A3")["reportData"] == ATTENDANCE
