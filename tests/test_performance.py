import pytest

from onboarding.exceptions.exceptions import NotFoundError, ValidationError
from onboarding.repositories.users.identity_repo import CURRENT, LEGACY
from onboarding.services.identity.identity_service import IdentityService
from onboarding.services.performance.candidate_performance_service import (
    CandidatePerformanceService, personal_details,
)
from onboarding.services.performance.performers_service import PerformersService


@pytest.fixture
def candidates(identities, report_repos):
    """Three trainees with learning reports; the third is deactivated"""
    users = []
    for author_id, score, active in (("A1", 90, True), ("A2", 60, True), ("A3", 99, False)):
        user = identities.add(CURRENT, author_id=author_id, email=f"{author_id.lower()}@example.com",
                              name=author_id, isActive=active)
        report_repos["learning"].add(
            author_id, {"DailyQuizReports": {"Python": {"Daily Quiz scores": score}}}, user=user["_id"]
        )
        users.append(user)
    return users


def test_all_candidates_skips_inactive_users(identities, report_repos, candidates):
    result = PerformersService(report_repos, identities).all_candidates()

    assert sorted(c["author_id"] for c in result) == ["A1", "A2"]
    a1 = next(c for c in result if c["author_id"] == "A1")
    assert a1["learningReport"]["Daily Quiz scores"] == {"Python": 90}
    assert a1["overallScore"] == 90


def test_top_and_low_performers(identities, report_repos, candidates):
    service = PerformersService(report_repos, identities)

    assert [c["author_id"] for c in service.performers("top", 1)] == ["A1"]
    assert [c["author_id"] for c in service.performers("low", "1")] == ["A2"]
    assert len(service.performers(None)) == 2
    with pytest.raises(ValidationError):
        service.performers("top", "many")


def test_exam_threshold_and_learning_phase_validation(identities, report_repos, candidates):
    service = PerformersService(report_repos, identities)

    assert [c["author_id"] for c in service.exam_threshold("75", "dailyQuiz")] == ["A1"]
    with pytest.raises(ValidationError, match="Threshold value is required"):
        service.exam_threshold(None)
    with pytest.raises(ValidationError, match="Invalid threshold value"):
        service.exam_threshold("high")
    with pytest.raises(ValidationError, match="Valid phase is required"):
        service.learning_phase("medium")
    assert service.learning_phase("fast") == []


def test_candidate_performance_view(identities, report_repos, joiners, candidates):
    identities.add(LEGACY, author_id="A1", email="a1@example.com", state="Goa", employeeId="OLD-1")
    joiners.add(author_id="A1", employeeId=" EMP-1 ")
    service = CandidatePerformanceService(IdentityService(identities), report_repos, joiners)

    result = service.candidate_performance("A1")["data"]

    assert result["personalDetails"]["employeeId"] == "EMP-1"
    assert result["personalDetails"]["state"] == "Goa"
    assert result["learningReport"]["reportData"]["Daily Quiz scores"] == {"Python": 90}
    assert result["attendanceReport"] is None
    assert result["examAverages"]["dailyQuiz"] == 90

    with pytest.raises(NotFoundError):
        service.candidate_performance("Z9")


def test_personal_details_fallbacks():
    details = personal_details({"phone_number": "123", "yearOfPassing": 2024, "employeeId": 77}, None)

    assert details["phone"] == details["phoneNumber"] == "123"
    assert details["yearOfPassout"] == 2024
    assert details["employeeId"] == "77"
