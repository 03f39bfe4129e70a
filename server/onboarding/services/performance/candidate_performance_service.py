"""Candidate Performance Service - aggregated view for one author_id, derived on every read"""
from typing import Dict, Optional
from onboarding.config.constants import REPORT_KINDS
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.services.identity.identity_service import IdentityService
from onboarding.services.scoring.scoring_engine import score_candidate
from onboarding.services.transform.learning_transformer import from_stored
from onboarding.utils.processing.parallel_processor import ParallelProcessor

logger = get_logger("services.candidate_performance")

def _first(user: Dict, *fields):
    for field in fields:
        if user.get(field):
            return user[field]
    return None

def personal_details(user: Dict, joiner: Optional[Dict]) -> Dict:
    """Personal details block; the joiner's employeeId overrides the user's"""
    employee_id = None
    if joiner and joiner.get("employeeId"):
        employee_id = str(joiner["employeeId"]).strip()
    elif user.get("employeeId"):
        employee_id = str(user["employeeId"]).strip()

    phone = _first(user, "phone", "phone_number")
    joined = _first(user, "joiningDate", "date_of_joining", "createdAt")
    passout = _first(user, "yearOfPassout", "yearOfPassing")
    return {
        "uid": user.get("author_id"),
        "name": user.get("name"),
        "email": user.get("email"),
        "phone": phone,
        "phoneNumber": phone,
        "employeeId": employee_id,
        "dateOfJoining": joined,
        "joiningDate": joined,
        "state": user.get("state"),
        "qualification": user.get("qualification"),
        "highestQualification": user.get("qualification"),
        "specialization": user.get("specialization"),
        "haveMTechPC": user.get("haveMTechPC"),
        "haveMTechOD": user.get("haveMTechOD"),
        "yearOfPassout": passout,
        "yearOfPassing": passout,
        "department": user.get("department"),
        "role": user.get("role"),
    }

def report_view(record: Optional[Dict], kind: str) -> Optional[Dict]:
    if not record:
        return None
    data = record.get("reportData")
    if kind == "learning":
        data = from_stored(data)
    return {
        "reportData": data,
        "uploadedAt": record.get("uploadedAt"),
        "uploadedBy": record.get("uploadedBy"),
    }

class CandidatePerformanceService:
    def __init__(self, identity_service=None, report_repos: Optional[Dict] = None, joiner_repo=None):
        self.identity_service = identity_service or IdentityService()
        self.report_repos = report_repos or RepositoryFactory.get_report_repos()
        self.joiner_repo = joiner_repo or RepositoryFactory.get_joiner_repo()

    def candidate_performance(self, author_id: str) -> Dict:
        user = self.identity_service.resolve(author_id)
        author_id = author_id.strip()

        tasks = {kind: (lambda k=kind: self.report_repos[k].latest_for_author(author_id)) for kind in REPORT_KINDS}
        tasks["joiner"] = lambda: self.joiner_repo.find_for_candidate(author_id, user.get("email"))
        found = ParallelProcessor.run_all(tasks)

        views = {kind: report_view(found.get(kind), kind) for kind in REPORT_KINDS}
        scores = score_candidate(
            (views["learning"] or {}).get("reportData"),
            (views["attendance"] or {}).get("reportData"),
            (views["grooming"] or {}).get("reportData"),
        )
        return {
            "success": True,
            "data": {
                "personalDetails": personal_details(user, found.get("joiner")),
                "learningReport": views["learning"],
                "attendanceReport": views["attendance"],
                "groomingReport": views["grooming"],
                "interactionsReport": views["interactions"],
                **scores,
            },
        }
