"""Repository Factory - DRY Implementation"""
from typing import Dict
from onboarding.repositories.attendance.attendance_repo import AttendanceRepo
from onboarding.repositories.audit.deactivated_user_repo import DeactivatedUserRepo
from onboarding.repositories.events.event_repo import DomainEventRepo
from onboarding.repositories.joiners.joiner_repo import JoinerRepo
from onboarding.repositories.reports.report_repo import ReportRepo
from onboarding.repositories.users.identity_repo import CandidateIdentityRepo

class RepositoryFactory:
    """Centralized repository creation (DRY principle)"""

    _report_repos: Dict[str, ReportRepo] = {}

    @classmethod
    def get_report_repo(cls, kind: str) -> ReportRepo:
        """Get or create report repository for one report kind"""
        if kind not in cls._report_repos:
            cls._report_repos[kind] = ReportRepo(kind)
        return cls._report_repos[kind]

    @classmethod
    def get_report_repos(cls) -> Dict[str, ReportRepo]:
        from onboarding.config.constants import REPORT_KINDS
        return {kind: cls.get_report_repo(kind) for kind in REPORT_KINDS}

    @classmethod
    def get_identity_repo(cls) -> CandidateIdentityRepo:
        if not hasattr(cls, '_identity_repo'):
            cls._identity_repo = CandidateIdentityRepo()
        return cls._identity_repo

    @classmethod
    def get_joiner_repo(cls) -> JoinerRepo:
        if not hasattr(cls, '_joiner_repo'):
            cls._joiner_repo = JoinerRepo()
        return cls._joiner_repo

    @classmethod
    def get_attendance_repo(cls) -> AttendanceRepo:
        if not hasattr(cls, '_attendance_repo'):
            cls._attendance_repo = AttendanceRepo()
        return cls._attendance_repo

    @classmethod
    def get_event_repo(cls) -> DomainEventRepo:
        if not hasattr(cls, '_event_repo'):
            cls._event_repo = DomainEventRepo()
        return cls._event_repo

    @classmethod
    def get_deactivated_user_repo(cls) -> DeactivatedUserRepo:
        if not hasattr(cls, '_deactivated_user_repo'):
            cls._deactivated_user_repo = DeactivatedUserRepo()
        return cls._deactivated_user_repo
