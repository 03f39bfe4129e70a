"""Grooming Service - trainer-marked daily grooming observations"""
from typing import Dict, Optional
from onboarding.exceptions.exceptions import AccessDeniedError, NotFoundError, ValidationError
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.services.identity.identity_merger import author_key
from onboarding.services.identity.identity_service import IdentityService
from onboarding.services.transform.grooming_aggregator import apply_mark
from onboarding.utils.time.timeutils import date_key, parse_date, today_start

logger = get_logger("services.grooming")

class GroomingService:
    def __init__(self, identity_service=None, report_repo=None):
        self.identity_service = identity_service or IdentityService()
        self.report_repo = report_repo or RepositoryFactory.get_report_repo("grooming")

    def _trainer(self, actor: Dict) -> Dict:
        try:
            return self.identity_service.load_with_cleanup(actor["id"])
        except NotFoundError:
            raise NotFoundError("Trainer not found")

    def mark(self, actor: Dict, data: Dict) -> Dict:
        trainee_id = data.get("traineeId")
        grooming = data.get("grooming")
        if not trainee_id or not data.get("date") or grooming in (None, "", {}):
            raise ValidationError("Trainee ID, date, and grooming data are required")

        trainer = self._trainer(actor)
        try:
            _, trainee = self.identity_service.get_by_id(trainee_id)
        except NotFoundError:
            raise NotFoundError("Trainee not found")
        if not self.identity_service.trainer_has_access(trainer, trainee_id):
            raise AccessDeniedError("Access denied. Trainee not assigned to you.")

        day = parse_date(data["date"])
        author_id = author_key(trainee)
        report = self.report_repo.find_for_candidate(trainee["_id"], author_id)
        payload = apply_mark((report or {}).get("reportData"), day, grooming)

        if report:
            self.report_repo.update_record(report["_id"], payload, author_id, user_id=trainee["_id"])
        else:
            document = self.report_repo.build_document(author_id, trainee["_id"], payload, trainer["_id"])
            self.report_repo.create_bulk([document])
        logger.info(f"Grooming marked for {author_id} on {date_key(day)}")

        return {
            "success": True,
            "message": "Grooming marked successfully",
            "grooming": payload[date_key(day)],
        }

    def trainee_grooming(self, actor: Dict, date: Optional[str] = None) -> Dict:
        """{traineeId: that day's observation} for the trainer's trainees"""
        trainer = self._trainer(actor)
        trainee_ids = [str(t) for t in trainer.get("assignedTrainees") or []]
        if not trainee_ids:
            return {}

        found = self.identity_service.identity_repo.find_by_ids(trainee_ids)
        by_author = {author_key(t): str(t["_id"]) for docs in found.values() for t in docs}
        key = date_key(parse_date(date) if date else today_start())

        grooming = {}
        for report in self.report_repo.find_for_candidates(trainee_ids, by_author.keys()):
            user_id = str(report["user"]) if report.get("user") else by_author.get(report.get("author_id"))
            entry = (report.get("reportData") or {}).get(key)
            if user_id and entry:
                grooming[user_id] = entry
        return grooming
