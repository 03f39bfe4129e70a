"""Performers Service - scored candidate listings for dashboards"""
from typing import Dict, List, Optional
from onboarding.config.constants import EXAM_TYPES, LEARNING_PHASES
from onboarding.exceptions.exceptions import ValidationError
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.services.identity.identity_service import is_active
from onboarding.services.scoring.scoring_engine import score_candidate
from onboarding.services.transform.learning_transformer import from_stored
from onboarding.utils.formatting.number_utils import to_number
from onboarding.utils.processing.parallel_processor import ParallelProcessor

logger = get_logger("services.performers")

SCORED_KINDS = ("learning", "attendance", "grooming")

class PerformersService:
    def __init__(self, report_repos: Optional[Dict] = None, identity_repo=None):
        self.report_repos = report_repos or RepositoryFactory.get_report_repos()
        self.identity_repo = identity_repo or RepositoryFactory.get_identity_repo()

    def _active_users(self, reports: Dict[str, List[Dict]]) -> Dict[str, Dict]:
        """{str(user id): user} for the active users the reports link to"""
        ids = {r.get("user") for docs in reports.values() for r in docs if r.get("user")}
        found = self.identity_repo.find_by_ids(ids)
        users = {}
        for source in self.identity_repo.sources():
            for user in found.get(source, []):
                users[str(user["_id"])] = user
        return {uid: user for uid, user in users.items() if is_active(user)}

    def all_candidates(self) -> List[Dict]:
        """Every candidate with at least one report and an active linked user, scored"""
        reports = ParallelProcessor.run_all({
            kind: (lambda k=kind: self.report_repos[k].find_all()) for kind in SCORED_KINDS
        })
        users = self._active_users(reports)

        candidates: Dict[str, Dict] = {}
        for kind in SCORED_KINDS:
            for report in reports.get(kind, []):
                user = users.get(str(report.get("user")))
                if user is None:
                    continue
                author_id = report.get("author_id")
                candidate = candidates.setdefault(author_id, {
                    "author_id": author_id,
                    "name": user.get("name") or "N/A",
                    "email": user.get("email") or "N/A",
                    "employeeId": user.get("employeeId") or "N/A",
                    "learningReport": {},
                    "attendanceReport": {},
                    "groomingReport": {},
                })
                data = report.get("reportData") or {}
                candidate[f"{kind}Report"] = from_stored(data) if kind == "learning" else data

        scored = []
        for candidate in candidates.values():
            candidate.update(score_candidate(
                candidate["learningReport"], candidate["attendanceReport"], candidate["groomingReport"]
            ))
            scored.append(candidate)
        logger.info(f"Scored {len(scored)} candidates")
        return scored

    def performers(self, category: Optional[str], limit=10) -> List[Dict]:
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError("limit must be an integer")

        candidates = sorted(self.all_candidates(), key=lambda c: c["overallScore"], reverse=True)
        if category == "top":
            return candidates[:limit]
        if category == "low":
            return list(reversed(candidates[-limit:])) if limit > 0 else []
        return candidates

    def exam_threshold(self, threshold, exam_type: str = "overall") -> List[Dict]:
        if threshold is None or str(threshold).strip() == "":
            raise ValidationError("Threshold value is required")
        threshold_value = to_number(threshold)
        if threshold_value is None:
            raise ValidationError("Invalid threshold value")
        exam_type = exam_type or "overall"
        if exam_type not in EXAM_TYPES:
            raise ValidationError(f"examType must be one of {', '.join(EXAM_TYPES)}")

        filtered = [
            c for c in self.all_candidates()
            if c["examAverages"].get(exam_type, 0) >= threshold_value
        ]
        filtered.sort(key=lambda c: c["examAverages"].get(exam_type, 0), reverse=True)
        return filtered

    def learning_phase(self, phase: Optional[str]) -> List[Dict]:
        if phase not in LEARNING_PHASES:
            raise ValidationError("Valid phase is required (fast, average, or slow)")
        filtered = [c for c in self.all_candidates() if c["learningPhase"] == phase]
        filtered.sort(key=lambda c: c["overallScore"], reverse=True)
        return filtered
