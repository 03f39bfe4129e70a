"""Attendance Service - daily clock records and the monthly attendance report"""
from typing import Dict, Optional
from onboarding.config.constants import (
    ABSENT_DEFAULT_NOTE, FULL_DAY_HOURS, HALF_DAY_HOURS, OVERTIME_HOURS,
)
from onboarding.exceptions.exceptions import AccessDeniedError, NotFoundError, ValidationError
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.services.identity.identity_merger import author_key
from onboarding.services.identity.identity_service import IdentityService
from onboarding.services.transform.attendance_aggregator import aggregate_month
from onboarding.utils.pagination.pagination_utils import pagination_meta
from onboarding.utils.time.timeutils import month_bounds, parse_date, today_start, utc_now

logger = get_logger("services.attendance")

MARK_STATUSES = ("present", "absent")

def day_status(total_hours: float) -> str:
    if total_hours < HALF_DAY_HOURS:
        return "half_day"
    if total_hours > OVERTIME_HOURS:
        return "overtime"
    return "present"

class AttendanceService:
    def __init__(self, attendance_repo=None, identity_service=None, report_repo=None):
        self.attendance_repo = attendance_repo or RepositoryFactory.get_attendance_repo()
        self.identity_service = identity_service or IdentityService()
        self.report_repo = report_repo or RepositoryFactory.get_report_repo("attendance")

    # ---- self service ----

    def clock_in(self, actor: Dict, location=None, ip_address=None) -> Dict:
        today = today_start()
        record = self.attendance_repo.find_for_day(actor["id"], today)
        if record and (record.get("clockIn") or {}).get("time"):
            raise ValidationError("Already clocked in today", details={"clockInTime": record["clockIn"]["time"]})

        now = utc_now()
        clock = {"time": now, "location": location, "ipAddress": ip_address}
        if record:
            self.attendance_repo.update_fields(record["_id"], {"clockIn": clock})
        else:
            self.attendance_repo.create(actor["id"], today, {"clockIn": clock, "clockOut": {}})

        source, _ = self.identity_service.get_by_id(actor["id"])
        self.identity_service.identity_repo.update_by_id(source, actor["id"], {"lastClockIn": now})
        return {"success": True, "message": f"Clocked in at {now.strftime('%H:%M:%S')}", "clockInTime": now}

    def clock_out(self, actor: Dict, location=None, ip_address=None, notes: str = "") -> Dict:
        today = today_start()
        record = self.attendance_repo.find_for_day(actor["id"], today)
        clock_in = (record or {}).get("clockIn") or {}
        if not clock_in.get("time"):
            raise ValidationError("Must clock in first")
        if ((record.get("clockOut") or {}).get("time")):
            raise ValidationError("Already clocked out today", details={"clockOutTime": record["clockOut"]["time"]})

        now = utc_now()
        total_hours = (now - clock_in["time"]).total_seconds() / 3600
        fields = {
            "clockOut": {"time": now, "location": location, "ipAddress": ip_address},
            "totalHours": total_hours,
            "isFullDay": total_hours >= FULL_DAY_HOURS,
            "status": day_status(total_hours),
            "notes": notes or "",
        }
        self.attendance_repo.update_fields(record["_id"], fields)

        source, _ = self.identity_service.get_by_id(actor["id"])
        self.identity_service.identity_repo.update_by_id(source, actor["id"], {"lastClockOut": now})
        return {
            "success": True,
            "message": f"Clocked out at {now.strftime('%H:%M:%S')}",
            "clockOutTime": now,
            "totalHours": f"{total_hours:.2f}",
            "isFullDay": fields["isFullDay"],
            "status": fields["status"],
        }

    def today(self, actor: Dict) -> Dict:
        record = self.attendance_repo.find_for_day(actor["id"], today_start())
        if not record:
            return {
                "clockedIn": False,
                "clockedOut": False,
                "clockInTime": None,
                "clockOutTime": None,
                "totalHours": 0,
                "status": "absent",
            }
        clock_in = record.get("clockIn") or {}
        clock_out = record.get("clockOut") or {}
        return {
            "clockedIn": bool(clock_in.get("time")),
            "clockedOut": bool(clock_out.get("time")),
            "clockInTime": clock_in.get("time"),
            "clockOutTime": clock_out.get("time"),
            "totalHours": record.get("totalHours") or 0,
            "status": record.get("status"),
            "isFullDay": record.get("isFullDay"),
        }

    def history(self, actor: Dict, start_date=None, end_date=None, page: int = 1, limit: int = 30) -> Dict:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
        records, total = self.attendance_repo.history(actor["id"], start, end, page, limit)
        return {"attendances": records, **pagination_meta(total, page, limit)}

    # ---- trainer operations ----

    def _trainer(self, actor: Dict) -> Dict:
        try:
            return self.identity_service.load_with_cleanup(actor["id"])
        except NotFoundError:
            raise NotFoundError("Trainer not found")

    def trainee_attendance(self, actor: Dict, trainee_id: Optional[str] = None, date=None):
        trainer = self._trainer(actor)
        user_ids = [trainee_id] if trainee_id else list(trainer.get("assignedTrainees") or [])
        if not user_ids:
            return []
        day = parse_date(date) if date else None
        return self.attendance_repo.for_users(user_ids, day)

    def validate(self, actor: Dict, attendance_id: str, is_valid, notes: Optional[str] = None) -> Dict:
        record = self.attendance_repo.find_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")

        trainer = self._trainer(actor)
        if not self.identity_service.trainer_has_access(trainer, record.get("user")):
            raise AccessDeniedError("Access denied")

        fields = {"isValidated": bool(is_valid), "validatedBy": trainer["_id"], "validatedAt": utc_now()}
        if notes:
            fields["notes"] = notes
        self.attendance_repo.update_fields(record["_id"], fields)
        record.update(fields)
        return {
            "message": f"Attendance {'validated' if is_valid else 'rejected'} successfully",
            "attendance": record,
        }

    def mark(self, actor: Dict, data: Dict, ip_address=None) -> Dict:
        trainee_id = data.get("traineeId")
        status = data.get("status")
        if not trainee_id or not data.get("date") or not status:
            raise ValidationError("Trainee ID, date, and status are required")
        if status not in MARK_STATUSES:
            raise ValidationError("status must be present or absent")

        trainer = self._trainer(actor)
        try:
            _, trainee = self.identity_service.get_by_id(trainee_id)
        except NotFoundError:
            raise NotFoundError("Trainee not found")
        if not self.identity_service.trainer_has_access(trainer, trainee_id):
            raise AccessDeniedError("Access denied. Trainee not assigned to you.")

        day = parse_date(data["date"])
        record = self.attendance_repo.find_for_day(trainee_id, day)
        if status == "present":
            fields = {
                "clockIn": {"time": utc_now(), "location": data.get("location"), "ipAddress": ip_address},
                "status": "present",
            }
        else:
            fields = {"status": "absent", "notes": data.get("notes") or ABSENT_DEFAULT_NOTE}

        if record:
            self.attendance_repo.update_fields(record["_id"], fields)
            record.update(fields)
        else:
            record = self.attendance_repo.create(trainee_id, day, fields)

        try:
            self._refresh_month_report(trainee, day, trainer["_id"])
        except Exception as e:
            logger.warning(f"Attendance report refresh failed for trainee {trainee_id}: {str(e)}")

        return {"success": True, "message": f"Attendance marked as {status}", "attendance": record}

    def _refresh_month_report(self, trainee: Dict, day, trainer_id) -> None:
        """Recompute the marked month in the trainee's attendance report"""
        author_id = author_key(trainee)
        start, end = month_bounds(day)
        attended = self.attendance_repo.count_present(trainee["_id"], start, end)

        report = self.report_repo.find_by_author_id(author_id)
        payload = aggregate_month((report or {}).get("reportData"), day, attended)
        if report:
            self.report_repo.update_record(report["_id"], payload, author_id)
        else:
            self.report_repo.create_bulk([self.report_repo.build_document(author_id, trainee["_id"], payload, trainer_id)])
