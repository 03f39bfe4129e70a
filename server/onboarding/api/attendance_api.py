"""Attendance & Grooming APIs - Presentation Layer (SoC)"""
from flask_restful import Resource
from onboarding.exceptions.error_handler import handle_service_error
from onboarding.jwt.auth_middleware import clock_required, get_current_actor, trainer_required
from onboarding.services.attendance.attendance_service import AttendanceService
from onboarding.services.grooming.grooming_service import GroomingService
from onboarding.utils.formatting.json_utils import sanitize_mongo_document
from onboarding.utils.pagination.pagination_utils import get_pagination_params
from onboarding.utils.validation.input_validator import (
    get_client_ip, get_json_data, get_optional_query_params, get_single_query_param,
)

class ClockIn(Resource):
    def __init__(self):
        self.service = AttendanceService()

    @clock_required
    def post(self):
        try:
            data = get_json_data()
            result = self.service.clock_in(get_current_actor(), data.get("location"), get_client_ip())
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class ClockOut(Resource):
    def __init__(self):
        self.service = AttendanceService()

    @clock_required
    def post(self):
        try:
            data = get_json_data()
            result = self.service.clock_out(
                get_current_actor(), data.get("location"), get_client_ip(), data.get("notes", "")
            )
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class TodayAttendance(Resource):
    def __init__(self):
        self.service = AttendanceService()

    @clock_required
    def get(self):
        try:
            return sanitize_mongo_document(self.service.today(get_current_actor())), 200
        except Exception as e:
            return handle_service_error(e)

class AttendanceHistory(Resource):
    def __init__(self):
        self.service = AttendanceService()

    @clock_required
    def get(self):
        try:
            params = get_optional_query_params(startDate=None, endDate=None, page=None, limit=None)
            page, limit = get_pagination_params(params["page"], params["limit"], default_limit=30)
            result = self.service.history(get_current_actor(), params["startDate"], params["endDate"], page, limit)
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class TraineeAttendance(Resource):
    def __init__(self):
        self.service = AttendanceService()

    @trainer_required
    def get(self):
        try:
            params = get_optional_query_params(traineeId=None, date=None)
            result = self.service.trainee_attendance(get_current_actor(), params["traineeId"], params["date"])
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class ValidateAttendance(Resource):
    def __init__(self):
        self.service = AttendanceService()

    @trainer_required
    def put(self, attendance_id):
        try:
            data = get_json_data()
            result = self.service.validate(get_current_actor(), attendance_id, data.get("isValid"), data.get("notes"))
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class MarkAttendance(Resource):
    def __init__(self):
        self.service = AttendanceService()

    @trainer_required
    def post(self):
        try:
            result = self.service.mark(get_current_actor(), get_json_data(), get_client_ip())
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class MarkGrooming(Resource):
    def __init__(self):
        self.service = GroomingService()

    @trainer_required
    def post(self):
        try:
            return sanitize_mongo_document(self.service.mark(get_current_actor(), get_json_data())), 200
        except Exception as e:
            return handle_service_error(e)

class TraineeGrooming(Resource):
    def __init__(self):
        self.service = GroomingService()

    @trainer_required
    def get(self):
        try:
            date = get_single_query_param("date", required=False)
            return sanitize_mongo_document(self.service.trainee_grooming(get_current_actor(), date)), 200
        except Exception as e:
            return handle_service_error(e)
