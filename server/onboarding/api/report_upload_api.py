"""Candidate Report APIs - Presentation Layer (SoC)"""
from flask_restful import Resource
from onboarding.exceptions.error_handler import handle_service_error
from onboarding.jwt.auth_middleware import admin_boa_required, admin_required, boa_required, get_current_actor
from onboarding.services.performance.candidate_performance_service import CandidatePerformanceService
from onboarding.services.upload.bulk_upload_service import BulkUploadService
from onboarding.utils.formatting.json_utils import sanitize_mongo_document
from onboarding.utils.validation.input_validator import get_json_data, require_fields

class CandidateReportBulkUpload(Resource):
    def __init__(self):
        self.service = BulkUploadService()

    @boa_required
    def post(self):
        try:
            result = self.service.bulk_upload(get_json_data(), get_current_actor()["id"])
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class CandidateReportValidateSheets(Resource):
    def __init__(self):
        self.service = BulkUploadService()

    @boa_required
    def post(self):
        try:
            return sanitize_mongo_document(self.service.validate_sheets(get_json_data())), 200
        except Exception as e:
            return handle_service_error(e)

class CandidateReportUpload(Resource):
    def __init__(self):
        self.service = BulkUploadService()

    @boa_required
    def post(self, author_id):
        try:
            result = self.service.upload_candidate(author_id, get_json_data(), get_current_actor()["id"])
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class CandidateReportValidateAuthor(Resource):
    def __init__(self):
        self.service = BulkUploadService()

    @boa_required
    def post(self):
        try:
            data = get_json_data()
            require_fields(data, "author_id", message="Author ID is required")
            return sanitize_mongo_document(self.service.validate_author_id(str(data["author_id"]))), 200
        except Exception as e:
            return handle_service_error(e)

class CandidateReportUpsert(Resource):
    def __init__(self):
        self.service = BulkUploadService()

    @admin_boa_required
    def put(self, author_id, kind):
        try:
            data = get_json_data()
            require_fields(data, "reportData")
            result = self.service.upsert_report(author_id, kind, data["reportData"], get_current_actor()["id"])
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class CandidatePerformance(Resource):
    def __init__(self):
        self.service = CandidatePerformanceService()

    @admin_required
    def get(self, author_id):
        try:
            return sanitize_mongo_document(self.service.candidate_performance(author_id)), 200
        except Exception as e:
            return handle_service_error(e)
