"""Performers Metrics APIs - Presentation Layer (SoC)"""
from flask_restful import Resource
from onboarding.exceptions.error_handler import handle_service_error
from onboarding.jwt.auth_middleware import dashboard_required
from onboarding.services.performance.performers_service import PerformersService
from onboarding.utils.formatting.json_utils import sanitize_mongo_document
from onboarding.utils.validation.input_validator import get_optional_query_params, get_single_query_param

class AllCandidatesPerformance(Resource):
    def __init__(self):
        self.service = PerformersService()

    @dashboard_required
    def get(self):
        try:
            return {"success": True, "data": sanitize_mongo_document(self.service.all_candidates())}, 200
        except Exception as e:
            return handle_service_error(e)

class PerformersByCategory(Resource):
    def __init__(self):
        self.service = PerformersService()

    @dashboard_required
    def get(self):
        try:
            params = get_optional_query_params(category=None, limit=10)
            result = self.service.performers(params["category"], params["limit"])
            return {"success": True, "data": sanitize_mongo_document(result)}, 200
        except Exception as e:
            return handle_service_error(e)

class CandidatesByExamThreshold(Resource):
    def __init__(self):
        self.service = PerformersService()

    @dashboard_required
    def get(self):
        try:
            threshold = get_single_query_param("threshold")
            exam_type = get_single_query_param("examType", required=False) or "overall"
            result = self.service.exam_threshold(threshold, exam_type)
            return {"success": True, "data": sanitize_mongo_document(result)}, 200
        except Exception as e:
            return handle_service_error(e)

class CandidatesByLearningPhase(Resource):
    def __init__(self):
        self.service = PerformersService()

    @dashboard_required
    def get(self):
        try:
            result = self.service.learning_phase(get_single_query_param("phase", required=False))
            return {"success": True, "data": sanitize_mongo_document(result)}, 200
        except Exception as e:
            return handle_service_error(e)
