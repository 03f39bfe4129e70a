"""Joiner APIs - Presentation Layer (SoC)"""
from flask_restful import Resource
from onboarding.exceptions.error_handler import handle_service_error
from onboarding.jwt.auth_middleware import get_current_actor, joiner_required, joiner_update_required
from onboarding.services.joiners.joiner_service import JoinerService
from onboarding.utils.formatting.json_utils import sanitize_mongo_document
from onboarding.utils.pagination.pagination_utils import get_pagination_params
from onboarding.utils.validation.input_validator import get_json_data, get_optional_query_params

class Joiners(Resource):
    def __init__(self):
        self.service = JoinerService()

    @joiner_required
    def get(self):
        try:
            params = get_optional_query_params(
                page=None, limit=None, department=None, status=None, role=None, search=None,
                startDate=None, endDate=None, sortBy="createdAt", sortOrder="desc",
            )
            page, limit = get_pagination_params(params["page"], params["limit"])
            return sanitize_mongo_document(self.service.list_joiners(params, page, limit)), 200
        except Exception as e:
            return handle_service_error(e)

    @joiner_required
    def post(self):
        try:
            return sanitize_mongo_document(self.service.create(get_json_data(), get_current_actor())), 201
        except Exception as e:
            return handle_service_error(e)

class JoinerStats(Resource):
    def __init__(self):
        self.service = JoinerService()

    @joiner_required
    def get(self):
        try:
            params = get_optional_query_params(startDate=None, endDate=None)
            return sanitize_mongo_document(self.service.stats(params["startDate"], params["endDate"])), 200
        except Exception as e:
            return handle_service_error(e)

class JoinerDetail(Resource):
    def __init__(self):
        self.service = JoinerService()

    @joiner_required
    def get(self, joiner_id):
        try:
            return sanitize_mongo_document(self.service.get(joiner_id)), 200
        except Exception as e:
            return handle_service_error(e)

    @joiner_update_required
    def put(self, joiner_id):
        try:
            return sanitize_mongo_document(self.service.update(joiner_id, get_json_data())), 200
        except Exception as e:
            return handle_service_error(e)

    @joiner_required
    def delete(self, joiner_id):
        try:
            return sanitize_mongo_document(self.service.delete(joiner_id)), 200
        except Exception as e:
            return handle_service_error(e)

class JoinerCreateAccount(Resource):
    def __init__(self):
        self.service = JoinerService()

    @joiner_required
    def post(self, joiner_id):
        try:
            return sanitize_mongo_document(self.service.create_account(joiner_id)), 200
        except Exception as e:
            return handle_service_error(e)
