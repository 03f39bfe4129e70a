"""User Admin APIs - Presentation Layer (SoC)"""
from flask_restful import Resource
from onboarding.exceptions.error_handler import handle_service_error
from onboarding.jwt.auth_middleware import admin_required, get_current_actor, staff_required
from onboarding.services.admin.user_admin_service import UserAdminService
from onboarding.utils.formatting.json_utils import sanitize_mongo_document
from onboarding.utils.pagination.pagination_utils import get_pagination_params
from onboarding.utils.validation.input_validator import get_json_data, get_optional_query_params, require_fields

class UserList(Resource):
    def __init__(self):
        self.service = UserAdminService()

    @staff_required
    def get(self):
        try:
            params = get_optional_query_params(role=None, status="active", page=None, limit=None)
            page, limit = get_pagination_params(params["page"], params["limit"], default_limit=50)
            result = self.service.list_users(params["role"], params["status"], page, limit)
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class UserStats(Resource):
    def __init__(self):
        self.service = UserAdminService()

    @staff_required
    def get(self):
        try:
            return sanitize_mongo_document(self.service.system_stats()), 200
        except Exception as e:
            return handle_service_error(e)

class UserDetail(Resource):
    def __init__(self):
        self.service = UserAdminService()

    @admin_required
    def get(self, user_id):
        try:
            return sanitize_mongo_document(self.service.get_user(user_id)), 200
        except Exception as e:
            return handle_service_error(e)

class UserByAuthorId(Resource):
    def __init__(self):
        self.service = UserAdminService()

    @admin_required
    def put(self, author_id):
        try:
            result = self.service.update_by_author_id(author_id, get_json_data(), get_current_actor())
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)

class DeactivateUser(Resource):
    def __init__(self):
        self.service = UserAdminService()

    @admin_required
    def post(self, user_id):
        try:
            reason = get_json_data().get("reason")
            return sanitize_mongo_document(self.service.deactivate(user_id, get_current_actor(), reason)), 200
        except Exception as e:
            return handle_service_error(e)

class ReactivateUser(Resource):
    def __init__(self):
        self.service = UserAdminService()

    @admin_required
    def post(self, user_id):
        try:
            return sanitize_mongo_document(self.service.reactivate(user_id, get_current_actor())), 200
        except Exception as e:
            return handle_service_error(e)

class ChangeUserRole(Resource):
    def __init__(self):
        self.service = UserAdminService()

    @admin_required
    def put(self, user_id):
        try:
            data = get_json_data()
            require_fields(data, "newRole")
            result = self.service.change_role(user_id, data["newRole"], get_current_actor(), data.get("reason"))
            return sanitize_mongo_document(result), 200
        except Exception as e:
            return handle_service_error(e)
