"""Google Sheets sync and outbox APIs - Presentation Layer (SoC)"""
from flask_restful import Resource
from onboarding.exceptions.error_handler import handle_service_error
from onboarding.jwt.auth_middleware import admin_boa_required, admin_required
from onboarding.services.events.event_publisher import EventPublisher
from onboarding.services.sheets.sheets_export_service import SheetsExportService
from onboarding.utils.formatting.json_utils import sanitize_mongo_document
from onboarding.utils.validation.input_validator import get_json_data

class SheetsSyncConfig(Resource):
    def __init__(self):
        self.service = SheetsExportService()

    @admin_required
    def get(self):
        try:
            return self.service.sync_config(), 200
        except Exception as e:
            return handle_service_error(e)

class SheetsSyncUsers(Resource):
    def __init__(self):
        self.service = SheetsExportService()

    @admin_required
    def post(self):
        try:
            return self.service.sync_users(get_json_data().get("spreadsheetId")), 200
        except Exception as e:
            return handle_service_error(e)

class SheetsSyncJoiners(Resource):
    def __init__(self):
        self.service = SheetsExportService()

    @admin_boa_required
    def post(self):
        try:
            return self.service.sync_joiners(get_json_data().get("spreadsheetId")), 200
        except Exception as e:
            return handle_service_error(e)

class SheetsSyncCandidateReports(Resource):
    def __init__(self):
        self.service = SheetsExportService()

    @admin_boa_required
    def post(self):
        try:
            data = get_json_data()
            return self.service.sync_candidate_reports(data.get("reportType", "all"), data.get("spreadsheetId")), 200
        except Exception as e:
            return handle_service_error(e)

class SheetsSyncAll(Resource):
    def __init__(self):
        self.service = SheetsExportService()

    @admin_required
    def post(self):
        try:
            return self.service.sync_all(get_json_data().get("spreadsheetId")), 200
        except Exception as e:
            return handle_service_error(e)

class ReplayEvents(Resource):
    def __init__(self):
        self.publisher = EventPublisher()

    @admin_required
    def post(self):
        try:
            limit = get_json_data().get("limit")
            return sanitize_mongo_document(self.publisher.replay_pending(int(limit) if limit else None)), 200
        except Exception as e:
            return handle_service_error(e)
