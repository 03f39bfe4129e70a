from dotenv import load_dotenv
load_dotenv()

import os
from datetime import timedelta
from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_restful import Api, Resource
from pymongo.errors import PyMongoError

from onboarding.central_db import ensure_indexes
from onboarding.config.settings import JWTConfig
from onboarding.logging_logs.log_config import get_logger

#candidate reports
from onboarding.api.report_upload_api import (
    CandidatePerformance, CandidateReportBulkUpload, CandidateReportUpload,
    CandidateReportUpsert, CandidateReportValidateAuthor, CandidateReportValidateSheets,
)

#performers dashboard
from onboarding.api.performers_api import (
    AllCandidatesPerformance, CandidatesByExamThreshold, CandidatesByLearningPhase, PerformersByCategory,
)

#attendance & grooming
from onboarding.api.attendance_api import (
    AttendanceHistory, ClockIn, ClockOut, MarkAttendance, MarkGrooming,
    TodayAttendance, TraineeAttendance, TraineeGrooming, ValidateAttendance,
)

#users
from onboarding.api.users_api import (
    ChangeUserRole, DeactivateUser, ReactivateUser, UserByAuthorId, UserDetail, UserList, UserStats,
)

#joiners
from onboarding.api.joiners_api import JoinerCreateAccount, JoinerDetail, Joiners, JoinerStats

#google sheets & outbox
from onboarding.api.sheets_api import (
    ReplayEvents, SheetsSyncAll, SheetsSyncCandidateReports, SheetsSyncConfig,
    SheetsSyncJoiners, SheetsSyncUsers,
)

logger = get_logger("app")

class HealthCheck(Resource):
    def get(self):
        return {"message": "Onboarding admin server is running...! start using apis"}, 200

class MyFlask(Flask):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.config['JWT_SECRET_KEY'] = JWTConfig.SECRET_KEY
        self.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(hours=JWTConfig.ACCESS_TOKEN_EXPIRES_HOURS)
        self.config['JWT_REFRESH_TOKEN_EXPIRES'] = timedelta(days=JWTConfig.REFRESH_TOKEN_EXPIRE_DAYS)

    def add_api(self):
        api = Api(self, catch_all_404s=True)
        api.add_resource(HealthCheck, "/")

        # Candidate report Apis
        api.add_resource(CandidateReportBulkUpload, "/api/v1/candidate-reports/bulk-upload")
        api.add_resource(CandidateReportValidateSheets, "/api/v1/candidate-reports/validate-sheets")
        api.add_resource(CandidateReportValidateAuthor, "/api/v1/candidate-reports/validate-author")
        api.add_resource(CandidatePerformance, "/api/v1/candidate-reports/performance/<string:author_id>")
        api.add_resource(CandidateReportUpload, "/api/v1/candidate-reports/<string:author_id>/upload")
        api.add_resource(CandidateReportUpsert, "/api/v1/candidate-reports/<string:author_id>/<string:kind>")

        # Performers Apis
        api.add_resource(AllCandidatesPerformance, "/api/v1/performers/candidates")
        api.add_resource(PerformersByCategory, "/api/v1/performers")
        api.add_resource(CandidatesByExamThreshold, "/api/v1/performers/exam-threshold")
        api.add_resource(CandidatesByLearningPhase, "/api/v1/performers/learning-phase")

        # Attendance Apis
        api.add_resource(ClockIn, "/api/v1/attendance/clock-in")
        api.add_resource(ClockOut, "/api/v1/attendance/clock-out")
        api.add_resource(TodayAttendance, "/api/v1/attendance/today")
        api.add_resource(AttendanceHistory, "/api/v1/attendance/history")
        api.add_resource(TraineeAttendance, "/api/v1/attendance/trainees")
        api.add_resource(ValidateAttendance, "/api/v1/attendance/validate/<string:attendance_id>")
        api.add_resource(MarkAttendance, "/api/v1/attendance/mark")

        # Grooming Apis
        api.add_resource(MarkGrooming, "/api/v1/grooming/mark")
        api.add_resource(TraineeGrooming, "/api/v1/grooming/trainees")

        # User admin Apis
        api.add_resource(UserList, "/api/v1/users")
        api.add_resource(UserStats, "/api/v1/users/stats")
        api.add_resource(UserByAuthorId, "/api/v1/users/by-author/<string:author_id>")
        api.add_resource(UserDetail, "/api/v1/users/<string:user_id>")
        api.add_resource(DeactivateUser, "/api/v1/users/<string:user_id>/deactivate")
        api.add_resource(ReactivateUser, "/api/v1/users/<string:user_id>/reactivate")
        api.add_resource(ChangeUserRole, "/api/v1/users/<string:user_id>/role")

        # Joiner Apis
        api.add_resource(Joiners, "/api/v1/joiners")
        api.add_resource(JoinerStats, "/api/v1/joiners/stats")
        api.add_resource(JoinerDetail, "/api/v1/joiners/<string:joiner_id>")
        api.add_resource(JoinerCreateAccount, "/api/v1/joiners/<string:joiner_id>/create-account")

        # Google Sheets sync Apis
        api.add_resource(SheetsSyncConfig, "/api/v1/sheets-sync/config")
        api.add_resource(SheetsSyncUsers, "/api/v1/sheets-sync/users")
        api.add_resource(SheetsSyncJoiners, "/api/v1/sheets-sync/joiners")
        api.add_resource(SheetsSyncCandidateReports, "/api/v1/sheets-sync/candidate-reports")
        api.add_resource(SheetsSyncAll, "/api/v1/sheets-sync/all")

        # Outbox Apis
        api.add_resource(ReplayEvents, "/api/v1/events/replay")

def create_app(init_indexes=None):
    app = MyFlask(__name__)
    jwt = JWTManager(app)
    app.add_api()
    CORS(app, supports_credentials=True)

    if init_indexes is None:
        init_indexes = os.getenv("ENSURE_INDEXES", "false").lower() == "true"
    if init_indexes:
        try:
            ensure_indexes()
        except PyMongoError as e:
            logger.error(f"Index creation failed: {str(e)}")
    return app

app = create_app()

if __name__ == '__main__':
    app.run()
