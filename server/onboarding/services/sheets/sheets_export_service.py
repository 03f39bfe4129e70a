"""Google Sheets export of users, joiners and candidate reports"""
import json
import os
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import gspread
import pandas as pd
from oauth2client.service_account import ServiceAccountCredentials
from onboarding.config.constants import (
    JOINER_SHEET_HEADERS, JOINERS_SHEET_NAME, REPORT_KINDS, REPORT_SHEET_HEADERS,
    REPORT_SHEET_NAMES, USER_SHEET_HEADERS, USERS_SHEET_NAME,
)
from onboarding.config.settings import SheetsConfig
from onboarding.exceptions.exceptions import ValidationError
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.services.identity.identity_merger import author_key
from onboarding.services.identity.identity_service import IdentityService

logger = get_logger("services.sheets_export")

HEADER_FORMAT = {
    "textFormat": {"bold": True},
    "backgroundColor": {"red": 0.9, "green": 0.9, "blue": 0.9},
}

def cell(value: Any) -> Any:
    """Sheet-friendly scalar"""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float, str)):
        return value
    return str(value)

def to_values(headers: List[str], rows: List[List[Any]]) -> List[List[Any]]:
    frame = pd.DataFrame(rows, columns=headers).astype(object)
    frame = frame.where(pd.notna(frame), None)
    return [[cell(v) for v in row] for row in frame.itertuples(index=False, name=None)]

class SheetsExportService:
    def __init__(self, client=None, identity_service=None, joiner_repo=None,
                 report_repos: Optional[Dict] = None, spreadsheet_id: Optional[str] = None):
        self._client = client
        self.identity_service = identity_service or IdentityService()
        self.joiner_repo = joiner_repo or RepositoryFactory.get_joiner_repo()
        self.report_repos = report_repos or RepositoryFactory.get_report_repos()
        self.spreadsheet_id = spreadsheet_id or SheetsConfig.SPREADSHEET_ID

    @property
    def client(self):
        if self._client is None:
            credentials = ServiceAccountCredentials.from_json_keyfile_name(
                SheetsConfig.CREDENTIALS_FILE, SheetsConfig.SCOPE
            )
            self._client = gspread.authorize(credentials)
        return self._client

    def _require_spreadsheet(self, spreadsheet_id: Optional[str]) -> str:
        spreadsheet_id = spreadsheet_id or self.spreadsheet_id
        if not spreadsheet_id:
            raise ValidationError("Google Sheets spreadsheet ID is not configured (GOOGLE_SHEETS_SPREADSHEET_ID)")
        return spreadsheet_id

    # ---- sheet primitives ----

    def _worksheet(self, spreadsheet_id: str, sheet_name: str, cols: int):
        spreadsheet = self.client.open_by_key(spreadsheet_id)
        try:
            return spreadsheet.worksheet(sheet_name)
        except gspread.exceptions.WorksheetNotFound:
            logger.info(f"Creating worksheet {sheet_name}")
            return spreadsheet.add_worksheet(title=sheet_name, rows=1000, cols=max(cols, 26))

    def format_headers(self, worksheet) -> None:
        """Freeze and style row 1; cosmetic, so failures are only logged"""
        try:
            worksheet.freeze(rows=1)
            worksheet.format("1:1", HEADER_FORMAT)
        except gspread.exceptions.APIError as e:
            logger.warning(f"Header formatting failed for {worksheet.title}: {str(e)}")

    def write_to_sheet(self, spreadsheet_id: Optional[str], sheet_name: str, headers: List[str],
                       rows: List[List[Any]], clear_first: bool = True) -> Dict:
        spreadsheet_id = self._require_spreadsheet(spreadsheet_id)
        worksheet = self._worksheet(spreadsheet_id, sheet_name, len(headers))
        if clear_first:
            worksheet.batch_clear(["A:Z"])

        values = [list(headers)] + to_values(headers, rows)
        worksheet.update("A1", values, value_input_option="USER_ENTERED")
        self.format_headers(worksheet)
        logger.info(f"Wrote {len(rows)} rows to {sheet_name}")
        return {"success": True, "sheetName": sheet_name, "rowsWritten": len(rows)}

    def append_to_sheet(self, spreadsheet_id: Optional[str], sheet_name: str, headers: List[str],
                        rows: List[List[Any]]) -> Dict:
        spreadsheet_id = self._require_spreadsheet(spreadsheet_id)
        worksheet = self._worksheet(spreadsheet_id, sheet_name, len(headers))
        worksheet.append_rows(to_values(headers, rows), value_input_option="USER_ENTERED")
        return {"success": True, "sheetName": sheet_name, "rowsAppended": len(rows)}

    # ---- exports ----

    def sync_users(self, spreadsheet_id: Optional[str] = None) -> Dict:
        users = self.identity_service.list_merged()
        joiners = self.joiner_repo.find_many({})
        by_author = {j["author_id"]: j for j in joiners if j.get("author_id")}
        by_email = {str(j["email"]).lower(): j for j in joiners if j.get("email")}

        rows = []
        for user in users:
            joiner = by_author.get(user.get("author_id")) or by_email.get(str(user.get("email") or "").lower()) or {}
            rows.append([
                user.get("name"),
                user.get("email"),
                joiner.get("employeeId") or user.get("employeeId"),
                author_key(user),
                user.get("role"),
                user.get("department") or joiner.get("department"),
                user.get("phone") or joiner.get("phone"),
                user.get("status") or joiner.get("status"),
                user.get("isActive") is not False,
                user.get("accountStatus") or "active",
                user.get("joiningDate") or joiner.get("joiningDate"),
                user.get("createdAt"),
                user.get("updatedAt"),
            ])
        result = self.write_to_sheet(spreadsheet_id, USERS_SHEET_NAME, USER_SHEET_HEADERS, rows)
        return dict(result, message=f"Synced {len(rows)} users")

    def sync_joiners(self, spreadsheet_id: Optional[str] = None) -> Dict:
        rows = [
            [
                j.get("name") or j.get("candidate_name"),
                j.get("email"),
                j.get("phone"),
                j.get("employeeId"),
                j.get("author_id"),
                j.get("department"),
                j.get("role"),
                j.get("role_assign"),
                j.get("joiningDate"),
                j.get("status"),
                bool(j.get("accountCreated")),
                j.get("genre"),
                j.get("qualification"),
                j.get("createdAt"),
                j.get("updatedAt"),
            ]
            for j in self.joiner_repo.find_many({}, sort=[("createdAt", -1)])
        ]
        result = self.write_to_sheet(spreadsheet_id, JOINERS_SHEET_NAME, JOINER_SHEET_HEADERS, rows)
        return dict(result, message=f"Synced {len(rows)} joiners")

    def sync_candidate_reports(self, report_type: str = "all", spreadsheet_id: Optional[str] = None) -> Dict:
        report_type = report_type or "all"
        if report_type != "all" and report_type not in REPORT_KINDS:
            raise ValidationError(f"report_type must be all or one of {', '.join(REPORT_KINDS)}")
        kinds = REPORT_KINDS if report_type == "all" else (report_type,)

        results = {}
        for kind in kinds:
            records = self.report_repos[kind].find_all()
            users = self.identity_service.resolve_many(r.get("author_id") for r in records if r.get("author_id"))
            rows = []
            for record in records:
                user = users.get(str(record.get("author_id") or "").strip()) or {}
                rows.append([
                    record.get("author_id"),
                    user.get("name"),
                    user.get("email"),
                    json.dumps(record.get("reportData"), default=str),
                    record.get("uploadedAt"),
                    record.get("lastUpdatedAt"),
                ])
            results[kind] = self.write_to_sheet(spreadsheet_id, REPORT_SHEET_NAMES[kind], REPORT_SHEET_HEADERS, rows)
        total = sum(r["rowsWritten"] for r in results.values())
        return {"success": True, "message": f"Synced {total} candidate reports", "results": results}

    def sync_all(self, spreadsheet_id: Optional[str] = None) -> Dict:
        results = {
            "users": self.sync_users(spreadsheet_id),
            "joiners": self.sync_joiners(spreadsheet_id),
            "candidateReports": self.sync_candidate_reports("all", spreadsheet_id),
        }
        return {"success": True, "message": "All data synced to Google Sheets", "results": results}

    def sync_target(self, target: str) -> Dict:
        """Entry point for queued sync requests"""
        if target == "users":
            return self.sync_users()
        if target == "joiners":
            return self.sync_joiners()
        if target in ("reports", "candidate-reports"):
            return self.sync_candidate_reports()
        if target == "all":
            return self.sync_all()
        raise ValidationError(f"Unknown sync target: {target}")

    def sync_config(self) -> Dict:
        return {
            "success": True,
            "configured": bool(self.spreadsheet_id) and os.path.exists(SheetsConfig.CREDENTIALS_FILE),
            "spreadsheetId": self.spreadsheet_id,
            "credentialsFile": SheetsConfig.CREDENTIALS_FILE,
            "autoSync": SheetsConfig.AUTO_SYNC,
            "sheets": [USERS_SHEET_NAME, JOINERS_SHEET_NAME] + [REPORT_SHEET_NAMES[k] for k in REPORT_KINDS],
        }
