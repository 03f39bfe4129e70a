"""Remote spreadsheet client - fetches candidate rows published by an Apps Script endpoint"""
import requests
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode, urlparse, parse_qsl, urlunparse
from onboarding.config.constants import SHEET_KINDS
from onboarding.config.settings import SheetsConfig
from onboarding.exceptions.exceptions import UpstreamFormatError
from onboarding.logging_logs.log_config import get_logger
from onboarding.services.transform.sheet_rows import group_sheet_rows

logger = get_logger("services.sheet_fetcher")

def with_author_id(url: str, author_id: str) -> str:
    """Append author_id= to the query string, replacing any existing value"""
    parts = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "author_id"]
    query.append(("author_id", author_id))
    return urlunparse(parts._replace(query=urlencode(query)))

def _is_sheet_map(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and any(key in SHEET_KINDS for key in value)

def extract_rows(body: Any) -> List[Dict]:
    """
    Accepted response shapes:
        {"success": true, "data": [row, ...]}
        [row, ...]
        {"data": [row, ...]}
    plus a sheet-name -> rows map (bare or under "data"), folded to one row per candidate.
    """
    if isinstance(body, list):
        return body
    if not isinstance(body, dict):
        raise UpstreamFormatError(
            "Invalid response from Google Sheets. Expected JSON object.",
            details={"received": type(body).__name__},
        )

    data = body.get("data")
    if isinstance(data, list):
        return data
    if _is_sheet_map(data):
        return group_sheet_rows(data)
    if _is_sheet_map(body):
        return group_sheet_rows({k: v for k, v in body.items() if k in SHEET_KINDS})

    raise UpstreamFormatError("Invalid data structure from Google Sheets. Expected array of candidate reports.")

class SheetFetcher:
    def __init__(self, timeout: Optional[int] = None, session=None):
        self.timeout = timeout or SheetsConfig.FETCH_TIMEOUT
        self.http = session or requests

    def fetch(self, url: str, author_id: Optional[str] = None) -> List[Dict]:
        if author_id:
            url = with_author_id(url, author_id)

        try:
            response = self.http.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Sheet fetch failed: {str(e)}")
            raise UpstreamFormatError("Failed to fetch data from Google Sheets", details={"error": str(e)})

        text = response.text or ""
        if "<!DOCTYPE html>" in text[:1024] or text.lstrip().lower().startswith("<html"):
            raise UpstreamFormatError(
                "Google Sheets URL returned HTML instead of JSON. Please check your Apps Script deployment.",
                details={"received": "HTML"},
            )

        try:
            body = response.json()
        except ValueError:
            raise UpstreamFormatError("Invalid response from Google Sheets. Expected JSON object.")

        rows = extract_rows(body)
        if author_id:
            rows = [r for r in rows if isinstance(r, dict) and str(r.get("author_id", "")).strip() == author_id]
        logger.info(f"Fetched {len(rows)} candidate rows from sheet")
        return rows
