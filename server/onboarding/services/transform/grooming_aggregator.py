"""Grooming date entries and the derived monthly missed-checklist count"""
import copy
from datetime import datetime
from typing import Any, Dict
from onboarding.config.constants import DRESSCODE_FOLLOWED, DRESSCODE_NOT_FOLLOWED, GROOMING_MISSED_KEY
from onboarding.utils.time.timeutils import date_key, is_date_key, month_key

def is_not_followed(entry: Any) -> bool:
    if entry == DRESSCODE_NOT_FOLLOWED:
        return True
    if isinstance(entry, dict):
        return (
            entry.get("grooming") == DRESSCODE_NOT_FOLLOWED
            or entry.get("status") == DRESSCODE_NOT_FOLLOWED
            or entry.get("dresscodeStatus") == "notFollowed"
        )
    return False

def count_missed(report_data: Dict[str, Any], year: int, month: int) -> int:
    prefix = f"{year:04d}-{month:02d}-"
    return sum(
        1 for key, entry in report_data.items()
        if is_date_key(key) and key.startswith(prefix) and is_not_followed(entry)
    )

def recompute_month(report_data: Dict[str, Any], day: datetime) -> Dict[str, Any]:
    missed = count_missed(report_data, day.year, day.month)
    monthly = report_data.get(GROOMING_MISSED_KEY)
    if not isinstance(monthly, dict):
        monthly = {}
        report_data[GROOMING_MISSED_KEY] = monthly
    monthly[month_key(day)] = str(missed) if missed else DRESSCODE_FOLLOWED
    return report_data

def apply_mark(report_data: Any, day: datetime, grooming: Any) -> Dict[str, Any]:
    """Store one day's observation and refresh that month's aggregate"""
    data = copy.deepcopy(report_data) if isinstance(report_data, dict) else {}
    key = date_key(day)
    existing = data.get(key)
    if isinstance(existing, dict) and isinstance(grooming, dict):
        data[key] = {**existing, **grooming}
    else:
        data[key] = copy.deepcopy(grooming)
    return recompute_month(data, day)
