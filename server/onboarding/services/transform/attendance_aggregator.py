"""Monthly attendance aggregation for trainer-marked attendance"""
import copy
from datetime import datetime
from typing import Any, Dict, Tuple
from onboarding.config.constants import (
    ATTENDANCE_FIELDS, DAYS_ATTENDED, LEAVES_TAKEN, MONTH_FULL_NAMES,
    MONTHLY_PERCENTAGE, TOTAL_WORKING_DAYS,
)
from onboarding.utils.formatting.number_utils import round_half_up
from onboarding.utils.time.timeutils import month_key, working_days_in_month

def legacy_keys_for(mark_date: datetime) -> Tuple[str, str]:
    """Keys older uploads used for the same month, e.g. November Month and 11"""
    return f"{MONTH_FULL_NAMES[mark_date.month - 1]} Month", str(mark_date.month)

def migrate_month_keys(report_data: Dict[str, Any], mark_date: datetime) -> Dict[str, Any]:
    """Move legacy month keys of mark_date's month under the canonical key"""
    canonical = month_key(mark_date)
    for field in ATTENDANCE_FIELDS:
        values = report_data.get(field)
        if not isinstance(values, dict):
            report_data[field] = {}
            continue
        for legacy in legacy_keys_for(mark_date):
            if legacy in values:
                legacy_value = values.pop(legacy)
                values.setdefault(canonical, legacy_value)
    return report_data

def month_summary(mark_date: datetime, attended: int) -> Dict[str, int]:
    working_days = working_days_in_month(mark_date.year, mark_date.month)
    leaves = max(0, working_days - attended)
    percentage = round_half_up(attended / working_days * 100) if working_days > 0 else 0
    return {
        TOTAL_WORKING_DAYS: working_days,
        DAYS_ATTENDED: attended,
        LEAVES_TAKEN: leaves,
        MONTHLY_PERCENTAGE: percentage,
    }

def aggregate_month(report_data: Any, mark_date: datetime, attended: int) -> Dict[str, Any]:
    """
    Recompute the month of mark_date from the attended-day count.

    Returns a new payload; the input is left untouched.
    """
    data = copy.deepcopy(report_data) if isinstance(report_data, dict) else {}
    migrate_month_keys(data, mark_date)
    key = month_key(mark_date)
    for field, value in month_summary(mark_date, attended).items():
        data[field][key] = value
    return data
