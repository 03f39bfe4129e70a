"""Time utilities - month keys, day normalisation and working-day counts"""
import calendar
from datetime import date, datetime, timedelta
from typing import Tuple, Union
import pytz
from onboarding.config.constants import MONTH_ABBREVIATIONS
from onboarding.exceptions.exceptions import ValidationError

IST = pytz.timezone('Asia/Kolkata')

def now_ist() -> datetime:
    return datetime.now(IST)

def utc_now() -> datetime:
    return datetime.utcnow()

def start_of_day(value: Union[date, datetime]) -> datetime:
    """Midnight of the given day as a naive datetime (storage form)"""
    return datetime(value.year, value.month, value.day)

def today_start() -> datetime:
    return start_of_day(now_ist())

def parse_date(value) -> datetime:
    """Parse YYYY-MM-DD or ISO strings into a day-normalised datetime"""
    if isinstance(value, (datetime, date)):
        return start_of_day(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("A valid date is required")
    text = value.strip()
    try:
        return start_of_day(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass
    try:
        return start_of_day(datetime.strptime(text[:10], "%Y-%m-%d"))
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")

def date_key(value: Union[date, datetime]) -> str:
    return value.strftime("%Y-%m-%d")

def month_key(value: Union[date, datetime]) -> str:
    """Canonical month bucket, e.g. NOV'25"""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]}'{str(value.year)[-2:]}"

def month_bounds(value: Union[date, datetime]) -> Tuple[datetime, datetime]:
    """First day 00:00 and last day 23:59:59.999999 of the month"""
    last_day = calendar.monthrange(value.year, value.month)[1]
    start = datetime(value.year, value.month, 1)
    end = datetime(value.year, value.month, last_day) + timedelta(days=1) - timedelta(microseconds=1)
    return start, end

def working_days_in_month(year: int, month: int) -> int:
    """Days in the month excluding Saturday and Sunday"""
    days = calendar.monthrange(year, month)[1]
    return sum(1 for day in range(1, days + 1) if date(year, month, day).weekday() < 5)

def is_date_key(key: str) -> bool:
    if not isinstance(key, str) or len(key) != 10:
        return False
    try:
        datetime.strptime(key, "%Y-%m-%d")
        return True
    except ValueError:
        return False
