"""Fold sheet-name -> rows exports into one row per candidate"""
from typing import Any, Dict, List, Optional
from onboarding.config.constants import (
    ATTENDANCE_SHEET, COURSE_COMPLETION_KEY, GROOMING_SHEET, INTERACTIONS_SHEET, LEARNING_SUB_SHEETS,
)
from onboarding.exceptions.exceptions import UpstreamFormatError, ValidationError
from onboarding.utils.time.timeutils import date_key, parse_date

AUTHOR_ID_FIELDS = ("author_id", "Author ID", "authorId", "AuthorId")
TOPIC_FIELDS = ("Topic", "topic", "Course", "course", "Course Name")
MONTH_FIELDS = ("Month", "month")
DATE_FIELDS = ("Date", "date")

def _first_field(row: Dict, names) -> Optional[str]:
    for name in names:
        if name in row:
            return name
    return None

def _clean_author_id(value: Any) -> str:
    return str(value).strip() if value is not None else ""

def _strip(row: Dict, *fields: Optional[str]) -> Dict:
    return {k: v for k, v in row.items() if k not in fields}

def group_sheet_rows(sheet_map: Dict[str, Any]) -> List[Dict]:
    """
    Convert {sheetName: [row, ...]} into candidate rows shaped like
    {"author_id", "learningReport", "attendanceReport", "groomingReport", "interactionsReport"}.

    Candidates and author-less rows keep the order in which they first
    appear. An author-less row becomes its own candidate row tagged with
    sourceSheet and sourceRow (1-based) so the coordinator can name it.
    """
    candidates: Dict[str, Dict] = {}
    grouped: List[Dict] = []

    def candidate_for(row: Dict, sheet: str, position: int) -> Dict:
        author_id = _clean_author_id(row.get(_first_field(row, AUTHOR_ID_FIELDS) or "author_id"))
        if not author_id:
            orphan = {"author_id": None, "sourceSheet": sheet, "sourceRow": position}
            grouped.append(orphan)
            return orphan
        if author_id not in candidates:
            candidates[author_id] = {"author_id": author_id}
            grouped.append(candidates[author_id])
        return candidates[author_id]

    for sheet, rows in sheet_map.items():
        if not isinstance(rows, list):
            raise UpstreamFormatError(f"Sheet {sheet} must be a list of rows")
        for position, row in enumerate(rows, start=1):
            if not isinstance(row, dict):
                raise UpstreamFormatError(f"Sheet {sheet} contains a row that is not an object")
            author_field = _first_field(row, AUTHOR_ID_FIELDS)
            target = candidate_for(row, sheet, position)

            if sheet in LEARNING_SUB_SHEETS or sheet == COURSE_COMPLETION_KEY:
                topic_field = _first_field(row, TOPIC_FIELDS)
                if topic_field is None:
                    continue
                topic = str(row[topic_field]).strip()
                learning = target.setdefault("learningReport", {})
                learning.setdefault(sheet, {})[topic] = _strip(row, author_field, topic_field)

            elif sheet == ATTENDANCE_SHEET:
                month_field = _first_field(row, MONTH_FIELDS)
                if month_field is None:
                    continue
                month = str(row[month_field]).strip()
                attendance = target.setdefault("attendanceReport", {})
                for field, value in _strip(row, author_field, month_field).items():
                    attendance.setdefault(field, {})[month] = value

            elif sheet == GROOMING_SHEET:
                date_field = _first_field(row, DATE_FIELDS)
                if date_field is None:
                    continue
                try:
                    key = date_key(parse_date(row[date_field]))
                except ValidationError:
                    key = str(row[date_field]).strip()
                target.setdefault("groomingReport", {})[key] = _strip(row, author_field, date_field)

            elif sheet == INTERACTIONS_SHEET:
                target.setdefault("interactionsReport", []).append(_strip(row, author_field))

    return grouped
