"""
Report payload schemas, one per report kind.

Every stored report document carries a ``kind`` tag; the schema registered for
that tag knows which collection holds it, which upload row fields carry it,
how to tell an empty payload from a real one, and how to bring legacy shapes
still resident in storage to the canonical shape.

Canonical shapes:
    learning      metric -> topic -> value, plus CourseCompletion and skills
    attendance    field -> MON'YY -> number
    grooming      YYYY-MM-DD -> observation, plus the monthly missed-count map
    interactions  list or object of free-form entries
"""
import copy
from typing import Any, Dict, Iterable, Optional, Tuple
from onboarding.config.constants import (
    ATTENDANCE_FIELDS, GROOMING_MISSED_KEY, MONTH_ABBREVIATIONS, MONTH_FULL_NAMES,
)
from onboarding.config.settings import CollectionConfig
from onboarding.exceptions.exceptions import ValidationError
from onboarding.services.transform import learning_transformer

SCHEMA_VERSION = 2

class ReportSchema:
    kind: str = ""
    collection: str = ""
    row_keys: Tuple[str, ...] = ()

    @classmethod
    def extract(cls, row: Dict) -> Any:
        """Payload for this kind from an upload row, None when absent"""
        for key in cls.row_keys:
            value = row.get(key)
            if value is not None:
                return value
        return None

    @classmethod
    def validate(cls, payload: Any) -> None:
        if not isinstance(payload, dict):
            raise ValidationError(f"{cls.kind} report must be an object")

    @classmethod
    def is_empty(cls, payload: Any) -> bool:
        return not payload

    @classmethod
    def normalize(cls, payload: Any, sheets: Optional[Iterable[str]] = None) -> Any:
        cls.validate(payload)
        return payload

class LearningReportSchema(ReportSchema):
    kind = "learning"
    collection = CollectionConfig.LEARNING_REPORTS
    row_keys = ("learningReport", "Learning Report")

    @classmethod
    def is_empty(cls, payload: Any) -> bool:
        return not learning_transformer.has_learning_content(payload)

    @classmethod
    def normalize(cls, payload: Any, sheets: Optional[Iterable[str]] = None) -> Dict:
        return learning_transformer.to_canonical(payload, sheets)

class AttendanceReportSchema(ReportSchema):
    kind = "attendance"
    collection = CollectionConfig.ATTENDANCE_REPORTS
    row_keys = ("attendanceReport", "Attendance Report")

    @classmethod
    def normalize(cls, payload: Any, sheets: Optional[Iterable[str]] = None) -> Dict:
        """Rename "<Month> Month" keys found next to canonical keys of the same year"""
        cls.validate(payload)
        data = copy.deepcopy(payload)
        for field in ATTENDANCE_FIELDS:
            values = data.get(field)
            if not isinstance(values, dict):
                continue
            suffix = _year_suffix(values)
            if suffix is None:
                continue
            for index, full_name in enumerate(MONTH_FULL_NAMES):
                legacy = f"{full_name} Month"
                if legacy in values:
                    legacy_value = values.pop(legacy)
                    values.setdefault(f"{MONTH_ABBREVIATIONS[index]}'{suffix}", legacy_value)
        return data

class GroomingReportSchema(ReportSchema):
    kind = "grooming"
    collection = CollectionConfig.GROOMING_REPORTS
    row_keys = ("groomingReport", "Grooming Report")

    @classmethod
    def validate(cls, payload: Any) -> None:
        super().validate(payload)
        monthly = payload.get(GROOMING_MISSED_KEY)
        if monthly is not None and not isinstance(monthly, dict):
            raise ValidationError(f"{GROOMING_MISSED_KEY} must be an object keyed by month")

class InteractionsReportSchema(ReportSchema):
    kind = "interactions"
    collection = CollectionConfig.INTERACTIONS_REPORTS
    row_keys = ("interactionsReport", "Interactions Report")

    @classmethod
    def validate(cls, payload: Any) -> None:
        if not isinstance(payload, (dict, list)):
            raise ValidationError("interactions report must be a list or an object")

    @classmethod
    def is_empty(cls, payload: Any) -> bool:
        return not isinstance(payload, (dict, list)) or len(payload) == 0

def _year_suffix(values: Dict) -> Optional[str]:
    for key in values:
        if isinstance(key, str) and "'" in key:
            suffix = key.rsplit("'", 1)[1]
            if len(suffix) == 2 and suffix.isdigit():
                return suffix
    return None

REPORT_SCHEMAS: Dict[str, type] = {
    schema.kind: schema
    for schema in (LearningReportSchema, AttendanceReportSchema, GroomingReportSchema, InteractionsReportSchema)
}

def get_schema(kind: str):
    schema = REPORT_SCHEMAS.get(kind)
    if schema is None:
        raise ValidationError(f"Unknown report kind: {kind}. Expected one of {', '.join(REPORT_SCHEMAS)}")
    return schema
