"""Learning report transformation: sub-sheet form -> metric-keyed form"""
from typing import Any, Dict, Iterable, List, Optional
from onboarding.config.constants import COURSE_COMPLETION_KEY, LEARNING_SUB_SHEETS, SKILLS_KEY
from onboarding.exceptions.exceptions import ValidationError

def _has_value(value: Any) -> bool:
    return value is not None and value != ""

def _append_unique(items: List[str], seen: set, value: str) -> None:
    if value not in seen:
        seen.add(value)
        items.append(value)

def is_sub_sheet_form(payload: Any) -> bool:
    """True when any known learning sub-sheet name is a top-level key"""
    return isinstance(payload, dict) and any(sheet in payload for sheet in LEARNING_SUB_SHEETS)

def contributing_sheets(payload: Dict, sheets: Optional[Iterable[str]] = None) -> List[str]:
    """Sub-sheets present in the payload, in declared order, limited to the selector"""
    allowed = set(sheets) if sheets is not None else None
    return [
        sheet for sheet in LEARNING_SUB_SHEETS
        if sheet in payload and (allowed is None or sheet in allowed)
    ]

def to_canonical(payload: Any, sheets: Optional[Iterable[str]] = None) -> Dict:
    """
    Convert a learning report from sub-sheet form to metric-keyed form.

    A payload that carries no known sub-sheet key is already canonical and is
    returned unchanged, so the conversion is idempotent. When several sub-sheets
    supply the same (topic, metric) value the earliest sheet in LEARNING_SUB_SHEETS
    order wins. CourseCompletion is copied verbatim whatever the selector says.

    Args:
        payload: learning report payload
        sheets: optional subset of sub-sheet names allowed to contribute

    Raises:
        ValidationError: payload, a sub-sheet or a topic entry is not an object
    """
    if not isinstance(payload, dict):
        raise ValidationError("Learning report must be an object")
    if not is_sub_sheet_form(payload):
        return payload

    ordered = contributing_sheets(payload, sheets)
    topics: List[str] = []
    metrics: List[str] = []
    seen_topics, seen_metrics = set(), set()

    for sheet in ordered:
        sheet_data = payload.get(sheet)
        if sheet_data is None:
            continue
        if not isinstance(sheet_data, dict):
            raise ValidationError(f"{sheet} must be an object of topic -> metrics")
        for topic, metric_map in sheet_data.items():
            if not isinstance(metric_map, dict):
                raise ValidationError(f"{sheet}.{topic} must be an object of metric -> value")
            _append_unique(topics, seen_topics, topic)
            for metric in metric_map:
                _append_unique(metrics, seen_metrics, metric)

    canonical: Dict[str, Any] = {}
    for metric in metrics:
        entries = {}
        for topic in topics:
            for sheet in ordered:
                metric_map = (payload.get(sheet) or {}).get(topic)
                if isinstance(metric_map, dict) and _has_value(metric_map.get(metric)):
                    entries[topic] = metric_map[metric]
                    break
        if entries:
            canonical[metric] = entries

    if COURSE_COMPLETION_KEY in payload:
        canonical[COURSE_COMPLETION_KEY] = payload[COURSE_COMPLETION_KEY]
    if topics:
        canonical[SKILLS_KEY] = topics
    return canonical

def from_stored(payload: Any) -> Dict:
    """Read-side normalisation: stored legacy sub-sheet payloads come back metric-keyed"""
    if not isinstance(payload, dict):
        return {}
    return to_canonical(payload)

def has_learning_content(payload: Dict) -> bool:
    """A canonical report qualifies for storage with any metric or a CourseCompletion map"""
    if not isinstance(payload, dict):
        return False
    if payload.get(COURSE_COMPLETION_KEY):
        return True
    return any(key != SKILLS_KEY and value for key, value in payload.items())
