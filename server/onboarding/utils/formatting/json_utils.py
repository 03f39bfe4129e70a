"""Response serialisation for stored user, report, joiner and event documents"""
import math
from bson import ObjectId
from datetime import date, datetime
from typing import Any, Dict, List, Union

def to_json_safe(value: Any) -> Any:
    """
    Walk a stored document and make every leaf JSON serialisable.

    ObjectId references (user, uploadedBy, validatedBy) become hex strings,
    timestamps and attendance dates become ISO strings, tuples become lists
    and NaN or infinite scores become null.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    if isinstance(value, dict):
        return {str(key): to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_json_safe(item) for item in value]
    return value

def sanitize_mongo_document(doc: Union[Dict, List, None]) -> Union[Dict, List, None]:
    if doc is None:
        return None
    return to_json_safe(doc)
