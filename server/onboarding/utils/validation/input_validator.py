"""Centralized Input Validation - DRY Implementation"""
from typing import Dict, List, Optional
from bson import ObjectId
from bson.errors import InvalidId
from onboarding.exceptions.exceptions import ValidationError

def get_json_data():
    """Centralized JSON parsing"""
    from flask import request
    return request.get_json(silent=True) or {}

def get_optional_query_params(**param_defaults):
    """Get optional query parameters with defaults"""
    from flask import request
    return {param: request.args.get(param, default) for param, default in param_defaults.items()}

def get_single_query_param(param_name, required=True):
    """Get single query parameter with validation"""
    from flask import request
    value = request.args.get(param_name)

    if required and not value:
        raise ValidationError(f"Missing required parameter: {param_name}")

    return value

def get_client_ip():
    from flask import request
    return request.headers.get("X-Forwarded-For", request.remote_addr)

def require_fields(data: Dict, *fields: str, message: Optional[str] = None) -> None:
    """Raise ValidationError listing every missing or blank field"""
    missing = [f for f in fields if data.get(f) in (None, "", [], {})]
    if missing:
        raise ValidationError(message or f"Missing required fields: {', '.join(missing)}")

def to_object_id(value) -> Optional[ObjectId]:
    """ObjectId for a 24-hex string, None otherwise"""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None

def parse_id_list(raw) -> List[str]:
    """Accept a list or a comma separated string"""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [str(item).strip() for item in raw if str(item).strip()]
