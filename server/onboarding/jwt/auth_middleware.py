from functools import wraps
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from onboarding.config.constants import (
    ROLE_ADMIN, ROLE_BOA, ROLE_MASTER_TRAINER, ROLE_TRAINEE, ROLE_TRAINER,
)

def _verify(allowed_roles=()):
    """None when the request may proceed, else an error response tuple"""
    try:
        verify_jwt_in_request()
    except NoAuthorizationError:
        return {"success": False, "message": "Missing Authorization Header", "error": "NO_AUTH_HEADER"}, 401
    except ExpiredSignatureError:
        return {"success": False, "message": "Token has expired", "error": "TOKEN_EXPIRED"}, 401
    except (InvalidTokenError, JWTExtendedException):
        return {"success": False, "message": "Invalid token", "error": "INVALID_TOKEN"}, 401

    if allowed_roles and get_jwt().get("userType") not in allowed_roles:
        return {
            "success": False,
            "message": f"Access denied. Required roles: {', '.join(allowed_roles)}",
            "error": "INSUFFICIENT_PERMISSIONS",
        }, 403
    return None

def role_required(*allowed_roles):
    """Decorator to require specific roles for API endpoints"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            denied = _verify(allowed_roles)
            if denied:
                return denied
            return f(*args, **kwargs)
        return decorated_function
    return decorator

def get_current_actor():
    """The caller as {"id", "role", "email"} from the verified token"""
    claims = get_jwt()
    return {
        "id": claims.get("id") or get_jwt_identity(),
        "role": claims.get("userType"),
        "email": claims.get("email"),
    }

# Role-specific decorators
def admin_required(f):
    return role_required(ROLE_ADMIN)(f)

def boa_required(f):
    return role_required(ROLE_BOA)(f)

def admin_boa_required(f):
    return role_required(ROLE_ADMIN, ROLE_BOA)(f)

def trainer_required(f):
    return role_required(ROLE_TRAINER)(f)

def clock_required(f):
    """Decorator for trainer & trainee self-service endpoints"""
    return role_required(ROLE_TRAINER, ROLE_TRAINEE)(f)

def dashboard_required(f):
    """Decorator for admin & master trainer dashboards"""
    return role_required(ROLE_ADMIN, ROLE_MASTER_TRAINER)(f)

def joiner_required(f):
    return role_required(ROLE_BOA, ROLE_MASTER_TRAINER)(f)

def joiner_update_required(f):
    return role_required(ROLE_BOA, ROLE_MASTER_TRAINER, ROLE_ADMIN)(f)

def staff_required(f):
    """Decorator for staff listing endpoints"""
    return role_required(ROLE_ADMIN, ROLE_MASTER_TRAINER, ROLE_BOA, ROLE_TRAINER)(f)
