"""Configuration settings - Configuration Layer (Environment Separated)"""
import os
from dotenv import load_dotenv

load_dotenv()

def safe_int_env(key: str, default: str) -> int:
    """Safely convert environment variable to int"""
    try:
        return int(os.getenv(key, default))
    except ValueError:
        return int(default)

def safe_bool_env(key: str, default: str) -> bool:
    """Read true/false style environment flags"""
    return os.getenv(key, default).strip().lower() in {"1", "true", "yes", "on"}

# Database Configuration
class MongoConfig:
    DB_URL = os.getenv("DB_URL", "mongodb://localhost:27017")
    DB_NAME = os.getenv("DB_NAME", "onboarding_admin")

# Collection names (single source of truth)
class CollectionConfig:
    LEGACY_USERS = os.getenv("LEGACY_USERS_COLLECTION", "users")
    CURRENT_USERS = os.getenv("CURRENT_USERS_COLLECTION", "usersnew")
    JOINERS = "joiners"
    ATTENDANCE = "attendances"
    LEARNING_REPORTS = "learning_reports"
    ATTENDANCE_REPORTS = "attendance_reports"
    GROOMING_REPORTS = "grooming_reports"
    INTERACTIONS_REPORTS = "interactions_reports"
    DEACTIVATED_USERS = "deactivated_users"
    DOMAIN_EVENTS = "domain_events"

# Auth Configuration
class JWTConfig:
    SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
    ACCESS_TOKEN_EXPIRES_HOURS = safe_int_env("JWT_ACCESS_TOKEN_EXPIRES", "12")
    REFRESH_TOKEN_EXPIRE_DAYS = safe_int_env("JWT_REFRESH_TOKEN_EXPIRE_DAYS", "7")

# External Service Configuration
class SheetsConfig:
    SPREADSHEET_ID = os.getenv("GOOGLE_SHEETS_SPREADSHEET_ID")
    CREDENTIALS_FILE = os.getenv("GOOGLE_SHEETS_CREDENTIALS_FILE", "credentials.json")
    FETCH_TIMEOUT = safe_int_env("SHEETS_FETCH_TIMEOUT", "60")
    AUTO_SYNC = safe_bool_env("SHEETS_AUTO_SYNC", "false")
    SCOPE = ["https://spreadsheets.google.com/feeds", "https://www.googleapis.com/auth/drive"]

# Identity Configuration
class IdentityConfig:
    # Set once the legacy -> current backfill has run
    LEGACY_USERS_RETIRED = safe_bool_env("LEGACY_USERS_RETIRED", "false")

# Threading Configuration
class ParallelConfig:
    MAX_WORKERS = safe_int_env("MAX_PARALLEL_WORKERS", "8")

# Outbox Configuration
class OutboxConfig:
    MAX_ATTEMPTS = safe_int_env("OUTBOX_MAX_ATTEMPTS", "5")
    REPLAY_BATCH = safe_int_env("OUTBOX_REPLAY_BATCH", "100")

# Logging Configuration
class LoggingConfig:
    LOG_DIR = os.getenv("ONBOARDING_LOG_DIR", "logs")
    LOG_FILE = os.getenv("ONBOARDING_LOG_FILE", "onboarding.log")
    CONSOLE_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    MAX_BYTES = safe_int_env("LOG_MAX_MB", "30") * 1024 * 1024
    BACKUP_COUNT = safe_int_env("LOG_BACKUP_COUNT", "5")
