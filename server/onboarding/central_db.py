from pymongo import ASCENDING, DESCENDING, MongoClient
from onboarding.config.settings import CollectionConfig, MongoConfig
from onboarding.logging_logs.log_config import get_logger

logger = get_logger("central_db")

# MongoDB connection configuration
MONGO_CLIENT_CONFIG = {
    'maxPoolSize': 100,
    'minPoolSize': 10,
    'connectTimeoutMS': 10000,
    'serverSelectionTimeoutMS': 10000,
    'waitQueueTimeoutMS': 10000,
    'socketTimeoutMS': 60000,
    'retryWrites': True,
    'retryReads': True,
    'w': 1
}

# Collection definitions
COLLECTIONS = {
    'legacy_users_collection': CollectionConfig.LEGACY_USERS,
    'current_users_collection': CollectionConfig.CURRENT_USERS,
    'joiners_collection': CollectionConfig.JOINERS,
    'attendance_collection': CollectionConfig.ATTENDANCE,
    'learning_reports_collection': CollectionConfig.LEARNING_REPORTS,
    'attendance_reports_collection': CollectionConfig.ATTENDANCE_REPORTS,
    'grooming_reports_collection': CollectionConfig.GROOMING_REPORTS,
    'interactions_reports_collection': CollectionConfig.INTERACTIONS_REPORTS,
    'deactivated_users_collection': CollectionConfig.DEACTIVATED_USERS,
    'domain_events_collection': CollectionConfig.DOMAIN_EVENTS,
}

_client = None

def get_mongo_client():
    """Get the shared MongoDB client with connection pooling."""
    global _client
    if _client is None:
        _client = MongoClient(MongoConfig.DB_URL, **MONGO_CLIENT_CONFIG)
    return _client

def get_db():
    """Get MongoDB database."""
    return get_mongo_client()[MongoConfig.DB_NAME]

def ensure_indexes():
    """Create the indexes the repositories rely on"""
    db = get_db()
    for key in ('learning_reports_collection', 'attendance_reports_collection',
                'grooming_reports_collection', 'interactions_reports_collection'):
        collection = db[COLLECTIONS[key]]
        collection.create_index([("author_id", ASCENDING)], unique=True)
        collection.create_index([("user", ASCENDING)])
        collection.create_index([("uploadedAt", DESCENDING)])

    db[COLLECTIONS['joiners_collection']].create_index([("email", ASCENDING)], unique=True)
    db[COLLECTIONS['joiners_collection']].create_index([("author_id", ASCENDING)])
    db[COLLECTIONS['attendance_collection']].create_index([("user", ASCENDING), ("date", ASCENDING)], unique=True)
    db[COLLECTIONS['domain_events_collection']].create_index([("status", ASCENDING), ("createdAt", ASCENDING)])
    for key in ('legacy_users_collection', 'current_users_collection'):
        db[COLLECTIONS[key]].create_index([("author_id", ASCENDING)])
        db[COLLECTIONS[key]].create_index([("email", ASCENDING)])
    logger.info("Indexes ensured")
