"""
Logging for the onboarding backend.

Handlers live on the single ``onboarding`` logger; every module logger is a
child of it (``onboarding.services.bulk_upload`` and so on) and propagates up,
so the rotating file and the console are configured exactly once per process.
"""
import os
import time
import logging
from logging.handlers import RotatingFileHandler
from onboarding.config.settings import LoggingConfig

ROOT_LOGGER = "onboarding"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

class RepeatSuppressor(logging.Filter):
    """Drops a record identical to the previous one from the same logger within the window"""

    def __init__(self, window_seconds=0.1):
        super().__init__()
        self.window = window_seconds
        self.last_key = None
        self.last_time = 0.0

    def filter(self, record):
        key = (record.name, record.levelno, record.msg, record.args)
        now = time.time()
        if key == self.last_key and now - self.last_time < self.window:
            return False
        self.last_key = key
        self.last_time = now
        return True

def _file_handler(formatter):
    os.makedirs(LoggingConfig.LOG_DIR, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(LoggingConfig.LOG_DIR, LoggingConfig.LOG_FILE),
        maxBytes=LoggingConfig.MAX_BYTES,
        backupCount=LoggingConfig.BACKUP_COUNT,
        delay=True
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler

def setup_logging():
    """Attach file and console handlers to the ``onboarding`` logger once"""
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root

    # Connection pool chatter from the driver
    logging.getLogger('pymongo').setLevel(logging.WARNING)
    root.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)
    suppressor = RepeatSuppressor()

    try:
        file_handler = _file_handler(formatter)
        file_handler.addFilter(suppressor)
        root.addHandler(file_handler)
    except OSError as e:
        print(f"Warning: onboarding file logging disabled: {str(e)}")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, LoggingConfig.CONSOLE_LEVEL, logging.INFO))
    console_handler.setFormatter(formatter)
    console_handler.addFilter(suppressor)
    root.addHandler(console_handler)
    return root

def get_logger(module_name=None):
    """Logger for one area of the backend, e.g. get_logger("services.joiners")"""
    root = setup_logging()
    return root.getChild(module_name) if module_name else root
