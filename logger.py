import logging
import os
from logging.handlers import RotatingFileHandler

# Optional log file; console only when unset
LOG_FILE_ENV = "PAGE_AUDIT_LOG_FILE"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str):
    """
    Creates a logger that writes to the console, and to a rotating file
    when PAGE_AUDIT_LOG_FILE is set.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    formatter = logging.Formatter(_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)
    logger.addHandler(console_handler)

    log_file_path = os.environ.get(LOG_FILE_ENV)
    if log_file_path:
        log_dir = os.path.dirname(os.path.abspath(log_file_path))
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(log_file_path, maxBytes=10_000_000, backupCount=5)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        logger.addHandler(file_handler)

    return logger
