import logging
from logging.handlers import RotatingFileHandler

# Configure logging
logger = logging.getLogger("processed_or_not")
logger.setLevel(logging.DEBUG)

# File handler keeps the full cascade trail
file_handler = RotatingFileHandler("processed_or_not.log", maxBytes=5*1024*1024, backupCount=3)
file_handler.setLevel(logging.DEBUG)

# Console only shows errors
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.ERROR)

formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s - %(pathname)s:%(lineno)d")
file_handler.setFormatter(formatter)
console_handler.setFormatter(formatter)

logger.addHandler(file_handler)
logger.addHandler(console_handler)

def log_debug(message: str):
    logger.debug(message)

def log_info(message: str):
    logger.info(message)

def log_warning(message: str):
    logger.warning(message)

def log_error(message: str, exc: Exception = None):
    if exc:
        logger.error(message, exc_info=exc)
    else:
        logger.error(message)

def log_critical(message: str):
    logger.critical(message)
