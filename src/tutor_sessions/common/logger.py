'''
universal logger
'''
import logging
import sys

from .config import settings

# Third-party loggers that log every outbound request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "google.auth", "urllib3")

def setup_logger(name: str = 'tutor-sessions', level: str = settings.LOG_LEVEL) -> logging.Logger:
    """
    Configures the application logger. The level comes from LOG_LEVEL; an
    unknown name falls back to INFO.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(module)s:%(lineno)d - %(levelname)s - %(message)s'
        ))
        logger.addHandler(handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger

log = setup_logger()
