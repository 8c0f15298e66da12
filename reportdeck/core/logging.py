import sys
from logging.config import dictConfig

APP_LOGGER = "reportdeck"

# Uvicorn-compatible logging configuration
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": "uvicorn.logging.DefaultFormatter",
            "fmt": "%(levelprefix)s %(asctime)s [%(name)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(asctime)s [%(name)s] "%(request_line)s" %(status_code)s',
        },
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": sys.stderr,
            "level": "INFO",
        },
        "access": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": sys.stdout,
            "level": "INFO",
        },
        "reportdeck": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": sys.stdout,
            "level": "DEBUG",
        },
    },
    "loggers": {
        "root": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
        # Child loggers (reportdeck.services.export.*, ...) inherit this handler
        APP_LOGGER: {"handlers": ["reportdeck"], "level": "DEBUG", "propagate": False},
        # Backend SDKs log every request at INFO
        "httpx": {"handlers": ["default"], "level": "WARNING", "propagate": False},
        "google_genai": {"handlers": ["default"], "level": "WARNING", "propagate": False},
    },
}


def setup_logging(app_level: str = "DEBUG") -> None:
    """Configures application-wide logging using dictConfig.

    ``app_level`` applies to the reportdeck loggers and their handler only;
    uvicorn and the backend SDKs keep their own levels.
    """
    LOGGING_CONFIG["loggers"][APP_LOGGER]["level"] = app_level
    LOGGING_CONFIG["handlers"]["reportdeck"]["level"] = app_level
    dictConfig(LOGGING_CONFIG)
