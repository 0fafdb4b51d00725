import logging
import os
from logging.config import dictConfig
from typing import Optional

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
PACKAGE_LOGGER = "study_planner"


def configure_logging(level: Optional[str] = None) -> None:
    """Route ``study_planner`` logs to stderr.

    ``STUDY_PLANNER_LOG_LEVEL`` sets the level when ``level`` is not given.
    ``STUDY_PLANNER_TRACE_ALLOCATOR=1`` turns on per-day allocator debug
    output, and ``STUDY_PLANNER_MUTE_TELEMETRY=1`` silences the telemetry
    log lines while keeping listeners active.
    """
    resolved = (level or os.getenv("STUDY_PLANNER_LOG_LEVEL", "INFO")).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": DEFAULT_LOG_FORMAT},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                PACKAGE_LOGGER: {
                    "handlers": ["stderr"],
                    "level": resolved,
                    "propagate": False,
                },
            },
        }
    )

    if os.getenv("STUDY_PLANNER_TRACE_ALLOCATOR", "0") == "1":
        logging.getLogger(f"{PACKAGE_LOGGER}.scheduler").setLevel(logging.DEBUG)
    if os.getenv("STUDY_PLANNER_MUTE_TELEMETRY", "0") == "1":
        logging.getLogger(f"{PACKAGE_LOGGER}.telemetry").setLevel(logging.WARNING)
