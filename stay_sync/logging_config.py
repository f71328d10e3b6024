from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, cast

import structlog

from stay_sync.config import LOG_LEVEL

# Type alias for structlog processor
Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

# Loggers that report every Google discovery/HTTP round trip at INFO
QUIET_LOGGERS = (
    "urllib3",
    "requests",
    "googleapiclient",
    "googleapiclient.discovery_cache",
    "google_auth_httplib2",
    "uvicorn.access",
)


def tag_component(component: str) -> Processor:
    """
    Build a processor that stamps every event with the process that wrote it.

    The API server and the one-shot sync command share a log destination;
    "component" tells their sync cycles apart.
    """

    def processor(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> Any:
        event_dict.setdefault("component", component)
        return event_dict

    return processor


def setup_logging(component: str = "api", level: str = LOG_LEVEL) -> None:
    """
    Configure stdlib logging and structlog for one stay_sync process.

    INFO renders one JSON object per line; any other level (DEBUG in
    practice) renders colored console lines.

    Args:
        component: Value of the "component" key on every event ("api", "cli")
        level: Logging level name
    """
    level = level.upper()

    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=level,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer: Processor = cast(
        Processor,
        (
            structlog.processors.JSONRenderer()
            if level == "INFO"
            else structlog.dev.ConsoleRenderer(colors=True)
        ),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            tag_component(component),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
