"""
Ship generation logs to CloudWatch Logs through watchtower.

Only run milestones (bio, outline, sections, assembly, covers, exports) and
errors leave the process; request noise stays local.

Install with: pip install "book-weaver[cloudwatch]"

Environment variables:
  CLOUDWATCH_ENABLED       - "true" to enable (default: disabled)
  CLOUDWATCH_LOG_GROUP     - log group (default: /app/book-weaver)
  CLOUDWATCH_LOG_STREAM    - stream name (default: chosen by watchtower)
  CLOUDWATCH_SEND_INTERVAL - seconds between batches (default: 10)
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

GENERATION_LOGGERS: Tuple[str, ...] = (
    "book_weaver.tasks.",
    "book_weaver.core.pipeline",
    "book_weaver.core.image_generator",
    "book_weaver.services.workspace_service",
)

_WORKSPACE_TAG = re.compile(r"^\[([0-9a-f]{6,32})\]")

_handlers: List[logging.Handler] = []


@dataclass
class CloudWatchSettings:
    enabled: bool = field(
        default_factory=lambda: os.getenv("CLOUDWATCH_ENABLED", "").lower() == "true"
    )
    log_group: str = field(
        default_factory=lambda: os.getenv("CLOUDWATCH_LOG_GROUP", "/app/book-weaver")
    )
    log_stream: Optional[str] = field(
        default_factory=lambda: os.getenv("CLOUDWATCH_LOG_STREAM") or None
    )
    send_interval: int = field(
        default_factory=lambda: int(os.getenv("CLOUDWATCH_SEND_INTERVAL", "10"))
    )


class GenerationLogFilter(logging.Filter):
    """
    Pass INFO+ from the generation loggers and ERROR+ from anywhere.

    Also copies the "[workspace]" prefix of a message onto the record as
    `workspace_id` ("-" when absent) so the formatter can index on it.
    """

    def __init__(self, loggers: Tuple[str, ...] = GENERATION_LOGGERS):
        super().__init__()
        self.loggers = loggers

    def filter(self, record: logging.LogRecord) -> bool:
        match = _WORKSPACE_TAG.match(str(record.msg))
        record.workspace_id = match.group(1) if match else "-"

        if record.levelno >= logging.ERROR:
            return True
        if record.levelno >= logging.INFO:
            return record.name.startswith(self.loggers)
        return False


def setup_cloudwatch_logging(settings: Optional[CloudWatchSettings] = None) -> bool:
    """
    Attach a CloudWatch handler to the root logger.

    Returns True when the handler was attached. Never raises: a missing
    watchtower install or bad AWS credentials only log a warning.
    """
    settings = settings or CloudWatchSettings()
    if not settings.enabled:
        return False

    try:
        import watchtower
    except ImportError:
        logger.warning(
            'CLOUDWATCH_ENABLED=true but watchtower is not installed. '
            'pip install "book-weaver[cloudwatch]"'
        )
        return False

    try:
        handler = watchtower.CloudWatchLogHandler(
            log_group_name=settings.log_group,
            log_stream_name=settings.log_stream,
            send_interval=settings.send_interval,
            max_batch_count=100,
        )
    except Exception as e:
        logger.warning("Failed to initialize CloudWatch logging: %s", e)
        return False

    handler.setLevel(logging.INFO)
    handler.addFilter(GenerationLogFilter())
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s workspace=%(workspace_id)s %(name)s: %(message)s")
    )
    logging.getLogger().addHandler(handler)
    _handlers.append(handler)

    logger.info("CloudWatch logging enabled: group=%s", settings.log_group)
    return True


def flush_cloudwatch_logging() -> None:
    """Flush, close and detach the handlers added by setup_cloudwatch_logging."""
    root = logging.getLogger()
    while _handlers:
        handler = _handlers.pop()
        handler.flush()
        handler.close()
        root.removeHandler(handler)
