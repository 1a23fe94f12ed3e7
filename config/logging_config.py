"""Loguru logging for the bot.

Every record lands in the log file as one JSON object per line; ERROR and
above are also appended to error.log next to it. Records from slack_sdk,
uvicorn and anything else using the stdlib logging module go through
loguru as well.

Inside ``logger.contextualize(message_id=..., channel_id=..., action=...)``
those keys appear as top-level JSON fields, so one message or action can
be followed across the remote and the runner.
"""

import json
import logging
import os

from loguru import logger

_configured = False

# contextualize() keys copied into each JSON line
_CONTEXT_KEYS = ("message_id", "channel_id", "action")

# Stdlib loggers that install their own handlers
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _record_fields(record) -> dict:
    fields = {
        "time": str(record["time"]),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    extra = record.get("extra", {})
    fields.update(
        (key, extra[key]) for key in _CONTEXT_KEYS if extra.get(key) is not None
    )
    if record.get("exception") is not None:
        exc_type = record["exception"].type
        fields["exception"] = exc_type.__name__ if exc_type else None
    return fields


def _json_line(record) -> str:
    """Loguru format callable for the JSON sinks.

    The serialized line is stored on the record and the returned template
    only refers to it, so braces in messages are never re-formatted.
    """
    record["_json"] = json.dumps(_record_fields(record), default=str)
    return "{_json}\n"


class InterceptHandler(logging.Handler):
    """Stdlib handler that re-emits each record through loguru.

    The loguru call is made from the frame that called the stdlib logger,
    so module, function and line point at slack_sdk or uvicorn code rather
    than at this handler.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(log_file: str, *, debug: bool = False, force: bool = False) -> None:
    """Install the JSON sinks and route stdlib logging into loguru.

    Only the first call has an effect unless force is set, which tests use
    to point logging at a temporary file.
    """
    global _configured
    if _configured and not force:
        return
    _configured = True

    logger.remove()

    # Each start begins with an empty main log
    open(log_file, "w", encoding="utf-8").close()
    logger.add(
        log_file,
        level="DEBUG" if debug else "INFO",
        format=_json_line,
        encoding="utf-8",
        mode="a",
    )

    # error.log keeps growing across restarts
    logger.add(
        os.path.join(os.path.dirname(log_file), "error.log"),
        level="ERROR",
        format=_json_line,
        encoding="utf-8",
        mode="a",
    )

    intercept = InterceptHandler()
    logging.root.handlers = [intercept]
    logging.root.setLevel(logging.DEBUG if debug else logging.INFO)
    for name in _UVICORN_LOGGERS:
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = [intercept]
        uv_logger.propagate = False
