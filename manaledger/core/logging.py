"""Loguru setup: console + rotating file, ERROR alerts to Slack when configured."""

import logging
import sys
from pathlib import Path

import httpx
from loguru import logger

from manaledger.core.config import settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[name]}:{function}:{line} | {message}"
LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "alembic")

_configured = False


class InterceptHandler(logging.Handler):
    """Forward stdlib records (uvicorn, alembic, sqlalchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_name == "emit":
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def slack_alert(message) -> None:
    """Post a failed-sync (ERROR and above) record to the Slack webhook."""
    record = message.record
    text = f"[manaledger {record['level'].name}] {record['extra'].get('name')}: {record['message']}"
    try:
        httpx.post(settings.SLACK_WEBHOOK_URL, json={"text": text}, timeout=5.0)
    except httpx.HTTPError:
        # Logging the failure here would re-enter this sink
        pass


def resolve_level(raw: str | None) -> str:
    level = (raw or "INFO").strip().upper()
    level = LEVEL_ALIASES.get(level, level)
    try:
        logger.level(level)
    except ValueError:
        return "INFO"
    return level


def configure_logging() -> None:
    global _configured
    if _configured:
        return
    _configured = True

    level = resolve_level(settings.effective_log_level)
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra={"name": "manaledger"})
    logger.add(sys.stdout, level=level, format=LOG_FORMAT, backtrace=False, diagnose=False)
    logger.add(
        log_dir / "manaledger.log",
        level=level,
        format=LOG_FORMAT,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )
    if settings.SLACK_WEBHOOK_URL:
        logger.add(slack_alert, level="ERROR", enqueue=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False


def get_logger(name: str):
    return logger.bind(name=name)


configure_logging()
