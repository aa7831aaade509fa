"""
Logging setup for the Tempo tray.

`run_tray.py` calls `setup_logging()` once at startup. Console output is split
by severity (INFO and below on stdout, WARNING and above on stderr) and every
record is also appended to `TEMPO_LOG_FILE` (`tempo_tray.log` by default):

    setup_logging(level="INFO", job_name="tempo_tray", log_file="tempo_tray.log")

Modules take a tagged logger at import time; the tag names the component in
the `%(tag)s` column (cache, refresh, scheduler, ...):

    logger = get_tagged_logger(__name__, tag="refresh")
    logger.info("Refresh cycle done")

Records carry `job_name` and `tag` even when they come from third-party
loggers such as urllib3, through the filters below.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


# Until setup_logging() runs (imports, settings validation), records still
# get a timestamp and a level.
BOOTSTRAP_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
BOOTSTRAP_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    level=logging.INFO,
    format=BOOTSTRAP_FORMAT,
    datefmt=BOOTSTRAP_DATEFMT,
)

DEFAULT_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(name)s | %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_CONFIGURED: bool = False


# ---------------------------------------------------------------------------
# Record filters
# ---------------------------------------------------------------------------

class MaxLevelFilter(logging.Filter):
    """Pass records whose level is at most `max_level` (stdout handler)."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class EnsureTagFilter(logging.Filter):
    """Give untagged records a tag taken from their logger name.

    Records from `get_tagged_logger` keep their tag. Others, e.g. from
    "urllib3.connectionpool", get the last dotted segment ("connectionpool").
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "tag"):
            name = getattr(record, "name", "")
            record.tag = name.rsplit(".", 1)[-1] if name else "-"
        return True


class JobNameFilter(logging.Filter):
    """Stamp the process name (`job_name`, "-" when unset) on each record."""

    def __init__(self, job_name: Optional[str] = None) -> None:
        super().__init__()
        self._job_name = job_name or "-"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "job_name"):
            record.job_name = self._job_name
        return True


# ---------------------------------------------------------------------------
# dictConfig
# ---------------------------------------------------------------------------

def _handlers(log_file: str | Path | None) -> Dict[str, Dict[str, Any]]:
    common = {"formatter": "standard", "filters": ["ensure_tag", "job_name"]}
    handlers: Dict[str, Dict[str, Any]] = {
        "stdout": {
            **common,
            "class": "logging.StreamHandler",
            "filters": ["ensure_tag", "job_name", "stdout_max_info"],
            "level": "DEBUG",
            "stream": "ext://sys.stdout",
        },
        "stderr": {
            **common,
            "class": "logging.StreamHandler",
            "level": "WARNING",
            "stream": "ext://sys.stderr",
        },
    }
    if log_file:
        handlers["file"] = {
            **common,
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "filename": str(log_file),
            "mode": "a",
            "encoding": "utf-8",
        }
    return handlers


def build_logging_config(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = None,
    log_file: str | Path | None = None,
) -> Mapping[str, Any]:
    """
    Return the dictConfig mapping used by `setup_logging`.

    Parameters
    ----------
    level:
        Root level, a name ("DEBUG") or a number (`logging.INFO`).
    log_format, date_format:
        Formatter patterns shared by every handler.
    job_name:
        Value of the `job_name` column, "tempo_tray" in the shipped entry point.
    log_file:
        Path of the append-only log file; no file handler when omitted.
    """
    handlers = _handlers(log_file)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ensure_tag": {"()": EnsureTagFilter},
            "job_name": {"()": JobNameFilter, "job_name": job_name},
            "stdout_max_info": {"()": MaxLevelFilter, "max_level": logging.INFO},
        },
        "formatters": {
            "standard": {"format": log_format, "datefmt": date_format},
        },
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = None,
    log_file: str | Path | None = None,
    override_existing: bool = False,
) -> None:
    """Apply `build_logging_config(...)` to the root logger.

    Later calls are no-ops unless `override_existing` is set.
    """
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return

    logging.config.dictConfig(
        build_logging_config(
            level=level,
            log_format=log_format,
            date_format=date_format,
            job_name=job_name,
            log_file=log_file,
        )
    )
    _CONFIGURED = True


def get_tagged_logger(
    name: str,
    *,
    tag: Optional[str] = None,
) -> logging.LoggerAdapter:
    """Logger adapter whose records carry `tag` (default: last segment of `name`).

    `get_tagged_logger("tempo_tray.cache")` tags records "cache".
    """
    if tag is None:
        tag = name.rsplit(".", 1)[-1]
    return logging.LoggerAdapter(logging.getLogger(name), {"tag": tag})
