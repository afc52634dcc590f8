"""Shared logging configuration for the timeline quality tools.

Call ``configure_logging()`` once at the CLI entry point. Library modules
only create loggers with ``logging.getLogger(__name__)``.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = Path("logs") / "timeline_quality.log"


def resolve_level(level: Union[int, str]) -> int:
    """Level name or number -> logging level; unknown names mean INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def build_handlers(log_file: Optional[Path] = DEFAULT_LOG_FILE) -> List[logging.Handler]:
    """Console handler, plus an appending file handler when ``log_file`` is writable."""
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as e:
            logging.getLogger(__name__).debug(f"No log file at {log_file}: {e}")

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = DEFAULT_LOG_FILE
) -> None:
    """Attach handlers to the root logger unless it already has some."""
    root = logging.getLogger()
    if root.handlers:
        return
    for handler in build_handlers(log_file):
        root.addHandler(handler)
    root.setLevel(resolve_level(level))
