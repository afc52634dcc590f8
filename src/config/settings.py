"""
Environment settings for the timeline quality tools.

Usage:
    from src.config.settings import get_settings

    settings = get_settings()
    settings.max_artifacts

Values come from the environment, with a .env file at the repo root (or
the working directory) loaded on import.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Find .env file - walk up from this file to repo root
_current = Path(__file__).resolve()
_repo_root = _current.parent.parent.parent  # src/config/settings.py -> repo root
_env_path = _repo_root / ".env"

if _env_path.exists():
    load_dotenv(_env_path)
else:
    load_dotenv()

DEFAULT_MAX_ARTIFACTS = 200
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = Path("logs") / "timeline_quality.log"


@dataclass(frozen=True)
class Settings:
    heuristics_path: Optional[Path]
    max_artifacts: int
    log_level: str
    log_file: Optional[Path] = DEFAULT_LOG_FILE


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default
    if value < 1:
        logger.warning(f"{name}={value} must be positive, using {default}")
        return default
    return value


def get_settings() -> Settings:
    """Read settings from the current environment."""
    heuristics = os.environ.get("TIMELINE_QUALITY_HEURISTICS", "").strip()
    level = os.environ.get("TIMELINE_QUALITY_LOG_LEVEL", "").strip().upper() or DEFAULT_LOG_LEVEL
    log_file = os.environ.get("TIMELINE_QUALITY_LOG_FILE", "").strip()
    return Settings(
        heuristics_path=Path(heuristics) if heuristics else None,
        max_artifacts=_int_env("TIMELINE_QUALITY_MAX_ARTIFACTS", DEFAULT_MAX_ARTIFACTS),
        log_level=level,
        # "none" turns the file handler off
        log_file=None if log_file.lower() == "none" else (Path(log_file) if log_file else DEFAULT_LOG_FILE),
    )
