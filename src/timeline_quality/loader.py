"""
Read timeline artifact records from disk for the CLI.

Accepts a JSON list of ``{entryKey, artifact}`` records, a JSON object
wrapping them under ``artifacts``, or JSONL with one record per line.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import TimelineArtifact, load_timeline_artifacts

logger = logging.getLogger(__name__)


class ArtifactLoadError(Exception):
    """Raised when an artifacts file can't be read or parsed."""
    pass


def read_artifact_records(path: Path) -> List[Dict[str, Any]]:
    """
    Read raw records from a JSON or JSONL file.

    Raises:
        ArtifactLoadError: If the file is missing or not valid JSON/JSONL
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        raise ArtifactLoadError(f"Could not read {path}: {e}")

    if path.suffix == ".jsonl":
        records = []
        for line_no, line in enumerate(content.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ArtifactLoadError(f"{path}:{line_no}: invalid JSON: {e}")
        return records

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ArtifactLoadError(f"{path}: invalid JSON: {e}")

    if isinstance(data, dict):
        data = data.get("artifacts")
    if not isinstance(data, list):
        raise ArtifactLoadError(f"{path}: expected a list of artifact records")
    return data


def load_artifacts_file(path: Path, max_artifacts: Optional[int] = None) -> List[TimelineArtifact]:
    """Read, parse and cap artifacts from ``path``."""
    items = load_timeline_artifacts(read_artifact_records(path))
    if max_artifacts is not None and len(items) > max_artifacts:
        logger.warning(f"Truncating {len(items)} artifacts to the first {max_artifacts}")
        items = items[:max_artifacts]
    logger.info(f"Loaded {len(items)} artifact(s) from {path}")
    return items
