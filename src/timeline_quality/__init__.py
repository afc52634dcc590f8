"""
Timeline Quality - coverage, missing-field and cross-document conflict checks.

Pure functions over a read-only list of summarized artifacts. No I/O and no
mutation of inputs; the same artifacts always give the same results.

Modules:
    models - Artifact parsing and result dataclasses
    heuristics - Tunable thresholds, word lists and regex tables
    dates - Dated/undated classification and day grouping
    entities - Entity extraction, entity index and entity filtering
    amounts - Currency amount extraction
    missing_info - Per-artifact missing-field detection
    conflicts - Pairwise fact conflict detection
    report - Combined quality report (JSON/markdown)
    loader - Reading artifact files for the CLI
    cli - Command-line interface entrypoints
"""

from . import models
from . import heuristics
from . import dates
from . import entities
from . import amounts
from . import missing_info
from . import conflicts
from . import report
from . import loader

from .conflicts import detect_potential_conflicts
from .dates import classify_by_date, get_undated_artifacts, summarize_date_coverage
from .entities import extract_entity_strings, filter_artifacts_by_entity
from .missing_info import compute_missing_info
from .models import TimelineArtifact, load_timeline_artifacts

__version__ = "0.1.0"
