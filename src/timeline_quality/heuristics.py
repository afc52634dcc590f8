"""
Tunable heuristics for the timeline quality engine.

Word lists, regex tables and thresholds live here so they can be tuned
without touching control flow. ``load_heuristics()`` reads overrides from
a YAML file (see config/heuristics.yaml) validated against
config/schemas/heuristics.schema.json.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Pattern

import jsonschema
import yaml

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SCHEMA_PATH = REPO_ROOT / "config" / "schemas" / "heuristics.schema.json"

# Minimum label similarity for two artifacts to count as the same event.
# Uncalibrated: product should tune this against labelled pairs.
SAME_EVENT_SIMILARITY_THRESHOLD = 0.6

# Minimum content-date divergence (days) that counts as a date conflict.
# Uncalibrated, same as above.
DATE_CONFLICT_MIN_DAYS = 2

MAX_CONFLICTS = 20

# Entity queries this short only match on word boundaries in free text
SHORT_QUERY_MAX_LENGTH = 4

# Label tokens shorter than this are dropped
MIN_LABEL_TOKEN_LENGTH = 3

STOPWORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in", "is",
    "it", "of", "on", "or", "that", "the", "to", "was", "were", "with", "this",
    "those", "these", "your", "our", "their",
})

# (label, positive regex, negative regex). Order matters: first label hit wins.
STATUS_PATTERN_TABLE = [
    ("paid", r"\bpaid\b", r"\bunpaid\b|\bnot\s+paid\b"),
    ("present", r"\bpresent\b", r"\babsent\b|\bnot\s+present\b"),
    ("agreed", r"\bagreed\b", r"\bnot\s+agreed\b|\bdisagreed\b"),
    ("signed", r"\bsigned\b", r"\bnot\s+signed\b|\bunsigned\b"),
    ("delivered", r"\bdelivered\b", r"\bnot\s+delivered\b|\bundelivered\b"),
]

CURRENCY_SYMBOLS: Dict[str, Optional[str]] = {
    "$": "USD",
    "£": "GBP",
    "€": "EUR",
}

CURRENCY_CODES = ["USD", "GBP", "EUR"]

AMOUNT_NUMBER = r"[0-9][0-9,]*(?:\.[0-9]{1,2})?"


class HeuristicsConfigError(Exception):
    """Raised when a heuristics config file is unreadable or invalid."""
    pass


@dataclass(frozen=True)
class StatusPattern:
    label: str
    positive: Pattern
    negative: Pattern


def compile_status_patterns(table: List[Any]) -> List[StatusPattern]:
    patterns = []
    for row in table:
        if isinstance(row, dict):
            label, positive, negative = row["label"], row["positive"], row["negative"]
        else:
            label, positive, negative = row
        try:
            patterns.append(StatusPattern(
                label=label,
                positive=re.compile(positive, re.IGNORECASE),
                negative=re.compile(negative, re.IGNORECASE),
            ))
        except re.error as e:
            raise HeuristicsConfigError(f"Invalid regex for status '{label}': {e}")
    return patterns


def compile_amount_pattern(symbols: Dict[str, Optional[str]], codes: List[str]) -> Pattern:
    """
    Build the amount regex: a currency symbol before a number, or a number
    followed by a currency code.

    Groups: 1 symbol, 2 symbol amount, 3 code amount, 4 code.
    """
    symbol_class = "".join(re.escape(s) for s in symbols)
    code_group = "|".join(re.escape(c) for c in codes)
    return re.compile(
        rf"(?:([{symbol_class}])\s?({AMOUNT_NUMBER})|({AMOUNT_NUMBER})\s?({code_group}))",
        re.IGNORECASE,
    )


@dataclass
class HeuristicsConfig:
    similarity_threshold: float = SAME_EVENT_SIMILARITY_THRESHOLD
    date_conflict_min_days: float = DATE_CONFLICT_MIN_DAYS
    max_conflicts: int = MAX_CONFLICTS
    short_query_max_length: int = SHORT_QUERY_MAX_LENGTH
    min_label_token_length: int = MIN_LABEL_TOKEN_LENGTH
    stopwords: FrozenSet[str] = STOPWORDS
    status_patterns: List[StatusPattern] = field(
        default_factory=lambda: compile_status_patterns(STATUS_PATTERN_TABLE)
    )
    currency_symbols: Dict[str, Optional[str]] = field(default_factory=lambda: dict(CURRENCY_SYMBOLS))
    currency_codes: List[str] = field(default_factory=lambda: list(CURRENCY_CODES))
    amount_pattern: Pattern = field(init=False, repr=False)

    def __post_init__(self):
        self.amount_pattern = compile_amount_pattern(self.currency_symbols, self.currency_codes)


_DEFAULT_HEURISTICS: Optional[HeuristicsConfig] = None


def default_heuristics() -> HeuristicsConfig:
    """Shared default config. Treat as read-only."""
    global _DEFAULT_HEURISTICS
    if _DEFAULT_HEURISTICS is None:
        _DEFAULT_HEURISTICS = HeuristicsConfig()
    return _DEFAULT_HEURISTICS


def validate_heuristics(
    data: Dict[str, Any],
    schema_path: Optional[Path] = DEFAULT_SCHEMA_PATH
) -> None:
    """
    Validate a raw heuristics mapping.

    Runs JSON Schema validation when the schema file exists, then the
    consistency checks the schema can't express.

    Raises:
        HeuristicsConfigError: If validation fails
    """
    if not isinstance(data, dict):
        raise HeuristicsConfigError("Heuristics config must be a mapping")

    if schema_path is not None and schema_path.exists():
        with open(schema_path) as f:
            schema = json.load(f)
        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as e:
            path = ".".join(str(p) for p in e.absolute_path)
            where = f" at {path}" if path else ""
            raise HeuristicsConfigError(f"Schema validation failed{where}: {e.message}")

    threshold = data.get("similarity_threshold")
    if threshold is not None and not (0 < threshold <= 1):
        raise HeuristicsConfigError("similarity_threshold must be in (0, 1]")

    labels = [row.get("label") for row in data.get("status_patterns", []) if isinstance(row, dict)]
    if len(labels) != len(set(labels)):
        raise HeuristicsConfigError("status_patterns contains duplicate labels")


def heuristics_from_dict(data: Dict[str, Any]) -> HeuristicsConfig:
    """Merge a validated mapping over the defaults."""
    kwargs: Dict[str, Any] = {}
    for key in ("similarity_threshold", "date_conflict_min_days", "max_conflicts",
                "short_query_max_length", "min_label_token_length"):
        if key in data:
            kwargs[key] = data[key]
    if "stopwords" in data:
        kwargs["stopwords"] = frozenset(w.lower() for w in data["stopwords"])
    if "status_patterns" in data:
        kwargs["status_patterns"] = compile_status_patterns(data["status_patterns"])
    if "currency_symbols" in data:
        kwargs["currency_symbols"] = dict(data["currency_symbols"])
    if "currency_codes" in data:
        kwargs["currency_codes"] = [c.upper() for c in data["currency_codes"]]
    return HeuristicsConfig(**kwargs)


def load_heuristics(
    path: Path,
    schema_path: Optional[Path] = DEFAULT_SCHEMA_PATH
) -> HeuristicsConfig:
    """
    Load heuristics overrides from a YAML file.

    Keys left out of the file keep their defaults.

    Raises:
        HeuristicsConfigError: If the file can't be read, parsed or validated
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise HeuristicsConfigError(f"Could not read heuristics config {path}: {e}")
    except yaml.YAMLError as e:
        raise HeuristicsConfigError(f"Invalid YAML in {path}: {e}")

    validate_heuristics(data, schema_path)
    config = heuristics_from_dict(data)
    logger.info(
        f"Loaded heuristics from {path} "
        f"(threshold={config.similarity_threshold}, date_days={config.date_conflict_min_days})"
    )
    return config
