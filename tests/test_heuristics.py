"""
Tests for heuristics configuration loading and validation.

The shipped config/heuristics.yaml must match the built-in defaults.
"""

from pathlib import Path

import pytest
import yaml

from src.timeline_quality.heuristics import (
    CURRENCY_CODES,
    CURRENCY_SYMBOLS,
    DATE_CONFLICT_MIN_DAYS,
    MAX_CONFLICTS,
    REPO_ROOT,
    SAME_EVENT_SIMILARITY_THRESHOLD,
    STATUS_PATTERN_TABLE,
    STOPWORDS,
    HeuristicsConfig,
    HeuristicsConfigError,
    default_heuristics,
    load_heuristics,
    validate_heuristics,
)

SHIPPED_CONFIG = REPO_ROOT / "config" / "heuristics.yaml"


def _write_yaml(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "heuristics.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestDefaults:
    def test_named_constants(self):
        assert SAME_EVENT_SIMILARITY_THRESHOLD == 0.6
        assert DATE_CONFLICT_MIN_DAYS == 2
        assert MAX_CONFLICTS == 20

    def test_default_config_values(self):
        config = default_heuristics()
        assert config.similarity_threshold == 0.6
        assert config.short_query_max_length == 4
        assert [p.label for p in config.status_patterns] == ["paid", "present", "agreed", "signed", "delivered"]

    def test_default_is_shared(self):
        assert default_heuristics() is default_heuristics()

    def test_shipped_stopwords_load_as_strings(self):
        """Bare YAML keywords like on/off must not turn into booleans."""
        with open(SHIPPED_CONFIG, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        assert all(isinstance(word, str) for word in raw["stopwords"])
        assert "on" in raw["stopwords"]

    def test_shipped_yaml_matches_defaults(self):
        config = load_heuristics(SHIPPED_CONFIG)
        assert config.similarity_threshold == SAME_EVENT_SIMILARITY_THRESHOLD
        assert config.date_conflict_min_days == DATE_CONFLICT_MIN_DAYS
        assert config.max_conflicts == MAX_CONFLICTS
        assert config.stopwords == STOPWORDS
        assert config.currency_symbols == CURRENCY_SYMBOLS
        assert config.currency_codes == CURRENCY_CODES
        assert [(p.label, p.positive.pattern, p.negative.pattern) for p in config.status_patterns] == [
            tuple(row) for row in STATUS_PATTERN_TABLE
        ]


class TestLoadHeuristics:
    """Tests for YAML overrides."""

    def test_partial_override_keeps_defaults(self, tmp_path):
        path = _write_yaml(tmp_path, "similarity_threshold: 0.75\nmax_conflicts: 5\n")
        config = load_heuristics(path)
        assert config.similarity_threshold == 0.75
        assert config.max_conflicts == 5
        assert config.date_conflict_min_days == DATE_CONFLICT_MIN_DAYS
        assert config.stopwords == STOPWORDS

    def test_empty_file_is_defaults(self, tmp_path):
        config = load_heuristics(_write_yaml(tmp_path, ""))
        assert config.similarity_threshold == SAME_EVENT_SIMILARITY_THRESHOLD

    def test_currency_override_rebuilds_amount_pattern(self, tmp_path):
        path = _write_yaml(tmp_path, 'currency_symbols:\n  "¥": JPY\ncurrency_codes: [jpy]\n')
        config = load_heuristics(path)
        assert config.currency_codes == ["JPY"]
        assert config.amount_pattern.search("cost ¥5000") is not None
        assert config.amount_pattern.search("cost $5000") is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(HeuristicsConfigError, match="Could not read"):
            load_heuristics(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(HeuristicsConfigError, match="Invalid YAML"):
            load_heuristics(_write_yaml(tmp_path, "stopwords: [unclosed\n"))

    def test_unknown_key_rejected(self, tmp_path):
        with pytest.raises(HeuristicsConfigError, match="Schema validation failed"):
            load_heuristics(_write_yaml(tmp_path, "similarity: 0.5\n"))

    def test_wrong_type_rejected(self, tmp_path):
        with pytest.raises(HeuristicsConfigError, match="max_conflicts"):
            load_heuristics(_write_yaml(tmp_path, "max_conflicts: many\n"))

    def test_bad_regex_rejected(self, tmp_path):
        content = "status_patterns:\n  - label: paid\n    positive: '(unclosed'\n    negative: 'unpaid'\n"
        with pytest.raises(HeuristicsConfigError, match="Invalid regex"):
            load_heuristics(_write_yaml(tmp_path, content))


class TestValidateHeuristics:
    def test_not_a_mapping(self):
        with pytest.raises(HeuristicsConfigError):
            validate_heuristics(["a", "list"])

    def test_threshold_bounds_without_schema(self):
        with pytest.raises(HeuristicsConfigError, match="similarity_threshold"):
            validate_heuristics({"similarity_threshold": 1.5}, schema_path=None)

    def test_duplicate_status_labels(self):
        data = {"status_patterns": [
            {"label": "paid", "positive": "paid", "negative": "unpaid"},
            {"label": "paid", "positive": "settled", "negative": "unsettled"},
        ]}
        with pytest.raises(HeuristicsConfigError, match="duplicate"):
            validate_heuristics(data)

    def test_valid_mapping_passes(self):
        validate_heuristics({"similarity_threshold": 0.5, "currency_codes": ["CHF"]})

    def test_dataclass_recompiles_pattern(self):
        config = HeuristicsConfig(currency_codes=["CHF"])
        assert config.amount_pattern.search("1000 CHF") is not None
        assert config.amount_pattern.search("1000 USD") is None
