"""
Cross-document fact conflict detection.

For every pair of artifacts that look like the same event (token overlap
of a short label), checks three independent dimensions:

  - date: content dates at least ``date_conflict_min_days`` apart (high)
  - amount: different currency amounts, same or unknown currency
    (high when both currencies are known, else medium)
  - status_fact: same status label with opposite polarity, e.g.
    "signed" vs "not signed" (medium)

Findings are deduplicated by key, given a stable FNV-1a id, sorted by
severity then id, and capped at ``max_conflicts``. Pairs below the
similarity threshold are never compared, whatever their divergence.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from .amounts import ParsedAmount, parse_amount
from .dates import parse_content_date
from .heuristics import HeuristicsConfig, default_heuristics
from .models import (
    SEVERITY_RANK,
    ConflictArtifactEvidence,
    ConflictDetails,
    ConflictSeverity,
    ConflictType,
    EntityLabel,
    PotentialConflict,
    TimelineArtifact,
)
from .text import evidence_snippet, first_sentence, normalize_text

logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619

SECONDS_PER_DAY = 60 * 60 * 24


@dataclass(frozen=True)
class StatusMatch:
    label: str
    positive: bool
    snippet: str

    def describe(self) -> str:
        return self.label if self.positive else f"not {self.label}"


def stable_hash(value: str) -> str:
    """32-bit FNV-1a over UTF-16 code units, lower-case hex."""
    data = value.encode("utf-16-le")
    h = FNV_OFFSET_BASIS
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return format(h, "x")


def label_tokens(value: str, heuristics: HeuristicsConfig) -> List[str]:
    return [
        token for token in normalize_text(value).split(" ")
        if len(token) >= heuristics.min_label_token_length and token not in heuristics.stopwords
    ]


def create_event_label(item: TimelineArtifact, heuristics: HeuristicsConfig) -> EntityLabel:
    """Label from the first summary sentence, or the title when that's empty."""
    base = first_sentence(item.artifact.summary) or item.artifact.title
    tokens = label_tokens(base, heuristics)
    return EntityLabel(raw=base, normalized=" ".join(tokens), tokens=frozenset(tokens))


def token_similarity(left: EntityLabel, right: EntityLabel) -> float:
    """Shared tokens over the larger token set."""
    if not left.tokens or not right.tokens:
        return 0.0
    overlap = len(left.tokens & right.tokens)
    return overlap / max(len(left.tokens), len(right.tokens))


def same_event_likely(left: EntityLabel, right: EntityLabel, heuristics: HeuristicsConfig) -> bool:
    return token_similarity(left, right) >= heuristics.similarity_threshold


def date_diff_days(left_iso: Optional[str], right_iso: Optional[str]) -> Optional[float]:
    left = parse_content_date(left_iso)
    right = parse_content_date(right_iso)
    if left is None or right is None:
        return None
    return abs((left - right).total_seconds()) / SECONDS_PER_DAY


def match_status(item: TimelineArtifact, heuristics: HeuristicsConfig) -> Optional[StatusMatch]:
    """
    First status label the artifact text mentions, with its polarity.

    A negative match wins over a positive one for the same label.
    """
    text = item.artifact.fact_text()
    for pattern in heuristics.status_patterns:
        negative = pattern.negative.search(text)
        if negative:
            return StatusMatch(label=pattern.label, positive=False, snippet=negative.group(0))
        positive = pattern.positive.search(text)
        if positive:
            return StatusMatch(label=pattern.label, positive=True, snippet=positive.group(0))
    return None


def _evidence(item: TimelineArtifact, snippet: str) -> ConflictArtifactEvidence:
    artifact = item.artifact
    return ConflictArtifactEvidence(
        artifact_id=artifact.artifact_id,
        title=artifact.title,
        content_date_iso=artifact.content_date_iso,
        source_label=artifact.source_label(),
        evidence_snippet=snippet,
    )


def _date_evidence(item: TimelineArtifact) -> ConflictArtifactEvidence:
    return _evidence(item, f"contentDateISO: {item.artifact.content_date_iso or 'missing'}")


def _text_evidence(item: TimelineArtifact, token: str) -> ConflictArtifactEvidence:
    return _evidence(item, evidence_snippet(item.artifact.fact_text(), token))


def _amounts_conflict(left: Optional[ParsedAmount], right: Optional[ParsedAmount]) -> bool:
    if left is None or right is None or left.value == right.value:
        return False
    if left.currency and right.currency:
        return left.currency == right.currency
    return True


class _ConflictCollector:
    """Accumulates conflicts, dropping repeats of the same dedup key."""

    def __init__(self):
        self.conflicts: List[PotentialConflict] = []
        self._seen: Set[str] = set()

    def add(self, key: str, **fields) -> None:
        if key in self._seen:
            return
        self._seen.add(key)
        self.conflicts.append(PotentialConflict(conflict_id=stable_hash(key), **fields))


def detect_potential_conflicts(
    artifacts: List[TimelineArtifact],
    heuristics: Optional[HeuristicsConfig] = None
) -> List[PotentialConflict]:
    """
    Find pairs of artifacts that appear to assert contradictory facts.

    Never raises on malformed artifacts: an unparseable date or amount just
    means no conflict on that dimension for that pair.

    Returns:
        Conflicts sorted by severity (high first) then conflict_id,
        at most ``heuristics.max_conflicts`` of them.
    """
    heuristics = heuristics or default_heuristics()
    labels = [create_event_label(item, heuristics) for item in artifacts]
    amounts = [parse_amount(item.artifact.fact_text(), heuristics) for item in artifacts]
    statuses = [match_status(item, heuristics) for item in artifacts]
    collector = _ConflictCollector()
    compared = 0

    for i in range(len(artifacts)):
        for j in range(i + 1, len(artifacts)):
            left, right = artifacts[i], artifacts[j]
            left_label, right_label = labels[i], labels[j]
            if not same_event_likely(left_label, right_label, heuristics):
                continue
            compared += 1

            left_id = left.artifact.artifact_id
            right_id = right.artifact.artifact_id
            pair_key = "::".join(sorted([left_id, right_id]))
            # Key off the label of the lower id so input order doesn't change ids
            first, second = (left_label, right_label) if left_id <= right_id else (right_label, left_label)
            label_key = first.normalized or second.normalized
            display = left_label.raw or right_label.raw
            evidence = f"Matching label: {display}"

            diff = date_diff_days(left.artifact.content_date_iso, right.artifact.content_date_iso)
            if diff is not None and diff >= heuristics.date_conflict_min_days:
                collector.add(
                    f"date:{pair_key}:{label_key}",
                    type=ConflictType.DATE,
                    severity=ConflictSeverity.HIGH,
                    summary=f'These records may conflict on when "{display}" occurred; review sources.',
                    artifacts=(_date_evidence(left), _date_evidence(right)),
                    details=ConflictDetails(
                        left_value=left.artifact.content_date_iso,
                        right_value=right.artifact.content_date_iso,
                        evidence=evidence,
                    ),
                )

            left_amount, right_amount = amounts[i], amounts[j]
            if _amounts_conflict(left_amount, right_amount):
                both_known = bool(left_amount.currency and right_amount.currency)
                collector.add(
                    f"amount:{pair_key}:{label_key}",
                    type=ConflictType.AMOUNT,
                    severity=ConflictSeverity.HIGH if both_known else ConflictSeverity.MEDIUM,
                    summary=f'These records appear inconsistent on the amount for "{display}"; review sources.',
                    artifacts=(
                        _text_evidence(left, left_amount.raw),
                        _text_evidence(right, right_amount.raw),
                    ),
                    details=ConflictDetails(
                        left_value=left_amount.raw,
                        right_value=right_amount.raw,
                        evidence=evidence,
                    ),
                )

            left_status, right_status = statuses[i], statuses[j]
            if (
                left_status and right_status
                and left_status.label == right_status.label
                and left_status.positive != right_status.positive
            ):
                collector.add(
                    f"status:{pair_key}:{left_status.label}:{label_key}",
                    type=ConflictType.STATUS_FACT,
                    severity=ConflictSeverity.MEDIUM,
                    summary=f"These records may conflict on whether the item was {left_status.label}; review sources.",
                    artifacts=(
                        _text_evidence(left, left_status.snippet),
                        _text_evidence(right, right_status.snippet),
                    ),
                    details=ConflictDetails(
                        left_value=left_status.describe(),
                        right_value=right_status.describe(),
                        evidence=evidence,
                    ),
                )

    ranked = sorted(collector.conflicts, key=lambda c: (-SEVERITY_RANK[c.severity], c.conflict_id))
    logger.debug(
        f"Compared {compared} same-event pair(s) of {len(artifacts)} artifacts, "
        f"found {len(ranked)} conflict(s), returning {min(len(ranked), heuristics.max_conflicts)}"
    )
    return ranked[:heuristics.max_conflicts]
