"""
Date classification for timeline artifacts.

Splits artifacts into dated day groups (UTC calendar day of the content
date) and an undated bucket. Reused by the missing-field detector and the
quality report.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .models import DateCoverage, TimelineArtifact
from .text import first_sentence

UNDATED_KEY = "undated"
UNDATED_LABEL = "Undated"


@dataclass
class DateClassification:
    """Dated day groups (ascending day key) plus the undated bucket."""
    dated: Dict[str, List[TimelineArtifact]] = field(default_factory=dict)
    undated: List[TimelineArtifact] = field(default_factory=list)

    @property
    def dated_count(self) -> int:
        return sum(len(items) for items in self.dated.values())


@dataclass
class TimelineGroup:
    key: str
    label: str
    artifacts: List[TimelineArtifact] = field(default_factory=list)


def parse_content_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 content date into an aware UTC datetime.

    Accepts a trailing 'Z'. Naive values are taken as UTC.

    Returns:
        datetime or None if absent or unparseable
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        # Offsets near year 1 or 9999 overflow on conversion
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def day_key(value: Optional[str]) -> Optional[str]:
    """YYYY-MM-DD of the UTC calendar day, or None."""
    parsed = parse_content_date(value)
    return parsed.strftime("%Y-%m-%d") if parsed else None


def format_day_label(key: str) -> str:
    """'2026-01-05' -> '5 Jan 2026'."""
    day = datetime.strptime(key, "%Y-%m-%d")
    return f"{day.day} {day.strftime('%b %Y')}"


def classify_by_date(artifacts: List[TimelineArtifact]) -> DateClassification:
    """
    Partition artifacts into dated day groups and an undated bucket.

    Within a day, artifacts sort by full timestamp then artifact_id.
    The undated bucket sorts by artifact_id.
    """
    buckets: Dict[str, List[tuple]] = {}
    undated: List[TimelineArtifact] = []

    for item in artifacts:
        parsed = parse_content_date(item.artifact.content_date_iso)
        if parsed is None:
            undated.append(item)
            continue
        buckets.setdefault(parsed.strftime("%Y-%m-%d"), []).append((parsed, item))

    result = DateClassification()
    for key in sorted(buckets):
        entries = sorted(buckets[key], key=lambda e: (e[0], e[1].artifact.artifact_id))
        result.dated[key] = [item for _, item in entries]
    result.undated = sorted(undated, key=lambda item: item.artifact.artifact_id)
    return result


def group_timeline_artifacts(artifacts: List[TimelineArtifact]) -> List[TimelineGroup]:
    """Labelled timeline groups, dated days first, then 'Undated' if any."""
    classification = classify_by_date(artifacts)
    groups = [
        TimelineGroup(key=key, label=format_day_label(key), artifacts=items)
        for key, items in classification.dated.items()
    ]
    if classification.undated:
        groups.append(TimelineGroup(key=UNDATED_KEY, label=UNDATED_LABEL, artifacts=classification.undated))
    return groups


def get_undated_artifacts(artifacts: List[TimelineArtifact]) -> List[TimelineArtifact]:
    return classify_by_date(artifacts).undated


def summarize_date_coverage(artifacts: List[TimelineArtifact]) -> DateCoverage:
    undated = len(get_undated_artifacts(artifacts))
    total = len(artifacts)
    return DateCoverage(total=total, dated=max(0, total - undated), undated=undated)


def timeline_card_title(item: TimelineArtifact) -> str:
    return first_sentence(item.artifact.summary) or item.artifact.title or "Untitled summary"
