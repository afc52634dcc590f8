"""
Timeline quality report: coverage, missing fields, entities and conflicts
in one JSON-serializable structure, plus a markdown rendering.
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .conflicts import detect_potential_conflicts
from .dates import summarize_date_coverage
from .entities import build_entity_index
from .heuristics import HeuristicsConfig, default_heuristics
from .missing_info import compute_missing_info
from .models import TimelineArtifact

logger = logging.getLogger(__name__)

TOP_ENTITIES = 10


@dataclass
class QualityReport:
    generated_at_utc: str
    coverage: Dict[str, int]
    missing_info: Dict[str, List[str]]
    missing_counts: Dict[str, int]
    conflicts: List[Dict[str, Any]] = field(default_factory=list)
    top_entities: List[Dict[str, Any]] = field(default_factory=list)
    status: str = "OK"  # OK, WARN
    status_reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_quality_report(
    artifacts: List[TimelineArtifact],
    heuristics: Optional[HeuristicsConfig] = None
) -> QualityReport:
    heuristics = heuristics or default_heuristics()
    coverage = summarize_date_coverage(artifacts)
    missing = compute_missing_info(artifacts, heuristics)
    conflicts = detect_potential_conflicts(artifacts, heuristics)
    entity_index = build_entity_index(artifacts)

    report = QualityReport(
        generated_at_utc=datetime.now(timezone.utc).isoformat(),
        coverage=coverage.to_dict(),
        missing_info=missing.to_dict(),
        missing_counts=missing.counts(),
        conflicts=[c.to_dict() for c in conflicts],
        top_entities=entity_index.top(TOP_ENTITIES),
    )

    reasons = []
    if conflicts:
        reasons.append(f"{len(conflicts)} potential conflict(s)")
    if coverage.undated:
        reasons.append(f"{coverage.undated} undated artifact(s)")
    if reasons:
        report.status = "WARN"
        report.status_reason = "; ".join(reasons)
    else:
        report.status_reason = "No conflicts and every artifact is dated"

    logger.info(f"Quality report over {coverage.total} artifacts: {report.status} ({report.status_reason})")
    return report


def write_quality_report(report: QualityReport, output_path: Path) -> None:
    """Write report to JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)


def format_coverage_table(coverage: Dict[str, int], missing_counts: Dict[str, int]) -> str:
    lines = [
        "| Metric | Value |",
        "|--------|-------|",
        f"| Artifacts | {coverage.get('total', 0)} |",
        f"| Dated | {coverage.get('dated', 0)} |",
        f"| Undated | {coverage.get('undated', 0)} |",
    ]
    for name in ("entities", "location", "amount", "date"):
        lines.append(f"| Missing {name} | {missing_counts.get(name, 0)} |")
    return "\n".join(lines)


def format_conflicts_table(conflicts: List[Dict[str, Any]]) -> str:
    if not conflicts:
        return "*No potential conflicts detected.*"

    lines = [
        "| Severity | Type | Artifacts | Left | Right |",
        "|----------|------|-----------|------|-------|",
    ]
    for c in conflicts:
        ids = " / ".join(a["artifact_id"] for a in c["artifacts"])
        details = c.get("details", {})
        lines.append(
            f"| {c['severity']} | {c['type']} | {ids} | "
            f"{details.get('left_value') or '-'} | {details.get('right_value') or '-'} |"
        )
    return "\n".join(lines)


def render_quality_markdown(report: QualityReport) -> str:
    sections = [
        "# Timeline Quality Report",
        "",
        f"*Generated: {report.generated_at_utc}*",
        "",
        f"**Status:** {report.status} - {report.status_reason}",
        "",
        "## Coverage",
        "",
        format_coverage_table(report.coverage, report.missing_counts),
        "",
        "## Potential Conflicts",
        "",
        format_conflicts_table(report.conflicts),
        "",
    ]
    if report.top_entities:
        sections.extend(["## Top Entities", ""])
        for entry in report.top_entities:
            sections.append(f"- {entry['name']} ({entry['count']})")
        sections.append("")
    return "\n".join(sections)
