"""
Command-line interface for the timeline quality engine.

Reads artifacts from a JSON/JSONL file and prints coverage, missing
fields, entities, conflicts or a full report.

    python -m src.timeline_quality.cli --input artifacts.json report --format md
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from src.config.settings import get_settings
from src.logging_config import configure_logging

from . import conflicts
from . import dates
from . import entities
from . import heuristics as heuristics_mod
from . import loader
from . import missing_info
from . import report


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _load(args: argparse.Namespace):
    """Resolve heuristics and load the capped artifact list."""
    settings = get_settings()
    heuristics_path = args.heuristics or settings.heuristics_path
    if heuristics_path:
        config = heuristics_mod.load_heuristics(Path(heuristics_path))
    else:
        config = heuristics_mod.default_heuristics()
    items = loader.load_artifacts_file(Path(args.input), max_artifacts=settings.max_artifacts)
    return items, config


def cmd_coverage(args: argparse.Namespace) -> int:
    """Show dated/undated counts."""
    try:
        items, _ = _load(args)
        _print_json(dates.summarize_date_coverage(items).to_dict())
        if args.verbose:
            for group in dates.group_timeline_artifacts(items):
                print(f"  {group.label}: {len(group.artifacts)}")
        return 0

    except (loader.ArtifactLoadError, heuristics_mod.HeuristicsConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_missing(args: argparse.Namespace) -> int:
    """Show artifacts missing entities, location, amount or date."""
    try:
        items, config = _load(args)
        result = missing_info.compute_missing_info(items, config)
        _print_json(result.to_dict() if args.verbose else result.counts())
        return 0

    except (loader.ArtifactLoadError, heuristics_mod.HeuristicsConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_entities(args: argparse.Namespace) -> int:
    """List entities, or artifacts matching --query."""
    try:
        items, config = _load(args)
        query = entities.normalize_entity_query(args.query)
        if query:
            matched = entities.filter_artifacts_by_entity(items, query, config)
            _print_json([item.artifact.artifact_id for item in matched])
        else:
            index = entities.build_entity_index(items)
            _print_json(index.top(args.limit))
        return 0

    except (loader.ArtifactLoadError, heuristics_mod.HeuristicsConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_conflicts(args: argparse.Namespace) -> int:
    """Detect potential cross-document conflicts."""
    try:
        items, config = _load(args)
        found = conflicts.detect_potential_conflicts(items, config)
        if args.verbose:
            _print_json([c.to_dict() for c in found])
        else:
            print(f"Found {len(found)} potential conflict(s)")
            for c in found:
                ids = " / ".join(a.artifact_id for a in c.artifacts)
                print(f"  [{c.severity.value}] {c.type.value} {ids}: {c.summary}")
        return 0

    except (loader.ArtifactLoadError, heuristics_mod.HeuristicsConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_report(args: argparse.Namespace) -> int:
    """Build the full quality report."""
    try:
        items, config = _load(args)
        quality = report.build_quality_report(items, config)

        if args.format == "md":
            content = report.render_quality_markdown(quality)
            if args.output:
                Path(args.output).parent.mkdir(parents=True, exist_ok=True)
                Path(args.output).write_text(content)
                print(f"Report written to {args.output}")
            else:
                print(content)
        elif args.output:
            report.write_quality_report(quality, Path(args.output))
            print(f"Report written to {args.output}")
        else:
            _print_json(quality.to_dict())
        return 0

    except (loader.ArtifactLoadError, heuristics_mod.HeuristicsConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="timeline-quality",
        description="Timeline quality and cross-document consistency checks"
    )

    # Global options
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Artifacts file (JSON list, {\"artifacts\": [...]}, or JSONL)"
    )
    parser.add_argument(
        "--heuristics",
        help="Heuristics YAML (overrides TIMELINE_QUALITY_HEURISTICS)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    coverage_parser = subparsers.add_parser("coverage", help="Dated vs undated counts")
    coverage_parser.set_defaults(func=cmd_coverage)

    missing_parser = subparsers.add_parser("missing", help="Missing entities/location/amount/date")
    missing_parser.set_defaults(func=cmd_missing)

    entities_parser = subparsers.add_parser("entities", help="Entity index or entity filter")
    entities_parser.add_argument("--query", "-q", help="Only list artifacts mentioning this entity")
    entities_parser.add_argument("--limit", type=int, default=25, help="Max entities to list")
    entities_parser.set_defaults(func=cmd_entities)

    conflicts_parser = subparsers.add_parser("conflicts", help="Potential fact conflicts")
    conflicts_parser.set_defaults(func=cmd_conflicts)

    report_parser = subparsers.add_parser("report", help="Full quality report")
    report_parser.add_argument("--format", choices=["json", "md"], default="json")
    report_parser.add_argument("--output", "-o", help="Output file")
    report_parser.set_defaults(func=cmd_report)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
