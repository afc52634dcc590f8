"""
Entity extraction and entity-based filtering.

Entity names come from the normalized structured containers on each
artifact, followed by user-annotated entities. Filtering falls back to a
text search when the structured set has no exact hit.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import unquote

from .heuristics import HeuristicsConfig, default_heuristics
from .models import ArtifactRecord, TimelineArtifact
from .text import join_non_blank, normalize_whitespace

# sourceMetadata fields included in the fallback text search
HAYSTACK_METADATA_FIELDS = ("from", "to", "subject", "driveName")


@dataclass
class EntityIndex:
    entities: List[str] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)

    def top(self, limit: int) -> List[Dict[str, object]]:
        return [{"name": name, "count": self.counts[name]} for name in self.entities[:limit]]


def extract_entity_strings(item: TimelineArtifact) -> List[str]:
    """Deduplicated entity names, structured entities first, then user ones."""
    seen = set()
    names = []
    for ref in item.artifact.entity_refs:
        if ref.name not in seen:
            seen.add(ref.name)
            names.append(ref.name)
    return names


def build_entity_index(artifacts: List[TimelineArtifact]) -> EntityIndex:
    """Count artifacts per entity; order by count desc then name."""
    counts: Dict[str, int] = {}
    for item in artifacts:
        for name in extract_entity_strings(item):
            counts[name] = counts.get(name, 0) + 1
    entities = sorted(counts, key=lambda name: (-counts[name], name))
    return EntityIndex(entities=entities, counts=counts)


def build_text_haystack(artifact: ArtifactRecord) -> str:
    metadata_values = [artifact.source_metadata.get(key) for key in HAYSTACK_METADATA_FIELDS]
    return join_non_blank(
        [artifact.summary, artifact.title, *artifact.highlights, *metadata_values]
    ).lower()


def filter_artifacts_by_entity(
    artifacts: List[TimelineArtifact],
    entity: str,
    heuristics: Optional[HeuristicsConfig] = None
) -> List[TimelineArtifact]:
    """
    Keep artifacts that mention ``entity``.

    Tries a case-insensitive exact match on the extracted entity set first.
    Otherwise searches summary, title, highlights and select metadata.
    Short queries need a word-boundary match so "cat" doesn't hit
    "cataloging"; longer ones use substring containment.
    A blank query returns every artifact.
    """
    heuristics = heuristics or default_heuristics()
    query = normalize_whitespace(entity or "")
    if not query:
        return list(artifacts)

    query_lower = query.lower()
    short_regex = None
    if len(query) <= heuristics.short_query_max_length:
        short_regex = re.compile(rf"\b{re.escape(query)}\b", re.IGNORECASE)

    matched = []
    for item in artifacts:
        if query_lower in (name.lower() for name in extract_entity_strings(item)):
            matched.append(item)
            continue
        haystack = build_text_haystack(item.artifact)
        if short_regex is not None:
            if short_regex.search(haystack):
                matched.append(item)
        elif query_lower in haystack:
            matched.append(item)
    return matched


def normalize_entity_query(value: Optional[str]) -> Optional[str]:
    """Decode a percent-encoded query value; None when blank."""
    if not value:
        return None
    return normalize_whitespace(unquote(value)) or None
