"""
Data models for the timeline quality engine.

Artifacts arrive as persisted JSON (camelCase keys) and are parsed once
into these dataclasses. Parsing is permissive: fields with the wrong shape
are dropped, never raised on. Result types expose ``to_dict()`` so callers
can serialize them directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from .text import normalize_whitespace

logger = logging.getLogger(__name__)


class EntitySource(str, Enum):
    """Where an entity name came from on the persisted artifact."""
    DIRECT = "direct"           # artifact.entities
    STRUCTURED = "structured"   # artifact.structured.entities
    EXTRACTED = "extracted"     # artifact.extracted.entities
    USER = "user"               # artifact.userAnnotations.entities


class ConflictType(str, Enum):
    DATE = "date"
    AMOUNT = "amount"
    BOOLEAN_FACT = "boolean_fact"
    NAMED_ENTITY = "named_entity"
    STATUS_FACT = "status_fact"


class ConflictSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_RANK = {
    ConflictSeverity.HIGH: 3,
    ConflictSeverity.MEDIUM: 2,
    ConflictSeverity.LOW: 1,
}


@dataclass(frozen=True)
class EntityRef:
    name: str
    source: EntitySource
    type: Optional[str] = None


@dataclass
class UserAnnotations:
    entities: List[str] = field(default_factory=list)
    location: Optional[str] = None
    amount: Optional[str] = None
    note: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "UserAnnotations":
        if not isinstance(data, dict):
            return cls()
        entities = data.get("entities")
        return cls(
            entities=[e for e in entities if isinstance(e, str)] if isinstance(entities, list) else [],
            location=_optional_str(data.get("location")),
            amount=_optional_str(data.get("amount")),
            note=_optional_str(data.get("note")),
        )


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _coerce_entity(value: Any, source: EntitySource) -> Optional[EntityRef]:
    """Accept a bare string or an object exposing a string ``name``."""
    entity_type = None
    if isinstance(value, str):
        name = value
    elif isinstance(value, dict) and isinstance(value.get("name"), str):
        name = value["name"]
        entity_type = _optional_str(value.get("type"))
    else:
        return None
    name = normalize_whitespace(name)
    if not name:
        return None
    return EntityRef(name=name, source=source, type=entity_type)


def _container_entities(data: Dict[str, Any], key: str) -> List[Any]:
    container = data.get(key)
    if not isinstance(container, dict):
        return []
    entities = container.get("entities")
    return entities if isinstance(entities, list) else []


def normalize_entity_refs(data: Dict[str, Any], annotations: UserAnnotations) -> List[EntityRef]:
    """
    Flatten every entity container on a persisted artifact into EntityRefs.

    Order: direct list, ``structured.entities``, ``extracted.entities``,
    then user annotation entities. Unusable values are dropped.
    """
    direct = data.get("entities")
    raw: List[Tuple[Any, EntitySource]] = []
    raw.extend((v, EntitySource.DIRECT) for v in (direct if isinstance(direct, list) else []))
    raw.extend((v, EntitySource.STRUCTURED) for v in _container_entities(data, "structured"))
    raw.extend((v, EntitySource.EXTRACTED) for v in _container_entities(data, "extracted"))
    raw.extend((v, EntitySource.USER) for v in annotations.entities)

    refs = []
    for value, source in raw:
        ref = _coerce_entity(value, source)
        if ref is not None:
            refs.append(ref)
    return refs


@dataclass
class ArtifactRecord:
    """A summarized document or email, read-only for this engine."""
    artifact_id: str
    title: str = ""
    summary: str = ""
    content_date_iso: Optional[str] = None
    highlights: List[str] = field(default_factory=list)
    entity_refs: List[EntityRef] = field(default_factory=list)
    has_direct_entities: bool = False
    user_annotations: UserAnnotations = field(default_factory=UserAnnotations)
    source_metadata: Dict[str, Any] = field(default_factory=dict)
    drive_file_id: Optional[str] = None
    created_at_iso: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArtifactRecord":
        annotations = UserAnnotations.from_dict(data.get("userAnnotations"))
        direct = data.get("entities")
        highlights = data.get("highlights")
        metadata = data.get("sourceMetadata")
        return cls(
            artifact_id=str(data.get("artifactId") or ""),
            title=data.get("title") if isinstance(data.get("title"), str) else "",
            summary=data.get("summary") if isinstance(data.get("summary"), str) else "",
            content_date_iso=_optional_str(data.get("contentDateISO")),
            highlights=[h for h in highlights if isinstance(h, str)] if isinstance(highlights, list) else [],
            entity_refs=normalize_entity_refs(data, annotations),
            has_direct_entities=isinstance(direct, list) and len(direct) > 0,
            user_annotations=annotations,
            source_metadata=metadata if isinstance(metadata, dict) else {},
            drive_file_id=_optional_str(data.get("driveFileId")),
            created_at_iso=_optional_str(data.get("createdAtISO")),
        )

    def fact_text(self) -> str:
        """Title and summary, the surface scanned for amounts and status words."""
        return f"{self.title} {self.summary}"

    def source_label(self) -> str:
        subject = self.source_metadata.get("subject")
        if isinstance(subject, str) and subject:
            return subject
        return self.title


@dataclass
class TimelineArtifact:
    """A storage entry key paired with its artifact."""
    entry_key: str
    artifact: ArtifactRecord

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimelineArtifact":
        artifact = ArtifactRecord.from_dict(data.get("artifact") or {})
        entry_key = data.get("entryKey")
        return cls(
            entry_key=entry_key if isinstance(entry_key, str) else artifact.artifact_id,
            artifact=artifact,
        )


def load_timeline_artifacts(records: Iterable[Any]) -> List[TimelineArtifact]:
    """
    Build TimelineArtifacts from raw ``{entryKey, artifact}`` dicts.

    Instances already parsed are passed through. Records without an
    artifact object or an artifactId are skipped.
    """
    items: List[TimelineArtifact] = []
    skipped = 0
    for record in records:
        if isinstance(record, TimelineArtifact):
            items.append(record)
            continue
        if not isinstance(record, dict) or not isinstance(record.get("artifact"), dict):
            skipped += 1
            continue
        item = TimelineArtifact.from_dict(record)
        if not item.artifact.artifact_id:
            skipped += 1
            continue
        items.append(item)
    if skipped:
        logger.warning(f"Skipped {skipped} record(s) without a usable artifact")
    return items


@dataclass(frozen=True)
class EntityLabel:
    """Short event label derived from an artifact, used for same-event scoring."""
    raw: str
    normalized: str
    tokens: FrozenSet[str]


@dataclass
class MissingInfoResult:
    missing_entities_ids: List[str] = field(default_factory=list)
    missing_location_ids: List[str] = field(default_factory=list)
    missing_amount_ids: List[str] = field(default_factory=list)
    missing_date_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return asdict(self)

    def counts(self) -> Dict[str, int]:
        return {
            "entities": len(self.missing_entities_ids),
            "location": len(self.missing_location_ids),
            "amount": len(self.missing_amount_ids),
            "date": len(self.missing_date_ids),
        }


@dataclass
class DateCoverage:
    total: int
    dated: int
    undated: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class ConflictArtifactEvidence:
    artifact_id: str
    title: Optional[str] = None
    content_date_iso: Optional[str] = None
    source_label: Optional[str] = None
    evidence_snippet: Optional[str] = None


@dataclass
class ConflictDetails:
    left_value: Optional[str] = None
    right_value: Optional[str] = None
    evidence: Optional[str] = None


@dataclass
class PotentialConflict:
    conflict_id: str
    type: ConflictType
    severity: ConflictSeverity
    summary: str
    artifacts: Tuple[ConflictArtifactEvidence, ConflictArtifactEvidence]
    details: ConflictDetails = field(default_factory=ConflictDetails)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conflict_id": self.conflict_id,
            "type": self.type.value,
            "severity": self.severity.value,
            "summary": self.summary,
            "artifacts": [asdict(a) for a in self.artifacts],
            "details": asdict(self.details),
        }
