"""Tests for permissive artifact parsing."""

import logging

from src.timeline_quality.models import (
    ArtifactRecord,
    EntitySource,
    TimelineArtifact,
    load_timeline_artifacts,
)


class TestArtifactRecord:
    def test_parses_camel_case_fields(self):
        record = ArtifactRecord.from_dict({
            "artifactId": "a1",
            "title": "Title",
            "summary": "Summary",
            "contentDateISO": "2026-01-05T00:00:00Z",
            "highlights": ["one", 2, "two"],
            "sourceMetadata": {"subject": "Re: invoice"},
            "driveFileId": "drive-1",
            "userAnnotations": {"entities": ["Alice"], "location": "Paris", "note": "checked"},
        })
        assert record.artifact_id == "a1"
        assert record.content_date_iso == "2026-01-05T00:00:00Z"
        assert record.highlights == ["one", "two"]
        assert record.drive_file_id == "drive-1"
        assert record.user_annotations.location == "Paris"
        assert record.user_annotations.amount is None
        assert record.source_label() == "Re: invoice"

    def test_wrong_types_dropped(self):
        record = ArtifactRecord.from_dict({
            "artifactId": "a1",
            "title": None,
            "summary": 12,
            "contentDateISO": 20260105,
            "highlights": "not a list",
            "sourceMetadata": ["bad"],
            "userAnnotations": "bad",
        })
        assert record.title == ""
        assert record.summary == ""
        assert record.content_date_iso is None
        assert record.highlights == []
        assert record.source_metadata == {}
        assert record.user_annotations.entities == []
        assert record.source_label() == ""

    def test_entity_refs_tagged_by_source(self):
        record = ArtifactRecord.from_dict({
            "artifactId": "a1",
            "entities": [{"name": "Acme", "type": "org"}],
            "structured": {"entities": ["Bob"]},
            "extracted": {"entities": [{"name": "Carol"}]},
            "userAnnotations": {"entities": ["Dave"]},
        })
        assert [(r.name, r.source) for r in record.entity_refs] == [
            ("Acme", EntitySource.DIRECT),
            ("Bob", EntitySource.STRUCTURED),
            ("Carol", EntitySource.EXTRACTED),
            ("Dave", EntitySource.USER),
        ]
        assert record.entity_refs[0].type == "org"
        assert record.has_direct_entities is True

    def test_direct_entities_flag_counts_raw_list(self):
        record = ArtifactRecord.from_dict({"artifactId": "a1", "entities": [42]})
        assert record.has_direct_entities is True
        assert record.entity_refs == []


class TestLoadTimelineArtifacts:
    def test_entry_key_defaults_to_artifact_id(self):
        item = TimelineArtifact.from_dict({"artifact": {"artifactId": "a1"}})
        assert item.entry_key == "a1"

    def test_skips_unusable_records(self, caplog):
        parsed = TimelineArtifact.from_dict({"entryKey": "k0", "artifact": {"artifactId": "a0"}})
        records = [
            {"entryKey": "k1", "artifact": {"artifactId": "a1"}},
            {"entryKey": "k2"},
            {"entryKey": "k3", "artifact": {"title": "no id"}},
            "garbage",
            parsed,
        ]
        with caplog.at_level(logging.WARNING):
            items = load_timeline_artifacts(records)

        assert [i.entry_key for i in items] == ["k1", "k0"]
        assert "Skipped 3 record(s)" in caplog.text
