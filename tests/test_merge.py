"""
Tests for patch / replace / field-value merge semantics.

Run:
    pytest tests/test_merge.py -v
"""
import copy
from datetime import datetime, timezone

from projmeta.metadata import merge
from projmeta.metadata.validator import PayloadKind, to_document, validate


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

STORED = {
    "budget": {"allocated": 1000.0, "spent": 0.0, "currency": "USD"},
    "tags": ["alpha", "beta"],
    "customFields": [
        {"id": "stage", "name": "Stage", "type": "select", "options": ["Draft", "Final"], "order": 0, "value": "Draft"},
        {"id": "owner", "name": "Owner", "type": "text", "order": 1},
    ],
    "legacyNotes": "kept",
    "lastModified": "2024-01-01T00:00:00+00:00",
    "lastModifiedBy": "someone-else",
}


def without_stamps(document):
    return {k: v for k, v in document.items() if k not in ("lastModified", "lastModifiedBy")}


class TestPatch:
    def test_untouched_keys_survive(self):
        result = merge.patch(STORED, {"tags": ["gamma"]}, "user-1", now=NOW)
        assert result["tags"] == ["gamma"]
        assert result["budget"] == STORED["budget"]
        assert result["customFields"] == STORED["customFields"]
        assert result["legacyNotes"] == "kept"

    def test_lists_are_replaced_not_merged(self):
        result = merge.patch(STORED, {"tags": []}, "user-1", now=NOW)
        assert result["tags"] == []

    def test_result_is_stamped(self):
        result = merge.patch(STORED, {}, "user-1", now=NOW)
        assert result["lastModified"] == NOW.isoformat()
        assert result["lastModifiedBy"] == "user-1"

    def test_stored_document_is_not_mutated(self):
        before = copy.deepcopy(STORED)
        merge.patch(STORED, {"budget": {"allocated": 1.0}}, "user-1", now=NOW)
        assert STORED == before

    def test_patch_from_validated_partial_applies_exactly_supplied_keys(self):
        partial = to_document(
            validate({"tags": ["x"], "bogus": True}, PayloadKind.FULL_METADATA), partial=True
        )
        result = merge.patch(STORED, partial, "user-1", now=NOW)
        assert without_stamps(result) == dict(without_stamps(STORED), tags=["x"])

    def test_empty_stored_document(self):
        result = merge.patch(None, {"tags": ["x"]}, "user-1", now=NOW)
        assert without_stamps(result) == {"tags": ["x"]}


class TestReplace:
    def test_known_keys_come_only_from_new_document(self):
        result = merge.replace(STORED, {"tags": ["only"]}, "user-2", now=NOW)
        assert "budget" not in result
        assert "customFields" not in result
        assert result["tags"] == ["only"]

    def test_keys_outside_metadata_shape_are_carried(self):
        result = merge.replace(STORED, {"tags": []}, "user-2", now=NOW)
        assert result["legacyNotes"] == "kept"

    def test_previous_stamp_is_overwritten(self):
        result = merge.replace(STORED, {}, "user-2", now=NOW)
        assert result["lastModifiedBy"] == "user-2"
        assert result["lastModified"] == NOW.isoformat()

    def test_replacing_twice_is_idempotent(self):
        full = to_document(validate({"tags": ["a"], "budget": {"allocated": 3}}, PayloadKind.FULL_METADATA))
        once = merge.replace(STORED, full, "user-2", now=NOW)
        twice = merge.replace(once, full, "user-2", now=NOW)
        assert once == twice


class TestPatchFieldValues:
    def test_only_values_change(self):
        result = merge.patch_field_values(STORED, {"stage": "Final"}, "user-3", now=NOW)
        stage, owner = result["customFields"]
        assert stage == dict(STORED["customFields"][0], value="Final")
        assert owner == STORED["customFields"][1]

    def test_other_keys_are_untouched(self):
        result = merge.patch_field_values(STORED, {"owner": "Dana"}, "user-3", now=NOW)
        assert result["budget"] == STORED["budget"]
        assert result["tags"] == STORED["tags"]
        assert result["lastModifiedBy"] == "user-3"

    def test_stored_document_is_not_mutated(self):
        before = copy.deepcopy(STORED)
        merge.patch_field_values(STORED, {"stage": "Final"}, "user-3", now=NOW)
        assert STORED == before
