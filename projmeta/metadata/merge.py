"""
Update semantics for stored metadata documents.

All three operations take the stored document plus an already validated
update and return a new document; the stored one is never modified. Each
result is stamped with lastModified (UTC ISO-8601) and lastModifiedBy.

Note: there is no version check between read and write. Two requests that
read the same document and both write will race, and the later write wins
for every top-level key it carries.
"""
import copy
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from projmeta.schemas.metadata import METADATA_KEYS, PROVENANCE_KEYS


def _stamp(document: Dict[str, Any], actor: str, now: Optional[datetime]) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    document["lastModified"] = now.isoformat()
    document["lastModifiedBy"] = actor
    return document


def patch(
    existing: Optional[Mapping[str, Any]],
    partial: Mapping[str, Any],
    actor: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Shallow merge: each top-level key in partial replaces the stored key
    wholesale (lists included); keys absent from partial are kept.
    """
    merged = copy.deepcopy(dict(existing or {}))
    merged.update(copy.deepcopy(dict(partial)))
    return _stamp(merged, actor, now)


def replace(
    existing: Optional[Mapping[str, Any]],
    full: Mapping[str, Any],
    actor: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Substitute the stored document with full.

    Stored keys that the metadata shape cannot express (written by other
    code paths) survive; every key the shape knows comes only from full.
    """
    carried = {
        key: copy.deepcopy(value)
        for key, value in (existing or {}).items()
        if key not in METADATA_KEYS and key not in PROVENANCE_KEYS
    }
    carried.update(copy.deepcopy(dict(full)))
    return _stamp(carried, actor, now)


def patch_field_values(
    existing: Optional[Mapping[str, Any]],
    values: Mapping[str, Any],
    actor: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Overwrite only the value of each stored custom field whose id is in
    values. Name, type, options, order and the rest stay as stored.
    """
    updated = copy.deepcopy(dict(existing or {}))
    fields = []
    for field in updated.get("customFields") or []:
        if field.get("id") in values:
            field = dict(field, value=copy.deepcopy(values[field["id"]]))
        fields.append(field)
    updated["customFields"] = fields
    return _stamp(updated, actor, now)
