"""
Payload validation for project metadata.

validate() is the single entry point. The payload kind decides which shape
is enforced:

- FULL_METADATA: a whole (or partial) ProjectMetadata document
- MILESTONES: a bare list of milestones
- CUSTOM_FIELDS: a bare list of custom field definitions
- FIELD_VALUES: a {field id: raw value} map checked against existing fields

Errors are collected across the whole payload and raised together as one
MetadataValidationError; nothing is returned on partial success.
"""
import uuid
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, TypeAdapter, ValidationError

from projmeta.core.errors import FieldError, MetadataValidationError, NotFoundError
from projmeta.metadata.fields import FieldValueError, validate_value
from projmeta.schemas.metadata import CustomField, Milestone, ProjectMetadata


class PayloadKind(str, Enum):
    FULL_METADATA = "full-metadata"
    MILESTONES = "milestones-array"
    CUSTOM_FIELDS = "custom-fields-array"
    FIELD_VALUES = "field-values-map"


_milestone_list = TypeAdapter(List[Milestone])
_custom_field_list = TypeAdapter(List[CustomField])


def _join_path(parts: Iterable[Any]) -> str:
    return ".".join(str(part) for part in parts) or "payload"


def _field_errors(exc: ValidationError, prefix: Sequence[Any] = ()) -> List[FieldError]:
    return [
        FieldError(field=_join_path(tuple(prefix) + tuple(err["loc"])), message=err["msg"])
        for err in exc.errors()
    ]


def _generate_field_id(taken: set) -> str:
    while True:
        candidate = f"field_{uuid.uuid4().hex[:12]}"
        if candidate not in taken:
            return candidate


def assign_field_identity(fields: List[CustomField], path: str = "customFields") -> List[CustomField]:
    """
    Give every field an id and an order.

    Missing ids are generated unique among the submitted set; missing orders
    default to the field's list index. Explicit ids must not repeat.

    Raises:
        MetadataValidationError: If two fields share an explicit id
    """
    errors = []
    seen = set()
    for index, field in enumerate(fields):
        if not field.id:
            continue
        if field.id in seen:
            errors.append(FieldError(
                field=f"{path}.{index}.id",
                message=f"duplicate custom field id '{field.id}'",
            ))
        seen.add(field.id)
    if errors:
        raise MetadataValidationError(errors)

    assigned = []
    for index, field in enumerate(fields):
        updates = {}
        if not field.id:
            updates["id"] = _generate_field_id(seen)
            seen.add(updates["id"])
        if field.order is None:
            updates["order"] = index
        assigned.append(field.model_copy(update=updates) if updates else field)
    return assigned


def _validate_full(payload: Any) -> ProjectMetadata:
    try:
        metadata = ProjectMetadata.model_validate(payload)
    except ValidationError as exc:
        raise MetadataValidationError(_field_errors(exc))

    # Only touch customFields when the payload supplied them, so partial
    # documents keep their exact set of explicitly provided keys
    if "customFields" in metadata.model_fields_set:
        metadata.customFields = assign_field_identity(metadata.customFields)
    return metadata


def _validate_milestones(payload: Any) -> List[Milestone]:
    try:
        return _milestone_list.validate_python(payload)
    except ValidationError as exc:
        raise MetadataValidationError(_field_errors(exc, prefix=("milestones",)))


def _validate_custom_fields(payload: Any) -> List[CustomField]:
    try:
        fields = _custom_field_list.validate_python(payload)
    except ValidationError as exc:
        raise MetadataValidationError(_field_errors(exc, prefix=("customFields",)))
    return assign_field_identity(fields)


def _validate_field_values(payload: Any, existing_fields: Sequence[Any]) -> Dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise MetadataValidationError([
            FieldError(field="fieldValues", message="Field values must be provided as an object")
        ])

    definitions = {}
    for field in existing_fields or ():
        field_id = field.get("id") if isinstance(field, Mapping) else field.id
        if field_id:
            definitions[field_id] = field

    for field_id in payload:
        if field_id not in definitions:
            raise NotFoundError(f"custom field '{field_id}' not found")

    validated = {}
    errors = []
    for field_id, raw_value in payload.items():
        definition = definitions[field_id]
        if not isinstance(definition, CustomField):
            try:
                definition = CustomField.model_validate(definition)
            except ValidationError:
                errors.append(FieldError(
                    field=f"fieldValues.{field_id}",
                    message=f"custom field '{field_id}' has an invalid definition",
                ))
                continue
        try:
            validated[field_id] = validate_value(definition, raw_value)
        except FieldValueError as exc:
            errors.extend(
                FieldError(field=f"fieldValues.{field_id}", message=error.message)
                for error in exc.errors
            )
    if errors:
        raise MetadataValidationError(errors)
    return validated


def validate(payload: Any, kind: PayloadKind, existing_fields: Optional[Sequence[Any]] = None):
    """
    Validate a raw payload of the given kind.

    Args:
        payload: Decoded JSON body (or the relevant part of it)
        kind: Which shape to enforce
        existing_fields: The project's stored custom fields; only used by
            FIELD_VALUES to look up each field's definition

    Returns:
        ProjectMetadata for FULL_METADATA, a list of Milestone or CustomField
        for the array kinds, and a {field id: coerced value} dict for
        FIELD_VALUES.

    Raises:
        MetadataValidationError: With every field-level problem found
        NotFoundError: If FIELD_VALUES names a field id the project lacks
    """
    kind = PayloadKind(kind)
    if kind is PayloadKind.FULL_METADATA:
        return _validate_full(payload)
    if kind is PayloadKind.MILESTONES:
        return _validate_milestones(payload)
    if kind is PayloadKind.CUSTOM_FIELDS:
        return _validate_custom_fields(payload)
    return _validate_field_values(payload, existing_fields)


def to_document(model: BaseModel, partial: bool = False) -> Dict[str, Any]:
    """
    Convert a validated model into the JSON document that gets stored.

    None values are dropped and nested defaults filled in. With partial=True
    only the top-level keys the client explicitly supplied are kept, which is
    what patch semantics need.
    """
    document = model.model_dump(mode="json", exclude_none=True)
    if partial:
        document = {key: value for key, value in document.items() if key in model.model_fields_set}
    return document


def to_documents(items: Iterable[BaseModel]) -> List[Dict[str, Any]]:
    return [item.model_dump(mode="json", exclude_none=True) for item in items]
