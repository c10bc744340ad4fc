"""
Custom field value validation.

Each custom field type maps to one validator in FIELD_VALIDATORS. A validator
receives the field definition and a non-empty raw value and returns the
coerced value or raises FieldValueError. validate_value handles the
required/empty rules that are shared by every type.
"""
import math
from typing import Any, Callable, Dict, Mapping, Union

from projmeta.core.errors import FieldError, MetadataValidationError
from projmeta.schemas.metadata import CustomField, CustomFieldType, DATE_PATTERN


class FieldValueError(MetadataValidationError):
    """A single custom field value was rejected."""

    def __init__(self, field_name: str, message: str):
        super().__init__([FieldError(field=field_name, message=message)])
        self.field_name = field_name


FieldDefinition = Union[CustomField, Mapping[str, Any]]


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _validate_text(field: CustomField, value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _validate_number(field: CustomField, value: Any) -> Union[int, float]:
    if isinstance(value, bool):
        number = float(int(value))
    elif isinstance(value, str) and "_" in value:
        # Digit separators ("1_000") are accepted by float() only
        number = math.nan
    elif isinstance(value, (int, float, str)):
        try:
            number = float(value)
        except (ValueError, OverflowError):
            number = math.nan
    else:
        number = math.nan

    if not math.isfinite(number):
        raise FieldValueError(field.name, f"field '{field.name}' must be a number")
    return int(number) if number.is_integer() else number


def _validate_date(field: CustomField, value: Any) -> str:
    # Pattern only; impossible dates like 2024-02-30 pass
    if isinstance(value, str) and DATE_PATTERN.match(value):
        return value
    raise FieldValueError(field.name, f"field '{field.name}' must be a valid date (YYYY-MM-DD)")


def _validate_boolean(field: CustomField, value: Any) -> bool:
    return bool(value)


def _validate_select(field: CustomField, value: Any) -> Any:
    options = field.options or []
    if value not in options:
        raise FieldValueError(
            field.name, f"field '{field.name}' must be one of: {', '.join(options)}"
        )
    return value


def _validate_multiselect(field: CustomField, value: Any) -> list:
    if not isinstance(value, (list, tuple)):
        raise FieldValueError(field.name, f"field '{field.name}' must be an array")

    options = field.options or []
    invalid = [item for item in value if item not in options]
    if invalid:
        raise FieldValueError(
            field.name,
            f"field '{field.name}' contains invalid options: {', '.join(str(i) for i in invalid)}",
        )
    return list(value)


FIELD_VALIDATORS: Dict[CustomFieldType, Callable[[CustomField, Any], Any]] = {
    CustomFieldType.TEXT: _validate_text,
    CustomFieldType.NUMBER: _validate_number,
    CustomFieldType.DATE: _validate_date,
    CustomFieldType.BOOLEAN: _validate_boolean,
    CustomFieldType.SELECT: _validate_select,
    CustomFieldType.MULTISELECT: _validate_multiselect,
}


def validate_value(field: FieldDefinition, value: Any) -> Any:
    """
    Validate and coerce a raw value for one custom field.

    Args:
        field: The field definition, either a CustomField or a stored dict
        value: The raw value submitted by the client

    Returns:
        The coerced value. Empty values (None or "") on optional fields are
        returned unchanged.

    Raises:
        FieldValueError: With a single error naming the field
    """
    if not isinstance(field, CustomField):
        field = CustomField.model_validate(field)

    if _is_empty(value):
        if field.required:
            raise FieldValueError(field.name, f"field '{field.name}' is required")
        return value

    return FIELD_VALIDATORS[field.type](field, value)
