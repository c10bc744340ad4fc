"""
Custom Field Endpoints Module

The custom-fields sub-resource of project metadata.

Two kinds of write with different privileges:
- PUT redefines the whole field set (owner, or owner/admin member)
- PATCH only sets values of existing fields (owner, or admin/member member)
"""
from typing import Any
from fastapi import APIRouter, Body, Depends

from projmeta.api import deps
from projmeta.metadata.permissions import Principal
from projmeta.metadata.service import MetadataService

router = APIRouter()


@router.get("/{project_id}/metadata/custom-fields", response_model=dict[str, Any])
def read_custom_fields(
    project_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Get custom field definitions (with current values) sorted by order, plus
    the list of available field types.
    """
    return service.get_custom_fields(principal, project_id)


@router.put("/{project_id}/metadata/custom-fields", response_model=dict[str, Any])
def replace_custom_fields(
    project_id: int,
    payload: Any = Body(...),
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Replace custom field definitions.

    The body may be {"customFields": [...]} or the bare list. Fields without
    an id get a generated one; fields without an order get their position.

    Raises:
        MetadataValidationError 400: If any definition is invalid, e.g. a
            select field without options
        AuthorizationError 403: If the caller may read but not edit
    """
    return service.replace_custom_fields(principal, project_id, payload)


@router.patch("/{project_id}/metadata/custom-fields", response_model=dict[str, Any])
def patch_custom_field_values(
    project_id: int,
    payload: Any = Body(...),
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Set values of existing custom fields.

    Body: {"fieldValues": {"<field id>": <value>, ...}}. Only each field's
    value changes; its definition is kept as stored.

    Raises:
        MetadataValidationError 400: With one entry per rejected value
        AuthorizationError 403: If the caller may not edit values
        NotFoundError 404: If a field id does not exist on the project
    """
    return service.patch_field_values(principal, project_id, payload)
