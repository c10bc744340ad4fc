"""
Project Metadata Endpoints Module

Read, patch, replace and dry-run validate a project's metadata document.
Anyone who can read the project may GET; editing requires the project owner
or an owner/admin member. Requests for projects the caller cannot read get
404, exactly as for projects that do not exist.
"""
from typing import Any
from fastapi import APIRouter, Body, Depends

from projmeta.api import deps
from projmeta.metadata.permissions import Principal
from projmeta.metadata.service import MetadataService

router = APIRouter()


@router.get("/{project_id}/metadata", response_model=dict[str, Any])
def read_metadata(
    project_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Get a project's metadata.

    Returns:
        dict: projectId, projectName, metadata, the fixed enumerations under
        "schema", and the caller's edit permissions
    """
    return service.get_metadata(principal, project_id)


@router.patch("/{project_id}/metadata", response_model=dict[str, Any])
def patch_metadata(
    project_id: int,
    payload: Any = Body(...),
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Merge a partial metadata document into the stored one.

    Each top-level key in the payload replaces the stored key wholesale
    (lists are not merged element-wise); keys left out are untouched.

    Raises:
        MetadataValidationError 400: If any part of the payload is invalid
        AuthorizationError 403: If the caller may read but not edit
        NotFoundError 404: If the project is missing or not readable
    """
    return service.patch_metadata(principal, project_id, payload)


@router.put("/{project_id}/metadata", response_model=dict[str, Any])
def replace_metadata(
    project_id: int,
    payload: Any = Body(...),
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Replace a project's metadata with the validated payload.

    Raises:
        MetadataValidationError 400: If any part of the payload is invalid
        AuthorizationError 403: If the caller may read but not edit
        NotFoundError 404: If the project is missing or not readable
    """
    return service.replace_metadata(principal, project_id, payload)


@router.post("/{project_id}/metadata/validate", response_model=dict[str, Any])
def validate_metadata(
    project_id: int,
    payload: Any = Body(...),
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Validate metadata, milestones, custom fields and/or a budget without
    saving anything. Invalid content is reported in the response body, not as
    an error status.
    """
    return service.validate_metadata(principal, project_id, payload)
