"""
Milestone Endpoints Module

The milestones sub-resource of project metadata. Statistics are derived on
every request and never stored.
"""
from typing import Any
from fastapi import APIRouter, Body, Depends

from projmeta.api import deps
from projmeta.metadata.permissions import Principal
from projmeta.metadata.service import MetadataService

router = APIRouter()


@router.get("/{project_id}/metadata/milestones", response_model=dict[str, Any])
def read_milestones(
    project_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Get a project's milestones with total/completed/upcoming/overdue counts.
    """
    return service.get_milestones(principal, project_id)


@router.put("/{project_id}/metadata/milestones", response_model=dict[str, Any])
def replace_milestones(
    project_id: int,
    payload: Any = Body(...),
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Replace the full milestone list.

    The body may be {"milestones": [...]} or the bare list.

    Raises:
        MetadataValidationError 400: If any milestone is invalid
        AuthorizationError 403: If the caller may read but not edit
    """
    return service.replace_milestones(principal, project_id, payload)
