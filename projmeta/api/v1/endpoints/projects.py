"""
Project Endpoints Module

Project creation. The rest of the project record (listing, renaming,
deletion) is served elsewhere; this router only exists so that a project can
be created with its metadata seeded from a template.
"""
from typing import Any
from fastapi import APIRouter, Depends, status

from projmeta.api import deps
from projmeta.metadata.permissions import Principal
from projmeta.metadata.service import MetadataService
from projmeta.schemas.project import ProjectCreate

router = APIRouter()


@router.post("", response_model=dict[str, Any], status_code=status.HTTP_201_CREATED)
def create_project(
    project_in: ProjectCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: MetadataService = Depends(deps.get_metadata_service),
) -> Any:
    """
    Create a new project owned by the current user.

    If a template is given, the project's metadata is seeded from that
    template's default metadata; otherwise it starts empty. The creator is
    also recorded as an owner-role member.

    Args:
        project_in: Project name, optional description and template id
        principal: Currently authenticated user
        service: Metadata service bound to the request's database session

    Returns:
        dict: projectId, projectName and the initial metadata document
    """
    return service.create_project(principal, project_in)
