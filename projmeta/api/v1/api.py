from fastapi import APIRouter
from projmeta.api.v1.endpoints import (
    health, templates, projects, metadata, milestones, custom_fields
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])

# Templates must come before the /projects/{project_id} routes
api_router.include_router(templates.router, prefix="/projects/templates", tags=["templates"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])

# Metadata sub-resources
api_router.include_router(metadata.router, prefix="/projects", tags=["metadata"])
api_router.include_router(milestones.router, prefix="/projects", tags=["milestones"])
api_router.include_router(custom_fields.router, prefix="/projects", tags=["custom-fields"])
