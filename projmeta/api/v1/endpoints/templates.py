"""
Template Endpoints Module

Read-only listing of the project template catalog. When
ALLOW_ANONYMOUS_TEMPLATES is off, callers must be authenticated.
"""
from typing import Any, Optional
from fastapi import APIRouter, Depends, Query

from projmeta.api import deps
from projmeta.core.config import settings
from projmeta.core.errors import AuthenticationError
from projmeta.metadata import templates
from projmeta.metadata.permissions import Principal

router = APIRouter()


@router.get("", response_model=dict[str, Any])
def list_templates(
    template_type: Optional[str] = Query(default=None, alias="type"),
    principal: Optional[Principal] = Depends(deps.get_optional_principal),
) -> Any:
    """
    List available project templates.

    Args:
        template_type: Optional template id; when given only that template is returned
        principal: Authenticated caller, if any

    Returns:
        dict: templates, the same templates grouped by category, all catalog
        categories, and the fixed enumerations used by metadata payloads

    Raises:
        AuthenticationError: If anonymous listing is disabled and no principal is present
    """
    if principal is None and not settings.ALLOW_ANONYMOUS_TEMPLATES:
        raise AuthenticationError("Not authenticated")

    selected = templates.list_templates(template_type)
    grouped = templates.group_by_category(selected)
    return {
        "templates": [t.model_dump(mode="json") for t in selected],
        "categorized": {
            category: [t.model_dump(mode="json") for t in items]
            for category, items in grouped.items()
        },
        "categories": templates.categories(),
        "constants": templates.constants(),
    }
