"""
Project template catalog.

A fixed, read-only registry of project presets. Each template's
defaultMetadata is a valid full-metadata payload; seeding a project from a
template validates that payload and stores it like any other replacement.

The registry is built once at import time. Callers always receive deep
copies, so nothing handed out can alter the catalog.
"""
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from projmeta.schemas.metadata import (
    Currency,
    CustomFieldType,
    NotificationLevel,
    TemplateType,
    enum_values,
)


class Template(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: TemplateType
    name: str
    description: str
    category: str
    icon: str
    features: Tuple[str, ...]
    defaultMetadata: Dict[str, Any]


def _empty_metadata() -> Dict[str, Any]:
    return {
        "milestones": [],
        "customFields": [],
        "tags": [],
        "settings": {
            "allowPublicAccess": False,
            "requireApproval": False,
            "autoArchive": False,
            "notificationLevel": NotificationLevel.IMPORTANT.value,
        },
    }


_TEMPLATES: Tuple[Template, ...] = (
    Template(
        id=TemplateType.SOFTWARE,
        name="Software Development",
        description="For software development projects with code repositories, tech stacks, and development workflows",
        category="Technology",
        icon="💻",
        features=(
            "Repository integration",
            "Technology stack tracking",
            "Sprint planning",
            "Code review workflows",
        ),
        defaultMetadata={
            "template": "software",
            "customFields": [
                {
                    "id": "tech_stack",
                    "name": "Technology Stack",
                    "type": "multiselect",
                    "options": ["Python", "JavaScript", "TypeScript", "Go", "Java", "PostgreSQL", "Other"],
                    "required": False,
                    "order": 0,
                },
                {
                    "id": "sprint_length",
                    "name": "Sprint Length (weeks)",
                    "type": "number",
                    "required": False,
                    "order": 1,
                },
                {
                    "id": "repository_url",
                    "name": "Repository URL",
                    "type": "text",
                    "required": False,
                    "order": 2,
                },
            ],
            "integration": {},
        },
    ),
    Template(
        id=TemplateType.MARKETING,
        name="Marketing Campaign",
        description="For marketing campaigns with audience targeting, budget tracking, and campaign analytics",
        category="Marketing",
        icon="📢",
        features=(
            "Campaign type classification",
            "Target audience definition",
            "Budget allocation",
            "ROI tracking",
        ),
        defaultMetadata={
            "template": "marketing",
            "budget": {"allocated": 0, "spent": 0, "currency": "USD"},
            "customFields": [
                {
                    "id": "campaign_type",
                    "name": "Campaign Type",
                    "type": "select",
                    "options": ["Digital", "Print", "Social Media", "Email", "Event", "Other"],
                    "required": True,
                    "order": 0,
                },
                {
                    "id": "target_audience",
                    "name": "Target Audience",
                    "type": "text",
                    "required": False,
                    "order": 1,
                },
                {
                    "id": "expected_roi",
                    "name": "Expected ROI (%)",
                    "type": "number",
                    "required": False,
                    "order": 2,
                },
            ],
        },
    ),
    Template(
        id=TemplateType.RESEARCH,
        name="Research Project",
        description="For research projects with methodology tracking, data collection, and analysis phases",
        category="Academic",
        icon="🔬",
        features=(
            "Research methodology",
            "Sample size tracking",
            "Data collection phases",
            "Publication timeline",
        ),
        defaultMetadata={
            "template": "research",
            "customFields": [
                {
                    "id": "methodology",
                    "name": "Research Methodology",
                    "type": "select",
                    "options": ["Qualitative", "Quantitative", "Mixed Methods", "Experimental", "Observational"],
                    "required": True,
                    "order": 0,
                },
                {
                    "id": "sample_size",
                    "name": "Sample Size",
                    "type": "number",
                    "required": False,
                    "order": 1,
                },
                {
                    "id": "publication_target",
                    "name": "Target Publication Date",
                    "type": "date",
                    "required": False,
                    "order": 2,
                },
            ],
        },
    ),
    Template(
        id=TemplateType.CONSTRUCTION,
        name="Construction Project",
        description="For construction projects with permits, contractors, and milestone tracking",
        category="Construction",
        icon="🏗️",
        features=(
            "Permit tracking",
            "Contractor management",
            "Material procurement",
            "Safety compliance",
        ),
        defaultMetadata={
            "template": "construction",
            "customFields": [
                {
                    "id": "permit_status",
                    "name": "Permit Status",
                    "type": "select",
                    "options": ["Pending", "Approved", "Denied", "Under Review"],
                    "required": True,
                    "order": 0,
                },
                {
                    "id": "contractor",
                    "name": "Primary Contractor",
                    "type": "text",
                    "required": False,
                    "order": 1,
                },
            ],
        },
    ),
    Template(
        id=TemplateType.EVENT,
        name="Event Planning",
        description="For event planning with venue management, vendor coordination, and attendee tracking",
        category="Events",
        icon="🎉",
        features=(
            "Venue booking",
            "Vendor management",
            "Attendee registration",
            "Budget allocation",
        ),
        defaultMetadata={
            "template": "event",
            "customFields": [
                {
                    "id": "venue",
                    "name": "Venue",
                    "type": "text",
                    "required": False,
                    "order": 0,
                },
                {
                    "id": "expected_attendees",
                    "name": "Expected Attendees",
                    "type": "number",
                    "required": False,
                    "order": 1,
                },
                {
                    "id": "event_type",
                    "name": "Event Type",
                    "type": "select",
                    "options": ["Conference", "Workshop", "Meeting", "Party", "Training", "Other"],
                    "required": True,
                    "order": 2,
                },
            ],
        },
    ),
    Template(
        id=TemplateType.CONSULTING,
        name="Consulting Project",
        description="For consulting projects with client deliverables, hourly tracking, and milestone billing",
        category="Business",
        icon="💼",
        features=(
            "Client management",
            "Hourly rate tracking",
            "Deliverable timeline",
            "Billing milestones",
        ),
        defaultMetadata={
            "template": "consulting",
            "customFields": [
                {
                    "id": "hourly_rate",
                    "name": "Hourly Rate",
                    "type": "number",
                    "required": False,
                    "description": "Rate per hour in project currency",
                    "order": 0,
                },
                {
                    "id": "deliverable_type",
                    "name": "Primary Deliverable",
                    "type": "select",
                    "options": ["Report", "Strategy", "Implementation", "Training", "Audit", "Other"],
                    "required": False,
                    "order": 1,
                },
            ],
        },
    ),
    Template(
        id=TemplateType.OTHER,
        name="Custom Project",
        description="A blank template for projects that don't fit standard categories",
        category="General",
        icon="📁",
        features=(
            "Flexible structure",
            "Custom fields",
            "Milestone tracking",
            "Basic collaboration",
        ),
        defaultMetadata=dict(_empty_metadata(), template="other"),
    ),
)

_BY_ID = MappingProxyType({template.id.value: template for template in _TEMPLATES})


def _copy(template: Template) -> Template:
    return template.model_copy(deep=True)


def list_templates(template_id: Optional[str] = None) -> List[Template]:
    """All templates in catalog order, or only the one matching template_id."""
    if template_id:
        return [_copy(t) for t in _TEMPLATES if t.id.value == template_id]
    return [_copy(t) for t in _TEMPLATES]


def get_template(template_id: str) -> Optional[Template]:
    template = _BY_ID.get(template_id)
    return _copy(template) if template is not None else None


def group_by_category(templates: List[Template]) -> Dict[str, List[Template]]:
    grouped: Dict[str, List[Template]] = {}
    for template in templates:
        grouped.setdefault(template.category, []).append(template)
    return grouped


def categories() -> List[str]:
    """Distinct categories across the whole catalog, in first-seen order."""
    return list(dict.fromkeys(t.category for t in _TEMPLATES))


def constants() -> Dict[str, List[str]]:
    return {
        "availableTypes": enum_values(TemplateType),
        "currencies": enum_values(Currency),
        "customFieldTypes": enum_values(CustomFieldType),
        "notificationLevels": enum_values(NotificationLevel),
    }
