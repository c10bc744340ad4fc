"""
Project Metadata Schemas

Pydantic shapes for the per-project metadata bag and its sub-objects.

Note: field names use camelCase because they are the stored JSON keys and the
wire format shared with existing clients; renaming them would break documents
already persisted in the projects.metadata column.

Unknown keys are ignored on every model (extra="ignore"), which is also how
client-supplied provenance stamps (lastModified, lastModifiedBy) are dropped.
"""
import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError


DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


class TemplateType(str, Enum):
    SOFTWARE = "software"
    MARKETING = "marketing"
    RESEARCH = "research"
    CONSTRUCTION = "construction"
    EVENT = "event"
    CONSULTING = "consulting"
    OTHER = "other"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"
    JPY = "JPY"


class CustomFieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    SELECT = "select"
    MULTISELECT = "multiselect"


# Field types whose value must come from the field's options list
OPTION_FIELD_TYPES = frozenset({CustomFieldType.SELECT, CustomFieldType.MULTISELECT})


class NotificationLevel(str, Enum):
    ALL = "all"
    IMPORTANT = "important"
    NONE = "none"


PROVENANCE_KEYS = ("lastModified", "lastModifiedBy")


class MetadataModel(BaseModel):
    """Base for all metadata shapes: unknown keys are dropped, not rejected."""
    model_config = ConfigDict(extra="ignore")


class Budget(MetadataModel):
    allocated: float = Field(ge=0, allow_inf_nan=False, strict=True)
    spent: float = Field(default=0, ge=0, allow_inf_nan=False, strict=True)
    currency: Currency = Currency.USD


class ClientInfo(MetadataModel):
    name: str = Field(min_length=1)
    contact: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class Milestone(MetadataModel):
    """
    A dated project milestone.

    The date must look like YYYY-MM-DD. Impossible calendar dates such as
    2024-02-30 are accepted; see milestone_stats for how they are counted.
    """
    name: str = Field(min_length=1)
    date: str
    completed: bool = Field(default=False, strict=True)
    description: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date_format(cls, v: str) -> str:
        if not DATE_PATTERN.match(v):
            raise PydanticCustomError("date_format", "Date must be in YYYY-MM-DD format")
        return v


class CustomField(MetadataModel):
    """
    Definition and current value of a project-defined field.

    id and order are optional on input; SchemaValidator assigns them before
    the field is stored, so persisted fields always carry both.
    """
    id: Optional[str] = None
    name: str = Field(min_length=1)
    type: CustomFieldType
    value: Any = None
    options: Optional[List[str]] = None
    required: bool = False
    description: Optional[str] = None
    order: Optional[int] = None

    @model_validator(mode="after")
    def check_options(self):
        if self.type in OPTION_FIELD_TYPES and not self.options:
            raise PydanticCustomError(
                "options_required",
                "Field '{name}' of type '{type}' must have options",
                {"name": self.name, "type": self.type.value},
            )
        return self


class ProjectSettings(MetadataModel):
    allowPublicAccess: bool = Field(default=False, strict=True)
    requireApproval: bool = Field(default=False, strict=True)
    autoArchive: bool = Field(default=False, strict=True)
    notificationLevel: NotificationLevel = NotificationLevel.IMPORTANT


class Integration(MetadataModel):
    """External-system identifiers. Opaque strings, never interpreted here."""
    githubRepo: Optional[str] = None
    slackChannel: Optional[str] = None
    jiraProject: Optional[str] = None
    externalId: Optional[str] = None


class ProjectMetadata(MetadataModel):
    template: Optional[TemplateType] = None
    budget: Optional[Budget] = None
    client: Optional[ClientInfo] = None
    milestones: List[Milestone] = Field(default_factory=list)
    customFields: List[CustomField] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    settings: Optional[ProjectSettings] = None
    integration: Optional[Integration] = None


# Top-level keys a ProjectMetadata document can hold
METADATA_KEYS = frozenset(ProjectMetadata.model_fields)


def enum_values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]
