from pydantic import BaseModel, Field
from typing import Optional
from projmeta.schemas.metadata import TemplateType


# Properties to receive via API on creation
class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    template: Optional[TemplateType] = None  # seeds metadata from the template catalog
