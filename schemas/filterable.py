"""Filterable entity schemas."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class EventCategory(str, Enum):
    """Visibility category; each has its own toggle."""

    TASK = "Task"
    CONDITION = "Condition"
    THREAT = "Threat"
    SITE_FEATURE = "SiteFeature"


class FilterableEntity(BaseModel):
    """A type or task instance as listed on the filter screen."""

    root_id: str = Field(..., description="Stable type id shared by all instances of one type")
    display_name: str = Field(..., description="Human-readable type name")
    instance_name: Optional[str] = Field(
        None, description="Generated instance name, e.g. 'Pickles the Destitute'"
    )
    category: EventCategory = Field(..., description="Visibility category")
    source_type_id: Optional[str] = Field(None, description="Source type id of the event")
    instance_id: Optional[str] = Field(
        None, description="Unique instance id; only tasks support instance identity"
    )
