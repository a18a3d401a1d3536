"""Situation snapshot schema."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.filterable import EventCategory

TASK_KIND = "Task"
CONDITION_KIND_PREFIX = "Condition_"
SITE_FEATURE_KIND_PREFIX = "SiteFeature_"


class SituationSnapshot(BaseModel):
    """One ongoing situation the characters should know about right now.

    Created per extraction call and never persisted.
    """

    source_type_id: Optional[str] = Field(
        None, description="Root type of the task, condition, alert or site feature, if known"
    )
    kind: str = Field("", description="Kind tag, e.g. 'Task', 'Condition_HeatWave', 'ThreatBig'")
    label: str = Field("", description="Short title")
    body: str = Field("", description="Main body text")
    description: Optional[str] = Field(
        None, description="Structured description; preferred over body when present"
    )
    is_threat: bool = Field(False, description="True for threat alerts (raids, big danger)")
    instance_id: Optional[str] = Field(
        None, description="Live task instance id, carried for tasks only"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def base_body(self) -> str:
        """Structured description if present, else the generic body."""
        return self.description or self.body or ""

    @property
    def category(self) -> EventCategory:
        """Filter category derived from the kind tag."""
        if self.kind == TASK_KIND:
            return EventCategory.TASK
        if self.kind.startswith(CONDITION_KIND_PREFIX):
            return EventCategory.CONDITION
        if self.kind.startswith(SITE_FEATURE_KIND_PREFIX):
            return EventCategory.SITE_FEATURE
        if self.is_threat:
            return EventCategory.THREAT
        return EventCategory.TASK
