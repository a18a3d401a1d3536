"""Persisted filter configuration schemas.

Persistence mechanics belong to the host; this module only defines the
structure and its JSON round-trip. Missing or null collections load as
empty ones.
"""

from typing import Dict, Optional, Set

from pydantic import BaseModel, Field, field_validator


class DisabledInstanceSet(BaseModel):
    """Instance ids disabled within one scope (one saved session)."""

    ids: Set[str] = Field(default_factory=set)

    @field_validator("ids", mode="before")
    @classmethod
    def default_ids(cls, v):
        return set() if v is None else v

    def __contains__(self, instance_id: str) -> bool:
        return instance_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def add(self, instance_id: str) -> None:
        self.ids.add(instance_id)

    def discard(self, instance_id: str) -> bool:
        """Remove an id; returns True if it was present."""
        if instance_id in self.ids:
            self.ids.discard(instance_id)
            return True
        return False


class EventFilterSettings(BaseModel):
    """User-facing filter configuration stored with the host's settings."""

    enable_compression: bool = Field(
        True, description="Compress task text with templates instead of sending the full description"
    )

    # Quick category toggles
    show_tasks: bool = Field(True)
    show_conditions: bool = Field(True)
    show_threats: bool = Field(True)
    show_site_features: bool = Field(True)

    disabled_type_ids: Set[str] = Field(
        default_factory=set,
        description="Type ids filtered everywhere, e.g. 'Hospitality_Refugee'",
    )
    disabled_instances: Dict[str, DisabledInstanceSet] = Field(
        default_factory=dict,
        description="Scope id -> instance ids filtered in that scope",
    )

    legacy_blacklist_migrated: bool = Field(
        False, description="Set once the legacy blacklist has been folded into disabled_type_ids"
    )
    enable_context_filtering: bool = Field(
        True, description="Only keep tasks involving the conversation's participants"
    )

    @field_validator("disabled_type_ids", mode="before")
    @classmethod
    def default_type_ids(cls, v):
        return set() if v is None else v

    @field_validator("disabled_instances", mode="before")
    @classmethod
    def default_instances(cls, v):
        if v is None:
            return {}
        if isinstance(v, dict):
            return {scope: ({} if ids is None else ids) for scope, ids in v.items()}
        return v

    def get_instance_set(self, scope_id: Optional[str]) -> Optional[DisabledInstanceSet]:
        """The scope's disabled set, or None if it does not exist."""
        if not scope_id:
            return None
        return self.disabled_instances.get(scope_id)

    def get_or_create_instance_set(self, scope_id: Optional[str]) -> Optional[DisabledInstanceSet]:
        """The scope's disabled set, created on first use."""
        if not scope_id:
            return None
        instance_set = self.disabled_instances.get(scope_id)
        if instance_set is None:
            instance_set = DisabledInstanceSet()
            self.disabled_instances[scope_id] = instance_set
        return instance_set

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: Optional[str]) -> "EventFilterSettings":
        """Load from JSON; empty input gives defaults."""
        if not data:
            return cls()
        return cls.model_validate_json(data)
