"""
Settings-driven visibility rules.

An entity is visible when all of these hold:
- its category toggle is effectively enabled
- its root type id is not globally disabled
- if it has an instance id, that instance is not disabled in the current scope

Another installed feature may already report tasks, conditions and threats
to the dialogue generator. While it is active those three categories are
force-disabled; site features are only ever reported here.
"""

from typing import Callable, Iterable, Optional

from core import get_logger
from schemas.filter_settings import EventFilterSettings
from schemas.filterable import EventCategory

logger = get_logger(__name__)


class ConflictSignal:
    """Reads whether a conflicting feature is currently reporting events.

    The probe is re-read on every call since the other feature's setting can
    change at any time. A probe that fails reads as "no conflict".
    """

    def __init__(self, probe: Optional[Callable[[], bool]] = None):
        self.probe = probe

    def is_active(self) -> bool:
        if self.probe is None:
            return False
        try:
            return bool(self.probe())
        except Exception as e:
            logger.debug("Conflict probe failed", error=str(e))
            return False


class FilterPolicy:
    """Visibility checks and mutations over one EventFilterSettings."""

    def __init__(self, settings: EventFilterSettings, conflict_signal: Optional[ConflictSignal] = None):
        self.settings = settings
        self.conflict_signal = conflict_signal or ConflictSignal()

    # ==================== Checks ====================

    def category_enabled(self, category: EventCategory) -> bool:
        """Effective category toggle, taking the conflicting feature into account."""
        if category == EventCategory.SITE_FEATURE:
            return self.settings.show_site_features

        toggles = {
            EventCategory.TASK: self.settings.show_tasks,
            EventCategory.CONDITION: self.settings.show_conditions,
            EventCategory.THREAT: self.settings.show_threats,
        }
        if not toggles.get(category, True):
            return False
        return not self.conflict_signal.is_active()

    def is_type_disabled(self, root_type_id: Optional[str]) -> bool:
        if not root_type_id:
            return False
        return root_type_id in self.settings.disabled_type_ids

    def is_instance_disabled(self, instance_id: Optional[str], scope_id: Optional[str]) -> bool:
        if not instance_id or not scope_id:
            return False
        instance_set = self.settings.get_instance_set(scope_id)
        return instance_set is not None and instance_id in instance_set

    def is_visible(
        self,
        category: EventCategory,
        root_type_id: Optional[str],
        instance_id: Optional[str] = None,
        scope_id: Optional[str] = None,
    ) -> bool:
        """
        Whether an entity passes every filter.

        Args:
            category: Entity category
            root_type_id: Stable type id shared by all instances
            instance_id: Task instance id, if any
            scope_id: Scope (loaded save) the instance lives in

        Returns:
            True if the entity should be reported
        """
        if not self.category_enabled(category):
            return False
        if self.is_type_disabled(root_type_id):
            return False
        if self.is_instance_disabled(instance_id, scope_id):
            return False
        return True

    # ==================== Mutations ====================

    def disable_type(self, root_type_id: str) -> bool:
        """Disable a type everywhere. Returns True if it was newly added."""
        if not root_type_id or root_type_id in self.settings.disabled_type_ids:
            return False
        self.settings.disabled_type_ids.add(root_type_id)
        logger.info("Event type disabled", type_id=root_type_id)
        return True

    def enable_type(self, root_type_id: str) -> bool:
        """Re-enable a type. Returns True if it was disabled."""
        if not root_type_id or root_type_id not in self.settings.disabled_type_ids:
            return False
        self.settings.disabled_type_ids.discard(root_type_id)
        logger.info("Event type enabled", type_id=root_type_id)
        return True

    def disable_instance(self, scope_id: str, instance_id: str) -> bool:
        """Disable one task instance within a scope. Returns True if newly added."""
        if not scope_id or not instance_id:
            return False
        instance_set = self.settings.get_or_create_instance_set(scope_id)
        if instance_id in instance_set:
            return False
        instance_set.add(instance_id)
        logger.info("Event instance disabled", scope_id=scope_id, instance_id=instance_id)
        return True

    def enable_instance(self, scope_id: str, instance_id: str) -> bool:
        """Re-enable one instance; the scope's set is pruned once empty."""
        instance_set = self.settings.get_instance_set(scope_id)
        if instance_set is None or not instance_set.discard(instance_id):
            return False
        self.prune_scope(scope_id)
        logger.info("Event instance enabled", scope_id=scope_id, instance_id=instance_id)
        return True

    def prune_scope(self, scope_id: str) -> bool:
        """Remove a scope's set if it is empty. Returns True if removed."""
        instance_set = self.settings.get_instance_set(scope_id)
        if instance_set is not None and len(instance_set) == 0:
            del self.settings.disabled_instances[scope_id]
            return True
        return False

    def reset_type_filters(self) -> int:
        """Re-enable every type. Returns how many were removed."""
        removed = len(self.settings.disabled_type_ids)
        self.settings.disabled_type_ids.clear()
        if removed:
            logger.info("Type filters reset", removed=removed)
        return removed

    def reset_instance_filters(self, scope_id: str) -> int:
        """Re-enable every instance in a scope. Returns how many were removed."""
        instance_set = self.settings.get_instance_set(scope_id)
        if instance_set is None:
            return 0
        removed = len(instance_set)
        del self.settings.disabled_instances[scope_id]
        if removed:
            logger.info("Instance filters reset", scope_id=scope_id, removed=removed)
        return removed

    def sweep_inactive_instances(self, scope_id: Optional[str], live_ids: Iterable[str]) -> int:
        """
        Remove disabled instance ids whose task is no longer ongoing.

        Args:
            scope_id: Scope of the loaded simulation
            live_ids: Instance ids of every ongoing task

        Returns:
            Number of ids removed
        """
        instance_set = self.settings.get_instance_set(scope_id)
        if instance_set is None:
            return 0

        live = set(live_ids)
        stale = [instance_id for instance_id in instance_set.ids if instance_id not in live]
        for instance_id in stale:
            instance_set.discard(instance_id)

        self.prune_scope(scope_id)

        if stale:
            logger.info("Inactive instance filters removed", scope_id=scope_id, removed=len(stale))
        return len(stale)
