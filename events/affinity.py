"""
Task-to-region affinity.

Decides whether a narrative task "happens" in a region, so the prompt for a
conversation only mentions tasks relevant to where the characters are.

Results are cached per (task id, region id) for the lifetime of one
simulation session. Entries never expire on a timer; they are dropped only
by explicit structural events (task state change, region removal, session
end). See DESIGN.md for the staleness window this implies.
"""

from typing import Dict, Iterable, Optional, Tuple

from core import HostReadError, get_logger
from simulation.models import LocationBearing, LocationRef, LookTarget, Region, Task, TaskPart

logger = get_logger(__name__)

# Part types that reference a region without the task taking place there.
# Explicit list, never inferred from field shapes.
NON_LOCATIONAL_PART_TYPES = frozenset({
    "RewardDelivery",
    "DropPods",
    "DropOff",
    "RequirementsToAccept",
    "RequirementsToAcceptPlanetLayer",
    "Letter",
    "Notify",
    "Choice",
})

CacheKey = Tuple[int, int]


class AffinityResolver:
    """Cached task/region affinity for one simulation session."""

    def __init__(self, non_locational_part_types: Iterable[str] = NON_LOCATIONAL_PART_TYPES):
        self.non_locational_part_types = frozenset(non_locational_part_types)
        self._cache: Dict[CacheKey, bool] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    def affects(self, task: Optional[Task], region: Optional[Region]) -> bool:
        """
        Whether the task pertains to the region.

        Args:
            task: Narrative task; None gives False and is not cached
            region: Region being talked about; None gives False and is not cached

        Returns:
            True if a declared target or a location-bearing part points at the region
        """
        if task is None or region is None:
            return False

        if task.id is None:
            return self._compute(task, region)

        key = (task.id, region.id)
        cached = self._cache.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        result = self._compute(task, region)
        self._cache[key] = result
        return result

    def _compute(self, task: Task, region: Region) -> bool:
        for target in task.targets:
            if self._target_matches(target, region):
                return True

        parent = region.parent
        if parent is None:
            return False

        for part in task.parts:
            if part is None or self._is_non_locational(part):
                continue
            if not isinstance(part, LocationBearing):
                continue
            try:
                refs = list(part.location_refs())
            except (HostReadError, AttributeError, TypeError) as e:
                logger.debug(
                    "Part location unreadable",
                    task_id=task.id,
                    part_type=part.part_type,
                    error=str(e),
                )
                continue
            if any(self._ref_matches(ref, region) for ref in refs):
                return True

        return False

    def _is_non_locational(self, part: TaskPart) -> bool:
        return part.part_type in self.non_locational_part_types

    @staticmethod
    def _target_matches(target: Optional[LookTarget], region: Region) -> bool:
        if target is None:
            return False
        if target.region_id is not None and target.region_id == region.id:
            return True
        if (
            target.world_object_id is not None
            and region.parent is not None
            and target.world_object_id == region.parent.id
        ):
            return True
        if target.tile is not None and region.tile is not None and target.tile == region.tile:
            return True
        return False

    @staticmethod
    def _ref_matches(ref: LocationRef, region: Region) -> bool:
        if ref.region_id is not None and ref.region_id == region.id:
            return True
        if ref.world_object_id is not None and ref.world_object_id == region.parent.id:
            return True
        if ref.world_object_region_id is not None and ref.world_object_region_id == region.id:
            return True
        return False

    # ==================== Invalidation ====================

    def invalidate_task(self, task_id: int) -> int:
        """Drop every entry of one task (accepted, ended, parts changed). Returns removed count."""
        stale = [key for key in self._cache if key[0] == task_id]
        for key in stale:
            del self._cache[key]
        if stale:
            logger.debug("Affinity entries invalidated", task_id=task_id, removed=len(stale))
        return len(stale)

    def invalidate_region(self, region_id: int) -> int:
        """Drop every entry of one region (region unloaded or regenerated). Returns removed count."""
        stale = [key for key in self._cache if key[1] == region_id]
        for key in stale:
            del self._cache[key]
        if stale:
            logger.debug("Affinity entries invalidated", region_id=region_id, removed=len(stale))
        return len(stale)

    def clear(self) -> None:
        """Forget everything (session end)."""
        self._cache.clear()
        self.hits = 0
        self.misses = 0

    def prewarm(self, tasks: Iterable[Task], region: Optional[Region]) -> int:
        """
        Fill the cache for every ongoing task against a freshly finalized region.

        Never raises; a task that fails is logged and skipped.

        Returns:
            Number of tasks evaluated
        """
        if region is None:
            return 0

        evaluated = 0
        for task in tasks:
            if task is None or not task.is_ongoing:
                continue
            try:
                self.affects(task, region)
                evaluated += 1
            except Exception as e:
                logger.warning("Affinity prewarm failed", task_id=task.id, region_id=region.id, error=str(e))

        logger.debug("Affinity cache prewarmed", region_id=region.id, tasks=evaluated, entries=len(self._cache))
        return evaluated

    def stats(self) -> Dict[str, int]:
        return {"entries": len(self._cache), "hits": self.hits, "misses": self.misses}
