"""
Situation extraction.

Collects what is going on in a region right now, in priority order, each
stage capped by the remaining capacity:

1. current-location site features (away regions only)
2. one recent threat alert (only when the caller reports high danger)
3. active, visible environmental conditions
4. ongoing, visible tasks that affect the region

Filters are applied inside each stage, before an entity counts against
capacity. Extraction is stateless apart from the affinity cache.
"""

from typing import List, Optional

from config.settings import settings
from core import get_logger
from events.affinity import AffinityResolver
from events.filter_policy import FilterPolicy
from prompts.ongoing_events import (
    ACCEPTED_DAYS,
    ACCEPTED_HOURS,
    ACCEPTED_JUST_NOW,
    ACCEPTED_ONE_HOUR,
    CHARACTERS_SEPARATOR,
    CURRENT_LOCATION_PREFIX,
)
from schemas.filterable import EventCategory
from schemas.snapshot import (
    CONDITION_KIND_PREFIX,
    SITE_FEATURE_KIND_PREFIX,
    TASK_KIND,
    SituationSnapshot,
)
from simulation.adapter import SimulationAdapter
from simulation.models import TICKS_PER_DAY, TICKS_PER_HOUR, Region, Task, TaskState

logger = get_logger(__name__)


def accepted_age_marker(task: Task, now_tick: int) -> Optional[str]:
    """
    Short marker of how long ago a task was accepted.

    Returns:
        e.g. "accepted ~1.3 days ago", "accepted ~5 hours ago", or None if
        the task was never accepted
    """
    if task.state == TaskState.NOT_YET_ACCEPTED or task.accepted_tick <= 0:
        return None

    elapsed = now_tick - task.accepted_tick
    if elapsed < TICKS_PER_HOUR:
        return ACCEPTED_JUST_NOW

    if elapsed >= TICKS_PER_DAY:
        days = round(elapsed / TICKS_PER_DAY, 1)
        return ACCEPTED_DAYS.format(days=f"{days:.1f}")

    hours = int(round(elapsed / TICKS_PER_HOUR))
    if hours == 1:
        return ACCEPTED_ONE_HOUR
    return ACCEPTED_HOURS.format(hours=hours)


def task_display_label(task: Task, now_tick: int) -> str:
    """Task label with its age marker and associated character names."""
    label = task.label

    marker = accepted_age_marker(task, now_tick)
    if marker:
        label = f"{label} [{marker}]"

    names = [actor.short_name for actor in task.actors() if actor.short_name]
    if names:
        label = label + CHARACTERS_SEPARATOR + ", ".join(names)

    return label


class SituationExtractor:
    """Builds the prioritized snapshot list for one region."""

    def __init__(
        self,
        adapter: SimulationAdapter,
        affinity: AffinityResolver,
        policy: FilterPolicy,
        threat_timeout_ticks: Optional[int] = None,
    ):
        """
        Args:
            adapter: Loaded simulation
            affinity: Session affinity cache
            policy: Session filter policy
            threat_timeout_ticks: Threat alerts older than this are ignored
                (defaults to settings.THREAT_TIMEOUT_TICKS; 0 disables the age check)
        """
        self.adapter = adapter
        self.affinity = affinity
        self.policy = policy
        self.threat_timeout_ticks = (
            settings.THREAT_TIMEOUT_TICKS if threat_timeout_ticks is None else threat_timeout_ticks
        )

    def extract(
        self,
        region: Optional[Region],
        is_high_danger: bool,
        max_entities: int = 5,
        max_lookback: int = 30,
        apply_filters: bool = True,
    ) -> List[SituationSnapshot]:
        """
        Snapshots of what is ongoing in a region, highest priority first.

        Args:
            region: Region the conversation happens in; None gives an empty list
            is_high_danger: Whether a recent threat alert should be included
            max_entities: Capacity across all stages
            max_lookback: How many recent alerts to scan for a threat
            apply_filters: False lists everything appendable, ignoring filters

        Returns:
            At most max_entities snapshots
        """
        result: List[SituationSnapshot] = []
        if region is None or max_entities <= 0:
            return result

        if not region.is_home:
            self._add_site_features(region, result, max_entities, apply_filters)

        if is_high_danger and len(result) < max_entities:
            self._add_recent_threat(result, max_entities, max_lookback, apply_filters)

        if len(result) < max_entities:
            self._add_conditions(region, result, max_entities, apply_filters)

        if len(result) < max_entities:
            self._add_tasks(region, result, max_entities, apply_filters)

        logger.debug(
            "Situations extracted",
            region_id=region.id,
            is_home=region.is_home,
            high_danger=is_high_danger,
            count=len(result),
        )
        return result

    def _visible(
        self,
        apply_filters: bool,
        category: EventCategory,
        type_id: Optional[str],
        instance_id: Optional[str] = None,
    ) -> bool:
        if not apply_filters:
            return True
        return self.policy.is_visible(category, type_id, instance_id, self.adapter.scope_id())

    def _add_site_features(
        self,
        region: Region,
        result: List[SituationSnapshot],
        max_entities: int,
        apply_filters: bool,
    ) -> None:
        for feature in region.site_features:
            if len(result) >= max_entities:
                break
            if feature is None or not feature.type_id:
                continue
            if not self._visible(apply_filters, EventCategory.SITE_FEATURE, feature.type_id):
                continue

            result.append(SituationSnapshot(
                source_type_id=feature.type_id,
                kind=SITE_FEATURE_KIND_PREFIX + feature.type_id,
                label=CURRENT_LOCATION_PREFIX + (feature.label or feature.type_id),
                body=feature.description,
            ))

    def _add_recent_threat(
        self,
        result: List[SituationSnapshot],
        max_entities: int,
        max_lookback: int,
        apply_filters: bool,
    ) -> None:
        alerts = self.adapter.recent_alerts()
        if not alerts:
            return

        now = self.adapter.now_tick()
        scanned = 0

        # Newest first; the log ages monotonically so the first stale threat ends the scan.
        for alert in reversed(alerts):
            if scanned >= max_lookback or len(result) >= max_entities:
                break
            scanned += 1

            if alert is None or not alert.is_threat:
                continue

            if self.threat_timeout_ticks > 0 and alert.created_tick is not None and alert.created_tick > 0:
                if now - alert.created_tick > self.threat_timeout_ticks:
                    break

            if not self._visible(apply_filters, EventCategory.THREAT, alert.type_id):
                continue

            result.append(SituationSnapshot(
                source_type_id=alert.type_id,
                kind=alert.kind,
                label=alert.label,
                body=alert.tooltip,
                is_threat=True,
            ))
            break

    def _add_conditions(
        self,
        region: Region,
        result: List[SituationSnapshot],
        max_entities: int,
        apply_filters: bool,
    ) -> None:
        for condition in region.conditions:
            if len(result) >= max_entities:
                break
            if condition is None or not condition.type_id:
                continue
            if not condition.active or not condition.visible:
                continue
            if not self._visible(apply_filters, EventCategory.CONDITION, condition.type_id):
                continue

            result.append(SituationSnapshot(
                source_type_id=condition.type_id,
                kind=CONDITION_KIND_PREFIX + condition.type_id,
                label=condition.label or condition.type_id,
                body=condition.description,
            ))

    def _add_tasks(
        self,
        region: Region,
        result: List[SituationSnapshot],
        max_entities: int,
        apply_filters: bool,
    ) -> None:
        now = self.adapter.now_tick()

        for task in self.adapter.tasks():
            if len(result) >= max_entities:
                break
            if task is None or task.hidden or not task.is_ongoing:
                continue

            instance_id = str(task.id) if task.id is not None else None
            if not self._visible(apply_filters, EventCategory.TASK, task.root_type, instance_id):
                continue

            if not self.affinity.affects(task, region):
                continue

            result.append(SituationSnapshot(
                source_type_id=task.root_type,
                kind=TASK_KIND,
                label=task_display_label(task, now),
                body=task.description,
                description=task.description or None,
                instance_id=instance_id,
            ))
