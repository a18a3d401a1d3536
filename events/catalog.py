"""
Filterable type and instance listings.

Data layer for a settings screen: which types can be filtered right now,
which types exist at all, and which task instances in the current region can
be hidden individually. Listings always run unfiltered so disabled entries
stay visible there and can be re-enabled.
"""

import sys
from typing import List, Optional, Set

from config.settings import settings
from core import get_logger
from events.affinity import AffinityResolver
from events.extractor import SituationExtractor
from schemas.filter_settings import EventFilterSettings
from schemas.filterable import EventCategory, FilterableEntity
from simulation.adapter import SimulationAdapter
from simulation.models import Region

logger = get_logger(__name__)

_AGE_MARKER_START = " ["
_CHARACTERS_START = " | characters:"


def strip_label_metadata(label: Optional[str]) -> str:
    """Base task label without the age marker and character list."""
    if not label:
        return ""
    for marker in (_AGE_MARKER_START, _CHARACTERS_START):
        index = label.find(marker)
        if index > 0:
            label = label[:index]
    return label


class EventCatalog:
    """Lists filterable entities for one loaded simulation."""

    def __init__(
        self,
        adapter: SimulationAdapter,
        extractor: SituationExtractor,
        affinity: AffinityResolver,
        filter_settings: EventFilterSettings,
    ):
        self.adapter = adapter
        self.extractor = extractor
        self.affinity = affinity
        self.filter_settings = filter_settings

    def _display_name(self, type_id: str) -> str:
        info = self.adapter.type_catalog().get(type_id)
        if info is not None and info.label:
            return info.label
        return type_id

    def current_appendable(self, region: Optional[Region], is_high_danger: bool = False) -> List[FilterableEntity]:
        """Everything an unfiltered extraction would report for the region right now."""
        snapshots = self.extractor.extract(
            region,
            is_high_danger,
            max_entities=sys.maxsize,
            max_lookback=settings.CATALOG_THREAT_SCAN_BACK,
            apply_filters=False,
        )

        entities = []
        for snapshot in snapshots:
            if not snapshot.source_type_id:
                continue
            category = snapshot.category
            instance_name = snapshot.label
            if category == EventCategory.TASK:
                instance_name = strip_label_metadata(instance_name)
            entities.append(FilterableEntity(
                root_id=snapshot.source_type_id,
                display_name=snapshot.source_type_id,
                instance_name=instance_name,
                category=category,
                source_type_id=snapshot.source_type_id,
            ))
        return entities

    def available_types(
        self,
        current_only: bool,
        region: Optional[Region] = None,
        is_high_danger: bool = False,
    ) -> List[FilterableEntity]:
        """
        Types that can be filtered.

        Args:
            current_only: Only types currently appendable in the region, plus
                disabled types so they can be re-enabled
            region: Region to inspect when current_only is set
            is_high_danger: Whether threats are considered when current_only is set

        Returns:
            One entity per type id
        """
        if not current_only:
            return [
                FilterableEntity(
                    root_id=type_id,
                    display_name=info.label or type_id,
                    category=info.category,
                    source_type_id=type_id,
                )
                for type_id, info in self.adapter.type_catalog().items()
            ]

        entities: List[FilterableEntity] = []
        added: Set[str] = set()

        for entity in self.current_appendable(region, is_high_danger):
            if entity.root_id in added:
                continue
            added.add(entity.root_id)
            entities.append(entity.model_copy(update={"display_name": self._display_name(entity.root_id)}))

        for type_id in sorted(self.filter_settings.disabled_type_ids):
            if type_id in added:
                continue
            info = self.adapter.type_catalog().get(type_id)
            entities.append(FilterableEntity(
                root_id=type_id,
                display_name=self._display_name(type_id),
                category=info.category if info is not None else EventCategory.TASK,
                source_type_id=type_id,
            ))
            added.add(type_id)

        return entities

    def current_task_instances(self, region: Optional[Region]) -> List[FilterableEntity]:
        """Ongoing, visible, region-bound tasks affecting the region, with instance ids."""
        if region is None:
            return []

        instances = []
        for task in self.adapter.tasks():
            if task is None or task.id is None:
                continue
            if not task.is_ongoing or task.hidden or task.is_global:
                continue
            if not self.affinity.affects(task, region):
                continue

            root_type = task.root_type or "Unknown"
            instances.append(FilterableEntity(
                root_id=root_type,
                display_name=self._display_name(root_type),
                instance_name=task.label,
                category=EventCategory.TASK,
                source_type_id=root_type,
                instance_id=str(task.id),
            ))
        return instances
