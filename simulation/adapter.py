"""
Simulation adapter boundary.

The pipeline never talks to the host directly. A SimulationAdapter answers
the handful of questions the pipeline asks, in terms of simulation.models.
When the host's API shape changes, a new adapter is written; the core logic
stays untouched.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from schemas.filterable import EventCategory
from schemas.templates import CompressionTemplate
from simulation.models import Alert, Region, Task


@dataclass(frozen=True)
class TypeInfo:
    """Catalog entry for one known type id."""

    category: EventCategory
    label: str = ""


class SimulationAdapter(ABC):
    """Read-only view of one loaded simulation."""

    @abstractmethod
    def scope_id(self) -> Optional[str]:
        """Identifier of the loaded save, used to partition instance filters."""

    @abstractmethod
    def now_tick(self) -> int:
        """Current simulation time in ticks."""

    @abstractmethod
    def tasks(self) -> List[Task]:
        """All narrative tasks known to the task registry."""

    @abstractmethod
    def recent_alerts(self) -> List[Alert]:
        """Bounded alert log, oldest first."""

    @abstractmethod
    def regions(self) -> List[Region]:
        """Currently loaded regions."""

    @abstractmethod
    def description_rule_strings(self, root_type: str) -> Optional[List[str]]:
        """Raw 'key->output' description rules for a task type, current language."""

    @abstractmethod
    def compression_templates(self) -> List[CompressionTemplate]:
        """All author-defined compression templates."""

    @abstractmethod
    def type_catalog(self) -> Dict[str, TypeInfo]:
        """Every type id the host knows, with its category and display label."""

    @abstractmethod
    def legacy_blacklist(self) -> List[str]:
        """Task type ids listed by the legacy blacklist definitions."""

    def conflicting_feature_active(self) -> bool:
        """True when another installed feature already reports tasks, conditions and threats."""
        return False

    def type_exists(self, type_id: str) -> bool:
        return type_id in self.type_catalog()

    def region_by_id(self, region_id: int) -> Optional[Region]:
        for region in self.regions():
            if region.id == region_id:
                return region
        return None

    def ongoing_task_ids(self) -> List[str]:
        """Instance ids of every ongoing task, as stored in instance filters."""
        return [str(task.id) for task in self.tasks() if task.id is not None and task.is_ongoing]


@dataclass
class StaticSimulation(SimulationAdapter):
    """In-memory adapter over already-translated model objects.

    Used by the loader, the developer CLI and the tests. Hosts that can be
    read live should subclass SimulationAdapter instead.
    """

    scope: Optional[str] = None
    tick: int = 0
    task_list: List[Task] = field(default_factory=list)
    alert_list: List[Alert] = field(default_factory=list)
    region_list: List[Region] = field(default_factory=list)
    rule_strings: Dict[str, List[str]] = field(default_factory=dict)
    templates: List[CompressionTemplate] = field(default_factory=list)
    types: Dict[str, TypeInfo] = field(default_factory=dict)
    legacy_blacklist_ids: List[str] = field(default_factory=list)
    conflict_probe: Optional[Callable[[], bool]] = None

    def scope_id(self) -> Optional[str]:
        return self.scope

    def now_tick(self) -> int:
        return self.tick

    def tasks(self) -> List[Task]:
        return self.task_list

    def recent_alerts(self) -> List[Alert]:
        return self.alert_list

    def regions(self) -> List[Region]:
        return self.region_list

    def description_rule_strings(self, root_type: str) -> Optional[List[str]]:
        return self.rule_strings.get(root_type)

    def compression_templates(self) -> List[CompressionTemplate]:
        return self.templates

    def type_catalog(self) -> Dict[str, TypeInfo]:
        return self.types

    def legacy_blacklist(self) -> List[str]:
        return self.legacy_blacklist_ids

    def conflicting_feature_active(self) -> bool:
        if self.conflict_probe is None:
            return False
        return bool(self.conflict_probe())

    def register_types(self, entries: Iterable[Tuple[str, EventCategory, str]]) -> None:
        """Add (type_id, category, label) entries to the type catalog."""
        for type_id, category, label in entries:
            if type_id and type_id not in self.types:
                self.types[type_id] = TypeInfo(category=category, label=label)
