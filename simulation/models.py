"""
Stable internal data model of the host simulation.

Adapters (see simulation.adapter and simulation.loader) translate whatever
shape the host exposes into these classes; everything downstream only ever
sees this model. Host objects are compared by id, never by identity.

Task sub-parts are typed variants. A part only carries a location signal if
it implements LocationBearing, and only names actors if it implements
ActorBearing, so callers dispatch on capability instead of probing fields.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

TICKS_PER_DAY = 60000
TICKS_PER_HOUR = TICKS_PER_DAY // 24


class TaskState(str, Enum):
    """Lifecycle state of a narrative task."""

    NOT_YET_ACCEPTED = "not_yet_accepted"
    ONGOING = "ongoing"
    ENDED = "ended"


@dataclass(frozen=True)
class Actor:
    """A character the simulation can reference by id."""

    id: int
    short_name: str = ""


@dataclass(frozen=True)
class SiteFeature:
    """A descriptor attached to an away location (e.g. 'ancient mercenaries')."""

    type_id: str
    label: str = ""
    description: str = ""


@dataclass(frozen=True)
class Condition:
    """An environmental condition active on a region (heat wave, solar flare...)."""

    type_id: str
    label: str = ""
    description: str = ""
    visible: bool = True
    active: bool = True


@dataclass(eq=False)
class WorldObject:
    """The world-level object owning a region (home base, site, camp)."""

    id: int
    label: str = ""
    site_features: List[SiteFeature] = field(default_factory=list)
    region_id: Optional[int] = None  # id of the region currently generated for it


@dataclass(eq=False)
class Region:
    """A spatial simulation area."""

    id: int
    is_home: bool = True
    tile: Optional[int] = None
    parent: Optional[WorldObject] = None
    conditions: List[Condition] = field(default_factory=list)

    @property
    def site_features(self) -> List[SiteFeature]:
        if self.parent is None:
            return []
        return list(self.parent.site_features)


@dataclass(frozen=True)
class LookTarget:
    """A declared target of a task or task part. Any field may be absent."""

    region_id: Optional[int] = None
    world_object_id: Optional[int] = None
    tile: Optional[int] = None


@dataclass(frozen=True)
class LocationRef:
    """One location reference exposed by a LocationBearing part."""

    region_id: Optional[int] = None
    world_object_id: Optional[int] = None
    world_object_region_id: Optional[int] = None


@runtime_checkable
class LocationBearing(Protocol):
    """Implemented only by task parts that actually carry a region reference."""

    def location_refs(self) -> Iterable[LocationRef]:
        ...


@runtime_checkable
class ActorBearing(Protocol):
    """Implemented only by task parts that directly name actors."""

    def associated_actors(self) -> Iterable[Actor]:
        ...


@dataclass(eq=False)
class TaskPart:
    """A sub-part of a task with no location or actor signal."""

    part_type: str = "Generic"


@dataclass(eq=False)
class LocatedPart(TaskPart):
    """A task part bound to a world object and/or region."""

    parent: Optional[WorldObject] = None
    region_id: Optional[int] = None
    targets: Tuple[LookTarget, ...] = ()

    def location_refs(self) -> Iterator[LocationRef]:
        for target in self.targets:
            yield LocationRef(region_id=target.region_id, world_object_id=target.world_object_id)
        if self.region_id is not None:
            yield LocationRef(region_id=self.region_id)
        if self.parent is not None:
            yield LocationRef(
                world_object_id=self.parent.id,
                world_object_region_id=self.parent.region_id,
            )


@dataclass(eq=False)
class ActorPart(TaskPart):
    """A task part naming one or more actors."""

    actors: Tuple[Actor, ...] = ()

    def associated_actors(self) -> Iterator[Actor]:
        yield from self.actors


@dataclass(eq=False)
class LocatedActorPart(LocatedPart, ActorPart):
    """A task part with both a location and actors (e.g. a lodger staying at a site)."""

    pass


@dataclass(eq=False)
class Task:
    """A narrative task instance."""

    id: Optional[int]
    root_type: Optional[str] = None
    name: str = ""
    description: str = ""
    state: TaskState = TaskState.ONGOING
    hidden: bool = False
    accepted_tick: int = 0
    targets: List[LookTarget] = field(default_factory=list)
    parts: List[TaskPart] = field(default_factory=list)
    is_global: bool = False  # not tied to any region (e.g. world-wide root tasks)

    @property
    def is_ongoing(self) -> bool:
        return self.state == TaskState.ONGOING

    @property
    def label(self) -> str:
        """Name, else first line of the description, else a generic title."""
        if self.name:
            return self.name
        if self.description:
            first_line = self.description.split("\n", 1)[0]
            if first_line:
                return first_line
            return self.description
        return "Task"

    def actors(self) -> List[Actor]:
        """Directly associated actors across all parts, de-duplicated, in order."""
        seen = set()
        result = []
        for part in self.parts:
            if not isinstance(part, ActorBearing):
                continue
            for actor in part.associated_actors():
                if actor is None or actor.id in seen:
                    continue
                seen.add(actor.id)
                result.append(actor)
        return result


@dataclass(frozen=True)
class Alert:
    """An entry of the host's bounded, time-ordered alert log."""

    type_id: str
    kind: str = "Letter"
    label: str = ""
    tooltip: str = ""
    created_tick: Optional[int] = None
    is_threat: bool = False
