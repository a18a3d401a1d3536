"""
Host dump translation.

Turns the raw dictionary a host exporter writes (field names follow the
host's own vocabulary: maps, quests, archive, defs) into the internal
model and wraps it in a StaticSimulation.

Optional fields are read defensively: a field that is missing or has the
wrong shape is treated as absent, never as an error, so a dump from an
older or newer host version still loads.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from core import HostReadError, InvalidInputError, get_logger
from schemas.filterable import EventCategory
from schemas.snapshot import TASK_KIND
from schemas.templates import CompressionTemplate
from simulation.adapter import StaticSimulation, TypeInfo
from simulation.models import (
    Actor,
    ActorPart,
    Alert,
    Condition,
    LocatedActorPart,
    LocatedPart,
    LookTarget,
    Region,
    SiteFeature,
    Task,
    TaskPart,
    TaskState,
    WorldObject,
)

logger = get_logger(__name__)

PART_TYPE_PREFIX = "QuestPart_"
THREAT_ALERT_TYPES = frozenset({"ThreatBig", "ThreatSmall"})
HOST_TASK_KIND = "quest"

_STATE_MAP = {
    "notyetaccepted": TaskState.NOT_YET_ACCEPTED,
    "ongoing": TaskState.ONGOING,
}


# ==================== Field readers ====================


def _read_int(raw: Dict[str, Any], field: str, owner: str) -> Optional[int]:
    value = raw.get(field)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise HostReadError(owner, field, details=f"unexpected {type(value).__name__}")
    try:
        return int(value)
    except ValueError as e:
        raise HostReadError(owner, field, details=str(e))


def _read_list(raw: Dict[str, Any], field: str, owner: str) -> List[Any]:
    value = raw.get(field)
    if value is None:
        return []
    if not isinstance(value, list):
        raise HostReadError(owner, field, details=f"unexpected {type(value).__name__}")
    return value


def _optional(reader, raw: Dict[str, Any], field: str, owner: str, default=None):
    """Run a field reader; an unreadable field counts as absent."""
    try:
        result = reader(raw, field, owner)
    except HostReadError as e:
        logger.debug("Optional host field unreadable", **e.context)
        return default
    return default if result is None else result


def _text(raw: Dict[str, Any], field: str) -> str:
    value = raw.get(field)
    return value if isinstance(value, str) else ""


# ==================== Translators ====================


def _look_target(raw: Any) -> Optional[LookTarget]:
    if not isinstance(raw, dict):
        return None
    target = LookTarget(
        region_id=_optional(_read_int, raw, "map_id", "LookTarget"),
        world_object_id=_optional(_read_int, raw, "world_object_id", "LookTarget"),
        tile=_optional(_read_int, raw, "tile", "LookTarget"),
    )
    if target.region_id is None and target.world_object_id is None and target.tile is None:
        return None
    return target


def _look_targets(raw: Dict[str, Any], field: str, owner: str) -> Tuple[LookTarget, ...]:
    targets = (_look_target(item) for item in _optional(_read_list, raw, field, owner, []))
    return tuple(t for t in targets if t is not None)


def _actor(raw: Any) -> Optional[Actor]:
    if not isinstance(raw, dict):
        return None
    actor_id = _optional(_read_int, raw, "id", "Pawn")
    if actor_id is None:
        return None
    return Actor(id=actor_id, short_name=_text(raw, "name_short") or _text(raw, "name"))


def _part(raw: Any, world_objects: Dict[int, WorldObject]) -> Optional[TaskPart]:
    """Pick the part variant from the fields the host actually filled in."""
    if not isinstance(raw, dict):
        return None

    part_type = _text(raw, "type") or "Generic"
    if part_type.startswith(PART_TYPE_PREFIX):
        part_type = part_type[len(PART_TYPE_PREFIX):]
    owner = f"QuestPart_{part_type}"

    parent_id = _optional(_read_int, raw, "map_parent_id", owner)
    parent = world_objects.get(parent_id) if parent_id is not None else None
    region_id = _optional(_read_int, raw, "map_id", owner)
    targets = _look_targets(raw, "look_targets", owner) + _look_targets(raw, "select_targets", owner)

    actors = []
    single = _actor(raw.get("pawn"))
    if single is not None:
        actors.append(single)
    for item in _optional(_read_list, raw, "pawns", owner, []):
        actor = _actor(item)
        if actor is not None:
            actors.append(actor)

    located = parent is not None or region_id is not None or bool(targets)
    if located and actors:
        return LocatedActorPart(
            part_type=part_type, parent=parent, region_id=region_id,
            targets=targets, actors=tuple(actors),
        )
    if located:
        return LocatedPart(part_type=part_type, parent=parent, region_id=region_id, targets=targets)
    if actors:
        return ActorPart(part_type=part_type, actors=tuple(actors))
    return TaskPart(part_type=part_type)


def _task(raw: Dict[str, Any], world_objects: Dict[int, WorldObject]) -> Task:
    state_text = _text(raw, "state").replace("_", "").lower()
    parts = []
    for item in _optional(_read_list, raw, "parts", "Quest", []):
        part = _part(item, world_objects)
        if part is not None:
            parts.append(part)

    return Task(
        id=_optional(_read_int, raw, "id", "Quest"),
        root_type=_text(raw, "root") or None,
        name=_text(raw, "name"),
        description=_text(raw, "description"),
        state=_STATE_MAP.get(state_text, TaskState.ENDED),
        hidden=bool(raw.get("hidden", False)),
        accepted_tick=_optional(_read_int, raw, "acceptance_tick", "Quest", 0),
        targets=list(_look_targets(raw, "look_targets", "Quest")),
        parts=parts,
        is_global=bool(raw.get("root_is_special", False)),
    )


def _alert(raw: Dict[str, Any]) -> Optional[Alert]:
    type_id = _text(raw, "def_name")
    if not type_id:
        return None
    return Alert(
        type_id=type_id,
        kind=_text(raw, "class") or "Letter",
        label=_text(raw, "label"),
        tooltip=_text(raw, "tooltip"),
        created_tick=_optional(_read_int, raw, "created_tick", "Letter"),
        is_threat=bool(raw.get("threat", type_id in THREAT_ALERT_TYPES)),
    )


def _condition(raw: Dict[str, Any]) -> Optional[Condition]:
    type_id = _text(raw, "def_name")
    if not type_id:
        return None
    return Condition(
        type_id=type_id,
        label=_text(raw, "label") or type_id,
        description=_text(raw, "description"),
        visible=bool(raw.get("display_on_ui", True)),
        active=bool(raw.get("active", True)),
    )


def _site_feature(raw: Dict[str, Any]) -> Optional[SiteFeature]:
    type_id = _text(raw, "def_name")
    if not type_id:
        return None
    return SiteFeature(
        type_id=type_id,
        label=_text(raw, "label") or type_id,
        description=_text(raw, "description"),
    )


def _dicts(items: List[Any]) -> List[Dict[str, Any]]:
    return [item for item in items if isinstance(item, dict)]


def _type_catalog(raw: Dict[str, Any]) -> Dict[str, TypeInfo]:
    defs = raw.get("defs") if isinstance(raw.get("defs"), dict) else {}
    sections = (
        ("quests", EventCategory.TASK),
        ("conditions", EventCategory.CONDITION),
        ("site_parts", EventCategory.SITE_FEATURE),
        ("threat_letters", EventCategory.THREAT),
    )
    catalog: Dict[str, TypeInfo] = {}
    for section, category in sections:
        entries = defs.get(section)
        if not isinstance(entries, dict):
            continue
        for type_id, label in entries.items():
            if type_id and type_id not in catalog:
                catalog[type_id] = TypeInfo(category=category, label=label if isinstance(label, str) else "")
    return catalog


def _template_kind(kind: str) -> Optional[str]:
    """Host template kinds use the host's vocabulary; task templates say 'Quest'."""
    if not kind:
        return None
    return TASK_KIND if kind.lower() == HOST_TASK_KIND else kind


def _templates(raw: Dict[str, Any]) -> List[CompressionTemplate]:
    templates = []
    for item in _dicts(_optional(_read_list, raw, "compression_templates", "Dump", [])):
        source = _text(item, "source_def_name")
        if not source:
            continue
        templates.append(CompressionTemplate(
            source_type_id=source,
            kind=_template_kind(_text(item, "kind")),
            compressed_body=_text(item, "compressed_body"),
        ))
    return templates


def load_simulation(raw: Dict[str, Any]) -> StaticSimulation:
    """
    Translate a raw host dump into a StaticSimulation.

    Args:
        raw: Parsed dump

    Returns:
        Adapter over the translated model

    Raises:
        InvalidInputError: If the dump is not a JSON object
    """
    if not isinstance(raw, dict):
        raise InvalidInputError("dump", "expected a JSON object")

    world_objects: Dict[int, WorldObject] = {}
    for item in _dicts(_optional(_read_list, raw, "world_objects", "Dump", [])):
        object_id = _optional(_read_int, item, "id", "WorldObject")
        if object_id is None:
            continue
        features = [_site_feature(f) for f in _dicts(_optional(_read_list, item, "site_parts", "WorldObject", []))]
        world_objects[object_id] = WorldObject(
            id=object_id,
            label=_text(item, "label"),
            site_features=[f for f in features if f is not None],
            region_id=_optional(_read_int, item, "map_id", "WorldObject"),
        )

    regions = []
    for item in _dicts(_optional(_read_list, raw, "maps", "Dump", [])):
        region_id = _optional(_read_int, item, "unique_id", "Map")
        if region_id is None:
            continue
        parent_id = _optional(_read_int, item, "parent_id", "Map")
        parent = world_objects.get(parent_id) if parent_id is not None else None
        conditions = [_condition(c) for c in _dicts(_optional(_read_list, item, "game_conditions", "Map", []))]
        regions.append(Region(
            id=region_id,
            is_home=bool(item.get("is_player_home", True)),
            tile=_optional(_read_int, item, "tile", "Map"),
            parent=parent,
            conditions=[c for c in conditions if c is not None],
        ))

    tasks = [_task(item, world_objects) for item in _dicts(_optional(_read_list, raw, "quests", "Dump", []))]
    alerts = [_alert(item) for item in _dicts(_optional(_read_list, raw, "archive", "Dump", []))]

    grammar = raw.get("grammar") if isinstance(raw.get("grammar"), dict) else {}
    rule_strings = {
        root: [line for line in lines if isinstance(line, str)]
        for root, lines in grammar.items()
        if isinstance(lines, list)
    }

    simulation = StaticSimulation(
        scope=_text(raw, "scope_id") or None,
        tick=_optional(_read_int, raw, "ticks_game", "Dump", 0),
        task_list=tasks,
        alert_list=[a for a in alerts if a is not None],
        region_list=regions,
        rule_strings=rule_strings,
        templates=_templates(raw),
        types=_type_catalog(raw),
        legacy_blacklist_ids=[x for x in _optional(_read_list, raw, "legacy_blacklist", "Dump", []) if isinstance(x, str)],
    )
    conflict = bool(raw.get("conflicting_feature_active", False))
    simulation.conflict_probe = lambda: conflict

    logger.info(
        "Simulation dump loaded",
        scope_id=simulation.scope,
        regions=len(regions),
        tasks=len(tasks),
        alerts=len(simulation.alert_list),
    )
    return simulation


def load_simulation_file(path: Union[str, Path]) -> StaticSimulation:
    """Read a JSON dump from disk and translate it."""
    with open(path, "r", encoding="utf-8") as f:
        return load_simulation(json.load(f))
