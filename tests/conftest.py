"""
Shared pytest fixtures for ongoing events tests.
"""

import pytest
from typing import List, Optional

from schemas.filter_settings import EventFilterSettings
from simulation.adapter import StaticSimulation
from simulation.models import (
    TICKS_PER_HOUR,
    Actor,
    ActorPart,
    Alert,
    Condition,
    LookTarget,
    Region,
    SiteFeature,
    Task,
    TaskPart,
    TaskState,
    WorldObject,
)

NOW_TICK = 1_000_000


@pytest.fixture
def now_tick():
    """Current simulation tick shared by every fixture."""
    return NOW_TICK


# --- Regions ---

@pytest.fixture
def home_region():
    """Player home region owned by world object 100, on tile 500."""
    home = WorldObject(id=100, label="Home", region_id=1)
    return Region(id=1, is_home=True, tile=500, parent=home)


@pytest.fixture
def away_region():
    """Away region at a bandit camp site with one site feature."""
    site = WorldObject(
        id=200,
        label="Bandit camp",
        site_features=[SiteFeature("BanditCamp", "bandit camp", "A camp of outlaws.")],
        region_id=2,
    )
    return Region(id=2, is_home=False, tile=700, parent=site)


# --- Builders ---

@pytest.fixture
def make_task():
    """Factory for tasks targeting a region, with optional actors."""

    def _make(
        task_id: Optional[int] = 1,
        root_type: Optional[str] = "Hospitality_Refugee",
        name: str = "Refugee request",
        region: Optional[Region] = None,
        actors: Optional[List[Actor]] = None,
        accepted_hours_ago: Optional[float] = None,
        state: TaskState = TaskState.ONGOING,
        hidden: bool = False,
        description: str = "",
        parts: Optional[list] = None,
    ) -> Task:
        targets = [LookTarget(region_id=region.id)] if region is not None else []
        task_parts = list(parts or [])
        if actors:
            task_parts.append(ActorPart(part_type="Lodgers", actors=tuple(actors)))
        accepted_tick = 0
        if accepted_hours_ago is not None:
            accepted_tick = NOW_TICK - int(accepted_hours_ago * TICKS_PER_HOUR)
        return Task(
            id=task_id,
            root_type=root_type,
            name=name,
            description=description,
            state=state,
            hidden=hidden,
            accepted_tick=accepted_tick,
            targets=targets,
            parts=task_parts or [TaskPart()],
        )

    return _make


@pytest.fixture
def make_threat():
    """Factory for threat alerts created some hours before NOW_TICK."""

    def _make(label: str, hours_ago: float, type_id: str = "ThreatBig") -> Alert:
        return Alert(
            type_id=type_id,
            kind="ChoiceLetter",
            label=label,
            tooltip=f"{label} details",
            created_tick=NOW_TICK - int(hours_ago * TICKS_PER_HOUR),
            is_threat=True,
        )

    return _make


@pytest.fixture
def heat_wave():
    return Condition("HeatWave", "Heat Wave", "It is very hot.")


@pytest.fixture
def simulation(home_region, away_region):
    """Empty simulation with a home and an away region."""
    return StaticSimulation(
        scope="colony-1",
        tick=NOW_TICK,
        region_list=[home_region, away_region],
    )


@pytest.fixture
def filter_settings():
    return EventFilterSettings()
