"""
Tests for translating host dumps into the internal model.
"""

import json

import pytest

from core import InvalidInputError
from schemas.filterable import EventCategory
from simulation.loader import load_simulation, load_simulation_file
from simulation.models import (
    ActorPart,
    LocatedActorPart,
    LocatedPart,
    TaskPart,
    TaskState,
)

DUMP = {
    "scope_id": "colony-1",
    "ticks_game": 120000,
    "world_objects": [
        {"id": 100, "label": "Home", "map_id": 1},
        {"id": 200, "label": "Camp", "map_id": 2, "site_parts": [
            {"def_name": "BanditCamp", "label": "bandit camp", "description": "Outlaws."},
        ]},
    ],
    "maps": [
        {"unique_id": 1, "is_player_home": True, "tile": 500, "parent_id": 100, "game_conditions": [
            {"def_name": "HeatWave", "label": "Heat Wave", "description": "Hot.", "display_on_ui": True},
            {"def_name": "Hidden", "display_on_ui": False},
        ]},
        {"unique_id": 2, "is_player_home": False, "tile": 700, "parent_id": 200},
    ],
    "quests": [
        {
            "id": 7,
            "root": "Hospitality_Refugee",
            "name": "Refugee request",
            "state": "Ongoing",
            "acceptance_tick": 60000,
            "look_targets": [{"map_id": 1}],
            "parts": [
                {"type": "QuestPart_DropPods", "map_parent_id": 100},
                {"type": "QuestPart_ExtraFaction", "pawns": [{"id": 10, "name_short": "Ada"}]},
                {"type": "QuestPart_Lodgers", "map_parent_id": 100, "pawn": {"id": 11, "name_short": "Bob"}},
                {"type": "QuestPart_Choice"},
                "not a part",
            ],
        },
        {"id": "8", "root": "TradeRequest", "state": "NotYetAccepted", "acceptance_tick": "oops"},
    ],
    "archive": [
        {"def_name": "ThreatBig", "class": "ChoiceLetter", "label": "Raid", "created_tick": 119000},
        {"def_name": "PositiveEvent", "label": "Wanderer"},
    ],
    "grammar": {"Hospitality_Refugee": ["questDescription->[claimInfo]", 5]},
    "compression_templates": [
        {"source_def_name": "Hospitality_Refugee", "kind": "Quest", "compressed_body": "[claimInfo]"},
        {"source_def_name": "", "compressed_body": "ignored"},
    ],
    "legacy_blacklist": ["TradeRequest"],
    "defs": {
        "quests": {"Hospitality_Refugee": "Refugee", "TradeRequest": "Trade request"},
        "conditions": {"HeatWave": "Heat wave"},
        "threat_letters": {"ThreatBig": "Major threat"},
    },
}


class TestLoadSimulation:
    """Test dump translation."""

    def test_regions_and_conditions(self):
        sim = load_simulation(DUMP)
        home, away = sim.regions()

        assert home.is_home is True
        assert home.parent.id == 100
        assert [c.type_id for c in home.conditions] == ["HeatWave", "Hidden"]
        assert home.conditions[1].visible is False
        assert away.site_features[0].label == "bandit camp"

    def test_task_parts_by_capability(self):
        task = load_simulation(DUMP).tasks()[0]

        assert [type(p) for p in task.parts] == [LocatedPart, ActorPart, LocatedActorPart, TaskPart]
        assert task.parts[0].part_type == "DropPods"
        assert [a.short_name for a in task.actors()] == ["Ada", "Bob"]
        assert task.state == TaskState.ONGOING

    def test_unreadable_fields_treated_as_absent(self):
        task = load_simulation(DUMP).tasks()[1]

        assert task.id == 8
        assert task.accepted_tick == 0
        assert task.state == TaskState.NOT_YET_ACCEPTED

    def test_alerts_and_threat_classification(self):
        alerts = load_simulation(DUMP).recent_alerts()

        assert alerts[0].is_threat is True
        assert alerts[0].kind == "ChoiceLetter"
        assert alerts[1].is_threat is False
        assert alerts[1].created_tick is None

    def test_templates_rules_and_catalog(self):
        sim = load_simulation(DUMP)

        assert len(sim.compression_templates()) == 1
        assert sim.compression_templates()[0].kind == "Task"
        assert sim.description_rule_strings("Hospitality_Refugee") == ["questDescription->[claimInfo]"]
        assert sim.type_catalog()["HeatWave"].category == EventCategory.CONDITION
        assert sim.type_exists("TradeRequest") is True
        assert sim.legacy_blacklist() == ["TradeRequest"]
        assert sim.scope_id() == "colony-1"
        assert sim.now_tick() == 120000

    def test_ongoing_task_ids(self):
        assert load_simulation(DUMP).ongoing_task_ids() == ["7"]

    def test_rejects_non_object(self):
        with pytest.raises(InvalidInputError):
            load_simulation(["not", "a", "dump"])

    def test_empty_dump(self):
        sim = load_simulation({})

        assert sim.tasks() == []
        assert sim.regions() == []
        assert sim.conflicting_feature_active() is False

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "dump.json"
        path.write_text(json.dumps(DUMP), encoding="utf-8")

        assert load_simulation_file(path).scope_id() == "colony-1"
