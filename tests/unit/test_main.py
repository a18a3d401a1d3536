"""
Tests for the developer CLI.
"""

import json

import pytest

from main import main

DUMP = {
    "scope_id": "colony-1",
    "ticks_game": 120000,
    "world_objects": [{"id": 100, "label": "Home", "map_id": 1}],
    "maps": [
        {"unique_id": 1, "is_player_home": True, "tile": 500, "parent_id": 100, "game_conditions": [
            {"def_name": "HeatWave", "label": "Heat Wave", "description": "Hot.", "display_on_ui": True},
        ]},
    ],
}


@pytest.fixture
def dump_path(tmp_path):
    path = tmp_path / "dump.json"
    path.write_text(json.dumps(DUMP), encoding="utf-8")
    return path


class TestMain:
    """Test CLI exit codes and output."""

    def test_prints_block(self, dump_path, capsys):
        assert main([str(dump_path)]) == 0

        out = capsys.readouterr().out
        assert "[Ongoing events]" in out
        assert "1) Heat Wave" in out

    def test_malformed_filters_file(self, dump_path, tmp_path, capsys):
        """Should report a bad filters file instead of crashing."""
        filters = tmp_path / "filters.json"
        filters.write_text("{not json", encoding="utf-8")

        assert main([str(dump_path), "--filters", str(filters)]) == 1
        assert "[Ongoing events]" not in capsys.readouterr().out

    def test_missing_filters_file(self, dump_path, tmp_path):
        assert main([str(dump_path), "--filters", str(tmp_path / "absent.json")]) == 1

    def test_missing_dump(self, tmp_path):
        assert main([str(tmp_path / "absent.json")]) == 1
