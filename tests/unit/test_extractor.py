"""
Tests for situation extraction: priority, capacity, threats and task labels.
"""

import pytest

from events.affinity import AffinityResolver
from events.extractor import SituationExtractor, accepted_age_marker, task_display_label
from events.filter_policy import FilterPolicy
from simulation.models import (
    TICKS_PER_HOUR,
    Actor,
    Alert,
    Condition,
    SiteFeature,
    Task,
    TaskState,
)

ADA = Actor(id=10, short_name="Ada")


@pytest.fixture
def extractor(simulation, filter_settings):
    return SituationExtractor(simulation, AffinityResolver(), FilterPolicy(filter_settings))


class TestAgeMarker:
    """Test the accepted-age marker."""

    @pytest.mark.parametrize("hours, expected", [
        (0.5, "accepted just now"),
        (1.2, "accepted ~1 hour ago"),
        (5, "accepted ~5 hours ago"),
        (23.9, "accepted ~24 hours ago"),
        (24, "accepted ~1.0 days ago"),
        (31, "accepted ~1.3 days ago"),
        (60, "accepted ~2.5 days ago"),
    ])
    def test_marker(self, hours, expected, now_tick):
        task = Task(id=1, accepted_tick=now_tick - int(hours * TICKS_PER_HOUR))
        assert accepted_age_marker(task, now_tick) == expected

    def test_not_accepted(self, now_tick):
        assert accepted_age_marker(Task(id=1, accepted_tick=0), now_tick) is None
        pending = Task(id=1, state=TaskState.NOT_YET_ACCEPTED, accepted_tick=5)
        assert accepted_age_marker(pending, now_tick) is None

    def test_label_without_marker_or_actors(self, now_tick):
        assert task_display_label(Task(id=1, name="Trade request"), now_tick) == "Trade request"

    def test_label_falls_back_to_description(self, now_tick):
        task = Task(id=1, description="First line\nSecond line")
        assert task_display_label(task, now_tick) == "First line"
        assert task_display_label(Task(id=2), now_tick) == "Task"


class TestScenarios:
    """End-to-end extraction scenarios."""

    def test_condition_then_task_with_age_and_actor(self, extractor, simulation, home_region, heat_wave, make_task):
        """Should list the condition before the task, with the full task label."""
        home_region.conditions = [heat_wave]
        simulation.task_list = [make_task(region=home_region, actors=[ADA], accepted_hours_ago=31)]

        result = extractor.extract(home_region, is_high_danger=False)

        assert [s.label for s in result] == [
            "Heat Wave",
            "Refugee request [accepted ~1.3 days ago] | characters: Ada",
        ]
        assert result[0].kind == "Condition_HeatWave"
        assert result[1].kind == "Task"
        assert result[1].instance_id == "1"

    def test_only_recent_threat_reported(self, simulation, filter_settings, home_region, make_threat):
        """Should report the 2-hour-old threat and not the 4-hour-old one."""
        simulation.alert_list = [make_threat("Old raid", 4), make_threat("New raid", 2)]
        extractor = SituationExtractor(
            simulation, AffinityResolver(), FilterPolicy(filter_settings),
            threat_timeout_ticks=3 * TICKS_PER_HOUR,
        )

        result = extractor.extract(home_region, is_high_danger=True)

        assert [s.label for s in result] == ["New raid"]
        assert result[0].is_threat is True

    def test_stale_newest_threat_stops_scan(self, simulation, filter_settings, home_region, make_threat):
        simulation.alert_list = [make_threat("Recent", 2), make_threat("Stale", 4)]
        extractor = SituationExtractor(
            simulation, AffinityResolver(), FilterPolicy(filter_settings),
            threat_timeout_ticks=3 * TICKS_PER_HOUR,
        )

        assert extractor.extract(home_region, is_high_danger=True) == []

    def test_no_threats_without_danger(self, extractor, simulation, home_region, make_threat):
        simulation.alert_list = [make_threat("Raid", 1)]
        assert extractor.extract(home_region, is_high_danger=False) == []

    def test_threat_lookback_limit(self, extractor, simulation, home_region, make_threat, now_tick):
        """Should only scan max_lookback alerts, newest first."""
        notes = [Alert(type_id="NeutralEvent", label=f"Note {i}", created_tick=now_tick) for i in range(3)]
        simulation.alert_list = [make_threat("Raid", 1)] + notes

        assert extractor.extract(home_region, True, max_lookback=3) == []
        assert [s.label for s in extractor.extract(home_region, True, max_lookback=4)] == ["Raid"]

    def test_unknown_creation_time_skips_age_check(self, extractor, simulation, home_region):
        simulation.alert_list = [Alert(type_id="ThreatBig", label="Siege", is_threat=True)]

        assert [s.label for s in extractor.extract(home_region, True)] == ["Siege"]

    def test_type_blacklist_hides_only_that_type(self, extractor, simulation, home_region, make_task):
        """Should keep Y when X is globally disabled."""
        simulation.task_list = [
            make_task(task_id=1, root_type="X", name="Task X", region=home_region),
            make_task(task_id=2, root_type="Y", name="Task Y", region=home_region),
        ]
        extractor.policy.disable_type("X")

        result = extractor.extract(home_region, is_high_danger=False)

        assert [s.source_type_id for s in result] == ["Y"]

    def test_zero_capacity(self, extractor, simulation, home_region, heat_wave, make_task):
        home_region.conditions = [heat_wave]
        simulation.task_list = [make_task(region=home_region)]

        assert extractor.extract(home_region, False, max_entities=0) == []

    def test_no_region(self, extractor):
        assert extractor.extract(None, True) == []


class TestStages:
    """Test stage-specific rules."""

    def test_site_features_first_on_away_regions(self, extractor, simulation, away_region, heat_wave, make_task):
        away_region.conditions = [heat_wave]
        simulation.task_list = [make_task(region=away_region)]

        result = extractor.extract(away_region, is_high_danger=False)

        assert result[0].label == "[current location] bandit camp"
        assert result[0].kind == "SiteFeature_BanditCamp"
        assert [s.category.value for s in result] == ["SiteFeature", "Condition", "Task"]

    def test_no_site_features_at_home(self, extractor, home_region):
        home_region.parent.site_features = [SiteFeature("Camp", "camp", "A camp.")]
        assert extractor.extract(home_region, False) == []

    def test_capacity_across_stages(self, extractor, simulation, home_region, heat_wave, make_task):
        home_region.conditions = [heat_wave, Condition("SolarFlare", "Solar flare")]
        simulation.task_list = [make_task(region=home_region)]

        result = extractor.extract(home_region, False, max_entities=2)

        assert [s.source_type_id for s in result] == ["HeatWave", "SolarFlare"]

    def test_hidden_inactive_and_invisible_skipped(self, extractor, simulation, home_region, make_task):
        home_region.conditions = [
            Condition("Hidden", "Hidden", visible=False),
            Condition("Over", "Over", active=False),
        ]
        simulation.task_list = [
            make_task(task_id=1, region=home_region, hidden=True),
            make_task(task_id=2, region=home_region, state=TaskState.ENDED),
            make_task(task_id=3, region=None),
        ]

        assert extractor.extract(home_region, False) == []

    def test_filtered_entities_do_not_use_capacity(self, extractor, simulation, home_region, heat_wave, make_task):
        home_region.conditions = [heat_wave]
        simulation.task_list = [make_task(region=home_region)]
        extractor.policy.disable_type("HeatWave")

        result = extractor.extract(home_region, False, max_entities=1)

        assert [s.source_type_id for s in result] == ["Hospitality_Refugee"]

    def test_unfiltered_extraction(self, extractor, simulation, home_region, heat_wave):
        home_region.conditions = [heat_wave]
        extractor.policy.disable_type("HeatWave")

        assert extractor.extract(home_region, False, apply_filters=False)[0].source_type_id == "HeatWave"

    def test_instance_filter(self, extractor, simulation, home_region, make_task):
        simulation.task_list = [
            make_task(task_id=1, region=home_region),
            make_task(task_id=2, name="Second", region=home_region),
        ]
        extractor.policy.disable_instance("colony-1", "1")

        assert [s.instance_id for s in extractor.extract(home_region, False)] == ["2"]


class TestBlacklistMonotonicity:
    """Disabling a type can only remove entities from later extractions."""

    def test_disabling_never_adds(self, extractor, simulation, home_region, heat_wave, make_task):
        home_region.conditions = [heat_wave]
        simulation.task_list = [
            make_task(task_id=i, root_type=f"T{i % 3}", name=f"Task {i}", region=home_region)
            for i in range(1, 8)
        ]

        before = {(s.source_type_id, s.label) for s in extractor.extract(home_region, False, max_entities=10)}
        for type_id in ("T1", "HeatWave", "T0"):
            extractor.policy.disable_type(type_id)
            after = {(s.source_type_id, s.label) for s in extractor.extract(home_region, False, max_entities=10)}
            assert after <= before
            assert all(source != type_id for source, _ in after)
            before = after
