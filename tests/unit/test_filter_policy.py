"""
Tests for visibility rules and filter mutations.
"""

from events.filter_policy import ConflictSignal, FilterPolicy
from schemas.filter_settings import EventFilterSettings
from schemas.filterable import EventCategory


def policy_with(conflict=False, **overrides):
    return FilterPolicy(EventFilterSettings(**overrides), ConflictSignal(lambda: conflict))


class TestIsVisible:
    """Test the combined visibility check."""

    def test_everything_visible_by_default(self):
        policy = policy_with()
        for category in EventCategory:
            assert policy.is_visible(category, "Any") is True

    def test_category_toggle(self):
        policy = policy_with(show_conditions=False)

        assert policy.is_visible(EventCategory.CONDITION, "HeatWave") is False
        assert policy.is_visible(EventCategory.TASK, "Hospitality_Refugee") is True

    def test_type_blacklist(self):
        policy = policy_with()
        policy.disable_type("X")

        assert policy.is_visible(EventCategory.TASK, "X") is False
        assert policy.is_visible(EventCategory.TASK, "Y") is True

    def test_instance_blacklist_scoped(self):
        """Should only hide the instance in the scope it was disabled in."""
        policy = policy_with()
        policy.disable_instance("colony-1", "42")

        assert policy.is_visible(EventCategory.TASK, "X", "42", "colony-1") is False
        assert policy.is_visible(EventCategory.TASK, "X", "42", "colony-2") is True
        assert policy.is_visible(EventCategory.TASK, "X", "43", "colony-1") is True
        assert policy.is_visible(EventCategory.TASK, "X", None, "colony-1") is True


class TestConflictSignal:
    """Test the conflicting-feature override."""

    def test_conflict_disables_all_but_site_features(self):
        policy = policy_with(conflict=True)

        assert policy.is_visible(EventCategory.TASK, "X") is False
        assert policy.is_visible(EventCategory.CONDITION, "X") is False
        assert policy.is_visible(EventCategory.THREAT, "X") is False
        assert policy.is_visible(EventCategory.SITE_FEATURE, "X") is True

    def test_failing_probe_reads_as_no_conflict(self):
        def broken():
            raise RuntimeError("settings not loaded")

        assert ConflictSignal(broken).is_active() is False
        assert ConflictSignal().is_active() is False

    def test_probe_read_on_every_check(self):
        state = {"active": False}
        policy = FilterPolicy(EventFilterSettings(), ConflictSignal(lambda: state["active"]))

        assert policy.category_enabled(EventCategory.TASK) is True
        state["active"] = True
        assert policy.category_enabled(EventCategory.TASK) is False


class TestMutations:
    """Test adding, removing and resetting filters."""

    def test_type_add_remove(self):
        policy = policy_with()

        assert policy.disable_type("X") is True
        assert policy.disable_type("X") is False
        assert policy.enable_type("X") is True
        assert policy.enable_type("X") is False

    def test_enable_instance_prunes_empty_scope(self):
        policy = policy_with()
        policy.disable_instance("colony-1", "42")

        assert policy.enable_instance("colony-1", "42") is True
        assert "colony-1" not in policy.settings.disabled_instances

    def test_enable_unknown_instance(self):
        assert policy_with().enable_instance("colony-1", "42") is False

    def test_disable_instance_needs_scope(self):
        policy = policy_with()

        assert policy.disable_instance("", "42") is False
        assert policy.settings.disabled_instances == {}

    def test_reset_counts(self):
        policy = policy_with()
        policy.disable_type("X")
        policy.disable_type("Y")
        policy.disable_instance("colony-1", "1")
        policy.disable_instance("colony-1", "2")
        policy.disable_instance("colony-1", "3")

        assert policy.reset_type_filters() == 2
        assert policy.reset_instance_filters("colony-1") == 3
        assert policy.reset_instance_filters("colony-1") == 0
        assert policy.settings.disabled_type_ids == set()


class TestSweep:
    """Test removal of filters for tasks that are no longer ongoing."""

    def test_removes_inactive_and_prunes(self):
        policy = policy_with()
        policy.disable_instance("colony-1", "1")
        policy.disable_instance("colony-1", "2")

        assert policy.sweep_inactive_instances("colony-1", ["2", "5"]) == 1
        assert "2" in policy.settings.disabled_instances["colony-1"]

        assert policy.sweep_inactive_instances("colony-1", []) == 1
        assert "colony-1" not in policy.settings.disabled_instances

    def test_unknown_scope(self):
        assert policy_with().sweep_inactive_instances("nowhere", ["1"]) == 0
