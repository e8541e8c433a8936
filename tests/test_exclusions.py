"""Tests for the run-wide exclusion table."""
from constants import ExclusionKeyMode
from registry.maven.coordinates import Coordinate
from registry.maven.exclusions import ExclusionTable

PARENT = Coordinate("c", "d", "2.0")
CHILD = Coordinate("x", "y", "3.0")


class TestExclusionTable:
    """Test rule matching and key handling."""

    def test_no_entry_means_no_exclusion(self):
        table = ExclusionTable()
        assert not table.is_excluded(PARENT, CHILD)

    def test_exact_rule_excludes_child_of_declaring_dependency(self):
        table = ExclusionTable()
        table.merge({"c:d:2.0": [("x", "y")]})
        assert table.is_excluded(PARENT, CHILD)
        assert not table.is_excluded(PARENT, Coordinate("x", "z", "3.0"))

    def test_rule_does_not_apply_to_other_parents(self):
        table = ExclusionTable()
        table.merge({"c:d:2.0": [("x", "y")]})
        assert not table.is_excluded(Coordinate("a", "b", "1.0"), CHILD)

    def test_total_wildcard_excludes_everything(self):
        table = ExclusionTable()
        table.merge({"c:d:2.0": [("*", "*")]})
        assert table.matching_rule(PARENT, CHILD) == ("*", "*")
        assert table.is_excluded(PARENT, Coordinate("any", "thing", "1"))

    def test_field_wildcard_matches_group_or_artifact(self):
        table = ExclusionTable()
        table.merge({"c:d:2.0": [("x", "*"), ("*", "logging")]})
        assert table.is_excluded(PARENT, Coordinate("x", "other", "1"))
        assert table.is_excluded(PARENT, Coordinate("org.apache", "logging", "1"))
        assert not table.is_excluded(PARENT, Coordinate("org.apache", "other", "1"))

    def test_merge_accumulates_without_duplicates(self):
        table = ExclusionTable()
        table.merge({"c:d:2.0": [("x", "y")]})
        table.merge({"c:d:2.0": [("x", "y"), ("u", "v")]})
        assert table.rules_for(PARENT) == [("x", "y"), ("u", "v")]
        assert len(table) == 1

    def test_versioned_mode_distinguishes_versions(self):
        table = ExclusionTable(ExclusionKeyMode.VERSIONED)
        table.merge({"c:d:2.0": [("x", "y")]})
        assert not table.is_excluded(Coordinate("c", "d", "2.1"), CHILD)

    def test_unversioned_mode_applies_across_versions(self):
        table = ExclusionTable(ExclusionKeyMode.UNVERSIONED)
        table.merge({"c:d:2.0": [("x", "y")]})
        assert "c:d" in table
        assert table.is_excluded(PARENT, CHILD)
        assert table.is_excluded(Coordinate("c", "d", "2.1"), CHILD)

    def test_legacy_mode_never_matches(self):
        table = ExclusionTable(ExclusionKeyMode.LEGACY)
        table.merge({"c:d:2.0": [("x", "y"), ("*", "*")]})
        assert "c:d:2.0" in table
        assert table.rules_for(PARENT) == []
        assert not table.is_excluded(PARENT, CHILD)
