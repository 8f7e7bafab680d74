"""
Tests for baseline resolution.

The stop-on-unrelated-state behaviour is a characterization of how
baselines have always been resolved: a build that recorded states, but
none for the repository, ends the search even if an older build has a
matching state.
"""

from datetime import datetime, timezone

from storescm.domain import BuildHistory, BuildRecord, RevisionState
from storescm.services.baseline import find_correct_baseline, is_relevant


def state(repository, version="1.0"):
    return RevisionState.parse(repository, f"App\t{version}\tDevelopment\n")


def build(number, previous, *states):
    return BuildRecord(
        number=number,
        timestamp=datetime(2013, 5, number, tzinfo=timezone.utc),
        previous_number=previous,
        revision_states=states,
    )


def resolve(history, repository):
    return find_correct_baseline(history, history.last_build(), repository)


class TestIsRelevant:
    """Test is_relevant."""

    def test_none_is_not_relevant(self):
        assert not is_relevant(None, "R")

    def test_matching_repository(self):
        assert is_relevant(state("R"), "R")
        assert not is_relevant(state("Q"), "R")


class TestFindCorrectBaseline:
    """Test find_correct_baseline."""

    def test_match_on_most_recent_build(self):
        history = BuildHistory.of([build(1, None, state("R", "1")), build(2, 1, state("R", "2"))])
        assert resolve(history, "R") == state("R", "2")

    def test_picks_matching_state_among_several(self):
        history = BuildHistory.of([build(1, None, state("Q"), state("R", "3"))])
        assert resolve(history, "R") == state("R", "3")

    def test_skips_builds_without_states(self):
        # B0 (current) and B1 have no states, B2 matches
        history = BuildHistory.of([
            build(1, None, state("R", "7")),
            build(2, 1),
            build(3, 2),
        ])
        assert resolve(history, "R") == state("R", "7")

    def test_characterization_stops_at_build_with_unrelated_state(self):
        # B1 recorded only Q; B2 recorded R. The walk stops at B1.
        history = BuildHistory.of([
            build(1, None, state("R", "7")),
            build(2, 1, state("Q")),
            build(3, 2),
        ])
        assert resolve(history, "R") is None

    def test_no_states_anywhere(self):
        history = BuildHistory.of([build(1, None), build(2, 1)])
        assert resolve(history, "R") is None

    def test_empty_history(self):
        assert resolve(BuildHistory(), "R") is None

    def test_self_referencing_build_terminates(self):
        history = BuildHistory.of([build(1, None, state("R")), build(2, 2)])
        assert resolve(history, "R") is None

    def test_cycle_terminates(self):
        history = BuildHistory.of([build(1, 2), build(2, 1)])
        assert resolve(history, "R") is None

    def test_starts_from_given_build(self):
        history = BuildHistory.of([
            build(1, None, state("R", "1")),
            build(2, 1, state("R", "2")),
        ])
        assert find_correct_baseline(history, history.get(1), "R") == state("R", "1")
