"""Tests for the immutable match snapshots."""
from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from hoop_rivals.stats.domain import (
    MatchRecord,
    PointsDetail,
    QuartersDetail,
    ScoringUnit,
    StatLine,
    scoring_units,
    stat_lines,
)
from hoop_rivals.types import InconsistentStateError, MatchType


class TestMatchRecord:
    """Tests for MatchRecord consistency."""

    def test_rejects_points_detail_on_quarters_match(self) -> None:
        """The detail variant must fit the declared type."""
        with pytest.raises(InconsistentStateError):
            MatchRecord(
                match_id=1,
                match_type=MatchType.QUARTERS,
                team_size=1,
                detail=PointsDetail(unit=ScoringUnit(unit_id=1)),
            )

    def test_rejects_quarters_detail_on_points_match(self) -> None:
        """A POINTS match cannot carry quarters."""
        with pytest.raises(InconsistentStateError):
            MatchRecord(
                match_id=1,
                match_type=MatchType.POINTS,
                team_size=1,
                detail=QuartersDetail(),
            )

    def test_snapshots_are_frozen(self) -> None:
        """Snapshots cannot be mutated after loading."""
        stats = StatLine()
        with pytest.raises(FrozenInstanceError):
            stats.rebounds = 3  # type: ignore[misc]

    def test_team_of(self, matches) -> None:
        """team_of finds the player's side."""
        match = matches.points({}, team_a=("p1", "p3"), team_b=("p2", "p4"))

        assert match.team_of("p3") is match.teams[0]
        assert match.team_of("p4") is match.teams[1]
        assert match.team_of("p9") is None


class TestScoringUnits:
    """Tests for scoring_units and stat_lines accessors."""

    def test_quarters_yield_each_quarter(self, matches, stat_line) -> None:
        """QUARTERS matches expose their quarters in order."""
        match = matches.quarters([{}, {"p1": stat_line()}, {}], durations=[5, 5, 10])

        units = scoring_units(match)

        assert [u.number for u in units] == [1, 2, 3]
        assert match.detail.first_duration == 5

    def test_points_yield_single_unit(self, matches, stat_line) -> None:
        """POINTS matches expose their whole-game unit."""
        match = matches.points({"p1": stat_line(), "p2": stat_line()})

        assert len(scoring_units(match)) == 1
        assert [row.player_id for row in stat_lines(match)] == ["p1", "p2"]

    def test_empty_quarters_have_no_first_duration(self) -> None:
        """No quarters means no first duration."""
        assert QuartersDetail().first_duration is None
