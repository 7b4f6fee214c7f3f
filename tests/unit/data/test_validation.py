"""Tests for stored-match integrity checks."""
from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.orm import Session

from hoop_rivals.data.models import (
    Match,
    MatchStat,
    PointsMatch,
    Quarter,
    QuarterMatch,
    Team,
    TeamPlayer,
)
from hoop_rivals.data.payloads import parse_new_match
from hoop_rivals.data.store import MatchStore
from hoop_rivals.data.validation import DataValidator
from hoop_rivals.stats.domain import StatLine
from hoop_rivals.types import MatchType


@pytest.fixture
def validator() -> DataValidator:
    """Validator under test."""
    return DataValidator()


class TestValidateMatch:
    """Tests for DataValidator.validate_match."""

    def test_missing_match(self, validator: DataValidator, db_session: Session) -> None:
        """Unknown ids are an error."""
        result = validator.validate_match(db_session, 42)

        assert not result.valid
        assert "not found" in result.errors[0]

    def test_well_formed_match_passes(
        self,
        validator: DataValidator,
        db_session: Session,
        store: MatchStore,
        points_payload: dict,
    ) -> None:
        """A match created through the store is consistent."""
        match_id = store.create_match(parse_new_match(points_payload))
        store.create_stat_row(match_id, "p1", StatLine(two_points_scored=1, two_points_attempted=2))

        result = validator.validate_match(db_session, match_id)

        assert result.valid
        assert result.warnings == []

    def test_unrostered_stat_row(
        self,
        validator: DataValidator,
        db_session: Session,
        store: MatchStore,
        points_payload: dict,
    ) -> None:
        """Rows for players outside both teams are flagged."""
        match_id = store.create_match(parse_new_match(points_payload))
        store.create_stat_row(match_id, "ghost", StatLine())

        result = validator.validate_match(db_session, match_id)

        assert not result.valid
        assert "ghost is not on either team" in result.errors[0]

    def test_mixed_quarter_durations_warn(
        self,
        validator: DataValidator,
        db_session: Session,
        store: MatchStore,
        quarters_payload: dict,
    ) -> None:
        """Quarters of different lengths are grouped by the first one."""
        quarters_payload["quarters"][2]["duration"] = 10
        match_id = store.create_match(parse_new_match(quarters_payload))

        result = validator.validate_match(db_session, match_id)

        assert result.valid
        assert "mixes quarter durations" in result.warnings[0]


class TestValidateRosters:
    """Tests for DataValidator.validate_rosters."""

    def test_wrong_team_count_and_size(self, validator: DataValidator) -> None:
        """One team of the wrong size yields two errors."""
        match = Match(
            id=1,
            match_type=MatchType.POINTS,
            team_size=2,
            match_date=date(2024, 1, 1),
            teams=[Team(team_players=[TeamPlayer(player_id="p1")])],
        )

        result = validator.validate_rosters(match)

        assert len(result.errors) == 2

    def test_player_on_both_teams(self, validator: DataValidator) -> None:
        """Shared players are an error."""
        match = Match(
            id=1,
            match_type=MatchType.POINTS,
            team_size=1,
            match_date=date(2024, 1, 1),
            teams=[
                Team(team_players=[TeamPlayer(player_id="p1")]),
                Team(team_players=[TeamPlayer(player_id="p1")]),
            ],
        )

        result = validator.validate_rosters(match)

        assert not result.valid
        assert "on both teams" in result.errors[0]


class TestValidateDetail:
    """Tests for DataValidator.validate_detail."""

    def test_points_record_on_quarters_match(self, validator: DataValidator) -> None:
        """Wrong sub-record is an error."""
        match = Match(
            id=1,
            match_type=MatchType.QUARTERS,
            team_size=1,
            match_date=date(2024, 1, 1),
            points_match=PointsMatch(),
        )

        result = validator.validate_detail(match)

        assert not result.valid
        assert "has a points record" in result.errors[0]

    def test_missing_detail_is_a_warning(self, validator: DataValidator) -> None:
        """A match still being set up is incomplete, not corrupt."""
        match = Match(
            id=1,
            match_type=MatchType.POINTS,
            team_size=1,
            match_date=date(2024, 1, 1),
        )

        result = validator.validate_detail(match)

        assert result.valid
        assert len(result.warnings) == 2

    def test_quarter_match_without_quarters(self, validator: DataValidator) -> None:
        """No quarters means no duration group."""
        match = Match(
            id=1,
            match_type=MatchType.QUARTERS,
            team_size=1,
            match_date=date(2024, 1, 1),
            quarter_match=QuarterMatch(quarters=[]),
        )

        result = validator.validate_detail(match)

        assert result.valid
        assert "has no quarters" in result.warnings[0]

    def test_consistent_quarters(self, validator: DataValidator) -> None:
        """Uniform quarters pass without warnings."""
        match = Match(
            id=1,
            match_type=MatchType.QUARTERS,
            team_size=1,
            match_date=date(2024, 1, 1),
            quarter_match=QuarterMatch(
                quarters=[Quarter(number=n, duration=8) for n in range(1, 5)]
            ),
        )

        result = validator.validate_detail(match)

        assert result.valid
        assert result.warnings == []


class TestStatRowChecks:
    """Stat rows that bypassed the store are still audited."""

    def test_inconsistent_row_flagged(
        self,
        validator: DataValidator,
        db_session: Session,
        store: MatchStore,
        points_payload: dict,
    ) -> None:
        """A row with negative assists is reported."""
        match_id = store.create_match(parse_new_match(points_payload))
        match = db_session.get(Match, match_id)
        match.points_match.stats.append(MatchStat(player_id="p1", assists=-1))
        db_session.flush()

        result = validator.validate_match(db_session, match_id)

        assert not result.valid
        assert "assists cannot be negative" in result.errors[0]
