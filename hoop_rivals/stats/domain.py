"""Immutable match snapshots consumed by the statistics core.

The store loads a player's history once and hands it over as these frozen
dataclasses; nothing in :mod:`hoop_rivals.stats` touches the database.

A match carries exactly one :data:`MatchDetail`:

- :class:`QuartersDetail` for QUARTERS matches (ordered quarters, each a
  scoring unit with its own duration)
- :class:`PointsDetail` for POINTS matches (a single whole-game unit)

:func:`scoring_units` flattens either variant so the resolver and the
aggregator never branch on match type.

Example:
    >>> line = StatLine(two_points_scored=2, two_points_attempted=3)
    >>> unit = ScoringUnit(unit_id=1, number=1, duration=12,
    ...                    rows=(PlayerStatLine("p1", line),))
    >>> detail = QuartersDetail(quarters=(unit,))
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Union

from hoop_rivals.types import (
    InconsistentStateError,
    MatchId,
    MatchType,
    PlayerId,
    TeamId,
    UnitId,
)


@dataclass(frozen=True)
class StatLine:
    """One player's counting stats for one scoring unit.

    Attributes:
        two_points_scored: Two-point field goals made.
        two_points_attempted: Two-point field goals attempted.
        three_points_scored: Three-point field goals made.
        three_points_attempted: Three-point field goals attempted.
        free_throws_scored: Free throws made.
        free_throws_attempted: Free throws attempted.
        rebounds: Total rebounds.
        assists: Assists, only recorded when team size is above one.
        blocks: Blocked shots.
    """

    two_points_scored: int = 0
    two_points_attempted: int = 0
    three_points_scored: int = 0
    three_points_attempted: int = 0
    free_throws_scored: int = 0
    free_throws_attempted: int = 0
    rebounds: int = 0
    assists: int | None = None
    blocks: int = 0

    def shot_pairs(self) -> dict[str, tuple[int, int]]:
        """Return (scored, attempted) keyed by shot category."""
        return {
            "two_points": (self.two_points_scored, self.two_points_attempted),
            "three_points": (self.three_points_scored, self.three_points_attempted),
            "free_throws": (self.free_throws_scored, self.free_throws_attempted),
        }

    def to_fields(self) -> dict[str, int | None]:
        """Return the row as a column-name mapping."""
        return {
            "two_points_scored": self.two_points_scored,
            "two_points_attempted": self.two_points_attempted,
            "three_points_scored": self.three_points_scored,
            "three_points_attempted": self.three_points_attempted,
            "free_throws_scored": self.free_throws_scored,
            "free_throws_attempted": self.free_throws_attempted,
            "rebounds": self.rebounds,
            "assists": self.assists,
            "blocks": self.blocks,
        }


@dataclass(frozen=True)
class PlayerStatLine:
    """A stat line attributed to a player."""

    player_id: PlayerId
    stats: StatLine


@dataclass(frozen=True)
class ScoringUnit:
    """A quarter, or the whole game of a POINTS match.

    Attributes:
        unit_id: Store identifier of the quarter or points-match record.
        number: Quarter number (1 for a points-match unit).
        duration: Quarter length in minutes, None for points-match units.
        rows: At most one stat line per player.
    """

    unit_id: UnitId
    number: int = 1
    duration: int | None = None
    rows: tuple[PlayerStatLine, ...] = ()


@dataclass(frozen=True)
class QuartersDetail:
    """Detail of a QUARTERS match: quarters in playing order."""

    quarters: tuple[ScoringUnit, ...] = ()

    @property
    def first_duration(self) -> int | None:
        """Duration of the first quarter, or None when there are no quarters."""
        if not self.quarters:
            return None
        return self.quarters[0].duration


@dataclass(frozen=True)
class PointsDetail:
    """Detail of a POINTS match: one whole-game scoring unit."""

    unit: ScoringUnit


MatchDetail = Union[QuartersDetail, PointsDetail]


@dataclass(frozen=True)
class TeamRecord:
    """One side of a match."""

    team_id: TeamId
    player_ids: frozenset[PlayerId] = field(default_factory=frozenset)

    def has_player(self, player_id: PlayerId) -> bool:
        return player_id in self.player_ids


@dataclass(frozen=True)
class MatchRecord:
    """A fully loaded match.

    Raises:
        InconsistentStateError: If ``detail`` does not fit ``match_type``.
    """

    match_id: MatchId
    match_type: MatchType
    team_size: int
    detail: MatchDetail
    teams: tuple[TeamRecord, ...] = ()
    match_date: date | None = None
    arena_id: int | None = None
    points_to_win: int | None = None

    def __post_init__(self) -> None:
        expected = (
            QuartersDetail if self.match_type is MatchType.QUARTERS else PointsDetail
        )
        if not isinstance(self.detail, expected):
            raise InconsistentStateError(
                f"Match {self.match_id} is {self.match_type.value} "
                f"but carries {type(self.detail).__name__}"
            )

    def team_of(self, player_id: PlayerId) -> TeamRecord | None:
        """Return the team the player is on, if any."""
        for team in self.teams:
            if team.has_player(player_id):
                return team
        return None


def scoring_units(match: MatchRecord) -> tuple[ScoringUnit, ...]:
    """Return every scoring unit of a match regardless of its type."""
    if isinstance(match.detail, QuartersDetail):
        return match.detail.quarters
    return (match.detail.unit,)


def stat_lines(match: MatchRecord) -> list[PlayerStatLine]:
    """Return every stat line recorded for a match, unit by unit."""
    return [row for unit in scoring_units(match) for row in unit.rows]
