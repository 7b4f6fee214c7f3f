"""Pydantic models for incoming match and stat submissions.

Payloads use the camelCase JSON keys the web client sends; Python code reads
the snake_case attributes. Parse failures are re-raised as
:class:`hoop_rivals.types.ValidationError` so callers deal with a single
rejection type.

Example:
    >>> submission = parse_stats_submission({
    ...     "matchId": 4,
    ...     "statsData": {"stats": {"teamA": [...], "teamB": [...]}},
    ... })
    >>> submission.is_quarters
    False
"""
from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from hoop_rivals.stats.domain import StatLine
from hoop_rivals.types import MatchType, ValidationError

MIN_TEAM_SIZE: int = 1
MAX_TEAM_SIZE: int = 5

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class _Payload(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class StatFields(_Payload):
    """Counting stats for one player in one scoring unit."""

    two_points_scored: int = Field(default=0, ge=0, alias="twoPointsScored")
    two_points_attempted: int = Field(default=0, ge=0, alias="twoPointsAttempted")
    three_points_scored: int = Field(default=0, ge=0, alias="threePointsScored")
    three_points_attempted: int = Field(default=0, ge=0, alias="threePointsAttempted")
    free_throws_scored: int = Field(default=0, ge=0, alias="freeThrowsScored")
    free_throws_attempted: int = Field(default=0, ge=0, alias="freeThrowsAttempted")
    rebounds: int = Field(default=0, ge=0)
    assists: int | None = Field(default=None, ge=0)
    blocks: int = Field(default=0, ge=0)

    def to_stat_line(self) -> StatLine:
        return StatLine(
            two_points_scored=self.two_points_scored,
            two_points_attempted=self.two_points_attempted,
            three_points_scored=self.three_points_scored,
            three_points_attempted=self.three_points_attempted,
            free_throws_scored=self.free_throws_scored,
            free_throws_attempted=self.free_throws_attempted,
            rebounds=self.rebounds,
            assists=self.assists,
            blocks=self.blocks,
        )


class PlayerStats(_Payload):
    player_id: str = Field(alias="playerId", min_length=1)
    stats: StatFields


class TeamsStats(_Payload):
    team_a: list[PlayerStats] = Field(default_factory=list, alias="teamA")
    team_b: list[PlayerStats] = Field(default_factory=list, alias="teamB")

    def all_players(self) -> Iterator[PlayerStats]:
        yield from self.team_a
        yield from self.team_b


class QuarterStatsPayload(_Payload):
    """Stats for one quarter; ``quarterId`` is checked by the store."""

    quarter_id: int | None = Field(default=None, alias="quarterId")
    stats: TeamsStats


class PointsStatsPayload(_Payload):
    stats: TeamsStats


class StatsSubmission(_Payload):
    """A batch of stat rows for one match.

    ``statsData`` is a list of quarters for QUARTERS matches and a single
    object for POINTS matches.
    """

    match_id: int | None = Field(default=None, alias="matchId")
    stats_data: list[QuarterStatsPayload] | PointsStatsPayload = Field(
        alias="statsData"
    )

    @property
    def is_quarters(self) -> bool:
        return isinstance(self.stats_data, list)


class PlayerRef(_Payload):
    id: str = Field(min_length=1)
    nickname: str | None = None


class QuarterInput(_Payload):
    duration: int = Field(gt=0)
    number: int = Field(ge=1)


class NewMatchPayload(_Payload):
    """A match to create, with both rosters and its type-specific detail."""

    match_type: MatchType = Field(alias="matchType")
    match_date: date = Field(alias="date")
    team_size: int = Field(alias="teamSize", ge=MIN_TEAM_SIZE, le=MAX_TEAM_SIZE)
    arena_id: int | None = Field(default=None, alias="arenaId")
    points_to_win: int | None = Field(default=None, alias="pointsToWin", gt=0)
    quarters: list[QuarterInput] | None = None
    team_a: list[PlayerRef] = Field(alias="teamA")
    team_b: list[PlayerRef] = Field(alias="teamB")

    @model_validator(mode="after")
    def check_consistency(self) -> NewMatchPayload:
        if len(self.team_a) != self.team_size or len(self.team_b) != self.team_size:
            raise ValueError("Invalid team size")
        ids_a = {p.id for p in self.team_a}
        ids_b = {p.id for p in self.team_b}
        if len(ids_a) != len(self.team_a) or len(ids_b) != len(self.team_b):
            raise ValueError("A player is listed twice on the same team")
        if ids_a & ids_b:
            raise ValueError("A player cannot be on both teams")
        if self.match_type is MatchType.QUARTERS:
            if not self.quarters:
                raise ValueError("Missing quarters")
            numbers = [q.number for q in self.quarters]
            if len(set(numbers)) != len(numbers):
                raise ValueError("Quarter numbers must be unique")
        elif self.points_to_win is None:
            raise ValueError("Missing pointsToWin")
        return self


def _parse(model: type[_ModelT], data: Any) -> _ModelT:
    try:
        if isinstance(data, (str, bytes)):
            return model.model_validate_json(data)
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or model.__name__}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ValidationError(f"Invalid {model.__name__}: {errors[0]}", errors) from exc


def parse_stats_submission(data: Any) -> StatsSubmission:
    """Parse a stats submission from a dict or JSON text.

    Raises:
        ValidationError: If the payload is malformed or lacks ``matchId``.
    """
    submission = _parse(StatsSubmission, data)
    if submission.match_id is None:
        raise ValidationError("Missing matchId")
    return submission


def parse_new_match(data: Any) -> NewMatchPayload:
    """Parse a new-match payload from a dict or JSON text.

    Raises:
        ValidationError: If the payload is malformed or inconsistent.
    """
    return _parse(NewMatchPayload, data)
