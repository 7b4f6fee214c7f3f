"""Integrity checks for stored matches.

This module audits matches already in the database: roster shape, the
type/sub-record pairing, and the stat rows hanging off each scoring unit.
Errors describe data the statistics core would reject or skip; warnings
describe matches that are merely incomplete.

Example:
    >>> from hoop_rivals.data.validation import DataValidator
    >>> validator = DataValidator()
    >>> result = validator.validate_match(session, 12)
    >>> if not result.valid:
    ...     print(f"Errors: {result.errors}")
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hoop_rivals.stats.normalizer import ValidationResult, check_stat_line
from hoop_rivals.types import MatchType

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from hoop_rivals.data.models import Match, MatchStat, QuarterStat

logger = logging.getLogger(__name__)

TEAMS_PER_MATCH: int = 2


class DataValidator:
    """Validates integrity of stored matches."""

    def __init__(self) -> None:
        """Initialize data validator."""
        self.logger = logging.getLogger(self.__class__.__name__)

    def validate_match(self, session: Session, match_id: int) -> ValidationResult:
        """Validate everything stored for one match.

        Checks:
        - Match record exists
        - Type matches the sub-record present
        - Two teams of ``team_size`` players, nobody on both
        - Stat rows belong to rostered players and are internally consistent

        Args:
            session: Database session.
            match_id: Match to validate.

        Returns:
            ValidationResult with any errors or warnings.
        """
        from hoop_rivals.data.models import Match

        result = ValidationResult()

        match = session.get(Match, match_id)
        if match is None:
            result.add_error(f"Match {match_id} not found")
            return result

        result.merge(self.validate_rosters(match))
        result.merge(self.validate_detail(match))

        rostered = {
            tp.player_id for team in match.teams for tp in team.team_players
        }
        for label, row in self._stat_rows(match):
            if row.player_id not in rostered:
                result.add_error(
                    f"Match {match_id} {label}: player {row.player_id} "
                    "is not on either team"
                )
            result.merge(
                check_stat_line(
                    row.to_stat_line(),
                    f"Match {match_id} {label}, player {row.player_id}",
                )
            )

        if result.valid:
            self.logger.debug(f"Match {match_id} passed validation")
        else:
            self.logger.warning(
                f"Match {match_id} failed validation with {len(result.errors)} errors"
            )
        return result

    def validate_rosters(self, match: Match) -> ValidationResult:
        """Check team count, team sizes and that no player is on both teams."""
        result = ValidationResult()

        if len(match.teams) != TEAMS_PER_MATCH:
            result.add_error(
                f"Match {match.id} has {len(match.teams)} teams, "
                f"expected {TEAMS_PER_MATCH}"
            )

        seen: set[str] = set()
        for index, team in enumerate(match.teams, start=1):
            size = len(team.team_players)
            if size != match.team_size:
                result.add_error(
                    f"Match {match.id} team {index} has {size} players, "
                    f"expected {match.team_size}"
                )
            for tp in team.team_players:
                if tp.player_id in seen:
                    result.add_error(
                        f"Match {match.id}: player {tp.player_id} is on both teams"
                    )
                seen.add(tp.player_id)

        return result

    def validate_detail(self, match: Match) -> ValidationResult:
        """Check the type/sub-record pairing and the scoring units."""
        result = ValidationResult()

        if match.match_type is MatchType.QUARTERS:
            if match.points_match is not None:
                result.add_error(f"QUARTERS match {match.id} has a points record")
            if match.quarter_match is None:
                result.add_warning(
                    f"Match {match.id} has no quarter detail yet; "
                    "it is excluded from stats"
                )
            elif not match.quarter_match.quarters:
                result.add_warning(
                    f"Match {match.id} has no quarters; "
                    "it is excluded from duration groups"
                )
            else:
                durations = {q.duration for q in match.quarter_match.quarters}
                if len(durations) > 1:
                    result.add_warning(
                        f"Match {match.id} mixes quarter durations "
                        f"{sorted(durations)}; grouped by the first quarter"
                    )
        else:
            if match.quarter_match is not None:
                result.add_error(f"POINTS match {match.id} has a quarter record")
            if match.points_match is None:
                result.add_warning(
                    f"Match {match.id} has no points detail yet; "
                    "it is excluded from stats"
                )
            if match.points_to_win is None:
                result.add_warning(
                    f"Match {match.id} has no points target; "
                    "it is excluded from points groups"
                )

        return result

    def _stat_rows(
        self, match: Match
    ) -> list[tuple[str, QuarterStat | MatchStat]]:
        rows: list[tuple[str, QuarterStat | MatchStat]] = []
        if match.quarter_match is not None:
            for quarter in match.quarter_match.quarters:
                rows.extend((f"quarter {quarter.number}", row) for row in quarter.stats)
        if match.points_match is not None:
            rows.extend(("game", row) for row in match.points_match.stats)
        return rows
