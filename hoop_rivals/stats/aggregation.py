"""Aggregation of a player's matches into per-game and shooting metrics.

This module folds any collection of matches, whatever their type, into a
single :class:`AggregatedStats`. Games played and wins are counted
independently: a game counts as played only when the player has at least one
stat line in it, while a win is credited whenever the player's team outscored
the other side, even if the player recorded nothing personally.

Example:
    >>> stats = aggregate(matches, "p1")
    >>> print(f"{stats.ppg:.1f} PPG on {stats.fg_percentage:.1f}% FG")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from hoop_rivals.stats.domain import MatchRecord, QuartersDetail, scoring_units
from hoop_rivals.stats.normalizer import ensure_valid_matches, score_of
from hoop_rivals.stats.outcome import outcome_for
from hoop_rivals.types import Outcome, PlayerId

# =============================================================================
# Constants
# =============================================================================

QUARTERS_PER_GAME: int = 4
POINTS_MATCH_NOMINAL_MINUTES: int = 48
COLLEGE_GAME_MINUTES: int = 40
PRO_GAME_MINUTES: int = 48
# Quarter lengths compared against a 40-minute game rather than a 48-minute one
COLLEGE_QUARTER_DURATIONS: frozenset[int] = frozenset({5, 10})


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class AggregatedStats:
    """Aggregated performance of one player over a set of matches.

    All rates default to 0.0 when their denominator is zero. Percentages are
    on a 0-100 scale.

    Attributes:
        total_points: Points scored.
        total_rebounds: Rebounds.
        total_assists: Assists.
        total_free_throws: Free throws made.
        total_blocks: Blocks.
        total_games: Matches with at least one stat line for the player.
        total_wins: Matches won by the player's team.
        ppg: Points per game.
        rpg: Rebounds per game.
        apg: Assists per game.
        ftpg: Free throws made per game.
        bpg: Blocks per game.
        fg_percentage: Two- and three-point field goal percentage.
        two_pt_percentage: Two-point percentage.
        three_pt_percentage: Three-point percentage.
        ft_percentage: Free throw percentage.
        points_per_norm: PPG rescaled to a 40 or 48 minute game; only set for
            quarter-duration groups with at least one game.
        total_minutes: Nominal minutes covered. Bookkeeping only, not part of
            the serialized shape.
    """

    total_points: int = 0
    total_rebounds: int = 0
    total_assists: int = 0
    total_free_throws: int = 0
    total_blocks: int = 0
    total_games: int = 0
    total_wins: int = 0
    ppg: float = 0.0
    rpg: float = 0.0
    apg: float = 0.0
    ftpg: float = 0.0
    bpg: float = 0.0
    fg_percentage: float = 0.0
    two_pt_percentage: float = 0.0
    three_pt_percentage: float = 0.0
    ft_percentage: float = 0.0
    points_per_norm: float | None = None
    total_minutes: int = 0

    def to_dict(self) -> dict[str, int | float]:
        """Convert to the camelCase shape consumed by the presentation layer.

        Returns:
            Dictionary of totals and rates; ``pointsPerNorm`` only when set.
        """
        data: dict[str, int | float] = {
            "totalPoints": self.total_points,
            "totalRebounds": self.total_rebounds,
            "totalAssists": self.total_assists,
            "totalFreeThrows": self.total_free_throws,
            "totalBlocks": self.total_blocks,
            "totalGames": self.total_games,
            "totalWins": self.total_wins,
            "ppg": self.ppg,
            "rpg": self.rpg,
            "apg": self.apg,
            "ftpg": self.ftpg,
            "bpg": self.bpg,
            "fgPercentage": self.fg_percentage,
            "twoPtPercentage": self.two_pt_percentage,
            "threePtPercentage": self.three_pt_percentage,
            "ftPercentage": self.ft_percentage,
        }
        if self.points_per_norm is not None:
            data["pointsPerNorm"] = self.points_per_norm
        return data


@dataclass
class _Totals:
    """Running sums while folding matches."""

    points: int = 0
    rebounds: int = 0
    assists: int = 0
    blocks: int = 0
    games: int = 0
    wins: int = 0
    minutes: int = 0
    two_made: int = 0
    two_attempted: int = 0
    three_made: int = 0
    three_attempted: int = 0
    ft_made: int = 0
    ft_attempted: int = 0


# =============================================================================
# Helpers
# =============================================================================


def safe_rate(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 for an empty denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def safe_percentage(made: int, attempted: int) -> float:
    """Shooting percentage on a 0-100 scale, 0.0 when nothing was attempted."""
    return safe_rate(made, attempted) * 100


def normalization_target(quarter_duration: int) -> int:
    """Standard game length that a quarter duration is compared against."""
    if quarter_duration in COLLEGE_QUARTER_DURATIONS:
        return COLLEGE_GAME_MINUTES
    return PRO_GAME_MINUTES


def points_per_norm(ppg: float, quarter_duration: int) -> float:
    """Rescale points per game to a standard-length game.

    Example:
        >>> points_per_norm(20.0, 5)
        40.0
    """
    expected_minutes = quarter_duration * QUARTERS_PER_GAME
    return safe_rate(ppg, expected_minutes) * normalization_target(quarter_duration)


def _match_minutes(match: MatchRecord, normalization_duration: int | None) -> int:
    if isinstance(match.detail, QuartersDetail):
        return sum(
            normalization_duration
            if normalization_duration is not None
            else (quarter.duration or 0)
            for quarter in match.detail.quarters
        )
    return POINTS_MATCH_NOMINAL_MINUTES


# =============================================================================
# Aggregation
# =============================================================================


def aggregate(
    matches: Sequence[MatchRecord],
    player_id: PlayerId,
    normalization_duration: int | None = None,
) -> AggregatedStats:
    """Fold matches into aggregated stats for one player.

    Every stat line of every match is validated before anything is summed,
    so an invalid line rejects the whole call rather than producing a
    partial result.

    Args:
        matches: Matches to aggregate, of any type.
        player_id: Player to aggregate for.
        normalization_duration: Quarter duration shared by all matches; when
            given, ``points_per_norm`` is computed.

    Returns:
        AggregatedStats with zero-valued rates for an empty input.

    Raises:
        ValidationError: If any stat line in the input is invalid.
    """
    ensure_valid_matches(matches)

    totals = _Totals()
    for match in matches:
        had_stats = False
        for unit in scoring_units(match):
            for row in unit.rows:
                if row.player_id != player_id:
                    continue
                had_stats = True
                line = row.stats
                totals.points += score_of(line)
                totals.rebounds += line.rebounds
                totals.assists += line.assists or 0
                totals.blocks += line.blocks
                totals.two_made += line.two_points_scored
                totals.two_attempted += line.two_points_attempted
                totals.three_made += line.three_points_scored
                totals.three_attempted += line.three_points_attempted
                totals.ft_made += line.free_throws_scored
                totals.ft_attempted += line.free_throws_attempted

        if had_stats:
            totals.games += 1
        if outcome_for(match, player_id) is Outcome.WIN:
            totals.wins += 1
        totals.minutes += _match_minutes(match, normalization_duration)

    ppg = safe_rate(totals.points, totals.games)
    norm = None
    if normalization_duration is not None and totals.games > 0:
        norm = points_per_norm(ppg, normalization_duration)

    return AggregatedStats(
        total_points=totals.points,
        total_rebounds=totals.rebounds,
        total_assists=totals.assists,
        total_free_throws=totals.ft_made,
        total_blocks=totals.blocks,
        total_games=totals.games,
        total_wins=totals.wins,
        ppg=ppg,
        rpg=safe_rate(totals.rebounds, totals.games),
        apg=safe_rate(totals.assists, totals.games),
        ftpg=safe_rate(totals.ft_made, totals.games),
        bpg=safe_rate(totals.blocks, totals.games),
        fg_percentage=safe_percentage(
            totals.two_made + totals.three_made,
            totals.two_attempted + totals.three_attempted,
        ),
        two_pt_percentage=safe_percentage(totals.two_made, totals.two_attempted),
        three_pt_percentage=safe_percentage(totals.three_made, totals.three_attempted),
        ft_percentage=safe_percentage(totals.ft_made, totals.ft_attempted),
        points_per_norm=norm,
        total_minutes=totals.minutes,
    )
