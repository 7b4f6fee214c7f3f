"""Grouped stats report for one player.

Partitions a player's history into the scopes the stats page drills into and
aggregates each one:

- overall, across every match
- QUARTERS matches by team size, then first-quarter duration (normalized)
- POINTS matches by team size, then points-to-win target

Example:
    >>> report = build_stats_report(matches, "p1")
    >>> report.quarters_stats_by_team_size["3"]["10"].points_per_norm
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from hoop_rivals.stats.aggregation import AggregatedStats, aggregate
from hoop_rivals.stats.domain import MatchRecord, QuartersDetail
from hoop_rivals.stats.normalizer import ensure_valid_matches
from hoop_rivals.types import MatchType, PlayerId

if TYPE_CHECKING:
    from hoop_rivals.types import MatchSource

logger = logging.getLogger(__name__)

GroupedStats = dict[str, dict[str, AggregatedStats]]


@dataclass(frozen=True)
class StatsReport:
    """Everything the stats page shows for a player.

    Attributes:
        overall_stats: Aggregate over every match.
        quarters_stats_by_team_size: team size -> quarter minutes -> stats.
        points_stats_by_team_size_and_max: team size -> points target -> stats.
    """

    overall_stats: AggregatedStats
    quarters_stats_by_team_size: GroupedStats = field(default_factory=dict)
    points_stats_by_team_size_and_max: GroupedStats = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the nested camelCase shape used by the stats page."""
        return {
            "overallStats": self.overall_stats.to_dict(),
            "quartersStatsByTeamSize": _grouped_to_dict(
                self.quarters_stats_by_team_size
            ),
            "pointsStatsByTeamSizeAndMax": _grouped_to_dict(
                self.points_stats_by_team_size_and_max
            ),
        }

    def to_json(self, indent: int | None = None) -> str:
        """Serialize with sorted keys so equal reports serialize identically."""
        return json.dumps(self.to_dict(), sort_keys=True, indent=indent)


def _grouped_to_dict(grouped: GroupedStats) -> dict[str, dict[str, dict]]:
    return {
        outer: {inner: stats.to_dict() for inner, stats in by_inner.items()}
        for outer, by_inner in grouped.items()
    }


def _partition(
    matches: Sequence[MatchRecord],
    key: Callable[[MatchRecord], tuple[Hashable, Hashable] | None],
) -> dict[tuple[Hashable, Hashable], list[MatchRecord]]:
    """Group matches by key, in order of first appearance; None keys are dropped."""
    groups: dict[tuple[Hashable, Hashable], list[MatchRecord]] = {}
    for match in matches:
        group_key = key(match)
        if group_key is None:
            continue
        groups.setdefault(group_key, []).append(match)
    return groups


def quarter_group_key(match: MatchRecord) -> tuple[int, int] | None:
    """(team size, first quarter duration), or None if not groupable."""
    if match.match_type is not MatchType.QUARTERS:
        return None
    if not isinstance(match.detail, QuartersDetail):
        return None
    duration = match.detail.first_duration
    if duration is None:
        return None
    return match.team_size, duration


def points_group_key(match: MatchRecord) -> tuple[int, int] | None:
    """(team size, points to win), or None if not groupable."""
    if match.match_type is not MatchType.POINTS or match.points_to_win is None:
        return None
    return match.team_size, match.points_to_win


def build_stats_report(
    matches: Sequence[MatchRecord],
    player_id: PlayerId,
) -> StatsReport:
    """Aggregate a player's match history into every reported scope.

    Args:
        matches: The player's full match history.
        player_id: Player the report is for.

    Returns:
        StatsReport; groups with no matches are simply absent.

    Raises:
        ValidationError: If any stat line in the history is invalid.
    """
    ensure_valid_matches(matches)

    overall = aggregate(matches, player_id)

    quarters: GroupedStats = {}
    for (team_size, duration), subset in _partition(
        matches, quarter_group_key
    ).items():
        quarters.setdefault(str(team_size), {})[str(duration)] = aggregate(
            subset, player_id, normalization_duration=int(duration)
        )

    points: GroupedStats = {}
    for (team_size, target), subset in _partition(matches, points_group_key).items():
        points.setdefault(str(team_size), {})[str(target)] = aggregate(
            subset, player_id
        )

    logger.debug(
        f"Built stats report for {player_id}: {len(matches)} matches, "
        f"{sum(len(v) for v in quarters.values())} quarter groups, "
        f"{sum(len(v) for v in points.values())} points groups"
    )

    return StatsReport(
        overall_stats=overall,
        quarters_stats_by_team_size=quarters,
        points_stats_by_team_size_and_max=points,
    )


def load_stats_report(store: MatchSource, player_id: PlayerId) -> StatsReport:
    """Fetch a player's history once from the store and build the report."""
    matches = store.list_matches(player_id)
    logger.info(f"Loaded {len(matches)} matches for player {player_id}")
    return build_stats_report(matches, player_id)
