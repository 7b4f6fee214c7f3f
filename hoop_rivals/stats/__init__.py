"""Statistics core for Hoop Rivals.

Pure functions over immutable match snapshots: nothing here performs I/O.
The store loads a player's history once, then these modules fold it.

Submodules:
    domain: Match snapshots and the scoring-unit accessor
    normalizer: Stat line scoring and consistency checks
    outcome: Team scores and win/loss resolution
    aggregation: Per-game rates, shooting percentages, normalized scoring
    report: Grouping of a history into overall and per-format scopes
    badges: Free throw challenge tiers and friend leaderboards

Example:
    >>> from hoop_rivals.stats import build_stats_report
    >>> report = build_stats_report(matches, "p1")
    >>> print(report.overall_stats.ppg)
"""

from __future__ import annotations

from hoop_rivals.stats.aggregation import (
    AggregatedStats,
    aggregate,
    normalization_target,
    points_per_norm,
    safe_percentage,
    safe_rate,
)
from hoop_rivals.stats.badges import (
    BadgeTier,
    ChallengeSummary,
    LeaderboardEntry,
    classify,
    efficiency,
    friends_leaderboard,
    summarize_challenges,
)
from hoop_rivals.stats.domain import (
    MatchDetail,
    MatchRecord,
    PlayerStatLine,
    PointsDetail,
    QuartersDetail,
    ScoringUnit,
    StatLine,
    TeamRecord,
    scoring_units,
    stat_lines,
)
from hoop_rivals.stats.normalizer import (
    ValidationResult,
    check_stat_line,
    ensure_valid,
    ensure_valid_matches,
    score_of,
    validate,
)
from hoop_rivals.stats.outcome import outcome_for, team_score, team_scores
from hoop_rivals.stats.report import (
    StatsReport,
    build_stats_report,
    load_stats_report,
)

__all__ = [
    # Domain
    "MatchDetail",
    "MatchRecord",
    "PlayerStatLine",
    "PointsDetail",
    "QuartersDetail",
    "ScoringUnit",
    "StatLine",
    "TeamRecord",
    "scoring_units",
    "stat_lines",
    # Normalizer
    "ValidationResult",
    "check_stat_line",
    "ensure_valid",
    "ensure_valid_matches",
    "score_of",
    "validate",
    # Outcome
    "outcome_for",
    "team_score",
    "team_scores",
    # Aggregation
    "AggregatedStats",
    "aggregate",
    "normalization_target",
    "points_per_norm",
    "safe_percentage",
    "safe_rate",
    # Report
    "StatsReport",
    "build_stats_report",
    "load_stats_report",
    # Badges
    "BadgeTier",
    "ChallengeSummary",
    "LeaderboardEntry",
    "classify",
    "efficiency",
    "friends_leaderboard",
    "summarize_challenges",
]
