"""Team scores and win/loss resolution.

Team scores are never stored; they are the sum of every member's stat lines
across all scoring units of the match. This module is the only place the
tie-break and zero-score policies live:

- a player wins only when their team outscores every other team
- ties are losses unless the caller asks for ties explicitly
- a match without any stat lines is 0-0, hence a loss

Example:
    >>> outcome_for(match, "p1")
    <Outcome.WIN: 'WIN'>
"""
from __future__ import annotations

from hoop_rivals.stats.domain import MatchRecord, TeamRecord, stat_lines
from hoop_rivals.stats.normalizer import score_of
from hoop_rivals.types import Outcome, PlayerId, TeamId


def team_score(match: MatchRecord, team: TeamRecord) -> int:
    """Sum of points scored by the team's players across the whole match."""
    return sum(
        score_of(row.stats)
        for row in stat_lines(match)
        if team.has_player(row.player_id)
    )


def team_scores(match: MatchRecord) -> dict[TeamId, int]:
    """Score of every team, keyed by team id in match order."""
    return {team.team_id: team_score(match, team) for team in match.teams}


def outcome_for(
    match: MatchRecord,
    player_id: PlayerId,
    report_ties: bool = False,
) -> Outcome:
    """Resolve the match result for one player.

    Args:
        match: Match to resolve.
        player_id: Player whose perspective is taken.
        report_ties: Return Outcome.TIE for level scores instead of LOSS.

    Returns:
        WIN if the player's team scored strictly more than the best other
        team, TIE for level scores when requested, LOSS otherwise (including
        when the player is on neither team).
    """
    own_team = match.team_of(player_id)
    if own_team is None:
        return Outcome.LOSS

    scores = team_scores(match)
    own_score = scores[own_team.team_id]
    best_other = max(
        (score for team_id, score in scores.items() if team_id != own_team.team_id),
        default=0,
    )

    if own_score > best_other:
        return Outcome.WIN
    if report_ties and own_score == best_other:
        return Outcome.TIE
    return Outcome.LOSS
