"""Free throw challenge badges and friend leaderboards.

Each challenge is badged by its shooting efficiency. Boundary values belong
to the lower tier, so exactly 70% is a third-place badge and not second.

========  ==================  =============
Tier      Efficiency          Summary field
========  ==================  =============
1         0 - 40              worst_badges
2         41 - 70             third_place
3         71 - 90             second_place
4         91 - 100            first_place
========  ==================  =============

Example:
    >>> classify(7, 10)
    <BadgeTier.THIRD_PLACE: 2>
    >>> classify(19, 20)
    <BadgeTier.FIRST_PLACE: 4>
"""

from __future__ import annotations

import enum
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from hoop_rivals.types import ChallengeLike, PlayerId, ValidationError

WORST_MAX_EFFICIENCY: int = 40
THIRD_PLACE_MAX_EFFICIENCY: int = 70
SECOND_PLACE_MAX_EFFICIENCY: int = 90


class BadgeTier(enum.IntEnum):
    """Ordered badge tiers, 1 (worst) to 4 (best)."""

    WORST = 1
    THIRD_PLACE = 2
    SECOND_PLACE = 3
    FIRST_PLACE = 4


def efficiency(made: int, attempted: int) -> int:
    """Made/attempted as a percentage rounded half up, 0 if nothing attempted."""
    if attempted == 0:
        return 0
    return math.floor(made / attempted * 100 + 0.5)


def tier_for_efficiency(value: int) -> BadgeTier:
    """Map a rounded efficiency percentage to its tier."""
    if value <= WORST_MAX_EFFICIENCY:
        return BadgeTier.WORST
    if value <= THIRD_PLACE_MAX_EFFICIENCY:
        return BadgeTier.THIRD_PLACE
    if value <= SECOND_PLACE_MAX_EFFICIENCY:
        return BadgeTier.SECOND_PLACE
    return BadgeTier.FIRST_PLACE


def check_attempt(made: int, attempted: int) -> None:
    """Reject negative or impossible made/attempted counts.

    Raises:
        ValidationError: If counts are not non-negative integers or made
            exceeds attempted.
    """
    for name, value in (("made", made), ("attempted", attempted)):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValidationError(f"Shots {name} must be an integer, got {value!r}")
        if value < 0:
            raise ValidationError(f"Shots {name} cannot be negative ({value})")
    if made > attempted:
        raise ValidationError("You can't make more shots than attempts")


def classify(made: int, attempted: int) -> BadgeTier:
    """Badge tier for a single challenge attempt."""
    check_attempt(made, attempted)
    return tier_for_efficiency(efficiency(made, attempted))


@dataclass(frozen=True)
class ChallengeSummary:
    """Lifetime free throw challenge totals for one user.

    Attributes:
        worst_badges: Tier 1 badges.
        third_place: Tier 2 badges.
        second_place: Tier 3 badges.
        first_place: Tier 4 badges.
        all_time_efficiency: Made/taken ratio on a 0-1 scale, pooled or
            averaged per challenge.
        all_time_shots_made: Shots made across all challenges.
        all_time_shots_taken: Shots taken across all challenges.
        all_time_total_challenges: Number of challenges.
    """

    worst_badges: int = 0
    third_place: int = 0
    second_place: int = 0
    first_place: int = 0
    all_time_efficiency: float = 0.0
    all_time_shots_made: int = 0
    all_time_shots_taken: int = 0
    all_time_total_challenges: int = 0

    def count(self, tier: BadgeTier) -> int:
        """Number of badges earned in a tier."""
        return {
            BadgeTier.WORST: self.worst_badges,
            BadgeTier.THIRD_PLACE: self.third_place,
            BadgeTier.SECOND_PLACE: self.second_place,
            BadgeTier.FIRST_PLACE: self.first_place,
        }[tier]

    def to_dict(self) -> dict[str, int | float]:
        return {
            "worstBadges": self.worst_badges,
            "thirdPlace": self.third_place,
            "secondPlace": self.second_place,
            "firstPlace": self.first_place,
            "allTimeEfficiency": self.all_time_efficiency,
            "allTimeShotsMade": self.all_time_shots_made,
            "allTimeShotsTaken": self.all_time_shots_taken,
            "allTimeTotalChallenges": self.all_time_total_challenges,
        }


@dataclass(frozen=True)
class LeaderboardEntry:
    """A friend's row on the challenge leaderboard."""

    user_id: PlayerId
    summary: ChallengeSummary = field(default_factory=ChallengeSummary)
    nickname: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.user_id,
            "nickname": self.nickname,
            "stats": self.summary.to_dict(),
        }


def summarize_challenges(
    challenges: Iterable[ChallengeLike], averaged: bool = False
) -> ChallengeSummary:
    """Tally badges and shooting across a user's challenges.

    Args:
        challenges: The user's challenges.
        averaged: Report efficiency as the mean of each challenge's
            made/taken ratio, as a user's own record page shows it. The
            default pools made over taken, which is what friends are ranked
            by. A challenge with no shots taken contributes 0.

    Returns:
        ChallengeSummary, all zero when there are no challenges.
    """
    tiers = {tier: 0 for tier in BadgeTier}
    made = 0
    taken = 0
    ratio_sum = 0.0
    count = 0
    for challenge in challenges:
        tiers[classify(challenge.shots_made, challenge.shots_taken)] += 1
        made += challenge.shots_made
        taken += challenge.shots_taken
        if challenge.shots_taken > 0:
            ratio_sum += challenge.shots_made / challenge.shots_taken
        count += 1

    if averaged:
        efficiency_value = ratio_sum / count if count > 0 else 0.0
    else:
        efficiency_value = made / taken if taken > 0 else 0.0

    return ChallengeSummary(
        worst_badges=tiers[BadgeTier.WORST],
        third_place=tiers[BadgeTier.THIRD_PLACE],
        second_place=tiers[BadgeTier.SECOND_PLACE],
        first_place=tiers[BadgeTier.FIRST_PLACE],
        all_time_efficiency=efficiency_value,
        all_time_shots_made=made,
        all_time_shots_taken=taken,
        all_time_total_challenges=count,
    )


def friends_leaderboard(
    challenges_by_user: Mapping[PlayerId, Sequence[ChallengeLike]],
    friend_ids: Iterable[PlayerId],
    nicknames: Mapping[PlayerId, str] | None = None,
) -> list[LeaderboardEntry]:
    """Rank friends by their challenge record.

    Friends without any challenge still appear with an all-zero summary.
    Ordering: first-place badges, then efficiency, then shots made (all
    descending), then user id.

    Args:
        challenges_by_user: Challenges grouped by owner.
        friend_ids: Users to rank; duplicates are ignored.
        nicknames: Optional display names.

    Returns:
        Leaderboard entries, best first.
    """
    nicknames = nicknames or {}
    entries = [
        LeaderboardEntry(
            user_id=user_id,
            summary=summarize_challenges(challenges_by_user.get(user_id, ())),
            nickname=nicknames.get(user_id),
        )
        for user_id in dict.fromkeys(friend_ids)
    ]
    entries.sort(
        key=lambda e: (
            -e.summary.first_place,
            -e.summary.all_time_efficiency,
            -e.summary.all_time_shots_made,
            e.user_id,
        )
    )
    return entries
