"""Type definitions, enums and exceptions for Hoop Rivals.

This module defines the identifiers, enumerations, protocols and exception
hierarchy shared by the storage boundary and the statistics core.

Example:
    >>> from hoop_rivals.types import MatchType, ValidationError
    >>> MatchType("QUARTERS") is MatchType.QUARTERS
    True
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from hoop_rivals.stats.domain import MatchRecord, StatLine

# =============================================================================
# Type Aliases
# =============================================================================

PlayerId = str
MatchId = int
TeamId = int
UnitId = int


# =============================================================================
# Enumerations
# =============================================================================


class MatchType(str, enum.Enum):
    """How a match is structured.

    QUARTERS matches are played over a fixed number of timed quarters;
    POINTS matches are a race to ``points_to_win``.
    """

    QUARTERS = "QUARTERS"
    POINTS = "POINTS"


class Outcome(str, enum.Enum):
    """Result of a match from one player's perspective."""

    WIN = "WIN"
    LOSS = "LOSS"
    TIE = "TIE"


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class MatchSource(Protocol):
    """Protocol for anything that can hand out a player's match history."""

    def list_matches(self, player_id: PlayerId) -> list[MatchRecord]:
        """Return every match the player took part in."""
        ...

    def find_match(self, match_id: MatchId) -> MatchRecord | None:
        """Return a single match, or None when it does not exist."""
        ...


class StatRowWriter(Protocol):
    """Protocol for stores that accept per-player stat rows."""

    def create_stat_row(
        self,
        match_id: MatchId,
        player_id: PlayerId,
        stats: StatLine,
        quarter_id: UnitId | None = None,
    ) -> None:
        """Create the row for a (scoring unit, player) pair."""
        ...

    def update_stat_row(
        self,
        match_id: MatchId,
        player_id: PlayerId,
        stats: StatLine,
        quarter_id: UnitId | None = None,
    ) -> None:
        """Replace the row for a (scoring unit, player) pair."""
        ...


class ChallengeLike(Protocol):
    """Anything carrying made/attempted counts for a challenge."""

    @property
    def shots_made(self) -> int: ...

    @property
    def shots_taken(self) -> int: ...


# =============================================================================
# Exceptions
# =============================================================================


class HoopRivalsError(Exception):
    """Base exception for Hoop Rivals errors."""


class ValidationError(HoopRivalsError):
    """Input was rejected before anything was written or aggregated.

    Attributes:
        errors: Individual problems found, one message each.
    """

    def __init__(self, message: str, errors: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class DuplicateStatRowError(ValidationError):
    """A stat row already exists for the (scoring unit, player) pair."""


class NotFoundError(HoopRivalsError):
    """Referenced match, quarter, points match or challenge does not exist."""


class InconsistentStateError(HoopRivalsError):
    """A match declares a type but lacks the matching sub-record."""


__all__ = [
    "ChallengeLike",
    "DuplicateStatRowError",
    "HoopRivalsError",
    "InconsistentStateError",
    "MatchId",
    "MatchSource",
    "MatchType",
    "NotFoundError",
    "Outcome",
    "PlayerId",
    "StatRowWriter",
    "TeamId",
    "UnitId",
    "ValidationError",
]
