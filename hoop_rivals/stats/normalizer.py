"""Stat line scoring and consistency checks.

Example:
    >>> line = StatLine(two_points_scored=3, two_points_attempted=5,
    ...                 free_throws_scored=1, free_throws_attempted=2)
    >>> score_of(line)
    7
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from hoop_rivals.stats.domain import MatchRecord, StatLine, stat_lines
from hoop_rivals.types import ValidationError

TWO_POINT_VALUE: int = 2
THREE_POINT_VALUE: int = 3
FREE_THROW_VALUE: int = 1

_COUNT_FIELDS = (
    "two_points_scored",
    "two_points_attempted",
    "three_points_scored",
    "three_points_attempted",
    "free_throws_scored",
    "free_throws_attempted",
    "rebounds",
    "blocks",
)


@dataclass
class ValidationResult:
    """Result of data validation.

    Attributes:
        valid: Whether validation passed.
        errors: List of error messages (validation failures).
        warnings: List of warning messages (potential issues).
    """

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (does not affect validity)."""
        self.warnings.append(message)

    def merge(self, other: ValidationResult) -> None:
        """Merge another validation result into this one."""
        if not other.valid:
            self.valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)


def score_of(stats: StatLine) -> int:
    """Points produced by a stat line."""
    return (
        TWO_POINT_VALUE * stats.two_points_scored
        + THREE_POINT_VALUE * stats.three_points_scored
        + FREE_THROW_VALUE * stats.free_throws_scored
    )


def validate(stats: StatLine) -> bool:
    """Return False when any shot category has more makes than attempts."""
    return all(
        scored <= attempted for scored, attempted in stats.shot_pairs().values()
    )


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_stat_line(stats: StatLine, label: str = "stat line") -> ValidationResult:
    """Collect every problem with a stat line.

    Checks that counts are non-negative integers and that no category has
    more makes than attempts.

    Args:
        stats: Line to check.
        label: Prefix used in messages, e.g. ``"player p1, quarter 3"``.

    Returns:
        ValidationResult listing each problem found.
    """
    result = ValidationResult()

    for name in _COUNT_FIELDS:
        value = getattr(stats, name)
        if not _is_count(value):
            result.add_error(f"{label}: {name} must be an integer, got {value!r}")
        elif value < 0:
            result.add_error(f"{label}: {name} cannot be negative ({value})")

    if stats.assists is not None:
        if not _is_count(stats.assists):
            result.add_error(
                f"{label}: assists must be an integer, got {stats.assists!r}"
            )
        elif stats.assists < 0:
            result.add_error(f"{label}: assists cannot be negative ({stats.assists})")

    if not result.valid:
        return result

    for category, (scored, attempted) in stats.shot_pairs().items():
        if scored > attempted:
            result.add_error(
                f"{label}: {category} scored ({scored}) cannot be greater "
                f"than attempted ({attempted})"
            )

    return result


def ensure_valid(stats: StatLine, label: str = "stat line") -> None:
    """Raise ValidationError if the stat line is inconsistent."""
    result = check_stat_line(stats, label)
    if not result.valid:
        raise ValidationError(result.errors[0], result.errors)


def ensure_valid_matches(matches: Iterable[MatchRecord]) -> None:
    """Check every stat line of every match before anything is aggregated.

    Raises:
        ValidationError: Listing all invalid lines across all matches.
    """
    result = ValidationResult()
    for match in matches:
        for row in stat_lines(match):
            result.merge(
                check_stat_line(
                    row.stats, f"match {match.match_id}, player {row.player_id}"
                )
            )
    if not result.valid:
        raise ValidationError(
            f"{len(result.errors)} invalid stat line(s)", result.errors
        )
