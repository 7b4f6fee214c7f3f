"""SQLAlchemy base class and mixins for database models.

This module provides the declarative base and shared mixins used by all
SQLAlchemy model classes in the application.

Example:
    >>> from hoop_rivals.data.schema import Base, TimestampMixin
    >>> class MyModel(TimestampMixin, Base):
    ...     __tablename__ = "my_table"
    ...     id: Mapped[int] = mapped_column(primary_key=True)
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint, event, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from hoop_rivals.stats.domain import StatLine


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns.

    Attributes:
        created_at: Timestamp when record was created.
        updated_at: Timestamp when record was last updated.
    """

    created_at: Mapped[datetime] = mapped_column(
        default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class StatColumnsMixin:
    """Counting-stat columns shared by quarter and whole-game stat rows.

    Tables using it should include :func:`stat_check_constraints` in their
    ``__table_args__``.
    """

    two_points_scored: Mapped[int] = mapped_column(default=0, nullable=False)
    two_points_attempted: Mapped[int] = mapped_column(default=0, nullable=False)
    three_points_scored: Mapped[int] = mapped_column(default=0, nullable=False)
    three_points_attempted: Mapped[int] = mapped_column(default=0, nullable=False)
    free_throws_scored: Mapped[int] = mapped_column(default=0, nullable=False)
    free_throws_attempted: Mapped[int] = mapped_column(default=0, nullable=False)
    rebounds: Mapped[int] = mapped_column(default=0, nullable=False)
    assists: Mapped[int | None] = mapped_column(nullable=True)
    blocks: Mapped[int] = mapped_column(default=0, nullable=False)

    def to_stat_line(self) -> StatLine:
        """Return the row's counters as an immutable StatLine."""
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


def stat_check_constraints(table: str) -> tuple[CheckConstraint, ...]:
    """Non-negative and scored <= attempted constraints for a stat table."""
    return (
        CheckConstraint(
            "two_points_scored <= two_points_attempted",
            name=f"ck_{table}_two_points",
        ),
        CheckConstraint(
            "three_points_scored <= three_points_attempted",
            name=f"ck_{table}_three_points",
        ),
        CheckConstraint(
            "free_throws_scored <= free_throws_attempted",
            name=f"ck_{table}_free_throws",
        ),
        CheckConstraint(
            "two_points_scored >= 0 AND three_points_scored >= 0 "
            "AND free_throws_scored >= 0 AND rebounds >= 0 AND blocks >= 0",
            name=f"ck_{table}_non_negative",
        ),
    )


def _set_updated_at(
    mapper: Any,
    connection: Any,
    target: Any,
) -> None:
    """Event listener to update updated_at on modification."""
    if hasattr(target, "updated_at"):
        target.updated_at = datetime.now()


# Register the event listener for before_update events
event.listen(Base, "before_update", _set_updated_at, propagate=True)
