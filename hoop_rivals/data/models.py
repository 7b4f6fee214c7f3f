"""SQLAlchemy ORM models for Hoop Rivals data.

Models are organized into categories:
- Players: Player
- Matches: Match, QuarterMatch, Quarter, PointsMatch, Team, TeamPlayer
- Stat rows: QuarterStat, MatchStat
- Challenges: Challenge, FreeThrow

A Match owns exactly one of QuarterMatch (QUARTERS) or PointsMatch (POINTS).
Stat rows hang off the scoring unit (a Quarter or the PointsMatch) and are
unique per (unit, player).

Example:
    >>> from hoop_rivals.data.models import Match
    >>> from hoop_rivals.data.db import session_scope
    >>> with session_scope() as session:
    ...     match = session.get(Match, 1)
    ...     print(match.match_type, len(match.teams))
"""
from __future__ import annotations

from datetime import date

from sqlalchemy import Enum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoop_rivals.data.schema import (
    Base,
    StatColumnsMixin,
    TimestampMixin,
    stat_check_constraints,
)
from hoop_rivals.types import MatchType

# =============================================================================
# Players
# =============================================================================


class Player(Base):
    """A registered user who can appear on match teams.

    Attributes:
        id: Opaque user identifier issued by the identity provider.
        nickname: Display name.
    """

    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    nickname: Mapped[str] = mapped_column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<Player(id={self.id!r}, nickname={self.nickname!r})>"


# =============================================================================
# Matches
# =============================================================================


class Match(TimestampMixin, Base):
    """A single game.

    Attributes:
        id: Auto-increment primary key.
        match_type: QUARTERS or POINTS.
        team_size: Players per side (1-5).
        match_date: Date the match was played.
        arena_id: Arena identifier; arenas are managed elsewhere.
        points_to_win: Target score for POINTS matches.
        teams: The two sides.
        quarter_match: Quarter detail, present only for QUARTERS matches.
        points_match: Whole-game detail, present only for POINTS matches.
    """

    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_type: Mapped[MatchType] = mapped_column(
        Enum(MatchType, name="match_type"), nullable=False
    )
    team_size: Mapped[int] = mapped_column(nullable=False)
    match_date: Mapped[date] = mapped_column(nullable=False)
    arena_id: Mapped[int | None] = mapped_column(nullable=True)
    points_to_win: Mapped[int | None] = mapped_column(nullable=True)

    # Relationships
    teams: Mapped[list[Team]] = relationship(
        back_populates="match", cascade="all, delete-orphan", order_by="Team.id"
    )
    quarter_match: Mapped[QuarterMatch | None] = relationship(
        back_populates="match", cascade="all, delete-orphan", uselist=False
    )
    points_match: Mapped[PointsMatch | None] = relationship(
        back_populates="match", cascade="all, delete-orphan", uselist=False
    )

    __table_args__ = (Index("ix_matches_date", "match_date"),)

    def __repr__(self) -> str:
        return (
            f"<Match(id={self.id}, match_type={self.match_type.value}, "
            f"team_size={self.team_size})>"
        )


class QuarterMatch(Base):
    """Quarter detail of a QUARTERS match."""

    __tablename__ = "quarter_matches"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    match: Mapped[Match] = relationship(back_populates="quarter_match")
    quarters: Mapped[list[Quarter]] = relationship(
        back_populates="quarter_match",
        cascade="all, delete-orphan",
        order_by="Quarter.number",
    )


class Quarter(Base):
    """One timed quarter; the scoring unit of a QUARTERS match.

    Attributes:
        id: Auto-increment primary key.
        quarter_match_id: Owning quarter detail.
        number: Quarter number, 1-based.
        duration: Length in minutes.
    """

    __tablename__ = "quarters"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    quarter_match_id: Mapped[int] = mapped_column(
        ForeignKey("quarter_matches.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int] = mapped_column(nullable=False)
    duration: Mapped[int] = mapped_column(nullable=False)

    quarter_match: Mapped[QuarterMatch] = relationship(back_populates="quarters")
    stats: Mapped[list[QuarterStat]] = relationship(
        back_populates="quarter",
        cascade="all, delete-orphan",
        order_by="QuarterStat.id",
    )

    __table_args__ = (
        UniqueConstraint("quarter_match_id", "number", name="uq_quarter_number"),
    )

    def __repr__(self) -> str:
        return f"<Quarter(id={self.id}, number={self.number}, duration={self.duration})>"


class PointsMatch(Base):
    """Whole-game detail of a POINTS match; its single scoring unit."""

    __tablename__ = "points_matches"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    match: Mapped[Match] = relationship(back_populates="points_match")
    stats: Mapped[list[MatchStat]] = relationship(
        back_populates="points_match",
        cascade="all, delete-orphan",
        order_by="MatchStat.id",
    )


class Team(Base):
    """One side of a match."""

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )

    match: Mapped[Match] = relationship(back_populates="teams")
    team_players: Mapped[list[TeamPlayer]] = relationship(
        back_populates="team", cascade="all, delete-orphan"
    )

    @property
    def player_ids(self) -> frozenset[str]:
        return frozenset(tp.player_id for tp in self.team_players)


class TeamPlayer(Base):
    """Membership of a player on a team."""

    __tablename__ = "team_players"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)

    team: Mapped[Team] = relationship(back_populates="team_players")
    player: Mapped[Player] = relationship()

    __table_args__ = (
        UniqueConstraint("team_id", "player_id", name="uq_team_player"),
        Index("ix_team_players_player", "player_id"),
    )


# =============================================================================
# Stat Rows
# =============================================================================


class QuarterStat(StatColumnsMixin, Base):
    """A player's stats for one quarter."""

    __tablename__ = "quarter_stats"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    quarter_id: Mapped[int] = mapped_column(
        ForeignKey("quarters.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)

    quarter: Mapped[Quarter] = relationship(back_populates="stats")
    player: Mapped[Player] = relationship()

    __table_args__ = (
        *stat_check_constraints("quarter_stats"),
        UniqueConstraint("quarter_id", "player_id", name="uq_quarter_stat_player"),
    )

    def __repr__(self) -> str:
        return f"<QuarterStat(quarter_id={self.quarter_id}, player_id={self.player_id!r})>"


class MatchStat(StatColumnsMixin, Base):
    """A player's stats for a whole POINTS match."""

    __tablename__ = "match_stats"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    points_match_id: Mapped[int] = mapped_column(
        ForeignKey("points_matches.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)

    points_match: Mapped[PointsMatch] = relationship(back_populates="stats")
    player: Mapped[Player] = relationship()

    __table_args__ = (
        *stat_check_constraints("match_stats"),
        UniqueConstraint(
            "points_match_id", "player_id", name="uq_match_stat_player"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<MatchStat(points_match_id={self.points_match_id}, "
            f"player_id={self.player_id!r})>"
        )


# =============================================================================
# Challenges
# =============================================================================


class Challenge(TimestampMixin, Base):
    """A dated challenge attempt.

    Attributes:
        id: Auto-increment primary key.
        user_id: Owner.
        challenge_type: Challenge slug, e.g. "freethrows".
        challenge_date: Date of the attempt.
        badge_tier: Tier 1-4 derived from the attempt's efficiency.
        user: The owning Player.
        free_throw: Made/taken counts for free throw challenges.
    """

    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    challenge_type: Mapped[str] = mapped_column(String(32), nullable=False)
    challenge_date: Mapped[date] = mapped_column(nullable=False)
    badge_tier: Mapped[int] = mapped_column(nullable=False)

    user: Mapped[Player] = relationship()
    free_throw: Mapped[FreeThrow | None] = relationship(
        back_populates="challenge", cascade="all, delete-orphan", uselist=False
    )

    __table_args__ = (Index("ix_challenges_user_type", "user_id", "challenge_type"),)

    @property
    def shots_made(self) -> int:
        return self.free_throw.shots_made if self.free_throw else 0

    @property
    def shots_taken(self) -> int:
        return self.free_throw.shots_taken if self.free_throw else 0

    def __repr__(self) -> str:
        return (
            f"<Challenge(id={self.id}, user_id={self.user_id!r}, "
            f"badge_tier={self.badge_tier})>"
        )


class FreeThrow(Base):
    """Shot counts of a free throw challenge."""

    __tablename__ = "free_throws"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    shots_made: Mapped[int] = mapped_column(nullable=False)
    shots_taken: Mapped[int] = mapped_column(nullable=False)

    challenge: Mapped[Challenge] = relationship(back_populates="free_throw")
