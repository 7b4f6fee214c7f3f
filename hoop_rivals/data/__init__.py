"""Data layer for Hoop Rivals.

This module provides storage for matches, stat rows and challenges:
database engine/session management, SQLAlchemy ORM models, submission
payloads, the MatchStore repository and stored-data validation.

Submodules:
    db: Database engine and session management
    schema: SQLAlchemy base class and mixins
    models: SQLAlchemy ORM model definitions
    payloads: Pydantic models for match and stat submissions
    store: MatchStore repository
    validation: Integrity checks for stored matches

Example:
    >>> from hoop_rivals.data import init_db, session_scope, MatchStore
    >>> init_db()
    >>> with session_scope() as session:
    ...     matches = MatchStore(session).list_matches("p1")
"""
from __future__ import annotations

from hoop_rivals.data.db import (
    DatabaseInfo,
    create_db_engine,
    get_engine,
    get_session,
    init_db,
    inspect_database,
    reset_engine,
    session_scope,
    sqlite_url,
)
from hoop_rivals.data.models import (
    Challenge,
    FreeThrow,
    Match,
    MatchStat,
    Player,
    PointsMatch,
    Quarter,
    QuarterMatch,
    QuarterStat,
    Team,
    TeamPlayer,
)
from hoop_rivals.data.payloads import (
    NewMatchPayload,
    StatsSubmission,
    parse_new_match,
    parse_stats_submission,
)
from hoop_rivals.data.schema import Base, StatColumnsMixin, TimestampMixin
from hoop_rivals.data.store import MatchStore, to_match_record
from hoop_rivals.data.validation import DataValidator

__all__ = [
    # Repository
    "MatchStore",
    "to_match_record",
    # Payloads
    "NewMatchPayload",
    "StatsSubmission",
    "parse_new_match",
    "parse_stats_submission",
    # Validation
    "DataValidator",
    # Database utilities
    "DatabaseInfo",
    "create_db_engine",
    "get_engine",
    "get_session",
    "init_db",
    "inspect_database",
    "reset_engine",
    "session_scope",
    "sqlite_url",
    # Schema
    "Base",
    "StatColumnsMixin",
    "TimestampMixin",
    # Models
    "Challenge",
    "FreeThrow",
    "Match",
    "MatchStat",
    "Player",
    "PointsMatch",
    "Quarter",
    "QuarterMatch",
    "QuarterStat",
    "Team",
    "TeamPlayer",
]
