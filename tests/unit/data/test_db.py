"""Tests for database engine and session management.

Tests the connection utilities in hoop_rivals.data.db including engine
creation, session management, pragmas and database initialization.
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Generator

import pytest
from sqlalchemy import inspect, select, text

from hoop_rivals.data import (
    Player,
    create_db_engine,
    get_engine,
    get_session,
    init_db,
    inspect_database,
    reset_engine,
    session_scope,
    sqlite_url,
)

if TYPE_CHECKING:
    from hoop_rivals.config import Settings


@pytest.fixture(autouse=True)
def reset_db_between_tests(test_settings: "Settings") -> Generator[None, None, None]:
    """Reset database engine before and after each test."""
    reset_engine()
    yield
    reset_engine()


class TestGetEngine:
    """Tests for get_engine() function."""

    def test_get_engine_creates_from_settings(
        self, test_settings: "Settings"
    ) -> None:
        """Engine should be created from settings.db_path."""
        engine = get_engine()

        assert str(test_settings.db_path) in str(engine.url)

    def test_get_engine_caches_engine(self, test_settings: "Settings") -> None:
        """Engine should be cached on subsequent calls."""
        assert get_engine() is get_engine()

    def test_reset_engine_clears_cache(self, test_settings: "Settings") -> None:
        """reset_engine should force a new engine on next call."""
        engine1 = get_engine()
        reset_engine()

        assert get_engine() is not engine1


class TestPragmas:
    """Tests for SQLite pragmas."""

    def test_foreign_keys_enabled(self, test_settings: "Settings") -> None:
        """Foreign keys are enforced on every connection."""
        assert inspect_database().foreign_keys

    def test_wal_mode_enabled(self, test_settings: "Settings") -> None:
        """File databases use the WAL journal."""
        with get_engine().connect() as conn:
            mode = conn.execute(text("PRAGMA journal_mode")).scalar()

        assert mode == "wal"

    def test_create_db_engine_in_memory(self) -> None:
        """In-memory engines get the same pragmas."""
        engine = create_db_engine("sqlite://")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        engine.dispose()


class TestSessions:
    """Tests for session helpers."""

    def test_get_session_is_scoped(self, test_settings: "Settings") -> None:
        """The same thread gets the same session."""
        assert get_session() is get_session()

    def test_session_scope_commits_on_success(self, test_settings: "Settings") -> None:
        """Work inside the scope is committed."""
        init_db()
        with session_scope() as session:
            session.add(Player(id="p1", nickname="Ace"))

        with session_scope() as session:
            assert session.get(Player, "p1") is not None

    def test_session_scope_rolls_back_on_exception(
        self, test_settings: "Settings"
    ) -> None:
        """Exceptions roll back and propagate."""
        init_db()
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                session.add(Player(id="p1", nickname="Ace"))
                session.flush()
                raise RuntimeError("boom")

        with session_scope() as session:
            assert session.scalars(select(Player)).all() == []


class TestInitDb:
    """Tests for init_db() function."""

    def test_init_db_creates_all_tables(self, test_settings: "Settings") -> None:
        """Every model table exists after initialization."""
        init_db()

        tables = set(inspect(get_engine()).get_table_names())
        assert {
            "players",
            "matches",
            "quarter_matches",
            "quarters",
            "points_matches",
            "teams",
            "team_players",
            "quarter_stats",
            "match_stats",
            "challenges",
            "free_throws",
        } <= tables

    def test_init_db_reports_created_tables(self, test_settings: "Settings") -> None:
        """The first call lists every table; a repeat creates nothing."""
        assert len(init_db()) == 11
        assert init_db() == []

    def test_database_file_created(self, test_settings: "Settings") -> None:
        """The SQLite file appears on disk."""
        init_db()

        assert test_settings.db_path_obj.exists()


class TestInspectDatabase:
    """Tests for inspect_database() function."""

    def test_fresh_database_missing_everything(self, test_settings: "Settings") -> None:
        """Before init every model table is reported missing."""
        info = inspect_database()

        assert len(info.missing_tables) == 11
        assert list(info.missing_tables) == sorted(info.missing_tables)
        assert not info.ready

    def test_ready_after_init(self, test_settings: "Settings") -> None:
        """An initialized file database is ready with WAL and foreign keys."""
        init_db()

        info = inspect_database()

        assert info.missing_tables == ()
        assert info.foreign_keys
        assert info.journal_mode == "wal"
        assert info.ready

    def test_partial_schema(self) -> None:
        """Dropping a table shows up as missing."""
        engine = create_db_engine("sqlite://")
        init_db(engine)
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE free_throws"))

        assert inspect_database(engine).missing_tables == ("free_throws",)
        engine.dispose()


class TestSqliteUrl:
    """Tests for sqlite_url() function."""

    def test_builds_file_url(self, tmp_path: Path) -> None:
        """File paths become sqlite:/// URLs."""
        assert sqlite_url(tmp_path / "hoop.db") == f"sqlite:///{tmp_path / 'hoop.db'}"
