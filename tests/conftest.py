"""Shared pytest fixtures for Hoop Rivals tests.

This module contains fixtures used across multiple test modules:
- Configuration fixtures (test settings)
- Database session fixtures (in-memory SQLite)
- Domain builders (quarter and points match snapshots)

Example:
    def test_something(store, matches):
        # store is a MatchStore over an in-memory SQLite session
        # matches builds frozen MatchRecord snapshots
        pass
"""
from __future__ import annotations

import itertools
import os
from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from hoop_rivals.config import Settings, get_settings, reset_settings
from hoop_rivals.data.db import create_db_engine, init_db, reset_engine
from hoop_rivals.data.store import MatchStore
from hoop_rivals.stats.domain import (
    MatchRecord,
    PlayerStatLine,
    PointsDetail,
    QuartersDetail,
    ScoringUnit,
    StatLine,
    TeamRecord,
)
from hoop_rivals.types import MatchType

# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """Create and return temporary data directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def test_settings(tmp_data_dir: Path) -> Generator[Settings, None, None]:
    """Provide test settings with temporary directories.

    Automatically resets settings singleton and database engine after test.
    """
    os.environ["HOOP_DB_PATH"] = str(tmp_data_dir / "test.db")
    os.environ["LOG_DIR"] = str(tmp_data_dir / "logs")
    os.environ["LOG_LEVEL"] = "DEBUG"

    reset_settings()
    reset_engine()
    settings = get_settings()
    settings.ensure_directories()

    yield settings

    # Cleanup
    reset_engine()
    reset_settings()
    for key in ["HOOP_DB_PATH", "LOG_DIR", "LOG_LEVEL"]:
        os.environ.pop(key, None)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session with foreign keys enforced."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(db_session: Session) -> MatchStore:
    """MatchStore bound to the in-memory session."""
    return MatchStore(db_session)


@pytest.fixture
def quarters_payload() -> dict:
    """New-match payload for a 1v1 match of four 12-minute quarters."""
    return {
        "matchType": "QUARTERS",
        "date": "2024-03-02",
        "teamSize": 1,
        "arenaId": 7,
        "quarters": [{"number": n, "duration": 12} for n in range(1, 5)],
        "teamA": [{"id": "p1", "nickname": "Ace"}],
        "teamB": [{"id": "p2", "nickname": "Buckets"}],
    }


@pytest.fixture
def points_payload() -> dict:
    """New-match payload for a 2v2 race to 21."""
    return {
        "matchType": "POINTS",
        "date": "2024-03-03",
        "teamSize": 2,
        "pointsToWin": 21,
        "teamA": [{"id": "p1"}, {"id": "p3"}],
        "teamB": [{"id": "p2"}, {"id": "p4"}],
    }


# =============================================================================
# Domain Builders
# =============================================================================


def line(
    two: tuple[int, int] = (0, 0),
    three: tuple[int, int] = (0, 0),
    ft: tuple[int, int] = (0, 0),
    rebounds: int = 0,
    assists: int | None = None,
    blocks: int = 0,
) -> StatLine:
    """Build a StatLine from (scored, attempted) pairs."""
    return StatLine(
        two_points_scored=two[0],
        two_points_attempted=two[1],
        three_points_scored=three[0],
        three_points_attempted=three[1],
        free_throws_scored=ft[0],
        free_throws_attempted=ft[1],
        rebounds=rebounds,
        assists=assists,
        blocks=blocks,
    )


class MatchFactory:
    """Builds MatchRecord snapshots with unique ids."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)

    def _teams(
        self, team_a: Sequence[str], team_b: Sequence[str]
    ) -> tuple[TeamRecord, TeamRecord]:
        return (
            TeamRecord(team_id=next(self._ids), player_ids=frozenset(team_a)),
            TeamRecord(team_id=next(self._ids), player_ids=frozenset(team_b)),
        )

    @staticmethod
    def _rows(rows: Mapping[str, StatLine]) -> tuple[PlayerStatLine, ...]:
        return tuple(PlayerStatLine(pid, stats) for pid, stats in rows.items())

    def quarters(
        self,
        quarter_rows: Sequence[Mapping[str, StatLine]],
        durations: Sequence[int] | int = 12,
        team_a: Sequence[str] = ("p1",),
        team_b: Sequence[str] = ("p2",),
        team_size: int | None = None,
    ) -> MatchRecord:
        """QUARTERS match with one quarter per entry of ``quarter_rows``."""
        if isinstance(durations, int):
            durations = [durations] * len(quarter_rows)
        units = tuple(
            ScoringUnit(
                unit_id=next(self._ids),
                number=number,
                duration=duration,
                rows=self._rows(rows),
            )
            for number, (duration, rows) in enumerate(
                zip(durations, quarter_rows), start=1
            )
        )
        return MatchRecord(
            match_id=next(self._ids),
            match_type=MatchType.QUARTERS,
            team_size=team_size or len(team_a),
            detail=QuartersDetail(quarters=units),
            teams=self._teams(team_a, team_b),
            match_date=date(2024, 1, 1),
        )

    def points(
        self,
        rows: Mapping[str, StatLine],
        points_to_win: int | None = 21,
        team_a: Sequence[str] = ("p1",),
        team_b: Sequence[str] = ("p2",),
        team_size: int | None = None,
    ) -> MatchRecord:
        """POINTS match with a single whole-game unit."""
        return MatchRecord(
            match_id=next(self._ids),
            match_type=MatchType.POINTS,
            team_size=team_size or len(team_a),
            detail=PointsDetail(unit=ScoringUnit(next(self._ids), rows=self._rows(rows))),
            teams=self._teams(team_a, team_b),
            match_date=date(2024, 1, 1),
            points_to_win=points_to_win,
        )


@pytest.fixture
def matches() -> MatchFactory:
    """Builder for MatchRecord snapshots."""
    return MatchFactory()


@pytest.fixture
def stat_line():
    """Builder for StatLine values from (scored, attempted) pairs."""
    return line


# =============================================================================
# Marker Helpers
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
