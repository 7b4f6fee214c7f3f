"""Tests for submission payload parsing."""
from __future__ import annotations

import json
from datetime import date

import pytest

from hoop_rivals.data.payloads import (
    PointsStatsPayload,
    StatFields,
    parse_new_match,
    parse_stats_submission,
)
from hoop_rivals.stats.domain import StatLine
from hoop_rivals.types import MatchType, ValidationError


class TestStatFields:
    """Tests for StatFields model."""

    def test_camel_case_aliases(self) -> None:
        """Client keys map onto snake_case attributes."""
        fields = StatFields.model_validate(
            {"twoPointsScored": 2, "twoPointsAttempted": 4, "rebounds": 3}
        )

        assert fields.two_points_scored == 2
        assert fields.to_stat_line() == StatLine(
            two_points_scored=2, two_points_attempted=4, rebounds=3
        )

    def test_missing_counters_default_to_zero(self) -> None:
        """Omitted counters are zero and assists stay unset."""
        line = StatFields().to_stat_line()

        assert line == StatLine()
        assert line.assists is None


class TestParseStatsSubmission:
    """Tests for parse_stats_submission function."""

    def test_quarters_submission(self) -> None:
        """A statsData list is a quarters submission."""
        submission = parse_stats_submission(
            {
                "matchId": 3,
                "statsData": [
                    {
                        "quarterId": 10,
                        "stats": {
                            "teamA": [{"playerId": "p1", "stats": {"blocks": 1}}],
                            "teamB": [],
                        },
                    }
                ],
            }
        )

        assert submission.is_quarters
        assert submission.match_id == 3
        assert submission.stats_data[0].quarter_id == 10

    def test_points_submission_from_json(self) -> None:
        """A statsData object is a points submission; JSON text is accepted."""
        text = json.dumps(
            {
                "matchId": 4,
                "statsData": {
                    "stats": {
                        "teamA": [{"playerId": "p1", "stats": {"freeThrowsScored": 1}}],
                        "teamB": [{"playerId": "p2", "stats": {}}],
                    }
                },
            }
        )

        submission = parse_stats_submission(text)

        assert not submission.is_quarters
        assert isinstance(submission.stats_data, PointsStatsPayload)
        players = [p.player_id for p in submission.stats_data.stats.all_players()]
        assert players == ["p1", "p2"]

    def test_missing_match_id(self) -> None:
        """matchId is required."""
        with pytest.raises(ValidationError, match="Missing matchId"):
            parse_stats_submission({"statsData": {"stats": {}}})

    def test_negative_counts_rejected(self) -> None:
        """Range checks happen at parse time."""
        with pytest.raises(ValidationError) as exc_info:
            parse_stats_submission(
                {
                    "matchId": 1,
                    "statsData": {
                        "stats": {
                            "teamA": [{"playerId": "p1", "stats": {"rebounds": -2}}]
                        }
                    },
                }
            )

        assert exc_info.value.errors

    def test_non_numeric_counts_rejected(self) -> None:
        """Counters must be numbers."""
        with pytest.raises(ValidationError, match="Invalid StatsSubmission"):
            parse_stats_submission(
                {
                    "matchId": 1,
                    "statsData": {
                        "stats": {
                            "teamA": [{"playerId": "p1", "stats": {"blocks": "lots"}}]
                        }
                    },
                }
            )


class TestParseNewMatch:
    """Tests for parse_new_match function."""

    def test_quarters_match(self, quarters_payload: dict) -> None:
        """A well-formed quarters payload parses."""
        new_match = parse_new_match(quarters_payload)

        assert new_match.match_type is MatchType.QUARTERS
        assert new_match.match_date == date(2024, 3, 2)
        assert len(new_match.quarters) == 4

    def test_points_match(self, points_payload: dict) -> None:
        """A well-formed points payload parses."""
        new_match = parse_new_match(points_payload)

        assert new_match.points_to_win == 21
        assert [p.id for p in new_match.team_b] == ["p2", "p4"]

    def test_team_size_must_match_rosters(self, points_payload: dict) -> None:
        """Both rosters must have teamSize players."""
        points_payload["teamB"] = [{"id": "p2"}]

        with pytest.raises(ValidationError, match="Invalid team size"):
            parse_new_match(points_payload)

    @pytest.mark.parametrize("size", [0, 6])
    def test_team_size_range(self, points_payload: dict, size: int) -> None:
        """Team size is between 1 and 5."""
        points_payload["teamSize"] = size

        with pytest.raises(ValidationError):
            parse_new_match(points_payload)

    def test_player_on_both_teams(self, quarters_payload: dict) -> None:
        """Nobody plays for both sides."""
        quarters_payload["teamB"] = [{"id": "p1"}]

        with pytest.raises(ValidationError, match="both teams"):
            parse_new_match(quarters_payload)

    def test_player_twice_on_one_team(self, points_payload: dict) -> None:
        """A roster cannot list the same player twice."""
        points_payload["teamA"] = [{"id": "p1"}, {"id": "p1"}]

        with pytest.raises(ValidationError, match="listed twice"):
            parse_new_match(points_payload)

    def test_quarters_required(self, quarters_payload: dict) -> None:
        """QUARTERS matches need quarters."""
        quarters_payload.pop("quarters")

        with pytest.raises(ValidationError, match="Missing quarters"):
            parse_new_match(quarters_payload)

    def test_quarter_numbers_unique(self, quarters_payload: dict) -> None:
        """Quarter numbers cannot repeat."""
        quarters_payload["quarters"] = [
            {"number": 1, "duration": 10},
            {"number": 1, "duration": 10},
        ]

        with pytest.raises(ValidationError, match="unique"):
            parse_new_match(quarters_payload)

    def test_points_to_win_required(self, points_payload: dict) -> None:
        """POINTS matches need a target."""
        points_payload.pop("pointsToWin")

        with pytest.raises(ValidationError, match="Missing pointsToWin"):
            parse_new_match(points_payload)

    def test_unknown_match_type(self, points_payload: dict) -> None:
        """Only QUARTERS and POINTS exist."""
        points_payload["matchType"] = "INNINGS"

        with pytest.raises(ValidationError):
            parse_new_match(points_payload)
