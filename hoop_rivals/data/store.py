"""Match and stat repository over an injected SQLAlchemy session.

MatchStore is the only component that reads or writes match data. It loads
histories into the immutable snapshots of :mod:`hoop_rivals.stats.domain`,
so the statistics core never holds a live ORM object.

Write rules:
- at most one stat row per (scoring unit, player); creation of a second row
  raises DuplicateStatRowError
- a correction replaces every counter of the row in one UPDATE statement
- a batch submission is validated in full before the first row is written

Example:
    >>> from hoop_rivals.data import MatchStore, session_scope
    >>> with session_scope() as session:
    ...     store = MatchStore(session)
    ...     matches = store.list_matches("p1")
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

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
from hoop_rivals.data.payloads import NewMatchPayload, StatsSubmission
from hoop_rivals.stats.badges import BadgeTier, classify
from hoop_rivals.stats.domain import (
    MatchRecord,
    PlayerStatLine,
    PointsDetail,
    QuartersDetail,
    ScoringUnit,
    StatLine,
    TeamRecord,
)
from hoop_rivals.stats.normalizer import ValidationResult, check_stat_line
from hoop_rivals.types import (
    DuplicateStatRowError,
    InconsistentStateError,
    MatchId,
    MatchType,
    NotFoundError,
    PlayerId,
    UnitId,
    ValidationError,
)

logger = logging.getLogger(__name__)

FREE_THROW_CHALLENGE: str = "freethrows"

_MATCH_LOAD_OPTIONS = (
    selectinload(Match.teams).selectinload(Team.team_players),
    selectinload(Match.quarter_match)
    .selectinload(QuarterMatch.quarters)
    .selectinload(Quarter.stats),
    selectinload(Match.points_match).selectinload(PointsMatch.stats),
)


def to_match_record(match: Match) -> MatchRecord:
    """Convert a loaded ORM match into an immutable snapshot.

    Raises:
        InconsistentStateError: If the match lacks the sub-record its type
            requires.
    """
    detail: QuartersDetail | PointsDetail
    if match.match_type is MatchType.QUARTERS:
        if match.quarter_match is None or match.points_match is not None:
            raise InconsistentStateError(
                f"Match {match.id} is QUARTERS but has no quarter detail"
            )
        detail = QuartersDetail(
            quarters=tuple(
                ScoringUnit(
                    unit_id=quarter.id,
                    number=quarter.number,
                    duration=quarter.duration,
                    rows=tuple(
                        PlayerStatLine(row.player_id, row.to_stat_line())
                        for row in quarter.stats
                    ),
                )
                for quarter in match.quarter_match.quarters
            )
        )
    else:
        if match.points_match is None or match.quarter_match is not None:
            raise InconsistentStateError(
                f"Match {match.id} is POINTS but has no points detail"
            )
        detail = PointsDetail(
            unit=ScoringUnit(
                unit_id=match.points_match.id,
                rows=tuple(
                    PlayerStatLine(row.player_id, row.to_stat_line())
                    for row in match.points_match.stats
                ),
            )
        )

    return MatchRecord(
        match_id=match.id,
        match_type=match.match_type,
        team_size=match.team_size,
        detail=detail,
        teams=tuple(
            TeamRecord(team_id=team.id, player_ids=team.player_ids)
            for team in match.teams
        ),
        match_date=match.match_date,
        arena_id=match.arena_id,
        points_to_win=match.points_to_win,
    )


class MatchStore:
    """Repository for matches, stat rows and challenges.

    Args:
        session: Session whose transaction the store's writes join. The
            caller owns commit and rollback (see ``session_scope``).
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # -------------------------------------------------------------------------
    # Players
    # -------------------------------------------------------------------------

    def ensure_player(self, player_id: PlayerId, nickname: str | None = None) -> Player:
        """Return the player, creating it when unknown."""
        player = self.session.get(Player, player_id)
        if player is None:
            player = Player(id=player_id, nickname=nickname or player_id)
            self.session.add(player)
            self.session.flush()
            logger.debug(f"Created player {player_id}")
        return player

    # -------------------------------------------------------------------------
    # Matches
    # -------------------------------------------------------------------------

    def create_match(self, new_match: NewMatchPayload) -> MatchId:
        """Create a match with both teams and its type-specific detail.

        Args:
            new_match: Parsed and cross-checked match payload.

        Returns:
            Id of the new match.
        """
        for ref in [*new_match.team_a, *new_match.team_b]:
            self.ensure_player(ref.id, ref.nickname)

        match = Match(
            match_type=new_match.match_type,
            team_size=new_match.team_size,
            match_date=new_match.match_date,
            arena_id=new_match.arena_id,
        )
        if new_match.match_type is MatchType.QUARTERS:
            match.quarter_match = QuarterMatch(
                quarters=[
                    Quarter(number=q.number, duration=q.duration)
                    for q in sorted(new_match.quarters or [], key=lambda q: q.number)
                ]
            )
        else:
            match.points_to_win = new_match.points_to_win
            match.points_match = PointsMatch()

        match.teams = [
            Team(team_players=[TeamPlayer(player_id=ref.id) for ref in roster])
            for roster in (new_match.team_a, new_match.team_b)
        ]
        self.session.add(match)
        self.session.flush()
        logger.info(
            f"Created {match.match_type.value} match {match.id} "
            f"({match.team_size}v{match.team_size})"
        )
        return match.id

    def _load_match(self, match_id: MatchId) -> Match | None:
        stmt = (
            select(Match)
            .where(Match.id == match_id)
            .options(*_MATCH_LOAD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        return self.session.scalars(stmt).first()

    def find_match(self, match_id: MatchId) -> MatchRecord | None:
        """Return a fully loaded match, or None if it does not exist.

        Raises:
            InconsistentStateError: If the match lacks its type's sub-record.
        """
        match = self._load_match(match_id)
        if match is None:
            return None
        return to_match_record(match)

    def list_matches(self, player_id: PlayerId) -> list[MatchRecord]:
        """Return every match the player is rostered on, oldest first.

        Matches whose type lacks the corresponding sub-record are skipped
        with a warning; they are matches still being set up.
        """
        stmt = (
            select(Match)
            .where(
                Match.teams.any(Team.team_players.any(TeamPlayer.player_id == player_id))
            )
            .options(*_MATCH_LOAD_OPTIONS)
            .order_by(Match.match_date, Match.id)
            .execution_options(populate_existing=True)
        )
        records: list[MatchRecord] = []
        for match in self.session.scalars(stmt).unique():
            try:
                records.append(to_match_record(match))
            except InconsistentStateError as exc:
                logger.warning(f"Skipping match {match.id}: {exc}")
        logger.debug(f"Loaded {len(records)} matches for player {player_id}")
        return records

    def _own_match(self, match_id: MatchId, player_id: PlayerId) -> Match:
        stmt = select(Match).where(
            Match.id == match_id,
            Match.teams.any(Team.team_players.any(TeamPlayer.player_id == player_id)),
        )
        match = self.session.scalars(stmt).first()
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        return match

    def update_match(
        self,
        match_id: MatchId,
        player_id: PlayerId,
        match_date: date,
        arena_id: int | None,
    ) -> None:
        """Move a match the player took part in to another date or arena.

        Teams, quarters and stat rows are left untouched. Both fields are
        written, so passing ``arena_id=None`` clears the arena.

        Raises:
            ValidationError: If match_date is not a date.
            NotFoundError: If no such match has the player on a team.
        """
        if not isinstance(match_date, date):
            raise ValidationError(f"Match date must be a date, got {match_date!r}")
        match = self._own_match(match_id, player_id)
        match.match_date = match_date
        match.arena_id = arena_id
        self.session.flush()
        logger.info(f"Updated match {match_id}: date {match_date}, arena {arena_id}")

    def delete_match(self, match_id: MatchId, player_id: PlayerId) -> None:
        """Delete a match the player took part in, with all its stats.

        Raises:
            NotFoundError: If no such match has the player on a team.
        """
        self.session.delete(self._own_match(match_id, player_id))
        self.session.flush()
        logger.info(f"Deleted match {match_id}")

    # -------------------------------------------------------------------------
    # Stat rows
    # -------------------------------------------------------------------------

    def _resolve_scope(
        self, match_id: MatchId, quarter_id: UnitId | None
    ) -> tuple[type[QuarterStat] | type[MatchStat], str, int]:
        """Find the stat table, scope column and scope id for a submission."""
        match = self.session.get(Match, match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")

        if match.match_type is MatchType.QUARTERS:
            if quarter_id is None:
                raise ValidationError(
                    f"Missing quarterId for QUARTERS match {match_id}"
                )
            quarter = self.session.get(Quarter, quarter_id)
            if (
                quarter is None
                or match.quarter_match is None
                or quarter.quarter_match_id != match.quarter_match.id
            ):
                raise NotFoundError(
                    f"Quarter {quarter_id} not found in match {match_id}"
                )
            return QuarterStat, "quarter_id", quarter.id

        if match.points_match is None:
            raise NotFoundError(f"PointsMatch record not found for match {match_id}")
        return MatchStat, "points_match_id", match.points_match.id

    def _find_row(
        self,
        model: type[QuarterStat] | type[MatchStat],
        scope_column: str,
        scope_id: int,
        player_id: PlayerId,
    ) -> QuarterStat | MatchStat | None:
        stmt = select(model).where(
            getattr(model, scope_column) == scope_id, model.player_id == player_id
        )
        return self.session.scalars(stmt).first()

    def create_stat_row(
        self,
        match_id: MatchId,
        player_id: PlayerId,
        stats: StatLine,
        quarter_id: UnitId | None = None,
    ) -> None:
        """Record a player's stats for a quarter or a points match.

        Raises:
            ValidationError: If the line is invalid or quarter_id is missing
                for a QUARTERS match.
            DuplicateStatRowError: If the player already has a row there.
            NotFoundError: If the match or quarter does not exist.
        """
        label = f"player {player_id}"
        result = check_stat_line(stats, label)
        if not result.valid:
            raise ValidationError(result.errors[0], result.errors)

        model, scope_column, scope_id = self._resolve_scope(match_id, quarter_id)
        if self._find_row(model, scope_column, scope_id, player_id) is not None:
            raise DuplicateStatRowError(
                f"Stats already recorded for {label} in {model.__tablename__} "
                f"scope {scope_id}"
            )

        self.ensure_player(player_id)
        row = model(player_id=player_id, **{scope_column: scope_id}, **stats.to_fields())
        self.session.add(row)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent writer for the same pair
            raise DuplicateStatRowError(
                f"Stats already recorded for {label} in scope {scope_id}"
            ) from exc

    def update_stat_row(
        self,
        match_id: MatchId,
        player_id: PlayerId,
        stats: StatLine,
        quarter_id: UnitId | None = None,
    ) -> None:
        """Replace a player's recorded stats in place.

        All counters are written by a single UPDATE so a concurrent reader
        sees either the old row or the new one.

        Raises:
            ValidationError: If the line is invalid or quarter_id is missing.
            NotFoundError: If the match, quarter or row does not exist.
        """
        result = check_stat_line(stats, f"player {player_id}")
        if not result.valid:
            raise ValidationError(result.errors[0], result.errors)

        model, scope_column, scope_id = self._resolve_scope(match_id, quarter_id)
        stmt = (
            update(model)
            .where(
                getattr(model, scope_column) == scope_id,
                model.player_id == player_id,
            )
            .values(**stats.to_fields())
            .execution_options(synchronize_session="fetch")
        )
        outcome = self.session.execute(stmt)
        if outcome.rowcount == 0:
            raise NotFoundError(
                f"No stats recorded for player {player_id} in scope {scope_id}"
            )

    def _submission_rows(
        self, submission: StatsSubmission
    ) -> list[tuple[UnitId | None, PlayerId, StatLine]]:
        if submission.is_quarters:
            assert isinstance(submission.stats_data, list)
            return [
                (quarter.quarter_id, player.player_id, player.stats.to_stat_line())
                for quarter in submission.stats_data
                for player in quarter.stats.all_players()
            ]
        assert not isinstance(submission.stats_data, list)
        return [
            (None, player.player_id, player.stats.to_stat_line())
            for player in submission.stats_data.stats.all_players()
        ]

    def check_submission(self, submission: StatsSubmission) -> ValidationResult:
        """Validate a whole submission against its match without writing.

        Checks the payload shape fits the match type, every quarter id is
        present, no player is submitted twice for a unit, and every stat
        line is consistent.

        Raises:
            NotFoundError: If the match does not exist.
        """
        result = ValidationResult()
        match_id = submission.match_id
        match = self.session.get(Match, match_id) if match_id is not None else None
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")

        if match.match_type is MatchType.QUARTERS and not submission.is_quarters:
            result.add_error("Invalid stats data for QUARTERS match. Expected array.")
            return result
        if match.match_type is MatchType.POINTS and submission.is_quarters:
            result.add_error(
                "Invalid stats data for POINTS match. Expected single object."
            )
            return result

        seen: set[tuple[UnitId | None, PlayerId]] = set()
        for quarter_id, player_id, line in self._submission_rows(submission):
            where = f"quarter {quarter_id}, " if quarter_id is not None else ""
            if match.match_type is MatchType.QUARTERS and quarter_id is None:
                result.add_error(f"Missing quarterId for player {player_id}")
            if (quarter_id, player_id) in seen:
                result.add_error(f"{where}player {player_id} submitted twice")
            seen.add((quarter_id, player_id))
            result.merge(check_stat_line(line, f"{where}player {player_id}"))
        return result

    def record_stats(self, submission: StatsSubmission, replace: bool = False) -> int:
        """Write every row of a submission, or none of them.

        Every row is validated and its scope resolved before the first
        write, so a rejected submission leaves the store untouched.

        Args:
            submission: Parsed submission for one match.
            replace: Correct existing rows instead of creating new ones.

        Returns:
            Number of rows written.

        Raises:
            ValidationError: If any row is invalid; nothing is written.
            DuplicateStatRowError: If creating a row that already exists.
            NotFoundError: If the match, a quarter, or (when replacing) a row
                does not exist.
        """
        result = self.check_submission(submission)
        if not result.valid:
            raise ValidationError(result.errors[0], result.errors)

        assert submission.match_id is not None
        rows = self._submission_rows(submission)
        for quarter_id, player_id, _ in rows:
            model, scope_column, scope_id = self._resolve_scope(
                submission.match_id, quarter_id
            )
            existing = self._find_row(model, scope_column, scope_id, player_id)
            if replace and existing is None:
                raise NotFoundError(
                    f"No stats recorded for player {player_id} in scope {scope_id}"
                )
            if not replace and existing is not None:
                raise DuplicateStatRowError(
                    f"Stats already recorded for player {player_id} "
                    f"in scope {scope_id}"
                )

        write = self.update_stat_row if replace else self.create_stat_row
        for quarter_id, player_id, line in rows:
            write(submission.match_id, player_id, line, quarter_id=quarter_id)

        logger.info(
            f"{'Updated' if replace else 'Recorded'} {len(rows)} stat rows "
            f"for match {submission.match_id}"
        )
        return len(rows)

    # -------------------------------------------------------------------------
    # Challenges
    # -------------------------------------------------------------------------

    def upsert_challenge(
        self,
        user_id: PlayerId,
        made: int,
        attempted: int,
        challenge_date: date | None = None,
        challenge_id: int | None = None,
    ) -> BadgeTier:
        """Create or correct a free throw challenge and badge it.

        Args:
            user_id: Owner of the challenge.
            made: Shots made.
            attempted: Shots taken; must be at least one.
            challenge_date: Date of the attempt, today when omitted.
            challenge_id: Existing challenge to correct.

        Returns:
            Badge tier awarded.

        Raises:
            ValidationError: If the counts are invalid.
            NotFoundError: If challenge_id does not belong to the user.
        """
        tier = classify(made, attempted)
        if attempted < 1:
            raise ValidationError("A challenge needs at least one attempt")
        when = challenge_date or date.today()

        if challenge_id is None:
            self.ensure_player(user_id)
            challenge = Challenge(
                user_id=user_id,
                challenge_type=FREE_THROW_CHALLENGE,
                challenge_date=when,
                badge_tier=int(tier),
                free_throw=FreeThrow(shots_made=made, shots_taken=attempted),
            )
            self.session.add(challenge)
        else:
            challenge = self._own_challenge(challenge_id, user_id)
            challenge.challenge_date = when
            challenge.badge_tier = int(tier)
            if challenge.free_throw is None:
                challenge.free_throw = FreeThrow(shots_made=made, shots_taken=attempted)
            else:
                challenge.free_throw.shots_made = made
                challenge.free_throw.shots_taken = attempted

        self.session.flush()
        logger.info(
            f"Challenge {challenge.id} for {user_id}: {made}/{attempted} -> {tier.name}"
        )
        return tier

    def _own_challenge(self, challenge_id: int, user_id: PlayerId) -> Challenge:
        challenge = self.session.get(Challenge, challenge_id)
        if challenge is None or challenge.user_id != user_id:
            raise NotFoundError(f"Challenge {challenge_id} not found")
        return challenge

    def delete_challenge(self, challenge_id: int, user_id: PlayerId) -> None:
        """Delete one of the user's challenges.

        Raises:
            NotFoundError: If the challenge does not belong to the user.
        """
        self.session.delete(self._own_challenge(challenge_id, user_id))
        self.session.flush()

    def list_challenges(
        self, user_ids: PlayerId | Iterable[PlayerId]
    ) -> dict[PlayerId, list[Challenge]]:
        """Free throw challenges grouped by owner, oldest first."""
        ids: Sequence[PlayerId] = (
            [user_ids] if isinstance(user_ids, str) else list(user_ids)
        )
        grouped: dict[PlayerId, list[Challenge]] = {uid: [] for uid in ids}
        if not ids:
            return grouped
        stmt = (
            select(Challenge)
            .where(
                Challenge.user_id.in_(ids),
                Challenge.challenge_type == FREE_THROW_CHALLENGE,
            )
            .options(selectinload(Challenge.free_throw))
            .order_by(Challenge.challenge_date, Challenge.id)
        )
        for challenge in self.session.scalars(stmt):
            grouped[challenge.user_id].append(challenge)
        return grouped

    def nicknames(self, user_ids: Iterable[PlayerId]) -> dict[PlayerId, str]:
        """Display names for the given users that exist in the store."""
        ids = list(user_ids)
        if not ids:
            return {}
        stmt = select(Player).where(Player.id.in_(ids))
        return {player.id: player.nickname for player in self.session.scalars(stmt)}
