"""
Trivia Persistence

Database operations for trivia rounds, per-user counters and the command
log, on top of common.database.BotDatabase.
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from common.database import BotDatabase
from common.models import CommandLog, TriviaAnswer, TriviaGame, User

logger = logging.getLogger(__name__)


@dataclass
class LeaderboardEntry:
    """Single entry on the channel trivia leaderboard."""
    username: str
    trivia_wins: int


@dataclass
class ActivityEntry:
    """Command count for one user in a channel."""
    username: str
    total_commands: int


@dataclass
class UserStats:
    """User statistics snapshot."""
    username: str
    total_commands: int
    trivia_wins: int
    trivia_attempts: int
    trivia_streak: int
    trivia_best_streak: int
    trivia_fastest_ms: Optional[int]
    first_seen: int
    favorite_item: Optional[str] = None

    @property
    def win_rate(self) -> float:
        """Wins as a percentage of attempts."""
        if self.trivia_attempts == 0:
            return 0.0
        return (self.trivia_wins / self.trivia_attempts) * 100


class TriviaStorage:
    """
    Trivia database operations.

    Usernames are stored lowercase and user rows are created the first time
    a username is referenced. Every method opens its own session, so each
    call is one transaction.
    """

    DEFAULT_RETENTION_DAYS = 30

    def __init__(self, db: BotDatabase):
        self.db = db

    async def _get_or_create_user(self, session: AsyncSession, username: str) -> User:
        """Load a user row, creating it on first reference."""
        now = int(time.time())
        lower = username.lower()

        result = await session.execute(select(User).where(User.username == lower))
        user = result.scalar_one_or_none()

        if user:
            user.last_seen = now
        else:
            user = User(
                username=lower,
                first_seen=now,
                last_seen=now,
                total_commands=0,
                trivia_wins=0,
                trivia_attempts=0,
                trivia_streak=0,
                trivia_best_streak=0,
            )
            session.add(user)
            await session.flush()

        return user

    # ========================================================================
    # Rounds
    # ========================================================================

    async def create_game(
        self,
        channel: str,
        question_type: int,
        question: str,
        correct_answer: str,
    ) -> int:
        """
        Record a new round.

        Returns:
            ID of the new trivia_games row
        """
        async with self.db.session() as session:
            game = TriviaGame(
                channel=channel,
                question_type=question_type,
                question_text=question,
                correct_answer=correct_answer,
                participant_count=0,
                started_at=int(time.time()),
            )
            session.add(game)
            await session.flush()
            return game.id

    async def record_attempt(self, game_id: Optional[int], username: str) -> None:
        """Count a plausible answer attempt against the user."""
        async with self.db.session() as session:
            user = await self._get_or_create_user(session, username)
            user.trivia_attempts += 1

    async def record_answer(
        self,
        game_id: Optional[int],
        username: str,
        answer_text: str,
        correct: bool,
        answer_time_ms: int,
    ) -> None:
        """Store an answer row for the round (skipped without a game row)."""
        if game_id is None:
            return

        async with self.db.session() as session:
            user = await self._get_or_create_user(session, username)
            session.add(TriviaAnswer(
                game_id=game_id,
                user_id=user.id,
                answer_text=answer_text,
                is_correct=correct,
                answer_time_ms=answer_time_ms,
            ))

    async def record_win(
        self,
        game_id: Optional[int],
        username: str,
        answer_time_ms: int,
        participant_count: int,
    ) -> None:
        """
        Record the winner of a round.

        Sets the round's winner and bumps the user's wins and streak,
        raising best streak and lowering fastest time where beaten.
        """
        async with self.db.session() as session:
            user = await self._get_or_create_user(session, username)

            if game_id is not None:
                await session.execute(
                    update(TriviaGame)
                    .where(TriviaGame.id == game_id)
                    .values(
                        winner_id=user.id,
                        answer_time_ms=answer_time_ms,
                        participant_count=participant_count,
                    )
                )

            user.trivia_wins += 1
            user.trivia_streak += 1
            user.trivia_best_streak = max(user.trivia_best_streak, user.trivia_streak)
            if user.trivia_fastest_ms is None or answer_time_ms < user.trivia_fastest_ms:
                user.trivia_fastest_ms = answer_time_ms

    async def reset_streak(self, username: str) -> None:
        """Reset the user's current win streak."""
        async with self.db.session() as session:
            await session.execute(
                update(User)
                .where(User.username == username.lower())
                .values(trivia_streak=0)
            )

    # ========================================================================
    # Command Log
    # ========================================================================

    async def log_command(
        self,
        channel: str,
        username: str,
        cmd_type: str,
        query: Optional[str] = None,
        match_name: Optional[str] = None,
    ) -> None:
        """Record a handled command and bump the user's command count."""
        async with self.db.session() as session:
            user = await self._get_or_create_user(session, username)
            user.total_commands += 1
            session.add(CommandLog(
                user_id=user.id,
                channel=channel,
                cmd_type=cmd_type,
                query=query,
                match_name=match_name,
                created_at=int(time.time()),
            ))

    # ========================================================================
    # Queries
    # ========================================================================

    async def get_leaderboard(self, channel: str, limit: int = 5) -> List[LeaderboardEntry]:
        """Users who won a round in the channel, by total wins."""
        async with self.db.session() as session:
            result = await session.execute(
                select(User.username, User.trivia_wins)
                .join(TriviaGame, TriviaGame.winner_id == User.id)
                .where(TriviaGame.channel == channel, User.trivia_wins > 0)
                .group_by(User.id, User.username, User.trivia_wins)
                .order_by(User.trivia_wins.desc(), User.username)
                .limit(limit)
            )
            return [
                LeaderboardEntry(username=row.username, trivia_wins=row.trivia_wins)
                for row in result.all()
            ]

    async def get_user_stats(self, username: str) -> Optional[UserStats]:
        """Counters for one user, or None if they were never seen."""
        async with self.db.session() as session:
            result = await session.execute(
                select(User).where(User.username == username.lower())
            )
            user = result.scalar_one_or_none()
            if not user:
                return None

            count = func.count().label('cnt')
            fav = await session.execute(
                select(CommandLog.match_name, count)
                .where(CommandLog.user_id == user.id, CommandLog.match_name.is_not(None))
                .group_by(CommandLog.match_name)
                .order_by(count.desc())
                .limit(1)
            )
            fav_row = fav.first()

            return UserStats(
                username=user.username,
                total_commands=user.total_commands,
                trivia_wins=user.trivia_wins,
                trivia_attempts=user.trivia_attempts,
                trivia_streak=user.trivia_streak,
                trivia_best_streak=user.trivia_best_streak,
                trivia_fastest_ms=user.trivia_fastest_ms,
                first_seen=user.first_seen,
                favorite_item=fav_row.match_name if fav_row else None,
            )

    async def get_channel_activity(self, channel: str, limit: int = 5) -> List[ActivityEntry]:
        """Command counts per user in the channel, highest first."""
        async with self.db.session() as session:
            count = func.count(CommandLog.id).label('total_commands')
            result = await session.execute(
                select(User.username, count)
                .select_from(CommandLog)
                .join(User, CommandLog.user_id == User.id)
                .where(CommandLog.channel == channel)
                .group_by(User.id, User.username)
                .order_by(count.desc(), User.username)
                .limit(limit)
            )
            return [
                ActivityEntry(username=row.username, total_commands=row.total_commands)
                for row in result.all()
            ]

    # ========================================================================
    # Maintenance
    # ========================================================================

    async def cleanup(self, days: int = DEFAULT_RETENTION_DAYS) -> int:
        """
        Delete rounds (and their answers) older than the retention window.

        Returns:
            Number of rounds deleted
        """
        cutoff = int(time.time()) - days * 86400

        async with self.db.session() as session:
            old_games = select(TriviaGame.id).where(TriviaGame.started_at < cutoff)
            await session.execute(
                delete(TriviaAnswer).where(TriviaAnswer.game_id.in_(old_games))
            )
            result = await session.execute(
                delete(TriviaGame).where(TriviaGame.started_at < cutoff)
            )
            deleted = result.rowcount or 0

        if deleted:
            logger.info('Cleaned up %d trivia rounds older than %d days', deleted, days)
        return deleted
