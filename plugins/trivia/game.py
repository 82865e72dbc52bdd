"""
Trivia Game Registry

Tracks one single-question round per channel, its expiry timer and the
cooldown that follows it. Answers are judged against the active question
and results are persisted through an optional storage backend.
"""

import asyncio
import logging
import math
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Set, Tuple, Union

from .generator import QuestionGenerationError, QuestionGenerator
from .matching import DEFAULT_MAX_ANSWER_LENGTH, looks_like_answer, normalize_answer
from .question import Category, Question, resolve_category

logger = logging.getLogger(__name__)


# Callables that may return a coroutine
Sink = Callable[[str, str], Union[None, Awaitable[None]]]
ExpireCallback = Callable[["TriviaGame"], Union[None, Awaitable[None]]]


@dataclass
class TriviaConfig:
    """
    Configuration for trivia rounds.

    Attributes:
        round_duration: Seconds players have to answer
        cooldown: Seconds after a round ends before another can start
        announce_timeout: Write "Time's up!" to the sink on expiry
        max_answer_length: Longest message considered an answer
    """

    round_duration: float = 30
    cooldown: float = 60
    announce_timeout: bool = False
    max_answer_length: int = DEFAULT_MAX_ANSWER_LENGTH


@dataclass
class TriviaGame:
    """
    A live round in one channel.

    Attributes:
        channel: Channel the round runs in
        question: The question being asked
        started_at: Clock reading when the round started
        game_id: Storage row id (None if persistence failed)
        participants: Users who made a plausible attempt
    """

    channel: str
    question: Question
    started_at: float
    game_id: Optional[int] = None
    participants: Set[str] = field(default_factory=set)
    timer: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    def elapsed(self, now: float) -> float:
        return max(0.0, now - self.started_at)

    def remaining(self, now: float, duration: float) -> float:
        return max(0.0, duration - self.elapsed(now))

    def cancel_timer(self) -> None:
        """Cancel the expiry timer. Safe to call more than once."""
        if self.timer and not self.timer.done():
            self.timer.cancel()


@dataclass
class AnswerResult:
    """
    Outcome of a plausible answer attempt.

    Attributes:
        username: Who answered
        answer: Normalized answer text
        correct: Whether it matched
        answer_time_ms: Milliseconds since the round started
        game: The round that was answered
        message: Win announcement (only for correct answers)
    """

    username: str
    answer: str
    correct: bool
    answer_time_ms: int
    game: TriviaGame
    message: Optional[str] = None


@dataclass
class _ChannelLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class TriviaRegistry:
    """
    Per-channel trivia state.

    Each channel moves Idle -> Active -> (Won | Expired) -> Idle, with a
    cooldown after every round. Operations on one channel are serialized
    with a per-channel lock since chat messages arrive as concurrent tasks.

    The storage backend is optional; when present, its failures are logged
    and never interrupt a round.
    """

    def __init__(
        self,
        generator: QuestionGenerator,
        storage: Optional[Any] = None,
        sink: Optional[Sink] = None,
        config: Optional[TriviaConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        on_expire: Optional[ExpireCallback] = None,
    ):
        """
        Initialize the registry.

        Args:
            generator: Question source
            storage: TriviaStorage (or compatible) for persistence
            sink: Default output for win/timeout announcements
            config: Round settings
            clock: Monotonic time source in seconds
            on_expire: Called with the game whenever a round expires
        """
        self.generator = generator
        self.storage = storage
        self.sink = sink
        self.config = config or TriviaConfig()
        self.clock = clock
        self.on_expire = on_expire

        self._games: Dict[str, TriviaGame] = {}
        self._cooldown_until: Dict[str, float] = {}
        self._locks: Dict[str, _ChannelLock] = {}

        self.logger = logging.getLogger(f"{__name__}.TriviaRegistry")

    @asynccontextmanager
    async def _locked(self, channel: str) -> AsyncIterator[None]:
        """
        Hold the channel lock.

        The entry is dropped once nobody holds or waits for it and the
        channel has no live round, so idle channels keep no lock.
        """
        entry = self._locks.get(channel)
        if entry is None:
            entry = self._locks[channel] = _ChannelLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if (
                entry.users == 0
                and channel not in self._games
                and self._locks.get(channel) is entry
            ):
                del self._locks[channel]

    # =========================================================================
    # Queries
    # =========================================================================

    def is_game_active(self, channel: str) -> bool:
        """Whether the channel has a live round."""
        return channel in self._games

    def get_game(self, channel: str) -> Optional[TriviaGame]:
        """Live round for the channel, if any."""
        return self._games.get(channel)

    def cooldown_remaining(self, channel: str) -> float:
        """Seconds until a new round may start in the channel."""
        until = self._cooldown_until.get(channel)
        if until is None:
            return 0.0
        return max(0.0, until - self.clock())

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(
        self, channel: str, category: Union[Category, str, None] = None
    ) -> str:
        """
        Start a round in the channel.

        Args:
            channel: Channel to start in
            category: Optional category group or free-text token
                (unknown tokens allow any question type)

        Returns:
            Message to show the requester
        """
        message, _ = await self.begin(channel, category)
        return message

    async def begin(
        self, channel: str, category: Union[Category, str, None] = None
    ) -> Tuple[str, Optional[TriviaGame]]:
        """
        Start a round, also returning the game if this call created it.

        Returns:
            (message, game) where game is None when no round was started
        """
        if isinstance(category, str):
            category = resolve_category(category)

        async with self._locked(channel):
            now = self.clock()

            game = self._games.get(channel)
            if game is not None:
                left = math.ceil(game.remaining(now, self.config.round_duration))
                return f"trivia already active ({left}s left): {game.question.question}", None

            cooldown_left = self.cooldown_remaining(channel)
            if cooldown_left > 0:
                return f"trivia on cooldown, {math.ceil(cooldown_left)}s remaining", None

            try:
                question = self.generator.generate(category)
            except QuestionGenerationError as e:
                self.logger.warning(f"Question generation failed in {channel}: {e}")
                return "couldn't generate a question, try again", None

            game_id = await self._store(
                "create_game",
                channel,
                question.type.value,
                question.question,
                question.correct_answer,
            )

            game = TriviaGame(
                channel=channel,
                question=question,
                started_at=now,
                game_id=game_id,
            )
            game.timer = asyncio.create_task(self._expire_after(game))
            self._games[channel] = game

            self.logger.info(
                f"Trivia started in {channel} (game {game_id}, "
                f"{question.type.name}): {question.question}"
            )
            return question.format_for_display(self.config.round_duration), game

    async def check_answer(
        self,
        channel: str,
        username: str,
        text: str,
        sink: Optional[Sink] = None,
    ) -> Optional[AnswerResult]:
        """
        Judge a chat message against the channel's live round.

        Messages that do not look like answers are ignored without
        counting as attempts.

        Args:
            channel: Channel the message was sent in
            username: Sender
            text: Raw message text
            sink: Output for the win line (defaults to the registry sink)

        Returns:
            AnswerResult for plausible attempts, None otherwise
        """
        if channel not in self._games:
            return None

        async with self._locked(channel):
            game = self._games.get(channel)
            if game is None:
                return None

            trimmed = text.strip()
            accepted = game.question.accepted_answers
            if not looks_like_answer(trimmed, accepted, self.config.max_answer_length):
                self.logger.debug(f"Ignoring non-answer from {username} in {channel}")
                return None

            cleaned = normalize_answer(trimmed)
            if not cleaned:
                return None

            game.participants.add(username)
            answer_time_ms = int(game.elapsed(self.clock()) * 1000)
            correct = game.question.check_answer(cleaned)

            await self._store("record_attempt", game.game_id, username)
            await self._store(
                "record_answer", game.game_id, username, trimmed, correct, answer_time_ms
            )

            result = AnswerResult(
                username=username,
                answer=cleaned,
                correct=correct,
                answer_time_ms=answer_time_ms,
                game=game,
            )

            if not correct:
                await self._store("reset_streak", username)
                return result

            self._finish(game)
            await self._store(
                "record_win",
                game.game_id,
                username,
                answer_time_ms,
                len(game.participants),
            )

            result.message = (
                f"{username} got it in {answer_time_ms / 1000:.1f}s! "
                f"Answer: {game.question.correct_answer}"
            )
            self.logger.info(
                f"Trivia won in {channel} by {username} after {answer_time_ms}ms "
                f"({len(game.participants)} participants)"
            )

        await self._say(sink or self.sink, channel, result.message)
        return result

    def _finish(self, game: TriviaGame) -> None:
        """Remove a round and start the channel cooldown."""
        game.cancel_timer()
        if self._games.get(game.channel) is game:
            del self._games[game.channel]
        self._cooldown_until[game.channel] = self.clock() + self.config.cooldown

    async def _expire_after(self, game: TriviaGame) -> None:
        await asyncio.sleep(self.config.round_duration)
        await self._expire(game)

    async def _expire(self, game: TriviaGame) -> None:
        async with self._locked(game.channel):
            if self._games.get(game.channel) is not game:
                return
            # Detach first so _finish does not cancel the running timer task
            game.timer = None
            self._finish(game)

        self.logger.info(
            f"Trivia expired in {game.channel} (game {game.game_id}), "
            f"answer was {game.question.correct_answer}"
        )

        if self.config.announce_timeout:
            await self._say(
                self.sink, game.channel, f"Time's up! {game.question.format_answer_reveal()}"
            )

        if self.on_expire:
            try:
                result = self.on_expire(game)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                self.logger.error(f"Expiry callback failed for {game.channel}: {e}")

    def reset(self) -> None:
        """Cancel all timers and forget every round and cooldown."""
        for game in self._games.values():
            game.cancel_timer()
        self._games.clear()
        self._cooldown_until.clear()
        self._locks.clear()

    async def shutdown(self) -> None:
        """Cancel all timers and wait for them to finish."""
        timers = [g.timer for g in self._games.values() if g.timer and not g.timer.done()]
        self.reset()
        for timer in timers:
            try:
                await timer
            except asyncio.CancelledError:
                pass

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _store(self, method: str, *args: Any) -> Any:
        """Call a storage method, logging and swallowing failures."""
        if self.storage is None:
            return None
        try:
            return await getattr(self.storage, method)(*args)
        except Exception as e:
            self.logger.error(f"Trivia storage {method} failed: {e}")
            return None

    async def _say(self, sink: Optional[Sink], channel: str, text: str) -> None:
        if sink is None:
            return
        try:
            result = sink(channel, text)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            self.logger.error(f"Failed to send trivia message to {channel}: {e}")
