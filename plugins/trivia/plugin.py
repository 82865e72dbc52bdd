"""
Trivia Plugin

Single-question trivia rounds about catalog items, heroes and monsters.
Anyone in the channel can answer by just typing in chat.

Commands:
    !trivia [items|heroes|monsters] - Start a round
    !score - Channel trivia leaderboard
    !stats [user] - User statistics
    !top - Most active users in the channel

NATS Subjects:
    Subscribe:
        rosey.command.trivia.start - Handle !trivia
        rosey.command.trivia.score - Handle !score
        rosey.command.trivia.stats - Handle !stats
        rosey.command.trivia.top - Handle !top
        rosey.events.message - Every chat line, checked for answers
    Publish:
        rosey.channel.<channel>.message - Win/timeout announcements
        trivia.game.started - Event when a round starts
        trivia.answer.correct - Event when a round is won
        trivia.game.expired - Event when a round times out
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from nats.aio.client import Client as NATS

from .catalog import CardCatalog
from .game import TriviaConfig, TriviaGame, TriviaRegistry
from .generator import QuestionGenerator
from .question import resolve_category
from .reporting import TriviaReports
from .storage import TriviaStorage

logger = logging.getLogger(__name__)


class TriviaPlugin:
    """
    Trivia plugin.

    Wires a TriviaRegistry to NATS: commands arrive as request/reply
    messages, chat lines arrive as events, and announcements are published
    to the channel's message subject.
    """

    # Plugin metadata
    NAMESPACE = "trivia"
    VERSION = "2.0.0"
    DESCRIPTION = "Catalog trivia with persistent scores"

    # NATS subjects - Commands
    SUBJECT_START = "rosey.command.trivia.start"
    SUBJECT_SCORE = "rosey.command.trivia.score"
    SUBJECT_STATS = "rosey.command.trivia.stats"
    SUBJECT_TOP = "rosey.command.trivia.top"
    SUBJECT_MESSAGE = "rosey.events.message"

    # NATS subjects - Events
    EVENT_GAME_STARTED = "trivia.game.started"
    EVENT_ANSWER_CORRECT = "trivia.answer.correct"
    EVENT_GAME_EXPIRED = "trivia.game.expired"

    STORAGE_UNAVAILABLE = "Trivia stats are not available right now."

    def __init__(
        self,
        nats_client: NATS,
        catalog: CardCatalog,
        storage: Optional[TriviaStorage] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize trivia plugin.

        Args:
            nats_client: Connected NATS client
            catalog: Loaded card catalog
            storage: Trivia persistence (None runs without scores)
            config: The "trivia" configuration section
        """
        self.nats = nats_client
        self.catalog = catalog
        self.storage = storage
        self.config = config or {}
        self.logger = logging.getLogger(f"{__name__}.{self.NAMESPACE}")
        self._initialized = False
        self._subscriptions: List[Any] = []

        self.emit_events = self.config.get("emit_events", True)

        self.generator = QuestionGenerator(
            catalog,
            max_attempts=self.config.get("max_attempts", QuestionGenerator.DEFAULT_MAX_ATTEMPTS),
            recent_size=self.config.get("recent_size", QuestionGenerator.DEFAULT_RECENT_SIZE),
            tag_min_items=self.config.get("tag_min_items", 1),
            tag_max_items=self.config.get("tag_max_items", 50),
        )

        defaults = TriviaConfig()
        self.registry = TriviaRegistry(
            self.generator,
            storage=storage,
            sink=self._send_to_channel,
            config=TriviaConfig(
                round_duration=self.config.get("round_duration", defaults.round_duration),
                cooldown=self.config.get("cooldown", defaults.cooldown),
                announce_timeout=self.config.get("announce_timeout", defaults.announce_timeout),
                max_answer_length=self.config.get("max_answer_length", defaults.max_answer_length),
            ),
            on_expire=self._on_expire,
        )

        self.reports: Optional[TriviaReports] = None
        if storage is not None:
            self.reports = TriviaReports(storage, self.config.get("leaderboard_size", 5))

    async def initialize(self) -> None:
        """
        Initialize plugin and subscribe to NATS subjects.
        """
        self.logger.info(f"Initializing {self.NAMESPACE} plugin v{self.VERSION}")

        handlers = [
            (self.SUBJECT_START, self._handle_start),
            (self.SUBJECT_SCORE, self._handle_score),
            (self.SUBJECT_STATS, self._handle_stats),
            (self.SUBJECT_TOP, self._handle_top),
            (self.SUBJECT_MESSAGE, self._handle_message),
        ]
        for subject, handler in handlers:
            sub = await self.nats.subscribe(subject, cb=handler)
            self._subscriptions.append(sub)

        self._initialized = True
        self.logger.info(
            f"Plugin initialized ({self.catalog!r}). Subscribed to: "
            f"{', '.join(subject for subject, _ in handlers)}"
        )

    async def shutdown(self) -> None:
        """
        Shutdown plugin and cleanup.
        """
        self.logger.info(f"Shutting down {self.NAMESPACE} plugin")

        await self.registry.shutdown()

        for sub in self._subscriptions:
            try:
                await sub.unsubscribe()
            except Exception as e:
                self.logger.warning(f"Error unsubscribing: {e}")
        self._subscriptions.clear()

        self._initialized = False
        self.logger.info("Plugin shutdown complete")

    # =========================================================================
    # NATS Command Handlers
    # =========================================================================

    async def _decode(self, msg) -> Optional[Dict[str, Any]]:
        """Parse a JSON payload, replying with an error if it is invalid."""
        try:
            data = json.loads(msg.data.decode())
            if not isinstance(data, dict):
                raise ValueError("payload is not an object")
            return data
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            self.logger.error(f"Invalid message format: {e}")
            if msg.reply:
                await self._respond(msg, {"success": False, "error": "Invalid message"})
            return None

    async def _handle_start(self, msg) -> None:
        """
        Handle !trivia [category] command.

        Expected message format:
            {
                "channel": "string",
                "user": "string",
                "args": "monsters"
            }
        """
        data = await self._decode(msg)
        if data is None:
            return

        channel = data.get("channel", "unknown")
        user = data.get("user", "unknown")
        args_str = (data.get("args") or "").strip()
        token = args_str.split()[0] if args_str else None

        message, game = await self.registry.begin(channel, resolve_category(token))

        await self._log_command(channel, user, "trivia", query=args_str or None)
        await self._reply(msg, channel, message)

        if game is not None and self.emit_events:
            await self._emit_event(self.EVENT_GAME_STARTED, {
                "channel": channel,
                "started_by": user,
                "game_id": game.game_id,
                "question_type": game.question.type.value,
                "category": game.question.category.value,
                "question": game.question.question,
            })

    async def _handle_score(self, msg) -> None:
        """Handle !score command."""
        data = await self._decode(msg)
        if data is None:
            return

        channel = data.get("channel", "unknown")
        user = data.get("user", "unknown")

        if self.reports is None:
            await self._respond(msg, {"success": False, "error": self.STORAGE_UNAVAILABLE})
            return

        try:
            message = await self.reports.leaderboard(channel)
        except Exception as e:
            self.logger.error(f"Failed to load leaderboard for {channel}: {e}")
            await self._respond(msg, {"success": False, "error": self.STORAGE_UNAVAILABLE})
            return

        await self._log_command(channel, user, "score")
        await self._reply(msg, channel, message)

    async def _handle_stats(self, msg) -> None:
        """
        Handle !stats [user] command.

        Defaults to the caller; a leading @ on the target is ignored.
        """
        data = await self._decode(msg)
        if data is None:
            return

        channel = data.get("channel", "unknown")
        user = data.get("user", "unknown")
        args_str = (data.get("args") or "").strip()
        target = args_str.split()[0].lstrip("@") if args_str else ""
        target = target or user

        if self.reports is None:
            await self._respond(msg, {"success": False, "error": self.STORAGE_UNAVAILABLE})
            return

        try:
            message = await self.reports.user_stats(target)
        except Exception as e:
            self.logger.error(f"Failed to load stats for {target}: {e}")
            await self._respond(msg, {"success": False, "error": self.STORAGE_UNAVAILABLE})
            return

        await self._log_command(channel, user, "stats", query=args_str or None)
        await self._reply(msg, channel, message)

    async def _handle_top(self, msg) -> None:
        """Handle !top command."""
        data = await self._decode(msg)
        if data is None:
            return

        channel = data.get("channel", "unknown")
        user = data.get("user", "unknown")

        if self.reports is None:
            await self._respond(msg, {"success": False, "error": self.STORAGE_UNAVAILABLE})
            return

        try:
            message = await self.reports.top_activity(channel)
        except Exception as e:
            self.logger.error(f"Failed to load activity for {channel}: {e}")
            await self._respond(msg, {"success": False, "error": self.STORAGE_UNAVAILABLE})
            return

        await self._log_command(channel, user, "top")
        await self._reply(msg, channel, message)

    async def _handle_message(self, msg) -> None:
        """
        Check a chat line against the channel's active round.

        Expected message format:
            {
                "channel": "string",
                "user": "string",
                "message": "string"
            }
        """
        try:
            data = json.loads(msg.data.decode())
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.logger.debug(f"Ignoring undecodable chat event: {e}")
            return
        if not isinstance(data, dict):
            return

        channel = data.get("channel")
        user = data.get("user")
        text = data.get("message")
        if not channel or not user or not isinstance(text, str):
            return

        if not self.registry.is_game_active(channel):
            return

        result = await self.registry.check_answer(channel, user, text)
        if result and result.correct and self.emit_events:
            await self._emit_event(self.EVENT_ANSWER_CORRECT, {
                "channel": channel,
                "user": user,
                "game_id": result.game.game_id,
                "answer": result.game.question.correct_answer,
                "answer_time_ms": result.answer_time_ms,
                "participants": len(result.game.participants),
            })

    async def _on_expire(self, game: TriviaGame) -> None:
        """Publish the expiry event for a round nobody answered."""
        if not self.emit_events:
            return
        await self._emit_event(self.EVENT_GAME_EXPIRED, {
            "channel": game.channel,
            "game_id": game.game_id,
            "answer": game.question.correct_answer,
            "participants": len(game.participants),
        })

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _log_command(
        self,
        channel: str,
        user: str,
        cmd_type: str,
        query: Optional[str] = None,
    ) -> None:
        if self.storage is None:
            return
        try:
            await self.storage.log_command(channel, user, cmd_type, query=query)
        except Exception as e:
            self.logger.error(f"Failed to log {cmd_type} command: {e}")

    async def _reply(self, msg, channel: str, message: str) -> None:
        """Answer via request/reply, or post to the channel when there is no reply subject."""
        if msg.reply:
            await self._respond(msg, {"success": True, "result": {"message": message}})
        else:
            await self._send_to_channel(channel, message)

    async def _respond(self, msg, data: Dict[str, Any]) -> None:
        """Send JSON response to NATS message."""
        if not msg.reply:
            return
        try:
            await msg.respond(json.dumps(data).encode())
        except Exception as e:
            self.logger.error(f"Error sending response: {e}")

    async def _send_to_channel(self, channel: str, message: str) -> None:
        """
        Send a message to a channel via NATS.

        This publishes to the channel's message subject for the
        router/connector to pick up and send to the actual channel.
        """
        await self.nats.publish(
            f"rosey.channel.{channel}.message",
            json.dumps({"channel": channel, "message": message}).encode(),
        )

    async def _emit_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Emit a NATS event."""
        event_data = {
            "event": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **data,
        }
        try:
            await self.nats.publish(event_type, json.dumps(event_data).encode())
        except Exception as e:
            self.logger.debug(f"Could not publish event {event_type}: {e}")
