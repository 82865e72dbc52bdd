"""
Trivia Reports

Chat-line formatters for leaderboards and user stats.
"""

from datetime import datetime, timezone
from typing import Sequence

from .storage import ActivityEntry, LeaderboardEntry, TriviaStorage, UserStats


def format_leaderboard(entries: Sequence[LeaderboardEntry], limit: int = 5) -> str:
    if not entries:
        return "no trivia scores yet"
    lines = [f"{i}. {e.username} ({e.trivia_wins} wins)" for i, e in enumerate(entries, 1)]
    return f"Trivia top {limit}: {' | '.join(lines)}"


def format_activity(entries: Sequence[ActivityEntry]) -> str:
    if not entries:
        return "no activity yet"
    lines = [f"{i}. {e.username} ({e.total_commands})" for i, e in enumerate(entries, 1)]
    return f"Top users: {' | '.join(lines)}"


def format_user_stats(stats: UserStats) -> str:
    """
    One-line stats summary.

    Zero and missing counters are left out, e.g.
    "[alice] | cmds:12 | trivia:5W/10A (50%) | streak:3 | fastest:2.5s | since:2024-01-15"
    """
    parts = [f"[{stats.username}]"]
    if stats.total_commands > 0:
        parts.append(f"cmds:{stats.total_commands}")
    if stats.trivia_wins > 0:
        rate = int(stats.win_rate + 0.5)
        parts.append(f"trivia:{stats.trivia_wins}W/{stats.trivia_attempts}A ({rate}%)")
        if stats.trivia_best_streak > 0:
            parts.append(f"streak:{stats.trivia_best_streak}")
        if stats.trivia_fastest_ms:
            parts.append(f"fastest:{stats.trivia_fastest_ms / 1000:.1f}s")
    if stats.favorite_item:
        parts.append(f"fav:{stats.favorite_item}")
    since = datetime.fromtimestamp(stats.first_seen, tz=timezone.utc)
    parts.append(f"since:{since:%Y-%m-%d}")
    return " | ".join(parts)


class TriviaReports:
    """Storage-backed report lines for the chat commands."""

    def __init__(self, storage: TriviaStorage, leaderboard_size: int = 5):
        self.storage = storage
        self.leaderboard_size = leaderboard_size

    async def leaderboard(self, channel: str) -> str:
        entries = await self.storage.get_leaderboard(channel, self.leaderboard_size)
        return format_leaderboard(entries, self.leaderboard_size)

    async def top_activity(self, channel: str) -> str:
        entries = await self.storage.get_channel_activity(channel, self.leaderboard_size)
        return format_activity(entries)

    async def user_stats(self, username: str) -> str:
        stats = await self.storage.get_user_stats(username)
        if stats is None:
            return f"no stats for {username}"
        return format_user_stats(stats)
