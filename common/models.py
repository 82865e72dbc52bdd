#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SQLAlchemy ORM Models for the Trivia Bot
========================================

Defines database schema using SQLAlchemy 2.0 ORM with type hints.

Models:
- User: Per-user counters (commands, trivia wins/attempts/streaks)
- CommandLog: Audit log of handled chat commands (feeds channel activity)
- TriviaGame: One row per trivia round
- TriviaAnswer: Every plausible answer attempt within a round

Usage:
    from common.models import Base, User, TriviaGame

    # Create engine
    engine = create_async_engine('sqlite+aiosqlite:///trivia.db')

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Query
    async with AsyncSession(engine) as session:
        result = await session.execute(
            select(User).where(User.username == 'alice')
        )
        user = result.scalar_one_or_none()

All timestamps are Unix epoch seconds.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# ============================================================================
# Base Class
# ============================================================================

class Base(AsyncAttrs, DeclarativeBase):
    """
    Base class for all ORM models.

    Attributes:
        AsyncAttrs: Enables async attribute loading (SQLAlchemy 2.0)
        DeclarativeBase: Base for declarative model definitions
    """
    pass


# ============================================================================
# Users
# ============================================================================

class User(Base):
    """
    Chat user with command and trivia counters.

    Usernames are stored lowercase so lookups are case-insensitive.
    """
    __tablename__ = 'users'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Lowercased chat username"
    )

    first_seen: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="First time user was referenced (Unix timestamp)"
    )

    last_seen: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Last time user was referenced (Unix timestamp)"
    )

    total_commands: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default='0',
        nullable=False,
    )

    trivia_wins: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default='0',
        nullable=False,
    )

    trivia_attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default='0',
        nullable=False,
    )

    trivia_streak: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default='0',
        nullable=False,
        comment="Consecutive wins without a wrong guess"
    )

    trivia_best_streak: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default='0',
        nullable=False,
    )

    trivia_fastest_ms: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Fastest winning answer in milliseconds"
    )

    __table_args__ = (
        CheckConstraint('trivia_wins >= 0', name='check_positive_wins'),
        CheckConstraint('trivia_attempts >= 0', name='check_positive_attempts'),
        {'comment': 'Chat users and trivia counters'}
    )

    def __repr__(self) -> str:
        return (
            f"<User(username='{self.username}', "
            f"trivia_wins={self.trivia_wins}, "
            f"total_commands={self.total_commands})>"
        )


# ============================================================================
# Command Log
# ============================================================================

class CommandLog(Base):
    """
    Audit log of handled commands.

    Primary use: Channel activity leaderboard, favourite item lookup
    """
    __tablename__ = 'commands'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('users.id'),
        nullable=False,
    )

    channel: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    cmd_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Command kind (e.g. 'trivia', 'score', 'stats')"
    )

    query: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    match_name: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True,
        comment="Catalog entity the command resolved to, if any"
    )

    created_at: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    __table_args__ = (
        Index('idx_commands_channel_user', 'channel', 'user_id'),
        Index('idx_commands_created', 'created_at'),
        {'comment': 'Handled chat commands'}
    )

    def __repr__(self) -> str:
        return (
            f"<CommandLog(id={self.id}, channel='{self.channel}', "
            f"cmd_type='{self.cmd_type}')>"
        )


# ============================================================================
# Trivia Games
# ============================================================================

class TriviaGame(Base):
    """
    One trivia round.

    winner_id and answer_time_ms stay NULL for rounds that expired.
    """
    __tablename__ = 'trivia_games'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    channel: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    question_type: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    question_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    correct_answer: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    winner_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey('users.id'),
        nullable=True,
    )

    answer_time_ms: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    participant_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default='0',
        nullable=False,
    )

    started_at: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    __table_args__ = (
        Index('idx_trivia_channel_winner', 'channel', 'winner_id'),
        Index('idx_trivia_started', 'started_at'),
        {'comment': 'Trivia rounds'}
    )

    def __repr__(self) -> str:
        return (
            f"<TriviaGame(id={self.id}, channel='{self.channel}', "
            f"question_type={self.question_type}, winner_id={self.winner_id})>"
        )


# ============================================================================
# Trivia Answers
# ============================================================================

class TriviaAnswer(Base):
    """Every plausible answer attempt within a round."""
    __tablename__ = 'trivia_answers'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    game_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('trivia_games.id'),
        nullable=False,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('users.id'),
        nullable=False,
    )

    answer_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    is_correct: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default='0',
        nullable=False,
    )

    answer_time_ms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    __table_args__ = (
        Index('idx_trivia_answers_game', 'game_id'),
        {'comment': 'Trivia answer attempts'}
    )

    def __repr__(self) -> str:
        return (
            f"<TriviaAnswer(game_id={self.game_id}, user_id={self.user_id}, "
            f"is_correct={self.is_correct})>"
        )
