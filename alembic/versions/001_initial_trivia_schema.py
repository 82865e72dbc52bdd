"""Initial trivia schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

Creates users, commands, trivia_games and trivia_answers.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('first_seen', sa.Integer(), nullable=False),
        sa.Column('last_seen', sa.Integer(), nullable=False),
        sa.Column('total_commands', sa.Integer(), server_default='0', nullable=False),
        sa.Column('trivia_wins', sa.Integer(), server_default='0', nullable=False),
        sa.Column('trivia_attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('trivia_streak', sa.Integer(), server_default='0', nullable=False),
        sa.Column('trivia_best_streak', sa.Integer(), server_default='0', nullable=False),
        sa.Column('trivia_fastest_ms', sa.Integer(), nullable=True),
        sa.CheckConstraint('trivia_wins >= 0', name='check_positive_wins'),
        sa.CheckConstraint('trivia_attempts >= 0', name='check_positive_attempts'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        comment='Chat users and trivia counters'
    )

    op.create_table('commands',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('channel', sa.String(length=100), nullable=False),
        sa.Column('cmd_type', sa.String(length=20), nullable=False),
        sa.Column('query', sa.Text(), nullable=True),
        sa.Column('match_name', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        comment='Handled chat commands'
    )
    op.create_index('idx_commands_channel_user', 'commands', ['channel', 'user_id'], unique=False)
    op.create_index('idx_commands_created', 'commands', ['created_at'], unique=False)

    op.create_table('trivia_games',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('channel', sa.String(length=100), nullable=False),
        sa.Column('question_type', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('winner_id', sa.Integer(), nullable=True),
        sa.Column('answer_time_ms', sa.Integer(), nullable=True),
        sa.Column('participant_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('started_at', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['winner_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        comment='Trivia rounds'
    )
    op.create_index('idx_trivia_channel_winner', 'trivia_games', ['channel', 'winner_id'], unique=False)
    op.create_index('idx_trivia_started', 'trivia_games', ['started_at'], unique=False)

    op.create_table('trivia_answers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('answer_text', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('answer_time_ms', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['game_id'], ['trivia_games.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        comment='Trivia answer attempts'
    )
    op.create_index('idx_trivia_answers_game', 'trivia_answers', ['game_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_trivia_answers_game', table_name='trivia_answers')
    op.drop_table('trivia_answers')
    op.drop_index('idx_trivia_started', table_name='trivia_games')
    op.drop_index('idx_trivia_channel_winner', table_name='trivia_games')
    op.drop_table('trivia_games')
    op.drop_index('idx_commands_created', table_name='commands')
    op.drop_index('idx_commands_channel_user', table_name='commands')
    op.drop_table('commands')
    op.drop_table('users')
