"""
Test fixtures for trivia plugin tests.
"""

import json
import random

import pytest
from unittest.mock import AsyncMock, MagicMock

from trivia.catalog import CardCatalog
from trivia.game import TriviaConfig
from trivia.question import Question, QuestionType


def make_item(title, heroes, tags, size="Medium", enchantments=None):
    """Card cache entry for an item."""
    return {
        "Type": "Item",
        "Title": {"Text": title},
        "Size": size,
        "Heroes": heroes,
        "HiddenTags": tags,
        "DisplayTags": [],
        "Enchantments": enchantments or {},
    }


def make_monster(title, day, health):
    """Card cache entry for a combat encounter."""
    return {
        "Type": "CombatEncounter",
        "Title": {"Text": title},
        "MonsterMetadata": {"available": "Always", "day": day, "health": health,
                            "board": [], "skills": []},
    }


@pytest.fixture
def card_cache():
    """Raw card cache document."""
    return {
        "fetchedAt": "2026-01-01T00:00:00Z",
        "items": [
            make_item("Sword", ["Vanessa"], ["Weapon"], size="Small",
                      enchantments={"Fiery": {"tags": ["Burn"]}}),
            make_item("Axe", ["Dooley"], ["Weapon"], size="Large",
                      enchantments={"Heavy": {"tags": ["Slow"]}}),
            make_item("Dagger", ["Vanessa"], ["Weapon", "Crit"], size="Small"),
            make_item("Tower Shield", ["Dooley"], ["Shield"], size="Large"),
            make_item("BLU-B33TL3", ["Pygmalien"], ["Tech"]),
            make_item("Healing Salve", ["Stelle", "Common"], ["Heal"]),
        ],
        "skills": [
            {"Type": "Skill", "Title": {"Text": "Sharpen"}, "Heroes": ["Vanessa"], "HiddenTags": []},
        ],
        "monsters": [
            make_monster("BLK-SP1D3R", 3, 150),
            make_monster("Dragon", 7, 500),
        ],
    }


@pytest.fixture
def catalog(card_cache):
    """Parsed card catalog."""
    return CardCatalog.from_cache(card_cache)


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def sample_question():
    """Hero question about the Sword."""
    return Question(
        type=QuestionType.HERO,
        question="What hero uses Sword?",
        correct_answer="Vanessa",
        accepted_answers=("Vanessa",),
    )


@pytest.fixture
def mock_generator(sample_question):
    """Generator that always returns sample_question."""
    generator = MagicMock()
    generator.generate = MagicMock(return_value=sample_question)
    return generator


@pytest.fixture
def mock_storage():
    """Mock TriviaStorage."""
    storage = AsyncMock()
    storage.create_game.return_value = 1
    storage.get_leaderboard.return_value = []
    storage.get_channel_activity.return_value = []
    storage.get_user_stats.return_value = None
    return storage


@pytest.fixture
def trivia_config():
    """Fast round config for testing."""
    return TriviaConfig(round_duration=30, cooldown=60)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_nats():
    """Mock NATS client."""
    nats = AsyncMock()
    nats.subscribe = AsyncMock(side_effect=lambda *args, **kwargs: AsyncMock())
    nats.publish = AsyncMock()
    return nats


@pytest.fixture
def plugin_config():
    """Plugin configuration for tests."""
    return {
        "round_duration": 30,
        "cooldown": 60,
        "emit_events": True,
        "leaderboard_size": 5,
    }


@pytest.fixture
def make_msg():
    """Factory for mock NATS messages carrying a JSON payload."""
    def _make(data, reply="reply.subject"):
        msg = MagicMock()
        msg.data = data if isinstance(data, bytes) else json.dumps(data).encode()
        msg.reply = reply
        msg.respond = AsyncMock()
        return msg
    return _make
