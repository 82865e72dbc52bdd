"""
Trivia Question Models

Data models for generated trivia questions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .matching import match_answer, normalize_answer


class QuestionType(Enum):
    """Question variant. Values are stored in the trivia_games table."""

    HERO = 1
    MONSTER_DAY = 2
    TAG = 3
    HERO_COUNT = 4
    SIZE = 5
    ENCHANTMENT = 6
    MONSTER_HP = 7


class Category(Enum):
    """Question group a player can ask for."""

    ITEMS = "items"
    HEROES = "heroes"
    MONSTERS = "monsters"


CATEGORY_TYPES: Dict[Category, Tuple[QuestionType, ...]] = {
    Category.ITEMS: (QuestionType.TAG, QuestionType.SIZE, QuestionType.ENCHANTMENT),
    Category.HEROES: (QuestionType.HERO, QuestionType.HERO_COUNT),
    Category.MONSTERS: (QuestionType.MONSTER_DAY, QuestionType.MONSTER_HP),
}

CATEGORY_ALIASES: Dict[str, Category] = {
    "items": Category.ITEMS,
    "item": Category.ITEMS,
    "heroes": Category.HEROES,
    "hero": Category.HEROES,
    "monsters": Category.MONSTERS,
    "monster": Category.MONSTERS,
    "mobs": Category.MONSTERS,
    "mob": Category.MONSTERS,
}

SIZE_ABBREVIATIONS: Dict[str, str] = {
    "small": "s",
    "medium": "m",
    "large": "l",
}


def resolve_category(token: Optional[str]) -> Optional[Category]:
    """
    Map a free-text command argument to a category.

    Returns:
        Category, or None for empty/unknown tokens
    """
    if not token:
        return None
    return CATEGORY_ALIASES.get(token.strip().lower())


@dataclass(frozen=True)
class Question:
    """
    A generated trivia question.

    Attributes:
        type: Question variant
        question: Prompt shown in chat
        correct_answer: Canonical answer revealed to players
        accepted_answers: Normalized strings that count as correct;
            the first entry is the primary answer
    """

    type: QuestionType
    question: str
    correct_answer: str
    accepted_answers: Tuple[str, ...]

    def __post_init__(self) -> None:
        accepted = tuple(
            a for a in dict.fromkeys(normalize_answer(a) for a in self.accepted_answers) if a
        )
        if not accepted:
            raise ValueError(f"Question has no accepted answers: {self.question!r}")
        object.__setattr__(self, "accepted_answers", accepted)

    @property
    def primary_answer(self) -> str:
        """First accepted answer."""
        return self.accepted_answers[0]

    @property
    def category(self) -> Category:
        """Category group this question belongs to."""
        for category, types in CATEGORY_TYPES.items():
            if self.type in types:
                return category
        raise ValueError(f"Question type without category: {self.type}")

    def check_answer(self, answer: str) -> bool:
        """Check a guess against the accepted answers."""
        return match_answer(answer, self.accepted_answers)

    def format_for_display(self, round_duration: float) -> str:
        """Format question for chat display."""
        return f"Trivia! {self.question} ({int(round_duration)}s to answer)"

    def format_answer_reveal(self) -> str:
        """Format the correct answer reveal."""
        return f"The answer was: {self.correct_answer}"
