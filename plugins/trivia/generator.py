"""
Trivia Question Generator

Builds questions about catalog entities. Each question type has a
builder that only considers entities carrying the attribute it asks
about, so a builder either returns a well-formed question or nothing.
"""

import logging
import random
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence, Union

from .catalog import CardCatalog
from .question import (
    CATEGORY_TYPES,
    SIZE_ABBREVIATIONS,
    Category,
    Question,
    QuestionType,
    resolve_category,
)

logger = logging.getLogger(__name__)


class TriviaError(Exception):
    """Base class for trivia plugin errors."""


class QuestionGenerationError(TriviaError):
    """No question type could be built from the catalog."""


Builder = Callable[[], Optional[Question]]


class QuestionGenerator:
    """
    Random trivia question source.

    Type selection avoids repeating a type more than twice within the last
    `recent_size` questions. Generation retries across types up to
    `max_attempts` times; a type whose builder fails is not retried within
    the same call since builders are deterministic about availability.
    """

    DEFAULT_MAX_ATTEMPTS = 20
    DEFAULT_RECENT_SIZE = 10
    MAX_RECENT_REPEATS = 2

    def __init__(
        self,
        catalog: CardCatalog,
        rng: Optional[random.Random] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        recent_size: int = DEFAULT_RECENT_SIZE,
        tag_min_items: int = 1,
        tag_max_items: Optional[int] = 50,
    ):
        """
        Args:
            catalog: Card catalog to draw entities from
            rng: Random source (seed it for deterministic tests)
            max_attempts: Upper bound on builder calls per generate()
            recent_size: How many past question types to remember
            tag_min_items: Fewest items a tag needs to be asked about
            tag_max_items: Most items a tag may have (None for no limit)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.catalog = catalog
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.tag_min_items = tag_min_items
        self.tag_max_items = tag_max_items
        self._recent: Deque[QuestionType] = deque(maxlen=recent_size)

        self._builders: Dict[QuestionType, Builder] = {
            QuestionType.HERO: self._hero_question,
            QuestionType.MONSTER_DAY: self._monster_day_question,
            QuestionType.TAG: self._tag_question,
            QuestionType.HERO_COUNT: self._hero_count_question,
            QuestionType.SIZE: self._size_question,
            QuestionType.ENCHANTMENT: self._enchantment_question,
            QuestionType.MONSTER_HP: self._monster_hp_question,
        }

    @property
    def recent_types(self) -> List[QuestionType]:
        """Question types generated most recently, oldest first."""
        return list(self._recent)

    def reset(self) -> None:
        """Forget recently generated types."""
        self._recent.clear()

    def generate(self, category: Union[Category, str, None] = None) -> Question:
        """
        Generate a question.

        Args:
            category: Restrict to a category group, or a free-text token
                such as "Monsters" (unknown tokens and None allow any type)

        Returns:
            Question

        Raises:
            QuestionGenerationError: If no allowed type can be built
        """
        if isinstance(category, str):
            category = resolve_category(category)

        remaining = list(CATEGORY_TYPES[category] if category else QuestionType)
        attempts = 0

        while remaining and attempts < self.max_attempts:
            question_type = self._pick_type(remaining)
            attempts += 1

            question = self._builders[question_type]()
            if question is not None:
                self._recent.append(question.type)
                return question

            logger.debug("No catalog data for %s questions", question_type.name)
            remaining.remove(question_type)

        raise QuestionGenerationError(
            f"Could not generate a {category.value if category else 'trivia'} "
            f"question after {attempts} attempts"
        )

    def _pick_type(self, allowed: Sequence[QuestionType]) -> QuestionType:
        """Prefer types not seen twice in the recent window."""
        fresh = [t for t in allowed if self._recent.count(t) < self.MAX_RECENT_REPEATS]
        return self.rng.choice(fresh or list(allowed))

    # =========================================================================
    # Builders
    # =========================================================================

    def _hero_question(self) -> Optional[Question]:
        items = [item for item in self.catalog.items() if item.real_heroes]
        if not items:
            return None
        item = self.rng.choice(items)
        heroes = item.real_heroes
        return Question(
            type=QuestionType.HERO,
            question=f"What hero uses {item.title}?",
            correct_answer=heroes[0],
            accepted_answers=tuple(heroes),
        )

    def _monster_day_question(self) -> Optional[Question]:
        monsters = [m for m in self.catalog.monsters() if m.day is not None]
        if not monsters:
            return None
        monster = self.rng.choice(monsters)
        day = str(monster.day)
        return Question(
            type=QuestionType.MONSTER_DAY,
            question=f"What day does {monster.title} appear?",
            correct_answer=day,
            accepted_answers=(day, f"day {day}"),
        )

    def _tag_question(self) -> Optional[Question]:
        tag_items: Dict[str, List[str]] = {}
        for item in self.catalog.items():
            for tag in item.tags:
                tag_items.setdefault(tag, []).append(item.title)

        fair = [
            (tag, titles)
            for tag, titles in sorted(tag_items.items())
            if len(titles) >= self.tag_min_items
            and (self.tag_max_items is None or len(titles) <= self.tag_max_items)
        ]
        if not fair:
            return None
        tag, titles = self.rng.choice(fair)
        return Question(
            type=QuestionType.TAG,
            question=f'Name an item with the "{tag}" tag',
            correct_answer=self.rng.choice(titles),
            accepted_answers=tuple(titles),
        )

    def _hero_count_question(self) -> Optional[Question]:
        counts = {
            hero: sum(1 for item in self.catalog.items() if hero in item.heroes)
            for hero in self.catalog.heroes()
        }
        heroes = [hero for hero, count in counts.items() if count > 0]
        if not heroes:
            return None
        hero = self.rng.choice(heroes)
        count = str(counts[hero])
        return Question(
            type=QuestionType.HERO_COUNT,
            question=f"How many items does {hero} use?",
            correct_answer=count,
            accepted_answers=(count,),
        )

    def _size_question(self) -> Optional[Question]:
        items = [
            item for item in self.catalog.items()
            if item.size and item.size.lower() in SIZE_ABBREVIATIONS
        ]
        if not items:
            return None
        item = self.rng.choice(items)
        size = item.size.lower()
        return Question(
            type=QuestionType.SIZE,
            question=f"What size is {item.title}?",
            correct_answer=size,
            accepted_answers=(size, SIZE_ABBREVIATIONS[size]),
        )

    def _enchantment_question(self) -> Optional[Question]:
        items = [item for item in self.catalog.items() if item.enchantments]
        if not items:
            return None
        item = self.rng.choice(items)
        return Question(
            type=QuestionType.ENCHANTMENT,
            question=f"Name an enchantment for {item.title}",
            correct_answer=self.rng.choice(item.enchantments),
            accepted_answers=tuple(item.enchantments),
        )

    def _monster_hp_question(self) -> Optional[Question]:
        monsters = [m for m in self.catalog.monsters() if m.health > 0]
        if not monsters:
            return None
        monster = self.rng.choice(monsters)
        return Question(
            type=QuestionType.MONSTER_HP,
            question=f"How much HP does {monster.title} have?",
            correct_answer=f"{monster.health} HP",
            accepted_answers=(str(monster.health),),
        )
