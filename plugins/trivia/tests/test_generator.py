"""
Tests for the trivia question generator.
"""

import random
import re
from collections import Counter

import pytest

from trivia.catalog import CardCatalog, Item, Monster
from trivia.generator import QuestionGenerationError, QuestionGenerator, TriviaError
from trivia.matching import match_answer
from trivia.question import CATEGORY_TYPES, Category, QuestionType


@pytest.fixture
def generator(catalog, rng):
    return QuestionGenerator(catalog, rng=rng)


class TestGenerate:
    """Test QuestionGenerator.generate."""

    def test_variety(self, generator):
        """Unconstrained generation covers many question types."""
        types = {generator.generate().type for _ in range(100)}
        assert len(types) >= 5

    @pytest.mark.parametrize("category", list(Category))
    def test_category_constraint(self, generator, category):
        for _ in range(30):
            assert generator.generate(category).type in CATEGORY_TYPES[category]

    def test_category_string(self, generator):
        question = generator.generate("monsters")
        assert question.type in (QuestionType.MONSTER_DAY, QuestionType.MONSTER_HP)

    def test_category_string_any_case(self, generator):
        for _ in range(10):
            assert generator.generate(" Items ").type in CATEGORY_TYPES[Category.ITEMS]

    def test_unknown_category_string_means_any(self, generator):
        """Unrecognised tokens fall back to unconstrained generation."""
        types = {generator.generate("spells").type for _ in range(60)}
        assert len(types) > 3

    def test_never_empty_accepted_answers(self, generator):
        for _ in range(50):
            assert generator.generate().accepted_answers

    def test_recent_window_limits_repeats(self, generator):
        """No type appears more than twice among the last ten questions."""
        for _ in range(60):
            generator.generate()
            assert max(Counter(generator.recent_types).values()) <= 2

    def test_reset(self, generator):
        generator.generate()
        generator.reset()
        assert generator.recent_types == []

    def test_invalid_max_attempts(self, catalog):
        with pytest.raises(ValueError):
            QuestionGenerator(catalog, max_attempts=0)


class TestGenerationFailure:
    """Test behaviour when the catalog cannot support a question."""

    def test_empty_catalog(self):
        generator = QuestionGenerator(CardCatalog(), rng=random.Random(1))
        with pytest.raises(QuestionGenerationError):
            generator.generate()

    def test_error_hierarchy(self):
        assert issubclass(QuestionGenerationError, TriviaError)

    def test_category_without_data(self):
        """A monsters-only catalog cannot ask about items."""
        catalog = CardCatalog(monsters=[Monster(title="Dragon", day=7, health=500)])
        generator = QuestionGenerator(catalog, rng=random.Random(1))

        with pytest.raises(QuestionGenerationError):
            generator.generate(Category.ITEMS)

        assert generator.generate().type in CATEGORY_TYPES[Category.MONSTERS]

    def test_failed_generation_not_recorded(self):
        generator = QuestionGenerator(CardCatalog(), rng=random.Random(1))
        with pytest.raises(QuestionGenerationError):
            generator.generate()
        assert generator.recent_types == []


class TestBuilders:
    """Test individual question shapes."""

    def test_hero(self, generator):
        question = generator._hero_question()
        assert question.type == QuestionType.HERO
        match = re.fullmatch(r"What hero uses (.+)\?", question.question)
        assert match
        assert question.correct_answer.lower() in question.accepted_answers
        assert "common" not in question.accepted_answers

    def test_monster_day(self, generator):
        question = generator._monster_day_question()
        day = question.correct_answer
        assert question.question in (
            "What day does BLK-SP1D3R appear?",
            "What day does Dragon appear?",
        )
        assert day in ("3", "7")
        assert question.accepted_answers == (day, f"day {day}")

    def test_tag(self, generator):
        question = generator._tag_question()
        match = re.fullmatch(r'Name an item with the "(.+)" tag', question.question)
        assert match
        tag = match.group(1)
        tagged = [i.title.lower() for i in generator.catalog.items() if tag in i.tags]
        assert sorted(question.accepted_answers) == sorted(tagged)
        assert question.correct_answer.lower() in question.accepted_answers

    def test_tag_fairness_upper_bound(self, catalog):
        generator = QuestionGenerator(catalog, rng=random.Random(5), tag_max_items=2)
        for _ in range(20):
            assert "Weapon" not in generator._tag_question().question

    def test_tag_fairness_lower_bound(self, catalog):
        generator = QuestionGenerator(catalog, rng=random.Random(5), tag_min_items=2)
        assert generator._tag_question().question == 'Name an item with the "Weapon" tag'

    def test_tag_without_qualifying_tags(self, catalog):
        generator = QuestionGenerator(catalog, tag_min_items=10)
        assert generator._tag_question() is None

    def test_hero_count(self, generator):
        expected = {"Vanessa": "2", "Dooley": "2", "Pygmalien": "1", "Stelle": "1"}
        question = generator._hero_count_question()
        hero = re.fullmatch(r"How many items does (.+) use\?", question.question).group(1)
        assert question.correct_answer == expected[hero]
        assert question.accepted_answers == (expected[hero],)

    def test_size(self, generator):
        abbreviations = {"small": "s", "medium": "m", "large": "l"}
        question = generator._size_question()
        assert question.question.startswith("What size is ")
        assert question.correct_answer in abbreviations
        assert question.accepted_answers == (
            question.correct_answer, abbreviations[question.correct_answer]
        )

    def test_enchantment(self, generator):
        question = generator._enchantment_question()
        assert question.question in (
            "Name an enchantment for Sword",
            "Name an enchantment for Axe",
        )
        assert question.correct_answer in ("Fiery", "Heavy")

    def test_monster_hp(self, generator):
        question = generator._monster_hp_question()
        assert re.fullmatch(r"\d+ HP", question.correct_answer)
        assert question.question.startswith("How much HP does ")
        assert match_answer(question.primary_answer, question.accepted_answers)
        assert question.primary_answer == question.correct_answer.split()[0]

    def test_builders_skip_missing_attributes(self):
        catalog = CardCatalog(monsters=[Monster(title="Ghost")])
        generator = QuestionGenerator(catalog)
        assert generator._monster_day_question() is None
        assert generator._monster_hp_question() is None
        assert generator._hero_question() is None
        assert generator._size_question() is None
        assert generator._enchantment_question() is None
        assert generator._hero_count_question() is None

    def test_size_skips_unknown_sizes(self):
        catalog = CardCatalog(items=[Item(title="Pebble", size="Tiny"), Item(title="Anvil", size="Large")])
        generator = QuestionGenerator(catalog, rng=random.Random(3))
        for _ in range(10):
            question = generator._size_question()
            assert question.question == "What size is Anvil?"
            assert question.accepted_answers == ("large", "l")

    def test_size_only_unknown_sizes(self):
        generator = QuestionGenerator(CardCatalog(items=[Item(title="Pebble", size="Tiny")]))
        assert generator._size_question() is None
