"""
Trivia Plugin Package

Single-question trivia rounds generated from the card catalog.

Commands:
    !trivia [items|heroes|monsters] - Start a round
    !score - Channel leaderboard
    !stats [user] - User statistics
    !top - Most active users
"""

from .catalog import CardCatalog, CatalogError, Item, Monster, Skill
from .game import AnswerResult, TriviaConfig, TriviaGame, TriviaRegistry
from .generator import QuestionGenerationError, QuestionGenerator, TriviaError
from .matching import looks_like_answer, match_answer, normalize_answer
from .question import Category, Question, QuestionType, resolve_category
from .providers import CatalogProvider, HttpCatalogProvider, LocalCatalogProvider

__all__ = [
    # Catalog
    "CardCatalog",
    "CatalogError",
    "Item",
    "Monster",
    "Skill",
    # Game module
    "AnswerResult",
    "TriviaConfig",
    "TriviaGame",
    "TriviaRegistry",
    # Questions
    "Category",
    "Question",
    "QuestionGenerationError",
    "QuestionGenerator",
    "QuestionType",
    "TriviaError",
    "resolve_category",
    # Matching
    "looks_like_answer",
    "match_answer",
    "normalize_answer",
    # Providers
    "CatalogProvider",
    "HttpCatalogProvider",
    "LocalCatalogProvider",
]
