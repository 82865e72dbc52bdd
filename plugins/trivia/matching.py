"""
Trivia Answer Matching

Pure helpers for deciding whether a chat line is a trivia guess and
whether a guess matches one of the accepted answers.
"""

import re
from typing import Iterable, Optional

COMMAND_PREFIX = "!"

# Minimum candidate lengths for looser matching
PREFIX_MATCH_MIN = 5
SUBSTRING_MATCH_MIN = 8

# Guesses this short are only plausible when short answers exist
SHORT_TEXT_MAX = 2

DEFAULT_MAX_ANSWER_LENGTH = 50

_URL_RE = re.compile(r"https?://", re.IGNORECASE)
_TRAILING_PUNCT_RE = re.compile(r"[^\w\s-]+$")
_DIGITS_RE = re.compile(r"^\d+$")


def normalize_answer(text: str) -> str:
    """
    Normalize a raw chat line for comparison.

    Trims whitespace, strips trailing punctuation and lowercases.

    Examples:
        "Tower Shield!!" -> "tower shield"
        "  Day 3? " -> "day 3"
    """
    cleaned = _TRAILING_PUNCT_RE.sub("", text.strip())
    return cleaned.strip().lower()


def match_answer(candidate: str, accepted_answers: Iterable[str]) -> bool:
    """
    Check a guess against the accepted answers.

    Matching is tiered by candidate length so short guesses must be exact
    while longer ones tolerate partial stylized names:
        - exact, after normalize_answer on both sides
        - prefix of an accepted answer, 5+ characters
        - substring of an accepted answer, 8+ characters

    Args:
        candidate: The guess (normalized or raw)
        accepted_answers: Accepted answer strings

    Returns:
        True if any accepted answer matches
    """
    cleaned = normalize_answer(candidate)
    if not cleaned:
        return False

    answers = [normalize_answer(a) for a in accepted_answers]

    if any(cleaned == a for a in answers):
        return True
    if len(cleaned) >= PREFIX_MATCH_MIN and any(a.startswith(cleaned) for a in answers):
        return True
    if len(cleaned) >= SUBSTRING_MATCH_MIN and any(cleaned in a for a in answers):
        return True
    return False


def looks_like_answer(
    text: str,
    accepted_answers: Iterable[str],
    max_length: Optional[int] = DEFAULT_MAX_ANSWER_LENGTH,
) -> bool:
    """
    Filter obvious chat noise before it counts as a trivia attempt.

    Called on the trimmed raw line, before punctuation stripping.

    Args:
        text: Chat line
        accepted_answers: Accepted answers of the active game
        max_length: Longer lines are treated as chat (None disables)

    Returns:
        False for commands, links, empty or implausibly short/long lines
    """
    text = text.strip()
    if not text:
        return False
    if text.startswith(COMMAND_PREFIX):
        return False
    if _URL_RE.search(text):
        return False
    if max_length is not None and len(text) > max_length:
        return False

    answers = list(accepted_answers)

    # Day, count and HP questions take bare numbers
    if any(_DIGITS_RE.match(a) for a in answers) and any(ch.isdigit() for ch in text):
        return True

    if len(text) <= SHORT_TEXT_MAX and not any(len(a) <= SHORT_TEXT_MAX for a in answers):
        return False

    return True
