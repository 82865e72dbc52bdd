"""
Card Catalog

Read-only views of the game entities trivia questions are built from.
The catalog is parsed once from the card cache document and never mutated.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Data labels that appear in hero lists but are not playable heroes
FAKE_HEROES = frozenset({"Common", "???"})

ITEM_SIZES = ("Small", "Medium", "Large")


class CatalogError(Exception):
    """Card cache document could not be read or parsed."""


@dataclass(frozen=True)
class Item:
    """
    A collectible item card.

    Attributes:
        title: Display name
        size: Small, Medium or Large (None if unknown)
        heroes: Heroes that can use the item
        tags: Hidden and display tags
        enchantments: Names of enchantments available for the item
    """

    title: str
    size: Optional[str] = None
    heroes: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    enchantments: Tuple[str, ...] = ()

    @property
    def real_heroes(self) -> Tuple[str, ...]:
        """Heroes excluding data labels like 'Common'."""
        return tuple(h for h in self.heroes if h not in FAKE_HEROES)


@dataclass(frozen=True)
class Skill:
    """A hero skill card."""

    title: str
    heroes: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Monster:
    """
    A combat encounter.

    Attributes:
        title: Display name
        day: Day the monster first appears (None if unscheduled)
        health: Max health
        skills: Skill names
        board: Item titles on the monster's board
    """

    title: str
    day: Optional[int] = None
    health: int = 0
    skills: Tuple[str, ...] = ()
    board: Tuple[str, ...] = ()


def _text(value: Any) -> str:
    """Titles come either as plain strings or as {"Text": ...} objects."""
    if isinstance(value, dict):
        value = value.get("Text", "")
    return str(value or "").strip()


def _strings(values: Optional[Iterable[Any]]) -> Tuple[str, ...]:
    return tuple(_text(v) for v in (values or ()) if _text(v))


def _dedup(records: Iterable[Any]) -> List[Any]:
    seen = set()
    unique = []
    for record in records:
        if not record.title or record.title in seen:
            continue
        seen.add(record.title)
        unique.append(record)
    return unique


def parse_item(raw: Dict[str, Any]) -> Item:
    """Build an Item from a card cache entry."""
    size = raw.get("Size")
    tags = list(_strings(raw.get("HiddenTags")))
    for tag in _strings(raw.get("DisplayTags")):
        if tag not in tags:
            tags.append(tag)
    return Item(
        title=_text(raw.get("Title")),
        size=size if size in ITEM_SIZES else None,
        heroes=_strings(raw.get("Heroes")),
        tags=tuple(tags),
        enchantments=tuple((raw.get("Enchantments") or {}).keys()),
    )


def parse_skill(raw: Dict[str, Any]) -> Skill:
    """Build a Skill from a card cache entry."""
    return Skill(
        title=_text(raw.get("Title")),
        heroes=_strings(raw.get("Heroes")),
        tags=_strings(raw.get("HiddenTags")),
    )


def parse_monster(raw: Dict[str, Any]) -> Monster:
    """Build a Monster from a card cache entry."""
    meta = raw.get("MonsterMetadata") or {}
    day = meta.get("day")
    skills = meta.get("skills") or []
    board = meta.get("board") or []
    return Monster(
        title=_text(raw.get("Title")),
        day=int(day) if day is not None else None,
        health=int(meta.get("health") or 0),
        skills=tuple(
            _text(s.get("title") if isinstance(s, dict) else s) for s in skills
        ),
        board=tuple(
            _text(b.get("title") if isinstance(b, dict) else b) for b in board
        ),
    )


class CardCatalog:
    """
    Immutable collection of items, skills and monsters.

    Derived lists (heroes, tags) are computed once at construction.
    """

    def __init__(
        self,
        items: Iterable[Item] = (),
        monsters: Iterable[Monster] = (),
        skills: Iterable[Skill] = (),
        fetched_at: Optional[str] = None,
    ):
        self._items: Tuple[Item, ...] = tuple(_dedup(items))
        self._monsters: Tuple[Monster, ...] = tuple(_dedup(monsters))
        self._skills: Tuple[Skill, ...] = tuple(_dedup(skills))
        self.fetched_at = fetched_at

        heroes = set()
        for card in (*self._items, *self._skills):
            heroes.update(h for h in card.heroes if h not in FAKE_HEROES)
        self._heroes: Tuple[str, ...] = tuple(sorted(heroes))

        tags = set()
        for item in self._items:
            tags.update(item.tags)
        self._tags: Tuple[str, ...] = tuple(sorted(tags))

    @classmethod
    def from_cache(cls, data: Dict[str, Any]) -> "CardCatalog":
        """
        Parse a card cache document.

        Args:
            data: {"items": [...], "skills": [...], "monsters": [...], "fetchedAt": ...}

        Raises:
            CatalogError: If the document is not a mapping with an items list
        """
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise CatalogError("Card cache must be an object with an 'items' list")

        try:
            catalog = cls(
                items=[parse_item(raw) for raw in data["items"]],
                monsters=[parse_monster(raw) for raw in data.get("monsters") or []],
                skills=[parse_skill(raw) for raw in data.get("skills") or []],
                fetched_at=data.get("fetchedAt"),
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise CatalogError(f"Malformed card cache entry: {e}") from e

        logger.info(
            "Loaded %d items + %d skills + %d monsters (cached %s)",
            len(catalog.items()),
            len(catalog.skills()),
            len(catalog.monsters()),
            catalog.fetched_at,
        )
        return catalog

    def items(self) -> Tuple[Item, ...]:
        return self._items

    def monsters(self) -> Tuple[Monster, ...]:
        return self._monsters

    def skills(self) -> Tuple[Skill, ...]:
        return self._skills

    def heroes(self) -> Tuple[str, ...]:
        return self._heroes

    def tags(self) -> Tuple[str, ...]:
        return self._tags

    def __repr__(self) -> str:
        return (
            f"<CardCatalog(items={len(self._items)}, "
            f"monsters={len(self._monsters)}, skills={len(self._skills)})>"
        )
