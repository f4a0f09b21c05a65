"""Static card definitions loaded from JSON card-set files."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


@dataclass
class Expression:
    """A constant, variable or operator applied to sub-expressions."""

    kind: str = ""
    val: int = 0
    operator: str = ""
    args: list[Expression] = field(default_factory=list)
    variable: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Expression:
        data = _mapping(data, "expression")
        return cls(
            kind=str(data.get("kind", "")),
            val=int(data.get("val", 0)),
            operator=str(data.get("operator", "")),
            args=[cls.from_dict(arg) for arg in data.get("args") or []],
            variable=str(data.get("variable", "")),
        )


@dataclass
class CountRestriction:
    """Bounds on how many cards a filter selects."""

    at_least: int = 0
    at_most: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> CountRestriction:
        data = _mapping(data, "count restriction")
        return cls(at_least=int(data.get("atLeast", 0)), at_most=int(data.get("atMost", 0)))


@dataclass
class CardFilter:
    """Selects cards by pile, type or a combination of filters."""

    kind: str = ""
    args: list[CardFilter] = field(default_factory=list)
    pile: str = ""
    card_type: str = ""
    count: CountRestriction = field(default_factory=CountRestriction)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> CardFilter:
        data = _mapping(data, "card filter")
        return cls(
            kind=str(data.get("kind", "")),
            args=[cls.from_dict(arg) for arg in data.get("args") or []],
            pile=str(data.get("pile", "")),
            card_type=str(data.get("type", "")),
            count=CountRestriction.from_dict(data.get("count")),
        )


@dataclass
class CardEffect:
    """What a card does when played."""

    kind: str = ""
    args: list[CardEffect] = field(default_factory=list)
    card_filter: CardFilter = field(default_factory=CardFilter)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> CardEffect:
        data = _mapping(data, "card effect")
        return cls(
            kind=str(data.get("kind", "")),
            args=[cls.from_dict(arg) for arg in data.get("args") or []],
            card_filter=CardFilter.from_dict(data.get("cardFilter")),
        )


@dataclass(frozen=True)
class Alias:
    """Reference to a card in another (or the same) set."""

    set_name: str = ""
    id: int = 0


def _alias_from_dict(data: Any) -> Alias | None:
    data = _mapping(data, "alias")
    set_name = str(data.get("set", ""))
    if not set_name:
        return None
    card_id = int(data.get("id", 0))
    if card_id < 0:
        raise ValueError(f"alias id must not be negative, got {card_id}")
    return Alias(set_name=set_name, id=card_id)


@dataclass
class StaticCardData:
    """The fixed description of one card."""

    name: str = ""
    image_src: str = ""
    pre_condition: Expression = field(default_factory=Expression)
    effect: CardEffect = field(default_factory=CardEffect)
    alias: StaticCardData | None = field(default=None, repr=False, compare=False)


def parse_card_set(text: str) -> list[tuple[StaticCardData, Alias | None]]:
    """Parse a card-set JSON document into cards paired with their unresolved aliases."""
    raw = json.loads(text)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("a card set must be a JSON array")
    parsed = []
    for entry in raw:
        entry = _mapping(entry, "card")
        card = StaticCardData(
            name=str(entry.get("name", "")),
            image_src=str(entry.get("imageSrc", "")),
            pre_condition=Expression.from_dict(entry.get("preCondition")),
            effect=CardEffect.from_dict(entry.get("effect")),
        )
        parsed.append((card, _alias_from_dict(entry.get("alias"))))
    return parsed


class CardHandler:
    """Lookup of static card data by set name and position."""

    def __init__(self, lookup: Mapping[str, list[StaticCardData]] | None = None) -> None:
        self._lookup: dict[str, list[StaticCardData]] = dict(lookup or {})

    def get(self, set_name: str, index: int) -> StaticCardData:
        if index < 0:
            raise IndexError(f"card index must not be negative, got {index}")
        return self._lookup[set_name][index]

    def set_names(self) -> list[str]:
        return sorted(self._lookup)


def _resolve(lookup: Mapping[str, list[StaticCardData]], alias: Alias) -> StaticCardData:
    try:
        return lookup[alias.set_name][alias.id]
    except (KeyError, IndexError) as exc:
        raise ValueError(f"alias to unknown card {alias.set_name}/{alias.id}") from exc


def setup_from_directory(path: str | Path) -> CardHandler:
    """Load every card-set file in a directory; each file's stem names its set."""
    entries = sorted(Path(path).iterdir(), key=lambda entry: entry.name)

    raw_sets: dict[str, list[tuple[StaticCardData, Alias | None]]] = {}
    for entry in entries:
        set_name = entry.name.split(".")[0]
        try:
            raw_sets[set_name] = parse_card_set(entry.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("could not load card set %s: %s", entry, exc)
            raw_sets[set_name] = []

    lookup = {name: [card for card, _ in pairs] for name, pairs in raw_sets.items()}
    for pairs in raw_sets.values():
        for card, alias in pairs:
            if alias is not None:
                card.alias = _resolve(lookup, alias)

    return CardHandler(lookup)