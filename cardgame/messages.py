"""Envelopes and payloads exchanged with clients during setup and play."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from cardgame.protocol import CardMovement, MessageType, Pile

logger = logging.getLogger(__name__)


class _Decodable(Protocol):
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Any: ...


T = TypeVar("T")


def _uint(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{what} must not be negative, got {value}")
    return value


def _uint_list(values: Any, what: str) -> list[int]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise ValueError(f"{what} must be a list, got {values!r}")
    return [_uint(value, what) for value in values]


def _bool(value: Any, what: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{what} must be a boolean, got {value!r}")
    return value


@dataclass
class SetupContent:
    """A client's deck list, as static card ids."""

    deck: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"deck": list(self.deck)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SetupContent:
        return cls(deck=_uint_list(data.get("deck"), "deck"))


@dataclass
class SetupResponse:
    """Game ids of both decks, sent to a client once setup is done."""

    my_deck: list[int] = field(default_factory=list)
    opp_deck: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"myDeck": list(self.my_deck), "oppDeck": list(self.opp_deck)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SetupResponse:
        return cls(
            my_deck=_uint_list(data.get("myDeck"), "myDeck"),
            opp_deck=_uint_list(data.get("oppDeck"), "oppDeck"),
        )


@dataclass
class CoinFlipContent:
    """Tells a client whether it calls the coin flip."""

    is_choosing_flip: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"isChoosingFlip": self.is_choosing_flip}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CoinFlipContent:
        return cls(is_choosing_flip=_bool(data.get("isChoosingFlip"), "isChoosingFlip"))


@dataclass
class CoinFlipContentChoice:
    """A client's call of the coin flip."""

    heads: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"heads": self.heads}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CoinFlipContentChoice:
        return cls(heads=_bool(data.get("heads"), "heads"))


@dataclass
class StartGameContent:
    """Tells a client whether it picks the turn order."""

    is_choosing_turn_order: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"isChoosingTurnOrder": self.is_choosing_turn_order}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StartGameContent:
        return cls(
            is_choosing_turn_order=_bool(data.get("isChoosingTurnOrder"), "isChoosingTurnOrder")
        )


@dataclass
class StartGameContentChoice:
    """A client's choice to go first or second."""

    first: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"first": self.first}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StartGameContentChoice:
        return cls(first=_bool(data.get("first"), "first"))


@dataclass
class Message(Generic[T]):
    """An envelope carrying typed content, its message type and a timestamp."""

    content: T
    message_type: MessageType = MessageType.SETUP
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        to_dict = getattr(self.content, "to_dict", None)
        if to_dict is None:
            raise TypeError(f"cannot serialise content of type {type(self.content).__name__}")
        return {
            "content": to_dict(),
            "type": int(self.message_type),
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str | bytes, content_type: type[_Decodable]) -> Message[Any]:
        """Decode a JSON message whose content is built by ``content_type.from_dict``."""
        data = json.loads(text)
        if not isinstance(data, Mapping):
            raise ValueError("a message must be a JSON object")
        content = data.get("content")
        if content is None:
            content = {}
        if not isinstance(content, Mapping):
            raise ValueError("message content must be a JSON object")
        timestamp_value = data.get("timestamp", "")
        if timestamp_value is None:
            timestamp_value = ""
        if not isinstance(timestamp_value, str):
            raise ValueError("message timestamp must be a string")
        return cls(
            content=content_type.from_dict(content),
            message_type=MessageType(_uint(data.get("type", 0), "type")),
            timestamp=timestamp_value,
        )

    def __str__(self) -> str:
        return f"[Content: {self.content}, Type: {int(self.message_type)}, Time: {self.timestamp}]\n"


def timestamp() -> str:
    """Current local time as YYYYMMDDhhmmss."""
    return time.strftime("%Y%m%d%H%M%S")


_OPPONENT_PILES = {
    Pile.HAND: Pile.OPP_HAND,
    Pile.RESERVE: Pile.OPP_RESERVE,
    Pile.SPECIAL: Pile.OPP_SPECIALS,
    Pile.BATTLEFIELD: Pile.OPP_BATTLEFIELD,
    Pile.DISCARD: Pile.OPP_DISCARD,
    Pile.DECK: Pile.OPP_DECK,
}


def to_opp(pile: Pile) -> Pile:
    """Return the opponent's counterpart of ``pile``, or ``pile`` itself if it has none."""
    opposite = _OPPONENT_PILES.get(pile)
    if opposite is None:
        logger.warning("Not sure what opponent's version of this pile is: %s", pile)
        return pile
    return opposite


def merge_moves(
    this_player_moves: Iterable[CardMovement], opp_player_moves: Iterable[CardMovement]
) -> list[CardMovement]:
    """Combine a player's moves with the opponent's, seen from the player's side."""
    merged = list(this_player_moves)
    merged.extend(
        CardMovement(
            game_id=move.game_id,
            card_id=move.card_id,
            from_pile=to_opp(move.from_pile),
            to_pile=to_opp(move.to_pile),
        )
        for move in opp_player_moves
    )
    return merged