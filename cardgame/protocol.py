"""Enumerations and records exchanged with game clients."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class Pile(IntEnum):
    """Places a card can be in, as numbered by the client."""

    TEMPORARY = 0
    HAND = 1
    RESERVE = 2
    SPECIAL = 3
    BATTLEFIELD = 4
    DISCARD = 5
    DECK = 6
    OPP_HAND = 7
    OPP_RESERVE = 8
    OPP_SPECIALS = 9
    OPP_BATTLEFIELD = 10
    OPP_DISCARD = 11
    OPP_DECK = 12
    BEING_PLAYED = 13


class MessageType(IntEnum):
    """Kinds of message sent over a game connection."""

    SETUP = 0
    HEADS_OR_TAILS = 1
    COIN_CHOICE = 2
    FIRST_OR_SECOND = 3
    FIRST_OR_SECOND_CHOICE = 4
    GAMEPLAY = 5


class ActionType(IntEnum):
    """Kinds of action a player can take during play."""

    END_TURN = 0
    SELECT_CARD = 1
    FINISH_SELECTION = 2


class Phase(IntEnum):
    """Phase of the game as seen by one player."""

    MY_TURN = 0
    OPPONENTS_TURN = 1
    SELECTING_CARDS = 2
    SELECTING_TEMPORARY_CARDS = 3


@dataclass(frozen=True)
class CardMovement:
    """A single card moving from one pile to another."""

    game_id: int
    card_id: int
    from_pile: Pile
    to_pile: Pile

    def to_dict(self) -> dict[str, Any]:
        return {
            "gameId": self.game_id,
            "cardId": self.card_id,
            "from": int(self.from_pile),
            "to": int(self.to_pile),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CardMovement:
        return cls(
            game_id=int(data.get("gameId", 0)),
            card_id=int(data.get("cardId", 0)),
            from_pile=Pile(data.get("from", 0)),
            to_pile=Pile(data.get("to", 0)),
        )


@dataclass
class UpdateInfo:
    """The state change a client must apply after an action."""

    movements: list[CardMovement] = field(default_factory=list)
    phase: Phase = Phase.MY_TURN
    pile: Pile = Pile.TEMPORARY
    open_view_cards: list[int] = field(default_factory=list)
    selectable_cards: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "movements": [movement.to_dict() for movement in self.movements],
            "phase": int(self.phase),
            "pile": int(self.pile),
            "openViewCards": list(self.open_view_cards),
            "selectableCards": list(self.selectable_cards),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UpdateInfo:
        return cls(
            movements=[CardMovement.from_dict(m) for m in data.get("movements") or []],
            phase=Phase(data.get("phase", 0)),
            pile=Pile(data.get("pile", 0)),
            open_view_cards=[int(c) for c in data.get("openViewCards") or []],
            selectable_cards=[int(c) for c in data.get("selectableCards") or []],
        )