"""Game state for a two-player match and the rules for player actions."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cardgame.cards import CardHandler
from cardgame.player import Card, Player
from cardgame.protocol import ActionType, CardMovement, Phase, Pile, UpdateInfo

logger = logging.getLogger(__name__)

OPENING_HAND_SIZE = 7
_SELECT_AFTER_PLAY_CARD_ID = 5


class ActionError(Exception):
    """Raised when a player action cannot be carried out."""


@dataclass
class Action:
    """A player's request to act on some cards."""

    action_type: ActionType
    selected_cards: list[int] = field(default_factory=list)
    from_pile: Pile = Pile.TEMPORARY

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Action:
        return cls(
            action_type=ActionType(data.get("type", 0)),
            selected_cards=[int(card) for card in data.get("selectedCards") or []],
            from_pile=Pile(data.get("from", 0)),
        )

    def __str__(self) -> str:
        selected = " ".join(str(card) for card in self.selected_cards)
        return (
            f"{{ActionType: {int(self.action_type)}, SelectedCards: [{selected}], "
            f"From: {int(self.from_pile)}}}\n"
        )


@dataclass
class Game:
    """The players of a match and the counter for in-game card ids."""

    card_handler: CardHandler | None = None
    players: list[Player] = field(default_factory=list)
    card_index: int = 0
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    def add_player(self) -> int:
        """Add an empty player and return its index."""
        self.players.append(Player())
        return len(self.players) - 1

    def setup_player(self, player_id: int, deck: list[int]) -> None:
        """Give a player a deck built from card ids, assigning fresh game ids."""
        player = self.players[player_id]
        player.deck.cards = [
            Card(id=card_id, game_id=game_id)
            for game_id, card_id in enumerate(deck, start=self.card_index)
        ]
        self.card_index += len(deck)

    def get_setup_data(self, player_id: int) -> tuple[list[int], list[int]]:
        """Return the game ids of the player's deck and of the opponent's deck."""
        if player_id not in (0, 1):
            raise IndexError(f"no such player: {player_id}")
        mine = [card.game_id for card in self.players[player_id].deck.cards]
        theirs = [card.game_id for card in self.players[1 - player_id].deck.cards]
        return mine, theirs

    def start_game(self) -> tuple[list[CardMovement], list[CardMovement]]:
        """Shuffle both decks and deal each player an opening hand."""
        first, second = self.players[0], self.players[1]
        first.deck.shuffle(self.rng)
        second.deck.shuffle(self.rng)
        first_moves = first.deck.move_from_top_to(first.hand, OPENING_HAND_SIZE)
        second_moves = second.deck.move_from_top_to(second.hand, OPENING_HAND_SIZE)
        logger.debug("dealt opening hands: %s %s", first, second)
        return first_moves, second_moves

    def process_action(self, user: int, action: Action) -> UpdateInfo:
        """Work out the update that follows from a player's action."""
        hand = self.players[user].hand

        if action.action_type is ActionType.SELECT_CARD:
            if len(action.selected_cards) != 1:
                raise ActionError("Play card was triggered with multiple cards")
            if action.from_pile is Pile.HAND:
                card = hand.find(action.selected_cards[0])
                if card is None:
                    raise ActionError("Can't find card")
                if card.id == _SELECT_AFTER_PLAY_CARD_ID:
                    return UpdateInfo(
                        movements=[CardMovement(card.game_id, card.id, Pile.HAND, Pile.DISCARD)],
                        phase=Phase.SELECTING_CARDS,
                        pile=Pile.HAND,
                        selectable_cards=[c.game_id for c in hand.cards if c.game_id != card.game_id],
                    )
                return UpdateInfo(
                    movements=[
                        CardMovement(action.selected_cards[0], card.id, Pile.HAND, Pile.DISCARD)
                    ],
                    phase=Phase.MY_TURN,
                    pile=Pile.HAND,
                    selectable_cards=[c.game_id for c in hand.cards],
                )

        elif action.action_type is ActionType.FINISH_SELECTION:
            movements = []
            for game_id in action.selected_cards:
                card = hand.find(game_id)
                if card is None:
                    raise ActionError(f"Can't find card {game_id}")
                movements.append(CardMovement(game_id, card.id, Pile.HAND, Pile.DISCARD))
            return UpdateInfo(
                movements=movements,
                phase=Phase.MY_TURN,
                pile=Pile.HAND,
                selectable_cards=[c.game_id for c in hand.cards],
            )

        raise ActionError("Not sure how to handle action")


def make_game(card_handler: CardHandler | None = None) -> Game:
    """Create a game with no players."""
    return Game(card_handler=card_handler)