"""Cards in play, piles of cards and the players holding them."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from cardgame.protocol import CardMovement, Pile


@dataclass(frozen=True)
class Card:
    """A card instance: its static id and its unique id within a game."""

    id: int
    game_id: int

    def __str__(self) -> str:
        return f"[ID: {self.id}, GameID: {self.game_id}]"


@dataclass
class CardGroup:
    """An ordered pile of cards; the end of the list is the top."""

    pile: Pile
    cards: list[Card] = field(default_factory=list)

    def shuffle(self, rng: random.Random | None = None) -> None:
        (rng or random).shuffle(self.cards)

    def find(self, game_id: int) -> Card | None:
        return next((card for card in self.cards if card.game_id == game_id), None)

    def move_from_top_to(self, to: CardGroup, number_of_cards: int) -> list[CardMovement]:
        """Move cards from the top of this group onto ``to``.

        When fewer cards are present than requested, all are moved and the
        movements are listed bottom first; otherwise they are listed top first.
        """
        if number_of_cards < 0:
            raise ValueError(f"cannot move a negative number of cards: {number_of_cards}")

        if len(self.cards) < number_of_cards:
            moved = list(self.cards)
            listed = moved
        else:
            moved = self.cards[len(self.cards) - number_of_cards:]
            listed = list(reversed(moved))

        movements = [
            CardMovement(game_id=card.game_id, card_id=card.id, from_pile=self.pile, to_pile=to.pile)
            for card in listed
        ]
        del self.cards[len(self.cards) - len(moved):]
        to.cards.extend(moved)
        return movements

    def __str__(self) -> str:
        return "".join(f"{card}\n" for card in self.cards)


@dataclass
class Player:
    """A player's deck and hand."""

    deck: CardGroup = field(default_factory=lambda: CardGroup(Pile.DECK))
    hand: CardGroup = field(default_factory=lambda: CardGroup(Pile.HAND))

    def __str__(self) -> str:
        return f"deck: {self.deck}\nhand: {self.hand}\n"