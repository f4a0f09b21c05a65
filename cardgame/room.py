"""A game room: the players and spectators of one match and the setup handshake."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

from cardgame.barrier import Barrier
from cardgame.cards import CardHandler
from cardgame.game import Action, ActionError, Game, make_game
from cardgame.messages import (
    CoinFlipContent,
    CoinFlipContentChoice,
    Message,
    SetupContent,
    SetupResponse,
    StartGameContent,
    StartGameContentChoice,
    merge_moves,
    timestamp,
)
from cardgame.protocol import CardMovement, MessageType, Phase, Pile, UpdateInfo

logger = logging.getLogger(__name__)

PLAYERS_TO_START_GAME = 2


class Connection:
    """A text-message channel to one client.

    Wraps any socket object offering ``async receive_str()`` and
    ``async send_str(text)``; receiving anything but text counts as the
    connection being closed.
    """

    def __init__(self, socket: Any) -> None:
        self._socket = socket

    async def read_message(self) -> str:
        try:
            return await self._socket.receive_str()
        except TypeError as exc:
            raise ConnectionError(f"connection closed: {exc}") from exc

    async def write_message(self, text: str) -> None:
        await self._socket.send_str(text)


@dataclass(eq=False)
class User:
    """A client connected to a room, either as a player or a spectator."""

    conn: Connection | None = None
    is_spectator: bool = False

    async def write_json(self, message: Message[Any]) -> None:
        if self.conn is None:
            raise ConnectionError("user has no connection")
        await self.conn.write_message(message.to_json())

    async def _read(self) -> str:
        if self.conn is None:
            raise ConnectionError("user has no connection")
        return await self.conn.read_message()


class CoinFlip(IntEnum):
    """The coin side the first player called."""

    UNSET = 0
    HEAD = 1
    TAIL = 2


class RoomDescription(str, Enum):
    """Progress of a room through the setup handshake."""

    FINISHED_INITIALIZATION = "Finished Initialization..."
    PARAMETERS_READ = "All players had parameters read..."
    HEADS_OR_TAILS_CHOSEN = "Heads/Tails Chosen..."
    INITIAL_STATE_TO_CLIENT = "Initial Game State Sent to Clients..."
    JUST_CREATED = "Just Created..."


class Room:
    """The connections, players and game of one numbered room."""

    def __init__(
        self,
        room_number: int,
        card_handler: CardHandler | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.room_number = room_number
        self.connections: dict[User, bool] = {}
        self.player_to_game_player_id: dict[User, int] = {}
        self.game: Game = make_game(card_handler)
        self.ready_players: list[User] = []
        self.expecting_coin_flip = CoinFlip.UNSET
        self.room_description = RoomDescription.JUST_CREATED
        self._barrier = Barrier(PLAYERS_TO_START_GAME)
        self._rng = rng or random.Random()

    def get_players_in_room(self) -> int:
        """Number of active connections that are players, not spectators."""
        return sum(
            1 for user, active in self.connections.items() if active and not user.is_spectator
        )

    def init_player(self, user: User) -> None:
        """Register ``user`` as a player of the game."""
        if len(self.ready_players) >= PLAYERS_TO_START_GAME:
            raise ValueError("too many players")
        self.player_to_game_player_id[user] = self.game.add_player()
        self.ready_players.append(user)

    def remove_from_room(self, user: User) -> None:
        """Mark ``user``'s connection as no longer active."""
        if not self.connections:
            raise LookupError("Error removing from room")
        if not user.is_spectator:
            logger.warning("player disconnect is not handled")
        self.connections[user] = False

    def init_game_data(self, user: User, deck: list[int]) -> None:
        """Give the player's deck list to the game."""
        self.game.setup_player(self.player_to_game_player_id[user], deck)

    def get_init_data(self, user: User) -> Message[SetupResponse]:
        my_deck, opp_deck = self.game.get_setup_data(self.player_to_game_player_id[user])
        return Message(
            content=SetupResponse(my_deck=my_deck, opp_deck=opp_deck),
            message_type=MessageType.SETUP,
            timestamp=timestamp(),
        )

    async def read_setup_params(self, user: User) -> Message[SetupContent] | None:
        """Read a player's setup message, then wait until every player has sent one.

        Spectators send no setup message and get ``None``.
        """
        if user.is_spectator:
            return None
        try:
            text = await user._read()
            try:
                params = Message.from_json(text, SetupContent)
            except (ValueError, TypeError) as exc:
                raise ValueError(f"error parsing JSON: {exc}") from exc
            if params.message_type is not MessageType.SETUP:
                raise ValueError(
                    f"error setting up, message type is {int(params.message_type)}"
                )
            return params
        finally:
            await self.wait(RoomDescription.PARAMETERS_READ)

    async def read_for_actions(self, conn: Connection) -> Action:
        text = await conn.read_message()
        logger.info("Message: %s", text)
        try:
            return Message.from_json(text, Action).content
        except (ValueError, TypeError) as exc:
            raise ValueError("Error Getting Game Action from Message") from exc

    async def send_update_info(self, user: User, info: UpdateInfo) -> None:
        await user.write_json(
            Message(content=info, message_type=MessageType.GAMEPLAY, timestamp=timestamp())
        )

    def process_action(self, user: User, action: Action) -> UpdateInfo:
        return self.game.process_action(self.player_to_game_player_id[user], action)

    async def spectator_loop(self, user: User) -> None:
        """Read and discard a spectator's messages until the connection ends."""
        if user.conn is None:
            return
        while True:
            try:
                await self.read_for_actions(user.conn)
            except (ConnectionError, ValueError) as exc:
                logger.info("Stopped reading from user, endcode: %s", exc)
                return

    async def ask_turn_order(self) -> bool:
        """Flip the coin, let the winner pick the turn order; True if player 1 goes first."""
        is_heads = self._rng.randrange(2) == 1
        first, second = self.ready_players[0], self.ready_players[1]
        if is_heads == (self.expecting_coin_flip is CoinFlip.HEAD):
            chooser, waiting = first, second
        else:
            chooser, waiting = second, first

        await chooser.write_json(
            Message(
                content=StartGameContent(is_choosing_turn_order=True),
                message_type=MessageType.HEADS_OR_TAILS,
                timestamp=timestamp(),
            )
        )
        await waiting.write_json(
            Message(
                content=StartGameContent(is_choosing_turn_order=False),
                message_type=MessageType.FIRST_OR_SECOND,
                timestamp=timestamp(),
            )
        )

        text = await chooser._read()
        try:
            decision = Message.from_json(text, StartGameContentChoice)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"error asking turn order: {exc}") from exc
        if decision.message_type is not MessageType.FIRST_OR_SECOND_CHOICE:
            raise ValueError(
                "client response was expected to be a first or second choice, "
                f"but was instead {int(decision.message_type)}"
            )
        return (chooser is first) == decision.content.first

    async def heads_or_tails(self, user: User) -> None:
        """Ask player 1 to call the coin; tell player 2 to wait."""
        player_id = self.player_to_game_player_id[user]
        if player_id == 0:
            await user.write_json(
                Message(
                    content=CoinFlipContent(is_choosing_flip=True),
                    message_type=MessageType.HEADS_OR_TAILS,
                    timestamp=timestamp(),
                )
            )
            text = await user._read()
            try:
                decision = Message.from_json(text, CoinFlipContentChoice)
            except (ValueError, TypeError) as exc:
                raise ValueError("failed to decode JSON") from exc
            if decision.message_type is not MessageType.COIN_CHOICE:
                raise ValueError(
                    "client response was expected to be a coin choice, "
                    f"but was instead {int(decision.message_type)}"
                )
            self.expecting_coin_flip = CoinFlip.HEAD if decision.content.heads else CoinFlip.TAIL
        elif player_id == 1:
            await user.write_json(
                Message(
                    content=CoinFlipContent(is_choosing_flip=False),
                    message_type=MessageType.HEADS_OR_TAILS,
                    timestamp=timestamp(),
                )
            )
        else:
            logger.warning("Haven't handled scenario with more than 2 players")

    def _opening_update(
        self,
        own_moves: list[CardMovement],
        opp_moves: list[CardMovement],
        player_id: int,
        my_turn: bool,
    ) -> Message[UpdateInfo]:
        selectable = (
            [card.game_id for card in self.game.players[player_id].hand.cards] if my_turn else []
        )
        return Message(
            content=UpdateInfo(
                movements=merge_moves(own_moves, opp_moves),
                phase=Phase.MY_TURN if my_turn else Phase.OPPONENTS_TURN,
                pile=Pile.HAND,
                selectable_cards=selectable,
            ),
            message_type=MessageType.GAMEPLAY,
            timestamp=timestamp(),
        )

    async def send_initial_game_state(self, going_first: bool) -> None:
        """Deal opening hands and tell both players what happened and whose turn it is."""
        first_moves, second_moves = self.game.start_game()
        await self.ready_players[0].write_json(
            self._opening_update(first_moves, second_moves, 0, going_first)
        )
        await self.ready_players[1].write_json(
            self._opening_update(second_moves, first_moves, 1, not going_first)
        )

    async def start_game(self, user: User) -> None:
        """Run the coin flip and turn-order handshake for one player."""
        await self.heads_or_tails(user)
        await self.wait(RoomDescription.HEADS_OR_TAILS_CHOSEN)

        if self.expecting_coin_flip is CoinFlip.UNSET:
            raise RuntimeError("coin flip isn't set by evaluation time")

        if self.player_to_game_player_id[user] != 0:
            await self.wait(RoomDescription.INITIAL_STATE_TO_CLIENT)
            return

        going_first = await self.ask_turn_order()
        await self.send_initial_game_state(going_first)
        await self.wait(RoomDescription.INITIAL_STATE_TO_CLIENT)

    async def player_loop(self, user: User) -> None:
        """Handle a player's actions until the connection ends or an action fails."""
        if user.conn is None:
            return
        while True:
            try:
                action = await self.read_for_actions(user.conn)
            except (ConnectionError, ValueError) as exc:
                logger.info("Stopped reading from user, endcode: %s", exc)
                return

            try:
                info = self.process_action(user, action)
            except ActionError as exc:
                logger.warning("Error processing game action: %s", exc)
                return

            player_id = self.player_to_game_player_id[user]
            opponent_info = UpdateInfo(
                movements=merge_moves([], info.movements),
                phase=Phase.OPPONENTS_TURN,
                pile=Pile.HAND,
            )
            try:
                await self.send_update_info(user, info)
                await self.send_update_info(self.ready_players[1 - player_id], opponent_info)
            except ConnectionError as exc:
                logger.info("Stopped sending to user, endcode: %s", exc)
                return

    async def wait(self, new_description: RoomDescription) -> None:
        """Wait until every player reaches this point, then record the new stage."""
        logger.debug("starting wait for: %s", new_description.value)
        await self._barrier.wait()
        self.room_description = new_description
        logger.debug("End wait for: %s", new_description.value)

    def __str__(self) -> str:
        return "".join(
            f"[ConnectionPointer: {id(user.conn):#x}, isPresent: {str(present).lower()}, "
            f"isSpectator: {str(user.is_spectator).lower()}], "
            for user, present in self.connections.items()
        )


def make_room(room_number: int, card_handler: CardHandler | None = None) -> Room:
    """Create an empty room."""
    return Room(room_number, card_handler)