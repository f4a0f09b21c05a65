"""HTTP and websocket front end that places clients into game rooms."""

from __future__ import annotations

import argparse
import contextlib
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from aiohttp import web

from cardgame.cards import CardHandler, setup_from_directory
from cardgame.room import (
    PLAYERS_TO_START_GAME,
    Connection,
    Room,
    RoomDescription,
    User,
    make_room,
)

logger = logging.getLogger(__name__)

DEFAULT_ROOM = 255
DEFAULT_CARD_DIRECTORY = "cardInfo"
DEFAULT_PORT = 3000
GREETING = "Hi Client!"

_SIGNED_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass
class ServerSettings:
    """Settings of a server instance."""

    rooms_page: Path = field(default_factory=lambda: Path("templates") / "rooms.html")

    def __str__(self) -> str:
        return "[ServerSettings: ]"


class RoomFullError(Exception):
    """Raised when a client tries to join a room that already has enough players."""


def request_to_room_number(query: Mapping[str, str]) -> int:
    """Room number named by the ``room`` query parameter, as an unsigned byte.

    A missing or empty value selects the default room 255. The value is read
    as a signed 8-bit number: out-of-range values are clamped to that range,
    unreadable ones count as 0, and the result wraps into 0-255.
    """
    room_string = query.get("room", "")
    if not room_string:
        logger.info("No room selected, using default room (%d)", DEFAULT_ROOM)
        return DEFAULT_ROOM

    if _SIGNED_INTEGER.fullmatch(room_string):
        number = min(max(int(room_string), -128), 127)
        if number != int(room_string):
            logger.warning("Error reading room number %s", room_string)
    else:
        logger.warning("Error reading room number %s", room_string)
        number = 0
    logger.info("Selected room: %s", room_string)
    return number & 0xFF


class Server:
    """All rooms of the server and the handlers serving them."""

    def __init__(self, settings: ServerSettings | None = None, card_handler: CardHandler | None = None) -> None:
        self.rooms: dict[int, Room] = {}
        self.settings = settings or ServerSettings()
        self.card_handler = card_handler or CardHandler()

    def add_to_room(self, query: Mapping[str, str], user: User) -> Room:
        """Put ``user`` into the room named by ``query``, creating the room if needed."""
        room_number = request_to_room_number(query)
        room = self.rooms.get(room_number)
        if room is None:
            room = make_room(room_number, self.card_handler)
            self.rooms[room_number] = room

        if room.get_players_in_room() >= PLAYERS_TO_START_GAME:
            raise RoomFullError(f"Can't join. Too many players in room {room_number}")
        if not user.is_spectator:
            try:
                room.init_player(user)
            except ValueError as exc:
                logger.warning("%s", exc)
                return room

        room.connections[user] = True
        return room

    def remove_user_from_room(self, user: User, room: Room) -> None:
        room.remove_from_room(user)

    async def handle_ws(self, request: web.Request) -> web.WebSocketResponse:
        """Serve one client over a websocket from joining a room to the end of play."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        user = User(
            conn=Connection(ws),
            is_spectator=request.query.get("spectator") == "true",
        )
        try:
            await self._serve(user, request.query)
        finally:
            await ws.close()
        return ws

    async def _serve(self, user: User, query: Mapping[str, str]) -> None:
        try:
            room = self.add_to_room(query, user)
        except RoomFullError as exc:
            logger.warning("Error adding to room: %s", exc)
            return
        try:
            await self._run_client(room, user)
        finally:
            with contextlib.suppress(LookupError):
                self.remove_user_from_room(user, room)

    async def _run_client(self, room: Room, user: User) -> None:
        assert user.conn is not None
        logger.info("Client [%#x] Connected", id(user.conn))
        try:
            await user.conn.write_message(GREETING)
        except ConnectionError as exc:
            logger.warning("Error writing on client connection: %s", exc)
            return

        try:
            params = await room.read_setup_params(user)
        except (ConnectionError, ValueError) as exc:
            logger.warning("Error reading setup parameters %s", exc)
            return

        if user.is_spectator or params is None:
            await room.spectator_loop(user)
            return

        room.init_game_data(user, params.content.deck)
        await room.wait(RoomDescription.FINISHED_INITIALIZATION)

        try:
            await user.write_json(room.get_init_data(user))
        except ConnectionError as exc:
            logger.warning("error writing message: %s", exc)
            return

        try:
            await room.start_game(user)
        except (ConnectionError, ValueError, RuntimeError) as exc:
            logger.warning("Error starting game: %s", exc)
            return

        await room.player_loop(user)

    async def handle_rooms_page(self, request: web.Request) -> web.Response:
        """Serve the rooms overview page."""
        try:
            page = Path(self.settings.rooms_page).read_text(encoding="utf-8")
        except OSError:
            return web.Response(status=500, text="Error loading template\n")
        return web.Response(text=page, content_type="text/html")

    async def handle_rooms_api(self, request: web.Request) -> web.Response:
        """Serve an HTML fragment describing every room and its connections."""
        return web.Response(text=self.rooms_html(), content_type="text/html")

    def rooms_html(self) -> str:
        parts = []
        for room in self.rooms.values():
            parts.append(
                "\n\t\t\t<div class=\"room\">"
                f"\n\t\t\t\t<h2>Room {room.room_number} ({room.room_description.value})</h2>"
                "\n\t\t\t\t<ul class=\"user-list\">"
            )
            for user, active in room.connections.items():
                status = "Spectator" if user.is_spectator else "Player"
                status += " (Active)" if active else " (Not Active)"
                css_class = "spectator" if user.is_spectator else ""
                parts.append(f"\n\t\t\t\t<li class=\"{css_class}\">{status}</li>")
            parts.append("\n\t\t\t\t</ul>\n\t\t\t</div>")
        return "".join(parts)

    def __str__(self) -> str:
        rooms = "".join(f"\n    Room {number}: {room}" for number, room in self.rooms.items())
        return f"[Server: \n    {self.settings}{rooms}\n]"


def make_server(
    settings: ServerSettings | None = None,
    card_directory: str | Path | None = DEFAULT_CARD_DIRECTORY,
) -> Server:
    """Create a server, loading card sets from ``card_directory`` when one is given."""
    card_handler = setup_from_directory(card_directory) if card_directory is not None else CardHandler()
    return Server(settings or ServerSettings(), card_handler)


def create_app(server: Server) -> web.Application:
    """Build the web application routing requests to ``server``."""
    app = web.Application()
    app.router.add_get("/socket", server.handle_ws)
    app.router.add_get("/api/rooms", server.handle_rooms_api)
    app.router.add_get("/", server.handle_rooms_page)
    app.router.add_get("/{tail:.*}", server.handle_rooms_page)
    return app


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the card game server.")
    parser.add_argument("--host", default=None, help="interface to listen on (default: all)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument(
        "--cards", default=DEFAULT_CARD_DIRECTORY, help="directory holding card-set JSON files"
    )
    parser.add_argument("--rooms-page", type=Path, default=None, help="HTML file for the rooms page")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    settings = ServerSettings()
    if args.rooms_page is not None:
        settings.rooms_page = args.rooms_page
    server = make_server(settings, args.cards)
    print("Hello from Server")
    web.run_app(create_app(server), host=args.host, port=args.port)
    return 0