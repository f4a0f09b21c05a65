# cardgame

A small server for two-player online card games. Clients connect over a
WebSocket and are placed into numbered rooms. The two players of a room
exchange deck lists, flip a coin for turn order, are dealt opening hands
and then send card actions; both players receive the resulting card
movements. Spectators can join a room and are kept connected. A status
endpoint lists every room and who is in it.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
cardgame-server
```

Options:

| Option         | Default               | Meaning                                      |
|----------------|-----------------------|----------------------------------------------|
| `--host`       | all interfaces        | interface to listen on                       |
| `--port`       | `3000`                | port to listen on                            |
| `--cards`      | `cardInfo`            | directory holding card-set JSON files        |
| `--rooms-page` | `templates/rooms.html`| HTML file served as the rooms overview page  |

The card directory must exist: every file in it is read as a JSON array of
cards, and the part of the file name before the first dot is the set name.
A file that cannot be read or parsed is logged and loaded as an empty set.
A card may carry an `alias` (`{"set": ..., "id": ...}`) pointing at a card
by position in some set.

Endpoints:

| Path         | Purpose                                                      |
|--------------|--------------------------------------------------------------|
| `/socket`    | WebSocket endpoint, e.g. `/socket?room=3&spectator=true`     |
| `/api/rooms` | HTML fragment describing every room and its connections      |
| any other    | the rooms overview page, read from the `--rooms-page` file   |

No rooms page ships with the package; if the file is missing, the page
request answers with status 500.

Without a `room` parameter the client goes to room 255. The value is read
as a signed 8-bit number (out-of-range values are clamped, unreadable ones
count as 0) and wrapped into 0–255. Once two players are active in a room,
any further connection to it, spectators included, is refused.

## The protocol

After the plain-text greeting `Hi Client!`, every message is JSON with the
same envelope:

```json
{"content": {...}, "type": 0, "timestamp": "20240101120000"}
```

`type` is a `MessageType`: `0` setup, `1` heads or tails, `2` coin choice,
`3` first or second, `4` first-or-second choice, `5` gameplay.

1. Each player sends its deck as static card ids:
   `{"content": {"deck": [1, 2, 3]}, "type": 0, ...}`.
2. When both decks are in, each player receives (type `0`) the in-game ids
   of its own and its opponent's deck: `{"myDeck": [...], "oppDeck": [...]}`.
3. The first player receives `{"isChoosingFlip": true}` (type `1`) and
   answers `{"heads": true}` or `false` (type `2`); the second player
   receives `{"isChoosingFlip": false}`.
4. The server flips the coin. The player who won it receives
   `{"isChoosingTurnOrder": true}` (type `1`), the other
   `{"isChoosingTurnOrder": false}` (type `3`). The winner answers
   `{"first": true}` or `false` (type `4`).
5. Both decks are shuffled and up to seven cards are drawn into each hand.
   Each player receives a gameplay update (type `5`) with `movements`,
   `phase`, `pile`, `openViewCards` and `selectableCards`; the opponent's
   movements are reported with opponent piles.
6. During play a player sends an action, e.g.
   `{"content": {"type": 1, "selectedCards": [12], "from": 1}, "type": 5, ...}`.
   The player receives the resulting update and the opponent receives the
   same movements from its side, with phase "opponent's turn".

Piles, phases and action types are sent as numbers; see `Pile`, `Phase`
and `ActionType` in `cardgame.protocol`.

## Using the game logic directly

```python
from cardgame.game import make_game

game = make_game(None)
first = game.add_player()
second = game.add_player()
game.setup_player(first, [1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
game.setup_player(second, [11, 12, 13, 14, 15, 16, 17, 18, 19, 20])

my_deck, opp_deck = game.get_setup_data(first)
first_moves, second_moves = game.start_game()
print(len(first_moves))  # 7
```

`Game.process_action` turns an `Action` into an `UpdateInfo` and raises
`ActionError` for actions it cannot handle. Card sets are loaded with
`cardgame.cards.setup_from_directory`; a server is built with
`cardgame.server.make_server` and served through the application returned
by `cardgame.server.create_app`.

## What it does not do

- Actions report card movements but do not change the game state: cards
  stay in the hand after being played.
- Only playing a card from the hand and finishing a card selection are
  handled; ending a turn, and everything else, is refused with
  `ActionError`. Playing the card with id 5 asks for a selection of other
  hand cards; every other card is simply discarded.
- Card preconditions and effects are loaded but never evaluated.
- A player who disconnects is only marked inactive; the game is not ended
  or resumed.
- Spectators receive no game updates; their messages are read and dropped.