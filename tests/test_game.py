import random

import pytest

from cardgame.game import Action, ActionError, make_game
from cardgame.player import Card
from cardgame.protocol import ActionType, CardMovement, Phase, Pile


def _started_game(deck):
    game = make_game()
    game.rng = random.Random(7)
    game.add_player()
    game.add_player()
    game.setup_player(0, deck)
    game.setup_player(1, deck)
    return game, game.start_game()


def test_make_game():
    game = make_game()
    assert game.card_index == 0
    assert game.players == []
    assert game.card_handler is None


def test_game_add_player():
    game = make_game()
    assert game.add_player() == 0
    assert len(game.players) == 1
    assert game.add_player() == 1
    assert len(game.players) == 2


def test_game_start_game():
    game, (p1_moves, p2_moves) = _started_game([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
    assert len(p1_moves) == 7 and len(p2_moves) == 7
    assert all(m.from_pile is Pile.DECK and m.to_pile is Pile.HAND for m in p1_moves)
    assert len({m.card_id for m in p1_moves}) == len(p1_moves)

    player1 = game.players[0]
    hand_ids = {c.game_id for c in player1.hand.cards}
    deck_ids = {c.game_id for c in player1.deck.cards}
    assert hand_ids.isdisjoint(deck_ids)
    assert {m.game_id for m in p1_moves} == hand_ids


def test_game_start_game_with_few_cards():
    game, (p1_moves, p2_moves) = _started_game([1, 2, 3])
    assert len(p1_moves) == 3 and len(p2_moves) == 3
    assert all(m.from_pile is Pile.DECK and m.to_pile is Pile.HAND for m in p1_moves)
    assert len({m.game_id for m in p1_moves}) == 3

    player1 = game.players[0]
    hand_ids = {c.game_id for c in player1.hand.cards}
    assert {m.game_id for m in p1_moves} == hand_ids
    assert player1.deck.cards == []


def test_setup_player_assigns_sequential_game_ids():
    game = make_game()
    game.add_player()
    game.add_player()
    game.setup_player(0, [1, 2, 3])
    game.setup_player(1, [4, 5])
    assert game.card_index == 5
    assert game.get_setup_data(0) == ([0, 1, 2], [3, 4])
    assert game.get_setup_data(1) == ([3, 4], [0, 1, 2])


def test_get_setup_data_rejects_unknown_player():
    game = make_game()
    game.add_player()
    game.add_player()
    with pytest.raises(IndexError):
        game.get_setup_data(2)


def _game_with_hand():
    game = make_game()
    game.add_player()
    game.add_player()
    game.players[0].hand.cards = [Card(5, 100), Card(2, 101)]
    return game


def test_select_card_five_enters_selection():
    game = _game_with_hand()
    info = game.process_action(0, Action(ActionType.SELECT_CARD, [100], Pile.HAND))
    assert info.movements == [CardMovement(100, 5, Pile.HAND, Pile.DISCARD)]
    assert info.phase is Phase.SELECTING_CARDS
    assert info.pile is Pile.HAND
    assert info.selectable_cards == [101]
    assert info.open_view_cards == []


def test_select_other_card_stays_my_turn():
    game = _game_with_hand()
    info = game.process_action(0, Action(ActionType.SELECT_CARD, [101], Pile.HAND))
    assert info.movements == [CardMovement(101, 2, Pile.HAND, Pile.DISCARD)]
    assert info.phase is Phase.MY_TURN
    assert info.selectable_cards == [100, 101]


@pytest.mark.parametrize(
    "action",
    [
        Action(ActionType.SELECT_CARD, [100, 101], Pile.HAND),
        Action(ActionType.SELECT_CARD, [999], Pile.HAND),
        Action(ActionType.SELECT_CARD, [100], Pile.DECK),
        Action(ActionType.FINISH_SELECTION, [999], Pile.HAND),
        Action(ActionType.END_TURN, [], Pile.HAND),
    ],
)
def test_invalid_actions_raise(action):
    with pytest.raises(ActionError):
        _game_with_hand().process_action(0, action)


def test_finish_selection_discards_each_selected_card():
    game = _game_with_hand()
    info = game.process_action(0, Action(ActionType.FINISH_SELECTION, [101, 100], Pile.HAND))
    assert info.movements == [
        CardMovement(101, 2, Pile.HAND, Pile.DISCARD),
        CardMovement(100, 5, Pile.HAND, Pile.DISCARD),
    ]
    assert info.phase is Phase.MY_TURN
    assert info.selectable_cards == [100, 101]


def test_action_from_dict():
    action = Action.from_dict({"type": 1, "selectedCards": [4, 8], "from": 1})
    assert action == Action(ActionType.SELECT_CARD, [4, 8], Pile.HAND)
    assert Action.from_dict({"type": 2, "selectedCards": None}).selected_cards == []