from collections import deque

import pytest

from ttrbot.models import Action, CardColor, Move, Objective, Owner
from ttrbot.player import GameClientError, MoveResult, Player

TRACKS = [
    (0, 1, 2, int(CardColor.RED), int(CardColor.NONE)),
    (1, 2, 3, int(CardColor.LOCOMOTIVE), int(CardColor.NONE)),
    (2, 3, 1, int(CardColor.BLUE), int(CardColor.NONE)),
]


class FakeClient:
    def __init__(self, results, board=None):
        self.results = deque(results)
        self.sent = []
        self.board = list(board) if board is not None else [CardColor.NONE] * 5
        self.get_move_calls = 0

    def send_move(self, move):
        self.sent.append(move)
        outcome = self.results.popleft()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get_move(self):
        self.get_move_calls += 1
        return Move.draw_blind(), MoveResult()

    def get_board_cards(self):
        return list(self.board)


def make_player(results, cards=(), board=None):
    client = FakeClient(results, board)
    player = Player.from_game_data(client, 4, TRACKS, list(cards))
    return client, player


def test_from_game_data_keeps_only_valid_cards():
    _, player = make_player([], cards=[int(CardColor.RED), 10, -1, int(CardColor.BLUE)])
    assert player.state.cards == [CardColor.RED, CardColor.BLUE]
    assert player.state.cards_by_color[CardColor.RED] == 1
    assert len(player.state.routes) == len(TRACKS)


def test_play_first_turn_keeps_chosen_objectives():
    offered = (Objective(0, 1, 5), Objective(1, 3, 8), Objective(0, 3, 9))
    client, player = make_player([MoveResult(objectives=offered), MoveResult()])
    kept = player.play_first_turn()
    assert [m.action for m in client.sent] == [Action.DRAW_OBJECTIVES, Action.CHOOSE_OBJECTIVES]
    choices = client.sent[1].choices
    assert any(choices)
    assert kept == [o for o, keep in zip(offered, choices) if keep]
    assert player.state.objectives == kept


def test_play_first_turn_rejects_unknown_cities():
    offered = (Objective(0, 1, 5), Objective(1, 9, 8), Objective(0, 3, 9))
    client, player = make_player([MoveResult(objectives=offered)])
    with pytest.raises(GameClientError):
        player.play_first_turn()
    assert len(client.sent) == 1
    assert player.state.objectives == []


def test_play_first_turn_propagates_client_error():
    client, player = make_player([GameClientError("refused")])
    with pytest.raises(GameClientError):
        player.play_first_turn()
    assert player.state.objectives == []


def test_play_turn_without_objectives_draws_and_chooses():
    offered = (Objective(0, 1, 5), Objective(1, 2, 4), Objective(2, 3, 2))
    client, player = make_player([MoveResult(objectives=offered), MoveResult()])
    player.play_turn()
    assert [m.action for m in client.sent] == [Action.DRAW_OBJECTIVES, Action.CHOOSE_OBJECTIVES]
    choices = client.sent[1].choices
    assert player.state.objectives == [o for o, keep in zip(offered, choices) if keep]
    assert len(player.state.objectives) >= 1


def test_blind_draw_when_almost_out_of_wagons():
    client, player = make_player([MoveResult(card=CardColor.RED)])
    player.state.wagons_left = 1
    player.play_turn()
    assert [m.action for m in client.sent] == [Action.DRAW_BLIND_CARD]
    assert player.state.cards == [CardColor.RED]


def test_blind_draw_with_replay_draws_second_visible_card():
    board = [CardColor.LOCOMOTIVE, CardColor.GREEN, CardColor.RED, CardColor.NONE, CardColor.NONE]
    client, player = make_player(
        [MoveResult(card=CardColor.BLUE, replay=True), MoveResult()], board=board
    )
    player.state.wagons_left = 1
    player.play_turn()
    assert [m.action for m in client.sent] == [Action.DRAW_BLIND_CARD, Action.DRAW_CARD]
    assert client.sent[1].card == CardColor.GREEN
    assert player.state.cards == [CardColor.BLUE, CardColor.GREEN]


def test_second_draw_is_blind_when_only_locomotives_visible():
    board = [CardColor.LOCOMOTIVE] * 5
    client, player = make_player(
        [MoveResult(card=CardColor.BLUE, replay=True), MoveResult(card=CardColor.RED)],
        board=board,
    )
    player.state.wagons_left = 1
    player.play_turn()
    assert [m.action for m in client.sent] == [Action.DRAW_BLIND_CARD, Action.DRAW_BLIND_CARD]
    assert player.state.cards == [CardColor.BLUE, CardColor.RED]


def test_claim_route_updates_state():
    cards = [int(CardColor.RED), int(CardColor.RED), int(CardColor.BLUE), int(CardColor.BLUE)]
    client, player = make_player([MoveResult()], cards=cards)
    objective = Objective(0, 1, 5)
    player.state.add_objectives([objective])
    wagons_before = player.state.wagons_left
    player.play_turn()
    sent = client.sent[0]
    assert sent.action == Action.CLAIM_ROUTE
    assert {sent.from_city, sent.to_city} == {0, 1}
    assert sent.color == CardColor.RED
    route = player.state.routes[0]
    assert route.owner == Owner.US
    assert player.state.wagons_left == wagons_before - route.length
    assert player.state.cards_by_color[CardColor.RED] == 0
    assert player.state.claimed_routes == [0]


def test_visible_locomotive_draw_ends_turn():
    board = [CardColor.LOCOMOTIVE, CardColor.NONE, CardColor.NONE, CardColor.NONE, CardColor.NONE]
    client, player = make_player([MoveResult(replay=True)], board=board)
    player.state.add_objectives([Objective(0, 1, 5)])
    player.play_turn()
    assert len(client.sent) == 1
    assert client.sent[0] == Move.draw(CardColor.LOCOMOTIVE)
    assert player.state.cards_by_color[CardColor.LOCOMOTIVE] == 1


def test_end_message_marks_game_over():
    client, player = make_player([MoveResult(card=CardColor.RED, message="Total score: 10 pts")])
    player.state.wagons_left = 1
    player.play_turn()
    assert player.state.last_turn == 2
    assert player.state.cards == []


def test_protocol_error_marks_game_over():
    client, player = make_player([GameClientError("Bad protocol, should send 'WAIT_GAME'")])
    player.state.wagons_left = 1
    player.play_turn()
    assert player.state.last_turn == 2


def test_other_client_error_is_raised():
    client, player = make_player([GameClientError("connection lost")])
    player.state.wagons_left = 1
    with pytest.raises(GameClientError):
        player.play_turn()
    assert player.state.last_turn == 0


def test_ended_move_reads_final_move():
    client, player = make_player([MoveResult(state=1, card=CardColor.RED)])
    player.state.wagons_left = 1
    player.play_turn()
    assert player.state.last_turn == 2
    assert client.get_move_calls == 1
    assert player.state.cards == []