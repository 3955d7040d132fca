import pytest

from ttrbot.gamestate import GameState
from ttrbot.models import Action, CardColor, Move, Objective, Owner
from ttrbot.planning import choose_objectives
from ttrbot.strategy import (
    analyze_objectives_and_act,
    choose_objectives_strategy,
    decide_next_move,
    handle_endgame,
    handle_late_game,
    simple_strategy,
    work_on_objectives,
)
from ttrbot.tactics import (
    alternative_strategy,
    build_longest_route,
    emergency_unblock,
    take_highest_value_route,
    work_on_single_objective,
)

RED = CardColor.RED
BLUE = CardColor.BLUE


def make_state(nb_cities, tracks, hand=(), objectives=()):
    state = GameState.from_tracks(nb_cities, tracks)
    for card in hand:
        state.add_card(card)
    state.add_objectives(objectives)
    return state


def test_no_objectives_draws_objectives():
    state = make_state(2, [(0, 1, 2, RED, CardColor.NONE)])
    assert simple_strategy(state) == Move.draw_objectives()


def test_last_turn_uses_anti_opponent_claim():
    state = make_state(
        2, [(0, 1, 2, RED, CardColor.NONE)], [RED, RED], [Objective(0, 1, 5)]
    )
    state.last_turn = 1
    assert simple_strategy(state) == Move.claim(0, 1, RED, 0)


def test_decide_next_move_matches_simple_strategy():
    state = make_state(
        2, [(0, 1, 2, RED, CardColor.NONE)], [RED, RED], [Objective(0, 1, 5)]
    )
    assert decide_next_move(state) == simple_strategy(state)


def test_endgame_finishes_one_route_objective():
    state = make_state(
        3,
        [(0, 1, 1, RED, CardColor.NONE), (1, 2, 1, BLUE, CardColor.NONE)],
        [BLUE],
        [Objective(1, 2, 4)],
    )
    state.wagons_left = 3
    assert handle_endgame(state) == Move.claim(1, 2, BLUE, 0)
    assert simple_strategy(state) == Move.claim(1, 2, BLUE, 0)


def test_endgame_falls_back_to_highest_value_route():
    state = make_state(
        4,
        [(0, 1, 1, RED, CardColor.NONE), (2, 3, 2, BLUE, CardColor.NONE)],
        [RED],
        [Objective(2, 3, 4)],
    )
    state.wagons_left = 3
    move = handle_endgame(state)
    assert move == take_highest_value_route(state)
    assert move.action == Action.CLAIM_ROUTE


def test_late_game_works_on_reachable_objective():
    state = make_state(
        2, [(0, 1, 2, RED, CardColor.NONE)], [RED, RED], [Objective(0, 1, 5)]
    )
    state.wagons_left = 8
    assert handle_late_game(state) == Move.claim(0, 1, RED, 0)
    assert simple_strategy(state) == Move.claim(0, 1, RED, 0)


def test_late_game_without_affordable_objective_builds_network():
    state = make_state(
        3,
        [(0, 1, 1, RED, CardColor.NONE), (1, 2, 6, BLUE, CardColor.NONE)],
        [RED],
        [Objective(1, 2, 9)],
    )
    state.wagons_left = 2
    assert handle_late_game(state) == build_longest_route(state)


def test_late_game_unreachable_objective_uses_single_objective():
    state = make_state(3, [(0, 1, 1, RED, CardColor.NONE)], [], [Objective(0, 2, 5)])
    state.wagons_left = 8
    assert handle_late_game(state) == work_on_single_objective(state)


def test_all_objectives_done_builds_longest_route():
    state = make_state(
        3,
        [(0, 1, 1, RED, CardColor.NONE), (1, 2, 3, BLUE, CardColor.NONE)],
        [BLUE, BLUE, BLUE],
        [Objective(0, 1, 3)],
    )
    state.add_claimed_route(0, 1)
    assert simple_strategy(state) == build_longest_route(state)
    assert simple_strategy(state) == Move.claim(1, 2, BLUE, 0)


def test_large_hand_focuses_single_objective():
    state = make_state(
        3,
        [(0, 1, 2, RED, CardColor.NONE), (1, 2, 2, BLUE, CardColor.NONE)],
        [CardColor.GREEN] * 26,
        [Objective(0, 2, 8)],
    )
    assert work_on_objectives(state) == work_on_single_objective(state)


def test_huge_hand_triggers_emergency_unblock():
    state = make_state(
        2, [(0, 1, 6, RED, CardColor.NONE)], [RED] * 41, [Objective(0, 1, 5)]
    )
    move = analyze_objectives_and_act(state)
    assert move == emergency_unblock(state)
    assert move == Move.claim(0, 1, RED, 0)


def test_shared_route_preferred_then_next_claimable():
    state = make_state(
        3,
        [(0, 1, 1, RED, CardColor.NONE), (1, 2, 1, BLUE, CardColor.NONE)],
        [BLUE],
        [Objective(0, 1, 5), Objective(0, 2, 7)],
    )
    assert analyze_objectives_and_act(state) == Move.claim(1, 2, BLUE, 0)


def test_shared_route_claimed_when_affordable():
    state = make_state(
        3,
        [(0, 1, 1, RED, CardColor.NONE), (1, 2, 1, BLUE, CardColor.NONE)],
        [RED, BLUE],
        [Objective(0, 1, 5), Objective(0, 2, 7)],
    )
    assert analyze_objectives_and_act(state) == Move.claim(0, 1, RED, 0)


def test_draws_toward_top_route_without_cards():
    state = make_state(
        3,
        [(0, 1, 1, RED, CardColor.NONE), (1, 2, 1, BLUE, CardColor.NONE)],
        [],
        [Objective(0, 1, 5), Objective(0, 2, 7)],
    )
    state.visible_cards = [RED, BLUE, CardColor.NONE, CardColor.NONE, CardColor.NONE]
    assert analyze_objectives_and_act(state) == Move.draw(RED)


def test_all_blocked_uses_alternative_strategy():
    state = make_state(2, [(0, 1, 2, RED, CardColor.NONE)], [], [Objective(0, 1, 5)])
    state.routes[0].owner = Owner.OPPONENT
    move = analyze_objectives_and_act(state)
    assert move == alternative_strategy(state)
    assert move == Move.draw_blind()


def test_choose_objectives_strategy_matches_planner():
    state = make_state(
        3,
        [(0, 1, 2, RED, CardColor.NONE), (1, 2, 3, BLUE, CardColor.NONE)],
    )
    drawn = [Objective(0, 1, 4), Objective(1, 2, 6), Objective(0, 2, 9)]
    assert choose_objectives_strategy(state, drawn) == choose_objectives(state, drawn)


def test_choose_objectives_strategy_forces_two_on_first_draw():
    state = make_state(3, [])
    drawn = [Objective(0, 1, 4), Objective(1, 2, 6), Objective(0, 2, 9)]
    assert choose_objectives_strategy(state, drawn) == (True, True, False)


def test_choose_objectives_strategy_rejects_wrong_count():
    state = make_state(3, [])
    with pytest.raises(ValueError):
        choose_objectives_strategy(state, [Objective(0, 1, 4)])