"""Turn-level decision making: picks the tactic that fits the phase of the game."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from ttrbot.gamestate import GameState
from ttrbot.models import CardColor, Move, Objective, Owner
from ttrbot.planning import choose_objectives, draw_for_route, find_smartest_path, plan_claim
from ttrbot.rules import is_objective_completed, route_owner
from ttrbot.tactics import (
    alternative_strategy,
    build_longest_route,
    emergency_unblock,
    handle_anti_opponent,
    is_anti_opponent_mode,
    take_highest_value_route,
    work_on_single_objective,
)

ENDGAME_WAGONS = 3
LATE_GAME_WAGONS = 8
LATE_GAME_WAGONS_PER_ROUTE = 3
SINGLE_OBJECTIVE_CARDS = 25
ALTERNATIVE_CARDS = 30
EMERGENCY_CARDS = 40
SHARED_ROUTE_BONUS = 50
ROUTES_TRIED = 5


@dataclass(frozen=True)
class _ObjectiveInfo:
    objective: Objective
    path: tuple[int, ...]
    blocked: bool


def _legs(path: Sequence[int]) -> list[tuple[int, int]]:
    return list(zip(path, path[1:]))


def _total_cards(state: GameState) -> int:
    return sum(
        state.cards_by_color[color]
        for color in CardColor
        if CardColor.PURPLE <= color <= CardColor.LOCOMOTIVE
    )


def _path_between(state: GameState, objective: Objective) -> tuple[int, ...]:
    result = find_smartest_path(state, objective.from_city, objective.to_city)
    return () if result is None else result.path


def _free_legs(state: GameState, path: Sequence[int]) -> list[tuple[int, int]]:
    return [(a, b) for a, b in _legs(path) if route_owner(state, a, b) == Owner.FREE]


def _ratio(numerator: float, denominator: float) -> float:
    """Division that follows floating-point rules for a zero denominator."""
    if denominator != 0:
        return numerator / denominator
    if numerator > 0:
        return math.inf
    if numerator < 0:
        return -math.inf
    return math.nan


def simple_strategy(state: GameState) -> Move | None:
    """Choose this turn's move; None means no tactic produced one."""
    if not state.objectives:
        return Move.draw_objectives()

    if is_anti_opponent_mode(state):
        return handle_anti_opponent(state)

    endgame = (
        bool(state.last_turn)
        or state.wagons_left <= ENDGAME_WAGONS
        or state.opponent_wagons_left <= ENDGAME_WAGONS
    )
    late_game = (
        state.wagons_left <= LATE_GAME_WAGONS
        or state.opponent_wagons_left <= LATE_GAME_WAGONS
    )
    if endgame:
        return handle_endgame(state)
    if late_game:
        return handle_late_game(state)

    if all(is_objective_completed(state, objective) for objective in state.objectives):
        return build_longest_route(state)
    return work_on_objectives(state)


def handle_endgame(state: GameState) -> Move:
    """Finish an objective one route away, else grab the best-scoring route."""
    for objective in state.objectives:
        if is_objective_completed(state, objective):
            continue
        free = _free_legs(state, _path_between(state, objective))
        if len(free) <= 1 and len(free) <= state.wagons_left:
            for a, b in free:
                move = plan_claim(state, a, b)
                if move is not None:
                    return move
    return take_highest_value_route(state)


def handle_late_game(state: GameState) -> Move:
    """Chase the most score-efficient reachable objective, else extend the network."""
    best: int | None = None
    lowest_cost = 999
    highest_value = 0

    for index, objective in enumerate(state.objectives):
        if is_objective_completed(state, objective):
            continue
        path = _path_between(state, objective)
        wagons_needed = LATE_GAME_WAGONS_PER_ROUTE * len(_free_legs(state, path))
        if wagons_needed > state.wagons_left:
            continue
        efficiency = _ratio(objective.score, wagons_needed)
        if efficiency > highest_value / (lowest_cost + 1):
            best = index
            lowest_cost = wagons_needed
            highest_value = objective.score

    if best is not None:
        return work_on_single_objective(state)
    return build_longest_route(state)


def work_on_objectives(state: GameState) -> Move:
    """Focus on one objective with a large hand, else weigh them all together."""
    if _total_cards(state) > SINGLE_OBJECTIVE_CARDS:
        return work_on_single_objective(state)
    return analyze_objectives_and_act(state)


def _objective_infos(state: GameState) -> list[_ObjectiveInfo]:
    infos: list[_ObjectiveInfo] = []
    for objective in state.objectives:
        if is_objective_completed(state, objective):
            continue
        result = find_smartest_path(state, objective.from_city, objective.to_city)
        if result is None or result.distance <= 0:
            path = () if result is None else result.path
            infos.append(_ObjectiveInfo(objective, path, True))
            continue
        legs = _legs(result.path)
        owners = [route_owner(state, a, b) for a, b in legs]
        owned = sum(1 for owner in owners if owner == Owner.US)
        free = sum(1 for owner in owners if owner == Owner.FREE)
        blocked = free == 0 and owned < len(legs)
        infos.append(_ObjectiveInfo(objective, result.path, blocked))
    return infos


def analyze_objectives_and_act(state: GameState) -> Move:
    """Claim the free route serving the most objective value, or draw toward it."""
    total_cards = _total_cards(state)
    if total_cards > EMERGENCY_CARDS:
        return emergency_unblock(state)

    infos = _objective_infos(state)
    blocked_count = sum(1 for info in infos if info.blocked)
    if (infos and blocked_count >= len(infos)) or total_cards > ALTERNATIVE_CARDS:
        return alternative_strategy(state)
    if not infos:
        return build_longest_route(state)

    candidates: list[tuple[int, int, int]] = []
    for route in state.routes:
        if route.owner != Owner.FREE:
            continue
        useful = 0
        value = 0
        for info in infos:
            if info.blocked:
                continue
            if any(route.connects(a, b) for a, b in _legs(info.path)):
                useful += 1
                value += info.objective.score
        if useful > 0:
            priority = value + (useful * SHARED_ROUTE_BONUS if useful > 1 else 0)
            candidates.append((priority, route.from_city, route.to_city))

    candidates.sort(key=lambda candidate: -candidate[0])

    for _, a, b in candidates[:ROUTES_TRIED]:
        move = plan_claim(state, a, b)
        if move is not None:
            return move

    if total_cards > SINGLE_OBJECTIVE_CARDS:
        return alternative_strategy(state)
    if candidates:
        _, a, b = candidates[0]
        return draw_for_route(state, a, b)
    return work_on_single_objective(state)


def decide_next_move(state: GameState) -> Move | None:
    """The move to play this turn, or None when no tactic produced one."""
    return simple_strategy(state)


def choose_objectives_strategy(
    state: GameState, objectives: Sequence[Objective]
) -> tuple[bool, bool, bool]:
    """Which of three drawn objectives to keep."""
    return choose_objectives(state, objectives)