"""Individual tactics: objective selection, route building and card draws."""

from __future__ import annotations

from typing import Sequence

from ttrbot.gamestate import GameState
from ttrbot.models import CardColor, Move, Owner, Route
from ttrbot.planning import draw_for_route_aggressively, find_smartest_path, plan_claim
from ttrbot.rules import ROUTE_POINTS, is_objective_completed, route_owner

_HUBS = (5, 10, 15, 20, 25)
_NO_ROUTE_COUNT = 999
_OBJECTIVE_DRAW_CARDS = 15
_OBJECTIVE_DRAW_LIMIT = 5
_ANTI_OPPONENT_WAGONS = 5
_ANTI_OPPONENT_CARDS = 15


def _legs(path: Sequence[int]) -> list[tuple[int, int]]:
    return list(zip(path, path[1:]))


def _total_cards(state: GameState) -> int:
    return sum(
        state.cards_by_color[color]
        for color in CardColor
        if CardColor.PURPLE <= color <= CardColor.LOCOMOTIVE
    )


def _network_cities(state: GameState) -> set[int]:
    cities: set[int] = set()
    for index in state.claimed_routes:
        if 0 <= index < len(state.routes):
            route = state.routes[index]
            cities.update((route.from_city, route.to_city))
    return cities


def _free_routes(state: GameState) -> list[Route]:
    return [route for route in state.routes if route.owner == Owner.FREE]


def _claim_free_leg(state: GameState, path: Sequence[int]) -> Move | None:
    """Claim the first free leg of the path that our hand allows."""
    for a, b in _legs(path):
        if route_owner(state, a, b) == Owner.FREE:
            move = plan_claim(state, a, b)
            if move is not None:
                return move
    return None


def find_nearest_completion_objective(state: GameState) -> int | None:
    """Index of the unfinished objective closest to completion, or None."""
    best: int | None = None
    lowest_needed = _NO_ROUTE_COUNT
    highest_progress = -1

    for index, objective in enumerate(state.objectives):
        if is_objective_completed(state, objective):
            continue
        result = find_smartest_path(state, objective.from_city, objective.to_city)
        if result is None or result.distance <= 0:
            continue

        owned = available = blocked = 0
        for a, b in _legs(result.path):
            owner = route_owner(state, a, b)
            if owner == Owner.US:
                owned += 1
            elif owner == Owner.FREE:
                available += 1
            else:
                blocked += 1
        needed = available

        if needed == 1 and blocked == 0:
            return index
        if needed == 2 and blocked == 0 and needed < lowest_needed:
            lowest_needed = needed
            best = index
            highest_progress = owned
        if blocked == 0 and owned > highest_progress and needed <= 4:
            if needed < lowest_needed or (needed == lowest_needed and owned > highest_progress):
                lowest_needed = needed
                best = index
                highest_progress = owned
    return best


def find_quickest_objective(state: GameState) -> int | None:
    """Index of the unfinished objective needing the fewest free legs, if affordable."""
    best: int | None = None
    lowest_cost = _NO_ROUTE_COUNT
    for index, objective in enumerate(state.objectives):
        if is_objective_completed(state, objective):
            continue
        result = find_smartest_path(state, objective.from_city, objective.to_city)
        if result is None or result.distance <= 0:
            continue
        wagons = sum(
            2 for a, b in _legs(result.path) if route_owner(state, a, b) == Owner.FREE
        )
        if wagons <= state.wagons_left and wagons < lowest_cost:
            lowest_cost = wagons
            best = index
    return best


def work_on_single_objective(state: GameState) -> Move:
    """Advance the objective nearest completion: claim its next leg or draw for it."""
    index = find_nearest_completion_objective(state)
    if index is None:
        return build_longest_route(state)

    objective = state.objectives[index]
    result = find_smartest_path(state, objective.from_city, objective.to_city)
    if result is None or result.distance <= 0:
        return build_longest_route(state)

    for a, b in _legs(result.path):
        owner = route_owner(state, a, b)
        if owner == Owner.US:
            continue
        if owner == Owner.FREE:
            move = plan_claim(state, a, b)
            if move is not None:
                return move
            return draw_for_route_aggressively(state, a, b)
        break
    # The chosen objective cannot progress along its path; no retry would differ.
    return build_longest_route(state)


def work_on_specific_objective(state: GameState, objective_index: int) -> Move | None:
    """Claim the first claimable free leg toward the given objective, if any."""
    objective = state.objectives[objective_index]
    result = find_smartest_path(state, objective.from_city, objective.to_city)
    if result is None:
        return None
    return _claim_free_leg(state, result.path)


def find_alternative_path(state: GameState, from_city: int, to_city: int) -> Move | None:
    """Try to progress between two cities by way of a hub city."""
    for hub in _HUBS:
        if hub >= state.nb_cities or hub in (from_city, to_city):
            continue
        first = find_smartest_path(state, from_city, hub)
        second = find_smartest_path(state, hub, to_city)
        if first is None or second is None or first.distance <= 0 or second.distance <= 0:
            continue
        move = _claim_free_leg(state, first.path) or _claim_free_leg(state, second.path)
        if move is not None:
            return move
    return None


def alternative_strategy(state: GameState) -> Move:
    """Route around blocked objectives through hubs, else extend the network."""
    for objective in state.objectives:
        if is_objective_completed(state, objective):
            continue
        move = find_alternative_path(state, objective.from_city, objective.to_city)
        if move is not None:
            return move
    return build_longest_route(state)


def emergency_unblock(state: GameState) -> Move:
    """Spend a bloated hand: long routes, then network routes, then anything."""
    for length in (6, 5):
        for route in _free_routes(state):
            if route.length == length:
                move = plan_claim(state, route.from_city, route.to_city)
                if move is not None:
                    return move

    network = _network_cities(state)
    for route in _free_routes(state):
        if route.from_city in network or route.to_city in network:
            move = plan_claim(state, route.from_city, route.to_city)
            if move is not None:
                return move

    for route in _free_routes(state):
        move = plan_claim(state, route.from_city, route.to_city)
        if move is not None:
            return move
    return Move.draw_blind()


def build_longest_route(state: GameState) -> Move:
    """Extend our network with the longest route, or draw objectives with a big hand."""
    if _total_cards(state) > _OBJECTIVE_DRAW_CARDS and len(state.objectives) < _OBJECTIVE_DRAW_LIMIT:
        return Move.draw_objectives()

    network = _network_cities(state)
    best_score = 0
    best_move: Move | None = None
    for route in _free_routes(state):
        if route.from_city not in network and route.to_city not in network:
            continue
        move = plan_claim(state, route.from_city, route.to_city)
        if move is None:
            continue
        length = route.length
        score = length * 10
        if length >= 5:
            score += 100
        if length >= 4:
            score += 50
        if length >= 3:
            score += 25
        if score > best_score:
            best_score = score
            best_move = move

    if best_move is not None:
        return best_move
    return take_any_good_route(state)


def take_any_good_route(state: GameState) -> Move:
    """Claim the longest route we can, or draw from the deck."""
    best_length = 0
    best_move: Move | None = None
    for route in _free_routes(state):
        if route.length > best_length:
            move = plan_claim(state, route.from_city, route.to_city)
            if move is not None:
                best_length = route.length
                best_move = move
    return best_move if best_move is not None else Move.draw_blind()


def take_highest_value_route(state: GameState) -> Move:
    """Claim the route with the most points per wagon, or draw from the deck."""
    best_value = 0.0
    best_move: Move | None = None
    for route in _free_routes(state):
        if route.length <= 0 or route.length > state.wagons_left:
            continue
        move = plan_claim(state, route.from_city, route.to_city)
        if move is None:
            continue
        value = ROUTE_POINTS.get(route.length, 0) / route.length
        if value > best_value:
            best_value = value
            best_move = move
    return best_move if best_move is not None else Move.draw_blind()


def build_from_existing_network(state: GameState) -> Move | None:
    """Claim the most valuable route touching our network, if any."""
    network = _network_cities(state)
    best_value = 0
    best_move: Move | None = None
    for route in _free_routes(state):
        if route.from_city not in network and route.to_city not in network:
            continue
        move = plan_claim(state, route.from_city, route.to_city)
        if move is None:
            continue
        value = route.length * 10
        if route.length >= 5:
            value += 50
        if value > best_value:
            best_value = value
            best_move = move
    return best_move


def take_any_profitable_route(state: GameState) -> Move | None:
    """Claim the longest claimable route of length four or more, if any."""
    best_value = 0
    best_move: Move | None = None
    for route in _free_routes(state):
        if route.length < 4:
            continue
        move = plan_claim(state, route.from_city, route.to_city)
        if move is not None and route.length > best_value:
            best_value = route.length
            best_move = move
    return best_move


def is_anti_opponent_mode(state: GameState) -> bool:
    """Whether the opponent is about to end the game and we must cash in."""
    opponent_near_end = state.opponent_wagons_left <= _ANTI_OPPONENT_WAGONS
    too_many_cards = state.nb_cards > _ANTI_OPPONENT_CARDS
    return (opponent_near_end and too_many_cards) or bool(state.last_turn)


def handle_anti_opponent(state: GameState) -> Move | None:
    """Play for points before the game ends.

    None means the quickest objective had no claimable leg; the caller decides.
    """
    quickest = find_quickest_objective(state)
    if quickest is not None:
        return work_on_specific_objective(state, quickest)
    move = build_from_existing_network(state) or take_any_profitable_route(state)
    return move if move is not None else Move.draw_blind()