"""Game rules: what can be claimed, who owns what, and scoring."""

from __future__ import annotations

from ttrbot.gamestate import LAST_TURN_WAGONS, MAX_ROUTES, GameState
from ttrbot.models import Action, CardColor, Move, Objective, Owner

MAX_OPTIONS = 50
MAX_COLORS_TRIED = 5
_MAX_CANDIDATE_COLORS = 9
ROUTE_POINTS = {0: 0, 1: 1, 2: 2, 3: 4, 4: 7, 5: 10, 6: 15}

_PLAYABLE = [color for color in CardColor if color != CardColor.NONE]


def find_route_index(state: GameState, from_city: int, to_city: int) -> int | None:
    """Index of the first route between the two cities, or None."""
    return next(
        (i for i, route in enumerate(state.routes) if route.connects(from_city, to_city)),
        None,
    )


def route_owner(state: GameState, from_city: int, to_city: int) -> Owner | None:
    """Owner of the first route between the two cities, or None if there is none."""
    index = find_route_index(state, from_city, to_city)
    return None if index is None else state.routes[index].owner


def _locomotives_needed(state: GameState, color: CardColor, length: int) -> int | None:
    counts = state.cards_by_color
    locomotives = counts[CardColor.LOCOMOTIVE]
    if color == CardColor.LOCOMOTIVE:
        return length if locomotives >= length else None
    if counts[color] >= length:
        return 0
    if counts[color] + locomotives >= length:
        return length - counts[color]
    return None


def can_claim_route(
    state: GameState, from_city: int, to_city: int, color: CardColor
) -> int | None:
    """Locomotives needed to claim the route with the given colour, or None if it can't be."""
    if state.wagons_left <= 0:
        return None
    index = find_route_index(state, from_city, to_city)
    if index is None:
        return None
    route = state.routes[index]
    if route.owner != Owner.FREE or state.wagons_left < route.length:
        return None

    if route.color != CardColor.LOCOMOTIVE:
        valid = (
            color == route.color
            or (route.second_color != CardColor.NONE and color == route.second_color)
            or color == CardColor.LOCOMOTIVE
        )
        if not valid:
            return None
    return _locomotives_needed(state, CardColor(color), route.length)


def find_possible_routes(state: GameState) -> list[tuple[int, CardColor, int]]:
    """Every claimable (route index, colour, locomotives) option, at most 50.

    Also resynchronises the hand size with the per-colour counts.
    """
    counts = state.cards_by_color
    loco = CardColor.LOCOMOTIVE
    state.nb_cards = sum(counts[color] for color in _PLAYABLE)

    options: list[tuple[int, CardColor, int]] = []
    for index, route in enumerate(state.routes[:MAX_ROUTES]):
        if len(options) >= MAX_OPTIONS:
            break
        if not (0 <= route.from_city < state.nb_cities and 0 <= route.to_city < state.nb_cities):
            continue
        if route.owner != Owner.FREE or state.wagons_left < route.length:
            continue

        if route.color == loco:
            colors = [color for color in _PLAYABLE if counts[color] > 0]
        else:
            colors = []
            if route.color != CardColor.NONE and counts[route.color] > 0:
                colors.append(route.color)
            if (
                route.second_color != CardColor.NONE
                and route.second_color != route.color
                and counts[route.second_color] > 0
            ):
                colors.append(route.second_color)
        if counts[loco] > 0 and (not colors or route.color == loco):
            if len(colors) < _MAX_CANDIDATE_COLORS:
                colors.append(loco)

        for color in colors[:MAX_COLORS_TRIED]:
            available = counts[loco] if color == loco else counts[color] + counts[loco]
            if available < route.length:
                continue
            locomotives = can_claim_route(state, route.from_city, route.to_city, color)
            if locomotives is None:
                continue
            if locomotives <= counts[loco] and (
                color == loco or route.length - locomotives <= counts[color]
            ):
                if len(options) < MAX_OPTIONS:
                    options.append((index, CardColor(color), locomotives))
    return options


def is_last_turn(state: GameState) -> bool:
    """Whether the game is in its final round."""
    return (
        bool(state.last_turn)
        or state.wagons_left <= LAST_TURN_WAGONS
        or state.opponent_wagons_left <= LAST_TURN_WAGONS
    )


def is_objective_completed(state: GameState, objective: Objective) -> bool:
    """Whether our routes join the objective's two cities."""
    components = state.components
    a, b = objective.from_city, objective.to_city
    return a in components and b in components and components[a] == components[b]


def calculate_score(state: GameState) -> int:
    """Route points plus completed objectives, minus failed ones."""
    score = 0
    for index in state.claimed_routes:
        if 0 <= index < len(state.routes):
            score += ROUTE_POINTS.get(state.routes[index].length, 0)
    for objective in state.objectives:
        if is_objective_completed(state, objective):
            score += objective.score
        else:
            score -= objective.score
    return score


def completed_objectives_count(state: GameState) -> int:
    """Number of held objectives already completed."""
    return sum(1 for objective in state.objectives if is_objective_completed(state, objective))


def _is_card(color: CardColor) -> bool:
    return CardColor.PURPLE <= color <= CardColor.LOCOMOTIVE


def is_valid_move(state: GameState, move: Move) -> bool:
    """Whether the move is legal in the current state."""
    if move.action == Action.CLAIM_ROUTE:
        if not (0 <= move.from_city < state.nb_cities and 0 <= move.to_city < state.nb_cities):
            return False
        if not _is_card(move.color):
            return False
        index = find_route_index(state, move.from_city, move.to_city)
        if index is None or state.routes[index].owner != Owner.FREE:
            return False
        return can_claim_route(state, move.from_city, move.to_city, move.color) is not None
    if move.action == Action.DRAW_CARD:
        return _is_card(move.card)
    return move.action in (Action.DRAW_BLIND_CARD, Action.DRAW_OBJECTIVES)