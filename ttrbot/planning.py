"""Path finding, route claiming plans, card draws and objective selection."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Sequence

from ttrbot.gamestate import MAX_CITIES, GameState
from ttrbot.models import CardColor, Move, Objective, Owner
from ttrbot.rules import route_owner

_UNREACHED = 999999
_EAST_COAST = frozenset(range(20, 41))
_GREY = CardColor.LOCOMOTIVE
_PLAIN_COLORS = [c for c in CardColor if CardColor.PURPLE <= c <= CardColor.GREEN]


@dataclass(frozen=True)
class PathResult:
    """A path between two cities and its cost in wagons still to lay."""

    distance: int
    path: tuple[int, ...]


def find_smartest_path(state: GameState, start: int, end: int) -> PathResult | None:
    """Cheapest path avoiding opponent routes; our own routes cost nothing.

    Returns None for an unknown city or when the end cannot be reached.
    """
    n = state.nb_cities
    if not (0 <= start < n and 0 <= end < n):
        return None

    dist = [_UNREACHED] * n
    prev: list[int | None] = [None] * n
    visited = [False] * n
    dist[start] = 0

    for _ in range(n):
        candidates = [c for c in range(n) if not visited[c] and dist[c] < _UNREACHED]
        if not candidates:
            break
        u = min(candidates, key=lambda c: dist[c])
        visited[u] = True
        if u == end:
            break
        for route in state.routes:
            if route.owner == Owner.OPPONENT:
                continue
            if u not in (route.from_city, route.to_city):
                continue
            v = route.to_city if route.from_city == u else route.from_city
            if not 0 <= v < n:
                continue
            cost = 0 if route.owner == Owner.US else route.length
            if dist[u] + cost < dist[v]:
                dist[v] = dist[u] + cost
                prev[v] = u

    if prev[end] is None and start != end:
        return None

    reversed_path: list[int] = []
    current: int | None = end
    while current is not None and len(reversed_path) < MAX_CITIES:
        reversed_path.append(current)
        if current == start:
            break
        current = prev[current]
    return PathResult(dist[end], tuple(reversed(reversed_path)))


def find_shortest_path(state: GameState, start: int, end: int) -> PathResult | None:
    """Same as find_smartest_path."""
    return find_smartest_path(state, start, end)


def plan_claim(state: GameState, from_city: int, to_city: int) -> Move | None:
    """A claim move for the first free route between the cities, if our hand allows it."""
    route = next(
        (r for r in state.routes if r.connects(from_city, to_city) and r.owner == Owner.FREE),
        None,
    )
    if route is None or state.wagons_left < route.length:
        return None

    counts = state.cards_by_color
    length = route.length
    locos = counts[CardColor.LOCOMOTIVE]
    best: CardColor | None = None
    needed = 0

    if route.color == _GREY:
        most = 0
        for color in _PLAIN_COLORS:
            if counts[color] >= length and counts[color] > most:
                most = counts[color]
                best, needed = color, 0
        if best is None:
            best_mix = next((c for c in _PLAIN_COLORS if counts[c] + locos >= length), None)
            if best_mix is not None:
                best, needed = best_mix, length - counts[best_mix]
        if best is None and locos >= length:
            best, needed = CardColor.LOCOMOTIVE, length
    else:
        own = counts[route.color]
        if own >= length:
            best, needed = route.color, 0
        elif own + locos >= length:
            best, needed = route.color, length - own
        elif locos >= length:
            best, needed = CardColor.LOCOMOTIVE, length

    if best is None:
        return None
    return Move.claim(from_city, to_city, best, needed)


def _route_color(state: GameState, from_city: int, to_city: int) -> CardColor | None:
    route = next((r for r in state.routes if r.connects(from_city, to_city)), None)
    return None if route is None else route.color


def _visible_colored(state: GameState) -> CardColor | None:
    return next(
        (
            card
            for card in state.visible_cards
            if card != CardColor.NONE and card != CardColor.LOCOMOTIVE
        ),
        None,
    )


def draw_for_route(state: GameState, from_city: int, to_city: int) -> Move:
    """Draw the card that best helps toward the route between the cities."""
    color = _route_color(state, from_city, to_city)
    if color is None or color == CardColor.NONE:
        return Move.draw_blind()
    if CardColor.LOCOMOTIVE in state.visible_cards:
        return Move.draw(CardColor.LOCOMOTIVE)
    if color != _GREY and color in state.visible_cards:
        return Move.draw(color)
    card = _visible_colored(state)
    if card is not None:
        return Move.draw(card)
    return Move.draw_blind()


def draw_for_route_aggressively(state: GameState, from_city: int, to_city: int) -> Move:
    """Draw a locomotive or the route's own colour, otherwise from the deck."""
    color = _route_color(state, from_city, to_city)
    if color is None:
        return Move.draw_blind()
    if CardColor.LOCOMOTIVE in state.visible_cards:
        return Move.draw(CardColor.LOCOMOTIVE)
    if color != _GREY:
        if color in state.visible_cards:
            return Move.draw(color)
        return Move.draw_blind()
    card = _visible_colored(state)
    if card is not None:
        return Move.draw(card)
    return Move.draw_blind()


def _objective_value(state: GameState, objective: Objective) -> float:
    result = find_smartest_path(state, objective.from_city, objective.to_city)
    if result is None or result.distance <= 0:
        return 0.0

    legs = list(zip(result.path, result.path[1:]))
    owned = sum(1 for a, b in legs if route_owner(state, a, b) == Owner.US)
    routes_needed = len(legs) - owned

    value = objective.score / result.distance
    if objective.from_city in _EAST_COAST or objective.to_city in _EAST_COAST:
        value *= 0.3
    if owned > 0:
        value *= 2.0
    if routes_needed <= 1:
        value *= 1.5
    elif routes_needed <= 2:
        value *= 1.2
    if routes_needed > 5:
        value *= 0.5
    return value


def choose_objectives(state: GameState, objectives: Sequence[Objective]) -> tuple[bool, bool, bool]:
    """Which of three drawn objectives to keep."""
    if len(objectives) != 3:
        raise ValueError(f"expected 3 objectives, got {len(objectives)}")

    ranked = [(index, _objective_value(state, obj)) for index, obj in enumerate(objectives)]
    for i, j in combinations(range(3), 2):
        if ranked[i][1] < ranked[j][1]:
            ranked[i], ranked[j] = ranked[j], ranked[i]

    keep = [False, False, False]
    chosen = 0
    if ranked[0][1] > 0:
        keep[ranked[0][0]] = True
        chosen += 1
    if chosen < 2 and ranked[1][1] > 0.2:
        keep[ranked[1][0]] = True
        chosen += 1

    if chosen < 2 and not state.objectives:
        for index in range(3):
            if not keep[index]:
                keep[index] = True
                chosen += 1
                if chosen >= 2:
                    break
    return keep[0], keep[1], keep[2]