"""What the bot knows about the game in progress."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from ttrbot.models import Action, CardColor, Move, Objective, Owner, Route

MAX_CARDS = 100
MAX_OBJECTIVES = 15
MAX_ROUTES = 150
MAX_CITIES = 50

HAND_LIMIT = 50
STARTING_WAGONS = 45
STARTING_HAND = 4
VISIBLE_CARDS = 5
LAST_TURN_WAGONS = 2


def _route_index(routes: list[Route], from_city: int, to_city: int) -> int | None:
    return next(
        (index for index, route in enumerate(routes) if route.connects(from_city, to_city)),
        None,
    )


@dataclass
class GameState:
    """Board, hand, objectives and opponent tracking for one game."""

    nb_cities: int
    routes: list[Route] = field(default_factory=list)
    cards: list[CardColor] = field(default_factory=list)
    nb_cards: int = STARTING_HAND
    cards_by_color: list[int] = field(default_factory=lambda: [0] * len(CardColor))
    objectives: list[Objective] = field(default_factory=list)
    visible_cards: list[CardColor] = field(
        default_factory=lambda: [CardColor.NONE] * VISIBLE_CARDS
    )
    claimed_routes: list[int] = field(default_factory=list)
    components: dict[int, int] = field(default_factory=dict)
    last_turn: int = 0
    wagons_left: int = STARTING_WAGONS
    turn_count: int = 0
    opponent_wagons_left: int = STARTING_WAGONS
    opponent_card_count: int = STARTING_HAND
    opponent_objective_count: int = 0

    @property
    def nb_tracks(self) -> int:
        return len(self.routes)

    @classmethod
    def from_tracks(
        cls, nb_cities: int, tracks: Iterable[tuple[int, int, int, int, int]]
    ) -> GameState:
        """Build a fresh state from (from, to, length, colour, second colour) tracks."""
        routes = [
            Route(from_city, to_city, length, CardColor(color), CardColor(second))
            for from_city, to_city, length, color, second in tracks
        ]
        if len(routes) > MAX_ROUTES:
            raise ValueError(f"at most {MAX_ROUTES} tracks are supported, got {len(routes)}")
        return cls(nb_cities=nb_cities, routes=routes)

    def add_card(self, card: CardColor) -> None:
        """Put a card in hand unless the hand is full."""
        if self.nb_cards >= HAND_LIMIT:
            return
        card = CardColor(card)
        self.cards.append(card)
        self.nb_cards += 1
        self.cards_by_color[card] += 1

    def remove_cards_for_route(self, color: CardColor, length: int, locomotives: int) -> None:
        """Spend the cards and wagons used to claim a route."""
        loco = CardColor.LOCOMOTIVE
        if length <= 0:
            return
        if self.cards_by_color[color] + self.cards_by_color[loco] < length:
            return
        self.cards_by_color[color] = max(0, self.cards_by_color[color] - (length - locomotives))
        self.cards_by_color[loco] = max(0, self.cards_by_color[loco] - locomotives)
        self.nb_cards = max(0, self.nb_cards - length)
        self.wagons_left -= length

    def add_claimed_route(self, from_city: int, to_city: int) -> None:
        """Record that we now own the first free-or-not route between two cities."""
        if not (0 <= from_city < self.nb_cities and 0 <= to_city < self.nb_cities):
            return
        index = _route_index(self.routes, from_city, to_city)
        if index is None:
            return
        route = self.routes[index]
        if route.owner != Owner.FREE:
            return
        route.owner = Owner.US
        if len(self.claimed_routes) < MAX_ROUTES:
            self.claimed_routes.append(index)
        self.update_connectivity()

    def update_after_opponent_move(self, move: Move) -> None:
        """Track what the opponent's move changes."""
        if move.action == Action.CLAIM_ROUTE:
            index = _route_index(self.routes, move.from_city, move.to_city)
            if index is not None:
                route = self.routes[index]
                route.owner = Owner.OPPONENT
                self.opponent_wagons_left -= route.length
                if self.opponent_wagons_left <= LAST_TURN_WAGONS:
                    self.last_turn = 1
        elif move.action in (Action.DRAW_CARD, Action.DRAW_BLIND_CARD):
            self.opponent_card_count += 1
        elif move.action == Action.CHOOSE_OBJECTIVES:
            self.opponent_objective_count += sum(1 for kept in move.choices if kept)

    def update_connectivity(self) -> None:
        """Recompute which cities our claimed routes join together."""
        if self.nb_cities <= 0 or self.nb_cities > MAX_CITIES:
            return
        adjacency: dict[int, set[int]] = defaultdict(set)
        for index in self.claimed_routes:
            if not 0 <= index < len(self.routes):
                continue
            route = self.routes[index]
            a, b = route.from_city, route.to_city
            if not (0 <= a < self.nb_cities and 0 <= b < self.nb_cities):
                continue
            adjacency[a].add(b)
            adjacency[b].add(a)

        components: dict[int, int] = {}
        for root in adjacency:
            if root in components:
                continue
            components[root] = root
            stack = [root]
            while stack:
                city = stack.pop()
                for neighbour in adjacency[city]:
                    if neighbour not in components:
                        components[neighbour] = root
                        stack.append(neighbour)
        self.components = components

    def add_objectives(self, objectives: Iterable[Objective]) -> None:
        """Keep objectives, up to the maximum a player can hold."""
        for objective in objectives:
            if len(self.objectives) >= MAX_OBJECTIVES:
                break
            self.objectives.append(objective)

    def network_degrees(self) -> list[int]:
        """Number of our claimed routes touching each city."""
        degrees = [0] * max(self.nb_cities, 0)
        for index in self.claimed_routes:
            if not 0 <= index < len(self.routes):
                continue
            route = self.routes[index]
            for city in (route.from_city, route.to_city):
                if 0 <= city < self.nb_cities:
                    degrees[city] += 1
        return degrees