"""Core value types: card colours, actions, routes, objectives and moves."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable


class CardColor(IntEnum):
    """Wagon card colours. LOCOMOTIVE doubles as the colour of grey routes."""

    NONE = 0
    PURPLE = 1
    WHITE = 2
    BLUE = 3
    YELLOW = 4
    ORANGE = 5
    BLACK = 6
    RED = 7
    GREEN = 8
    LOCOMOTIVE = 9


class Action(IntEnum):
    """Kinds of move a player can make."""

    CLAIM_ROUTE = 1
    DRAW_BLIND_CARD = 2
    DRAW_CARD = 3
    DRAW_OBJECTIVES = 4
    CHOOSE_OBJECTIVES = 5


class Owner(IntEnum):
    """Who holds a route."""

    FREE = 0
    US = 1
    OPPONENT = 2


@dataclass
class Route:
    """A track between two cities."""

    from_city: int
    to_city: int
    length: int
    color: CardColor
    second_color: CardColor = CardColor.NONE
    owner: Owner = Owner.FREE

    def connects(self, from_city: int, to_city: int) -> bool:
        """Whether this route joins the two cities, in either direction."""
        return (self.from_city == from_city and self.to_city == to_city) or (
            self.from_city == to_city and self.to_city == from_city
        )


@dataclass(frozen=True)
class Objective:
    """A destination ticket: connect two cities for a score."""

    from_city: int
    to_city: int
    score: int


@dataclass(frozen=True)
class Move:
    """A move sent to, or received from, the game server."""

    action: Action
    from_city: int = -1
    to_city: int = -1
    color: CardColor = CardColor.NONE
    locomotives: int = 0
    card: CardColor = CardColor.NONE
    choices: tuple[bool, bool, bool] = (False, False, False)

    @staticmethod
    def claim(from_city: int, to_city: int, color: CardColor, locomotives: int) -> Move:
        """Claim the route between two cities with the given cards."""
        return Move(
            Action.CLAIM_ROUTE,
            from_city=from_city,
            to_city=to_city,
            color=CardColor(color),
            locomotives=locomotives,
        )

    @staticmethod
    def draw(card: CardColor) -> Move:
        """Draw a visible card of the given colour."""
        return Move(Action.DRAW_CARD, card=CardColor(card))

    @staticmethod
    def draw_blind() -> Move:
        """Draw a card from the deck."""
        return Move(Action.DRAW_BLIND_CARD)

    @staticmethod
    def draw_objectives() -> Move:
        """Draw three objective cards."""
        return Move(Action.DRAW_OBJECTIVES)

    @staticmethod
    def choose_objectives(choices: Iterable[object]) -> Move:
        """Keep the drawn objectives whose flag is true; exactly three flags."""
        flags = tuple(bool(choice) for choice in choices)
        if len(flags) != 3:
            raise ValueError(f"expected 3 objective choices, got {len(flags)}")
        return Move(Action.CHOOSE_OBJECTIVES, choices=flags)