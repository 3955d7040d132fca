"""Plays our turns against a game server, keeping the game state in step."""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence

from ttrbot.gamestate import LAST_TURN_WAGONS, GameState
from ttrbot.models import Action, CardColor, Move, Objective, Owner
from ttrbot.rules import find_route_index
from ttrbot.strategy import choose_objectives_strategy, decide_next_move

NORMAL_MOVE = 0
GAME_ENDED_MOVE = 1
GAME_OVER = 2

_END_MARKERS = ("[sendCGSMove]", "Total score:", "✔Objective", "longest path")
_ERROR_END_MARKERS = ("Total score", "longest path")
_PROTOCOL_MARKERS = ("Bad protocol", "WAIT_GAME")


@dataclass(frozen=True)
class MoveResult:
    """What the server answered to a move."""

    state: int = NORMAL_MOVE
    replay: bool = False
    card: CardColor = CardColor.NONE
    objectives: tuple[Objective, ...] = ()
    message: Optional[str] = None
    opponent_message: Optional[str] = None


class GameClientError(Exception):
    """The server rejected a request or reported an error."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class GameClient(Protocol):
    """Connection to the game server."""

    def send_move(self, move: Move) -> MoveResult:
        """Send one of our moves and return the server's answer."""
        ...

    def get_move(self) -> tuple[Move, MoveResult]:
        """Wait for the opponent's move."""
        ...

    def get_board_cards(self) -> Sequence[CardColor]:
        """The five face-up cards."""
        ...


def _both_players_listed(message: str) -> bool:
    return "Georges:" in message and "PlayNice:" in message


def _announces_end(message: Optional[str]) -> bool:
    if not message:
        return False
    return any(marker in message for marker in _END_MARKERS) or _both_players_listed(message)


def _error_ends_game(message: str) -> bool:
    if any(marker in message for marker in _ERROR_END_MARKERS) or _both_players_listed(message):
        return True
    return any(marker in message for marker in _PROTOCOL_MARKERS)


def _first_plain_card(cards: Iterable[CardColor]) -> Optional[CardColor]:
    return next(
        (c for c in cards if c != CardColor.LOCOMOTIVE and c != CardColor.NONE),
        None,
    )


def _kept(objectives: Sequence[Objective], choices: Sequence[bool]) -> list[Objective]:
    return [objective for objective, keep in zip(objectives, choices) if keep]


class Player:
    """Our side of the game: decides moves, sends them and records their effects."""

    def __init__(self, client: GameClient, state: GameState) -> None:
        self.client = client
        self.state = state
        self._second_draw_pending = False

    @staticmethod
    def from_game_data(
        client: GameClient,
        nb_cities: int,
        tracks: Iterable[tuple[int, int, int, int, int]],
        cards: Iterable[int],
    ) -> Player:
        """A player for a new game, holding the valid cards from the starting hand."""
        state = GameState.from_tracks(nb_cities, tracks)
        for card in cards:
            if 0 <= card < len(CardColor):
                state.add_card(CardColor(card))
        return Player(client, state)

    def _refresh_board(self) -> None:
        self.state.visible_cards = list(self.client.get_board_cards())

    def play_first_turn(self) -> list[Objective]:
        """Draw objectives and keep at least one of them; returns those kept."""
        result = self.client.send_move(Move.draw_objectives())
        offered = result.objectives
        if any(
            o.from_city >= self.state.nb_cities or o.to_city >= self.state.nb_cities
            for o in offered
        ):
            raise GameClientError("objectives refer to unknown cities")

        choices = list(choose_objectives_strategy(self.state, offered))
        if not any(choices):
            choices[0] = True
        kept = _kept(offered, choices)

        self.client.send_move(Move.choose_objectives(choices))
        self.state.add_objectives(kept)
        return kept

    def _choose_move(self) -> Move:
        state = self.state
        if self._second_draw_pending:
            self._second_draw_pending = False
            card = _first_plain_card(state.visible_cards)
            return Move.draw_blind() if card is None else Move.draw(card)
        if state.wagons_left <= 1:
            return Move.draw_blind()
        move = decide_next_move(state)
        return Move.draw_blind() if move is None else move

    def _validated(self, move: Move) -> Move:
        if move.action != Action.CLAIM_ROUTE:
            return move
        state = self.state
        if not (0 <= move.from_city < state.nb_cities and 0 <= move.to_city < state.nb_cities):
            return Move.draw_blind()
        index = find_route_index(state, move.from_city, move.to_city)
        if index is None:
            return Move.draw_blind()
        route = state.routes[index]
        if route.length > state.wagons_left or route.owner != Owner.FREE:
            return Move.draw_blind()
        if not CardColor.PURPLE <= move.color <= CardColor.LOCOMOTIVE:
            return Move.draw_blind()
        return move

    def _record(self, move: Move, result: MoveResult) -> None:
        state = self.state
        if move.action == Action.CLAIM_ROUTE:
            if result.state == NORMAL_MOVE:
                state.add_claimed_route(move.from_city, move.to_city)
                length = next(
                    (r.length for r in state.routes if r.connects(move.from_city, move.to_city)),
                    0,
                )
                state.remove_cards_for_route(move.color, length, move.locomotives)
                if state.wagons_left <= LAST_TURN_WAGONS:
                    state.last_turn = 1
            self._second_draw_pending = False
        elif move.action == Action.DRAW_CARD:
            state.add_card(move.card)
            self._second_draw_pending = move.card != CardColor.LOCOMOTIVE and result.replay
        elif move.action == Action.DRAW_BLIND_CARD:
            state.add_card(result.card)
            self._second_draw_pending = result.replay
        elif move.action == Action.DRAW_OBJECTIVES:
            self._second_draw_pending = False
            choices = choose_objectives_strategy(state, result.objectives)
            kept = _kept(result.objectives, choices)
            self.client.send_move(Move.choose_objectives(choices))
            state.add_objectives(kept)
        else:
            self._second_draw_pending = False

    def _draw_second_card(self) -> None:
        self._refresh_board()
        card = _first_plain_card(self.state.visible_cards)
        move = Move.draw_blind() if card is None else Move.draw(card)
        result = self.client.send_move(move)
        self.state.add_card(move.card if move.action == Action.DRAW_CARD else result.card)
        self._second_draw_pending = False

    def play_turn(self) -> None:
        """Play one full turn, including a second card draw when one is due.

        Sets ``state.last_turn`` to 2 when the server announces the end of the game.
        """
        state = self.state
        self._refresh_board()
        move = self._validated(self._choose_move())

        try:
            result = self.client.send_move(move)
        except GameClientError as error:
            if _error_ends_game(error.message):
                state.last_turn = GAME_OVER
                return
            raise

        if _announces_end(result.message):
            state.last_turn = GAME_OVER
            return

        if result.state == GAME_ENDED_MOVE:
            state.last_turn = GAME_OVER
            with suppress(GameClientError):
                self.client.get_move()
            return

        self._record(move, result)
        state.update_connectivity()

        if self._second_draw_pending:
            self._draw_second_card()