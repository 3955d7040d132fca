# ttrbot

The decision-making core of a bot that plays Ticket to Ride against a game
server. It tracks the game state, applies the rules for claiming routes,
plans paths across the map and chooses each move.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `ttrbot.models` holds the basic values: the enums `CardColor` (where
  `LOCOMOTIVE` is also the colour of grey routes), `Action` and `Owner`, and
  the dataclasses `Route`, `Objective` and `Move`. Moves are built with
  `Move.claim(from_city, to_city, color, locomotives)`, `Move.draw(card)`,
  `Move.draw_blind()`, `Move.draw_objectives()` and
  `Move.choose_objectives(choices)`; the last raises `ValueError` unless it
  gets exactly three flags.
- `ttrbot.gamestate` holds `GameState`, built with
  `GameState.from_tracks(nb_cities, tracks)` from
  `(from_city, to_city, length, color, second_color)` tuples (more than 150
  tracks raise `ValueError`). It keeps the routes and their owners, the hand,
  the objectives, which cities our claimed routes join, and what is known of
  the opponent. Its methods `add_card`, `remove_cards_for_route`,
  `add_claimed_route`, `update_after_opponent_move`, `update_connectivity`,
  `add_objectives` and `network_degrees` keep it up to date.
- `ttrbot.rules` applies the game rules: `can_claim_route` returns the number
  of locomotives a claim needs, or `None` if it cannot be made;
  `find_possible_routes` lists every claimable `(route index, colour,
  locomotives)` option; `is_valid_move`, `is_last_turn`, `route_owner`,
  `find_route_index`, `is_objective_completed`,
  `completed_objectives_count` and `calculate_score` (route points plus
  completed objectives, minus failed ones).
- `ttrbot.planning` finds paths with `find_smartest_path`, which skips
  opponent routes and counts our own as free and returns a `PathResult`
  (`distance`, `path`) or `None`. `plan_claim` builds a claim move from the
  hand, `draw_for_route` and `draw_for_route_aggressively` pick a card to
  draw, and `choose_objectives` decides which of three drawn objectives to
  keep.
- `ttrbot.tactics` holds the individual tactics: working toward the objective
  nearest completion, detours through hub cities, extending our network,
  spending an oversized hand (`emergency_unblock`), and the mode used when
  the opponent is close to ending the game (`is_anti_opponent_mode`,
  `handle_anti_opponent`).
- `ttrbot.strategy` offers `decide_next_move(state)`, which picks the tactic
  that fits the phase of the game and returns a `Move` (or `None` when no
  tactic produced one), and `choose_objectives_strategy(state, objectives)`.
- `ttrbot.player` has `Player`, which plays against a `GameClient`.
  `play_first_turn()` draws objectives, keeps at least one and returns those
  kept. `play_turn()` decides, checks and sends a move, records its effect,
  draws a second card when the server allows one, and sets
  `state.last_turn` to 2 once the server announces the end of the game.
  Server errors are raised as `GameClientError`.

## Example

```python
from ttrbot.gamestate import GameState
from ttrbot.models import CardColor
from ttrbot.strategy import decide_next_move

# Each track: (from_city, to_city, length, color, second_color)
tracks = [
    (0, 1, 2, CardColor.RED, CardColor.NONE),
    (1, 2, 3, CardColor.LOCOMOTIVE, CardColor.NONE),
]
state = GameState.from_tracks(3, tracks)
for card in (CardColor.RED, CardColor.RED):
    state.add_card(card)

move = decide_next_move(state)  # no objectives yet, so: draw objectives
print(move.action)
```

To play against a server, supply an object with the `GameClient` methods
`send_move(move)`, `get_move()` and `get_board_cards()`, then:

```python
from ttrbot.player import Player

player = Player.from_game_data(client, nb_cities, tracks, starting_cards)
player.play_first_turn()
player.play_turn()
```

## What it does not do

The package has no network code and no command-line program. It does not
connect to a game server, run a game loop over many turns or games, or print
results: you provide the `GameClient` and call `Player` once per turn.