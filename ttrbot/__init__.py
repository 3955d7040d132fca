"""Game state, rules, path planning and move strategy for a Ticket to Ride bot."""

__version__ = "0.1.0"

__all__ = ["gamestate", "models", "planning", "player", "rules", "strategy", "tactics"]