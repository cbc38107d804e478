"""Game engine and state management."""

from holdem21.game.events import GameEvent, EventType
from holdem21.game.state import GameState
from holdem21.game.actions import Action, ActionPayload, ActionResult, ActionSource, WagerOption
from holdem21.game.player import BotStyle, Player, SeatConfig
from holdem21.game.view import PlayerView, TableQueries, TableSnapshot
from holdem21.game.engine import Holdem21Game

__all__ = [
    "GameEvent",
    "EventType",
    "GameState",
    "Action",
    "ActionPayload",
    "ActionResult",
    "ActionSource",
    "WagerOption",
    "BotStyle",
    "Player",
    "SeatConfig",
    "PlayerView",
    "TableQueries",
    "TableSnapshot",
    "Holdem21Game",
]
