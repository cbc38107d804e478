"""Bot decision making."""

from holdem21.strategy.bots import BotDecision, BotStrategy, pick_fallback_action

__all__ = [
    "BotDecision",
    "BotStrategy",
    "pick_fallback_action",
]
