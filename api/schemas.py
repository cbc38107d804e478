"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal

ActionName = Literal["fold", "check", "call", "bet", "raise", "stand", "double"]


class ActionRequest(BaseModel):
    """Request for a human action."""

    action: ActionName
    amount: int | None = Field(default=None, ge=0, description="Bet size, or raise size on top of the call")
    stand_after: bool = False


class BlindRequest(BaseModel):
    """Request to change the blind level, by preset or by amounts."""

    preset: Literal["low", "mid", "high"] | None = None
    small_blind: int | None = Field(default=None, ge=1)
    big_blind: int | None = Field(default=None, ge=1)


class NameRequest(BaseModel):
    """Request to rename the human seat."""

    name: str = Field(..., max_length=64)


class CardResponse(BaseModel):
    """Card representation."""

    id: str
    rank: str
    suit: str
    value: int
    image: str


class PlayerResponse(BaseModel):
    """One seat as shown at the table."""

    id: int
    name: str
    is_human: bool
    bot_style: str | None
    chips: int
    hand: list[CardResponse]
    folded: bool
    busted: bool
    standing: bool
    double_down: bool
    raise_locked: bool
    locked_community_count: int | None
    round_bet: int
    total_bet: int
    total: int
    last_action: str


class TableStateResponse(BaseModel):
    """Current table state."""

    state: str
    hand_number: int
    round_index: int
    round_name: str
    starting_stack: int
    min_buy_in: int
    small_blind_amount: int
    big_blind_amount: int
    next_small_blind: int
    next_big_blind: int
    dealer_index: int
    small_blind_index: int
    big_blind_index: int
    current_turn_index: int | None
    current_bet: int
    pot: int
    community: list[CardResponse]
    hand_complete: bool
    hand_result: str
    players: list[PlayerResponse]
    log: list[str]


class WagerOptionResponse(BaseModel):
    """A bet or raise preset."""

    model_config = ConfigDict(from_attributes=True)

    label: str
    amount: int
    cost: int


class AvailableActionsResponse(BaseModel):
    """What the human may do right now."""

    actions: list[ActionName]
    to_call: int
    is_human_turn: bool


class BotTurnResponse(BaseModel):
    """Result of a single bot step."""

    played: bool
    ok: bool | None = None
    reason: str | None = None
    table: TableStateResponse
