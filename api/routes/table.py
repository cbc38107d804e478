"""Table API endpoints."""

from random import Random
from typing import Annotated

from fastapi import APIRouter, HTTPException, Header

from api.schemas import (
    ActionRequest,
    AvailableActionsResponse,
    BlindRequest,
    BotTurnResponse,
    CardResponse,
    NameRequest,
    PlayerResponse,
    TableStateResponse,
    WagerOptionResponse,
)
from api.session import extract_session_id, get_session_store
from config import config
from holdem21.cards import Card
from holdem21.game import Action, ActionPayload, Holdem21Game, Player, PlayerView
from holdem21.rules import BLIND_PRESETS, TableRules

router = APIRouter()


def _default_rules() -> TableRules:
    """Table rules from the application config."""
    game_config = config.game
    return TableRules(
        small_blind=game_config.small_blind,
        big_blind=game_config.big_blind,
        starting_stack=game_config.starting_stack,
        min_buy_in_multiplier=game_config.min_buy_in_multiplier,
        log_limit=game_config.log_limit,
    )


def _new_table() -> Holdem21Game:
    """Create a table and let the bots act until the human is up."""
    seed = config.game.seed
    table = Holdem21Game(
        rules=_default_rules(),
        rng=Random(seed) if seed is not None else None,
    )
    table.play_until_human(config.game.bot_turn_limit)
    return table


async def _get_table(session_id: str) -> Holdem21Game:
    """Look up the table for a signed session token and mark it active."""
    if extract_session_id(session_id) is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    store = get_session_store()
    session = await store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    await store.touch(session_id)
    return session.table


def _card_to_response(card: Card) -> CardResponse:
    """Convert a Card to CardResponse."""
    return CardResponse(
        id=card.id,
        rank=str(card.rank),
        suit=card.suit.value,
        value=card.value,
        image=card.image,
    )


def _player_to_response(player: PlayerView) -> PlayerResponse:
    """Convert a PlayerView to PlayerResponse."""
    return PlayerResponse(
        id=player.id,
        name=player.name,
        is_human=player.is_human,
        bot_style=player.bot_style.value if player.bot_style else None,
        chips=player.chips,
        hand=[_card_to_response(c) for c in player.hand],
        folded=player.folded,
        busted=player.busted,
        standing=player.standing,
        double_down=player.double_down,
        raise_locked=player.raise_locked,
        locked_community_count=player.locked_community_count,
        round_bet=player.round_bet,
        total_bet=player.total_bet,
        total=player.total,
        last_action=player.last_action,
    )


def _table_state_response(table: Holdem21Game) -> TableStateResponse:
    """Convert the table snapshot to a response."""
    snapshot = table.get_visible_state()
    return TableStateResponse(
        state=table.state.name,
        hand_number=snapshot.hand_number,
        round_index=snapshot.round_index,
        round_name=snapshot.round_name,
        starting_stack=snapshot.starting_stack,
        min_buy_in=snapshot.min_buy_in,
        small_blind_amount=snapshot.small_blind_amount,
        big_blind_amount=snapshot.big_blind_amount,
        next_small_blind=snapshot.next_small_blind,
        next_big_blind=snapshot.next_big_blind,
        dealer_index=snapshot.dealer_index,
        small_blind_index=snapshot.small_blind_index,
        big_blind_index=snapshot.big_blind_index,
        current_turn_index=snapshot.current_turn_index,
        current_bet=snapshot.current_bet,
        pot=snapshot.pot,
        community=[_card_to_response(c) for c in snapshot.community],
        hand_complete=snapshot.hand_complete,
        hand_result=snapshot.hand_result,
        players=[_player_to_response(p) for p in snapshot.players],
        log=list(snapshot.log),
    )


def _human_seat(table: Holdem21Game) -> Player:
    return next(player for player in table.players if player.is_human)


@router.post("/new")
async def new_table(
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """Create a new table session (or reset the caller's table)."""
    store = get_session_store()
    await store.cleanup_expired()

    table = _new_table()
    if (
        session_id is None
        or extract_session_id(session_id) is None
        or not await store.replace_table(session_id, table)
    ):
        session_id = await store.open(table)

    return {"session_id": session_id}


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> TableStateResponse:
    """Get current table state."""
    table = await _get_table(session_id)
    return _table_state_response(table)


@router.post("/hand")
async def next_hand(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> TableStateResponse:
    """Deal the next hand once the current one is over."""
    table = await _get_table(session_id)

    if not table.hand_complete:
        raise HTTPException(status_code=409, detail="Hand is still in progress")

    table.start_new_hand()
    table.play_until_human(config.game.bot_turn_limit)
    return _table_state_response(table)


@router.get("/actions")
async def available_actions(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> AvailableActionsResponse:
    """Legal actions for the human seat."""
    table = await _get_table(session_id)
    human = _human_seat(table)
    is_turn = table.current_player is human

    return AvailableActionsResponse(
        actions=[a.value for a in table.get_available_actions(human)] if is_turn else [],
        to_call=table.get_to_call(human),
        is_human_turn=is_turn,
    )


@router.get("/wagers/{action}")
async def wager_options(
    action: str,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> list[WagerOptionResponse]:
    """Bet or raise presets for the human seat."""
    table = await _get_table(session_id)
    parsed = Action.parse(action)
    if parsed not in (Action.BET, Action.RAISE):
        raise HTTPException(status_code=400, detail=f"No wager presets for: {action}")

    options = table.get_wager_options(parsed, _human_seat(table))
    return [WagerOptionResponse.model_validate(o) for o in options]


@router.post("/action")
async def player_action(
    request: ActionRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> TableStateResponse:
    """Execute a human action, then let the bots act."""
    table = await _get_table(session_id)

    result = table.perform_human_action(
        request.action,
        ActionPayload(amount=request.amount, stand_after=request.stand_after),
    )
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.reason)

    table.play_until_human(config.game.bot_turn_limit)
    return _table_state_response(table)


@router.post("/bot-turn")
async def bot_turn(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> BotTurnResponse:
    """Play a single bot turn, for drivers that pace the bots themselves."""
    table = await _get_table(session_id)

    result = table.play_bot_turn()
    return BotTurnResponse(
        played=result is not None,
        ok=result.ok if result is not None else None,
        reason=result.reason if result is not None else None,
        table=_table_state_response(table),
    )


@router.put("/blinds")
async def set_blinds(
    request: BlindRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> TableStateResponse:
    """Change the blind level; it applies from the next hand."""
    table = await _get_table(session_id)

    if request.preset is not None:
        preset = BLIND_PRESETS[request.preset]
        table.set_blind_structure(preset.small_blind, preset.big_blind)
    elif request.small_blind is not None or request.big_blind is not None:
        table.set_blind_structure(request.small_blind, request.big_blind)
    else:
        raise HTTPException(status_code=400, detail="Give a preset or blind amounts")

    return _table_state_response(table)


@router.put("/name")
async def set_name(
    request: NameRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> TableStateResponse:
    """Rename the human seat."""
    table = await _get_table(session_id)
    table.set_player_name(request.name)
    return _table_state_response(table)


@router.delete("")
async def close_table(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> dict[str, str]:
    """Leave the table and end the session."""
    await _get_table(session_id)
    await get_session_store().close(session_id)
    return {"status": "closed"}
