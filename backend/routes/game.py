"""In-game endpoints: narrated turns, equipment and shop trading."""

from fastapi import APIRouter, HTTPException

from mythic_realms.session import SessionBusyError

from .models import IndexBody, TurnBody, UnequipBody
from .slots import require_session, state_payload

router = APIRouter()


@router.post("/slots/{slot}/turn")
async def take_turn(slot: str, body: TurnBody):
    """Run one narrated turn (or dispatch a system choice locally)."""
    session = require_session(slot)
    if session.processing:
        raise HTTPException(409, "A turn is still being processed")
    state = await session.take_turn(body.action, body.choice)
    if state is None:
        raise HTTPException(400, "Action must not be empty")
    return {"state": state.model_dump(by_alias=True), "system": session.system_request}


@router.post("/slots/{slot}/equip")
async def equip(slot: str, body: IndexBody):
    """Equip an inventory item by index."""
    session = require_session(slot)
    try:
        session.equip(body.index)
    except SessionBusyError as e:
        raise HTTPException(409, str(e))
    except IndexError as e:
        raise HTTPException(400, str(e))
    return state_payload(session)


@router.post("/slots/{slot}/unequip")
async def unequip(slot: str, body: UnequipBody):
    """Move an equipped item back to the inventory."""
    session = require_session(slot)
    try:
        session.unequip(body.slot)
    except SessionBusyError as e:
        raise HTTPException(409, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))
    return state_payload(session)


@router.post("/slots/{slot}/shop/buy")
async def buy(slot: str, body: IndexBody):
    """Buy a shop stock entry by index. ``bought`` is false when unaffordable."""
    session = require_session(slot)
    try:
        _, bought = session.buy(body.index)
    except SessionBusyError as e:
        raise HTTPException(409, str(e))
    except (IndexError, ValueError) as e:
        raise HTTPException(400, str(e))
    return {"state": state_payload(session), "bought": bought}


@router.post("/slots/{slot}/shop/sell")
async def sell(slot: str, body: IndexBody):
    """Sell an inventory item by index for half its value."""
    session = require_session(slot)
    try:
        session.sell(body.index)
    except SessionBusyError as e:
        raise HTTPException(409, str(e))
    except (IndexError, ValueError) as e:
        raise HTTPException(400, str(e))
    return state_payload(session)


@router.post("/slots/{slot}/shop/close")
async def close_shop(slot: str):
    """Leave the shop; its stock is discarded."""
    session = require_session(slot)
    try:
        session.close_shop()
    except SessionBusyError as e:
        raise HTTPException(409, str(e))
    return state_payload(session)
