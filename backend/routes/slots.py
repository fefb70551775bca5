"""Save-slot endpoints: list, inspect, new game, load, delete, save."""

from fastapi import APIRouter, HTTPException

from backend import sessions
from mythic_realms.character import CharacterDraft, create_character
from mythic_realms.session import GameSession, SessionBusyError

router = APIRouter()


def require_session(slot: str) -> GameSession:
    """Look up the live session for a slot or raise the matching HTTP error."""
    try:
        session = sessions.get_session(slot)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if session is None:
        raise HTTPException(404, "Save slot is empty")
    return session


def require_idle(slot: str) -> None:
    """Refuse to replace or delete a slot while its turn is still running."""
    session = sessions.live_session(slot)
    if session is not None and session.processing:
        raise HTTPException(409, "A turn is still being processed")


def state_payload(session: GameSession) -> dict:
    return session.state.model_dump(by_alias=True)


@router.get("/slots")
async def list_slots():
    """Summaries for every save slot plus the last-played slot id."""
    store = sessions.storage()
    return {
        "slots": [s.model_dump(by_alias=True) for s in store.list_slots()],
        "lastPlayed": store.get_last_played(),
    }


@router.get("/slots/{slot}")
async def get_slot(slot: str):
    """Current game state for a slot."""
    return state_payload(require_session(slot))


@router.post("/slots/{slot}/new")
async def new_game(slot: str, body: CharacterDraft):
    """Create a character and start a fresh game in the slot (overwrites it)."""
    require_idle(slot)
    state = create_character(body)
    try:
        sessions.storage().save_game(slot, state)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return state_payload(sessions.open_session(slot, state))


@router.post("/slots/{slot}/load")
async def load_game(slot: str):
    """Reload the slot from disk, discarding any in-memory shop."""
    require_idle(slot)
    try:
        state = sessions.storage().load_game(slot)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if state is None:
        raise HTTPException(404, "Save slot is empty")
    return state_payload(sessions.open_session(slot, state))


@router.delete("/slots/{slot}")
async def delete_slot(slot: str):
    """Delete a save slot."""
    require_idle(slot)
    try:
        deleted = sessions.storage().delete_game(slot)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not deleted:
        raise HTTPException(404, "Save slot is empty")
    sessions.close_session(slot)
    return {"ok": True}


@router.post("/slots/{slot}/save")
async def save_slot(slot: str):
    """Explicitly save the current state."""
    session = require_session(slot)
    try:
        session.save()
    except SessionBusyError as e:
        raise HTTPException(409, str(e))
    return {"ok": True}
