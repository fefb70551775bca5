"""Health check and settings endpoints."""

from fastapi import APIRouter, HTTPException

from backend import sessions

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get app settings (narrator + painter connections, slot count)."""
    return sessions.storage().get_config()


@router.patch("/settings")
async def update_settings(body: dict):
    """Update app settings (partial merge). Live sessions pick up new connections."""
    narrator = body.get("narrator") or {}
    fmt = narrator.get("provider_format") if isinstance(narrator, dict) else None
    if fmt is not None and fmt not in sessions.PROVIDER_FORMATS:
        raise HTTPException(400, f"Unknown provider format {fmt!r}")
    slots = body.get("save_slots")
    if slots is not None and (not isinstance(slots, int) or slots < 1):
        raise HTTPException(400, "save_slots must be a positive integer")
    config = sessions.storage().update_config(body)
    sessions.refresh_services()
    return config
