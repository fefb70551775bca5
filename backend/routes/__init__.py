"""FastAPI API endpoints under /api.

Endpoint groups: settings (health + config), slots (save-slot list, new game,
load, delete, save), game (turns, equipment, shop) and catalog. A slot's game
actions are nested under /api/slots/{slot}/.
"""

from fastapi import APIRouter

from .catalog import router as catalog_router
from .game import router as game_router
from .settings import router as settings_router
from .slots import router as slots_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(slots_router)
router.include_router(game_router)
router.include_router(catalog_router)
