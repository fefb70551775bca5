"""Read-only catalog endpoints used by the character creator and shop UI."""

from fastapi import APIRouter, HTTPException

from mythic_realms import catalog

router = APIRouter()


@router.get("/catalog/{kind}")
async def get_catalog(kind: str):
    """List one registry: items, spells, races, classes, backgrounds or feats."""
    if kind == "items":
        return [item.model_dump(by_alias=True) for item in catalog.ITEMS.values()]
    if kind == "spells":
        return [spell.model_dump(by_alias=True) for spell in catalog.SPELLS.values()]
    tables = {
        "races": catalog.RACES,
        "classes": catalog.CLASSES,
        "backgrounds": catalog.BACKGROUNDS,
        "feats": catalog.FEATS,
    }
    if kind not in tables:
        raise HTTPException(404, "Catalog not found")
    return tables[kind]
