"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel

from mythic_realms.models import Choice


class TurnBody(BaseModel):
    action: str = ""
    choice: Choice | None = None


class IndexBody(BaseModel):
    index: int


class UnequipBody(BaseModel):
    slot: str
