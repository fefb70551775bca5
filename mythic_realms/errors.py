"""Turn failure taxonomy.

A failed turn never touches player, world or enemy. It appends one error log
entry and swaps the choice set for a fallback. The failure is classified by
case-insensitive substring match on the error text; first match wins:

  credentials  "api key"                          → settings shortcut
  quota        "quota", "resource_exhausted"      → settings shortcut
  malformed    "json", "unexpected token"         → retry
  network      "network", "failed to fetch",
               "cannot connect", "timed out"      → retry
  unknown      anything else, error text embedded → retry
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from mythic_realms.models import Choice

FailureKind = Literal["credentials", "quota", "malformed", "network", "unknown"]

SETTINGS_CHOICE = Choice(id="settings", label="Check Settings", intent="system")
API_SETTINGS_CHOICE = Choice(id="settings", label="Check API Settings", intent="system")
RETRY_CHOICE = Choice(id="retry", label="Retry Last Action", intent="rest")

_RULES: list[tuple[FailureKind, tuple[str, ...], str, Choice]] = [
    (
        "credentials", ("api key",),
        "A connection to the arcane energies could not be established. "
        "The realm's configuration seems to be missing.",
        SETTINGS_CHOICE,
    ),
    (
        "quota", ("quota", "resource_exhausted"),
        "Your connection to the arcane energies has been temporarily suspended "
        "due to overuse. Please check your API plan and billing details, or try again later.",
        API_SETTINGS_CHOICE,
    ),
    (
        "malformed", ("json", "unexpected token"),
        "The world's response was garbled and indistinct, like a whisper on the wind. "
        "Perhaps we should try again.",
        RETRY_CHOICE,
    ),
    (
        "network", ("network", "failed to fetch", "cannot connect", "timed out"),
        "The connection to the ethereal plane is unstable. "
        "Please check your connection to the physical world.",
        RETRY_CHOICE,
    ),
]


@dataclass
class TurnFailure:
    kind: FailureKind
    message: str
    choices: list[Choice] = field(default_factory=list)


def classify_error(error: BaseException) -> TurnFailure:
    text = str(error).lower()
    for kind, needles, message, choice in _RULES:
        if any(needle in text for needle in needles):
            return TurnFailure(kind=kind, message=message, choices=[choice.model_copy()])
    return TurnFailure(
        kind="unknown",
        message=f"The world shudders with an unknown force. ({error})",
        choices=[RETRY_CHOICE.model_copy()],
    )
