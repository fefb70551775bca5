"""Tests for the FastAPI surface in backend/."""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from backend import sessions
from backend.app import create_app
from mythic_realms.llm import EchoLLM, HttpLLM

TEST_DATA_DIR = Path("data-tests")

DRAFT = {"name": "Bram", "race": "Dwarf", "class": "Fighter", "background": "Soldier"}


@pytest.fixture
def client() -> TestClient:
    app = create_app(TEST_DATA_DIR)
    with TestClient(app) as c:
        c.patch("/api/settings", json={"narrator": {"provider_format": "echo"}})
        yield c


def _new_game(client: TestClient, slot: str = "slot1") -> dict:
    resp = client.post(f"/api/slots/{slot}/new", json=DRAFT)
    assert resp.status_code == 200
    return resp.json()


# ── Health & settings ────────────────────────────────────────


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_settings_round_trip(client):
    resp = client.patch("/api/settings", json={"save_slots": 4})
    assert resp.json()["save_slots"] == 4
    assert client.get("/api/settings").json()["narrator"]["provider_format"] == "echo"


def test_settings_change_rebuilds_live_sessions(client):
    _new_game(client)
    client.patch("/api/settings", json={"narrator": {"provider_format": "koboldcpp"}})
    assert isinstance(sessions.get_session("slot1").llm, HttpLLM)
    client.patch("/api/settings", json={"narrator": {"provider_format": "echo"}})
    assert isinstance(sessions.get_session("slot1").llm, EchoLLM)


# ── Catalog ──────────────────────────────────────────────────


def test_catalog_items(client):
    items = client.get("/api/catalog/items").json()
    assert any(i["id"] == "axe_great" and i["twoHanded"] is True for i in items)


def test_catalog_classes(client):
    assert client.get("/api/catalog/classes").json()["Wizard"]["hd"] == 6


def test_unknown_catalog(client):
    assert client.get("/api/catalog/monsters").status_code == 404


# ── Slots ────────────────────────────────────────────────────


def test_list_slots_empty(client):
    data = client.get("/api/slots").json()
    assert [s["exists"] for s in data["slots"]] == [False, False, False]
    assert data["lastPlayed"] is None


def test_new_game(client):
    state = _new_game(client)
    assert state["player"]["name"] == "Bram"
    assert state["player"]["class"] == "Fighter"
    assert state["choices"][0]["id"] == "enter"

    data = client.get("/api/slots").json()
    assert data["slots"][0]["exists"] is True
    assert data["slots"][0]["playerName"] == "Bram"
    assert data["lastPlayed"] == "slot1"


def test_new_game_invalid_draft(client):
    resp = client.post("/api/slots/slot1/new", json={**DRAFT, "class": "Juggler"})
    assert resp.status_code == 422


def test_get_missing_slot(client):
    assert client.get("/api/slots/slot2").status_code == 404


def test_invalid_slot_id(client):
    assert client.get("/api/slots/bad.id").status_code == 400


def test_load_and_delete(client):
    _new_game(client, "slot2")
    assert client.post("/api/slots/slot2/load").json()["player"]["name"] == "Bram"
    assert client.delete("/api/slots/slot2").json() == {"ok": True}
    assert client.get("/api/slots/slot2").status_code == 404
    assert client.delete("/api/slots/slot2").status_code == 404


def test_load_missing_slot(client):
    assert client.post("/api/slots/slot3/load").status_code == 404


def test_save(client):
    _new_game(client)
    assert client.post("/api/slots/slot1/save").json() == {"ok": True}


async def test_slot_replacement_refused_during_turn():
    app = create_app(TEST_DATA_DIR)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        await ac.patch("/api/settings", json={"narrator": {"provider_format": "echo"}})
        assert (await ac.post("/api/slots/slot1/new", json=DRAFT)).status_code == 200

        release = asyncio.Event()
        echo = EchoLLM()

        async def slow_llm(stage: str, prompt: str) -> str:
            await release.wait()
            return await echo(stage, prompt)

        session = sessions.get_session("slot1")
        session.llm = slow_llm
        turn = asyncio.create_task(ac.post("/api/slots/slot1/turn", json={"action": "wait"}))
        for _ in range(100):
            if session.processing:
                break
            await asyncio.sleep(0)
        assert session.processing

        resp = await ac.post("/api/slots/slot1/new", json={**DRAFT, "name": "Other"})
        assert resp.status_code == 409
        assert (await ac.post("/api/slots/slot1/load")).status_code == 409
        assert (await ac.delete("/api/slots/slot1")).status_code == 409

        release.set()
        assert (await turn).status_code == 200

    assert sessions.storage().load_game("slot1").player.name == "Bram"
    assert sessions.get_session("slot1").state.player.name == "Bram"


# ── Turns ────────────────────────────────────────────────────


def test_turn_with_echo_narrator(client):
    _new_game(client)
    resp = client.post("/api/slots/slot1/turn", json={"action": "Enter Town"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["state"]["log"][-1]["text"] == "You Enter Town."
    assert data["system"] is None


def test_turn_empty_action(client):
    _new_game(client)
    assert client.post("/api/slots/slot1/turn", json={"action": ""}).status_code == 400


def test_turn_system_choice(client):
    _new_game(client)
    choice = {"id": "settings", "label": "Check Settings", "intent": "system"}
    data = client.post("/api/slots/slot1/turn", json={"action": "", "choice": choice}).json()
    assert data["system"] == "settings"


def test_turn_opens_shop_then_trade(client):
    _new_game(client)
    reply = json.dumps({
        "narration": "The smith shows you her wares.",
        "patch": {"shop": {"name": "Smithy", "inventory": ["dagger_iron"]}},
    })
    with patch.object(EchoLLM, "__call__", AsyncMock(return_value=reply)):
        state = client.post("/api/slots/slot1/turn", json={"action": "visit smith"}).json()["state"]
    assert state["view"] == "shop"

    data = client.post("/api/slots/slot1/shop/buy", json={"index": 0}).json()
    assert data["bought"] is True
    assert data["state"]["player"]["currency"] == 800

    last = len(data["state"]["player"]["inventory"]) - 1
    state = client.post("/api/slots/slot1/shop/sell", json={"index": last}).json()
    assert state["player"]["currency"] == 900

    state = client.post("/api/slots/slot1/shop/close").json()
    assert state["view"] == "exploration"
    assert state["shop"] is None


def test_buy_without_shop(client):
    _new_game(client)
    assert client.post("/api/slots/slot1/shop/buy", json={"index": 0}).status_code == 400


# ── Equipment ────────────────────────────────────────────────


def test_equip_and_unequip(client):
    _new_game(client)
    state = client.post("/api/slots/slot1/equip", json={"index": 2}).json()
    assert state["player"]["equipment"]["chest"]["id"] == "armor_chain"
    assert state["player"]["ac"] == 16

    state = client.post("/api/slots/slot1/unequip", json={"slot": "chest"}).json()
    assert "chest" not in state["player"]["equipment"]


def test_equip_bad_index(client):
    _new_game(client)
    assert client.post("/api/slots/slot1/equip", json={"index": 50}).status_code == 400


def test_unequip_unknown_slot(client):
    _new_game(client)
    assert client.post("/api/slots/slot1/unequip", json={"slot": "tail"}).status_code == 400


def test_busy_session_conflict(client):
    _new_game(client)
    sessions.get_session("slot1")._processing = True
    assert client.post("/api/slots/slot1/turn", json={"action": "x"}).status_code == 409
    assert client.post("/api/slots/slot1/save").status_code == 409


def test_settings_reject_unknown_provider(client):
    resp = client.patch("/api/settings", json={"narrator": {"provider_format": "smoke-signals"}})
    assert resp.status_code == 400
    assert client.get("/api/settings").json()["narrator"]["provider_format"] == "echo"


def test_settings_reject_bad_slot_count(client):
    assert client.patch("/api/settings", json={"save_slots": 0}).status_code == 400
