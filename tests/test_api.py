"""Test the FastAPI endpoints."""
import asyncio
import pytest
from httpx import ASGITransport, AsyncClient
import battle_api.app as app_module
from battle_api.app import app
from battle_runtime.config import get_settings


def client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_root():
    async with client() as ac:
        response = await ac.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


@pytest.mark.asyncio
async def test_battle_not_started():
    app_module.runner = None
    async with client() as ac:
        response = await ac.get("/battle/local/state")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_start_state_events_stop():
    """Start a battle, read it back, then abort it."""
    async with client() as ac:
        response = await ac.post("/battle/start", json={"seed": 123, "points": 300})
        assert response.status_code == 200
        assert response.json() == {"battle_id": "local"}

        # Wait a moment for a round to be played
        await asyncio.sleep(0.1)

        state = (await ac.get("/battle/local/state")).json()
        assert state["status"] in ("running", "player_wins", "computer_wins", "stalemate")
        assert {u["side"] for u in state["units"]} <= {"PLAYER", "COMPUTER"}
        assert all(u["alive"] for u in state["units"])

        events = (await ac.get("/battle/local/events?since=0&limit=100000")).json()
        assert "next_offset" in events
        assert events["next_offset"] == len(events["events"])

        stopped = await ac.post("/battle/local/stop")
        assert stopped.status_code == 200
        assert stopped.json()["status"] in ("aborted", "player_wins", "computer_wins", "stalemate")


@pytest.mark.asyncio
async def test_time_control():
    async with client() as ac:
        await ac.post("/battle/start", json={"seed": 1, "points": 100})
        response = await ac.post("/battle/local/time-control", params={"time_compression": 2.0})
        assert response.json() == {"time_compression": 2.0}
        response = await ac.get("/battle/local/time-control")
        assert response.json() == {"time_compression": 2.0}
        await ac.post("/battle/local/stop")


@pytest.mark.asyncio
async def test_path_query():
    async with client() as ac:
        response = await ac.post("/path", json={
            "start": [0, 0], "goal": [2, 0], "blocked": [[1, 0]], "margin": 1, "jump": False,
        })
    assert response.status_code == 200
    assert response.json() == {"path": [[0, 0], [0, 1], [1, 1], [2, 1], [2, 0]], "steps": 4}


@pytest.mark.asyncio
async def test_path_query_without_path():
    async with client() as ac:
        response = await ac.post("/path", json={
            "start": [0, 0], "goal": [5, 5], "blocked": [[5, 5]],
        })
    assert response.json() == {"path": [], "steps": -1}


@pytest.mark.asyncio
async def test_path_query_off_grid():
    async with client() as ac:
        response = await ac.post("/path", json={"start": [0, 0], "goal": [30, 0]})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_start_uses_configured_default_seed(monkeypatch):
    seeds = []
    make_engine = app_module._make_engine

    def recording_make_engine(seed, points):
        seeds.append(seed)
        return make_engine(seed, points)

    monkeypatch.setenv("BATTLE_DEFAULT_SEED", "7")
    monkeypatch.setattr(app_module, "_make_engine", recording_make_engine)
    get_settings.cache_clear()
    try:
        async with client() as ac:
            await ac.post("/battle/start", json={"points": 100})
            await ac.post("/battle/start", json={"seed": 3, "points": 100})
            await ac.post("/battle/local/stop")
    finally:
        get_settings.cache_clear()
    assert seeds == [7, 3]
