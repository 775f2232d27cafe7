import logging
from contextlib import asynccontextmanager
from typing import Tuple
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from battle_engine.attack import AttackProgram
from battle_engine.engine import BattleEngine
from battle_engine.grid import GridBoundsError, occupancy_from_cells
from battle_engine.model import Army, PRESET_WIDTH, UNIT_TYPES, WIDTH
from battle_engine.pathfinding import SearchWindow, UnitTargetPathFinder, find_path
from battle_engine.preset import generate_preset
from battle_runtime.battlelog import LoggingBattleLog
from battle_runtime.config import get_settings
from battle_runtime.runner import BattleRunner
from .schemas import EventsResponse, PathRequest, PathResponse, StartRequest

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

runner: BattleRunner | None = None

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Stop any running battle on shutdown."""
    global runner
    yield
    if runner:
        await runner.stop()
        runner = None

app = FastAPI(title="Tactical Battle Engine API", lifespan=lifespan)

# Enable CORS for development (React runs on different port)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174", "http://localhost:5175"],  # Vite dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _make_armies(seed: int, points: int) -> Tuple[Army, Army]:
    """Generate the player army on the left edge and the computer army on the right."""
    settings = get_settings()
    templates = list(UNIT_TYPES.values())
    player = generate_preset(templates, points, seed=seed,
                             max_per_type=settings.max_units_per_type)
    computer = generate_preset(templates, points, seed=seed + 1, x_offset=WIDTH - PRESET_WIDTH,
                               max_per_type=settings.max_units_per_type)
    return player, computer

def _make_engine(seed: int, points: int) -> BattleEngine:
    settings = get_settings()
    path_finder = UnitTargetPathFinder(margin=settings.search_margin, jump=settings.jump_search,
                                       max_expansions=settings.expansion_budget)
    player, computer = _make_armies(seed, points)
    return BattleEngine(player, computer, AttackProgram(path_finder), LoggingBattleLog())

def _require_runner() -> BattleRunner:
    if not runner:
        raise HTTPException(400, "Battle not started")
    return runner

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Tactical Battle Engine API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.post("/battle/start")
async def start_battle(req: StartRequest):
    """Start a new battle with generated armies."""
    global runner
    if runner:
        await runner.stop()
    settings = get_settings()
    points = settings.army_points if req.points is None else req.points
    seed = settings.default_seed if req.seed is None else req.seed
    eng = _make_engine(seed, points)
    runner = BattleRunner(eng, round_ms=settings.round_ms, time_compression=settings.time_compression,
                          max_rounds=settings.round_limit)
    await runner.start()
    return {"battle_id": "local"}

@app.post("/battle/local/stop")
async def stop_battle():
    """Abort the running battle between rounds."""
    r = _require_runner()
    await r.stop()
    return {"status": r.engine.status.value, "round": r.engine.round}

@app.get("/battle/local/state")
async def get_state():
    """Get current battle state snapshot."""
    r = _require_runner()
    roster = await r.snapshot()
    return {
        "round": r.engine.round,
        "status": r.engine.status.value,
        "units": [
            {
                "name": c.unit.name,
                "side": c.side,
                "unit_type": c.unit.unit_type,
                "pos": list(c.unit.pos),
                "health": c.unit.health,
                "base_attack": c.unit.base_attack,
                "alive": c.unit.alive,
            } for c in roster
        ]
    }

@app.get("/battle/local/events")
async def get_events(since: int = 0, limit: int = 500):
    """Get events since offset."""
    r = _require_runner()
    evts, next_offset = r.events.since(since, limit)
    return EventsResponse(
        next_offset=next_offset,
        events=[{"kind": e.kind, "round": e.round, "data": e.data} for e in evts]
    )

@app.post("/battle/local/time-control")
async def set_time_control(time_compression: float):
    """Set simulation time compression (1.0 = real-time, higher = faster)."""
    r = _require_runner()
    r.set_time_compression(time_compression)
    return {"time_compression": r.time_compression}

@app.get("/battle/local/time-control")
async def get_time_control():
    """Get current time compression setting."""
    r = _require_runner()
    return {"time_compression": r.time_compression}

@app.post("/path", response_model=PathResponse)
async def query_path(req: PathRequest):
    """Shortest 4-directional path between two cells around blocked cells."""
    try:
        occupancy = occupancy_from_cells(req.blocked)
        window = None if req.margin is None else SearchWindow.around(req.start, req.goal, req.margin)
        path = find_path(req.start, req.goal, occupancy, window, jump=req.jump,
                         max_expansions=get_settings().expansion_budget)
    except GridBoundsError as exc:
        raise HTTPException(422, str(exc))
    return PathResponse(path=path, steps=len(path) - 1)
