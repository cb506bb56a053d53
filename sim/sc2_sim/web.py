"""
SC2 Build Order Simulator - Web API
====================================
FastAPI server exposing the simulator as JSON endpoints.

Usage:
    python -m sc2_sim.web
    python cli.py web [--port 8080]
"""

import logging
from pathlib import Path
from typing import Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
import uvicorn
import yaml

from sc2_sim.data import RACES, TRAINED_BY, UNITS, UPGRADES, ACTIONS, names_for_race
from sc2_sim.engine import SimulationEngine
from sc2_sim.format import fmt_time
from sc2_sim.income import IncomeModel
from sc2_sim.io import (
    build_order_from_dict, build_order_to_dict, events_to_list,
    load_build_order, save_build_order,
)
from sc2_sim.models import BuildOrder, BuildOrderError, SimResult

logger = logging.getLogger(__name__)

# Paths
DATA_DIR = Path(__file__).parent.parent / "data"
BUILD_ORDERS_DIR = DATA_DIR / "build_orders"

# Shared by every request; cached values never change
INCOME = IncomeModel()

app = FastAPI(title="SC2 Build Order Simulator")


# ---------------------------------------------------------------------------
# Pydantic models for request/response
# ---------------------------------------------------------------------------

class BuildOrderIn(BaseModel):
    name: str = "Untitled"
    race: str = "terran"
    description: str = ""
    settings: dict[str, float] = {}
    build_order: list[Union[str, dict]] = []


class SimulateRequest(BaseModel):
    build_order: Optional[BuildOrderIn] = None
    filename: Optional[str] = None


class CompareRequest(BaseModel):
    build_orders: list[BuildOrderIn] = []
    filenames: list[str] = []


class SaveRequest(BaseModel):
    build_order: BuildOrderIn
    filename: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _bo_from_input(bo_in: BuildOrderIn) -> BuildOrder:
    """Convert Pydantic model to internal BuildOrder."""
    try:
        return build_order_from_dict({
            "name": bo_in.name,
            "race": bo_in.race,
            "description": bo_in.description,
            "settings": bo_in.settings,
            "build_order": bo_in.build_order,
        })
    except BuildOrderError as e:
        raise HTTPException(400, str(e))


def _resolve_file(filename: str) -> Path:
    if Path(filename).name != filename:
        raise HTTPException(400, f"Invalid filename: {filename}")
    filepath = BUILD_ORDERS_DIR / filename
    if not filepath.exists():
        raise HTTPException(404, f"Build order not found: {filename}")
    return filepath


def _load_file(filename: str) -> BuildOrder:
    filepath = _resolve_file(filename)
    try:
        return load_build_order(filepath)
    except (BuildOrderError, yaml.YAMLError) as e:
        raise HTTPException(400, f"{filename}: {e}")


def _make_engine(bo: BuildOrder) -> SimulationEngine:
    try:
        return SimulationEngine.from_build_order(bo, income=INCOME)
    except BuildOrderError as e:
        raise HTTPException(400, str(e))


def _simulate(bo: BuildOrder) -> SimResult:
    return _make_engine(bo).run_until_end()


def _result_to_dict(result: SimResult) -> dict:
    """Convert SimResult to JSON-serializable dict."""
    blocked = result.blocked_item
    return {
        "build_order_name": result.build_order_name,
        "race": result.race,
        "status": result.status.value,
        "completed": result.completed,
        "bo_index": result.bo_index,
        "bo_length": result.bo_length,
        "blocked_item": {"name": blocked.name, "type": blocked.type} if blocked else None,
        "frame": result.frame,
        "time": fmt_time(result.frame),
        "minerals": result.minerals,
        "vespene": result.vespene,
        "supply_used": result.supply_used,
        "supply_left": result.supply_left,
        "supply_cap": result.supply_cap,
        "workers_minerals": result.workers_minerals,
        "workers_vespene": result.workers_vespene,
        "events": events_to_list(result),
        "unit_counts": result.unit_counts,
        "upgrades": result.upgrades,
    }


# ---------------------------------------------------------------------------
# API Endpoints
# ---------------------------------------------------------------------------

@app.get("/api/units")
def api_units(race: str = "terran"):
    """Return the catalog of build order names for a race."""
    if race not in RACES:
        raise HTTPException(400, f"Unknown race: {race}")
    catalog = {}
    for item_type, names in names_for_race(race).items():
        for name in sorted(names):
            entry = {"type": item_type}
            if name in TRAINED_BY:
                u = UNITS[name]
                entry.update(minerals=u.minerals, vespene=u.vespene,
                             supply=u.supply, build_seconds=u.build_seconds)
            elif name in UPGRADES:
                u = UPGRADES[name]
                entry.update(minerals=u.minerals, vespene=u.vespene,
                             build_seconds=u.research_seconds)
            else:
                entry["description"] = ACTIONS[name].description
            catalog[name] = entry
    return {"race": race, "units": catalog}


@app.get("/api/build-orders")
def api_build_orders():
    """List saved YAML files."""
    files = []
    if BUILD_ORDERS_DIR.exists():
        for f in sorted(BUILD_ORDERS_DIR.glob("*.yaml")):
            files.append({"filename": f.name, "stem": f.stem})
    return {"build_orders": files}


@app.get("/api/build-orders/{filename}")
def api_build_order_detail(filename: str):
    """Load a specific build order."""
    return build_order_to_dict(_load_file(filename))


@app.post("/api/simulate")
def api_simulate(req: SimulateRequest):
    """Run simulation and return result."""
    if req.filename:
        bo = _load_file(req.filename)
    elif req.build_order:
        bo = _bo_from_input(req.build_order)
    else:
        raise HTTPException(400, "Provide either build_order or filename")
    return _result_to_dict(_simulate(bo))


@app.post("/api/compare")
def api_compare(req: CompareRequest):
    """Simulate multiple BOs and return all results."""
    bos = [_bo_from_input(bo_in) for bo_in in req.build_orders]
    bos += [_load_file(fname) for fname in req.filenames]
    return {"results": [_result_to_dict(_simulate(bo)) for bo in bos]}


@app.post("/api/save")
def api_save(req: SaveRequest):
    """Save build order to YAML."""
    bo = _bo_from_input(req.build_order)
    # Reject orders the engine would refuse before writing them out
    _make_engine(bo)
    filename = req.filename
    if not filename.endswith(".yaml"):
        filename += ".yaml"
    if Path(filename).name != filename:
        raise HTTPException(400, f"Invalid filename: {filename}")
    BUILD_ORDERS_DIR.mkdir(parents=True, exist_ok=True)
    save_build_order(bo, BUILD_ORDERS_DIR / filename)
    logger.info("saved build order %s to %s", bo.name, filename)
    return {"saved": filename}


def start_server(port: int = 8080):
    """Start the uvicorn server."""
    print(f"Starting SC2 Build Order Simulator at http://localhost:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    start_server()
