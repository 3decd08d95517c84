"""FastAPI main application."""

import logging
from contextlib import asynccontextmanager
from datetime import date
from functools import lru_cache
from typing import List, Optional, Tuple

import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..config import settings
from ..core.lot_economy import GridCell, build_grid_cells
from ..core.settlements import Planet, ScavengeSpot, SettlementOptions, generate_planet
from ..core.terrain import TerrainOptions, surface_positions, terrain_colors
from ..core.village_layout import LayoutOptions, generate_village
from ..db.connection import db
from ..db.queries import PlanetQueries, lot_to_cell

# Configure logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    logger.info("Starting Planet API")
    if not db.is_initialized:
        db.initialize()
    logger.info("API startup complete")
    yield
    logger.info("Shutting down Planet API")


app = FastAPI(
    title="Planet Village API",
    description="Deterministic planet terrain, settlements and village lots",
    version="0.1.0",
    lifespan=lifespan,
)


def layout_options() -> LayoutOptions:
    return LayoutOptions(grid_size=settings.village_grid_size)


@lru_cache(maxsize=1)
def get_planet() -> Planet:
    """The planet is a constant of the configuration, so generate it once."""
    return generate_planet(
        radius=settings.planet_radius,
        width_segments=settings.sphere_width_segments,
        height_segments=settings.sphere_height_segments,
        terrain_options=TerrainOptions(seed=settings.terrain_seed),
        settlement_options=SettlementOptions(seed=settings.settlement_seed),
    )


# Request/Response models
class SettlementResponse(BaseModel):
    id: str
    name: str
    position: Tuple[float, float, float]
    terrain: str


class PlanetResponse(BaseModel):
    radius: float
    vertex_count: int
    terrain_counts: dict
    settlements: List[SettlementResponse]


class TerrainResponse(BaseModel):
    vertex_count: int
    terrain: List[str]
    colors: List[str]
    positions: List[Tuple[float, float, float]]


class VillageLayoutResponse(BaseModel):
    village_id: str
    village_name: str
    seed: int
    grid_size: int
    counts: dict
    cells: List[GridCell]


class LotInitializationRequest(BaseModel):
    """Request to initialize a village's lots."""

    village_id: str = Field(..., min_length=1, description="Village identifier")
    village_name: str = Field(..., min_length=1, description="Village display name")


class LotInitializationResponse(BaseModel):
    village_id: str
    created: bool
    count: int
    message: str


class VillageLotsResponse(BaseModel):
    village_id: str
    lots: List[GridCell]


class ScavengeSpotsResponse(BaseModel):
    day: date
    spots: List[ScavengeSpot]


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Planet Village API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    try:
        db.ping()
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        logger.error("Health check failed", error=str(e))
        raise HTTPException(status_code=503, detail="Service unhealthy")


@app.get("/planet", response_model=PlanetResponse)
def get_planet_summary():
    """Terrain totals and settlements of the planet."""
    planet = get_planet()
    return PlanetResponse(
        radius=planet.mesh.radius,
        vertex_count=planet.mesh.vertex_count,
        terrain_counts=planet.terrain_map.counts(),
        settlements=[
            SettlementResponse(
                id=s.id, name=s.name, position=s.position, terrain=s.terrain.label
            )
            for s in planet.settlements
        ],
    )


@app.get("/planet/terrain", response_model=TerrainResponse)
def get_planet_terrain():
    """Per-vertex terrain, colour and relief-displaced position, in mesh vertex order."""
    planet = get_planet()
    return TerrainResponse(
        vertex_count=planet.mesh.vertex_count,
        terrain=planet.terrain_map.labels(),
        colors=terrain_colors(planet.terrain_map),
        positions=[
            tuple(p) for p in surface_positions(planet.mesh, planet.terrain_map).tolist()
        ],
    )


@app.get("/villages/{village_id}/layout", response_model=VillageLayoutResponse)
def preview_village_layout(village_id: str, name: Optional[str] = None):
    """Generate a village layout without storing anything."""
    village_name = name or village_id
    layout = generate_village(village_id, layout_options())
    return VillageLayoutResponse(
        village_id=village_id,
        village_name=village_name,
        seed=layout.seed,
        grid_size=layout.grid_size,
        counts=layout.counts(),
        cells=build_grid_cells(layout, village_id, village_name),
    )


@app.post("/lots/initialize", response_model=LotInitializationResponse)
def initialize_lots(request: LotInitializationRequest):
    """Create a village's lots once; repeated calls are no-ops."""
    with db.get_session() as session:
        result = PlanetQueries(session).initialize_village_lots(
            request.village_id, request.village_name, layout_options()
        )

    return LotInitializationResponse(
        village_id=request.village_id,
        created=result.created,
        count=result.count,
        message="Lots initialized" if result.created else "Lots already initialized",
    )


@app.get("/lots/{village_id}", response_model=VillageLotsResponse)
def get_lots(village_id: str):
    """Stored lots of a village."""
    with db.get_session() as session:
        lots = PlanetQueries(session).get_village_lots(village_id)
        cells = [lot_to_cell(lot) for lot in lots]

    if not cells:
        raise HTTPException(status_code=404, detail="Village lots not initialized")

    return VillageLotsResponse(village_id=village_id, lots=cells)


@app.get("/scavenge/spots", response_model=ScavengeSpotsResponse)
def get_scavenge_spots(day: Optional[date] = None):
    """Today's (or ``day``'s) scavenge spots, created on first request."""
    spot_day = day or date.today()
    with db.get_session() as session:
        spots = PlanetQueries(session).get_or_create_scavenge_spots(
            spot_day,
            radius=settings.planet_radius,
            count=settings.scavenge_spot_count,
        )

    return ScavengeSpotsResponse(day=spot_day, spots=spots)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
