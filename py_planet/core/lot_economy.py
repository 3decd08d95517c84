"""
Lot addresses and prices.

Both are pure functions of grid position (and village name for the address),
so the server and the client always quote the same lot the same way.
"""

import math
from typing import List, Optional

import structlog
from pydantic import BaseModel, Field, computed_field

from .village_layout import GRID_SIZE, VillageLayout

logger = structlog.get_logger()

STREET_NAMES = [
    "Main St", "Oak Ave", "Elm Blvd", "Pine Rd", "Maple Dr",
    "Cedar Ln", "Birch Way", "Willow Ct", "Ash St", "Spruce Ave",
]

BASE_LOT_COST = 100
APARTMENT_COST_MULTIPLIER = 1.5


def generate_address(x: int, z: int, village_name: str) -> str:
    """
    Street address of a lot.

    Streets follow ``z`` and house numbers combine ``x`` with ``z mod 10``, so
    addresses are unique within a village only while the grid is at most 10
    cells deep.
    """
    street = STREET_NAMES[z % len(STREET_NAMES)]
    number = (x + 1) * 10 + (z % 10)
    return f"{number} {street}, {village_name}"


def generate_lot_cost(x: int, z: int, is_apartment_zone: bool, grid_size: int = GRID_SIZE) -> int:
    """Price in coins: dearer toward the centre, 1.5x inside apartment zones."""
    half = grid_size / 2
    center_distance = math.sqrt((x - half) ** 2 + (z - half) ** 2)
    location_multiplier = 1 + (half - center_distance) / grid_size * 0.5
    apartment_multiplier = APARTMENT_COST_MULTIPLIER if is_apartment_zone else 1
    return math.floor(BASE_LOT_COST * location_multiplier * apartment_multiplier)


class GridCell(BaseModel):
    """One village lot as handed to storage and rendering."""

    village_id: str
    village_name: str
    grid_x: int = Field(ge=0)
    grid_z: int = Field(ge=0)
    address: str
    cost: int
    is_road: bool = False
    is_pathway: bool = False
    is_park: bool = False
    is_apartment_zone: bool = False
    owner_id: Optional[str] = None
    house_type: Optional[str] = None
    floor_count: int = 1

    @computed_field
    @property
    def kind(self) -> str:
        if self.is_road:
            return "road"
        if self.is_pathway:
            return "pathway"
        if self.is_park:
            return "park"
        return "buildable"

    @property
    def is_buildable(self) -> bool:
        return self.kind == "buildable"


def build_grid_cells(layout: VillageLayout, village_id: str, village_name: str) -> List[GridCell]:
    """All cells of ``layout`` in x-major order with address and cost filled in."""
    n = layout.grid_size
    cells = []
    for x in range(n):
        for z in range(n):
            is_apartment_zone = bool(layout.apartment_zones[x, z])
            cells.append(
                GridCell(
                    village_id=village_id,
                    village_name=village_name,
                    grid_x=x,
                    grid_z=z,
                    address=generate_address(x, z, village_name),
                    cost=generate_lot_cost(x, z, is_apartment_zone, n),
                    is_road=bool(layout.roads[x, z]),
                    is_pathway=bool(layout.pathways[x, z]),
                    is_park=bool(layout.parks[x, z]),
                    is_apartment_zone=is_apartment_zone,
                )
            )

    logger.debug("Grid cells built", village_id=village_id, cells=len(cells))
    return cells
