"""
Settlement and scavenge spot placement on the planet.

Settlements are rejection-sampled on land and mountain vertices with a minimum
chord spacing between markers. Scavenge spots are scattered uniformly over the
sphere from a seed derived from the calendar day, so every caller asking about
the same day gets the same spots.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .lcg_prng import LcgPRNG
from .seeds import SETTLEMENT_SEED, date_to_seed
from .sphere_mesh import SphereMesh, chord_distances
from .terrain import TerrainClassifier, TerrainMap, TerrainOptions, TerrainType

logger = structlog.get_logger()

SETTLEMENT_NAMES = [
    "Panda Village", "Bamboo Grove", "Misty Haven", "Zen Settlement",
    "Sunset Shores", "Coral Cove", "Cloud Peak", "Mystic Valley",
    "Frozen Outpost", "Green Meadow", "River Bend", "Forest Edge",
    "Mountain View", "Peaceful Plains", "Golden Fields", "Silver Lake",
    "Crystal Springs", "Emerald Hills", "Diamond Point", "Ruby Ridge",
]

SCAVENGE_EMOJIS = ["🔍", "🗺️", "💎", "⭐", "🎁", "🏆"]


class SettlementOptions(BaseModel):
    """Settlement placement options."""

    model_config = ConfigDict(frozen=True)

    seed: int = Field(default=SETTLEMENT_SEED, ge=0, description="Placement PRNG seed")
    land_vertices_per_settlement: int = Field(
        default=50, ge=1, description="One settlement per this many land vertices"
    )
    max_settlements: int = Field(default=20, ge=0, description="Hard cap on settlements")
    min_spacing: float = Field(
        default=0.4, description="Minimum chord distance between markers (x radius)"
    )
    max_attempts: int = Field(default=100, ge=1, description="Rejection sampling attempts per slot")
    marker_offset: float = Field(default=0.05, description="Marker height above the surface")


class Settlement(BaseModel):
    """Village marker on the planet surface."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable settlement identifier")
    name: str = Field(description="Display name")
    position: Tuple[float, float, float] = Field(description="Marker position")
    terrain: TerrainType = Field(description="Terrain under the marker")
    vertex_index: int = Field(description="Mesh vertex the marker sits on")


class ScavengeSpot(BaseModel):
    """One of the day's scavenge hunt markers."""

    model_config = ConfigDict(frozen=True)

    id: str
    position: Tuple[float, float, float]
    emoji: str


class SettlementPlacer:
    """Places named settlements on land with spacing constraints."""

    def __init__(
        self,
        mesh: SphereMesh,
        terrain_map: TerrainMap,
        options: Optional[SettlementOptions] = None,
    ) -> None:
        self.mesh = mesh
        self.terrain_map = terrain_map
        self.options = options or SettlementOptions()

    def place(self) -> List[Settlement]:
        """
        Rejection-sample one vertex per settlement slot.

        A slot whose attempts run out is skipped, so fewer settlements than
        the target is a normal outcome.

        Returns:
            Placed settlements in slot order
        """
        opts = self.options
        radius = self.mesh.radius
        rng = LcgPRNG(opts.seed)
        points = self.mesh.positions64

        land_vertices = self.terrain_map.indices_of(TerrainType.LAND, TerrainType.MOUNTAIN)
        target = min(len(land_vertices) // opts.land_vertices_per_settlement, opts.max_settlements)
        min_distance = radius * opts.min_spacing

        logger.info(
            "Placing settlements",
            seed=opts.seed,
            land_vertices=len(land_vertices),
            target=target,
        )

        settlements: List[Settlement] = []
        placed = np.empty((0, 3))
        used = set()

        for slot in range(min(target, len(SETTLEMENT_NAMES))):
            chosen = None
            for _ in range(opts.max_attempts):
                vertex_index = int(land_vertices[rng.randrange(len(land_vertices))])
                too_close = bool(
                    len(placed)
                    and np.any(chord_distances(placed, points[vertex_index]) < min_distance)
                )
                if not too_close and vertex_index not in used:
                    chosen = vertex_index
                    used.add(vertex_index)
                    break

            if chosen is None:
                logger.debug("Settlement slot skipped", slot=slot, attempts=opts.max_attempts)
                continue

            position = _lift(points[chosen], radius + opts.marker_offset)
            placed = np.vstack([placed, position])
            settlements.append(
                Settlement(
                    id=f"village-{slot}",
                    name=SETTLEMENT_NAMES[slot],
                    position=tuple(float(c) for c in position),
                    terrain=self.terrain_map[chosen],
                    vertex_index=chosen,
                )
            )

        logger.info("Settlements placed", placed=len(settlements), target=target)
        return settlements


def _lift(point: np.ndarray, height: float) -> np.ndarray:
    """Normalize ``point`` and scale it to ``height``."""
    length = math.sqrt(point[0] * point[0] + point[1] * point[1] + point[2] * point[2])
    inverse = 1 / (length or 1)
    return point * inverse * height


def generate_scavenge_spots(
    day: Union[date, datetime],
    radius: float = 2.0,
    count: int = 3,
) -> List[ScavengeSpot]:
    """
    Generate the canonical scavenge spots for a calendar day.

    Args:
        day: Calendar day (a datetime is reduced to its date)
        radius: Planet radius; spots float at 1.1x this
        count: Number of spots

    Returns:
        ``count`` spots, identical for every call with the same day
    """
    if isinstance(day, datetime):
        day = day.date()

    rng = LcgPRNG(date_to_seed(day))
    spot_radius = radius * 1.1
    spots = []

    for k in range(count):
        theta = rng.random() * math.pi * 2
        phi = math.acos(2 * rng.random() - 1)
        position = (
            spot_radius * math.sin(phi) * math.cos(theta),
            spot_radius * math.sin(phi) * math.sin(theta),
            spot_radius * math.cos(phi),
        )
        emoji = rng.choice(SCAVENGE_EMOJIS)
        spots.append(
            ScavengeSpot(id=f"scavenge-{day.isoformat()}-{k}", position=position, emoji=emoji)
        )

    logger.debug("Scavenge spots generated", day=day.isoformat(), count=len(spots))
    return spots


@dataclass(eq=False)
class Planet:
    """Mesh, terrain and settlements generated together."""

    mesh: SphereMesh
    terrain_map: TerrainMap
    settlements: List[Settlement]


def generate_planet(
    radius: float = 2.0,
    width_segments: int = 64,
    height_segments: int = 32,
    terrain_options: Optional[TerrainOptions] = None,
    settlement_options: Optional[SettlementOptions] = None,
) -> Planet:
    """Build the sphere, classify its terrain and place settlements on it."""
    mesh = SphereMesh(radius=radius, width_segments=width_segments, height_segments=height_segments)
    terrain_map = TerrainClassifier(mesh, terrain_options).generate()
    settlements = SettlementPlacer(mesh, terrain_map, settlement_options).place()
    return Planet(mesh=mesh, terrain_map=terrain_map, settlements=settlements)
