"""
Terrain classification for the planet sphere.

Process:
1. Seed continents away from the poles and grow them outwards
2. Raise mountains on land near the top of the |y| ranking
3. Freeze ice on water in the near-pole band
4. Smooth the result against each previous snapshot

Growing from seeds gives contiguous continents instead of salt-and-pepper
noise. Smoothing trades exact quotas for coherent coastlines, so final counts
only approximate the targets.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .lcg_prng import LcgPRNG
from .seeds import TERRAIN_SEED
from .sphere_mesh import SphereMesh

logger = structlog.get_logger()


class TerrainType(IntEnum):
    """Terrain assigned to a sphere vertex."""

    WATER = 0
    LAND = 1
    ICE = 2
    MOUNTAIN = 3

    @property
    def label(self) -> str:
        return self.name.lower()


TERRAIN_COLORS: Dict[TerrainType, str] = {
    TerrainType.LAND: "#4ade80",
    TerrainType.WATER: "#3b82f6",
    TerrainType.ICE: "#e0e7ff",
    TerrainType.MOUNTAIN: "#78716c",
}

# Radial relief applied by the renderer
TERRAIN_HEIGHT_MULTIPLIERS: Dict[TerrainType, float] = {
    TerrainType.WATER: 1.0,
    TerrainType.LAND: 1.01,
    TerrainType.ICE: 0.99,
    TerrainType.MOUNTAIN: 1.04,
}


class TerrainOptions(BaseModel):
    """Terrain generation options."""

    model_config = ConfigDict(frozen=True)

    seed: int = Field(default=TERRAIN_SEED, ge=0, description="Terrain PRNG seed")

    # Target ratios of the vertex count
    land_ratio: float = Field(default=0.25, ge=0, le=1, description="Land quota")
    mountain_ratio: float = Field(default=0.05, ge=0, le=1, description="Mountain quota")
    ice_ratio: float = Field(default=0.05, ge=0, le=1, description="Ice quota")

    # Continent growth (fractions of the planet radius)
    vertices_per_continent: int = Field(
        default=15, ge=1, description="Land quota divisor giving the continent seed count"
    )
    seed_pole_limit: float = Field(
        default=0.8, description="Continent seeds need |y| below this"
    )
    growth_radius: float = Field(default=0.25, description="Growth reach from a seed")
    growth_pole_limit: float = Field(
        default=0.85, description="Grown land needs |y| below this"
    )
    growth_chance: float = Field(
        default=0.6, ge=0, le=1, description="Growth chance at zero distance"
    )

    # Elevation-ranked placement
    mountain_window: int = Field(
        default=200, ge=1, description="Mountain draws come from this many top-ranked vertices"
    )
    ice_window: int = Field(
        default=100, ge=1, description="Ice draws come from this many top-ranked vertices"
    )
    ice_band_min: float = Field(default=0.6, description="Ice needs |y| above this")
    ice_band_max: float = Field(default=0.9, description="Ice needs |y| below this")

    # Smoothing
    smoothing_iterations: int = Field(default=3, ge=0)
    smoothing_radius: float = Field(default=0.3, description="Neighbor reach")
    smoothing_pole_limit: float = Field(
        default=0.95, description="Vertices with |y| above this are never smoothed"
    )
    erode_land_chance: float = Field(default=0.15, ge=0, le=1)
    expand_land_chance: float = Field(default=0.4, ge=0, le=1)
    # land -> water when land neighbors < erode_max_land and water neighbors > erode_min_water
    erode_max_land: int = Field(default=3)
    erode_min_water: int = Field(default=4)
    # water -> land when water neighbors < expand_max_water and land neighbors > expand_min_land
    expand_max_water: int = Field(default=2)
    expand_min_land: int = Field(default=4)


@dataclass(eq=False)
class TerrainMap:
    """Per-vertex terrain for one generation call."""

    terrain: np.ndarray
    land_target: int
    mountain_target: int
    ice_target: int

    def __len__(self) -> int:
        return len(self.terrain)

    def __getitem__(self, index: int) -> TerrainType:
        return TerrainType(int(self.terrain[index]))

    def counts(self) -> Dict[str, int]:
        return {
            t.label: int(np.count_nonzero(self.terrain == t)) for t in TerrainType
        }

    def indices_of(self, *types: TerrainType) -> np.ndarray:
        """Vertex indices carrying any of ``types``, ascending."""
        return np.nonzero(np.isin(self.terrain, [int(t) for t in types]))[0]

    def labels(self) -> List[str]:
        return [TerrainType(int(t)).label for t in self.terrain]


class TerrainClassifier:
    """Assigns land, water, ice and mountain to every vertex of a sphere mesh."""

    def __init__(self, mesh: SphereMesh, options: Optional[TerrainOptions] = None) -> None:
        self.mesh = mesh
        self.options = options or TerrainOptions()
        self.radius = mesh.radius
        self.abs_y = mesh.abs_y

    def generate(self) -> TerrainMap:
        """Run every stage with a fresh PRNG seeded from the options."""
        opts = self.options
        total = self.mesh.vertex_count
        rng = LcgPRNG(opts.seed)

        land_target = int(total * opts.land_ratio)
        mountain_target = int(total * opts.mountain_ratio)
        ice_target = int(total * opts.ice_ratio)

        logger.info(
            "Generating terrain",
            seed=opts.seed,
            vertices=total,
            land_target=land_target,
            mountain_target=mountain_target,
            ice_target=ice_target,
        )

        terrain = np.full(total, TerrainType.WATER, dtype=np.int8)

        land = self._grow_continents(terrain, rng, land_target)
        ranking = self._rank_by_elevation()
        mountains = self._place_ranked(
            terrain, rng, ranking, mountain_target,
            window=opts.mountain_window,
            required=TerrainType.LAND,
            target_type=TerrainType.MOUNTAIN,
        )
        ice = self._place_ranked(
            terrain, rng, ranking, ice_target,
            window=opts.ice_window,
            required=TerrainType.WATER,
            target_type=TerrainType.ICE,
            band=(self.radius * opts.ice_band_min, self.radius * opts.ice_band_max),
        )

        logger.info("Terrain features placed", land=land, mountains=mountains, ice=ice)

        for _ in range(opts.smoothing_iterations):
            terrain = self._smooth(terrain, rng)

        result = TerrainMap(
            terrain=terrain,
            land_target=land_target,
            mountain_target=mountain_target,
            ice_target=ice_target,
        )
        logger.info("Terrain generation complete", prng_calls=rng.call_count, **result.counts())
        return result

    def _grow_continents(self, terrain: np.ndarray, rng: LcgPRNG, land_target: int) -> int:
        """Scatter continent seeds then grow them breadth-first. Returns land count."""
        opts = self.options
        total = len(terrain)
        seed_limit = self.radius * opts.seed_pole_limit

        assigned = 0
        queue = deque()

        num_continents = land_target // opts.vertices_per_continent
        for _ in range(num_continents):
            if assigned >= land_target:
                break
            index = rng.randrange(total)
            if terrain[index] == TerrainType.WATER and self.abs_y[index] < seed_limit:
                terrain[index] = TerrainType.LAND
                queue.append(index)
                assigned += 1

        seeds = assigned
        reach = self.radius * opts.growth_radius
        pole_limit = self.radius * opts.growth_pole_limit

        while assigned < land_target and queue:
            seed_index = queue.popleft()
            distances = self.mesh.distances_from(seed_index)

            # Only the visited vertex itself can change during a scan, so the
            # candidate set can be taken up front
            mask = (
                (distances < reach)
                & (self.abs_y < pole_limit)
                & (terrain == TerrainType.WATER)
            )
            mask[seed_index] = False

            for j in np.nonzero(mask)[0]:
                if assigned >= land_target:
                    break
                chance = opts.growth_chance * (1 - distances[j] / reach)
                if rng.random() < chance:
                    terrain[j] = TerrainType.LAND
                    queue.append(j)
                    assigned += 1

        if assigned < land_target:
            logger.debug("Growth queue exhausted before land quota", land=assigned, target=land_target)
        logger.debug("Continents grown", seeds=seeds, land=assigned)
        return assigned

    def _rank_by_elevation(self) -> np.ndarray:
        """Vertex indices by descending |y|, ties kept in index order."""
        return np.argsort(-self.abs_y, kind="stable")

    def _place_ranked(
        self,
        terrain: np.ndarray,
        rng: LcgPRNG,
        ranking: np.ndarray,
        target: int,
        window: int,
        required: TerrainType,
        target_type: TerrainType,
        band: Optional[Tuple[float, float]] = None,
    ) -> int:
        """Convert ``required`` vertices drawn from the top of ``ranking``."""
        window = min(window, len(ranking))
        placed = 0
        attempts = 0
        while placed < target and attempts < len(ranking):
            index = ranking[rng.randrange(window)]
            in_band = band is None or band[0] < self.abs_y[index] < band[1]
            if terrain[index] == required and in_band:
                terrain[index] = target_type
                placed += 1
            attempts += 1
        return placed

    def _smooth(self, terrain: np.ndarray, rng: LcgPRNG) -> np.ndarray:
        """One smoothing pass; counts read ``terrain``, flips go to a copy."""
        opts = self.options
        neighbors = self.mesh.neighbors_within(self.radius * opts.smoothing_radius)
        pole_limit = self.radius * opts.smoothing_pole_limit
        new_terrain = terrain.copy()
        flips = 0

        for i in range(len(terrain)):
            if self.abs_y[i] > pole_limit:
                continue

            current = terrain[i]
            if current != TerrainType.LAND and current != TerrainType.WATER:
                continue

            around = terrain[neighbors[i]]
            land_neighbors = int(np.count_nonzero(around == TerrainType.LAND))
            water_neighbors = int(np.count_nonzero(around == TerrainType.WATER))

            if current == TerrainType.LAND:
                if land_neighbors < opts.erode_max_land and water_neighbors > opts.erode_min_water:
                    if rng.random() < opts.erode_land_chance:
                        new_terrain[i] = TerrainType.WATER
                        flips += 1
            elif water_neighbors < opts.expand_max_water and land_neighbors > opts.expand_min_land:
                if rng.random() < opts.expand_land_chance:
                    new_terrain[i] = TerrainType.LAND
                    flips += 1

        logger.debug("Smoothing pass", flips=flips)
        return new_terrain


def surface_positions(mesh: SphereMesh, terrain_map: TerrainMap) -> np.ndarray:
    """
    Vertex positions pushed radially by terrain relief.

    Vertices with ``|y| > 0.9r`` stay on the base sphere to keep the poles clean.
    """
    points = mesh.positions64
    lengths = np.sqrt(points[:, 0] ** 2 + points[:, 1] ** 2 + points[:, 2] ** 2)
    lengths[lengths == 0] = 1.0
    normals = points / lengths[:, np.newaxis]

    multipliers = np.array(
        [TERRAIN_HEIGHT_MULTIPLIERS[TerrainType(int(t))] for t in terrain_map.terrain]
    )
    multipliers[mesh.abs_y > mesh.radius * 0.9] = 1.0
    return normals * (mesh.radius * multipliers)[:, np.newaxis]


def terrain_colors(terrain_map: TerrainMap) -> List[str]:
    """Hex colour per vertex."""
    return [TERRAIN_COLORS[TerrainType(int(t))] for t in terrain_map.terrain]
