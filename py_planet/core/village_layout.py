"""
Village grid layout generation.

Every village is a small square grid derived entirely from its identifier.
Stages run in a fixed order, each with its own PRNG seeded from the village
seed plus a stage offset, and each stage only considers cells left free by the
stages before it:

1. roads          - one full-length lane
2. pathways       - organic walkways plus one striping pattern
3. parks          - non-overlapping 2x2 clusters
4. apartment zones - non-overlapping 2x2 clusters tagged for taller buildings

Whatever is left is a plain buildable lot.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .lcg_prng import LcgPRNG
from .seeds import (
    APARTMENT_SEED_OFFSET,
    PARK_SEED_OFFSET,
    PATHWAY_SEED_OFFSET,
    ROAD_SEED_OFFSET,
    derive_seed,
    string_to_seed,
)

logger = structlog.get_logger()

GRID_SIZE = 7

# Moore neighborhood offsets, orthogonal first
NEIGHBOR_OFFSETS = [
    (-1, 0), (1, 0), (0, -1), (0, 1),
    (-1, -1), (1, 1), (-1, 1), (1, -1),
]


class LayoutOptions(BaseModel):
    """Village layout options."""

    model_config = ConfigDict(frozen=True)

    grid_size: int = Field(default=GRID_SIZE, ge=2, description="Cells per side")

    lane_probability: float = Field(
        default=0.4, ge=0, le=1, description="Chance a row or column becomes a road candidate"
    )

    connected_pathway_probability: float = Field(
        default=0.15, ge=0, le=1, description="Pathway chance next to a road or pathway"
    )
    standalone_pathway_probability: float = Field(
        default=0.08, ge=0, le=1, description="Pathway chance regardless of neighbors"
    )
    band_pathway_probability: float = Field(
        default=0.4, ge=0, le=1, description="Per-cell chance in banded patterns"
    )
    diagonal_pathway_probability: float = Field(
        default=0.3, ge=0, le=1, description="Per-cell chance in the diagonal pattern"
    )
    band_spacing: int = Field(default=3, ge=1, description="Rows/columns between bands")

    park_ratio: float = Field(default=0.1, ge=0, le=1)
    max_parks: int = Field(default=2, ge=0)
    apartment_ratio: float = Field(default=0.15, ge=0, le=1)
    max_apartment_zones: int = Field(default=3, ge=0)
    cluster_size: int = Field(default=2, ge=1)
    cluster_spacing: int = Field(
        default=3, ge=1, description="Accepted anchors differ by at least this on some axis"
    )


@dataclass(frozen=True)
class Cluster:
    """Square group of cells placed atomically."""

    x: int
    z: int
    size: int = 2

    def cells(self):
        for dx in range(self.size):
            for dz in range(self.size):
                yield self.x + dx, self.z + dz

    def overlaps(self, other: "Cluster", spacing: int) -> bool:
        return abs(self.x - other.x) < spacing and abs(self.z - other.z) < spacing


@dataclass(frozen=True)
class RoadLane:
    """The single road of a village."""

    orientation: str  # "h" runs along x at fixed z, "v" runs along z at fixed x
    index: int
    fallback: bool = False


@dataclass(eq=False)
class VillageLayout:
    """Grid classification for one village; masks are indexed ``[x, z]``."""

    village_id: str
    seed: int
    grid_size: int
    road_lane: RoadLane
    roads: np.ndarray
    pathways: np.ndarray
    parks: np.ndarray
    apartment_zones: np.ndarray
    park_clusters: List[Cluster] = field(default_factory=list)
    apartment_clusters: List[Cluster] = field(default_factory=list)

    def cell_kind(self, x: int, z: int) -> str:
        """Primary classification of a cell."""
        if self.roads[x, z]:
            return "road"
        if self.pathways[x, z]:
            return "pathway"
        if self.parks[x, z]:
            return "park"
        return "buildable"

    @property
    def buildable(self) -> np.ndarray:
        return ~(self.roads | self.pathways | self.parks)

    def counts(self) -> Dict[str, int]:
        return {
            "road": int(self.roads.sum()),
            "pathway": int(self.pathways.sum()),
            "park": int(self.parks.sum()),
            "buildable": int(self.buildable.sum()),
            "apartment_zone": int(self.apartment_zones.sum()),
        }

    def same_as(self, other: "VillageLayout") -> bool:
        return (
            self.seed == other.seed
            and self.road_lane == other.road_lane
            and np.array_equal(self.roads, other.roads)
            and np.array_equal(self.pathways, other.pathways)
            and np.array_equal(self.parks, other.parks)
            and np.array_equal(self.apartment_zones, other.apartment_zones)
        )


class VillageLayoutGenerator:
    """Derives a village's roads, pathways, parks and apartment zones from its id."""

    def __init__(self, options: Optional[LayoutOptions] = None) -> None:
        self.options = options or LayoutOptions()
        self.grid_size = self.options.grid_size

    def generate(self, village_id: str) -> VillageLayout:
        """
        Generate the full layout for ``village_id``.

        Args:
            village_id: Stable village identifier

        Returns:
            VillageLayout with every cell classified
        """
        seed = string_to_seed(village_id)
        logger.debug("Generating village layout", village_id=village_id, seed=seed)

        lane, roads = self.generate_roads(seed)
        pathways = self.generate_pathways(seed, roads)
        park_clusters, parks = self.generate_parks(seed, roads, pathways)
        apartment_clusters, apartment_zones = self.generate_apartment_zones(
            seed, roads | pathways | parks
        )

        layout = VillageLayout(
            village_id=village_id,
            seed=seed,
            grid_size=self.grid_size,
            road_lane=lane,
            roads=roads,
            pathways=pathways,
            parks=parks,
            apartment_zones=apartment_zones,
            park_clusters=park_clusters,
            apartment_clusters=apartment_clusters,
        )
        logger.info(
            "Village layout generated",
            village_id=village_id,
            seed=seed,
            lane=f"{lane.orientation}{lane.index}",
            **layout.counts(),
        )
        return layout

    def _empty_mask(self) -> np.ndarray:
        return np.zeros((self.grid_size, self.grid_size), dtype=bool)

    def generate_roads(self, seed: int):
        """Pick one full-length lane, falling back to the middle when no lane qualifies."""
        opts = self.options
        n = self.grid_size
        rng = LcgPRNG(derive_seed(seed, ROAD_SEED_OFFSET))

        horizontal = []
        vertical = []
        for i in range(n):
            if rng.random() < opts.lane_probability:
                horizontal.append(i)
            if rng.random() < opts.lane_probability:
                vertical.append(i)

        lanes = [RoadLane("h", i) for i in horizontal] + [RoadLane("v", i) for i in vertical]
        if lanes:
            lane = rng.choice(lanes)
        else:
            middle = n // 2
            orientation = "h" if rng.random() < 0.5 else "v"
            lane = RoadLane(orientation, middle, fallback=True)
            logger.debug("No road candidates, using middle lane", orientation=orientation)

        roads = self._empty_mask()
        if lane.orientation == "h":
            roads[:, lane.index] = True
        else:
            roads[lane.index, :] = True
        return lane, roads

    def generate_pathways(self, seed: int, roads: np.ndarray) -> np.ndarray:
        """Grow pathways off the road network, then stamp one striping pattern."""
        opts = self.options
        n = self.grid_size
        rng = LcgPRNG(derive_seed(seed, PATHWAY_SEED_OFFSET))
        pathways = self._empty_mask()

        for x in range(1, n - 1):
            for z in range(1, n - 1):
                if roads[x, z]:
                    continue

                connected = sum(
                    1
                    for dx, dz in NEIGHBOR_OFFSETS
                    if roads[x + dx, z + dz] or pathways[x + dx, z + dz]
                )
                if connected > 0 and rng.random() < opts.connected_pathway_probability:
                    pathways[x, z] = True
                if rng.random() < opts.standalone_pathway_probability:
                    pathways[x, z] = True

        pattern = rng.randrange(3)
        if pattern == 0:
            footprint = [
                (x, z)
                for z in range(2, n - 2, opts.band_spacing)
                for x in range(1, n - 1)
            ]
            probability = opts.band_pathway_probability
        elif pattern == 1:
            footprint = [
                (x, z)
                for x in range(2, n - 2, opts.band_spacing)
                for z in range(1, n - 1)
            ]
            probability = opts.band_pathway_probability
        else:
            footprint = [(i, i) for i in range(n - 1)]
            probability = opts.diagonal_pathway_probability

        for x, z in footprint:
            if not roads[x, z] and rng.random() < probability:
                pathways[x, z] = True

        logger.debug("Pathways generated", pattern=pattern, cells=int(pathways.sum()))
        return pathways

    def generate_parks(self, seed: int, roads: np.ndarray, pathways: np.ndarray):
        """Place up to ``max_parks`` 2x2 parks on cells free of roads and pathways."""
        opts = self.options
        rng = LcgPRNG(derive_seed(seed, PARK_SEED_OFFSET))
        blocked = roads | pathways

        candidates = self._cluster_candidates(blocked)
        target = min(int(len(candidates) * opts.park_ratio), opts.max_parks)
        clusters = self._select_clusters(candidates, target, rng)

        parks = self._empty_mask()
        for cluster in clusters:
            for x, z in cluster.cells():
                if x < self.grid_size and z < self.grid_size and not blocked[x, z]:
                    parks[x, z] = True
        return clusters, parks

    def generate_apartment_zones(self, seed: int, occupied: np.ndarray):
        """Tag up to ``max_apartment_zones`` 2x2 clusters of free cells."""
        opts = self.options
        rng = LcgPRNG(derive_seed(seed, APARTMENT_SEED_OFFSET))

        candidates = self._cluster_candidates(occupied)
        target = min(int(len(candidates) * opts.apartment_ratio), opts.max_apartment_zones)
        clusters = self._select_clusters(candidates, target, rng)

        zones = self._empty_mask()
        for cluster in clusters:
            for x, z in cluster.cells():
                zones[x, z] = True
        return clusters, zones

    def _cluster_candidates(self, blocked: np.ndarray) -> List[Cluster]:
        """Anchors whose whole cluster footprint is unblocked, x-major order."""
        size = self.options.cluster_size
        limit = self.grid_size - size + 1
        return [
            Cluster(x, z, size)
            for x in range(limit)
            for z in range(limit)
            if not blocked[x:x + size, z:z + size].any()
        ]

    def _select_clusters(self, candidates: List[Cluster], target: int, rng: LcgPRNG) -> List[Cluster]:
        """
        Fisher-Yates shuffle from the back, accepting non-overlapping picks greedily.

        The walk stops at index 1, so the candidate left at index 0 is never examined.
        """
        spacing = self.options.cluster_spacing
        pool = list(candidates)
        selected: List[Cluster] = []

        i = len(pool) - 1
        while i > 0 and len(selected) < target:
            j = rng.randrange(i + 1)
            pool[i], pool[j] = pool[j], pool[i]
            candidate = pool[i]
            if not any(existing.overlaps(candidate, spacing) for existing in selected):
                selected.append(candidate)
            i -= 1

        return selected


def generate_village(village_id: str, options: Optional[LayoutOptions] = None) -> VillageLayout:
    """Layout for ``village_id``; shared by the preview and persistence paths."""
    return VillageLayoutGenerator(options).generate(village_id)
