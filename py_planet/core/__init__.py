"""
Core planet and village generation functionality.
"""

from .lcg_prng import LcgPRNG, lcg_next
from .seeds import string_to_seed, date_to_seed, derive_seed
from .sphere_mesh import SphereMesh
from .terrain import TerrainClassifier, TerrainOptions, TerrainMap, TerrainType
from .settlements import (
    Settlement, SettlementOptions, SettlementPlacer, ScavengeSpot,
    generate_scavenge_spots, generate_planet, Planet,
)
from .village_layout import (
    GRID_SIZE, Cluster, LayoutOptions, RoadLane, VillageLayout,
    VillageLayoutGenerator, generate_village,
)
from .lot_economy import GridCell, build_grid_cells, generate_address, generate_lot_cost

__all__ = ['LcgPRNG', 'lcg_next', 'string_to_seed', 'date_to_seed', 'derive_seed',
           'SphereMesh', 'TerrainClassifier', 'TerrainOptions', 'TerrainMap', 'TerrainType',
           'Settlement', 'SettlementOptions', 'SettlementPlacer', 'ScavengeSpot',
           'generate_scavenge_spots', 'generate_planet', 'Planet',
           'GRID_SIZE', 'Cluster', 'LayoutOptions', 'RoadLane', 'VillageLayout',
           'VillageLayoutGenerator', 'generate_village',
           'GridCell', 'build_grid_cells', 'generate_address', 'generate_lot_cost']
