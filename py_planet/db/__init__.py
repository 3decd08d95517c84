"""
Database utilities and models.

This package provides:
- SQLAlchemy models for generated lots and scavenge spots
- Database connection management
- Idempotent initialisation queries
"""

from .connection import Database, db
from .models import Base, Lot, ScavengeSpotRecord
from .queries import InitializationResult, PlanetQueries, lot_to_cell

__all__ = [
    # Connection management
    'Database', 'db',

    # Query functionality
    'InitializationResult', 'PlanetQueries', 'lot_to_cell',

    # Models
    'Base', 'Lot', 'ScavengeSpotRecord',
]
