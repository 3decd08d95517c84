"""
Idempotent storage of generated data.

Generation is deterministic, so initialising the same village or day twice can
only ever produce the same rows. Callers check for existing rows first, and a
concurrent initialiser that loses the race on the unique constraints gets the
winner's rows back instead of an error.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.lot_economy import GridCell, build_grid_cells
from ..core.settlements import ScavengeSpot, generate_scavenge_spots
from ..core.village_layout import LayoutOptions, generate_village
from .models import Lot, ScavengeSpotRecord

logger = structlog.get_logger()


@dataclass
class InitializationResult:
    """Outcome of an idempotent initialisation."""

    created: bool
    count: int


def lot_to_cell(lot: Lot) -> GridCell:
    return GridCell(
        village_id=lot.village_id,
        village_name=lot.village_name,
        grid_x=lot.grid_x,
        grid_z=lot.grid_z,
        address=lot.address,
        cost=lot.cost,
        is_road=lot.is_road,
        is_pathway=lot.is_pathway,
        is_park=lot.is_park,
        is_apartment_zone=lot.is_apartment_zone,
        owner_id=lot.owner_id,
        house_type=lot.house_type,
        floor_count=lot.floor_count,
    )


def record_to_spot(record: ScavengeSpotRecord) -> ScavengeSpot:
    return ScavengeSpot(
        id=record.spot_key,
        position=(record.position_x, record.position_y, record.position_z),
        emoji=record.emoji,
    )


class PlanetQueries:
    """Lot and scavenge spot access for one session."""

    def __init__(self, session: Session):
        """Initialize with database session."""
        self.session = session

    def count_village_lots(self, village_id: str) -> int:
        return self.session.query(Lot).filter(Lot.village_id == village_id).count()

    def get_village_lots(self, village_id: str) -> List[Lot]:
        """Lots of a village in grid order."""
        return (
            self.session.query(Lot)
            .filter(Lot.village_id == village_id)
            .order_by(Lot.grid_x, Lot.grid_z)
            .all()
        )

    def initialize_village_lots(
        self,
        village_id: str,
        village_name: str,
        options: Optional[LayoutOptions] = None,
    ) -> InitializationResult:
        """
        Write the village's generated lots unless they already exist.

        Args:
            village_id: Stable village identifier
            village_name: Name used in lot addresses
            options: Layout options (defaults match the client)

        Returns:
            InitializationResult with ``created=False`` when the lots were already there
        """
        existing = self.count_village_lots(village_id)
        if existing > 0:
            logger.info("Lots already initialized", village_id=village_id, count=existing)
            return InitializationResult(created=False, count=existing)

        layout = generate_village(village_id, options)
        cells = build_grid_cells(layout, village_id, village_name)
        self.session.add_all(
            [Lot(**cell.model_dump(exclude={"kind"})) for cell in cells]
        )

        try:
            self.session.flush()
        except IntegrityError:
            # Another request initialised the same village first
            self.session.rollback()
            count = self.count_village_lots(village_id)
            logger.info("Lots initialized concurrently", village_id=village_id, count=count)
            return InitializationResult(created=False, count=count)

        logger.info("Lots initialized", village_id=village_id, count=len(cells))
        return InitializationResult(created=True, count=len(cells))

    def get_scavenge_spots(self, day: date) -> List[ScavengeSpotRecord]:
        return (
            self.session.query(ScavengeSpotRecord)
            .filter(ScavengeSpotRecord.spot_date == day)
            .order_by(ScavengeSpotRecord.slot)
            .all()
        )

    def get_or_create_scavenge_spots(
        self, day: date, radius: float = 2.0, count: int = 3
    ) -> List[ScavengeSpot]:
        """The day's spots, generating and storing them on first request."""
        records = self.get_scavenge_spots(day)
        if records:
            return [record_to_spot(r) for r in records]

        spots = generate_scavenge_spots(day, radius=radius, count=count)
        self.session.add_all(
            [
                ScavengeSpotRecord(
                    spot_date=day,
                    slot=slot,
                    spot_key=spot.id,
                    position_x=spot.position[0],
                    position_y=spot.position[1],
                    position_z=spot.position[2],
                    emoji=spot.emoji,
                )
                for slot, spot in enumerate(spots)
            ]
        )

        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            logger.info("Scavenge spots created concurrently", day=day.isoformat())
            return [record_to_spot(r) for r in self.get_scavenge_spots(day)]

        logger.info("Scavenge spots created", day=day.isoformat(), count=len(spots))
        return spots
