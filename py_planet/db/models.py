"""Database models for generated village and planet data."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean, Column, Date, DateTime, Float, Integer, String, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Lot(Base):
    """One village grid cell, written once per village."""

    __tablename__ = "lots"
    __table_args__ = (
        UniqueConstraint("village_id", "grid_x", "grid_z", name="uq_lot_village_cell"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    village_id = Column(String(255), nullable=False, index=True)
    village_name = Column(String(255), nullable=False)
    grid_x = Column(Integer, nullable=False)
    grid_z = Column(Integer, nullable=False)

    address = Column(String(255), nullable=False)
    cost = Column(Integer, nullable=False)

    # Layout classification
    is_road = Column(Boolean, default=False, nullable=False)
    is_pathway = Column(Boolean, default=False, nullable=False)
    is_park = Column(Boolean, default=False, nullable=False)
    is_apartment_zone = Column(Boolean, default=False, nullable=False)

    # Set later by the purchase flow
    owner_id = Column(String(255), nullable=True)
    house_type = Column(String(50), nullable=True)
    floor_count = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)


class ScavengeSpotRecord(Base):
    """A day's scavenge spot; ``slot`` is its position in the day's set."""

    __tablename__ = "scavenge_spots"
    __table_args__ = (
        UniqueConstraint("spot_date", "slot", name="uq_scavenge_day_slot"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    spot_date = Column(Date, nullable=False, index=True)
    slot = Column(Integer, nullable=False)
    spot_key = Column(String(64), nullable=False)

    position_x = Column(Float, nullable=False)
    position_y = Column(Float, nullable=False)
    position_z = Column(Float, nullable=False)
    emoji = Column(String(16), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
