"""Tests for idempotent lot and scavenge spot storage."""

from datetime import date

import pytest

from py_planet.core.lot_economy import build_grid_cells
from py_planet.core.settlements import generate_scavenge_spots
from py_planet.core.village_layout import generate_village
from py_planet.db.connection import Database
from py_planet.db.models import Lot, ScavengeSpotRecord
from py_planet.db.queries import PlanetQueries, lot_to_cell


class RacingQueries(PlanetQueries):
    """Query helper that misses rows written by a concurrent initialiser."""

    def __init__(self, session):
        super().__init__(session)
        self.checked = False

    def count_village_lots(self, village_id):
        if not self.checked:
            self.checked = True
            return 0
        return super().count_village_lots(village_id)

    def get_scavenge_spots(self, day):
        if not self.checked:
            self.checked = True
            return []
        return super().get_scavenge_spots(day)


class TestDatabase:
    """Test the connection manager."""

    def test_session_requires_initialize(self):
        """Test that sessions fail before initialisation."""
        database = Database()
        assert not database.is_initialized
        with pytest.raises(RuntimeError):
            with database.get_session():
                pass

    def test_ping_in_memory(self):
        """Test connectivity check on an in-memory database."""
        database = Database()
        database.initialize("sqlite://")
        try:
            assert database.is_initialized
            assert database.ping() is True
        finally:
            database.dispose()
        assert not database.is_initialized


class TestLotInitialization:
    """Test village lot initialisation."""

    def setup_method(self):
        """Setup test fixtures."""
        self.db = Database()
        self.db.initialize("sqlite://")

    def teardown_method(self):
        self.db.dispose()

    def test_initialize_once(self):
        """Test the second initialisation is a no-op."""
        with self.db.get_session() as session:
            first = PlanetQueries(session).initialize_village_lots("abc", "Panda Village")
        with self.db.get_session() as session:
            second = PlanetQueries(session).initialize_village_lots("abc", "Panda Village")

        assert first.created is True
        assert first.count == 49
        assert second.created is False
        assert second.count == 49

        with self.db.get_session() as session:
            assert session.query(Lot).count() == 49

    def test_stored_lots_match_generation(self):
        """Test stored rows carry exactly the generated grid."""
        with self.db.get_session() as session:
            PlanetQueries(session).initialize_village_lots("abc", "Panda Village")

        expected = build_grid_cells(generate_village("abc"), "abc", "Panda Village")
        with self.db.get_session() as session:
            stored = [lot_to_cell(lot) for lot in PlanetQueries(session).get_village_lots("abc")]

        assert stored == expected
        assert all(cell.owner_id is None for cell in stored)
        assert all(cell.floor_count == 1 for cell in stored)

    def test_villages_are_independent(self):
        """Test that initialising one village leaves others empty."""
        with self.db.get_session() as session:
            queries = PlanetQueries(session)
            queries.initialize_village_lots("village-0", "Panda Village")
            assert queries.count_village_lots("village-1") == 0
            assert queries.get_village_lots("village-1") == []

    def test_concurrent_initialization(self):
        """Test losing the race on the unique constraint reports no creation."""
        with self.db.get_session() as session:
            PlanetQueries(session).initialize_village_lots("abc", "Panda Village")

        with self.db.get_session() as session:
            result = RacingQueries(session).initialize_village_lots("abc", "Panda Village")

        assert result.created is False
        assert result.count == 49
        with self.db.get_session() as session:
            assert session.query(Lot).count() == 49


class TestScavengeStorage:
    """Test daily scavenge spot storage."""

    def setup_method(self):
        """Setup test fixtures."""
        self.db = Database()
        self.db.initialize("sqlite://")
        self.day = date(2024, 3, 15)

    def teardown_method(self):
        self.db.dispose()

    def test_get_or_create(self):
        """Test the day's spots are stored once and read back unchanged."""
        with self.db.get_session() as session:
            created = PlanetQueries(session).get_or_create_scavenge_spots(self.day)
        with self.db.get_session() as session:
            loaded = PlanetQueries(session).get_or_create_scavenge_spots(self.day)

        assert created == generate_scavenge_spots(self.day)
        assert [s.id for s in loaded] == [s.id for s in created]
        assert [s.emoji for s in loaded] == [s.emoji for s in created]
        for a, b in zip(loaded, created):
            assert a.position == pytest.approx(b.position)

        with self.db.get_session() as session:
            assert session.query(ScavengeSpotRecord).count() == 3

    def test_concurrent_creation(self):
        """Test a concurrent writer's spots are returned on conflict."""
        with self.db.get_session() as session:
            created = PlanetQueries(session).get_or_create_scavenge_spots(self.day)
        with self.db.get_session() as session:
            loaded = RacingQueries(session).get_or_create_scavenge_spots(self.day)

        assert [s.id for s in loaded] == [s.id for s in created]
        with self.db.get_session() as session:
            assert session.query(ScavengeSpotRecord).count() == 3
