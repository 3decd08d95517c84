"""Tests for lot addresses, prices and grid cell assembly."""

import pytest

from py_planet.core.lot_economy import (
    STREET_NAMES,
    GridCell,
    build_grid_cells,
    generate_address,
    generate_lot_cost,
)
from py_planet.core.village_layout import GRID_SIZE, generate_village


class TestAddress:
    """Test address generation."""

    def test_origin(self):
        """Test the first lot of a village."""
        assert generate_address(0, 0, "Test") == "10 Main St, Test"

    def test_street_and_number(self):
        """Test that z picks the street and both coordinates the number."""
        assert generate_address(2, 3, "Zen") == "33 Pine Rd, Zen"
        assert generate_address(6, 6, "Zen") == "76 Birch Way, Zen"

    def test_unique_within_default_grid(self):
        """Test that a 7x7 village has 49 distinct addresses."""
        addresses = {
            generate_address(x, z, "V") for x in range(GRID_SIZE) for z in range(GRID_SIZE)
        }
        assert len(addresses) == GRID_SIZE * GRID_SIZE

    def test_collision_beyond_ten_rows(self):
        """Test the known collision once z wraps past ten."""
        assert generate_address(0, 12, "X") == generate_address(0, 2, "X") == "12 Elm Blvd, X"
        assert len(STREET_NAMES) == 10


class TestLotCost:
    """Test lot pricing."""

    def test_corner(self):
        """Test the documented corner price."""
        assert generate_lot_cost(0, 0, False) == 89

    def test_centre_is_dearest(self):
        """Test cells next to the centre."""
        assert generate_lot_cost(3, 3, False) == 119
        assert generate_lot_cost(3, 4, False) == 119
        assert generate_lot_cost(6, 6, False) == 99

    def test_apartment_multiplier(self):
        """Test the 1.5x apartment zone price."""
        assert generate_lot_cost(0, 0, True) == 134
        assert generate_lot_cost(3, 3, True) == 179

    @pytest.mark.parametrize("is_apartment_zone", [False, True])
    def test_positive_everywhere(self, is_apartment_zone):
        """Test the price floor over the whole grid."""
        for x in range(GRID_SIZE):
            for z in range(GRID_SIZE):
                cost = generate_lot_cost(x, z, is_apartment_zone)
                assert isinstance(cost, int)
                assert cost >= 75


class TestGridCells:
    """Test grid cell assembly from a layout."""

    def setup_method(self):
        """Setup test fixtures."""
        self.layout = generate_village("abc")
        self.cells = build_grid_cells(self.layout, "abc", "Bamboo Grove")

    def test_cell_count_and_order(self):
        """Test x-major ordering over the whole grid."""
        assert len(self.cells) == 49
        assert [(c.grid_x, c.grid_z) for c in self.cells[:8]] == [
            (0, 0), (0, 1), (0, 2), (0, 3), (0, 4), (0, 5), (0, 6), (1, 0)
        ]

    def test_fields_follow_layout(self):
        """Test that flags, addresses and costs match the layout."""
        for cell in self.cells:
            x, z = cell.grid_x, cell.grid_z
            assert cell.is_road == bool(self.layout.roads[x, z])
            assert cell.is_pathway == bool(self.layout.pathways[x, z])
            assert cell.is_park == bool(self.layout.parks[x, z])
            assert cell.is_apartment_zone == bool(self.layout.apartment_zones[x, z])
            assert cell.address == generate_address(x, z, "Bamboo Grove")
            assert cell.cost == generate_lot_cost(x, z, cell.is_apartment_zone)
            assert cell.kind == self.layout.cell_kind(x, z)

    def test_generator_leaves_ownership_empty(self):
        """Test the fields the purchase flow fills in later."""
        for cell in self.cells:
            assert cell.owner_id is None
            assert cell.house_type is None
            assert cell.floor_count == 1

    def test_kind(self):
        """Test the primary classification of a single cell."""
        cell = GridCell(
            village_id="v", village_name="V", grid_x=1, grid_z=1,
            address="21 Oak Ave, V", cost=100, is_apartment_zone=True,
        )
        assert cell.kind == "buildable"
        assert cell.is_buildable
        assert cell.model_dump()["kind"] == "buildable"

    def test_deterministic(self):
        """Test that rebuilding yields identical cells."""
        again = build_grid_cells(generate_village("abc"), "abc", "Bamboo Grove")
        assert again == self.cells
