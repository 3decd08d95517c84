"""Shared fixtures."""

import pytest

from py_planet.core.settlements import generate_planet
from py_planet.core.sphere_mesh import SphereMesh


@pytest.fixture(scope="session")
def default_mesh():
    """The 64x32 planet mesh."""
    return SphereMesh()


@pytest.fixture(scope="session")
def default_planet():
    """Planet generated with every default."""
    return generate_planet()
