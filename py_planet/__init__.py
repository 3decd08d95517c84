"""Deterministic planet, settlement and village lot generation."""

__version__ = "0.1.0"
