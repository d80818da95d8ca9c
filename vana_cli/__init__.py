"""Vana CLI: refiner statistics and local configuration."""

__version__ = "0.1.0"
