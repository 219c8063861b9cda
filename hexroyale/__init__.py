"""Deterministic hex-grid battle-royale simulation core."""

__version__ = "0.1.0"
