"""Route group exports."""

from . import assignments, health, pois, zones

__all__ = ["assignments", "health", "pois", "zones"]
