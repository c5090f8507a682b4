"""Route group exports."""

from . import fees, geocoding, health

__all__ = ["geocoding", "fees", "health"]
