"""Route group exports."""

from . import donors, health

__all__ = ["donors", "health"]
