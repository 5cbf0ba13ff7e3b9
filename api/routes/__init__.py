"""API routes package"""

from . import meals, images, catalog, stats, health

__all__ = ["meals", "images", "catalog", "stats", "health"]
