"""
Domain enums for MealLog application.
Contains all enumeration types used across the domain models.
"""

import enum


class ImageEncoding(str, enum.Enum):
    """How a stored meal photo payload is encoded"""

    QOI = "qoi"
    RAW = "raw"


class RatingFilter(str, enum.Enum):
    """Meal list rating filters"""

    EXCELLENT = "excellent"
    WANT_AGAIN = "want-again"
    HIGH = "high"
    AVERAGE = "average"
    LOW = "low"


MIN_RATING = -3
MAX_RATING = 3
