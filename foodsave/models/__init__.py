from foodsave.models.meal import Meal
from foodsave.models.notification import Notification

__all__ = [
    "Meal",
    "Notification",
]
