from .schedule import ScheduleDocument

__all__ = [
    "ScheduleDocument",
]
