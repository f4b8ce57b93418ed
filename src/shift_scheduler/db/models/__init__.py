from .schedule import ScheduleEntry

__all__ = ["ScheduleEntry"]
