"""
Schedule evaluation: does an invoice configuration run on a given day?
"""

from datetime import date, timedelta

from core.errors import ConfigurationError
from models.config import ScheduleConfig

SUNDAY = 6  # date.weekday()


def should_run(schedule: ScheduleConfig, today: date, config_id: str = "") -> bool:
    """
    Return True if the schedule fires on `today`.

    Raises:
        ConfigurationError: bi-weekly schedule without a startDate, or a
            schedule type that is not implemented (custom)
    """
    label = f" for config {config_id}" if config_id else ""

    if schedule.type == "weekly-sunday":
        return today.weekday() == SUNDAY

    if schedule.type == "bi-weekly-sunday":
        if today.weekday() != SUNDAY:
            return False
        if schedule.start_date is None:
            raise ConfigurationError(f"bi-weekly-sunday schedule requires a startDate{label}")
        weeks_since_start = (today - schedule.start_date).days // 7
        return weeks_since_start % 2 == 0

    if schedule.type == "monthly-first":
        return today.day == 1

    if schedule.type == "monthly-last":
        return (today + timedelta(days=1)).month != today.month

    if schedule.type == "custom":
        raise ConfigurationError(f"Custom cron schedules are not implemented{label}")

    return False
