"""
Distribution of a weekly hour budget across task categories.
"""

import math
from dataclasses import replace

from models.invoice import TaskSummary

DEFAULT_TASK = "Development and maintenance"


def round_to_half(hours: float) -> float:
    """Round to the nearest 0.5, halves rounding up."""
    return math.floor(hours * 2 + 0.5) / 2


def distribute_hours(tasks: list[TaskSummary], total_hours: float) -> list[TaskSummary]:
    """
    Fill in hours proportionally to commit counts.

    Tasks are processed in the given order; every task but the last gets its
    rounded share (capped by what is left), and the last task absorbs the
    remainder so the hours add up to total_hours exactly. Zero-hour tasks
    are dropped.
    """
    if not tasks:
        return [TaskSummary(description=DEFAULT_TASK, hours=total_hours, commit_count=0)]

    total_commits = sum(task.commit_count for task in tasks)

    if total_commits == 0:
        hours_per_task = round_to_half(total_hours / len(tasks))
        allocated = [replace(task, hours=hours_per_task) for task in tasks]
        return [task for task in allocated if task.hours > 0]

    remaining = total_hours
    allocated = []
    for index, task in enumerate(tasks):
        if index == len(tasks) - 1:
            allocated.append(replace(task, hours=remaining))
            break

        share = round_to_half(total_hours * task.commit_count / total_commits)
        hours = min(share, remaining)
        remaining -= hours
        allocated.append(replace(task, hours=hours))

    return [task for task in allocated if task.hours > 0]
