"""Tests for weekly hour distribution."""

import pytest

from models.invoice import TaskSummary
from services.allocator import DEFAULT_TASK, distribute_hours, round_to_half


@pytest.mark.parametrize(
    "hours,expected",
    [(2.24, 2.0), (2.25, 2.5), (2.74, 2.5), (2.75, 3.0), (3.3333, 3.5), (0.2, 0.0), (21.0, 21.0)],
)
def test_round_to_half(hours, expected):
    assert round_to_half(hours) == expected


def test_no_tasks_gives_single_default_task():
    tasks = distribute_hours([], 30)

    assert tasks == [TaskSummary(description=DEFAULT_TASK, hours=30, commit_count=0)]


def test_proportional_split_with_last_task_absorbing_remainder():
    tasks = distribute_hours(
        [
            TaskSummary("Bug fixes and error resolution", commit_count=7),
            TaskSummary("New feature development", commit_count=3),
        ],
        30,
    )

    assert [task.hours for task in tasks] == [21, 9]


def test_rounding_error_lands_on_last_task():
    tasks = distribute_hours([TaskSummary(name, commit_count=1) for name in "ABC"], 10)

    assert [task.hours for task in tasks] == [3.5, 3.5, 3.0]
    assert sum(task.hours for task in tasks) == 10


def test_share_is_capped_by_remaining_budget_and_zero_tasks_dropped():
    tasks = distribute_hours([TaskSummary("A", commit_count=3), TaskSummary("B", commit_count=1)], 1)

    assert tasks == [TaskSummary("A", hours=1.0, commit_count=3)]


def test_zero_commit_tasks_split_evenly():
    tasks = distribute_hours([TaskSummary(name, commit_count=0) for name in "ABC"], 10)

    assert [task.hours for task in tasks] == [3.5, 3.5, 3.5]


def test_input_tasks_are_not_modified():
    tasks_in = [TaskSummary("A", commit_count=2), TaskSummary("B", commit_count=1)]
    distribute_hours(tasks_in, 30)

    assert [task.hours for task in tasks_in] == [0.0, 0.0]


@pytest.mark.parametrize("total_hours", [30, 37.5, 8, 1])
def test_hours_always_sum_to_weekly_total(fake, total_hours):
    for _ in range(25):
        counts = sorted((fake.random_int(min=1, max=20) for _ in range(fake.random_int(1, 8))), reverse=True)
        tasks = [TaskSummary(f"task {i}", commit_count=count) for i, count in enumerate(counts)]

        allocated = distribute_hours(tasks, total_hours)

        assert sum(task.hours for task in allocated) == total_hours
        assert all(task.hours > 0 for task in allocated)
