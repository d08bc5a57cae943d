"""Status derivation and ordering rules for tasks."""

from datetime import datetime, timedelta
from typing import Iterable

from tasktrack.models.task import Task, TaskStatus

# Tasks due within this window are flagged as close to their due date
CLOSE_TO_DUE_WINDOW = timedelta(hours=24)


def derive_status(due_date: datetime, now: datetime) -> TaskStatus:
    """
    Map a due date to a display status.
    
    Only PENDING, CLOSE_TO_DUE_DATE and OVERDUE come out of here;
    COMPLETED is set by explicit user action.
    """
    if due_date < now:
        return TaskStatus.OVERDUE
    if due_date - now <= CLOSE_TO_DUE_WINDOW:
        return TaskStatus.CLOSE_TO_DUE_DATE
    return TaskStatus.PENDING


def task_sort_key(task: Task) -> tuple[int, datetime]:
    """Higher priority first, then earliest due date."""
    return (-task.priority.rank, task.due_date)


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Stable sort: ties keep their current (insertion) order."""
    return sorted(tasks, key=task_sort_key)
