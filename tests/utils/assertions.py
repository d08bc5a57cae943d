"""Custom assertion helpers."""

from tasktrack.models.task import Task, TaskStatus


def assert_completion_consistent(task: Task) -> None:
    """completed_date is set exactly when the task is completed."""
    if task.status == TaskStatus.COMPLETED:
        assert task.completed_date is not None
    else:
        assert task.completed_date is None


def assert_display_order(tasks: list[Task]) -> None:
    """Tasks are ordered by priority (high first), then due date."""
    for earlier, later in zip(tasks, tasks[1:]):
        assert earlier.priority.rank >= later.priority.rank
        if earlier.priority == later.priority:
            assert earlier.due_date <= later.due_date
