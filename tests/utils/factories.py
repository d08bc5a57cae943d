"""Test data factories using Faker."""

from faker import Faker
from typing import Optional
from datetime import datetime, timedelta

from tasktrack.models.task import TaskPriority
from tasktrack.models.task_type import TaskType

fake = Faker()


def create_task_type(name: Optional[str] = None) -> TaskType:
    """Create a task type with a random name."""
    return TaskType(
        name=name or fake.unique.word().capitalize(),
        icon=fake.random_element(["briefcase", "person", "cart", "heart", "book"]),
        color=fake.color_name().lower(),
    )


def create_task_fields(
    task_type: TaskType,
    now: datetime,
    due_in: timedelta = timedelta(days=3),
    priority: TaskPriority = TaskPriority.MEDIUM,
    **overrides,
) -> dict:
    """Keyword arguments for TaskStore.add()."""
    fields = {
        "title": fake.sentence(nb_words=4),
        "description": fake.text(max_nb_chars=120),
        "due_date": now + due_in,
        "task_type": task_type,
        "priority": priority,
        "tags": set(fake.words(nb=2)),
        "reminder_date": None,
    }
    fields.update(overrides)
    return fields
