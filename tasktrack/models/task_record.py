"""TaskRecord model - flat shape used when handing tasks to a persistence layer."""

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID
from pydantic import BaseModel, Field, ValidationError

from tasktrack.models.task import Task, TaskPriority, TaskStatus
from tasktrack.models.task_type import TaskType
from tasktrack.utils.errors import TaskValidationError
from tasktrack.utils.tags import join_tags, parse_tags


class TaskRecord(BaseModel):
    """
    Stored form of a Task.
    
    The task type is referenced by name and tags are kept as one comma
    separated string, so a record can live in a single flat row.
    """
    id: UUID = Field(..., description="Task ID")
    title: str = Field(..., description="Task title")
    task_description: str = Field(default="", description="Task description")
    due_date: datetime = Field(..., description="Due date")
    task_type_name: str = Field(..., description="Name of the task type")
    status: str = Field(..., description="TaskStatus value")
    priority: str = Field(..., description="TaskPriority value")
    tags: str = Field(default="", description="Comma separated tags")
    completed_date: Optional[datetime] = None
    reminder_date: Optional[datetime] = None

    @classmethod
    def from_task(cls, task: Task) -> "TaskRecord":
        """Flatten a task for storage."""
        return cls(
            id=task.id,
            title=task.title,
            task_description=task.description,
            due_date=task.due_date,
            task_type_name=task.task_type.name,
            status=task.status.value,
            priority=task.priority.value,
            tags=join_tags(task.tags),
            completed_date=task.completed_date,
            reminder_date=task.reminder_date,
        )

    def to_task(self, task_types: Iterable[TaskType]) -> Task:
        """Rebuild a task, resolving its type against the given catalog."""
        task_type = next((t for t in task_types if t.name == self.task_type_name), None)
        if task_type is None:
            raise TaskValidationError(f"Unknown task type: {self.task_type_name}")

        try:
            return Task(
                id=self.id,
                title=self.title,
                description=self.task_description,
                due_date=self.due_date,
                task_type=task_type,
                status=TaskStatus(self.status),
                priority=TaskPriority(self.priority),
                tags=parse_tags(self.tags),
                completed_date=self.completed_date,
                reminder_date=self.reminder_date,
            )
        except (ValidationError, ValueError) as e:
            raise TaskValidationError(f"Invalid task record {self.id}: {e}") from e
