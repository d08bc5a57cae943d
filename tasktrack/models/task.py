"""Task models."""

from enum import Enum
from typing import Optional
from uuid import UUID, uuid4
from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from tasktrack.models.task_type import TaskType


class TaskStatus(str, Enum):
    """Task lifecycle status."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"  # representable, no transition produces it yet
    CLOSE_TO_DUE_DATE = "CLOSE_TO_DUE_DATE"
    OVERDUE = "OVERDUE"
    COMPLETED = "COMPLETED"

    @property
    def label(self) -> str:
        """Human readable status name."""
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    TaskStatus.PENDING: "Pending",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.CLOSE_TO_DUE_DATE: "Close to Due Date",
    TaskStatus.OVERDUE: "Overdue",
    TaskStatus.COMPLETED: "Completed",
}


class TaskPriority(str, Enum):
    """Task priority levels."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        """Ordinal used for sorting; higher is more urgent."""
        return _PRIORITY_RANKS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_PRIORITY_RANKS = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
}


class Task(BaseModel):
    """A single to-do item. Changes are made by copying, never in place."""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Task ID, assigned at creation")
    title: str = Field(..., min_length=1, description="Task title")
    description: str = Field(default="", description="Free-form task notes")
    due_date: AwareDatetime = Field(..., description="Due date and time")
    task_type: TaskType = Field(..., description="Category (shared, not owned)")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Lifecycle status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Priority")
    tags: frozenset[str] = Field(default_factory=frozenset, description="Case-sensitive tags")
    completed_date: Optional[AwareDatetime] = Field(None, description="Set iff status is COMPLETED")
    reminder_date: Optional[AwareDatetime] = Field(None, description="When to fire a reminder")

    @model_validator(mode="after")
    def _check_completion(self) -> "Task":
        """completed_date must be present exactly when the task is completed."""
        is_completed = self.status == TaskStatus.COMPLETED
        if is_completed and self.completed_date is None:
            raise ValueError("completed_date is required for COMPLETED tasks")
        if not is_completed and self.completed_date is not None:
            raise ValueError("completed_date must be null unless status is COMPLETED")
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED
