"""TaskType model - user-defined task categories."""

from uuid import UUID, uuid4
from pydantic import BaseModel, ConfigDict, Field


class TaskType(BaseModel):
    """Task category shown next to a task (name + icon + color)."""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Type ID, assigned at creation")
    name: str = Field(..., min_length=1, description="Type name, unique within the catalog")
    icon: str = Field(..., description="Symbolic icon name")
    color: str = Field(..., description="Display color token")


def default_task_types() -> list[TaskType]:
    """Catalog every new store starts with."""
    return [
        TaskType(name="Work", icon="briefcase", color="blue"),
        TaskType(name="Personal", icon="person", color="green"),
        TaskType(name="Shopping", icon="cart", color="purple"),
        TaskType(name="Health", icon="heart", color="red"),
    ]
