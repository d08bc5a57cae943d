"""In-memory task store - owns the task collection, task types and change events."""

import os
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Iterable, Optional, Union
from uuid import UUID
from pydantic import BaseModel, Field, ValidationError

from tasktrack.models.task import Task, TaskPriority, TaskStatus
from tasktrack.models.task_type import TaskType, default_task_types
from tasktrack.services.notification_manager import ReminderScheduler, get_notification_manager
from tasktrack.services.status_rules import derive_status, sort_tasks
from tasktrack.utils.errors import TaskValidationError
from tasktrack.utils.logging import get_structured_logger, sanitize_text

logger = get_structured_logger(__name__)

# Default look-ahead for upcoming_tasks()
DEFAULT_UPCOMING_WINDOW_DAYS = int(os.environ.get("UPCOMING_WINDOW_DAYS", "7"))


class ChangeKind(str, Enum):
    """What kind of mutation produced a change event."""
    ADDED = "ADDED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    COMPLETED = "COMPLETED"
    REVERTED = "REVERTED"
    REFRESHED = "REFRESHED"
    LOADED = "LOADED"
    TYPE_ADDED = "TYPE_ADDED"


class StoreChange(BaseModel):
    """Emitted to subscribers after the store state actually changed."""
    kind: ChangeKind
    task_ids: list[UUID] = Field(default_factory=list, description="Tasks affected by the change")


Listener = Callable[[StoreChange], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStore:
    """
    Ordered in-memory collection of tasks.

    Every mutation keeps the collection sorted (priority high to low,
    then due date) and notifies subscribers only when something changed.
    Unknown task ids are reported by returning False, not by raising.
    Reminder calls are fire-and-forget: failures are logged and ignored.
    """

    def __init__(
        self,
        reminders: Optional[ReminderScheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
        task_types: Optional[Iterable[TaskType]] = None,
    ):
        self._reminders = reminders if reminders is not None else get_notification_manager()
        self._clock = clock or _utcnow
        self._tasks: list[Task] = []
        self._task_types: list[TaskType] = list(
            task_types if task_types is not None else default_task_types()
        )
        self._listeners: list[Listener] = []
        logger.info(
            "TaskStore initialized",
            task_types=[t.name for t in self._task_types]
        )

    # ---- observation ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: ChangeKind, task_ids: Iterable[UUID] = ()) -> None:
        change = StoreChange(kind=kind, task_ids=list(task_ids))
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                logger.error(
                    "Store change listener failed",
                    change_kind=kind.value,
                    error=str(e),
                    exc_info=True
                )

    # ---- snapshots ----

    @property
    def tasks(self) -> list[Task]:
        """Current tasks in display order."""
        return list(self._tasks)

    @property
    def task_types(self) -> list[TaskType]:
        return list(self._task_types)

    def now(self) -> datetime:
        return self._clock()

    def get(self, task_id: UUID) -> Optional[Task]:
        index = self._index_of(task_id)
        return self._tasks[index] if index is not None else None

    def _index_of(self, task_id: UUID) -> Optional[int]:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    def _sort(self) -> None:
        self._tasks = sort_tasks(self._tasks)

    # ---- reminder collaborator ----

    def _schedule_reminder(self, task: Task) -> None:
        if task.reminder_date is None:
            return
        try:
            self._reminders.schedule_task_reminder(
                task.id, task.title, task.due_date, task.reminder_date
            )
        except Exception as e:
            logger.warning(
                "Failed to schedule task reminder (non-fatal)",
                task_id=str(task.id),
                error=str(e)
            )

    def _cancel_reminder(self, task: Task) -> None:
        try:
            self._reminders.cancel_task_reminder(task.id)
        except Exception as e:
            logger.warning(
                "Failed to cancel task reminder (non-fatal)",
                task_id=str(task.id),
                error=str(e)
            )

    # ---- mutations ----

    def add(
        self,
        title: str,
        due_date: datetime,
        task_type: TaskType,
        priority: TaskPriority = TaskPriority.MEDIUM,
        description: str = "",
        tags: Iterable[str] = (),
        reminder_date: Optional[datetime] = None,
    ) -> Task:
        """
        Create a task, insert it in sorted position and schedule its reminder.

        Raises TaskValidationError if the fields do not form a valid task
        (empty title, missing type, naive datetimes, a bare string as tags).
        """
        if isinstance(tags, str):
            raise TaskValidationError("tags must be a collection of strings, not a string")

        try:
            task = Task(
                title=title,
                description=description,
                due_date=due_date,
                task_type=task_type,
                status=derive_status(due_date, self.now()),
                priority=priority,
                tags=frozenset(tags),
                reminder_date=reminder_date,
            )
        except (ValidationError, TypeError) as e:
            raise TaskValidationError(f"Invalid task: {e}") from e

        self._tasks.append(task)
        self._sort()

        logger.info(
            "Task added",
            task_id=str(task.id),
            task_title=sanitize_text(task.title),
            status=task.status.value,
            priority=task.priority.value,
            has_reminder=task.reminder_date is not None
        )

        self._schedule_reminder(task)
        self._emit(ChangeKind.ADDED, [task.id])
        return task

    def update(self, task: Task) -> bool:
        """
        Replace the stored task with the same id.

        Status and completed_date are kept from the stored task; use
        complete() and revert() to change them. Raises TaskValidationError
        if the edited fields are invalid. A non-completed task gets its
        status re-derived from the (possibly edited) due date. If the task
        has a reminder it is rescheduled.
        """
        index = self._index_of(task.id)
        if index is None:
            logger.warning("Update ignored, task not found", task_id=str(task.id))
            return False

        previous = self._tasks[index]

        # Status and completion only change through complete/revert
        fields = {name: getattr(task, name) for name in Task.model_fields}
        fields.update(status=previous.status, completed_date=previous.completed_date)
        try:
            task = Task.model_validate(fields)
        except ValidationError as e:
            raise TaskValidationError(f"Invalid task: {e}") from e

        if not task.is_completed:
            status = derive_status(task.due_date, self.now())
            if status != task.status:
                task = task.model_copy(update={"status": status})

        self._tasks[index] = task
        self._sort()

        if task.reminder_date is not None:
            self._cancel_reminder(previous)
            self._schedule_reminder(task)

        if task != previous:
            logger.info("Task updated", task_id=str(task.id), status=task.status.value)
            self._emit(ChangeKind.UPDATED, [task.id])
        return True

    def delete(self, task_id: UUID) -> bool:
        """Remove a task and cancel its reminder."""
        index = self._index_of(task_id)
        if index is None:
            logger.warning("Delete ignored, task not found", task_id=str(task_id))
            return False

        task = self._tasks.pop(index)
        self._cancel_reminder(task)
        logger.info("Task deleted", task_id=str(task_id))
        self._emit(ChangeKind.DELETED, [task_id])
        return True

    def complete(self, task_id: UUID) -> bool:
        """Mark a task completed now and cancel its reminder."""
        index = self._index_of(task_id)
        if index is None:
            logger.warning("Complete ignored, task not found", task_id=str(task_id))
            return False

        task = self._tasks[index]
        if task.is_completed:
            return True

        self._tasks[index] = task.model_copy(
            update={"status": TaskStatus.COMPLETED, "completed_date": self.now()}
        )
        self._cancel_reminder(task)
        self._sort()

        logger.info("Task completed", task_id=str(task_id))
        self._emit(ChangeKind.COMPLETED, [task_id])
        return True

    def revert(self, task_id: UUID) -> bool:
        """
        Undo completion: status goes back to the derived one.

        A reminder cancelled on completion stays cancelled.
        """
        index = self._index_of(task_id)
        if index is None:
            logger.warning("Revert ignored, task not found", task_id=str(task_id))
            return False

        task = self._tasks[index]
        reverted = task.model_copy(
            update={"status": derive_status(task.due_date, self.now()), "completed_date": None}
        )
        if reverted == task:
            return True

        self._tasks[index] = reverted
        self._sort()

        logger.info("Task completion reverted", task_id=str(task_id), status=reverted.status.value)
        self._emit(ChangeKind.REVERTED, [task_id])
        return True

    def refresh_statuses(self, now: Optional[datetime] = None) -> bool:
        """
        Re-derive the status of every non-completed task.

        Returns True if any status changed (the collection is then re-sorted
        and subscribers are notified).
        """
        if now is None:
            now = self.now()

        changed: list[UUID] = []
        refreshed: list[Task] = []
        for task in self._tasks:
            if not task.is_completed:
                status = derive_status(task.due_date, now)
                if status != task.status:
                    task = task.model_copy(update={"status": status})
                    changed.append(task.id)
            refreshed.append(task)

        if not changed:
            return False

        self._tasks = refreshed
        self._sort()

        logger.info("Task statuses refreshed", changed_count=len(changed))
        self._emit(ChangeKind.REFRESHED, changed)
        return True

    def load(self, tasks: Iterable[Task]) -> None:
        """Replace the collection with tasks handed over by a persistence layer."""
        now = self.now()
        loaded: list[Task] = []
        for task in tasks:
            if not task.is_completed:
                status = derive_status(task.due_date, now)
                if status != task.status:
                    task = task.model_copy(update={"status": status})
            loaded.append(task)

        self._tasks = sort_tasks(loaded)
        logger.info("Tasks loaded", task_count=len(self._tasks))
        self._emit(ChangeKind.LOADED, [t.id for t in self._tasks])

    def add_task_type(self, task_type: TaskType) -> bool:
        """Add a task type unless one with the same name exists."""
        if any(t.name == task_type.name for t in self._task_types):
            logger.debug("Task type already exists", task_type=task_type.name)
            return False

        self._task_types.append(task_type)
        logger.info("Task type added", task_type=task_type.name)
        self._emit(ChangeKind.TYPE_ADDED)
        return True

    # ---- queries ----

    def tasks_for_status(self, status: TaskStatus) -> list[Task]:
        return [t for t in self._tasks if t.status == status]

    def tasks_for_type(self, task_type: Union[TaskType, UUID]) -> list[Task]:
        type_id = task_type.id if isinstance(task_type, TaskType) else task_type
        return [t for t in self._tasks if t.task_type.id == type_id]

    def tasks_with_tag(self, tag: str) -> list[Task]:
        """Exact, case-sensitive tag match."""
        return [t for t in self._tasks if tag in t.tags]

    def overdue_tasks(self) -> list[Task]:
        return self.tasks_for_status(TaskStatus.OVERDUE)

    def upcoming_tasks(
        self,
        within_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
        now: Optional[datetime] = None,
    ) -> list[Task]:
        """Open, not overdue tasks due within the next `within_days` days."""
        if now is None:
            now = self.now()
        horizon = now + timedelta(days=within_days)
        return [
            t for t in self._tasks
            if t.status not in (TaskStatus.COMPLETED, TaskStatus.OVERDUE)
            and t.due_date <= horizon
        ]
