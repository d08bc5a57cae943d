"""Local reminder scheduling - keeps pending reminder requests per task."""

from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol
from uuid import UUID
from pydantic import BaseModel, Field

from tasktrack.utils.errors import NotificationError
from tasktrack.utils.logging import get_structured_logger, sanitize_text

logger = get_structured_logger(__name__)

REMINDER_TITLE = "Task Reminder"


class ReminderScheduler(Protocol):
    """What the task store needs from a reminder backend."""

    def schedule_task_reminder(
        self,
        task_id: UUID,
        title: str,
        due_date: datetime,
        reminder_date: datetime,
    ) -> Any: ...

    def cancel_task_reminder(self, task_id: UUID) -> Any: ...


class ReminderRequest(BaseModel):
    """A one-shot reminder waiting to fire."""
    identifier: str = Field(..., description="Task ID the reminder belongs to")
    title: str = Field(default=REMINDER_TITLE, description="Notification title")
    body: str = Field(..., description="Notification body")
    fire_at: datetime = Field(..., description="Trigger time, minute precision")


def format_due_date(due_date: datetime) -> str:
    """Short human date, e.g. 'Jan 19, 2025 15:30'."""
    return f"{due_date:%b} {due_date.day}, {due_date.year} {due_date:%H:%M}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationManager:
    """Keeps track of scheduled task reminders and notification permission."""
    
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utcnow
        self.authorized: Optional[bool] = None  # None until the user answers
        self.pending: dict[str, ReminderRequest] = {}
    
    def request_authorization(self, granted: bool, error: Optional[str] = None) -> bool:
        """Record the outcome of the notification permission prompt."""
        self.authorized = granted
        if granted:
            logger.info("Notification permission granted")
        elif error:
            logger.warning("Error requesting notification permission", error=error)
        else:
            logger.info("Notification permission denied")
        return granted
    
    def schedule_task_reminder(
        self,
        task_id: UUID,
        title: str,
        due_date: datetime,
        reminder_date: datetime,
    ) -> ReminderRequest:
        """
        Schedule (or replace) the reminder for a task.
        
        Raises NotificationError when permission was denied or the
        reminder time has already passed.
        """
        if self.authorized is False:
            raise NotificationError("Notification permission denied")
        
        fire_at = reminder_date.replace(second=0, microsecond=0)
        if fire_at < self._clock().replace(second=0, microsecond=0):
            raise NotificationError(f"Reminder time {fire_at.isoformat()} is in the past")
        
        request = ReminderRequest(
            identifier=str(task_id),
            body=f"Task '{title}' is due {format_due_date(due_date)}",
            fire_at=fire_at,
        )
        replaced = request.identifier in self.pending
        self.pending[request.identifier] = request
        
        logger.info(
            "Task reminder scheduled",
            task_id=request.identifier,
            task_title=sanitize_text(title),
            fire_at=fire_at.isoformat(),
            replaced=replaced
        )
        return request
    
    def cancel_task_reminder(self, task_id: UUID) -> bool:
        """Drop the pending reminder for a task, if any."""
        removed = self.pending.pop(str(task_id), None)
        if removed is not None:
            logger.debug("Task reminder cancelled", task_id=str(task_id))
        return removed is not None
    
    def pending_requests(self) -> list[ReminderRequest]:
        """Pending reminders ordered by trigger time."""
        return sorted(self.pending.values(), key=lambda r: r.fire_at)


# Global notification manager instance
_notification_manager: Optional[NotificationManager] = None


def get_notification_manager() -> NotificationManager:
    """Get or create global notification manager instance."""
    global _notification_manager
    if _notification_manager is None:
        _notification_manager = NotificationManager()
    return _notification_manager
