"""Error handling utilities."""


class TaskTrackError(Exception):
    """Base exception for tasktrack."""
    pass


class TaskValidationError(TaskTrackError):
    """Task fields failed validation."""
    pass


class NotificationError(TaskTrackError):
    """Reminder could not be scheduled."""
    pass
