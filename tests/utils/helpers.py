"""Test helper functions."""

from datetime import datetime, timedelta


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> datetime:
        self.current = self.current + delta
        return self.current


def record_changes(store) -> list:
    """Subscribe to a store and collect every StoreChange it emits."""
    changes: list = []
    store.subscribe(changes.append)
    return changes
