"""Tag input parsing."""

from typing import Iterable, Union


def parse_tags(raw: Union[str, Iterable[str], None]) -> frozenset[str]:
    """
    Normalize user-entered tags.
    
    Accepts a comma separated string ("work, urgent") or an iterable of
    strings. Entries are trimmed, empty ones dropped, case is preserved.
    """
    if not raw:
        return frozenset()
    
    parts = raw.split(",") if isinstance(raw, str) else raw
    return frozenset(part.strip() for part in parts if part and part.strip())


def join_tags(tags: Iterable[str]) -> str:
    """Join tags into a stable comma separated string."""
    return ",".join(sorted(tags))
