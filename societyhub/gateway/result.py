"""
Tagged results returned by every gateway call.

Call sites branch on ``result.ok`` instead of probing response envelopes.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Ok:
    value: Any = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    reason: str
    status: Optional[int] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False


@dataclass
class Page:
    """One page of canonical records plus the backend's paging numbers."""
    items: List[dict]
    page: int = 1
    total_pages: int = 1
    total: int = 0

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
