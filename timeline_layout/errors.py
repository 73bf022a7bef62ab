from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class ItemDiagnostic:
    """Why a single input record could not become a timeline item."""

    index: int
    item_id: Optional[str]
    reason: str

    def describe(self) -> str:
        label = self.item_id if self.item_id is not None else f"#{self.index}"
        return f"item {label}: {self.reason}"


class TimelineLayoutError(Exception):
    """Base class for every error raised by the layout engine."""


class MalformedItemError(TimelineLayoutError):
    def __init__(self, diagnostics: Sequence[ItemDiagnostic]):
        self.diagnostics: List[ItemDiagnostic] = list(diagnostics)
        summary = "; ".join(d.describe() for d in self.diagnostics[:5])
        if len(self.diagnostics) > 5:
            summary += f" (+{len(self.diagnostics) - 5} more)"
        super().__init__(f"{len(self.diagnostics)} malformed timeline item(s): {summary}")


class EmptyTimelineError(TimelineLayoutError):
    """Raised when a stage that needs at least one item receives none."""


class ZoomConfigurationError(TimelineLayoutError):
    pass


class ZoomOwnershipError(TimelineLayoutError):
    """The zoom selection was driven by the side that does not own it."""


__all__ = [
    "ItemDiagnostic",
    "TimelineLayoutError",
    "MalformedItemError",
    "EmptyTimelineError",
    "ZoomConfigurationError",
    "ZoomOwnershipError",
]
