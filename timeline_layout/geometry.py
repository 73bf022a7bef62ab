from __future__ import annotations

import math
from typing import List, Sequence

from .models import GroupPlacement, Placement, Span
from .span import Instant, days_from_origin, total_days


class GeometryMapper:
    """Pixel geometry for one layout pass.

    Built from the span, the active day width and the placed groups.  Every
    value is derived from those inputs; a new mapper is created whenever one
    of them changes.
    """

    def __init__(
        self,
        span: Span,
        day_width: float,
        groups: Sequence[GroupPlacement],
        *,
        cell_height: int,
        group_gap: int,
        rail_width: int,
    ) -> None:
        if day_width <= 0:
            raise ValueError("day_width must be positive")
        self.span = span
        self.day_width = float(day_width)
        self.groups = list(groups)
        self.cell_height = int(cell_height)
        self.group_gap = int(group_gap)
        self.rail_width = int(rail_width)
        self._group_tops = self._accumulate_group_tops()

    @property
    def has_rail(self) -> bool:
        real_groups = [group for group in self.groups if not group.is_end_spacer]
        if len(real_groups) > 1:
            return True
        return any(group.title != "" for group in real_groups)

    @property
    def rail_offset(self) -> int:
        return self.rail_width if self.has_rail else 0

    # --- horizontal ---------------------------------------------------------

    def x_offset(self, when: Instant) -> float:
        return days_from_origin(self.span, when) * self.day_width

    def bar_width(self, start: Instant, end: Instant) -> float:
        days = days_from_origin(self.span, end) - days_from_origin(self.span, start)
        return max(1, days) * self.day_width

    def total_width(self) -> int:
        return math.ceil(total_days(self.span) * self.day_width) + self.rail_offset

    # --- vertical -----------------------------------------------------------

    def _accumulate_group_tops(self) -> List[int]:
        tops: List[int] = []
        cursor = 0
        for index in range(len(self.groups)):
            tops.append(cursor)
            cursor += self.group_gap + self.group_height(index)
        tops.append(cursor)
        return tops

    def group_height(self, group_index: int) -> int:
        return self.groups[group_index].column_count * self.cell_height

    def group_top(self, group_index: int) -> int:
        return self._group_tops[group_index]

    def y_offset(self, group_index: int, column: int) -> int:
        if not 0 <= group_index < len(self.groups):
            raise IndexError(f"group index {group_index} out of range")
        return self._group_tops[group_index] + self.group_gap + column * self.cell_height

    def total_height(self) -> int:
        return self._group_tops[-1]

    # --- convenience --------------------------------------------------------

    def box(self, group_index: int, placement: Placement) -> dict:
        """x/y/width/height of one placed item, relative to the item area."""

        return {
            "x": self.x_offset(placement.start_date),
            "y": self.y_offset(group_index, placement.column),
            "width": self.bar_width(placement.start_date, placement.end_date),
            "height": self.cell_height,
        }


__all__ = ["GeometryMapper"]
