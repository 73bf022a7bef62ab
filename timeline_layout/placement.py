from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from .models import GroupPlacement, Placement, SortedTimelineData, TimelineGroup, TimelineItem

logger = logging.getLogger("timeline_layout.placement")


def sort_by_start(items: Iterable[TimelineItem]) -> List[TimelineItem]:
    """Order by start date; equal starts keep their input order."""

    return sorted(items, key=lambda item: item.start_date)


def find_column(track_ends: Sequence[datetime], start: datetime) -> Optional[int]:
    """Index of the first track whose last item has ended by ``start``.

    An item ending exactly when the next one starts does not block the track.
    """

    for column, track_end in enumerate(track_ends):
        if track_end <= start:
            return column
    return None


def place(group: TimelineGroup) -> List[Placement]:
    """Assign every item of ``group`` to a column so overlapping items never share one.

    Greedy first-fit over tracks scanned left to right, with no global
    optimisation pass.  Columns depend only on the group's own items, so a
    group never changes shape because another group did.
    """

    track_ends: List[datetime] = []
    placements: List[Placement] = []

    for item in sort_by_start(group.items):
        column = find_column(track_ends, item.start_date)
        if column is None:
            column = len(track_ends)
            track_ends.append(item.end_date)
        else:
            track_ends[column] = item.end_date

        placements.append(
            Placement(
                item=item,
                column=column,
                start_date=item.start_date,
                end_date=item.end_date,
            )
        )

    logger.debug(
        "Placed %d item(s) of group %r on %d track(s)",
        len(placements),
        group.title,
        len(track_ends),
    )
    return placements


def end_spacer() -> GroupPlacement:
    return GroupPlacement(title="", items=[], placements=[], is_end_spacer=True)


def place_groups(data: SortedTimelineData, *, with_end_spacer: bool = True) -> List[GroupPlacement]:
    """Run :func:`place` for every group, in group order."""

    result = [
        GroupPlacement(title=group.title, items=list(group.items), placements=place(group))
        for group in data.groups
    ]
    if with_end_spacer:
        result.append(end_spacer())
    return result


__all__ = ["sort_by_start", "find_column", "place", "end_spacer", "place_groups"]
