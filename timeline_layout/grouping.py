from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Iterable, List, Optional, Sequence

from .models import (
    Grouped,
    LayoutSource,
    RawItems,
    SortedTimelineData,
    TimelineGroup,
    TimelineItem,
    TimeWindow,
)

logger = logging.getLogger("timeline_layout.grouping")

UNGROUPED_SORT_KEY = "id"


def group_key(value: Any) -> str:
    """String form of a field value used as a group title.

    ``None`` (unset or missing field) maps to the empty-string group.
    """

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def group_items_by_field(items: Iterable[TimelineItem], field: str) -> SortedTimelineData:
    """Partition items by the string value of ``field``.

    Groups appear in the order their value is first seen; items keep their
    input order inside each group.
    """

    buckets: "OrderedDict[str, List[TimelineItem]]" = OrderedDict()
    for item in items:
        buckets.setdefault(group_key(item.field_value(field)), []).append(item)

    groups = [TimelineGroup(title=title, items=members) for title, members in buckets.items()]
    logger.debug("Grouped items by %r into %d group(s)", field, len(groups))
    return SortedTimelineData(sort_key=field, groups=groups)


def ungrouped(items: Iterable[TimelineItem]) -> SortedTimelineData:
    return SortedTimelineData(
        sort_key=UNGROUPED_SORT_KEY,
        groups=[TimelineGroup(title="", items=list(items))],
    )


def flatten(data: SortedTimelineData) -> List[TimelineItem]:
    return [item for group in data.groups for item in group.items]


def regroup(data: SortedTimelineData, field: Optional[str]) -> SortedTimelineData:
    items = flatten(data)
    if not field:
        return ungrouped(items)
    return group_items_by_field(items, field)


def normalise_source(source: LayoutSource) -> SortedTimelineData:
    if isinstance(source, Grouped):
        return source.data
    if isinstance(source, RawItems):
        if source.group_by:
            return group_items_by_field(source.items, source.group_by)
        return ungrouped(source.items)
    raise TypeError(f"unsupported layout source: {type(source).__name__}")


def filter_by_window(data: SortedTimelineData, window: Optional[TimeWindow]) -> SortedTimelineData:
    """Keep items starting inside ``window``; groups left without items are dropped."""

    if window is None:
        return data

    groups: List[TimelineGroup] = []
    for group in data.groups:
        kept = [item for item in group.items if window.contains(item.start_date)]
        if kept:
            groups.append(TimelineGroup(title=group.title, items=kept))

    logger.debug(
        "Window %s..%s kept %d of %d group(s)",
        window.start.isoformat(),
        window.end.isoformat(),
        len(groups),
        len(data.groups),
    )
    return SortedTimelineData(sort_key=data.sort_key, groups=groups)


def drop_empty_groups(groups: Sequence[TimelineGroup]) -> List[TimelineGroup]:
    return [group for group in groups if group.items]


__all__ = [
    "group_key",
    "group_items_by_field",
    "ungrouped",
    "flatten",
    "regroup",
    "normalise_source",
    "filter_by_window",
    "drop_empty_groups",
]
