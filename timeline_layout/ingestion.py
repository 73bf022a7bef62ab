from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Literal, Mapping, Optional, Set, Tuple

from pydantic import ValidationError

from .errors import ItemDiagnostic, MalformedItemError
from .models import SortedTimelineData, TimelineGroup, TimelineItem

logger = logging.getLogger("timeline_layout.ingestion")

InvalidItemPolicy = Literal["reject", "drop"]


@dataclass
class IngestResult:
    items: List[TimelineItem] = field(default_factory=list)
    diagnostics: List[ItemDiagnostic] = field(default_factory=list)

    @property
    def dropped(self) -> int:
        return len(self.diagnostics)


def _record_id(record: Any) -> Optional[str]:
    if isinstance(record, TimelineItem):
        return record.id
    if isinstance(record, Mapping):
        raw = record.get("id")
        return None if raw is None else str(raw)
    return None


def _describe_validation_error(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def ingest_items(
    records: Iterable[Any],
    *,
    policy: InvalidItemPolicy = "reject",
    seen_ids: Optional[Set[str]] = None,
) -> IngestResult:
    """Validate raw records into :class:`TimelineItem` instances.

    A record is malformed when a required field is missing, a date cannot be
    parsed, its start lies after its end, or its id was already used.  With
    ``policy="reject"`` every malformed record is collected and a single
    :class:`MalformedItemError` is raised before anything is grouped.  With
    ``policy="drop"`` malformed records are logged and left out.

    ``seen_ids`` lets several calls (one per pre-built group) share the
    uniqueness check.
    """

    if policy not in ("reject", "drop"):
        raise ValueError(f"unknown invalid item policy: {policy!r}")

    used_ids: Set[str] = seen_ids if seen_ids is not None else set()
    result = IngestResult()

    for index, record in enumerate(records):
        item_id = _record_id(record)
        try:
            item = record if isinstance(record, TimelineItem) else TimelineItem.model_validate(record)
        except ValidationError as exc:
            result.diagnostics.append(
                ItemDiagnostic(index=index, item_id=item_id, reason=_describe_validation_error(exc))
            )
            continue

        if item.id in used_ids:
            result.diagnostics.append(
                ItemDiagnostic(index=index, item_id=item.id, reason="duplicate id")
            )
            continue

        used_ids.add(item.id)
        result.items.append(item)

    if result.diagnostics:
        if policy == "reject":
            raise MalformedItemError(result.diagnostics)
        for diagnostic in result.diagnostics:
            logger.warning("Dropping malformed timeline %s", diagnostic.describe())

    return result


def ensure_unique_ids(
    data: SortedTimelineData,
    *,
    policy: InvalidItemPolicy = "reject",
) -> Tuple[SortedTimelineData, List[ItemDiagnostic]]:
    """Check that item ids are unique across every group of ``data``.

    Used for sources built from ready-made items, which never went through
    :func:`ingest_items`.  Indexes in the diagnostics count items across all
    groups in order.  With ``policy="drop"`` the first occurrence of each id
    is kept; ``data`` itself is returned when every id is unique.
    """

    if policy not in ("reject", "drop"):
        raise ValueError(f"unknown invalid item policy: {policy!r}")

    seen: Set[str] = set()
    diagnostics: List[ItemDiagnostic] = []
    groups: List[TimelineGroup] = []
    index = 0
    for group in data.groups:
        kept: List[TimelineItem] = []
        for item in group.items:
            if item.id in seen:
                diagnostics.append(ItemDiagnostic(index=index, item_id=item.id, reason="duplicate id"))
            else:
                seen.add(item.id)
                kept.append(item)
            index += 1
        groups.append(TimelineGroup(title=group.title, items=kept))

    if not diagnostics:
        return data, []
    if policy == "reject":
        raise MalformedItemError(diagnostics)
    for diagnostic in diagnostics:
        logger.warning("Dropping malformed timeline %s", diagnostic.describe())
    return SortedTimelineData(sort_key=data.sort_key, groups=groups), diagnostics


__all__ = ["InvalidItemPolicy", "IngestResult", "ingest_items", "ensure_unique_ids"]
