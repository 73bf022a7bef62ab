from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

_DATE_ONLY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# camelCase names used by rendering clients for the base fields
_FIELD_ALIASES = {
    "startDate": "start_date",
    "endDate": "end_date",
}


def coerce_instant(value: Any) -> Any:
    """Accept plain dates and ``YYYY-MM-DD`` strings wherever an instant is expected."""

    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and _DATE_ONLY_PATTERN.match(value.strip()):
        return datetime.combine(date.fromisoformat(value.strip()), datetime.min.time())
    return value


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class TimelineItem(BaseModel):
    """A single dated entity rendered on the horizontal time axis.

    Only ``id``, ``name``, ``start_date`` and ``end_date`` are required; any
    other field the caller supplies is kept as an extension field and can be
    used for grouping or display.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: str = Field(..., min_length=1, description="Identifier, unique within the whole dataset")
    name: str = Field(..., description="Label shown on the item bar")
    start_date: datetime = Field(..., alias="startDate")
    end_date: datetime = Field(..., alias="endDate")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_dates(cls, value: Any) -> Any:
        return coerce_instant(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalise_timezone(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def _ensure_ordered_range(self) -> "TimelineItem":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    def field_value(self, name: str) -> Any:
        """Return a base or extension field by name, or ``None`` when unset."""

        attribute = _FIELD_ALIASES.get(name, name)
        if attribute in type(self).model_fields:
            return getattr(self, attribute)
        extra = self.model_extra or {}
        return extra.get(name)


class TimelineGroup(BaseModel):
    title: str = ""
    items: List[TimelineItem] = Field(default_factory=list)


class SortedTimelineData(BaseModel):
    """Canonical grouped representation consumed by every layout stage."""

    sort_key: str = Field(default="id", description="Field the groups were built from")
    groups: List[TimelineGroup] = Field(default_factory=list)


class RawItems(BaseModel):
    kind: Literal["raw"] = "raw"
    items: List[TimelineItem] = Field(default_factory=list)
    group_by: Optional[str] = Field(default=None, description="Field to group by; None keeps a single group")


class Grouped(BaseModel):
    kind: Literal["grouped"] = "grouped"
    data: SortedTimelineData


LayoutSource = Annotated[Union[RawItems, Grouped], Field(discriminator="kind")]


class TimeWindow(BaseModel):
    """Inclusive window applied to item start dates."""

    start: datetime
    end: datetime

    @field_validator("start", "end", mode="before")
    @classmethod
    def _coerce_bounds(cls, value: Any) -> Any:
        return coerce_instant(value)

    @field_validator("start", "end")
    @classmethod
    def _normalise_timezone(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def _ensure_ordered(self) -> "TimeWindow":
        if self.start > self.end:
            raise ValueError("window start must not be after window end")
        return self

    def contains(self, when: datetime) -> bool:
        return self.start <= when <= self.end


class Placement(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: TimelineItem
    column: int = Field(..., ge=0)
    start_date: datetime
    end_date: datetime


class GroupPlacement(BaseModel):
    title: str = ""
    items: List[TimelineItem] = Field(default_factory=list)
    placements: List[Placement] = Field(default_factory=list)
    is_end_spacer: bool = False

    @property
    def column_count(self) -> int:
        if not self.placements:
            return 0
        return max(placement.column for placement in self.placements) + 1


class Span(BaseModel):
    """Calendar range rendered on the axis: whole years, first one clipped at ``start_month``."""

    model_config = ConfigDict(frozen=True)

    years: List[int] = Field(..., min_length=1)
    start_month: int = Field(..., ge=0, le=11, description="0-based month of the earliest start")

    @field_validator("years")
    @classmethod
    def _ensure_contiguous(cls, value: List[int]) -> List[int]:
        expected = list(range(value[0], value[0] + len(value)))
        if value != expected:
            raise ValueError("years must be a contiguous ascending range")
        return value

    @property
    def first_year(self) -> int:
        return self.years[0]

    @property
    def last_year(self) -> int:
        return self.years[-1]

    @property
    def origin(self) -> date:
        return date(self.first_year, self.start_month + 1, 1)


class ZoomLevel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(..., min_length=1)
    day_width: float = Field(..., gt=0, validation_alias=AliasChoices("day_width", "dayWidth"))
    is_default: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_default", "isDefault", "setAsDefault"),
    )

    @property
    def key(self) -> str:
        return self.label.strip().lower().replace(" ", "-")


__all__ = [
    "coerce_instant",
    "to_naive_utc",
    "TimelineItem",
    "TimelineGroup",
    "SortedTimelineData",
    "RawItems",
    "Grouped",
    "LayoutSource",
    "TimeWindow",
    "Placement",
    "GroupPlacement",
    "Span",
    "ZoomLevel",
]
