from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .models import Span, TimeWindow, coerce_instant, to_naive_utc

MAX_LAYOUT_ITEMS = 10_000


class RawRecords(BaseModel):
    kind: Literal["raw"] = "raw"
    items: List[Dict[str, Any]] = Field(
        ...,
        max_length=MAX_LAYOUT_ITEMS,
        description="Timeline records with at least id, name, startDate and endDate",
    )
    group_by: Optional[str] = Field(default=None, description="Field to group by; omitted for a single band")


class GroupRecords(BaseModel):
    title: str = ""
    items: List[Dict[str, Any]] = Field(default_factory=list, max_length=MAX_LAYOUT_ITEMS)


class GroupedRecords(BaseModel):
    kind: Literal["grouped"] = "grouped"
    sort_key: str = Field(default="id", description="Field the groups were built from")
    groups: List[GroupRecords] = Field(default_factory=list)


RecordSource = Annotated[Union[RawRecords, GroupedRecords], Field(discriminator="kind")]


class LayoutRequest(BaseModel):
    """Input of one layout pass."""

    source: RecordSource
    window: Optional[TimeWindow] = Field(
        default=None,
        description="Only items whose start falls inside this inclusive window are laid out",
    )
    zoom_label: Optional[str] = Field(
        default=None,
        description="Zoom level to use; only accepted when the caller owns the zoom selection",
    )
    viewport_width: Optional[float] = Field(
        default=None,
        gt=0,
        description="Width of the scroll viewport, used to compute the scroll-to-now offset",
    )
    now: Optional[datetime] = Field(default=None, description="Override of the current instant")
    display_config: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Per-field display configuration, echoed back and resolved per item",
    )

    @field_validator("now", mode="before")
    @classmethod
    def _coerce_now(cls, value: Any) -> Any:
        return coerce_instant(value)

    @field_validator("now")
    @classmethod
    def _normalise_now(cls, value: Optional[datetime]) -> Optional[datetime]:
        return None if value is None else to_naive_utc(value)


class PlacedItem(BaseModel):
    item: Dict[str, Any]
    column: int
    x: float
    y: int
    width: float
    display: Optional[Dict[str, Any]] = None


class GroupLayout(BaseModel):
    title: str
    column_count: int
    top: int
    height: int
    is_end_spacer: bool = False
    placements: List[PlacedItem] = Field(default_factory=list)


class ZoomLevelOut(BaseModel):
    label: str
    key: str
    day_width: float
    is_default: bool


class DiagnosticOut(BaseModel):
    index: int
    item_id: Optional[str] = None
    reason: str


class LayoutResponse(BaseModel):
    empty: bool
    sort_key: str
    span: Optional[Span] = None
    groups: List[GroupLayout]
    total_width: int
    total_height: int
    has_rail: bool
    rail_width: int
    zoom: ZoomLevelOut
    scroll_to_now: Optional[float] = None
    display_config: Optional[Dict[str, Any]] = None
    dropped: List[DiagnosticOut] = Field(default_factory=list)
    generated_at: datetime


class ZoomLevelsResponse(BaseModel):
    owner: Literal["engine", "caller"]
    active: Optional[str] = None
    levels: List[ZoomLevelOut]


class ZoomSelectRequest(BaseModel):
    label: str = Field(..., max_length=100)

    @field_validator("label")
    @classmethod
    def _ensure_non_empty(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("label must not be empty")
        return cleaned


__all__ = [
    "RawRecords",
    "GroupRecords",
    "GroupedRecords",
    "RecordSource",
    "LayoutRequest",
    "PlacedItem",
    "GroupLayout",
    "ZoomLevelOut",
    "DiagnosticOut",
    "LayoutResponse",
    "ZoomLevelsResponse",
    "ZoomSelectRequest",
]
