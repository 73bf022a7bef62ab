"""Grouped, overlap-free layout of dated items on a horizontal time axis."""

from .display import (
    FieldDisplayConfig,
    FieldMappers,
    ItemDisplayConfig,
    TimelineConfigBuilder,
    icon_field_from_map,
    progress_field,
    project_management_template,
    tag_field,
    tag_field_from_map,
)
from .engine import TimelineEngine, TimelineLayout
from .errors import (
    EmptyTimelineError,
    ItemDiagnostic,
    MalformedItemError,
    TimelineLayoutError,
    ZoomConfigurationError,
    ZoomOwnershipError,
)
from .geometry import GeometryMapper
from .grouping import filter_by_window, group_items_by_field, normalise_source, regroup, ungrouped
from .ingestion import IngestResult, ingest_items
from .models import (
    Grouped,
    GroupPlacement,
    LayoutSource,
    Placement,
    RawItems,
    SortedTimelineData,
    Span,
    TimelineGroup,
    TimelineItem,
    TimeWindow,
    ZoomLevel,
)
from .navigation import scroll_offset_for_now
from .placement import place, place_groups
from .span import compute_span
from .zoom import DEFAULT_ZOOM_LEVELS, ZoomController, ZoomOwner

__all__ = [
    "FieldDisplayConfig",
    "FieldMappers",
    "ItemDisplayConfig",
    "TimelineConfigBuilder",
    "progress_field",
    "icon_field_from_map",
    "tag_field_from_map",
    "tag_field",
    "project_management_template",
    "TimelineEngine",
    "TimelineLayout",
    "EmptyTimelineError",
    "ItemDiagnostic",
    "MalformedItemError",
    "TimelineLayoutError",
    "ZoomConfigurationError",
    "ZoomOwnershipError",
    "GeometryMapper",
    "filter_by_window",
    "group_items_by_field",
    "normalise_source",
    "regroup",
    "ungrouped",
    "IngestResult",
    "ingest_items",
    "Grouped",
    "GroupPlacement",
    "LayoutSource",
    "Placement",
    "RawItems",
    "SortedTimelineData",
    "Span",
    "TimelineGroup",
    "TimelineItem",
    "TimeWindow",
    "ZoomLevel",
    "scroll_offset_for_now",
    "place",
    "place_groups",
    "compute_span",
    "DEFAULT_ZOOM_LEVELS",
    "ZoomController",
    "ZoomOwner",
]
