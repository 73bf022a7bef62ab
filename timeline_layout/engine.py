from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .display import ItemDisplayConfig
from .errors import ItemDiagnostic
from .geometry import GeometryMapper
from .grouping import drop_empty_groups, filter_by_window, flatten, normalise_source
from .ingestion import ensure_unique_ids, ingest_items
from .models import (
    GroupPlacement,
    Grouped,
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
from .placement import place_groups
from .settings import Settings, settings as default_settings
from .span import Instant, compute_span
from .zoom import ZoomController

logger = logging.getLogger("timeline_layout.engine")


@dataclass
class TimelineLayout:
    """Result of one layout pass, ready for a renderer."""

    groups: List[GroupPlacement]
    span: Optional[Span]
    geometry: Optional[GeometryMapper]
    zoom: ZoomLevel
    sort_key: str = "id"
    display_config: Optional[ItemDisplayConfig] = None
    diagnostics: List[ItemDiagnostic] = field(default_factory=list)

    @classmethod
    def empty(
        cls,
        zoom: ZoomLevel,
        *,
        sort_key: str = "id",
        display_config: Optional[ItemDisplayConfig] = None,
        diagnostics: Optional[List[ItemDiagnostic]] = None,
    ) -> "TimelineLayout":
        return cls(
            groups=[],
            span=None,
            geometry=None,
            zoom=zoom,
            sort_key=sort_key,
            display_config=display_config,
            diagnostics=list(diagnostics or []),
        )

    @property
    def is_empty(self) -> bool:
        return self.span is None

    @property
    def item_count(self) -> int:
        return sum(len(group.placements) for group in self.groups)

    def iter_boxes(self) -> Iterator[Tuple[int, Placement, Dict[str, float]]]:
        if self.geometry is None:
            return
        for group_index, group in enumerate(self.groups):
            for placement in group.placements:
                yield group_index, placement, self.geometry.box(group_index, placement)

    def scroll_offset_for_now(self, viewport_width: float, *, now: Optional[Instant] = None) -> Optional[float]:
        if self.span is None or self.geometry is None:
            return None
        return scroll_offset_for_now(
            self.span,
            self.zoom.day_width,
            viewport_width,
            self.geometry.rail_offset,
            now=now,
        )

    def display_for(self, item: TimelineItem) -> Dict[str, List[Dict[str, Any]]]:
        if self.display_config is None:
            return {"graphics": [], "tags": []}
        return self.display_config.resolve(item)


class TimelineEngine:
    """Runs grouping, span, placement and geometry for one input snapshot.

    Every call to :meth:`layout` recomputes everything from the input; the
    only state kept between calls is the zoom selection when the engine owns
    it.
    """

    def __init__(
        self,
        *,
        config: Optional[Settings] = None,
        zoom: Optional[ZoomController] = None,
        display_config: Optional[ItemDisplayConfig] = None,
    ) -> None:
        self.config = config or default_settings
        self.zoom = zoom or ZoomController()
        self.display_config = display_config

    def select_zoom(self, label: str) -> ZoomLevel:
        return self.zoom.select(label)

    def prepare(
        self,
        source: LayoutSource,
        window: Optional[TimeWindow] = None,
    ) -> Tuple[SortedTimelineData, List[ItemDiagnostic]]:
        """Normalise ``source``, check id uniqueness and apply the time window.

        Returns the data to lay out together with the diagnostics of any
        duplicate ids dropped under the ``drop`` policy.
        """

        data, duplicates = ensure_unique_ids(normalise_source(source), policy=self.config.invalid_item_policy)
        data = filter_by_window(data, window)
        return SortedTimelineData(sort_key=data.sort_key, groups=drop_empty_groups(data.groups)), duplicates

    def layout(
        self,
        source: LayoutSource,
        *,
        window: Optional[TimeWindow] = None,
        zoom_label: Optional[str] = None,
        diagnostics: Optional[Sequence[ItemDiagnostic]] = None,
    ) -> TimelineLayout:
        level = self.zoom.resolve(zoom_label)
        data, duplicates = self.prepare(source, window)
        reported = list(diagnostics or []) + duplicates
        items = flatten(data)

        if not items:
            logger.info("Nothing to render: no timeline items after filtering")
            return TimelineLayout.empty(
                level,
                sort_key=data.sort_key,
                display_config=self.display_config,
                diagnostics=reported,
            )

        span = compute_span(items)
        groups = place_groups(data)
        logger.debug(
            "Laid out %d item(s) in %d group(s) over %d year(s) at %.2f px/day",
            len(items),
            len(data.groups),
            len(span.years),
            level.day_width,
        )
        return TimelineLayout(
            groups=groups,
            span=span,
            geometry=self._geometry(span, level, groups),
            zoom=level,
            sort_key=data.sort_key,
            display_config=self.display_config,
            diagnostics=reported,
        )

    def layout_records(
        self,
        records: Iterable[Mapping[str, Any]],
        *,
        group_by: Optional[str] = None,
        window: Optional[TimeWindow] = None,
        zoom_label: Optional[str] = None,
    ) -> TimelineLayout:
        """Ingest raw records with the configured invalid-item policy, then lay them out."""

        ingested = ingest_items(records, policy=self.config.invalid_item_policy)
        return self.layout(
            RawItems(items=ingested.items, group_by=group_by),
            window=window,
            zoom_label=zoom_label,
            diagnostics=ingested.diagnostics,
        )

    def layout_grouped_records(
        self,
        groups: Iterable[Tuple[str, Iterable[Mapping[str, Any]]]],
        *,
        sort_key: str = "id",
        window: Optional[TimeWindow] = None,
        zoom_label: Optional[str] = None,
    ) -> TimelineLayout:
        seen_ids: set = set()
        diagnostics: List[ItemDiagnostic] = []
        built: List[TimelineGroup] = []
        for title, records in groups:
            ingested = ingest_items(records, policy=self.config.invalid_item_policy, seen_ids=seen_ids)
            diagnostics.extend(ingested.diagnostics)
            built.append(TimelineGroup(title=title, items=ingested.items))

        return self.layout(
            Grouped(data=SortedTimelineData(sort_key=sort_key, groups=built)),
            window=window,
            zoom_label=zoom_label,
            diagnostics=diagnostics,
        )

    def relayout_for_zoom(self, layout: TimelineLayout, zoom_label: Optional[str] = None) -> TimelineLayout:
        """Rebuild only the geometry of ``layout`` for the current (or named) zoom level.

        Column assignment does not depend on scale, so placements are reused.
        """

        level = self.zoom.resolve(zoom_label)
        if layout.span is None:
            return TimelineLayout.empty(
                level,
                sort_key=layout.sort_key,
                display_config=layout.display_config,
                diagnostics=layout.diagnostics,
            )
        return TimelineLayout(
            groups=layout.groups,
            span=layout.span,
            geometry=self._geometry(layout.span, level, layout.groups),
            zoom=level,
            sort_key=layout.sort_key,
            display_config=layout.display_config,
            diagnostics=layout.diagnostics,
        )

    def _geometry(self, span: Span, level: ZoomLevel, groups: Sequence[GroupPlacement]) -> GeometryMapper:
        return GeometryMapper(
            span,
            level.day_width,
            groups,
            cell_height=self.config.cell_height,
            group_gap=self.config.group_gap,
            rail_width=self.config.sidebar_width,
        )


__all__ = ["TimelineLayout", "TimelineEngine"]
