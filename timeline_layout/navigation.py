from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from .models import Span
from .span import Instant, days_from_origin, span_contains_year, total_days


def scroll_offset_for_now(
    span: Span,
    day_width: float,
    viewport_width: float,
    rail_width: float,
    *,
    now: Optional[Instant] = None,
) -> Optional[float]:
    """Horizontal scroll offset that centres ``now`` in the usable viewport.

    Returns ``None`` when ``now`` falls outside the rendered years, in which
    case the viewport should stay where it is.
    """

    current = now if now is not None else datetime.now()
    if not span_contains_year(span, current.year):
        return None

    position = days_from_origin(span, current) * day_width
    target = position - (viewport_width - rail_width) / 2

    # same rounding as GeometryMapper.total_width
    content_width = math.ceil(total_days(span) * day_width) + rail_width
    max_scroll = max(0.0, content_width - viewport_width)
    return float(max(0.0, min(target, max_scroll)))


__all__ = ["scroll_offset_for_now"]
