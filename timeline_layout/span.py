from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime
from typing import Iterator, Sequence, Tuple, Union

from .errors import EmptyTimelineError
from .models import Span, TimelineItem

Instant = Union[date, datetime]


def days_in_month(year: int, month0: int) -> int:
    """Number of days in a 0-based month."""

    return monthrange(year, month0 + 1)[1]


def compute_span(items: Sequence[TimelineItem]) -> Span:
    """Smallest calendar range covering every item.

    The first rendered year starts at the month of the earliest start; every
    later year is rendered whole up to December of the latest end year.
    """

    if not items:
        raise EmptyTimelineError("cannot compute a span without any timeline items")

    earliest = min(item.start_date for item in items)
    latest = max(item.end_date for item in items)
    return Span(
        years=list(range(earliest.year, latest.year + 1)),
        start_month=earliest.month - 1,
    )


def iter_rendered_months(span: Span) -> Iterator[Tuple[int, int, int]]:
    """Yield ``(year, month0, days)`` for every month drawn on the axis."""

    for index, year in enumerate(span.years):
        first_month = span.start_month if index == 0 else 0
        for month0 in range(first_month, 12):
            yield year, month0, days_in_month(year, month0)


def total_days(span: Span) -> int:
    return sum(days for _year, _month0, days in iter_rendered_months(span))


def _as_date(when: Instant) -> date:
    if isinstance(when, datetime):
        return when.date()
    return when


def days_from_origin(span: Span, when: Instant) -> int:
    """Whole calendar days between the span origin and ``when`` (negative before it)."""

    return (_as_date(when) - span.origin).days


def span_contains_year(span: Span, year: int) -> bool:
    return span.first_year <= year <= span.last_year


__all__ = [
    "days_in_month",
    "compute_span",
    "iter_rendered_months",
    "total_days",
    "days_from_origin",
    "span_contains_year",
]
