from __future__ import annotations

import logging
from datetime import datetime

import pytest
from pydantic import ValidationError

from .errors import MalformedItemError
from .ingestion import ensure_unique_ids, ingest_items
from .models import SortedTimelineData, TimelineGroup, TimelineItem


def _record(item_id, start="2024-01-01", end="2024-01-10", **extra):
    return {"id": item_id, "name": f"Task {item_id}", "startDate": start, "endDate": end, **extra}


def test_valid_records_become_items():
    result = ingest_items([_record(1, team="ops"), _record("2")])

    assert [item.id for item in result.items] == ["1", "2"]
    assert result.items[0].field_value("team") == "ops"
    assert result.items[0].start_date == datetime(2024, 1, 1)
    assert result.dropped == 0


def test_reject_policy_reports_every_bad_record():
    records = [
        _record("ok"),
        _record("backwards", start="2024-02-01", end="2024-01-01"),
        {"id": "nameless", "startDate": "2024-01-01", "endDate": "2024-01-02"},
        _record("garbled", start="not a date"),
    ]

    with pytest.raises(MalformedItemError) as excinfo:
        ingest_items(records)

    diagnostics = excinfo.value.diagnostics
    assert [d.item_id for d in diagnostics] == ["backwards", "nameless", "garbled"]
    assert [d.index for d in diagnostics] == [1, 2, 3]
    assert "start_date must not be after end_date" in diagnostics[0].reason
    assert "name" in diagnostics[1].reason
    assert "3 malformed timeline item(s)" in str(excinfo.value)


def test_drop_policy_keeps_valid_records_and_logs(caplog: pytest.LogCaptureFixture):
    records = [_record("a"), _record("b", start="2024-03-01", end="2024-02-01"), _record("c")]

    with caplog.at_level(logging.WARNING, logger="timeline_layout.ingestion"):
        result = ingest_items(records, policy="drop")

    assert [item.id for item in result.items] == ["a", "c"]
    assert result.dropped == 1
    assert "item b" in caplog.text


def test_duplicate_ids_are_malformed():
    with pytest.raises(MalformedItemError) as excinfo:
        ingest_items([_record("x"), _record("x")])

    assert excinfo.value.diagnostics[0].reason == "duplicate id"
    assert excinfo.value.diagnostics[0].index == 1


def test_seen_ids_are_shared_across_calls():
    seen = set()
    ingest_items([_record("x")], seen_ids=seen)

    result = ingest_items([_record("x"), _record("y")], policy="drop", seen_ids=seen)

    assert [item.id for item in result.items] == ["y"]
    assert seen == {"x", "y"}


def test_unknown_policy_is_a_programming_error():
    with pytest.raises(ValueError):
        ingest_items([], policy="ignore")  # type: ignore[arg-type]


def test_error_message_is_truncated_after_five_items():
    records = [_record(f"bad-{i}", start="2024-02-01", end="2024-01-01") for i in range(7)]

    with pytest.raises(MalformedItemError) as excinfo:
        ingest_items(records)

    assert "(+2 more)" in str(excinfo.value)
    assert len(excinfo.value.diagnostics) == 7


def test_item_dates_are_normalised_to_naive_utc():
    item = TimelineItem(
        id="tz",
        name="Offset",
        start_date="2024-01-01T10:00:00+02:00",
        end_date="2024-01-01T12:00:00+02:00",
    )

    assert item.start_date == datetime(2024, 1, 1, 8, 0)
    assert item.start_date.tzinfo is None


def test_item_allows_zero_length_range_but_not_reversed():
    TimelineItem(id="m", name="Milestone", start_date="2024-05-01", end_date="2024-05-01")

    with pytest.raises(ValidationError):
        TimelineItem(id="r", name="Reversed", start_date="2024-05-02", end_date="2024-05-01")


def test_item_requires_non_empty_id():
    with pytest.raises(ValidationError):
        TimelineItem(id="", name="No id", start_date="2024-05-01", end_date="2024-05-02")


def _grouped(*groups) -> SortedTimelineData:
    return SortedTimelineData(
        sort_key="team",
        groups=[
            TimelineGroup(title=title, items=[TimelineItem.model_validate(_record(i)) for i in ids])
            for title, ids in groups
        ],
    )


def test_unique_ids_leave_data_untouched():
    data = _grouped(("a", ["1", "2"]), ("b", ["3"]))

    checked, diagnostics = ensure_unique_ids(data)

    assert checked is data
    assert diagnostics == []


def test_ids_repeated_across_groups_are_rejected():
    with pytest.raises(MalformedItemError) as excinfo:
        ensure_unique_ids(_grouped(("a", ["1", "2"]), ("b", ["2", "3"])))

    assert [(d.index, d.item_id) for d in excinfo.value.diagnostics] == [(2, "2")]


def test_ids_repeated_across_groups_keep_first_under_drop():
    checked, diagnostics = ensure_unique_ids(_grouped(("a", ["1", "2"]), ("b", ["2", "3"])), policy="drop")

    assert [[item.id for item in g.items] for g in checked.groups] == [["1", "2"], ["3"]]
    assert checked.sort_key == "team"
    assert len(diagnostics) == 1
