from __future__ import annotations

import logging

import pytest

from .errors import ZoomConfigurationError, ZoomOwnershipError
from .models import ZoomLevel
from .zoom import DEFAULT_ZOOM_LEVELS, ZoomController, ZoomOwner


def test_defaults_are_used_when_no_levels_are_given():
    zoom = ZoomController([])

    assert [level.label for level in zoom.levels] == ["Year", "Month", "Day"]
    assert zoom.active.label == "Month"
    assert zoom.active.day_width == 8
    assert zoom.levels == list(DEFAULT_ZOOM_LEVELS)


def test_first_level_is_active_when_none_is_marked_default():
    zoom = ZoomController([ZoomLevel(label="Quarter", day_width=2), ZoomLevel(label="Week", day_width=16)])

    assert zoom.active.label == "Quarter"


def test_select_switches_active_level_by_label_or_key():
    zoom = ZoomController(
        [
            ZoomLevel(label="Two Weeks", day_width=12),
            ZoomLevel(label="Day", day_width=30, is_default=True),
        ]
    )

    assert zoom.select("two-weeks").day_width == 12
    assert zoom.active.key == "two-weeks"
    assert zoom.select("DAY").day_width == 30


def test_unknown_label_falls_back_to_default(caplog: pytest.LogCaptureFixture):
    zoom = ZoomController()
    zoom.select("Day")

    with caplog.at_level(logging.WARNING, logger="timeline_layout.zoom"):
        level = zoom.select("Fortnight")

    assert level.label == "Month"
    assert zoom.active.label == "Month"
    assert "Fortnight" in caplog.text


def test_duplicate_labels_are_rejected():
    with pytest.raises(ZoomConfigurationError):
        ZoomController([ZoomLevel(label="Day", day_width=10), ZoomLevel(label="day", day_width=20)])


def test_engine_owned_zoom_refuses_caller_labels():
    zoom = ZoomController(owner=ZoomOwner.ENGINE)

    assert zoom.resolve().label == "Month"
    with pytest.raises(ZoomOwnershipError):
        zoom.resolve("Day")


def test_caller_owned_zoom_keeps_no_selection():
    zoom = ZoomController(owner=ZoomOwner.CALLER)

    assert zoom.resolve("Year").day_width == 4.5
    assert zoom.resolve("missing").label == "Month"
    assert zoom.resolve().label == "Month"
    with pytest.raises(ZoomOwnershipError):
        zoom.select("Day")
    with pytest.raises(ZoomOwnershipError):
        zoom.active


def test_zoom_level_accepts_client_field_names():
    level = ZoomLevel.model_validate({"label": "Hour View", "dayWidth": 96, "setAsDefault": True})

    assert level.day_width == 96
    assert level.is_default
    assert level.key == "hour-view"


def test_zoom_level_requires_positive_width():
    with pytest.raises(ValueError):
        ZoomLevel(label="Broken", day_width=0)
