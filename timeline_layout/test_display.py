from __future__ import annotations

import pytest

from .display import (
    FALLBACK_COLOR,
    FALLBACK_ICON,
    FieldDisplayConfig,
    FieldMappers,
    ItemDisplayConfig,
    TimelineConfigBuilder,
    project_management_template,
    tag_field_from_map,
)
from .models import TimelineItem

STATUS = {
    "todo": {"name": "To do", "color": "blue"},
    "done": {"name": "Done", "color": "green"},
}
PRIORITY = {"high": {"icon": "arrow-up", "color": "red"}}


def _item(**extra) -> TimelineItem:
    return TimelineItem(id="1", name="Task", start_date="2024-01-01", end_date="2024-01-02", **extra)


@pytest.mark.parametrize(
    "raw, expected",
    [(50, 50.0), (-10, 0.0), (250, 100.0), ("75", 75.0), (None, 0.0), (float("nan"), 0.0)],
)
def test_progress_mapper_clamps_values(raw, expected):
    assert FieldMappers.progress()(raw)["value"] == expected


def test_lookup_mappers_fall_back_for_unknown_values():
    assert FieldMappers.from_map(STATUS)("todo") == {"text": "To do", "color": "blue"}
    assert FieldMappers.from_map(STATUS)("blocked") == {"text": "blocked", "color": FALLBACK_COLOR}
    assert FieldMappers.icon_from_map(PRIORITY)("low") == {"icon_name": FALLBACK_ICON, "color": FALLBACK_COLOR}


def test_hidden_value_suppresses_tag():
    config = tag_field_from_map("status", STATUS, hide_value="done")

    assert config.resolve(_item(status="done")) is None
    assert config.resolve(_item(status="todo")) == {
        "field": "status",
        "display_type": "tag",
        "text": "To do",
        "color": "blue",
        "variant": "contained",
    }


def test_plain_lookup_table_mapping_skips_unmapped_values():
    config = FieldDisplayConfig(field="status", display_type="tag", mapping={"done": {"text": "✓"}})

    assert config.resolve(_item(status="done"))["text"] == "✓"
    assert config.resolve(_item(status="todo")) is None


def test_builder_splits_graphics_and_tags():
    config = (
        TimelineConfigBuilder()
        .add_progress("progress", color="teal")
        .add_icon("priority", PRIORITY)
        .add_simple_tag("team", variant="outlined")
        .build()
    )

    resolved = config.resolve(_item(progress=40, priority="high", team="ops"))

    assert [g["display_type"] for g in resolved["graphics"]] == ["progress", "icon"]
    assert resolved["graphics"][0]["color"] == "teal"
    assert resolved["graphics"][1]["icon_name"] == "arrow-up"
    assert resolved["tags"] == [
        {"field": "team", "display_type": "tag", "text": "ops", "variant": "outlined"}
    ]


def test_project_management_template_uses_given_tables():
    config = project_management_template(status=STATUS, priority=PRIORITY)

    resolved = config.resolve(_item(progress=10, status="done", priority="high"))

    assert resolved["graphics"][0]["value"] == 10.0
    assert resolved["tags"][0]["text"] == "Done"


def test_declarative_config_round_trips_json_shapes():
    config = ItemDisplayConfig.from_declarative(
        {
            "graphic_fields": [{"field": "progress", "display_type": "progress", "show_text": False}],
            "tag_fields": [
                {"field": "status", "display_type": "tag", "map": STATUS, "hide_value": "todo"},
                {"field": "team", "display_type": "tag", "style": {"fontWeight": "bold"}},
            ],
        }
    )

    hidden = config.resolve(_item(progress=120, status="todo", team="web"))
    shown = config.resolve(_item(progress=5, status="done", team="web"))

    assert hidden["graphics"][0] == {"field": "progress", "display_type": "progress", "value": 100.0, "show_text": False}
    assert [t["field"] for t in hidden["tags"]] == ["team"]
    assert hidden["tags"][0]["style"] == {"fontWeight": "bold"}
    assert [t["text"] for t in shown["tags"]] == ["Done", "web"]


def test_declarative_config_rejects_unknown_display_type():
    with pytest.raises(ValueError):
        ItemDisplayConfig.from_declarative({"tag_fields": [{"field": "x", "display_type": "sparkline"}]})


@pytest.mark.parametrize(
    "declarative",
    [
        {"tag_fields": ["status"]},
        {"tag_fields": {"field": "status", "display_type": "tag"}},
        {"tag_fields": [{"field": "status", "display_type": "tag", "map": ["a"]}]},
        {"tag_fields": [{"field": "status", "display_type": "tag", "map": {"done": "Done"}}]},
        {"graphic_fields": [{"field": "priority", "display_type": "icon", "map": "high"}]},
        {"tag_fields": [{"field": "team", "display_type": "tag", "style": "bold"}]},
        {"tag_fields": [{"field": 3, "display_type": "tag"}]},
    ],
)
def test_declarative_config_rejects_malformed_shapes(declarative):
    with pytest.raises(ValueError):
        ItemDisplayConfig.from_declarative(declarative)
