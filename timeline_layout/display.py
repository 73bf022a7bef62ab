"""Per-field display configuration for rendering clients.

The layout engine never reads these settings; it only carries them next to
the computed layout so a renderer can turn item fields into progress bars,
icons and tags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Union

from .grouping import group_key
from .models import TimelineItem

DisplayType = Literal["icon", "progress", "tag"]
Mapper = Callable[[Any], Dict[str, Any]]
LookupTable = Mapping[str, Mapping[str, Any]]
Visibility = Union[bool, Callable[[TimelineItem], bool]]

FALLBACK_COLOR = "gray"
FALLBACK_ICON = "help"


def _clamp_progress(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = 0.0
    if number != number:  # NaN
        number = 0.0
    return max(0.0, min(100.0, number))


class FieldMappers:
    """Factories turning a raw field value into visual properties."""

    @staticmethod
    def progress(*, show_text: bool = True, color: Optional[str] = None) -> Mapper:
        def mapper(value: Any) -> Dict[str, Any]:
            props: Dict[str, Any] = {"value": _clamp_progress(value), "show_text": show_text}
            if color:
                props["color"] = color
            return props

        return mapper

    @staticmethod
    def from_map(table: LookupTable) -> Mapper:
        def mapper(value: Any) -> Dict[str, Any]:
            entry = table.get(group_key(value)) or {}
            return {
                "text": entry.get("name") or group_key(value),
                "color": entry.get("color") or FALLBACK_COLOR,
            }

        return mapper

    @staticmethod
    def icon_from_map(table: LookupTable) -> Mapper:
        def mapper(value: Any) -> Dict[str, Any]:
            entry = table.get(group_key(value)) or {}
            return {
                "icon_name": entry.get("icon") or FALLBACK_ICON,
                "color": entry.get("color") or FALLBACK_COLOR,
            }

        return mapper

    @staticmethod
    def text(*, color: Optional[str] = None, variant: Optional[str] = None) -> Mapper:
        def mapper(value: Any) -> Dict[str, Any]:
            props: Dict[str, Any] = {"text": group_key(value)}
            if color:
                props["color"] = color
            if variant:
                props["variant"] = variant
            return props

        return mapper


@dataclass
class FieldDisplayConfig:
    field: str
    display_type: DisplayType
    mapping: Optional[Union[Mapper, LookupTable]] = None
    style: Dict[str, Any] = field(default_factory=dict)
    visible: Visibility = True

    def is_visible(self, item: TimelineItem) -> bool:
        if callable(self.visible):
            return bool(self.visible(item))
        return bool(self.visible)

    def resolve(self, item: TimelineItem) -> Optional[Dict[str, Any]]:
        """Visual properties for ``item``, or ``None`` when nothing should be drawn."""

        if not self.is_visible(item):
            return None

        value = item.field_value(self.field)
        if self.mapping is None:
            props: Optional[Mapping[str, Any]] = {"value": value}
        elif callable(self.mapping):
            props = self.mapping(value)
        else:
            props = self.mapping.get(group_key(value))
        if props is None:
            return None

        resolved = {"field": self.field, "display_type": self.display_type}
        resolved.update(props)
        if self.style:
            resolved["style"] = dict(self.style)
        return resolved


@dataclass
class ItemDisplayConfig:
    graphic_fields: List[FieldDisplayConfig] = field(default_factory=list)
    tag_fields: List[FieldDisplayConfig] = field(default_factory=list)

    def resolve(self, item: TimelineItem) -> Dict[str, List[Dict[str, Any]]]:
        graphics = [props for props in (cfg.resolve(item) for cfg in self.graphic_fields) if props]
        tags = [props for props in (cfg.resolve(item) for cfg in self.tag_fields) if props]
        return {"graphics": graphics, "tags": tags}

    @classmethod
    def from_declarative(cls, data: Mapping[str, Any]) -> "ItemDisplayConfig":
        """Build a config from JSON-friendly field descriptions.

        Each entry of ``graphic_fields`` / ``tag_fields`` looks like
        ``{"field": "status", "display_type": "tag", "map": {...}, "hide_value": "done"}``.
        Malformed descriptions raise ``ValueError``.
        """

        if not isinstance(data, Mapping):
            raise ValueError("display config must be an object")
        return cls(
            graphic_fields=[_field_from_declarative(entry) for entry in _entries(data, "graphic_fields")],
            tag_fields=[_field_from_declarative(entry) for entry in _entries(data, "tag_fields")],
        )


def _entries(data: Mapping[str, Any], key: str) -> List[Any]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise ValueError(f"{key} must be a list of field display entries")
    return entries


def _hide_when(field_name: str, hidden_value: Any) -> Callable[[TimelineItem], bool]:
    def predicate(item: TimelineItem) -> bool:
        return item.field_value(field_name) != hidden_value

    return predicate


def _lookup_table(field_name: str, table: Any) -> LookupTable:
    if not isinstance(table, Mapping) or not all(isinstance(entry, Mapping) for entry in table.values()):
        raise ValueError(f"map of field {field_name!r} must be an object of objects")
    return table


def _field_from_declarative(entry: Any) -> FieldDisplayConfig:
    if not isinstance(entry, Mapping):
        raise ValueError(f"invalid field display entry: {entry!r}")
    field_name = entry.get("field")
    display_type = entry.get("display_type")
    if not field_name or not isinstance(field_name, str) or display_type not in ("icon", "progress", "tag"):
        raise ValueError(f"invalid field display entry: {dict(entry)!r}")

    table = entry.get("map")
    if table is not None:
        table = _lookup_table(field_name, table)
    options = {key: entry[key] for key in ("color", "variant") if entry.get(key)}
    if display_type == "progress":
        config = progress_field(field_name, show_text=entry.get("show_text", True), color=entry.get("color"))
    elif display_type == "icon":
        config = icon_field_from_map(field_name, table or {})
    elif table is not None:
        config = tag_field_from_map(field_name, table, **options)
    else:
        config = tag_field(field_name, **options)

    if "hide_value" in entry:
        config.visible = _hide_when(field_name, entry["hide_value"])
    style = entry.get("style")
    if style:
        if not isinstance(style, Mapping):
            raise ValueError(f"style of field {field_name!r} must be an object")
        config.style = dict(style)
    return config


def progress_field(field_name: str, *, show_text: bool = True, color: Optional[str] = None) -> FieldDisplayConfig:
    return FieldDisplayConfig(
        field=field_name,
        display_type="progress",
        mapping=FieldMappers.progress(show_text=show_text, color=color),
    )


def icon_field_from_map(field_name: str, table: LookupTable) -> FieldDisplayConfig:
    return FieldDisplayConfig(
        field=field_name,
        display_type="icon",
        mapping=FieldMappers.icon_from_map(table),
    )


def tag_field_from_map(
    field_name: str,
    table: LookupTable,
    *,
    variant: str = "contained",
    color: Optional[str] = None,
    hide_value: Any = None,
) -> FieldDisplayConfig:
    """Tag whose text and colour come from ``table``; hidden when the field equals ``hide_value``."""

    base = FieldMappers.from_map(table)

    def mapper(value: Any) -> Dict[str, Any]:
        props = base(value)
        if color:
            props["color"] = color
        props["variant"] = variant
        return props

    visible: Visibility = _hide_when(field_name, hide_value) if hide_value is not None else True
    return FieldDisplayConfig(field=field_name, display_type="tag", mapping=mapper, visible=visible)


def tag_field(
    field_name: str,
    *,
    color: Optional[str] = None,
    variant: Optional[str] = None,
    hide_value: Any = None,
) -> FieldDisplayConfig:
    visible: Visibility = _hide_when(field_name, hide_value) if hide_value is not None else True
    return FieldDisplayConfig(
        field=field_name,
        display_type="tag",
        mapping=FieldMappers.text(color=color, variant=variant),
        visible=visible,
    )



class TimelineConfigBuilder:
    def __init__(self) -> None:
        self._config = ItemDisplayConfig()

    def add_progress(self, field_name: str, *, show_text: bool = True, color: Optional[str] = None) -> "TimelineConfigBuilder":
        self._config.graphic_fields.append(progress_field(field_name, show_text=show_text, color=color))
        return self

    def add_icon(self, field_name: str, table: LookupTable) -> "TimelineConfigBuilder":
        self._config.graphic_fields.append(icon_field_from_map(field_name, table))
        return self

    def add_tag(
        self,
        field_name: str,
        table: LookupTable,
        *,
        variant: str = "contained",
        hide_value: Any = None,
    ) -> "TimelineConfigBuilder":
        self._config.tag_fields.append(
            tag_field_from_map(field_name, table, variant=variant, hide_value=hide_value)
        )
        return self

    def add_simple_tag(
        self,
        field_name: str,
        *,
        color: Optional[str] = None,
        variant: Optional[str] = None,
        hide_value: Any = None,
    ) -> "TimelineConfigBuilder":
        self._config.tag_fields.append(
            tag_field(field_name, color=color, variant=variant, hide_value=hide_value)
        )
        return self

    def build(self) -> ItemDisplayConfig:
        return self._config


def project_management_template(
    *,
    status: Optional[LookupTable] = None,
    team: Optional[LookupTable] = None,
    priority: Optional[LookupTable] = None,
) -> ItemDisplayConfig:
    builder = TimelineConfigBuilder().add_progress("progress")
    if priority:
        builder.add_icon("priority", priority)
    if status:
        builder.add_tag("status", status)
    if team:
        builder.add_tag("team", team)
    return builder.build()


__all__ = [
    "FieldMappers",
    "FieldDisplayConfig",
    "ItemDisplayConfig",
    "progress_field",
    "icon_field_from_map",
    "tag_field_from_map",
    "tag_field",
    "TimelineConfigBuilder",
    "project_management_template",
]
