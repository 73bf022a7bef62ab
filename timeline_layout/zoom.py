from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Optional

from .errors import ZoomConfigurationError, ZoomOwnershipError
from .models import ZoomLevel

logger = logging.getLogger("timeline_layout.zoom")

DEFAULT_ZOOM_LEVELS: tuple = (
    ZoomLevel(label="Year", day_width=4.5),
    ZoomLevel(label="Month", day_width=8, is_default=True),
    ZoomLevel(label="Day", day_width=24),
)


class ZoomOwner(str, Enum):
    """Who drives the active zoom level, fixed when the controller is built."""

    ENGINE = "engine"
    CALLER = "caller"


class ZoomController:
    """Holds the ordered zoom levels and, when engine-owned, the active one.

    With ``ZoomOwner.ENGINE`` the selection lives here and changes only
    through :meth:`select`.  With ``ZoomOwner.CALLER`` nothing is stored; the
    caller names the level on every :meth:`resolve`.
    """

    def __init__(
        self,
        levels: Optional[Iterable[ZoomLevel]] = None,
        *,
        owner: ZoomOwner = ZoomOwner.ENGINE,
    ) -> None:
        resolved = list(levels or [])
        if not resolved:
            resolved = list(DEFAULT_ZOOM_LEVELS)

        keys = [level.key for level in resolved]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ZoomConfigurationError(f"duplicate zoom level labels: {', '.join(duplicates)}")

        self.levels: List[ZoomLevel] = resolved
        self.owner = ZoomOwner(owner)
        self._default = next((level for level in resolved if level.is_default), resolved[0])
        self._active: Optional[ZoomLevel] = self._default if self.owner is ZoomOwner.ENGINE else None

    @property
    def default(self) -> ZoomLevel:
        return self._default

    @property
    def active(self) -> ZoomLevel:
        if self._active is None:
            raise ZoomOwnershipError("caller-owned zoom has no active level; pass a label to resolve()")
        return self._active

    def find(self, label: str) -> Optional[ZoomLevel]:
        wanted = label.strip().lower()
        for level in self.levels:
            if level.key == wanted or level.label.lower() == wanted:
                return level
        return None

    def _lookup_or_default(self, label: str) -> ZoomLevel:
        level = self.find(label)
        if level is None:
            logger.warning("Unknown zoom level %r, falling back to %r", label, self._default.label)
            return self._default
        return level

    def select(self, label: str) -> ZoomLevel:
        if self.owner is not ZoomOwner.ENGINE:
            raise ZoomOwnershipError("zoom is caller-owned; the engine does not keep a selection")
        self._active = self._lookup_or_default(label)
        logger.debug("Active zoom level is now %r (%.2f px/day)", self._active.label, self._active.day_width)
        return self._active

    def resolve(self, label: Optional[str] = None) -> ZoomLevel:
        """Zoom level for one layout pass."""

        if self.owner is ZoomOwner.ENGINE:
            if label is not None:
                raise ZoomOwnershipError("zoom is engine-owned; use select() instead of passing a label")
            return self.active
        if label is None:
            return self._default
        return self._lookup_or_default(label)


__all__ = ["DEFAULT_ZOOM_LEVELS", "ZoomOwner", "ZoomController"]
