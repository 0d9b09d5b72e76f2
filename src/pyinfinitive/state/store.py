"""In-memory mirror store.

Replace-only: an update overwrites the whole section, so keys missing
from the new document are dropped. There is no merge and no ordering
policy; the last update applied wins.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from pyinfinitive.models.message import MessageSource
from pyinfinitive.state.events import MirrorChange, UpdateOrigin

_logger = logging.getLogger(__name__)

MirrorListener = Callable[[MirrorChange], None]


class MirrorStore:
    """Per-section mirrors of server-owned state."""

    def __init__(self) -> None:
        self._sections: dict[MessageSource, dict[str, Any]] = {section: {} for section in MessageSource}
        self._listeners: list[MirrorListener] = []

    def replace(self, section: MessageSource, data: dict[str, Any], origin: UpdateOrigin) -> MirrorChange:
        """Overwrite *section* with a copy of *data* and notify listeners."""
        snapshot = copy.deepcopy(data)
        self._sections[section] = snapshot
        change = MirrorChange(section=section, origin=origin, data=copy.deepcopy(snapshot))
        _logger.debug("Mirror %s replaced from %s keys=%d", section, origin, len(snapshot))
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.debug("Mirror listener failed", exc_info=True)
        return change

    def get(self, section: MessageSource) -> dict[str, Any]:
        """Copy of the current mirror (empty until the first update)."""
        return copy.deepcopy(self._sections[section])

    def add_listener(self, listener: MirrorListener) -> Callable[[], None]:
        """Register *listener*; the returned callable unregisters it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove
