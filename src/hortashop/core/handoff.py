"""One-shot result hand-off between a picker and the form that opened it.

A form opens a keyed slot before navigating to the map picker, the picker
posts its result under that key, and the form takes it exactly once when
it regains focus.
"""

from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PickedLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str = ""


class NavigationResultChannel:
    def __init__(self) -> None:
        self._slots: Dict[str, Optional[PickedLocation]] = {}
        self._lock = threading.Lock()

    def open(self) -> str:
        key = str(uuid.uuid4())
        with self._lock:
            self._slots[key] = None
        return key

    def post(self, key: str, result: PickedLocation) -> None:
        with self._lock:
            if key not in self._slots:
                raise KeyError(f"No open navigation slot {key}.")
            self._slots[key] = result

    def take(self, key: str) -> Optional[PickedLocation]:
        """Return the posted result and close the slot.

        Returns ``None`` when nothing was posted; the slot stays open in
        that case so the picker can still answer.
        """
        with self._lock:
            result = self._slots.get(key)
            if result is not None:
                del self._slots[key]
            return result

    def discard(self, key: str) -> None:
        with self._lock:
            self._slots.pop(key, None)

    def is_open(self, key: str) -> bool:
        with self._lock:
            return key in self._slots
