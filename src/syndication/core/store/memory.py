# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class InMemoryStore(KeyValueStore):
    """
    Process-local store holding JSON-encoded snapshots.

    Values are encoded on save and decoded on load, so a caller mutating a
    loaded list never changes what is stored, matching the behavior of a
    browser local storage slot.
    """

    def __init__(self):
        self._data: Dict[str, str] = {}

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)
        logger.debug(f"Saved key '{key}' ({len(self._data[key])} bytes)")

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)

    def clear(self) -> None:
        self._data.clear()
