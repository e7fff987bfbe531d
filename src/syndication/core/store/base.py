# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Key-value persistence interface.

Every logical collection (investors, ledger entries, transactions,
distributions) is one JSON array stored under a fixed key. Writes replace
the whole value; the last write wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStore(ABC):
    """Abstract JSON blob store keyed by string."""

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the JSON value stored under ``key`` or None when absent."""

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Replace the value stored under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``. Removing an absent key is not an error."""

    def exists(self, key: str) -> bool:
        return self.load(key) is not None
