# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Records are immutable. A mutation is expressed as an updated copy that
    the owning repository writes back to its collection.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",  # Catches typos in stored payloads and constructor calls
        populate_by_name=True,
    )

    def copy_with(self, updates: Optional[Dict[str, Any]] = None) -> "Model":
        """
        Return a deep copy of the model with the given field updates.

        Args:
            updates: Optional dictionary of field values to replace

        Returns:
            A new instance; the original is left untouched
        """
        return self.model_copy(deep=True, update=updates or {})

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize to plain JSON-compatible data for key-value storage."""
        return self.model_dump(mode="json")
