# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Optional

from .base import KeyValueStore


class TenantScopedStore(KeyValueStore):
    """
    Wraps another store and prefixes every key with a tenant identifier.

    Two tenants sharing one backing store never see each other's
    collections.
    """

    def __init__(self, inner: KeyValueStore, tenant_id: str):
        if not tenant_id:
            raise ValueError("tenant_id must be a non-empty string")
        self.inner = inner
        self.tenant_id = tenant_id

    def scoped_key(self, key: str) -> str:
        return f"{self.tenant_id}:{key}"

    def load(self, key: str) -> Optional[Any]:
        return self.inner.load(self.scoped_key(key))

    def save(self, key: str, value: Any) -> None:
        self.inner.save(self.scoped_key(key), value)

    def delete(self, key: str) -> None:
        self.inner.delete(self.scoped_key(key))
