# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Key-value persistence backends.

Collections are stored as whole JSON arrays under the fixed keys below.
"""

from pathlib import Path
from typing import Optional

from .base import KeyValueStore
from .json_file import JsonFileStore
from .memory import InMemoryStore
from .tenant import TenantScopedStore

PROPERTIES_KEY = "investor_properties"
INVESTORS_KEY = "estate_investors"
INVESTMENTS_KEY = "estate_investor_investments"
TRANSACTIONS_KEY = "investor_transactions"
DISTRIBUTIONS_KEY = "investor_profit_distributions"


def create_store(
    storage_dir: Optional[Path] = None, tenant_id: Optional[str] = None
) -> KeyValueStore:
    """
    Build the store described by settings values.

    Args:
        storage_dir: Directory for a JSON file store; None selects memory
        tenant_id: Optional tenant used to scope keys

    Returns:
        A ready-to-use store
    """
    store: KeyValueStore = (
        JsonFileStore(storage_dir) if storage_dir is not None else InMemoryStore()
    )
    if tenant_id:
        store = TenantScopedStore(store, tenant_id)
    return store


__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "TenantScopedStore",
    "create_store",
    "PROPERTIES_KEY",
    "INVESTORS_KEY",
    "INVESTMENTS_KEY",
    "TRANSACTIONS_KEY",
    "DISTRIBUTIONS_KEY",
]
