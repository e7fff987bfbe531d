# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Syndication - Investor Ledger for Multi-Investor Property Ownership

Bookkeeping for properties bought by a group of investors: per-investor
investment ledgers, income and expense attribution by ownership share,
exact reversal of corrected or deleted transactions, and profit distribution
when a property is sold.

Key Entry Points:
- syndication.investors.SyndicationService - Wires every component over one store
- syndication.investors.TransactionRecorder - Record/update/delete income and expenses
- syndication.investors.AllocationSync - Derive ledger entries from investor assignment
- syndication.investors.SaleDistributionCalculator - Split net sale profit
- syndication.core.store - Key-value persistence backends

Example Usage:
    ```python
    from syndication.core.store import InMemoryStore
    from syndication.investors import SyndicationService, TransactionType

    service = SyndicationService(InMemoryStore())
    service.save_property(prop, actor="agent-1")
    result = service.record_transaction(
        prop.id, TransactionType.RENTAL_INCOME, 100_000, "March rent", actor="agent-1"
    )
    for warning in result.warnings:
        print(warning)
    ```
"""

import importlib
import logging

# Libraries should not configure logging; applications attach their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "core",
    "investors",
]


_LAZY_MODULES = {
    "core": "syndication.core",
    "investors": "syndication.investors",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'syndication' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
