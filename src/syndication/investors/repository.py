# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Typed collections over a key-value store.

Each collection is one JSON array under a fixed key. Every write reads the
whole array, changes it and writes it back, so calls within one synchronous
call chain never interleave. Concurrent writers in other processes are not
coordinated; the last write wins.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from ..core.exceptions import NotFoundError
from ..core.primitives import InvestmentStatus, Model
from ..core.store import (
    DISTRIBUTIONS_KEY,
    INVESTMENTS_KEY,
    INVESTORS_KEY,
    PROPERTIES_KEY,
    TRANSACTIONS_KEY,
    KeyValueStore,
)
from .entities import Investor, Property
from .records import InvestorTransaction, ProfitDistribution, PropertyInvestment

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Model)


class Collection(Generic[RecordT]):
    """
    A list of records of one model type stored under one key.

    Records are matched by their ``id`` attribute.
    """

    kind: str = "Record"

    def __init__(self, store: KeyValueStore, key: str, model: Type[RecordT]):
        self.store = store
        self.key = key
        self.model = model

    def all(self) -> List[RecordT]:
        raw = self.store.load(self.key)
        if not raw:
            return []
        return [self.model.model_validate(item) for item in raw]

    def _write(self, records: Iterable[RecordT]) -> None:
        self.store.save(self.key, [record.to_json_dict() for record in records])

    def get(self, record_id: str) -> Optional[RecordT]:
        for record in self.all():
            if record.id == record_id:
                return record
        return None

    def require(self, record_id: str) -> RecordT:
        record = self.get(record_id)
        if record is None:
            raise NotFoundError(self.kind, record_id)
        return record

    def find(self, predicate: Callable[[RecordT], bool]) -> List[RecordT]:
        return [record for record in self.all() if predicate(record)]

    def upsert(self, record: RecordT) -> RecordT:
        return self.upsert_many([record])[0]

    def upsert_many(self, records: List[RecordT]) -> List[RecordT]:
        """Replace records with matching ids in place and append the rest."""
        if not records:
            return records
        existing = self.all()
        index: Dict[str, int] = {item.id: i for i, item in enumerate(existing)}
        for record in records:
            position = index.get(record.id)
            if position is None:
                index[record.id] = len(existing)
                existing.append(record)
            else:
                existing[position] = record
        self._write(existing)
        return records

    def remove(self, record_id: str) -> bool:
        return bool(self.remove_many([record_id]))

    def remove_many(self, record_ids: Iterable[str]) -> List[str]:
        """Remove records by id and return the ids that were present."""
        doomed = set(record_ids)
        if not doomed:
            return []
        existing = self.all()
        kept = [record for record in existing if record.id not in doomed]
        removed = [record.id for record in existing if record.id in doomed]
        if removed:
            self._write(kept)
        return removed

    def replace_all(self, records: Iterable[RecordT]) -> None:
        self._write(records)

    def __len__(self) -> int:
        return len(self.all())


class PropertyRepository(Collection[Property]):
    kind = "Property"

    def __init__(self, store: KeyValueStore):
        super().__init__(store, PROPERTIES_KEY, Property)

    def get_property_by_id(self, property_id: str) -> Optional[Property]:
        return self.get(property_id)


class InvestorRepository(Collection[Investor]):
    kind = "Investor"

    def __init__(self, store: KeyValueStore):
        super().__init__(store, INVESTORS_KEY, Investor)

    def get_investor_by_id(self, investor_id: str) -> Optional[Investor]:
        return self.get(investor_id)


class InvestmentRepository(Collection[PropertyInvestment]):
    """Ledger entries, one per (property, investor) pair."""

    kind = "Investment"

    def __init__(self, store: KeyValueStore):
        super().__init__(store, INVESTMENTS_KEY, PropertyInvestment)

    def for_investor(self, investor_id: str) -> List[PropertyInvestment]:
        return self.find(lambda inv: inv.investor_id == investor_id)

    def for_property(self, property_id: str) -> List[PropertyInvestment]:
        return self.find(lambda inv: inv.property_id == property_id)

    def active_for_property(self, property_id: str) -> List[PropertyInvestment]:
        return self.find(
            lambda inv: inv.property_id == property_id
            and inv.status == InvestmentStatus.ACTIVE
        )

    def active_entry(
        self, property_id: str, investor_id: str
    ) -> Optional[PropertyInvestment]:
        for inv in self.for_investor(investor_id):
            if inv.property_id == property_id and inv.status == InvestmentStatus.ACTIVE:
                return inv
        return None


class TransactionRepository(Collection[InvestorTransaction]):
    kind = "Transaction"

    def __init__(self, store: KeyValueStore):
        super().__init__(store, TRANSACTIONS_KEY, InvestorTransaction)

    def for_property(self, property_id: str) -> List[InvestorTransaction]:
        return self.find(lambda txn: txn.property_id == property_id)

    def for_investor(self, investor_id: str) -> List[InvestorTransaction]:
        return self.find(lambda txn: txn.attribution_for(investor_id) is not None)


class DistributionRepository(Collection[ProfitDistribution]):
    kind = "Distribution"

    def __init__(self, store: KeyValueStore):
        super().__init__(store, DISTRIBUTIONS_KEY, ProfitDistribution)

    def for_property(self, property_id: str) -> Optional[ProfitDistribution]:
        matches = self.find(lambda dist: dist.property_id == property_id)
        return matches[0] if matches else None

    def for_investor(self, investor_id: str) -> List[ProfitDistribution]:
        return self.find(lambda dist: dist.line_for(investor_id) is not None)


class Repositories:
    """All collections backed by one store."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.properties = PropertyRepository(store)
        self.investors = InvestorRepository(store)
        self.investments = InvestmentRepository(store)
        self.transactions = TransactionRepository(store)
        self.distributions = DistributionRepository(store)


__all__ = [
    "Collection",
    "DistributionRepository",
    "InvestmentRepository",
    "InvestorRepository",
    "PropertyRepository",
    "Repositories",
    "TransactionRepository",
]
