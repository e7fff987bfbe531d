# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Ownership/Allocation Sync

Derives ledger entries from a property's investor assignment. For an
investor-purchased property, every assigned investor ends up with exactly one
ledger entry whose principal and profit share come from the configured
allocation policy; entries of unassigned investors are deleted. A property
that is not investor-purchased, or has nobody assigned, keeps no entries.

Entries keep their ``id``, ``created_at``, running totals and linked
transactions across re-syncs. Principal and profit share are always taken
from the policy, so a manually edited profit share is replaced by the next
sync.

Sync is designed to run after every property save and never raises for a
property that is not eligible.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..core.calculations import FinancialCalculations
from ..core.primitives import AllocationPolicy, InvestmentStatus
from .entities import Property, utc_now
from .records import AllocationResult, PropertyInvestment
from .repository import DistributionRepository, InvestmentRepository, InvestorRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    """Principal and profit share derived for one assigned investor."""

    investor_id: str
    investment_amount: float
    profit_share_percentage: float


class AllocationStrategy(ABC):
    """Turns a cost basis and a list of assigned investors into allocations."""

    policy: AllocationPolicy

    @abstractmethod
    def allocate(
        self, total_cost_basis: float, investor_ids: List[str]
    ) -> Dict[str, Allocation]:
        """Return one allocation per investor id."""


class EqualSplitAllocation(AllocationStrategy):
    """
    Every assigned investor gets ``cost_basis / n`` principal and a
    ``100 / n`` percent profit share.
    """

    policy = AllocationPolicy.EQUAL_SPLIT

    def allocate(
        self, total_cost_basis: float, investor_ids: List[str]
    ) -> Dict[str, Allocation]:
        splits = FinancialCalculations.equal_split(total_cost_basis, len(investor_ids))
        return {
            investor_id: Allocation(investor_id, amount, percentage)
            for investor_id, (amount, percentage) in zip(investor_ids, splits)
        }


ALLOCATION_STRATEGIES: Dict[AllocationPolicy, AllocationStrategy] = {
    AllocationPolicy.EQUAL_SPLIT: EqualSplitAllocation(),
}


def get_allocation_strategy(policy: AllocationPolicy) -> AllocationStrategy:
    try:
        return ALLOCATION_STRATEGIES[AllocationPolicy(policy)]
    except KeyError:
        raise ValueError(f"No allocation strategy registered for {policy!r}") from None


def sale_return(prop: Property, investment_amount: float, percentage: float) -> float:
    """
    Principal plus the investor's share of net sale profit.

    Falls back to the principal when the sale price or purchase details are
    missing.
    """
    if not prop.final_sale_price or prop.purchase_details is None:
        return investment_amount
    net_profit = FinancialCalculations.calculate_net_sale_profit(
        prop.final_sale_price,
        prop.purchase_details.total_cost_basis,
        prop.commission_earned or 0.0,
    )
    return investment_amount + FinancialCalculations.attribute_amount(
        net_profit, percentage
    )


def _comparable(entry: PropertyInvestment) -> dict:
    return entry.model_dump(exclude={"updated_at"})


class AllocationSync:
    """
    Keeps a property's ledger entries in line with its investor assignment.

    Attributes:
        investments: Ledger entry collection
        investors: Investor lookup (unknown investors are skipped)
        strategy: Allocation policy implementation
        expected_return_multiple: Multiple of principal stored as expected return
        distributions: Profit distributions. When given, entries of a sold
            property stay active until its distribution exists, so the sale
            can still be distributed once the price is known.
    """

    def __init__(
        self,
        investments: InvestmentRepository,
        investors: InvestorRepository,
        strategy: Optional[AllocationStrategy] = None,
        expected_return_multiple: float = 1.2,
        clock: Callable[[], datetime] = utc_now,
        distributions: Optional[DistributionRepository] = None,
    ):
        self.investments = investments
        self.investors = investors
        self.distributions = distributions
        self.strategy = strategy or get_allocation_strategy(AllocationPolicy.EQUAL_SPLIT)
        self.expected_return_multiple = expected_return_multiple
        self.clock = clock

    def sync(self, prop: Property, actor: Optional[str] = None) -> AllocationResult:
        """
        Create, update or delete the property's ledger entries.

        Args:
            prop: Property whose purchase details drive the allocation
            actor: User id stored as ``created_by`` on new entries

        Returns:
            Ids of created, updated, unchanged and deleted entries plus warnings
        """
        existing = self.investments.for_property(prop.id)
        assigned = (
            list(dict.fromkeys(prop.assigned_investor_ids))
            if prop.is_investor_purchase
            else []
        )

        if not assigned:
            deleted = self.investments.remove_many(entry.id for entry in existing)
            if deleted:
                logger.info(
                    f"Removed {len(deleted)} ledger entries from property {prop.id}: "
                    f"not investor-purchased or no investors assigned"
                )
            return AllocationResult(property_id=prop.id, deleted_ids=tuple(deleted))

        stale = [entry.id for entry in existing if entry.investor_id not in assigned]
        deleted = self.investments.remove_many(stale)

        by_investor: Dict[str, PropertyInvestment] = {}
        for entry in existing:
            if entry.investor_id in assigned:
                by_investor.setdefault(entry.investor_id, entry)

        total_cost_basis = prop.purchase_details.total_cost_basis
        allocations = self.strategy.allocate(total_cost_basis, assigned)
        now = self.clock()

        created: List[str] = []
        updated: List[str] = []
        unchanged: List[str] = []
        warnings: List[str] = []
        writes: List[PropertyInvestment] = []

        for investor_id in assigned:
            investor = self.investors.get_investor_by_id(investor_id)
            if investor is None:
                message = (
                    f"Investor {investor_id} assigned to property {prop.id} "
                    f"does not exist; skipped"
                )
                logger.warning(message)
                warnings.append(message)
                continue

            allocation = allocations[investor_id]
            fields = self._derived_fields(prop, investor.name, allocation)
            current = by_investor.get(investor_id)

            if current is None:
                entry = PropertyInvestment(
                    id=f"propinv-{prop.id}-{investor_id}",
                    property_id=prop.id,
                    investor_id=investor_id,
                    created_by=actor,
                    created_at=now,
                    updated_at=now,
                    **fields,
                ).with_recomputed_roi()
                writes.append(entry)
                created.append(entry.id)
                continue

            candidate = current.copy_with(fields).with_recomputed_roi()
            if _comparable(candidate) == _comparable(current):
                unchanged.append(current.id)
                continue
            writes.append(candidate.copy_with({"updated_at": now}))
            updated.append(current.id)

        self.investments.upsert_many(writes)

        if created or updated or deleted:
            logger.info(
                f"Synced investors for property {prop.id}: {len(created)} created, "
                f"{len(updated)} updated, {len(deleted)} deleted"
            )
        return AllocationResult(
            property_id=prop.id,
            created_ids=tuple(created),
            updated_ids=tuple(updated),
            unchanged_ids=tuple(unchanged),
            deleted_ids=tuple(deleted),
            warnings=tuple(warnings),
        )

    def _derived_fields(
        self, prop: Property, investor_name: str, allocation: Allocation
    ) -> dict:
        amount = allocation.investment_amount
        percentage = allocation.profit_share_percentage
        details = prop.purchase_details
        closed = self._is_closed(prop)
        return {
            "investor_name": investor_name,
            "investment_amount": amount,
            "investment_date": (details.purchase_date if details else None)
            or prop.created_at,
            "profit_share_percentage": percentage,
            "status": InvestmentStatus.COMPLETED if closed else InvestmentStatus.ACTIVE,
            "expected_return": amount * self.expected_return_multiple,
            "actual_return": sale_return(prop, amount, percentage) if closed else None,
            "notes": "Auto-synced investment allocation",
        }

    def _is_closed(self, prop: Property) -> bool:
        if not prop.is_sold:
            return False
        if self.distributions is None:
            return True
        return self.distributions.for_property(prop.id) is not None


__all__ = [
    "ALLOCATION_STRATEGIES",
    "Allocation",
    "AllocationStrategy",
    "AllocationSync",
    "EqualSplitAllocation",
    "get_allocation_strategy",
    "sale_return",
]
