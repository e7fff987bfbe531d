# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Record structures for the investor ledger.

Persisted records (ledger entries, transactions, distributions) are frozen
pydantic models round-tripped through JSON. Operation results are frozen
dataclasses that never reach storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional, Tuple
from uuid import uuid4

from pydantic import Field

from ..core.calculations import FinancialCalculations
from ..core.primitives import (
    DistributionStatus,
    InvestmentStatus,
    Model,
    NonNegativeFloat,
    PayoutStatus,
    Percentage,
    PositiveFloat,
    TransactionType,
)
from .entities import utc_now


def new_id(prefix: str) -> str:
    """Generate a prefixed record id, e.g. ``inv-txn-3f2a...``."""
    return f"{prefix}-{uuid4().hex[:16]}"


class PropertyInvestment(Model):
    """
    One investor's stake in one property (a ledger entry).

    Running totals move with every attributed transaction; ``roi`` is derived
    from them and recomputed after each mutation via ``with_recomputed_roi``.
    """

    id: str = Field(default_factory=lambda: new_id("propinv"))
    property_id: str
    investor_id: str
    investor_name: str
    investment_amount: NonNegativeFloat = Field(
        ..., description="Principal, fixed at creation"
    )
    investment_date: Optional[datetime] = None
    profit_share_percentage: Percentage = Field(
        ..., description="Share of profit, income and expense on the 0-100 scale"
    )
    status: InvestmentStatus = InvestmentStatus.ACTIVE

    # Running totals
    rental_income: float = 0.0
    total_expenses: float = 0.0
    appreciation_value: float = 0.0
    unrealized_profit: float = 0.0
    roi: float = 0.0

    current_value: Optional[NonNegativeFloat] = Field(
        default=None, description="Last recorded market value of the whole property"
    )
    expected_return: Optional[float] = None
    actual_return: Optional[float] = None
    linked_transaction_ids: List[str] = Field(default_factory=list)

    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_active(self) -> bool:
        return self.status == InvestmentStatus.ACTIVE

    @property
    def pair_key(self) -> Tuple[str, str]:
        """Stable identity of the entry: (property id, investor id)."""
        return (self.property_id, self.investor_id)

    def computed_roi(self) -> float:
        return FinancialCalculations.calculate_roi(
            self.rental_income,
            self.appreciation_value,
            self.total_expenses,
            self.investment_amount,
        )

    def with_recomputed_roi(self) -> "PropertyInvestment":
        return self.copy_with({"roi": self.computed_roi()})


class InvestorAttribution(Model):
    """The share of one transaction attributed to one investor."""

    investor_id: str
    investor_name: str
    percentage: Percentage
    amount: float


class InvestorTransaction(Model):
    """
    An income or expense event for an investor-owned property.

    ``investor_attributions`` is computed once when the event is recorded and
    only recomputed (from the stored percentages) when the amount changes.
    """

    id: str = Field(default_factory=lambda: new_id("inv-txn"))
    property_id: str
    transaction_type: TransactionType
    amount: PositiveFloat
    date: datetime = Field(default_factory=utc_now)
    investor_attributions: List[InvestorAttribution] = Field(default_factory=list)
    description: str = ""
    category: Optional[str] = None
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    receipt_url: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None
    recorded_by_name: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_income(self) -> bool:
        return TransactionType(self.transaction_type).is_income

    @property
    def is_expense(self) -> bool:
        return TransactionType(self.transaction_type).is_expense

    def attribution_for(self, investor_id: str) -> Optional[InvestorAttribution]:
        for attribution in self.investor_attributions:
            if attribution.investor_id == investor_id:
                return attribution
        return None

    @property
    def attributed_total(self) -> float:
        return sum(attribution.amount for attribution in self.investor_attributions)


class DistributionLine(Model):
    """One recipient's payout inside a profit distribution."""

    recipient_id: str
    recipient_name: str
    recipient_type: Literal["investor", "agent", "company"] = "investor"
    investment_amount: float
    profit_share_percentage: Percentage
    profit_amount: float
    total_payout: float
    status: PayoutStatus = PayoutStatus.PENDING
    payment_method: Optional[str] = None
    payment_date: Optional[datetime] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None


class ProfitDistribution(Model):
    """
    Profit split computed once when an investor-purchased property sells.

    Only payout line statuses change after creation.
    """

    id: str = Field(default_factory=lambda: new_id("profitdist"))
    property_id: str
    transaction_id: Optional[str] = None
    final_sale_price: float
    total_cost_basis: float
    commission: float = 0.0
    total_net_profit: float
    distributions: List[DistributionLine] = Field(default_factory=list)
    status: DistributionStatus = DistributionStatus.CALCULATED
    calculated_date: datetime = Field(default_factory=utc_now)
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    notes: Optional[str] = None

    @property
    def total_payout(self) -> float:
        return sum(line.total_payout for line in self.distributions)

    def line_for(self, recipient_id: str) -> Optional[DistributionLine]:
        for line in self.distributions:
            if line.recipient_id == recipient_id:
                return line
        return None


# =============================================================================
# OPERATION RESULTS
# =============================================================================


@dataclass(frozen=True)
class LedgerUpdate:
    """
    Outcome of applying or reversing one transaction against the ledger.

    Attributes:
        updated_ids: Ledger entry ids that were written
        skipped_investor_ids: Attributed investors without an active entry
        warnings: Human-readable description of each skip
    """

    updated_ids: Tuple[str, ...] = ()
    skipped_investor_ids: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def is_partial(self) -> bool:
        return bool(self.skipped_investor_ids)


@dataclass(frozen=True)
class TransactionResult:
    """
    A recorded, updated or deleted transaction plus any partial-application
    warnings.

    The transaction is durably stored even when ``warnings`` is non-empty;
    the warnings name investors whose ledger entries did not move.
    """

    transaction: InvestorTransaction
    warnings: List[str] = field(default_factory=list)

    @property
    def fully_applied(self) -> bool:
        return not self.warnings


@dataclass(frozen=True)
class AllocationResult:
    """Ledger entries touched by one allocation sync run."""

    property_id: str
    created_ids: Tuple[str, ...] = ()
    updated_ids: Tuple[str, ...] = ()
    unchanged_ids: Tuple[str, ...] = ()
    deleted_ids: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.created_ids or self.updated_ids or self.deleted_ids)


__all__ = [
    "AllocationResult",
    "DistributionLine",
    "InvestorAttribution",
    "InvestorTransaction",
    "LedgerUpdate",
    "ProfitDistribution",
    "PropertyInvestment",
    "TransactionResult",
    "new_id",
]
