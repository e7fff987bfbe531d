# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Syndication Service API

Public entry point wiring the investor ledger components over one key-value
store: allocation sync, transaction recording and correction, sale
distribution and the read-only summaries.

Example:
    ```python
    service = SyndicationService(settings=SyndicationSettings(tenant_id="acme"))
    service.add_investor(Investor(id="inv-a", name="Alice"))
    service.add_investor(Investor(id="inv-b", name="Bob"))

    service.transfer_to_investors(
        "prop-1",
        [
            InvestorShare(investor_id="inv-a", investor_name="Alice", share_percentage=50),
            InvestorShare(investor_id="inv-b", investor_name="Bob", share_percentage=50),
        ],
        total_cost_basis=1_000_000,
    )
    service.record_transaction(
        "prop-1", TransactionType.RENTAL_INCOME, 100_000, "Q1 rent", actor="agent-1"
    )
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..core.exceptions import NotFoundError
from ..core.primitives import (
    AcquisitionType,
    OwnerType,
    SyndicationSettings,
    TransactionType,
)
from ..core.store import KeyValueStore, TenantScopedStore, create_store
from .allocation import AllocationSync, get_allocation_strategy
from .distribution import DistributionSummary, SaleDistributionCalculator
from .entities import Investor, InvestorShare, Property, PurchaseDetails, utc_now
from .ledger import InvestmentLedger
from .records import (
    AllocationResult,
    ProfitDistribution,
    PropertyInvestment,
    TransactionResult,
)
from .repository import Repositories
from .summaries import (
    InvestorPortfolio,
    InvestorStatement,
    InvestorTransactionSummary,
    LedgerSummaries,
    PropertyTransactionSummary,
)
from .transactions import TransactionDetails, TransactionRecorder
from .validation import calculate_investment_amounts, validate_investor_shares

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertySaveResult:
    """Outcome of saving a property: the sync result and any new distribution."""

    property: Property
    allocation: AllocationResult
    distribution: Optional[ProfitDistribution] = None


class SyndicationService:
    """
    Facade over the investor ledger.

    Every component shares the same repositories, clock and settings. When no
    store is given, one is built from ``settings.storage_dir`` and
    ``settings.tenant_id``; a given store is scoped to ``settings.tenant_id``
    when one is set.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        settings: Optional[SyndicationSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or SyndicationSettings()
        if store is None:
            store = create_store(self.settings.storage_dir, self.settings.tenant_id)
        elif self.settings.tenant_id:
            store = TenantScopedStore(store, self.settings.tenant_id)
        self.store = store
        self.clock = clock
        self.repos = Repositories(self.store)

        self.ledger = InvestmentLedger(self.repos.investments, clock=clock)
        self.recorder = TransactionRecorder(
            self.repos.properties,
            self.repos.transactions,
            self.ledger,
            attribution_tolerance=self.settings.attribution_tolerance,
            clock=clock,
        )
        self.allocation = AllocationSync(
            self.repos.investments,
            self.repos.investors,
            strategy=get_allocation_strategy(self.settings.allocation_policy),
            expected_return_multiple=self.settings.expected_return_multiple,
            clock=clock,
            distributions=self.repos.distributions,
        )
        self.distributions = SaleDistributionCalculator(
            self.repos.investments, self.repos.distributions, clock=clock
        )
        self.summaries = LedgerSummaries(self.repos)

    # -- investors and properties ------------------------------------------------

    def add_investor(self, investor: Investor) -> Investor:
        self.repos.investors.upsert(investor)
        logger.debug(f"Investor saved: {investor}")
        return investor

    def get_investor_by_id(self, investor_id: str) -> Optional[Investor]:
        return self.repos.investors.get_investor_by_id(investor_id)

    def get_property_by_id(self, property_id: str) -> Optional[Property]:
        return self.repos.properties.get_property_by_id(property_id)

    def get_investor_investments(self, investor_id: str) -> List[PropertyInvestment]:
        return self.repos.investments.for_investor(investor_id)

    def get_property_investments(self, property_id: str) -> List[PropertyInvestment]:
        return self.repos.investments.for_property(property_id)

    def save_property(
        self,
        prop: Property,
        actor: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> PropertySaveResult:
        """
        Store a property and bring the ledger in line with it.

        Allocation sync runs first and leaves a sold property's entries
        active until its distribution exists, so the distribution check that
        follows sees every current entry, including ones created by this
        save. A property saved as sold before its price is known is
        distributed by the later save that adds the price. Both steps are
        no-ops for properties they do not apply to.

        Args:
            prop: Property to store
            actor: User id recorded on created entries and distributions
            transaction_id: Sale transaction or deal id for a distribution
        """
        before = {entry.investor_id for entry in self.repos.investments.for_property(prop.id)}
        self.repos.properties.upsert(prop)

        allocation = self.allocation.sync(prop, actor=actor)
        distribution = self.distributions.create_for_sale(
            prop, transaction_id=transaction_id, actor=actor
        )

        for investor_id in sorted(before | set(prop.assigned_investor_ids)):
            if self.repos.investors.get_investor_by_id(investor_id) is not None:
                self.refresh_investor_stats(investor_id)

        return PropertySaveResult(
            property=prop, allocation=allocation, distribution=distribution
        )

    def transfer_to_investors(
        self,
        property_id: str,
        shares: List[InvestorShare],
        total_cost_basis: float,
        purchase_date: Optional[datetime] = None,
        purchase_cycle_id: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> PropertySaveResult:
        """
        Hand a property over to a group of investors.

        Validates the shares, fills missing investment amounts from
        ``total_cost_basis``, marks the property as an investor purchase
        owned by investors and saves it, which creates the ledger entries.

        Raises:
            NotFoundError: If the property does not exist
            ShareValidationError: If the shares are incomplete or do not sum to 100%
        """
        prop = self.repos.properties.get_property_by_id(property_id)
        if prop is None:
            raise NotFoundError("Property", property_id)

        if any(share.investment_amount is None for share in shares):
            shares = calculate_investment_amounts(shares, total_cost_basis)
        validate_investor_shares(
            shares, tolerance=self.settings.share_total_tolerance
        ).raise_for_error()

        updated = prop.copy_with(
            {
                "acquisition_type": AcquisitionType.INVESTOR_PURCHASE,
                "current_owner_type": OwnerType.INVESTOR,
                "investor_shares": shares,
                "purchase_details": PurchaseDetails(
                    assigned_investors=[share.investor_id for share in shares],
                    total_cost_basis=total_cost_basis,
                    purchase_date=purchase_date or self.clock(),
                    purchase_cycle_id=purchase_cycle_id,
                ),
            }
        )
        logger.info(
            f"Property {property_id} transferred to {len(shares)} investor(s): "
            f"{', '.join(share.investor_name for share in shares)}"
        )
        return self.save_property(updated, actor=actor)

    def refresh_investor_stats(self, investor_id: str) -> Investor:
        """
        Recompute an investor's aggregate stats from the ledger and store them.

        Raises:
            NotFoundError: If the investor does not exist
        """
        investor = self.repos.investors.require(investor_id)
        portfolio = self.summaries.investor_portfolio(investor_id)
        updated = investor.copy_with(
            {
                "total_invested": portfolio.total_invested,
                "total_returned": portfolio.total_returned,
                "active_properties": portfolio.active_properties,
                "completed_properties": portfolio.completed_properties,
                "total_roi": portfolio.total_roi,
                "updated_at": self.clock(),
            }
        )
        self.repos.investors.upsert(updated)
        return updated

    def update_investment_value(
        self, investment_id: str, property_value: float
    ) -> PropertyInvestment:
        """
        Record a new market value for one ledger entry's property.

        Sets the entry's appreciation to the investor's share of
        ``property_value`` less principal, recomputes ROI and refreshes the
        investor's stats.

        Raises:
            NotFoundError: If the entry does not exist
            InvalidStateError: If the entry is completed
        """
        entry = self.ledger.revalue(investment_id, property_value)
        if self.repos.investors.get_investor_by_id(entry.investor_id) is not None:
            self.refresh_investor_stats(entry.investor_id)
        return entry

    def revalue_property(
        self, property_id: str, property_value: float
    ) -> List[PropertyInvestment]:
        """Revalue every active ledger entry of a property."""
        return [
            self.update_investment_value(entry.id, property_value)
            for entry in self.repos.investments.active_for_property(property_id)
        ]

    # -- transactions ------------------------------------------------------------

    def record_transaction(
        self,
        property_id: str,
        transaction_type: TransactionType,
        amount: float,
        description: str,
        actor: str,
        actor_name: Optional[str] = None,
        extra: Optional[TransactionDetails] = None,
    ) -> TransactionResult:
        return self.recorder.record(
            property_id,
            transaction_type,
            amount,
            description,
            actor,
            actor_name=actor_name,
            extra=extra,
        )

    def update_transaction(
        self, transaction_id: str, updates: Dict[str, Any]
    ) -> TransactionResult:
        return self.recorder.update(transaction_id, updates)

    def delete_transaction(self, transaction_id: str) -> TransactionResult:
        return self.recorder.delete(transaction_id)

    def get_property_transactions(self, property_id: str):
        return self.repos.transactions.for_property(property_id)

    def get_investor_transactions(self, investor_id: str):
        return self.repos.transactions.for_investor(investor_id)

    # -- distributions -----------------------------------------------------------

    def create_distribution_for_sale(
        self,
        property_id: str,
        transaction_id: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Optional[ProfitDistribution]:
        """
        Create the sale distribution for a stored property if it is due.

        Raises:
            NotFoundError: If the property does not exist
        """
        prop = self.repos.properties.require(property_id)
        return self.distributions.create_for_sale(
            prop, transaction_id=transaction_id, actor=actor
        )

    def get_property_distribution(self, property_id: str) -> Optional[ProfitDistribution]:
        return self.repos.distributions.for_property(property_id)

    def approve_payout(self, distribution_id: str, recipient_id: str) -> ProfitDistribution:
        return self.distributions.approve_line(distribution_id, recipient_id)

    def mark_payout_paid(
        self,
        distribution_id: str,
        recipient_id: str,
        payment_method: str,
        payment_date: Optional[datetime] = None,
        payment_reference: Optional[str] = None,
    ) -> ProfitDistribution:
        distribution = self.distributions.mark_line_paid(
            distribution_id,
            recipient_id,
            payment_method,
            payment_date=payment_date,
            payment_reference=payment_reference,
        )
        if self.repos.investors.get_investor_by_id(recipient_id) is not None:
            self.refresh_investor_stats(recipient_id)
        return distribution

    def property_distribution_summary(self, property_id: str) -> DistributionSummary:
        return self.distributions.summary(property_id)

    # -- summaries ---------------------------------------------------------------

    def property_transaction_summary(self, property_id: str) -> PropertyTransactionSummary:
        return self.summaries.property_transaction_summary(property_id)

    def investor_transaction_summary(self, investor_id: str) -> InvestorTransactionSummary:
        return self.summaries.investor_transaction_summary(investor_id)

    def expense_breakdown(self, property_id: str) -> Dict[str, float]:
        return self.summaries.expense_breakdown(property_id)

    def investor_portfolio(self, investor_id: str) -> InvestorPortfolio:
        return self.summaries.investor_portfolio(investor_id)

    def investor_statement(self, investor_id: str) -> InvestorStatement:
        return self.summaries.investor_statement(investor_id)


__all__ = [
    "PropertySaveResult",
    "SyndicationService",
]
