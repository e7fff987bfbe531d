# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Sale Distribution Calculator

Splits the net profit of a sold, investor-purchased property across its
investors and tracks each payout through ``pending -> approved -> paid``.

    net_profit   = final_sale_price - total_cost_basis - commission_earned
    profit_share = net_profit * profit_share_percentage / 100
    total_payout = investment_amount + profit_share

A loss (negative net profit) flows through as negative profit shares. The sum
of payouts always equals total principal plus net profit.

Creation is at-most-once per property and is a silent no-op for properties
that are not eligible, so it can be called from any property save.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from ..core.calculations import FinancialCalculations
from ..core.exceptions import InvalidStateError, NotFoundError
from ..core.primitives import PAYOUT_TRANSITIONS, InvestmentStatus, PayoutStatus
from .entities import Property, utc_now
from .records import DistributionLine, ProfitDistribution, PropertyInvestment
from .repository import DistributionRepository, InvestmentRepository

logger = logging.getLogger(__name__)


def calculate_distribution_lines(
    entries: List[PropertyInvestment], net_profit: float
) -> List[DistributionLine]:
    """One pending payout line per ledger entry."""
    lines = []
    for entry in entries:
        profit_amount = FinancialCalculations.attribute_amount(
            net_profit, entry.profit_share_percentage
        )
        lines.append(
            DistributionLine(
                recipient_id=entry.investor_id,
                recipient_name=entry.investor_name,
                recipient_type="investor",
                investment_amount=entry.investment_amount,
                profit_share_percentage=entry.profit_share_percentage,
                profit_amount=profit_amount,
                total_payout=entry.investment_amount + profit_amount,
            )
        )
    return lines


@dataclass(frozen=True)
class DistributionSummary:
    """Payout totals of a property's distribution grouped by line status."""

    property_id: str
    total_payout: float = 0.0
    total_recipients: int = 0
    pending_count: int = 0
    approved_count: int = 0
    paid_count: int = 0
    pending_amount: float = 0.0
    approved_amount: float = 0.0
    paid_amount: float = 0.0


class SaleDistributionCalculator:
    """
    Creates profit distributions on sale and moves payout lines forward.

    Attributes:
        investments: Ledger entry collection
        distributions: Profit distribution collection
    """

    def __init__(
        self,
        investments: InvestmentRepository,
        distributions: DistributionRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.investments = investments
        self.distributions = distributions
        self.clock = clock

    def create_for_sale(
        self,
        prop: Property,
        transaction_id: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Optional[ProfitDistribution]:
        """
        Create the property's profit distribution if it is due.

        Returns None without touching storage when the property is not an
        investor purchase, is not sold, lacks a sale price or purchase
        details, already has a distribution, or has no active ledger entries.
        Otherwise stores the distribution and freezes the ledger entries
        (status ``completed``, ``actual_return`` set to the payout).

        Args:
            prop: The sold property
            transaction_id: Sale transaction or deal id the payout belongs to
            actor: User id recorded as creator
        """
        if not (prop.is_investor_purchase and prop.is_sold):
            return None
        if not prop.final_sale_price or prop.purchase_details is None:
            return None
        if self.distributions.for_property(prop.id) is not None:
            logger.debug(f"Distribution already exists for property {prop.id}")
            return None

        entries = self.investments.active_for_property(prop.id)
        if not entries:
            return None

        commission = prop.commission_earned or 0.0
        cost_basis = prop.purchase_details.total_cost_basis
        net_profit = FinancialCalculations.calculate_net_sale_profit(
            prop.final_sale_price, cost_basis, commission
        )
        now = self.clock()

        distribution = ProfitDistribution(
            id=f"profitdist-{prop.id}",
            property_id=prop.id,
            transaction_id=transaction_id,
            final_sale_price=prop.final_sale_price,
            total_cost_basis=cost_basis,
            commission=commission,
            total_net_profit=net_profit,
            distributions=calculate_distribution_lines(entries, net_profit),
            calculated_date=now,
            created_by=actor,
            created_at=now,
            updated_at=now,
            notes=f"Profit distribution for {prop.title}",
        )
        self.distributions.upsert(distribution)

        frozen = [
            entry.copy_with(
                {
                    "status": InvestmentStatus.COMPLETED,
                    "actual_return": distribution.line_for(entry.investor_id).total_payout,
                    "updated_at": now,
                }
            )
            for entry in entries
        ]
        self.investments.upsert_many(frozen)

        logger.info(
            f"Profit distribution created for property {prop.id}: net profit "
            f"{net_profit:,.2f} across {len(entries)} investors"
        )
        return distribution

    def approve_line(self, distribution_id: str, recipient_id: str) -> ProfitDistribution:
        """Move a pending payout line to approved."""
        return self._transition(distribution_id, recipient_id, PayoutStatus.APPROVED)

    def mark_line_paid(
        self,
        distribution_id: str,
        recipient_id: str,
        payment_method: str,
        payment_date: Optional[datetime] = None,
        payment_reference: Optional[str] = None,
    ) -> ProfitDistribution:
        """Record payment of a pending or approved payout line."""
        return self._transition(
            distribution_id,
            recipient_id,
            PayoutStatus.PAID,
            {
                "payment_method": payment_method,
                "payment_date": payment_date or self.clock(),
                "payment_reference": payment_reference,
            },
        )

    def _transition(
        self,
        distribution_id: str,
        recipient_id: str,
        target: PayoutStatus,
        extra: Optional[dict] = None,
    ) -> ProfitDistribution:
        distribution = self.distributions.get(distribution_id)
        if distribution is None:
            raise NotFoundError("Distribution", distribution_id)
        line = distribution.line_for(recipient_id)
        if line is None:
            raise NotFoundError("Distribution recipient", recipient_id)

        current = PayoutStatus(line.status)
        if target not in PAYOUT_TRANSITIONS[current]:
            raise InvalidStateError(
                f"Cannot move payout for {recipient_id} from {current.value} "
                f"to {target.value}",
                record_id=distribution_id,
            )

        lines = [
            item.copy_with({"status": target, **(extra or {})})
            if item.recipient_id == recipient_id
            else item
            for item in distribution.distributions
        ]
        updated = distribution.copy_with(
            {"distributions": lines, "updated_at": self.clock()}
        )
        self.distributions.upsert(updated)
        logger.info(
            f"Payout for {recipient_id} on {distribution_id}: "
            f"{current.value} -> {target.value}"
        )
        return updated

    def summary(self, property_id: str) -> DistributionSummary:
        """Payout totals by status for a property; zeros when none exists."""
        distribution = self.distributions.for_property(property_id)
        if distribution is None:
            return DistributionSummary(property_id=property_id)

        def lines_with(status: PayoutStatus) -> List[DistributionLine]:
            return [
                line
                for line in distribution.distributions
                if PayoutStatus(line.status) == status
            ]

        pending = lines_with(PayoutStatus.PENDING)
        approved = lines_with(PayoutStatus.APPROVED)
        paid = lines_with(PayoutStatus.PAID)
        return DistributionSummary(
            property_id=property_id,
            total_payout=distribution.total_payout,
            total_recipients=len(distribution.distributions),
            pending_count=len(pending),
            approved_count=len(approved),
            paid_count=len(paid),
            pending_amount=sum(line.total_payout for line in pending),
            approved_amount=sum(line.total_payout for line in approved),
            paid_amount=sum(line.total_payout for line in paid),
        )


__all__ = [
    "DistributionSummary",
    "SaleDistributionCalculator",
    "calculate_distribution_lines",
]
