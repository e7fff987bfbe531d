# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Investment Ledger

Applies income and expense transactions to investors' ledger entries and
reverses them again. Reversal is the exact numeric inverse of application:
whatever ``apply`` added is subtracted, whatever it subtracted is added back,
and the transaction id is dropped from the entry's audit trail. ROI is
recomputed after both.

Transaction effects on a single entry:

    rental-income   rental_income += a     unrealized_profit += a
    expense-*       total_expenses += a    unrealized_profit -= a

where ``a`` is the investor's attributed amount.

Revaluation records a new market value for the property and sets the
entry's ``appreciation_value`` to the investor's share of that value less
principal. It leaves the transaction totals alone.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..core.calculations import FinancialCalculations
from ..core.exceptions import InvalidStateError
from ..core.primitives import TransactionType
from .entities import utc_now
from .records import InvestorTransaction, LedgerUpdate, PropertyInvestment
from .repository import InvestmentRepository

logger = logging.getLogger(__name__)


def _signed_deltas(transaction_type: TransactionType, amount: float) -> dict:
    """Field deltas one attribution contributes to a ledger entry."""
    txn_type = TransactionType(transaction_type)
    if txn_type.is_income:
        return {"rental_income": amount, "unrealized_profit": amount}
    if txn_type.is_expense:
        return {"total_expenses": amount, "unrealized_profit": -amount}
    return {}


def apply_attribution(
    entry: PropertyInvestment,
    transaction_type: TransactionType,
    amount: float,
    transaction_id: str,
    now: Optional[datetime] = None,
) -> PropertyInvestment:
    """Return ``entry`` with one attributed amount applied and ROI recomputed."""
    updates = {
        name: getattr(entry, name) + delta
        for name, delta in _signed_deltas(transaction_type, amount).items()
    }
    updates["linked_transaction_ids"] = [*entry.linked_transaction_ids, transaction_id]
    updates["updated_at"] = now or utc_now()
    return entry.copy_with(updates).with_recomputed_roi()


def reverse_attribution(
    entry: PropertyInvestment,
    transaction_type: TransactionType,
    amount: float,
    transaction_id: str,
    now: Optional[datetime] = None,
) -> PropertyInvestment:
    """Return ``entry`` with one attributed amount backed out and ROI recomputed."""
    updates = {
        name: getattr(entry, name) - delta
        for name, delta in _signed_deltas(transaction_type, amount).items()
    }
    linked = list(entry.linked_transaction_ids)
    if transaction_id in linked:
        # Drop the most recent link only; apply appends one per attribution
        del linked[len(linked) - 1 - linked[::-1].index(transaction_id)]
    updates["linked_transaction_ids"] = linked
    updates["updated_at"] = now or utc_now()
    return entry.copy_with(updates).with_recomputed_roi()


def revalue_entry(
    entry: PropertyInvestment,
    property_value: float,
    now: Optional[datetime] = None,
) -> PropertyInvestment:
    """Return ``entry`` marked to ``property_value`` with ROI recomputed."""
    if property_value < 0:
        raise ValueError(f"Property value cannot be negative, got {property_value}")
    share_value = FinancialCalculations.attribute_amount(
        property_value, entry.profit_share_percentage
    )
    return entry.copy_with(
        {
            "current_value": property_value,
            "appreciation_value": share_value - entry.investment_amount,
            "updated_at": now or utc_now(),
        }
    ).with_recomputed_roi()


class InvestmentLedger:
    """
    Applies and reverses transactions against stored ledger entries.

    Only *active* entries move. An attributed investor without an active
    entry for the transaction's property is skipped; the skip is logged and
    reported in the returned ``LedgerUpdate`` so callers can surface it.
    Reversal also skips entries whose ``linked_transaction_ids`` do not
    contain the transaction, since apply never reached them.

    All touched entries are written in a single collection write before the
    call returns.
    """

    def __init__(
        self,
        investments: InvestmentRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.investments = investments
        self.clock = clock

    def apply(self, transaction: InvestorTransaction) -> LedgerUpdate:
        return self._post(transaction, apply_attribution, "apply")

    def reverse(self, transaction: InvestorTransaction) -> LedgerUpdate:
        return self._post(transaction, reverse_attribution, "reverse", linked_only=True)

    def revalue(self, investment_id: str, property_value: float) -> PropertyInvestment:
        """
        Record a new market value for the property behind one active entry.

        Raises:
            NotFoundError: If the entry does not exist
            InvalidStateError: If the entry is completed
            ValueError: If the value is negative
        """
        entry = self.investments.require(investment_id)
        if not entry.is_active:
            raise InvalidStateError(
                "Completed investments cannot be revalued", record_id=investment_id
            )
        revalued = revalue_entry(entry, property_value, self.clock())
        self.investments.upsert(revalued)
        logger.info(
            f"Investment {investment_id} revalued at {property_value:,.2f}: "
            f"appreciation {revalued.appreciation_value:,.2f}, ROI {revalued.roi:.2f}%"
        )
        return revalued

    def _post(
        self,
        transaction: InvestorTransaction,
        step,
        verb: str,
        linked_only: bool = False,
    ) -> LedgerUpdate:
        now = self.clock()
        # Entry id -> latest version, so repeated attributions compound
        updated: Dict[str, PropertyInvestment] = {}
        skipped: List[str] = []
        warnings: List[str] = []

        for attribution in transaction.investor_attributions:
            entry = self.investments.active_entry(
                transaction.property_id, attribution.investor_id
            )
            if entry is not None:
                entry = updated.get(entry.id, entry)
            if entry is None:
                message = (
                    f"No active investment found for investor {attribution.investor_id} "
                    f"on property {transaction.property_id}; could not {verb} "
                    f"transaction {transaction.id}"
                )
                logger.warning(message)
                skipped.append(attribution.investor_id)
                warnings.append(message)
                continue
            if linked_only and transaction.id not in entry.linked_transaction_ids:
                message = (
                    f"Investment {entry.id} was never updated by transaction "
                    f"{transaction.id}; could not {verb} it for investor "
                    f"{attribution.investor_id}"
                )
                logger.warning(message)
                skipped.append(attribution.investor_id)
                warnings.append(message)
                continue

            updated[entry.id] = step(
                entry,
                transaction.transaction_type,
                attribution.amount,
                transaction.id,
                now,
            )

        self.investments.upsert_many(list(updated.values()))
        logger.debug(
            f"Ledger {verb} {transaction.id}: {len(updated)} entries updated, "
            f"{len(skipped)} skipped"
        )
        return LedgerUpdate(
            updated_ids=tuple(updated),
            skipped_investor_ids=tuple(skipped),
            warnings=tuple(warnings),
        )


__all__ = [
    "InvestmentLedger",
    "apply_attribution",
    "reverse_attribution",
    "revalue_entry",
]
