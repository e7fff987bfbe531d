# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Transaction Recorder

Records income and expense events for investor-owned properties and fans
each one out to every investor holding a share of the property.

Attribution uses the property's live ``investor_shares`` at the time of
recording, independent of the ledger: each investor is attributed
``amount * share_percentage / 100``. The transaction is stored first and then
applied to the ledger. Investors without an active ledger entry are skipped;
the transaction still exists and the skip comes back in
``TransactionResult.warnings``.

Corrections go through the same ledger: an update that changes the amount or
type reverses the stored impact and applies the corrected one, and a delete
reverses before discarding.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..core.calculations import FinancialCalculations
from ..core.exceptions import InvalidStateError, NotFoundError
from ..core.primitives import Model, TransactionType
from .entities import Property, utc_now
from .ledger import InvestmentLedger
from .records import InvestorAttribution, InvestorTransaction, TransactionResult
from .repository import PropertyRepository, TransactionRepository

logger = logging.getLogger(__name__)

# Fields a caller may change through update(); identity and audit fields are fixed
UPDATABLE_FIELDS = frozenset(
    {
        "amount",
        "transaction_type",
        "description",
        "date",
        "category",
        "payment_method",
        "reference",
        "receipt_url",
        "notes",
    }
)


class TransactionDetails(Model):
    """Optional details supplied alongside a recorded transaction."""

    date: Optional[datetime] = None
    category: Optional[str] = None
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    receipt_url: Optional[str] = None
    notes: Optional[str] = None


def build_attributions(
    prop: Property, amount: float
) -> List[InvestorAttribution]:
    """Attribute ``amount`` across the property's live investor shares."""
    return [
        InvestorAttribution(
            investor_id=share.investor_id,
            investor_name=share.investor_name,
            percentage=share.share_percentage,
            amount=FinancialCalculations.attribute_amount(
                amount, share.share_percentage
            ),
        )
        for share in prop.investor_shares
    ]


def rescale_attributions(
    attributions: List[InvestorAttribution], amount: float
) -> List[InvestorAttribution]:
    """Recompute attributed amounts for a new total, keeping the percentages."""
    return [
        attribution.copy_with(
            {
                "amount": FinancialCalculations.attribute_amount(
                    amount, attribution.percentage
                )
            }
        )
        for attribution in attributions
    ]


class TransactionRecorder:
    """
    Records, corrects and deletes investor transactions.

    Attributes:
        properties: Property lookup (``get_property_by_id``)
        transactions: Transaction collection
        ledger: Investment ledger the transactions are applied to
        attribution_tolerance: Allowed gap between attributions and amount
    """

    def __init__(
        self,
        properties: PropertyRepository,
        transactions: TransactionRepository,
        ledger: InvestmentLedger,
        attribution_tolerance: float = 1e-6,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.properties = properties
        self.transactions = transactions
        self.ledger = ledger
        self.attribution_tolerance = attribution_tolerance
        self.clock = clock

    def record(
        self,
        property_id: str,
        transaction_type: TransactionType,
        amount: float,
        description: str,
        actor: str,
        actor_name: Optional[str] = None,
        extra: Optional[TransactionDetails] = None,
    ) -> TransactionResult:
        """
        Record an income or expense event and attribute it to every investor.

        Args:
            property_id: Property the event belongs to
            transaction_type: Rental income or an expense subtype
            amount: Positive total amount of the event
            description: Free-text description
            actor: Id of the user recording the event
            actor_name: Display name of that user
            extra: Optional date, category, payment and receipt details

        Returns:
            The stored transaction plus partial-application warnings

        Raises:
            NotFoundError: If the property does not exist
            InvalidStateError: If the property is not investor-owned or has no shares
            ValueError: If the amount is not positive or the type is unknown
        """
        txn_type = TransactionType(transaction_type)
        if amount <= 0:
            raise ValueError(f"Transaction amount must be positive, got {amount}")

        prop = self.properties.get_property_by_id(property_id)
        if prop is None:
            raise NotFoundError("Property", property_id)
        if not prop.is_investor_owned:
            raise InvalidStateError(
                "Property is not investor-owned or has no investor shares",
                record_id=property_id,
            )

        details = extra or TransactionDetails()
        now = self.clock()
        transaction = InvestorTransaction(
            property_id=property_id,
            transaction_type=txn_type,
            amount=amount,
            date=details.date or now,
            investor_attributions=build_attributions(prop, amount),
            description=description,
            category=details.category,
            payment_method=details.payment_method,
            reference=details.reference,
            receipt_url=details.receipt_url,
            notes=details.notes,
            recorded_by=actor,
            recorded_by_name=actor_name,
            created_at=now,
            updated_at=now,
        )

        warnings = self._check_attribution_total(transaction)
        self.transactions.upsert(transaction)
        warnings.extend(self.ledger.apply(transaction).warnings)

        logger.info(
            f"Transaction recorded: {txn_type.value} {amount:,.2f} for property "
            f"{property_id} ({len(transaction.investor_attributions)} investors)"
        )
        return TransactionResult(transaction=transaction, warnings=warnings)

    def update(self, transaction_id: str, updates: Dict[str, Any]) -> TransactionResult:
        """
        Update a stored transaction.

        When the amount or type changes, the old ledger impact is reversed,
        the attributed amounts are recomputed from the stored percentages and
        the corrected impact is applied. Other field changes leave the ledger
        alone.

        Raises:
            NotFoundError: If the transaction does not exist
            ValueError: If ``updates`` names a field that cannot change
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update transaction fields: {sorted(unknown)}")

        old = self.transactions.get(transaction_id)
        if old is None:
            raise NotFoundError("Transaction", transaction_id)

        amount_changed = "amount" in updates and updates["amount"] != old.amount
        type_changed = "transaction_type" in updates and TransactionType(
            updates["transaction_type"]
        ) != TransactionType(old.transaction_type)
        rebook = amount_changed or type_changed

        payload = {**old.model_dump(), **updates, "updated_at": self.clock()}
        if amount_changed:
            payload["investor_attributions"] = [
                attribution.model_dump()
                for attribution in rescale_attributions(
                    old.investor_attributions, updates["amount"]
                )
            ]
        new = InvestorTransaction.model_validate(payload)

        warnings: List[str] = []
        if rebook:
            warnings.extend(self.ledger.reverse(old).warnings)
        self.transactions.upsert(new)
        if rebook:
            warnings.extend(self.ledger.apply(new).warnings)
            logger.info(
                f"Transaction {transaction_id} rebooked: "
                f"{TransactionType(old.transaction_type).value} {old.amount:,.2f} -> "
                f"{TransactionType(new.transaction_type).value} {new.amount:,.2f}"
            )
        return TransactionResult(transaction=new, warnings=warnings)

    def delete(self, transaction_id: str) -> TransactionResult:
        """
        Reverse a transaction's ledger impact and remove it.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        transaction = self.transactions.get(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)

        update = self.ledger.reverse(transaction)
        self.transactions.remove(transaction_id)
        logger.info(f"Transaction deleted: {transaction_id}")
        return TransactionResult(transaction=transaction, warnings=list(update.warnings))

    def _check_attribution_total(self, transaction: InvestorTransaction) -> List[str]:
        parts = [attribution.amount for attribution in transaction.investor_attributions]
        if FinancialCalculations.amounts_reconcile(
            parts, transaction.amount, self.attribution_tolerance
        ):
            return []
        message = (
            f"Attributions for property {transaction.property_id} total "
            f"{sum(parts):,.2f}, not {transaction.amount:,.2f}; investor shares "
            f"do not sum to 100%"
        )
        logger.warning(message)
        return [message]


__all__ = [
    "TransactionDetails",
    "TransactionRecorder",
    "build_attributions",
    "rescale_attributions",
]
