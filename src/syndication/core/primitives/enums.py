# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum
from typing import List


class TransactionType(str, Enum):
    """
    Classification of an income or expense event on an investor-owned property.

    Rental income increases each investor's rental income and unrealized
    profit. Every ``expense-`` type increases total expenses and reduces
    unrealized profit by the attributed amount.
    """

    RENTAL_INCOME = "rental-income"
    EXPENSE_MAINTENANCE = "expense-maintenance"
    EXPENSE_TAX = "expense-tax"
    EXPENSE_UTILITY = "expense-utility"
    EXPENSE_INSURANCE = "expense-insurance"
    EXPENSE_LEGAL = "expense-legal"
    EXPENSE_RENOVATION = "expense-renovation"
    EXPENSE_OTHER = "expense-other"

    @property
    def is_income(self) -> bool:
        return self is TransactionType.RENTAL_INCOME

    @property
    def is_expense(self) -> bool:
        return self.value.startswith("expense-")

    @classmethod
    def expense_types(cls) -> List["TransactionType"]:
        """All expense subtypes in declaration order."""
        return [member for member in cls if member.is_expense]


class InvestmentStatus(str, Enum):
    """Lifecycle of a ledger entry. Completed entries are frozen."""

    ACTIVE = "active"
    COMPLETED = "completed"


class PayoutStatus(str, Enum):
    """Lifecycle of a single payout line inside a profit distribution."""

    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


# Forward-only transitions for payout lines
PAYOUT_TRANSITIONS = {
    PayoutStatus.PENDING: (PayoutStatus.APPROVED, PayoutStatus.PAID),
    PayoutStatus.APPROVED: (PayoutStatus.PAID,),
    PayoutStatus.PAID: (),
}


class DistributionStatus(str, Enum):
    """Status of a profit distribution as a whole."""

    CALCULATED = "calculated"


class AcquisitionType(str, Enum):
    """How a property entered the inventory."""

    INVESTOR_PURCHASE = "investor-purchase"
    AGENCY_PURCHASE = "agency-purchase"
    CLIENT_LISTING = "client-listing"


class OwnerType(str, Enum):
    """Current owner classification of a property."""

    INVESTOR = "investor"
    AGENCY = "agency"
    CLIENT = "client"


class PropertyStatus(str, Enum):
    """Listing status of a property."""

    AVAILABLE = "available"
    UNDER_CONTRACT = "under-contract"
    RENTED = "rented"
    SOLD = "sold"


class AllocationPolicy(str, Enum):
    """
    Policy used by allocation sync to derive ledger amounts and percentages.

    Only an equal split is supported: every assigned investor receives the
    same principal and the same profit share. Any manual profit-share edit is
    replaced on the next sync.
    """

    EQUAL_SPLIT = "equal-split"


def enum_to_string(value) -> str:
    """
    Convert enum values to their string representation for tabular output.

    Examples:
        >>> enum_to_string(TransactionType.EXPENSE_TAX)
        'expense-tax'
        >>> enum_to_string("already_string")
        'already_string'
    """
    if isinstance(value, Enum):
        return value.value
    return str(value)
