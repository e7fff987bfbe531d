# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for the investor ledger.

Factories build valid properties, investors and ledger entries without
repeating every required field; fixtures wire a service over an in-memory
store with a fixed clock so timestamps compare exactly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

import pytest

from syndication.core.primitives import (
    AcquisitionType,
    OwnerType,
    PropertyStatus,
)
from syndication.core.store import InMemoryStore
from syndication.investors import (
    Investor,
    InvestorShare,
    Property,
    PropertyInvestment,
    PurchaseDetails,
    SyndicationService,
)

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
PURCHASE_DATE = datetime(2024, 1, 15, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


# Entity factories
def make_investor(investor_id: str, name: Optional[str] = None) -> Investor:
    """Create an investor named after its id unless a name is given."""
    return Investor(
        id=investor_id,
        name=name or investor_id.replace("inv-", "").title(),
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )


def make_property(
    property_id: str = "prop-1",
    investor_ids: Sequence[str] = ("inv-a", "inv-b"),
    cost_basis: float = 1_000_000,
    status: PropertyStatus = PropertyStatus.AVAILABLE,
    final_sale_price: Optional[float] = None,
    commission: Optional[float] = None,
    acquisition_type: Optional[AcquisitionType] = AcquisitionType.INVESTOR_PURCHASE,
) -> Property:
    """
    Create an investor-purchased property with equal investor shares.

    Args:
        property_id: Property id
        investor_ids: Assigned investors; each gets an equal live share
        cost_basis: Total cost basis of the purchase
        status: Listing status
        final_sale_price: Sale price for sold properties
        commission: Commission earned on the sale
        acquisition_type: Acquisition type

    Example:
        >>> prop = make_property(investor_ids=["inv-a"], cost_basis=500_000)
        >>> prop.investor_shares[0].share_percentage
        100.0
    """
    count = len(investor_ids)
    shares = [
        InvestorShare(
            investor_id=investor_id,
            investor_name=investor_id.replace("inv-", "").title(),
            share_percentage=100 / count,
            investment_amount=cost_basis / count,
        )
        for investor_id in investor_ids
    ]
    return Property(
        id=property_id,
        title=f"Property {property_id}",
        status=status,
        acquisition_type=acquisition_type,
        current_owner_type=OwnerType.INVESTOR if count else None,
        investor_shares=shares,
        purchase_details=PurchaseDetails(
            assigned_investors=list(investor_ids),
            total_cost_basis=cost_basis,
            purchase_date=PURCHASE_DATE,
        ),
        final_sale_price=final_sale_price,
        commission_earned=commission,
        created_at=PURCHASE_DATE,
    )


def make_entry(
    investor_id: str = "inv-a",
    property_id: str = "prop-1",
    investment_amount: float = 500_000,
    profit_share_percentage: float = 50,
    **fields,
) -> PropertyInvestment:
    """Create an active ledger entry with zeroed running totals."""
    return PropertyInvestment(
        id=f"propinv-{property_id}-{investor_id}",
        property_id=property_id,
        investor_id=investor_id,
        investor_name=investor_id.replace("inv-", "").title(),
        investment_amount=investment_amount,
        profit_share_percentage=profit_share_percentage,
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
        **fields,
    )


# Fixtures
@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def service(store) -> SyndicationService:
    """Service over an empty in-memory store with a fixed clock."""
    return SyndicationService(store, clock=fixed_clock)


@pytest.fixture
def funded_service(service) -> SyndicationService:
    """
    Service holding investors A and B and property ``prop-1`` (cost basis
    1,000,000) synced 50/50.
    """
    service.add_investor(make_investor("inv-a", "Alice"))
    service.add_investor(make_investor("inv-b", "Bob"))
    service.save_property(make_property(), actor="agent-1")
    return service
