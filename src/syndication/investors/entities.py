# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Entity models for syndication participants.

Investors are referenced by id from every ledger record; properties carry the
live investor share list used to attribute income and expenses and the
purchase details allocation sync derives ledger entries from.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from ..core.primitives import (
    AcquisitionType,
    Model,
    NonNegativeFloat,
    OwnerType,
    PositiveFloat,
    PropertyStatus,
    SharePercentage,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Investor(Model):
    """An individual or company holding stakes in one or more properties."""

    id: str = Field(..., description="Investor identifier")
    name: str = Field(..., description="Investor display name")
    email: Optional[str] = None
    phone: Optional[str] = None
    investor_type: Literal["individual", "company"] = "individual"
    status: Literal["active", "archived"] = "active"

    # Portfolio aggregates, refreshed by InvestorPortfolio recomputation
    total_invested: float = 0.0
    total_returned: float = 0.0
    active_properties: int = 0
    completed_properties: int = 0
    total_roi: float = 0.0

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Investor name must not be blank")
        return v

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class InvestorShare(Model):
    """One investor's live ownership share of a property."""

    investor_id: str
    investor_name: str
    share_percentage: SharePercentage = Field(
        ..., description="Ownership percentage on the 0-100 scale"
    )
    investment_amount: Optional[PositiveFloat] = None
    notes: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.investor_name}: {self.share_percentage:.2f}%"


class PurchaseDetails(Model):
    """Investor assignment captured when a property is bought by investors."""

    assigned_investors: List[str] = Field(default_factory=list)
    total_cost_basis: NonNegativeFloat = 0.0
    purchase_date: Optional[datetime] = None
    purchase_cycle_id: Optional[str] = None


class Property(Model):
    """
    A property in the inventory.

    Only the fields the investor ledger reads are modeled here. A property is
    investor-owned when ``current_owner_type`` is ``investor`` and it has at
    least one entry in ``investor_shares``.
    """

    id: str
    title: str
    address: Optional[str] = None
    status: PropertyStatus = PropertyStatus.AVAILABLE
    acquisition_type: Optional[AcquisitionType] = None
    current_owner_type: Optional[OwnerType] = None
    investor_shares: List[InvestorShare] = Field(default_factory=list)
    purchase_details: Optional[PurchaseDetails] = None
    final_sale_price: Optional[PositiveFloat] = None
    commission_earned: Optional[NonNegativeFloat] = None
    sold_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_investor_owned(self) -> bool:
        return self.current_owner_type == OwnerType.INVESTOR and bool(
            self.investor_shares
        )

    @property
    def is_investor_purchase(self) -> bool:
        return self.acquisition_type == AcquisitionType.INVESTOR_PURCHASE

    @property
    def is_sold(self) -> bool:
        return self.status == PropertyStatus.SOLD

    @property
    def assigned_investor_ids(self) -> List[str]:
        if self.purchase_details is None:
            return []
        return list(self.purchase_details.assigned_investors)

    def __str__(self) -> str:
        return f"{self.title} ({self.id})"


__all__ = [
    "Investor",
    "InvestorShare",
    "Property",
    "PurchaseDetails",
    "utc_now",
]
