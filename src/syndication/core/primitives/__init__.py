# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Syndication Core Primitives

Base model, enums, constrained types and settings shared by every module.
"""

from .enums import (
    PAYOUT_TRANSITIONS,
    AcquisitionType,
    AllocationPolicy,
    DistributionStatus,
    InvestmentStatus,
    OwnerType,
    PayoutStatus,
    PropertyStatus,
    TransactionType,
    enum_to_string,
)
from .model import Model
from .settings import SyndicationSettings
from .types import NonNegativeFloat, Percentage, PositiveFloat, SharePercentage

__all__ = [
    # Core models
    "Model",
    # Settings
    "SyndicationSettings",
    # Enums
    "AcquisitionType",
    "AllocationPolicy",
    "DistributionStatus",
    "InvestmentStatus",
    "OwnerType",
    "PayoutStatus",
    "PropertyStatus",
    "TransactionType",
    "PAYOUT_TRANSITIONS",
    "enum_to_string",
    # Types
    "NonNegativeFloat",
    "Percentage",
    "PositiveFloat",
    "SharePercentage",
]
