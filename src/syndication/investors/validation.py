# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Validation of investor share lists for multi-investor purchases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..core.calculations import FinancialCalculations
from ..core.exceptions import ShareValidationError
from .entities import InvestorShare

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShareValidation:
    valid: bool
    error: Optional[str] = None

    def raise_for_error(self) -> None:
        if not self.valid:
            raise ShareValidationError(self.error)


def validate_investor_shares(
    shares: List[InvestorShare], tolerance: float = 0.01
) -> ShareValidation:
    """
    Check that a share list is complete and sums to 100%.

    Args:
        shares: Proposed investor shares
        tolerance: Allowed deviation of the total from 100, in percentage points

    Returns:
        ShareValidation with the first problem found, if any
    """
    if not shares:
        return ShareValidation(False, "At least one investor is required")

    seen = set()
    for share in shares:
        if not share.investor_id or not share.investor_name:
            return ShareValidation(False, "All investors must have ID and name")
        if share.investor_id in seen:
            return ShareValidation(
                False, f"Investor {share.investor_id} appears more than once"
            )
        seen.add(share.investor_id)
        if not 0 < share.share_percentage <= 100:
            return ShareValidation(
                False, "Each investor percentage must be between 0 and 100"
            )
        if not share.investment_amount or share.investment_amount <= 0:
            return ShareValidation(
                False, "All investors must have valid investment amounts"
            )

    total = sum(share.share_percentage for share in shares)
    if abs(total - 100) > tolerance:
        logger.debug(f"Investor share total {total:.4f}% outside tolerance")
        return ShareValidation(
            False, f"Total percentage must equal 100% (currently {total:.2f}%)"
        )
    return ShareValidation(True)


def calculate_investment_amounts(
    shares: List[InvestorShare], total_price: float
) -> List[InvestorShare]:
    """Fill each share's investment amount as its percentage of ``total_price``."""
    return [
        share.copy_with(
            {
                "investment_amount": FinancialCalculations.attribute_amount(
                    total_price, share.share_percentage
                )
            }
        )
        for share in shares
    ]


__all__ = [
    "ShareValidation",
    "calculate_investment_amounts",
    "validate_investor_shares",
]
