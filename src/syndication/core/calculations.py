# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Financial calculation functions.

Contains static methods for the ledger's core metrics. These functions are
pure (math-only) and independent of storage; the ledger, recorder and
distribution calculator delegate to them so every ROI, attribution and
payout figure comes from a single source.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pyxirr import InvalidPaymentsError, xirr


class FinancialCalculations:
    """
    Pure mathematical functions for investor ledger calculations.

    Percentages are on the 0-100 scale everywhere in this class.
    """

    @staticmethod
    def calculate_roi(
        rental_income: float,
        appreciation_value: float,
        total_expenses: float,
        investment_amount: float,
    ) -> float:
        """
        Return on investment of a ledger entry, in percent.

        ROI = (rental income + appreciation - expenses) / principal * 100

        Args:
            rental_income: Cumulative attributed rental income
            appreciation_value: Appreciation recorded against the entry
            total_expenses: Cumulative attributed expenses
            investment_amount: Principal of the entry

        Returns:
            ROI in percent, or 0.0 when the principal is zero

        Example:
            ```python
            FinancialCalculations.calculate_roi(50_000, 0, 10_000, 500_000)
            # 8.0
            ```
        """
        if investment_amount == 0:
            return 0.0
        total_returns = rental_income + appreciation_value - total_expenses
        return (total_returns / investment_amount) * 100

    @staticmethod
    def attribute_amount(amount: float, percentage: float) -> float:
        """Share of ``amount`` attributed to a holder of ``percentage`` percent."""
        return (amount * percentage) / 100

    @staticmethod
    def calculate_net_sale_profit(
        final_sale_price: float, total_cost_basis: float, commission: float = 0.0
    ) -> float:
        """
        Net profit realized on sale. Negative values are losses and are
        returned as-is.
        """
        return final_sale_price - total_cost_basis - (commission or 0.0)

    @staticmethod
    def amounts_reconcile(
        parts: Sequence[float], total: float, tolerance: float = 1e-6
    ) -> bool:
        """Check that ``parts`` sum to ``total`` within ``tolerance``."""
        return bool(np.isclose(float(np.sum(parts)), total, rtol=0.0, atol=tolerance))

    @staticmethod
    def calculate_irr(cash_flows: pd.Series) -> Optional[float]:
        """
        Calculate Internal Rate of Return using PyXIRR.

        Args:
            cash_flows: Series of dated cash flows (DatetimeIndex or index of dates)
                       Negative values = investments/outflows
                       Positive values = returns/inflows

        Returns:
            IRR as decimal (e.g., 0.15 for 15%) or None if cannot calculate

        Edge Cases Handled:
            - Empty series → None
            - All negative flows → None
            - All positive flows → None
        """
        if cash_flows.empty:
            return None

        has_negative = (cash_flows < 0).any()
        has_positive = (cash_flows > 0).any()
        if not (has_negative and has_positive):
            return None  # Need both investments and returns

        # Same-day flows are netted; pyxirr expects one amount per date
        grouped = cash_flows.groupby(pd.to_datetime(cash_flows.index)).sum()
        dates = [timestamp.date() for timestamp in grouped.index]
        try:
            result = xirr(dates, grouped.values)
        except (InvalidPaymentsError, ValueError, ArithmeticError):
            return None
        if result is None or np.isnan(result):
            return None
        return float(result)

    @staticmethod
    def calculate_equity_multiple(cash_flows: pd.Series) -> Optional[float]:
        """
        Calculate equity multiple (total returns / total investment).

        Returns:
            Multiple as float (e.g., 1.6 for 1.6x) or None when nothing was invested
        """
        if cash_flows.empty:
            return None

        negative_flows = cash_flows[cash_flows < 0]
        if negative_flows.empty:
            return None

        total_invested = abs(negative_flows.sum())
        if total_invested == 0:
            return None

        positive_flows = cash_flows[cash_flows > 0]
        total_returned = positive_flows.sum() if not positive_flows.empty else 0.0
        return float(total_returned / total_invested)

    @staticmethod
    def equal_split(total: float, count: int) -> List[Tuple[float, float]]:
        """
        Equal allocation of ``total`` across ``count`` holders.

        Returns:
            ``count`` pairs of (amount, percentage); empty when count is 0
        """
        if count <= 0:
            return []
        return [(total / count, 100 / count)] * count
