# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Read-only ledger summaries.

Pure computations over the stored collections: property and investor
transaction totals, expense breakdowns, tabular views for reporting,
investor portfolio aggregates and investor statements with IRR. None of
these write to storage, so they are safe to call at any time.

Example:
    ```python
    summaries = LedgerSummaries(repos)
    summary = summaries.property_transaction_summary("prop-1")
    print(f"Net cash flow: {summary.net_cash_flow:,.0f}")

    statement = summaries.investor_statement("inv-a")
    print(statement.holdings[["property_id", "roi"]])
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from ..core.calculations import FinancialCalculations
from ..core.exceptions import NotFoundError
from ..core.primitives import (
    InvestmentStatus,
    PayoutStatus,
    TransactionType,
    enum_to_string,
)
from .records import InvestorTransaction
from .repository import Repositories

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = [
    "transaction_id",
    "property_id",
    "date",
    "transaction_type",
    "amount",
    "investor_id",
    "investor_name",
    "percentage",
    "attributed_amount",
]

HOLDING_COLUMNS = [
    "property_id",
    "investment_id",
    "status",
    "investment_amount",
    "profit_share_percentage",
    "rental_income",
    "total_expenses",
    "appreciation_value",
    "unrealized_profit",
    "actual_return",
    "roi",
]


@dataclass(frozen=True)
class PropertyTransactionSummary:
    property_id: str
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_cash_flow: float = 0.0
    transaction_count: int = 0
    income_count: int = 0
    expense_count: int = 0


@dataclass(frozen=True)
class InvestorTransactionSummary:
    investor_id: str
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_cash_flow: float = 0.0
    transaction_count: int = 0


@dataclass(frozen=True)
class InvestorPortfolio:
    """
    Aggregates over one investor's ledger entries and payouts.

    ``total_returned`` counts paid payout lines only.
    """

    investor_id: str
    total_invested: float = 0.0
    total_returned: float = 0.0
    active_properties: int = 0
    completed_properties: int = 0
    unrealized_profit: float = 0.0
    realized_profit: float = 0.0
    total_roi: float = 0.0


@dataclass
class InvestorStatement:
    """
    Per-investor statement: holdings, dated cash flows and return metrics.

    Cash flows are negative for principal and attributed expenses, positive
    for attributed income and payouts. Unpaid payouts are dated at the
    distribution's calculation date.
    """

    investor_id: str
    investor_name: str
    portfolio: InvestorPortfolio
    holdings: pd.DataFrame
    cash_flows: pd.Series
    irr: Optional[float] = None
    equity_multiple: Optional[float] = None
    notes: List[str] = field(default_factory=list)


def _txn_type(transaction: InvestorTransaction) -> TransactionType:
    return TransactionType(transaction.transaction_type)


def transactions_frame(transactions: List[InvestorTransaction]) -> pd.DataFrame:
    """
    Flatten transactions into one row per investor attribution.

    A transaction without attributions still produces one row with empty
    investor columns so property totals remain visible.
    """
    rows = []
    for txn in transactions:
        base = {
            "transaction_id": txn.id,
            "property_id": txn.property_id,
            "date": pd.Timestamp(txn.date),
            "transaction_type": enum_to_string(txn.transaction_type),
            "amount": txn.amount,
        }
        if not txn.investor_attributions:
            rows.append(
                {
                    **base,
                    "investor_id": None,
                    "investor_name": None,
                    "percentage": 0.0,
                    "attributed_amount": 0.0,
                }
            )
            continue
        for attribution in txn.investor_attributions:
            rows.append(
                {
                    **base,
                    "investor_id": attribution.investor_id,
                    "investor_name": attribution.investor_name,
                    "percentage": attribution.percentage,
                    "attributed_amount": attribution.amount,
                }
            )
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)


class LedgerSummaries:
    """Read-only views over the ledger collections."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    def property_transaction_summary(self, property_id: str) -> PropertyTransactionSummary:
        transactions = self.repos.transactions.for_property(property_id)
        income = [txn for txn in transactions if _txn_type(txn).is_income]
        expenses = [txn for txn in transactions if _txn_type(txn).is_expense]
        total_income = sum(txn.amount for txn in income)
        total_expenses = sum(txn.amount for txn in expenses)
        return PropertyTransactionSummary(
            property_id=property_id,
            total_income=total_income,
            total_expenses=total_expenses,
            net_cash_flow=total_income - total_expenses,
            transaction_count=len(transactions),
            income_count=len(income),
            expense_count=len(expenses),
        )

    def investor_transaction_summary(self, investor_id: str) -> InvestorTransactionSummary:
        transactions = self.repos.transactions.for_investor(investor_id)
        total_income = 0.0
        total_expenses = 0.0
        for txn in transactions:
            attribution = txn.attribution_for(investor_id)
            if attribution is None:
                continue
            if _txn_type(txn).is_income:
                total_income += attribution.amount
            elif _txn_type(txn).is_expense:
                total_expenses += attribution.amount
        return InvestorTransactionSummary(
            investor_id=investor_id,
            total_income=total_income,
            total_expenses=total_expenses,
            net_cash_flow=total_income - total_expenses,
            transaction_count=len(transactions),
        )

    def expense_breakdown(self, property_id: str) -> Dict[str, float]:
        """Expense totals keyed by expense type value, e.g. ``expense-tax``."""
        frame = transactions_frame(self.repos.transactions.for_property(property_id))
        if frame.empty:
            return {}
        expenses = frame[frame["transaction_type"].str.startswith("expense-")]
        # One row per attribution; collapse back to one amount per transaction
        per_txn = expenses.drop_duplicates("transaction_id")
        totals = per_txn.groupby("transaction_type", sort=True)["amount"].sum()
        return {str(key): float(value) for key, value in totals.items()}

    def property_transactions_frame(self, property_id: str) -> pd.DataFrame:
        return transactions_frame(self.repos.transactions.for_property(property_id))

    def investor_portfolio(self, investor_id: str) -> InvestorPortfolio:
        entries = self.repos.investments.for_investor(investor_id)
        active = [e for e in entries if e.status == InvestmentStatus.ACTIVE]
        completed = [e for e in entries if e.status == InvestmentStatus.COMPLETED]

        total_invested = sum(e.investment_amount for e in entries)
        unrealized = sum(e.unrealized_profit for e in active)
        realized = sum(
            e.actual_return - e.investment_amount
            for e in completed
            if e.actual_return is not None
        )

        total_returned = 0.0
        for distribution in self.repos.distributions.for_investor(investor_id):
            line = distribution.line_for(investor_id)
            if line is not None and PayoutStatus(line.status) == PayoutStatus.PAID:
                total_returned += line.total_payout

        total_roi = (
            (unrealized + realized) / total_invested * 100 if total_invested > 0 else 0.0
        )
        return InvestorPortfolio(
            investor_id=investor_id,
            total_invested=total_invested,
            total_returned=total_returned,
            active_properties=len(active),
            completed_properties=len(completed),
            unrealized_profit=unrealized,
            realized_profit=realized,
            total_roi=total_roi,
        )

    def investor_cash_flows(self, investor_id: str) -> pd.Series:
        """Dated cash flows of one investor, summed per day."""
        flows: List[tuple] = []
        for entry in self.repos.investments.for_investor(investor_id):
            when = entry.investment_date or entry.created_at
            flows.append((pd.Timestamp(when), -entry.investment_amount))

        for txn in self.repos.transactions.for_investor(investor_id):
            attribution = txn.attribution_for(investor_id)
            if attribution is None:
                continue
            sign = 1.0 if _txn_type(txn).is_income else -1.0
            flows.append((pd.Timestamp(txn.date), sign * attribution.amount))

        for distribution in self.repos.distributions.for_investor(investor_id):
            line = distribution.line_for(investor_id)
            when = line.payment_date or distribution.calculated_date
            flows.append((pd.Timestamp(when), line.total_payout))

        if not flows:
            return pd.Series(dtype=float, name="cash_flow")
        frame = pd.DataFrame(flows, columns=["date", "amount"])
        # Normalize to naive UTC days so mixed-timezone inputs group together
        frame["date"] = pd.to_datetime(frame["date"], utc=True).dt.tz_localize(None).dt.normalize()
        series = frame.groupby("date")["amount"].sum().sort_index()
        series.name = "cash_flow"
        return series

    def investor_statement(self, investor_id: str) -> InvestorStatement:
        """
        Build a statement for one investor.

        Raises:
            NotFoundError: If the investor does not exist
        """
        investor = self.repos.investors.get_investor_by_id(investor_id)
        if investor is None:
            raise NotFoundError("Investor", investor_id)

        entries = self.repos.investments.for_investor(investor_id)
        holdings = pd.DataFrame(
            [
                {
                    "property_id": e.property_id,
                    "investment_id": e.id,
                    "status": enum_to_string(e.status),
                    "investment_amount": e.investment_amount,
                    "profit_share_percentage": e.profit_share_percentage,
                    "rental_income": e.rental_income,
                    "total_expenses": e.total_expenses,
                    "appreciation_value": e.appreciation_value,
                    "unrealized_profit": e.unrealized_profit,
                    "actual_return": e.actual_return,
                    "roi": e.roi,
                }
                for e in entries
            ],
            columns=HOLDING_COLUMNS,
        )

        cash_flows = self.investor_cash_flows(investor_id)
        notes = []
        irr = FinancialCalculations.calculate_irr(cash_flows)
        if irr is None and not cash_flows.empty:
            notes.append("IRR unavailable: cash flows need both outflows and inflows")

        return InvestorStatement(
            investor_id=investor_id,
            investor_name=investor.name,
            portfolio=self.investor_portfolio(investor_id),
            holdings=holdings,
            cash_flows=cash_flows,
            irr=irr,
            equity_multiple=FinancialCalculations.calculate_equity_multiple(cash_flows),
            notes=notes,
        )


__all__ = [
    "InvestorPortfolio",
    "InvestorStatement",
    "InvestorTransactionSummary",
    "LedgerSummaries",
    "PropertyTransactionSummary",
    "transactions_frame",
]
