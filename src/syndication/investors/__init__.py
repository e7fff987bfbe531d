# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Syndication Investor Ledger
Public API for the syndication.investors subpackage.

Ledger entries per (property, investor) pair, transaction attribution and
reversal, allocation sync from investor assignment, sale distributions and
read-only reporting views.
"""

from ..core.primitives import (
    AllocationPolicy,
    InvestmentStatus,
    PayoutStatus,
    TransactionType,
)
from .allocation import (
    Allocation,
    AllocationStrategy,
    AllocationSync,
    EqualSplitAllocation,
    get_allocation_strategy,
)
from .api import PropertySaveResult, SyndicationService
from .distribution import (
    DistributionSummary,
    SaleDistributionCalculator,
    calculate_distribution_lines,
)
from .entities import Investor, InvestorShare, Property, PurchaseDetails
from .ledger import (
    InvestmentLedger,
    apply_attribution,
    reverse_attribution,
    revalue_entry,
)
from .records import (
    AllocationResult,
    DistributionLine,
    InvestorAttribution,
    InvestorTransaction,
    LedgerUpdate,
    ProfitDistribution,
    PropertyInvestment,
    TransactionResult,
)
from .repository import Repositories
from .summaries import (
    InvestorPortfolio,
    InvestorStatement,
    InvestorTransactionSummary,
    LedgerSummaries,
    PropertyTransactionSummary,
    transactions_frame,
)
from .transactions import TransactionDetails, TransactionRecorder
from .validation import (
    ShareValidation,
    calculate_investment_amounts,
    validate_investor_shares,
)

__all__ = [
    # Service
    "SyndicationService",
    "PropertySaveResult",
    # Entities
    "Investor",
    "InvestorShare",
    "Property",
    "PurchaseDetails",
    # Records
    "PropertyInvestment",
    "InvestorTransaction",
    "InvestorAttribution",
    "ProfitDistribution",
    "DistributionLine",
    "LedgerUpdate",
    "TransactionResult",
    "AllocationResult",
    "Repositories",
    # Enums
    "AllocationPolicy",
    "InvestmentStatus",
    "PayoutStatus",
    "TransactionType",
    # Ledger and recorder
    "InvestmentLedger",
    "apply_attribution",
    "reverse_attribution",
    "revalue_entry",
    "TransactionRecorder",
    "TransactionDetails",
    # Allocation sync
    "AllocationSync",
    "AllocationStrategy",
    "Allocation",
    "EqualSplitAllocation",
    "get_allocation_strategy",
    # Distributions
    "SaleDistributionCalculator",
    "DistributionSummary",
    "calculate_distribution_lines",
    # Reporting
    "LedgerSummaries",
    "PropertyTransactionSummary",
    "InvestorTransactionSummary",
    "InvestorPortfolio",
    "InvestorStatement",
    "transactions_frame",
    # Validation
    "ShareValidation",
    "validate_investor_shares",
    "calculate_investment_amounts",
]
