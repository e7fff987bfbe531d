# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Syndication Core Framework

Primitives, financial math, typed exceptions and persistence backends shared
by the investor ledger.
"""

from . import primitives, store
from .calculations import FinancialCalculations
from .exceptions import (
    InvalidStateError,
    NotFoundError,
    ShareValidationError,
    SyndicationError,
)
from .primitives import Model, SyndicationSettings

__all__ = [
    "primitives",
    "store",
    "FinancialCalculations",
    "InvalidStateError",
    "Model",
    "NotFoundError",
    "ShareValidationError",
    "SyndicationError",
    "SyndicationSettings",
]
