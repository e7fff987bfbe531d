# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Typed exceptions for the investor ledger.

Hierarchy:

    SyndicationError (base)
    +-- NotFoundError          referenced property/transaction/distribution absent
    +-- InvalidStateError      operation on an ineligible record
    +-- ShareValidationError   investor share list fails validation (also a ValueError)

Explicit user actions (recording, updating and deleting transactions, payout
status changes) raise these. Allocation sync and distribution creation are
called speculatively from broader save flows and return without raising
when a property is not eligible.
"""

from __future__ import annotations

from typing import Optional


class SyndicationError(Exception):
    """Base exception for all investor ledger errors."""

    code: str = "SYNDICATION_ERROR"


class NotFoundError(SyndicationError, LookupError):
    """A referenced record does not exist."""

    code: str = "NOT_FOUND"

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class InvalidStateError(SyndicationError):
    """The record exists but is not eligible for the requested operation."""

    code: str = "INVALID_STATE"

    def __init__(self, message: str, record_id: Optional[str] = None):
        self.record_id = record_id
        super().__init__(message)


class ShareValidationError(SyndicationError, ValueError):
    """Investor shares are incomplete or do not sum to 100%."""

    code: str = "INVALID_SHARES"


__all__ = [
    "InvalidStateError",
    "NotFoundError",
    "ShareValidationError",
    "SyndicationError",
]
