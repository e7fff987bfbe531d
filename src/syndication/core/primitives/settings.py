# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field

from .enums import AllocationPolicy
from .model import Model
from .types import PositiveFloat


class SyndicationSettings(Model):
    """
    Configuration for the investor ledger services.

    Settings are passed explicitly to ``SyndicationService`` and the
    components it builds; nothing reads module-level state.

    Usage Examples:
        # In-memory ledger with defaults (tests, scratch analysis)
        settings = SyndicationSettings()

        # File-backed ledger scoped to one tenant
        settings = SyndicationSettings(
            tenant_id="agency-42",
            storage_dir=Path("/var/lib/syndication"),
        )
    """

    tenant_id: Optional[str] = Field(
        default=None,
        description="Tenant identifier used to scope storage keys. None means unscoped.",
    )
    storage_dir: Optional[Path] = Field(
        default=None,
        description="Directory for the JSON file store. None selects the in-memory store.",
    )
    allocation_policy: AllocationPolicy = Field(
        default=AllocationPolicy.EQUAL_SPLIT,
        description="Policy allocation sync uses to derive ledger amounts.",
    )
    share_total_tolerance: PositiveFloat = Field(
        default=0.01,
        description="Allowed deviation (percentage points) of investor shares from 100.",
    )
    attribution_tolerance: PositiveFloat = Field(
        default=1e-6,
        description="Allowed gap between summed attributions and the transaction amount.",
    )
    expected_return_multiple: PositiveFloat = Field(
        default=1.2,
        description="Multiple of principal recorded as expected return on synced entries.",
    )
