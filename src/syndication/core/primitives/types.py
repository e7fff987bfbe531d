# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Annotated

from pydantic import Field

PositiveFloat = Annotated[float, Field(gt=0)]
NonNegativeFloat = Annotated[float, Field(ge=0)]

# Percentages are stored on the 0-100 scale throughout the ledger
Percentage = Annotated[float, Field(ge=0, le=100)]
SharePercentage = Annotated[float, Field(gt=0, le=100)]
