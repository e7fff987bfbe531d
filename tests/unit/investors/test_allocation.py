# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for Ownership/Allocation Sync.
"""

from __future__ import annotations

import pytest

from syndication.core.primitives import (
    AcquisitionType,
    AllocationPolicy,
    InvestmentStatus,
    PropertyStatus,
    TransactionType,
)
from syndication.core.store import INVESTMENTS_KEY
from syndication.investors import (
    AllocationSync,
    EqualSplitAllocation,
    SaleDistributionCalculator,
    get_allocation_strategy,
)
from syndication.investors.repository import (
    DistributionRepository,
    InvestmentRepository,
    InvestorRepository,
)

from tests.conftest import PURCHASE_DATE, fixed_clock, make_investor, make_property


@pytest.fixture
def investors(store) -> InvestorRepository:
    repo = InvestorRepository(store)
    repo.upsert_many([make_investor(i) for i in ("inv-a", "inv-b", "inv-c")])
    return repo


@pytest.fixture
def investments(store) -> InvestmentRepository:
    return InvestmentRepository(store)


@pytest.fixture
def sync(investments, investors) -> AllocationSync:
    return AllocationSync(investments, investors, clock=fixed_clock)


class TestAllocationPolicy:
    def test_equal_split_is_default(self):
        strategy = get_allocation_strategy(AllocationPolicy.EQUAL_SPLIT)
        assert isinstance(strategy, EqualSplitAllocation)
        assert get_allocation_strategy("equal-split") is strategy

    def test_equal_split_allocations(self):
        allocations = EqualSplitAllocation().allocate(900_000, ["inv-a", "inv-b", "inv-c"])
        assert [a.investment_amount for a in allocations.values()] == [300_000] * 3
        assert sum(a.profit_share_percentage for a in allocations.values()) == pytest.approx(100)

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            get_allocation_strategy("pro-rata")


class TestSync:
    """AllocationSync.sync"""

    def test_creates_one_entry_per_assigned_investor(self, sync, investments):
        result = sync.sync(make_property(), actor="agent-1")

        assert sorted(result.created_ids) == [
            "propinv-prop-1-inv-a",
            "propinv-prop-1-inv-b",
        ]
        entries = investments.for_property("prop-1")
        assert len(entries) == 2
        for entry in entries:
            assert entry.investment_amount == 500_000
            assert entry.profit_share_percentage == 50
            assert entry.status == InvestmentStatus.ACTIVE
            assert entry.investment_date == PURCHASE_DATE
            assert entry.expected_return == 600_000
            assert entry.actual_return is None
            assert entry.created_by == "agent-1"

    def test_entry_takes_investor_name_from_store(self, sync, investments):
        sync.sync(make_property())
        assert investments.get("propinv-prop-1-inv-a").investor_name == "A"

    def test_second_sync_is_idempotent(self, sync, investments):
        sync.sync(make_property())
        before = investments.all()

        result = sync.sync(make_property())

        assert not result.changed
        assert sorted(result.unchanged_ids) == sorted(e.id for e in before)
        assert investments.all() == before

    def test_unassigned_investor_entry_deleted(self, sync, investments):
        sync.sync(make_property(investor_ids=("inv-a", "inv-b", "inv-c")))

        result = sync.sync(make_property(investor_ids=("inv-a", "inv-b")))

        assert result.deleted_ids == ("propinv-prop-1-inv-c",)
        assert sorted(result.updated_ids) == [
            "propinv-prop-1-inv-a",
            "propinv-prop-1-inv-b",
        ]
        entry = investments.get("propinv-prop-1-inv-a")
        assert entry.investment_amount == 500_000
        assert entry.profit_share_percentage == 50

    def test_resync_preserves_identity_and_running_totals(self, sync, investments):
        sync.sync(make_property(investor_ids=("inv-a",)))
        created = investments.get("propinv-prop-1-inv-a")
        investments.upsert(
            created.copy_with(
                {
                    "rental_income": 10_000,
                    "unrealized_profit": 10_000,
                    "linked_transaction_ids": ["inv-txn-1"],
                }
            )
        )

        sync.sync(make_property(investor_ids=("inv-a", "inv-b")))

        entry = investments.get("propinv-prop-1-inv-a")
        assert entry.id == created.id
        assert entry.created_at == created.created_at
        assert entry.rental_income == 10_000
        assert entry.linked_transaction_ids == ["inv-txn-1"]
        assert entry.investment_amount == 500_000
        assert entry.roi == 2.0

    def test_manual_profit_share_overwritten(self, sync, investments):
        """Equal split replaces a hand-edited profit share on the next sync."""
        sync.sync(make_property())
        edited = investments.get("propinv-prop-1-inv-a").copy_with(
            {"profit_share_percentage": 70}
        )
        investments.upsert(edited)

        result = sync.sync(make_property())

        assert result.updated_ids == ("propinv-prop-1-inv-a",)
        assert investments.get(edited.id).profit_share_percentage == 50

    def test_unknown_investor_skipped_but_counted(self, sync, investments):
        result = sync.sync(make_property(investor_ids=("inv-a", "inv-ghost")))

        assert result.created_ids == ("propinv-prop-1-inv-a",)
        assert "inv-ghost" in result.warnings[0]
        assert investments.get("propinv-prop-1-inv-a").investment_amount == 500_000

    def test_duplicate_assignment_counted_once(self, sync, investments):
        sync.sync(make_property(investor_ids=("inv-a", "inv-a", "inv-b")))
        assert len(investments.for_property("prop-1")) == 2
        assert investments.get("propinv-prop-1-inv-a").profit_share_percentage == 50

    def test_no_assigned_investors_deletes_entries(self, sync, investments):
        sync.sync(make_property())

        result = sync.sync(make_property(investor_ids=()))

        assert len(result.deleted_ids) == 2
        assert investments.for_property("prop-1") == []

    def test_non_investor_purchase_deletes_entries(self, sync, investments):
        sync.sync(make_property())
        agency = make_property(acquisition_type=AcquisitionType.AGENCY_PURCHASE)

        result = sync.sync(agency)

        assert len(result.deleted_ids) == 2
        assert investments.for_property("prop-1") == []

    def test_ineligible_property_without_entries_is_noop(self, sync, store):
        result = sync.sync(make_property(acquisition_type=None))
        assert not result.changed
        assert INVESTMENTS_KEY not in store.keys()

    def test_other_properties_untouched(self, sync, investments):
        sync.sync(make_property("prop-1"))
        sync.sync(make_property("prop-2"))

        sync.sync(make_property("prop-1", investor_ids=()))

        assert len(investments.for_property("prop-2")) == 2

    def test_sold_property_completes_entries(self, sync, investments):
        sold = make_property(
            status=PropertyStatus.SOLD, final_sale_price=1_300_000, commission=100_000
        )
        sync.sync(sold)
        entry = investments.get("propinv-prop-1-inv-a")
        assert entry.status == InvestmentStatus.COMPLETED
        assert entry.actual_return == 600_000

    def test_sold_without_price_returns_principal(self, sync, investments):
        sync.sync(make_property(status=PropertyStatus.SOLD))
        assert investments.get("propinv-prop-1-inv-a").actual_return == 500_000

    def test_sold_entries_stay_active_until_distributed(
        self, store, investments, investors
    ):
        distributions = DistributionRepository(store)
        sync = AllocationSync(
            investments, investors, clock=fixed_clock, distributions=distributions
        )
        sold = make_property(
            status=PropertyStatus.SOLD, final_sale_price=1_300_000, commission=100_000
        )

        sync.sync(sold)
        entry = investments.get("propinv-prop-1-inv-a")
        assert entry.status == InvestmentStatus.ACTIVE
        assert entry.actual_return is None

        calculator = SaleDistributionCalculator(
            investments, distributions, clock=fixed_clock
        )
        calculator.create_for_sale(sold)
        result = sync.sync(sold)

        assert len(result.unchanged_ids) == 2
        entry = investments.get("propinv-prop-1-inv-a")
        assert entry.status == InvestmentStatus.COMPLETED
        assert entry.actual_return == 600_000


class TestSyncWithTransactions:
    """Sync interplay with a ledger that already carries transactions."""

    def test_sync_after_income_keeps_roi_consistent(self, funded_service):
        funded_service.record_transaction(
            "prop-1", TransactionType.RENTAL_INCOME, 100_000, "Rent", actor="agent-1"
        )
        before = funded_service.get_property_investments("prop-1")

        result = funded_service.save_property(make_property())

        assert not result.allocation.changed
        assert funded_service.get_property_investments("prop-1") == before
