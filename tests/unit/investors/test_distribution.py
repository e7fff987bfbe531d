# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the Sale Distribution Calculator.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from syndication.core.exceptions import InvalidStateError, NotFoundError
from syndication.core.primitives import (
    AcquisitionType,
    InvestmentStatus,
    PayoutStatus,
    PropertyStatus,
)
from syndication.investors import (
    SaleDistributionCalculator,
    calculate_distribution_lines,
)
from syndication.investors.repository import DistributionRepository, InvestmentRepository

from tests.conftest import FIXED_NOW, fixed_clock, make_entry, make_property


def sold_property(**overrides):
    fields = dict(
        status=PropertyStatus.SOLD, final_sale_price=1_500_000, commission=100_000
    )
    fields.update(overrides)
    return make_property(**fields)


@pytest.fixture
def investments(store) -> InvestmentRepository:
    repo = InvestmentRepository(store)
    repo.upsert_many([make_entry("inv-a"), make_entry("inv-b")])
    return repo


@pytest.fixture
def distributions(store) -> DistributionRepository:
    return DistributionRepository(store)


@pytest.fixture
def calculator(investments, distributions) -> SaleDistributionCalculator:
    return SaleDistributionCalculator(investments, distributions, clock=fixed_clock)


class TestDistributionLines:
    def test_profit_split_by_share(self):
        lines = calculate_distribution_lines(
            [make_entry("inv-a", investment_amount=300_000, profit_share_percentage=30),
             make_entry("inv-b", investment_amount=700_000, profit_share_percentage=70)],
            400_000,
        )
        assert [line.profit_amount for line in lines] == [120_000, 280_000]
        assert [line.total_payout for line in lines] == [420_000, 980_000]
        assert all(line.status == PayoutStatus.PENDING for line in lines)

    @pytest.mark.parametrize("net_profit", [400_000, 0, -250_000, 123_456.78])
    def test_payout_conservation(self, net_profit):
        """Payouts always sum to principal plus net profit, losses included."""
        entries = [
            make_entry("inv-a", investment_amount=250_000, profit_share_percentage=25),
            make_entry("inv-b", investment_amount=350_000, profit_share_percentage=35),
            make_entry("inv-c", investment_amount=400_000, profit_share_percentage=40),
        ]
        lines = calculate_distribution_lines(entries, net_profit)
        assert sum(line.total_payout for line in lines) == pytest.approx(
            1_000_000 + net_profit
        )


class TestCreateForSale:
    """SaleDistributionCalculator.create_for_sale"""

    def test_creates_distribution_and_freezes_entries(self, calculator, investments):
        distribution = calculator.create_for_sale(
            sold_property(), transaction_id="deal-1", actor="agent-1"
        )

        assert distribution.id == "profitdist-prop-1"
        assert distribution.total_net_profit == 400_000
        assert distribution.commission == 100_000
        assert distribution.transaction_id == "deal-1"
        assert distribution.calculated_date == FIXED_NOW
        assert distribution.total_payout == 1_400_000
        assert [line.total_payout for line in distribution.distributions] == [700_000, 700_000]

        for entry in investments.for_property("prop-1"):
            assert entry.status == InvestmentStatus.COMPLETED
            assert entry.actual_return == 700_000

    def test_loss_propagates_as_negative_profit(self, calculator):
        distribution = calculator.create_for_sale(
            sold_property(final_sale_price=800_000, commission=None)
        )
        assert distribution.total_net_profit == -200_000
        assert [line.profit_amount for line in distribution.distributions] == [
            -100_000,
            -100_000,
        ]
        assert distribution.total_payout == 800_000

    def test_at_most_once(self, calculator, distributions):
        first = calculator.create_for_sale(sold_property())
        second = calculator.create_for_sale(sold_property())

        assert first is not None
        assert second is None
        assert len(distributions) == 1

    @pytest.mark.parametrize(
        "prop",
        [
            make_property(final_sale_price=1_500_000),  # not sold
            sold_property(final_sale_price=None),
            sold_property(acquisition_type=AcquisitionType.CLIENT_LISTING),
        ],
        ids=["not-sold", "no-sale-price", "not-investor-purchase"],
    )
    def test_ineligible_property_is_noop(self, calculator, distributions, investments, prop):
        before = investments.all()
        assert calculator.create_for_sale(prop) is None
        assert len(distributions) == 0
        assert investments.all() == before

    def test_missing_purchase_details_is_noop(self, calculator):
        prop = sold_property().copy_with({"purchase_details": None})
        assert calculator.create_for_sale(prop) is None

    def test_no_active_entries_is_noop(self, calculator, investments, distributions):
        investments.replace_all([])
        assert calculator.create_for_sale(sold_property()) is None
        assert len(distributions) == 0


class TestPayoutLifecycle:
    """Line transitions pending -> approved -> paid."""

    @pytest.fixture
    def distribution(self, calculator):
        return calculator.create_for_sale(sold_property())

    def test_approve_then_pay(self, calculator, distribution):
        approved = calculator.approve_line(distribution.id, "inv-a")
        assert approved.line_for("inv-a").status == PayoutStatus.APPROVED
        assert approved.line_for("inv-b").status == PayoutStatus.PENDING

        paid_on = datetime(2024, 7, 1, tzinfo=timezone.utc)
        paid = calculator.mark_line_paid(
            distribution.id, "inv-a", "wire", payment_date=paid_on, payment_reference="W-1"
        )
        line = paid.line_for("inv-a")
        assert line.status == PayoutStatus.PAID
        assert line.payment_method == "wire"
        assert line.payment_date == paid_on
        assert line.payment_reference == "W-1"

    def test_pending_can_be_paid_directly(self, calculator, distribution):
        paid = calculator.mark_line_paid(distribution.id, "inv-b", "cheque")
        assert paid.line_for("inv-b").status == PayoutStatus.PAID
        assert paid.line_for("inv-b").payment_date == FIXED_NOW

    def test_transitions_only_move_forward(self, calculator, distribution):
        calculator.mark_line_paid(distribution.id, "inv-a", "wire")
        with pytest.raises(InvalidStateError):
            calculator.approve_line(distribution.id, "inv-a")
        with pytest.raises(InvalidStateError):
            calculator.mark_line_paid(distribution.id, "inv-a", "wire")

    def test_amounts_never_change(self, calculator, distribution):
        calculator.approve_line(distribution.id, "inv-a")
        stored = calculator.distributions.get(distribution.id)
        assert stored.total_net_profit == distribution.total_net_profit
        assert stored.total_payout == distribution.total_payout

    def test_unknown_distribution_or_recipient(self, calculator, distribution):
        with pytest.raises(NotFoundError):
            calculator.approve_line("profitdist-missing", "inv-a")
        with pytest.raises(NotFoundError):
            calculator.approve_line(distribution.id, "inv-z")

    def test_summary_by_status(self, calculator, distribution):
        calculator.approve_line(distribution.id, "inv-a")
        summary = calculator.summary("prop-1")

        assert summary.total_recipients == 2
        assert summary.total_payout == 1_400_000
        assert summary.approved_count == 1
        assert summary.pending_count == 1
        assert summary.approved_amount == 700_000
        assert summary.paid_amount == 0

    def test_summary_without_distribution(self, calculator):
        summary = calculator.summary("prop-unknown")
        assert summary.total_recipients == 0
        assert summary.total_payout == 0
