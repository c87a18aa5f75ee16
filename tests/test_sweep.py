"""
Tests for proportional sweep planning.
"""

from __future__ import annotations

import math
from unittest.mock import patch

import pytest

from xmrwallet.errors import RejectionReason, SweepRejected
from xmrwallet.wallet.models import Priority, SweepRequest, TxOutput
from xmrwallet.wallet.sweep import (
    RATIO_TOLERANCE,
    create_multi_sweep_transaction,
    plan_sweep,
    validate_request,
)


def _reason(excinfo: pytest.ExceptionInfo[SweepRejected]) -> RejectionReason:
    return excinfo.value.reason


class TestValidateRequest:
    """Tests for request shape validation."""

    def test_valid_request(self, addresses: list[str]) -> None:
        validate_request(addresses, [0.5, 0.3, 0.2])

    def test_empty_destinations(self) -> None:
        """Empty destination set is rejected regardless of ratios."""
        with pytest.raises(SweepRejected) as excinfo:
            validate_request([], [1.0])
        assert _reason(excinfo) == RejectionReason.EMPTY_DESTINATION_SET

        with pytest.raises(SweepRejected) as excinfo:
            validate_request([], [])
        assert _reason(excinfo) == RejectionReason.EMPTY_DESTINATION_SET

    def test_ratio_count_mismatch(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            validate_request(addresses, [0.5, 0.5])
        assert _reason(excinfo) == RejectionReason.RATIO_COUNT_MISMATCH

    def test_count_checked_before_sum(self, addresses: list[str]) -> None:
        """Ratios that are both too few and badly summed report the count first."""
        with pytest.raises(SweepRejected) as excinfo:
            validate_request(addresses, [0.1])
        assert _reason(excinfo) == RejectionReason.RATIO_COUNT_MISMATCH

    def test_ratios_sum_to_half(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            validate_request(addresses, [0.25, 0.15, 0.1])
        assert _reason(excinfo) == RejectionReason.RATIOS_DO_NOT_SUM_TO_ONE

    def test_ratio_sum_within_tolerance(self, addresses: list[str]) -> None:
        validate_request(addresses, [0.5, 0.3, 0.2 + RATIO_TOLERANCE / 2])

    def test_ratio_sum_outside_tolerance(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            validate_request(addresses, [0.5, 0.3, 0.2 + RATIO_TOLERANCE * 10])
        assert _reason(excinfo) == RejectionReason.RATIOS_DO_NOT_SUM_TO_ONE

    def test_nan_ratio(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            validate_request(addresses[:1], [math.nan])
        assert _reason(excinfo) == RejectionReason.RATIOS_DO_NOT_SUM_TO_ONE

    def test_nan_among_valid_ratios(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            plan_sweep(addresses[:2], [math.nan, 1.0], 1_000, 10)
        assert _reason(excinfo) == RejectionReason.RATIOS_DO_NOT_SUM_TO_ONE

    def test_infinite_ratio(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            validate_request(addresses[:1], [math.inf])
        assert _reason(excinfo) == RejectionReason.RATIOS_DO_NOT_SUM_TO_ONE

    def test_opposite_infinities(self, addresses: list[str]) -> None:
        """inf + -inf must not reach the summation."""
        with pytest.raises(SweepRejected) as excinfo:
            plan_sweep(addresses[:2], [math.inf, -math.inf], 1_000, 10)
        assert _reason(excinfo) == RejectionReason.RATIOS_DO_NOT_SUM_TO_ONE

    def test_sweep_request_validate(self, addresses: list[str]) -> None:
        SweepRequest(destinations=addresses, ratios=[0.5, 0.3, 0.2]).validate()

        with pytest.raises(SweepRejected):
            SweepRequest(destinations=addresses, ratios=[1.0]).validate()


class TestPlanSweep:
    """Tests for balance partitioning."""

    def test_three_way_split(self, addresses: list[str]) -> None:
        plan = plan_sweep(addresses, [0.5, 0.3, 0.2], 1_000_000, 1_000)

        assert plan.amounts == [499_500, 299_700, 199_800]
        assert plan.destinations == addresses
        assert plan.total == 999_000
        assert plan.sweepable == 999_000
        assert plan.fee == 1_000
        assert len(plan) == 3

    def test_single_destination_gets_everything(self, addresses: list[str]) -> None:
        plan = plan_sweep(addresses[:1], [1.0], 123_456_789, 56_789)

        assert plan.outputs == (TxOutput(address=addresses[0], amount=123_400_000),)

    def test_last_destination_absorbs_residue(self, addresses: list[str]) -> None:
        """Thirds of 100 floor to 33 each; the last destination takes 34."""
        third = 1 / 3
        plan = plan_sweep(addresses, [third, third, third], 101, 1)

        assert plan.amounts == [33, 33, 34]
        assert plan.total == 100

    def test_residue_goes_to_last_not_largest(self, addresses: list[str]) -> None:
        plan = plan_sweep(addresses, [0.7, 0.2, 0.1], 1_009, 0)

        # floor(706.3) = 706, floor(201.8) = 201, remainder 102
        assert plan.amounts == [706, 201, 102]

    def test_exact_sum_for_many_destinations(self) -> None:
        destinations = [f"addr{i}" for i in range(7)]
        ratios = [1 / 7] * 7
        unlocked = 987_654_321_987
        fee = 31_415_926

        plan = plan_sweep(destinations, ratios, unlocked, fee)

        assert plan.total == unlocked - fee
        assert all(amount > 0 for amount in plan.amounts)
        assert plan.destinations == destinations

    def test_balance_equal_to_fee_leaves_nothing(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            plan_sweep(addresses[:1], [1.0], 1_000, 1_000)
        assert _reason(excinfo) == RejectionReason.ZERO_AMOUNT_DESTINATION

    def test_insufficient_balance(self, addresses: list[str]) -> None:
        """A fee larger than the balance never underflows into a huge amount."""
        with pytest.raises(SweepRejected) as excinfo:
            plan_sweep(addresses, [0.5, 0.3, 0.2], 999, 1_000)
        assert _reason(excinfo) == RejectionReason.INSUFFICIENT_BALANCE

    def test_shape_checked_before_balance(self) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            plan_sweep([], [], 0, 1_000)
        assert _reason(excinfo) == RejectionReason.EMPTY_DESTINATION_SET

    def test_tiny_ratio_rejected(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            plan_sweep(addresses, [0.999999, 0.0000005, 0.0000005], 1_001_000, 1_000)
        assert _reason(excinfo) == RejectionReason.ZERO_AMOUNT_DESTINATION
        assert addresses[1] in str(excinfo.value)

    def test_zero_last_ratio_rejected(self, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected) as excinfo:
            plan_sweep(addresses[:2], [1.0, 0.0], 10_000, 100)
        assert _reason(excinfo) == RejectionReason.ZERO_AMOUNT_DESTINATION

    def test_partition_integrity_failure(self, addresses: list[str]) -> None:
        """A partition that does not add up is rejected rather than planned."""
        with patch("xmrwallet.wallet.sweep._partition", return_value=[500, 400, 99]):
            with pytest.raises(SweepRejected) as excinfo:
                plan_sweep(addresses, [0.5, 0.4, 0.1], 1_000, 0)
        assert _reason(excinfo) == RejectionReason.PARTITION_INTEGRITY_FAILURE

    def test_deterministic(self, addresses: list[str]) -> None:
        first = plan_sweep(addresses, [0.6, 0.25, 0.15], 5_555_555, 12_345)
        second = plan_sweep(addresses, [0.6, 0.25, 0.15], 5_555_555, 12_345)
        assert first == second

    def test_plan_outputs_are_immutable(self, addresses: list[str]) -> None:
        plan = plan_sweep(addresses[:2], [0.5, 0.5], 1_000, 0)
        with pytest.raises(AttributeError):
            plan.outputs[0].amount = 1  # type: ignore[misc]


class TestCreateMultiSweepTransaction:
    """Tests for the sweep flow against a wallet engine."""

    @pytest.mark.asyncio
    async def test_creates_transaction_from_plan(self, mock_engine, addresses: list[str]) -> None:
        pending = await create_multi_sweep_transaction(
            mock_engine, addresses, [0.5, 0.3, 0.2], priority=Priority.HIGH
        )

        assert pending.txid == "ab" * 32
        mock_engine.create_transaction.assert_awaited_once_with(
            [
                TxOutput(addresses[0], 499_500),
                TxOutput(addresses[1], 299_700),
                TxOutput(addresses[2], 199_800),
            ],
            "",
            Priority.HIGH,
        )

    @pytest.mark.asyncio
    async def test_fee_probed_with_all_but_last(self, mock_engine, addresses: list[str]) -> None:
        await create_multi_sweep_transaction(mock_engine, addresses, [0.5, 0.3, 0.2])

        mock_engine.estimate_fee.assert_awaited_once_with(
            [TxOutput(addresses[0], 1), TxOutput(addresses[1], 1)],
            Priority.DEFAULT,
        )

    @pytest.mark.asyncio
    async def test_payment_id_passed_through(self, mock_engine, addresses: list[str]) -> None:
        await create_multi_sweep_transaction(
            mock_engine, addresses[:1], [1.0], payment_id="0123456789abcdef"
        )

        args = mock_engine.create_transaction.await_args.args
        assert args[1] == "0123456789abcdef"

    @pytest.mark.asyncio
    async def test_invalid_shape_skips_engine(self, mock_engine, addresses: list[str]) -> None:
        with pytest.raises(SweepRejected):
            await create_multi_sweep_transaction(mock_engine, addresses, [0.5, 0.5])

        mock_engine.estimate_fee.assert_not_awaited()
        mock_engine.create_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejected_plan_never_creates_transaction(
        self, mock_engine, addresses: list[str]
    ) -> None:
        mock_engine.unlocked_balance.return_value = 500

        with pytest.raises(SweepRejected) as excinfo:
            await create_multi_sweep_transaction(mock_engine, addresses, [0.5, 0.3, 0.2])

        assert excinfo.value.reason == RejectionReason.INSUFFICIENT_BALANCE
        mock_engine.create_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_engine_errors_propagate(self, mock_engine, addresses: list[str]) -> None:
        mock_engine.estimate_fee.side_effect = RuntimeError("daemon offline")

        with pytest.raises(RuntimeError, match="daemon offline"):
            await create_multi_sweep_transaction(mock_engine, addresses, [0.5, 0.3, 0.2])

        mock_engine.create_transaction.assert_not_awaited()
