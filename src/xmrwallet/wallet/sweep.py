"""
Proportional multi-destination sweep planning.

Splits a wallet's unlocked balance, minus the network fee, between several
destinations according to caller-supplied ratios. Amounts are floored for all
but the last destination, which receives the remainder, so the plan always
spends exactly `unlocked_balance - fee`.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

from loguru import logger

from xmrwallet.errors import RejectionReason, SweepRejected
from xmrwallet.wallet.fees import estimate_sweep_fee
from xmrwallet.wallet.models import PendingTransaction, Priority, SweepPlan, TxOutput

if TYPE_CHECKING:
    from xmrwallet.backends.base import WalletEngine

# Maximum allowed deviation of sum(ratios) from 1.0
RATIO_TOLERANCE = 1e-6


def validate_request(destinations: Sequence[str], ratios: Sequence[float]) -> None:
    """
    Check the shape of a sweep request.

    Raises:
        SweepRejected: On the first failed check
    """
    if not destinations:
        raise SweepRejected(
            RejectionReason.EMPTY_DESTINATION_SET, "At least one destination is required"
        )

    if len(ratios) != len(destinations):
        raise SweepRejected(
            RejectionReason.RATIO_COUNT_MISMATCH,
            f"Got {len(ratios)} ratios for {len(destinations)} destinations",
        )

    if not all(math.isfinite(ratio) for ratio in ratios):
        raise SweepRejected(
            RejectionReason.RATIOS_DO_NOT_SUM_TO_ONE,
            f"Ratios must be finite numbers (got {list(ratios)})",
        )

    ratio_sum = math.fsum(ratios)
    if not abs(ratio_sum - 1.0) <= RATIO_TOLERANCE:
        raise SweepRejected(
            RejectionReason.RATIOS_DO_NOT_SUM_TO_ONE,
            f"Ratios must sum to 1.0 (got {ratio_sum})",
        )


def plan_sweep(
    destinations: Sequence[str],
    ratios: Sequence[float],
    unlocked_balance: int,
    fee_estimate: int,
) -> SweepPlan:
    """
    Partition the sweepable balance between destinations.

    Args:
        destinations: Destination addresses, in priority order
        ratios: Share of the sweepable balance for each destination
        unlocked_balance: Spendable wallet balance in atomic units
        fee_estimate: Network fee of the sweep in atomic units

    Returns:
        SweepPlan whose amounts sum to exactly unlocked_balance - fee_estimate

    Raises:
        SweepRejected: If the request is malformed or cannot be satisfied
    """
    validate_request(destinations, ratios)

    if unlocked_balance < fee_estimate:
        raise SweepRejected(
            RejectionReason.INSUFFICIENT_BALANCE,
            f"Unlocked balance {unlocked_balance} does not cover fee {fee_estimate}",
        )

    sweepable = unlocked_balance - fee_estimate

    amounts = _partition(destinations, ratios, sweepable)

    # Unreachable while _partition derives the last amount from the others
    if sum(amounts) != sweepable:
        raise SweepRejected(
            RejectionReason.PARTITION_INTEGRITY_FAILURE,
            f"Planned amounts sum to {sum(amounts)}, expected {sweepable}",
        )

    outputs = tuple(
        TxOutput(address=address, amount=amount)
        for address, amount in zip(destinations, amounts, strict=True)
    )
    return SweepPlan(outputs=outputs, sweepable=sweepable, fee=fee_estimate)


def _partition(destinations: Sequence[str], ratios: Sequence[float], sweepable: int) -> list[int]:
    """Floor each share except the last; the last destination absorbs the residue."""
    amounts: list[int] = []
    for address, ratio in zip(destinations[:-1], ratios[:-1], strict=True):
        amount = math.floor(sweepable * ratio)
        if amount <= 0:
            raise SweepRejected(
                RejectionReason.ZERO_AMOUNT_DESTINATION,
                f"Ratio {ratio} of {sweepable} leaves nothing for {address}",
            )
        amounts.append(amount)

    last = sweepable - sum(amounts)
    if last <= 0:
        raise SweepRejected(
            RejectionReason.ZERO_AMOUNT_DESTINATION,
            f"Nothing left for last destination {destinations[-1]}",
        )
    amounts.append(last)
    return amounts


async def create_multi_sweep_transaction(
    engine: WalletEngine,
    destinations: Sequence[str],
    ratios: Sequence[float],
    priority: Priority = Priority.DEFAULT,
    payment_id: str = "",
) -> PendingTransaction:
    """
    Sweep the whole unlocked balance to several destinations.

    The engine's transaction construction is only invoked with a valid plan;
    engine errors propagate unchanged.
    """
    validate_request(destinations, ratios)

    fee = await estimate_sweep_fee(engine, destinations, priority)
    unlocked = await engine.unlocked_balance()

    plan = plan_sweep(destinations, ratios, unlocked, fee)
    logger.info(
        f"Sweeping {plan.sweepable} to {len(plan)} destination(s) (fee estimate {fee})"
    )
    for out in plan.outputs:
        logger.debug(f"  {out.address}: {out.amount}")

    return await engine.create_transaction(list(plan.outputs), payment_id, priority)
