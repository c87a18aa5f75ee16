"""
Fee estimation for sweep transactions.

The fee of a transaction depends on its shape (number of outputs), not on the
amounts it carries. A sweep to N destinations is probed as N-1 outputs of a
nominal amount; the engine adds the change output that stands in for the
last destination. This avoids needing the final amounts (which depend on the
fee) before the fee is known.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from loguru import logger

from xmrwallet.wallet.models import Priority, TxOutput

if TYPE_CHECKING:
    from xmrwallet.backends.base import WalletEngine

# Nominal amount (atomic units) carried by each probe output
PROBE_AMOUNT = 1


def probe_outputs(destinations: Sequence[str]) -> list[TxOutput]:
    """Outputs of the probe transaction: all but the last destination, 1 unit each."""
    return [TxOutput(address=address, amount=PROBE_AMOUNT) for address in destinations[:-1]]


async def estimate_sweep_fee(
    engine: WalletEngine,
    destinations: Sequence[str],
    priority: Priority = Priority.DEFAULT,
) -> int:
    """
    Estimate the network fee of a sweep to the given destinations.

    Errors raised by the engine are propagated unchanged.
    """
    outputs = probe_outputs(destinations)
    fee = int(await engine.estimate_fee(outputs, priority))
    logger.debug(
        f"Estimated fee {fee} for {len(outputs)} probe output(s) + change "
        f"(priority={priority.name})"
    )
    return fee
