"""
Wallet data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from xmrwallet.errors import PendingTransactionError

# Pending transaction status codes reported by the wallet engine
STATUS_OK = 0
STATUS_ERROR = 1
STATUS_CRITICAL = 2


class Priority(IntEnum):
    """Fee priority tiers understood by the wallet engine's fee model."""

    DEFAULT = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


@dataclass(frozen=True)
class TxOutput:
    """A transaction destination and the amount it receives (atomic units)."""

    address: str
    amount: int


@dataclass
class SweepRequest:
    """Destinations paired with the share of the sweepable balance each receives"""

    destinations: list[str]
    ratios: list[float]

    def validate(self) -> None:
        from xmrwallet.wallet.sweep import validate_request

        validate_request(self.destinations, self.ratios)


@dataclass(frozen=True)
class SweepPlan:
    """
    Result of sweep planning.

    One output per requested destination, in request order. The amounts sum
    to exactly `sweepable` (unlocked balance minus the estimated fee).
    """

    outputs: tuple[TxOutput, ...]
    sweepable: int
    fee: int

    @property
    def destinations(self) -> list[str]:
        return [out.address for out in self.outputs]

    @property
    def amounts(self) -> list[int]:
        return [out.amount for out in self.outputs]

    @property
    def total(self) -> int:
        return sum(out.amount for out in self.outputs)

    def __len__(self) -> int:
        return len(self.outputs)


@dataclass
class WalletBalance:
    """Balance across all accounts, in atomic units"""

    total: int
    unlocked: int


@dataclass
class TxStatus:
    """Result of verifying a transaction key against a destination address"""

    received: int
    in_pool: bool
    confirmations: int


@dataclass
class PendingTransaction:
    """
    Handle for a transaction constructed (but not relayed) by the wallet engine.

    A single request can be split into several transactions by the engine,
    hence the list fields.
    """

    status: int = STATUS_OK
    error_string: str = ""
    txids: list[str] = field(default_factory=list)
    fee: int = 0
    amount: int = 0
    tx_keys: list[str] = field(default_factory=list)
    tx_metadata: list[str] = field(default_factory=list)

    @property
    def txid(self) -> str:
        """First transaction id, empty if the engine returned none."""
        return self.txids[0] if self.txids else ""

    def check_error(self) -> None:
        """
        Raise PendingTransactionError unless the transaction is ok.

        Engines that report construction failures in-band (status and
        error_string on the handle) surface them here. WalletRpcEngine never
        does: a failed RPC call raises WalletEngineError instead, so its
        handles always carry STATUS_OK.
        """
        if self.status == STATUS_OK:
            return

        critical = self.status == STATUS_CRITICAL
        error_type = "critical" if critical else "error"
        raise PendingTransactionError(
            f"Experienced pending transaction error ({error_type}): {self.error_string}",
            critical=critical,
        )
