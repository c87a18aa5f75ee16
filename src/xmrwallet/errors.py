"""
Exceptions raised by sweep planning and by the wallet engine.
"""

from __future__ import annotations

from enum import Enum


class RejectionReason(str, Enum):
    EMPTY_DESTINATION_SET = "empty_destination_set"
    RATIO_COUNT_MISMATCH = "ratio_count_mismatch"
    RATIOS_DO_NOT_SUM_TO_ONE = "ratios_do_not_sum_to_one"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    ZERO_AMOUNT_DESTINATION = "zero_amount_destination"
    PARTITION_INTEGRITY_FAILURE = "partition_integrity_failure"


class SweepRejected(ValueError):
    """
    A sweep plan was rejected before any transaction was constructed.

    Rejections carry no state; the caller may retry with corrected inputs.
    """

    def __init__(self, reason: RejectionReason, message: str):
        super().__init__(message)
        self.reason = reason

    def __repr__(self) -> str:
        return f"SweepRejected({self.reason.value}: {self})"


class WalletEngineError(Exception):
    """Error reported by the wallet engine (RPC error, failed query, ...)."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class PendingTransactionError(WalletEngineError):
    """A pending transaction was created in an error state."""

    def __init__(self, message: str, critical: bool = False):
        super().__init__(message)
        self.critical = critical
