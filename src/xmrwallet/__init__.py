"""
xmrwallet - Monero wallet tooling

Plans proportional multi-destination sweeps and drives monero-wallet-rpc.
"""

__version__ = "0.1.0"

from xmrwallet.backends import WalletEngine, WalletRpcEngine
from xmrwallet.errors import (
    PendingTransactionError,
    RejectionReason,
    SweepRejected,
    WalletEngineError,
)
from xmrwallet.wallet.fees import PROBE_AMOUNT, estimate_sweep_fee
from xmrwallet.wallet.models import (
    PendingTransaction,
    Priority,
    SweepPlan,
    SweepRequest,
    TxOutput,
    TxStatus,
    WalletBalance,
)
from xmrwallet.wallet.sweep import (
    RATIO_TOLERANCE,
    create_multi_sweep_transaction,
    plan_sweep,
    validate_request,
)

__all__ = [
    "PROBE_AMOUNT",
    "RATIO_TOLERANCE",
    "PendingTransaction",
    "PendingTransactionError",
    "Priority",
    "RejectionReason",
    "SweepPlan",
    "SweepRejected",
    "SweepRequest",
    "TxOutput",
    "TxStatus",
    "WalletBalance",
    "WalletEngine",
    "WalletEngineError",
    "WalletRpcEngine",
    "create_multi_sweep_transaction",
    "estimate_sweep_fee",
    "plan_sweep",
    "validate_request",
]
