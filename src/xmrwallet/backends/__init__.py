"""
Wallet engine implementations.

Available engines:
- WalletRpcEngine: monero-wallet-rpc over JSON-RPC
"""

from xmrwallet.backends.base import WalletEngine
from xmrwallet.backends.wallet_rpc import WalletRpcEngine

__all__ = [
    "WalletEngine",
    "WalletRpcEngine",
]
