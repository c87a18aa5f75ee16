"""
Base wallet engine interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from xmrwallet.wallet.models import (
    PendingTransaction,
    Priority,
    TxOutput,
    TxStatus,
    WalletBalance,
)


class WalletEngine(ABC):
    """
    Abstract wallet engine interface.
    Implementations own the wallet state (keys, outputs, daemon connection);
    this package only queries balances and fees and requests transactions.
    """

    @abstractmethod
    async def get_balance(self) -> WalletBalance:
        """Get total and unlocked balance across all accounts"""

    @abstractmethod
    async def estimate_fee(self, outputs: list[TxOutput], priority: Priority) -> int:
        """Estimate the fee of a transaction paying `outputs` plus change"""

    @abstractmethod
    async def create_transaction(
        self, outputs: list[TxOutput], payment_id: str, priority: Priority
    ) -> PendingTransaction:
        """Construct (but do not relay) a transaction paying `outputs`"""

    @abstractmethod
    async def sweep_all(
        self, address: str, priority: Priority = Priority.DEFAULT
    ) -> PendingTransaction:
        """Construct (but do not relay) a transaction sweeping everything to `address`"""

    @abstractmethod
    async def check_tx_key(self, txid: str, tx_key: str, address: str) -> TxStatus:
        """Prove how much `txid` paid to `address` using its transaction key"""

    async def unlocked_balance(self) -> int:
        """Spendable balance in atomic units"""
        balance = await self.get_balance()
        return balance.unlocked

    async def close(self) -> None:
        """Close engine connection"""
        pass
