"""
monero-wallet-rpc wallet engine.
Talks JSON-RPC 2.0 to a running wallet RPC server with an opened wallet.
Transactions are always created with do_not_relay; publishing is left to the caller.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from xmrwallet.backends.base import WalletEngine
from xmrwallet.errors import WalletEngineError
from xmrwallet.wallet.fees import PROBE_AMOUNT
from xmrwallet.wallet.models import (
    PendingTransaction,
    Priority,
    TxOutput,
    TxStatus,
    WalletBalance,
)

# Timeout for RPC calls (seconds). Transaction construction can be slow on big wallets.
DEFAULT_RPC_TIMEOUT = 60.0


class WalletRpcEngine(WalletEngine):
    """
    Wallet engine backed by monero-wallet-rpc.
    """

    def __init__(
        self,
        rpc_url: str = "http://127.0.0.1:18083/json_rpc",
        rpc_user: str = "",
        rpc_password: str = "",
        timeout: float = DEFAULT_RPC_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.rpc_url = rpc_url.rstrip("/")
        auth = httpx.DigestAuth(rpc_user, rpc_password) if rpc_user else None
        self.client = client or httpx.AsyncClient(timeout=timeout, auth=auth)
        self._request_id = 0

    async def _rpc_call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """
        Make an RPC call to the wallet.

        Raises:
            WalletEngineError: On RPC errors
            httpx.HTTPError: On connection/timeout errors
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": str(self._request_id),
            "method": method,
            "params": params or {},
        }

        try:
            response = await self.client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"RPC call timed out: {method} - {e}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"RPC call failed: {method} - {e}")
            raise

        if "error" in data and data["error"]:
            error_info = data["error"]
            error_code = error_info.get("code")
            error_msg = error_info.get("message", str(error_info))
            raise WalletEngineError(f"RPC error {error_code}: {error_msg}", code=error_code)

        return data.get("result")

    async def get_balance(self) -> WalletBalance:
        result = await self._rpc_call("get_balance", {"all_accounts": True})
        return WalletBalance(
            total=int(result.get("balance", 0)),
            unlocked=int(result.get("unlocked_balance", 0)),
        )

    async def get_primary_address(self) -> str:
        result = await self._rpc_call("get_address", {"account_index": 0})
        return result["address"]

    async def estimate_fee(self, outputs: list[TxOutput], priority: Priority) -> int:
        """
        Estimate the fee by constructing a transaction without relaying it.

        Monero transactions carry at least two outputs, so an empty output list
        (sweep to a single destination) is probed as one output to our own
        primary address plus change, which has the same shape.
        """
        if not outputs:
            outputs = [TxOutput(address=await self.get_primary_address(), amount=PROBE_AMOUNT)]

        result = await self._rpc_call(
            "transfer",
            {
                "destinations": _destinations(outputs),
                "priority": int(priority),
                "do_not_relay": True,
            },
        )
        return int(result["fee"])

    async def create_transaction(
        self, outputs: list[TxOutput], payment_id: str, priority: Priority
    ) -> PendingTransaction:
        """
        Construct the transaction without relaying it.

        RPC failures raise WalletEngineError; the returned handle is always ok.
        """
        params: dict[str, Any] = {
            "destinations": _destinations(outputs),
            "priority": int(priority),
            "do_not_relay": True,
            "get_tx_key": True,
            "get_tx_metadata": True,
        }
        if payment_id:
            params["payment_id"] = payment_id

        result = await self._rpc_call("transfer", params)
        pending = PendingTransaction(
            txids=[result["tx_hash"]] if result.get("tx_hash") else [],
            fee=int(result.get("fee", 0)),
            amount=int(result.get("amount", 0)),
            tx_keys=[result["tx_key"]] if result.get("tx_key") else [],
            tx_metadata=[result["tx_metadata"]] if result.get("tx_metadata") else [],
        )
        logger.info(f"Created transaction {pending.txid} (fee {pending.fee})")
        return pending

    async def sweep_all(
        self, address: str, priority: Priority = Priority.DEFAULT
    ) -> PendingTransaction:
        result = await self._rpc_call(
            "sweep_all",
            {
                "address": address,
                "priority": int(priority),
                "do_not_relay": True,
                "get_tx_keys": True,
                "get_tx_metadata": True,
            },
        )
        pending = PendingTransaction(
            txids=list(result.get("tx_hash_list", [])),
            fee=sum(int(fee) for fee in result.get("fee_list", [])),
            amount=sum(int(amount) for amount in result.get("amount_list", [])),
            tx_keys=list(result.get("tx_key_list", [])),
            tx_metadata=list(result.get("tx_metadata_list", [])),
        )
        logger.info(
            f"Created sweep of {pending.amount} to {address} in {len(pending.txids)} transaction(s)"
        )
        return pending

    async def check_tx_key(self, txid: str, tx_key: str, address: str) -> TxStatus:
        result = await self._rpc_call(
            "check_tx_key", {"txid": txid, "tx_key": tx_key, "address": address}
        )
        return TxStatus(
            received=int(result.get("received", 0)),
            in_pool=bool(result.get("in_pool", False)),
            confirmations=int(result.get("confirmations", 0)),
        )

    async def close(self) -> None:
        await self.client.aclose()


def _destinations(outputs: list[TxOutput]) -> list[dict[str, Any]]:
    return [{"address": out.address, "amount": out.amount} for out in outputs]
