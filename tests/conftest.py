"""
Test configuration for xmrwallet tests.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from xmrwallet.wallet.models import PendingTransaction, WalletBalance

# Regtest-style placeholder addresses; nothing here validates address format
ADDR_A = "44AFFq5kSiGBoZ4NMDwYtN18obc8AemS33DBLWs3H7otXft3XjrpDtQGv7SqSsaBYBb98uNbr2VBBEt7f2wfn3RVGQBEP3A"
ADDR_B = "888tNkZrPN6JsEgekjMnABU4TBzc2Dt29EPAvkRxbANsAnjyPbb3iQ1YBRk1UXcdRsiKc9dhwMVgN5S9cQUiyoogDavup3H"
ADDR_C = "47xhbTdXqTMEBkFSKMiHBsiXXrPq5XAfmdvKavKNhaFnCWpLL4fSzYGeQdvJwt7uTK4BTjH9CEhMMVgqtyzxghtbKDTNGEX"


@pytest.fixture
def addresses() -> list[str]:
    return [ADDR_A, ADDR_B, ADDR_C]


@pytest.fixture
def mock_engine():
    """Create a mock wallet engine with 1_000_000 unlocked and a 1_000 fee."""
    engine = MagicMock()
    engine.estimate_fee = AsyncMock(return_value=1_000)
    engine.unlocked_balance = AsyncMock(return_value=1_000_000)
    engine.get_balance = AsyncMock(return_value=WalletBalance(total=1_200_000, unlocked=1_000_000))
    engine.create_transaction = AsyncMock(
        return_value=PendingTransaction(txids=["ab" * 32], fee=1_000, amount=999_000)
    )
    engine.close = AsyncMock()
    return engine
