"""
On-chain dispatcher sending value-carrying calls from the pool account.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from eth_account import Account
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from quorumvault.config import Settings
from quorumvault.dispatch.base import DispatchResult
from quorumvault.types import Address, to_address

LOGGER = logging.getLogger(__name__)


class Web3Dispatcher:
    """Dispatcher backed by an EVM chain through Web3.

    The pool is the externally owned account derived from ``private_key``.
    Each ``send`` signs and broadcasts one transaction and waits for its
    receipt; only a mined transaction with ``status == 1`` counts as success.
    """

    def __init__(
        self,
        w3: Web3,
        private_key: str,
        chain_id: int,
        gas_limit: int = 200_000,
        receipt_timeout: float = 120.0,
    ) -> None:
        self.w3 = w3
        self.account = Account.from_key(private_key)
        self.chain_id = chain_id
        self.gas_limit = gas_limit
        self.receipt_timeout = receipt_timeout

    @classmethod
    def from_settings(cls, settings: Settings, w3: Optional[Web3] = None) -> "Web3Dispatcher":
        """Connect to ``settings.rpc_url`` and build a dispatcher for the pool key."""
        if not settings.pool_private_key:
            raise ValueError("QUORUMVAULT_POOL_PRIVATE_KEY is required for the on-chain dispatcher")
        if w3 is None:
            w3 = Web3(Web3.HTTPProvider(settings.rpc_url))
            if settings.poa_chain:
                w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            if not w3.is_connected():
                raise ConnectionError(f"Failed to connect to {settings.rpc_url}")
            LOGGER.info("Connected to %s (chain id %s)", settings.rpc_url, settings.chain_id)
        return cls(
            w3,
            settings.pool_private_key,
            chain_id=settings.chain_id,
            gas_limit=settings.gas_limit,
            receipt_timeout=settings.receipt_timeout,
        )

    @property
    def pool_address(self) -> Address:
        return self.account.address

    def balance(self) -> int:
        return int(self.w3.eth.get_balance(self.pool_address))

    def receive(self, sender: Address, amount: int) -> int:
        """Report the pool balance; the chain itself credits deposits."""
        balance = self.balance()
        LOGGER.info("Deposit of %s wei from %s observed, pool balance %s", amount, sender, balance)
        return balance

    def _build_transaction(self, target: Address, value: int, payload: bytes) -> Dict[str, Any]:
        return {
            "to": to_address(target),
            "value": value,
            "data": Web3.to_hex(payload),
            "nonce": self.w3.eth.get_transaction_count(self.pool_address),
            "gas": self.gas_limit,
            "gasPrice": self.w3.eth.gas_price,
            "chainId": self.chain_id,
        }

    def send(self, target: Address, value: int, payload: bytes) -> DispatchResult:
        try:
            balance = self.balance()
            if value > balance:
                return DispatchResult.failed(f"insufficient pool balance: {balance} < {value}")

            tx = self._build_transaction(target, value, payload)
            signed = Account.sign_transaction(tx, self.account.key)
            tx_hash = Web3.to_hex(self.w3.eth.send_raw_transaction(signed.raw_transaction))
            LOGGER.info("Sent %s wei to %s in %s", value, target, tx_hash)

            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except Exception as exc:
            LOGGER.error("Dispatch to %s failed: %s", target, exc)
            return DispatchResult.failed(f"{type(exc).__name__}: {exc}")

        if receipt["status"] != 1:
            LOGGER.warning("Transaction %s reverted", tx_hash)
            return DispatchResult(success=False, reason="transaction reverted", tx_hash=tx_hash)
        return DispatchResult.ok(tx_hash=tx_hash)
