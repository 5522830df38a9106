"""Tests for the on-chain dispatcher with a mocked Web3 connection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from quorumvault.config import Settings
from quorumvault.dispatch import Web3Dispatcher
from quorumvault.engine import AuthorizationEngine
from quorumvault.errors import ExecutionFailed

from tests.conftest import DEV_ADDRESS, DEV_PRIVATE_KEY, OWNER_A, OWNER_B, RECIPIENT

if TYPE_CHECKING:
    from unittest.mock import MagicMock

    from pytest_mock.plugin import MockerFixture

TX_HASH = b"\xab" * 32


@pytest.fixture
def w3(mocker: MockerFixture) -> MagicMock:
    """Web3 stand-in with a funded pool account and a successful receipt."""
    mock = mocker.MagicMock()
    mock.eth.get_balance.return_value = 10**18
    mock.eth.get_transaction_count.return_value = 3
    mock.eth.gas_price = 10**9
    mock.eth.send_raw_transaction.return_value = TX_HASH
    mock.eth.wait_for_transaction_receipt.return_value = {"status": 1}
    return mock


@pytest.fixture
def dispatcher(w3: MagicMock) -> Web3Dispatcher:
    return Web3Dispatcher(w3, DEV_PRIVATE_KEY, chain_id=31337, gas_limit=50_000)


def test_pool_address_derived_from_key(dispatcher: Web3Dispatcher) -> None:
    assert dispatcher.pool_address == DEV_ADDRESS


def test_build_transaction(dispatcher: Web3Dispatcher) -> None:
    tx = dispatcher._build_transaction(RECIPIENT.lower(), 5, b"\xbe\xef")

    assert tx == {
        "to": RECIPIENT,
        "value": 5,
        "data": "0xbeef",
        "nonce": 3,
        "gas": 50_000,
        "gasPrice": 10**9,
        "chainId": 31337,
    }


def test_send_success(dispatcher: Web3Dispatcher, w3: MagicMock) -> None:
    result = dispatcher.send(RECIPIENT, 1000, b"\x01")

    assert result.success
    assert result.tx_hash == "0x" + "ab" * 32
    w3.eth.send_raw_transaction.assert_called_once()
    w3.eth.wait_for_transaction_receipt.assert_called_once_with(result.tx_hash, timeout=120.0)


def test_send_reverted(dispatcher: Web3Dispatcher, w3: MagicMock) -> None:
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0}

    result = dispatcher.send(RECIPIENT, 1, b"")

    assert not result.success
    assert result.reason == "transaction reverted"
    assert result.tx_hash == "0x" + "ab" * 32


def test_send_refuses_overdraft(dispatcher: Web3Dispatcher, w3: MagicMock) -> None:
    w3.eth.get_balance.return_value = 10

    result = dispatcher.send(RECIPIENT, 11, b"")

    assert not result.success
    assert "insufficient" in result.reason
    w3.eth.send_raw_transaction.assert_not_called()


def test_rpc_errors_become_failures(dispatcher: Web3Dispatcher, w3: MagicMock) -> None:
    w3.eth.send_raw_transaction.side_effect = ConnectionError("node unreachable")

    result = dispatcher.send(RECIPIENT, 1, b"")

    assert not result.success
    assert result.reason.startswith("ConnectionError")


def test_receive_reports_chain_balance(dispatcher: Web3Dispatcher, w3: MagicMock) -> None:
    w3.eth.get_balance.return_value = 42
    assert dispatcher.receive(OWNER_A, 2) == 42
    assert dispatcher.balance() == 42


def test_from_settings_requires_key(w3: MagicMock) -> None:
    with pytest.raises(ValueError):
        Web3Dispatcher.from_settings(Settings(pool_private_key=None), w3=w3)


def test_from_settings(w3: MagicMock) -> None:
    settings = Settings(pool_private_key=DEV_PRIVATE_KEY, chain_id=128123, gas_limit=90_000)
    dispatcher = Web3Dispatcher.from_settings(settings, w3=w3)

    assert dispatcher.chain_id == 128123
    assert dispatcher.gas_limit == 90_000
    assert dispatcher.pool_address == DEV_ADDRESS


def test_engine_over_chain_reverts(dispatcher: Web3Dispatcher, w3: MagicMock) -> None:
    """A reverted on-chain call surfaces as ExecutionFailed."""
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0}
    engine = AuthorizationEngine([OWNER_A, OWNER_B], 2, dispatcher=dispatcher)
    engine.propose(OWNER_A, RECIPIENT, 10**15)
    engine.confirm(OWNER_A, 0)
    engine.confirm(OWNER_B, 0)

    with pytest.raises(ExecutionFailed) as excinfo:
        engine.execute(OWNER_B, 0)

    assert excinfo.value.reason == "transaction reverted"
    assert engine.get_transaction(0).executed is True
