from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import base58
import pytest

CONTRACT_ADDRESS = base58.b58encode(bytes(range(1, 26))).decode()
RECIPIENT_ADDRESS = base58.b58encode(bytes(range(100, 125))).decode()


class Recorder:
    """Node-style callback that records every invocation."""

    def __init__(self) -> None:
        self.calls: list[tuple[Exception | None, Any]] = []

    def __call__(self, error: Exception | None, result: Any) -> None:
        self.calls.append((error, result))

    @property
    def error(self) -> Exception | None:
        assert len(self.calls) == 1
        return self.calls[0][0]

    @property
    def result(self) -> Any:
        assert len(self.calls) == 1
        return self.calls[0][1]


class DummyTransport:
    """In-memory transport answering every request synchronously."""

    def __init__(
        self,
        output: str = "0x",
        *,
        full_addresses: Mapping[str, str] | None = None,
        short_addresses: Mapping[str, str] | None = None,
        tx_hash: str = "0x" + "ab" * 32,
        gas: int = 21000,
        error: Exception | None = None,
    ) -> None:
        self.output = output
        self.full_addresses = dict(full_addresses or {})
        self.short_addresses = dict(short_addresses or {})
        self.tx_hash = tx_hash
        self.gas = gas
        self.error = error
        self.calls: list[tuple[dict[str, Any], Any]] = []
        self.sent: list[dict[str, Any]] = []
        self.estimates: list[dict[str, Any]] = []
        self.lookups: list[list[str]] = []
        self.short_requests: list[tuple[list[str], str]] = []
        self.requests: list[tuple[str, list[Any]]] = []

    def _respond(self, result: Any, callback: Any) -> Any:
        if callback is None:
            if self.error is not None:
                raise self.error
            return result
        if self.error is not None:
            callback(self.error, None)
        else:
            callback(None, result)
        return None

    def call(self, payload: Mapping[str, Any], block_tag: Any = "latest", callback: Any = None) -> Any:
        self.calls.append((dict(payload), block_tag))
        return self._respond(self.output, callback)

    def send_transaction(self, payload: Mapping[str, Any], callback: Any = None) -> Any:
        self.sent.append(dict(payload))
        return self._respond(self.tx_hash, callback)

    def estimate_gas(self, payload: Mapping[str, Any], callback: Any = None) -> Any:
        self.estimates.append(dict(payload))
        return self._respond(self.gas, callback)

    def get_full_address(self, short_addresses: Sequence[str], callback: Any = None) -> Any:
        self.lookups.append(list(short_addresses))
        mapping = {
            short: self.full_addresses[short.lower()]
            for short in short_addresses
            if short.lower() in self.full_addresses
        }
        return self._respond(mapping, callback)

    def get_short_address(self, addresses: Sequence[str], salt: str, callback: Any = None) -> Any:
        self.short_requests.append((list(addresses), salt))
        mapping = {
            address: self.short_addresses[address]
            for address in addresses
            if address in self.short_addresses
        }
        return self._respond(mapping, callback)

    def request(self, method: str, params: Sequence[Any]) -> Any:
        self.requests.append((method, list(params)))
        if self.error is not None:
            raise self.error
        if method == "dece_call":
            return self.output
        return self.tx_hash


@pytest.fixture
def transport() -> DummyTransport:
    return DummyTransport()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
