"""JSON-RPC transport used by contract bindings to reach a Dece node."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Protocol

import requests
from hexbytes import HexBytes
from web3 import HTTPProvider, Web3
from web3.types import RPCEndpoint

from .config import TransportConfig
from .constants import RpcMethod
from .exceptions import NetworkError, ValidationError
from .utils import format_transaction_payload

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Exception | None, Any], None]


class Transport(Protocol):
    """Operations a contract binding needs from the node connection.

    Each method returns its result directly, or returns ``None`` and reports
    ``(error, result)`` to ``callback`` when one is given.
    """

    def call(
        self, payload: Mapping[str, Any], block_tag: str | int = "latest", callback: ResultCallback | None = None
    ) -> Any: ...

    def send_transaction(self, payload: Mapping[str, Any], callback: ResultCallback | None = None) -> Any: ...

    def estimate_gas(self, payload: Mapping[str, Any], callback: ResultCallback | None = None) -> Any: ...

    def get_full_address(
        self, short_addresses: Sequence[str], callback: ResultCallback | None = None
    ) -> Any: ...

    def get_short_address(
        self, addresses: Sequence[str], salt: str, callback: ResultCallback | None = None
    ) -> Any: ...

    def request(self, method: str, params: Sequence[Any]) -> Any: ...


class Web3Transport:
    """Dispatch Dece RPC methods through a web3 HTTP provider."""

    def __init__(self, config: TransportConfig, session: requests.Session | None = None) -> None:
        self.config = config.with_defaults()
        self._session = session or requests.Session()
        self._provider: HTTPProvider | None = None
        self._web3: Web3 | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._connected = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        """Initialise the HTTP provider and the worker pool for callback dispatch."""

        provider = HTTPProvider(
            self.config.rpc_url,
            request_kwargs={"timeout": self.config.request_timeout},
            session=self._session,
        )
        web3 = Web3(provider)
        if not web3.is_connected():
            raise NetworkError("Unable to connect to Dece RPC", endpoint=self.config.rpc_url)

        self._provider = provider
        self._web3 = web3
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="dece-rpc"
        )
        self._connected = True
        logger.info("Connected to Dece RPC at %s", self.config.rpc_url)

    def disconnect(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
        self._provider = None
        self._web3 = None
        self._executor = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected and self._web3 is not None

    def ensure_connected(self) -> None:
        if not self.is_connected():
            raise NetworkError("Dece transport is not connected", endpoint=self.config.rpc_url)

    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            raise NetworkError(
                "Dece RPC provider not connected; call connect() first",
                endpoint=self.config.rpc_url,
            )
        return self._web3

    # ------------------------------------------------------------------
    # RPC primitives
    # ------------------------------------------------------------------
    def request(self, method: str, params: Sequence[Any]) -> Any:
        """Issue one JSON-RPC request and return its result."""

        self.ensure_connected()
        method_name = method.value if isinstance(method, RpcMethod) else str(method)
        logger.debug("RPC %s params=%s", method_name, params)
        try:
            return self.web3.manager.request_blocking(RPCEndpoint(method_name), list(params))
        except Exception as exc:
            raise NetworkError(
                f"RPC request {method_name} failed",
                endpoint=self.config.rpc_url,
                details={"method": method_name, "error": str(exc)},
            ) from exc

    def call(
        self,
        payload: Mapping[str, Any],
        block_tag: str | int = "latest",
        callback: ResultCallback | None = None,
    ) -> Any:
        params = [self._prepare_payload(payload), _block_param(block_tag)]
        return self._dispatch(RpcMethod.CALL, params, _as_hex, callback)

    def send_transaction(
        self, payload: Mapping[str, Any], callback: ResultCallback | None = None
    ) -> Any:
        params = [self._prepare_payload(payload)]
        logger.info("Sending transaction to %s", payload.get("to"))
        return self._dispatch(RpcMethod.SEND_TRANSACTION, params, _as_hex, callback)

    def estimate_gas(self, payload: Mapping[str, Any], callback: ResultCallback | None = None) -> Any:
        params = [self._prepare_payload(payload)]
        return self._dispatch(RpcMethod.ESTIMATE_GAS, params, _as_int, callback)

    def get_full_address(
        self, short_addresses: Sequence[str], callback: ResultCallback | None = None
    ) -> Any:
        if not short_addresses:
            if callback is None:
                return {}
            callback(None, {})
            return None
        return self._dispatch(
            RpcMethod.GET_FULL_ADDRESS, [list(short_addresses)], _as_mapping, callback
        )

    def get_short_address(
        self, addresses: Sequence[str], salt: str, callback: ResultCallback | None = None
    ) -> Any:
        return self._dispatch(
            RpcMethod.GET_SHORT_ADDRESS, [list(addresses), salt], _as_mapping, callback
        )

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _prepare_payload(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        prepared = dict(payload)
        if "from" not in prepared and self.config.default_account:
            prepared["from"] = self.config.default_account
        return format_transaction_payload(prepared)

    def _dispatch(
        self,
        method: RpcMethod,
        params: Sequence[Any],
        formatter: Callable[[Any], Any],
        callback: ResultCallback | None,
    ) -> Any:
        if callback is None:
            return formatter(self.request(method, params))

        executor = self._executor
        if not self.is_connected() or executor is None:
            callback(
                NetworkError("Dece transport is not connected", endpoint=self.config.rpc_url),
                None,
            )
            return None

        future = executor.submit(lambda: formatter(self.request(method, params)))

        def on_done(done: Future) -> None:
            error = done.exception()
            if error is not None:
                callback(error, None)
            else:
                callback(None, done.result())

        future.add_done_callback(on_done)
        return None


def _block_param(block_tag: str | int) -> str:
    if isinstance(block_tag, int):
        return hex(block_tag)
    return block_tag


def _as_hex(result: Any) -> str:
    if isinstance(result, bytes | bytearray):
        return "0x" + bytes(HexBytes(result)).hex()
    if result is None:
        return "0x"
    return str(result)


def _as_int(result: Any) -> int:
    if isinstance(result, str):
        return int(result, 16) if result.startswith("0x") else int(result)
    return int(result)


def _as_mapping(result: Any) -> dict[str, str]:
    if isinstance(result, Mapping):
        return {str(key): str(value) for key, value in result.items()}
    raise ValidationError(
        "Address lookup returned an unexpected payload", field="result", value=result
    )
