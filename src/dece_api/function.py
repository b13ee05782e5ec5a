"""Callable bindings for individual contract functions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future
from typing import Any

from eth_utils import keccak

from .codec import AbiCodec, strip_hex
from .config import DeceConfig
from .constants import RpcMethod
from .exceptions import DeceProtocolError, PayableError, RevertError
from .transport import Transport
from .types import CallArguments, OpParamsResult, RequestDescriptor
from .utils import (
    abi_param_type,
    address_salt,
    extract_display_name,
    extract_type_name,
    option_quantity,
    split_call_arguments,
    transform_to_full_name,
)

logger = logging.getLogger(__name__)

PayloadContinuation = Callable[[Exception | None, dict[str, Any] | None], None]


def _single(values: Sequence[Any]) -> Any:
    return values[0] if len(values) == 1 else list(values)


class SolidityFunction:
    """Bind one ABI function entry of a deployed contract to a transport.

    Every call-style method takes the contract arguments positionally,
    optionally followed by an options mapping (``value``, ``gas``, ``from``,
    ``dy`` ...), a block tag (``call`` only) and a callback. Without a
    trailing callback the method blocks and returns its result; with one it
    returns ``None`` and reports ``(error, result)`` to the callback.
    """

    def __init__(
        self,
        transport: Transport,
        abi: Mapping[str, Any],
        address: str,
        codec: AbiCodec | None = None,
        *,
        abi_v2: bool = False,
        config: DeceConfig | None = None,
    ) -> None:
        self._transport = transport
        self._config = config or (codec.config if codec is not None else DeceConfig())
        self._codec = codec or AbiCodec(self._config)
        self._abi_v2 = abi_v2
        self._input_types = tuple(abi_param_type(param, abi_v2) for param in abi.get("inputs", []))
        self._output_types = tuple(
            abi_param_type(param, abi_v2) for param in abi.get("outputs", [])
        )

        mutability = abi.get("stateMutability")
        self._constant = mutability not in ("nonpayable", "payable")
        self._payable = mutability == "payable"
        if "constant" in abi:
            self._constant = bool(abi["constant"])
        if "payable" in abi:
            self._payable = bool(abi["payable"])

        self._name = transform_to_full_name(abi, abi_v2)
        self._address = address
        self._salt = address_salt(address)
        self.abi = abi

    def __repr__(self) -> str:
        return f"<SolidityFunction {self._name} at {self._address}>"

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def canonical_name(self) -> str:
        return self._name

    @property
    def input_types(self) -> tuple[str, ...]:
        return self._input_types

    @property
    def output_types(self) -> tuple[str, ...]:
        return self._output_types

    @property
    def constant(self) -> bool:
        return self._constant

    @property
    def payable(self) -> bool:
        return self._payable

    @property
    def address(self) -> str:
        return self._address

    @property
    def transport(self) -> Transport:
        return self._transport

    def signature(self) -> str:
        """Return the 4-byte selector as 8 hex characters."""
        return keccak(text=self._name).hex()[:8]

    def display_name(self) -> str:
        return extract_display_name(self._name)

    def type_name(self) -> str:
        return extract_type_name(self._name)

    # ------------------------------------------------------------------
    # Payload assembly
    # ------------------------------------------------------------------
    def split_arguments(self, args: Sequence[Any], *, allow_block_tag: bool = False) -> CallArguments:
        return split_call_arguments(
            args,
            len(self._input_types),
            function_name=self._name,
            allow_block_tag=allow_block_tag,
            config=self._config,
        )

    def to_payload(self, arguments: CallArguments) -> dict[str, Any]:
        """Build the call payload synchronously."""
        options, salt, dy = self._payload_options(arguments)
        converted = self._codec.op_params(
            self._input_types, arguments.params, salt, self._transport, dy
        )
        return self._assemble(options, converted, salt)

    def to_payload_async(self, arguments: CallArguments, continuation: PayloadContinuation) -> None:
        """Build the call payload, reporting ``(error, payload)`` to ``continuation``."""
        options, salt, dy = self._payload_options(arguments)
        started = False

        def on_params(error: Exception | None, converted: OpParamsResult | None) -> None:
            nonlocal started
            started = True
            if error is not None or converted is None:
                continuation(error, None)
                return
            try:
                payload = self._assemble(options, converted, salt)
            except DeceProtocolError as exc:
                continuation(exc, None)
                return
            continuation(None, payload)

        try:
            self._codec.op_params(
                self._input_types, arguments.params, salt, self._transport, dy, callback=on_params
            )
        except DeceProtocolError as exc:
            # Raised downstream of the continuation, which has already been told.
            if started:
                raise
            continuation(exc, None)

    def _payload_options(self, arguments: CallArguments) -> tuple[dict[str, Any], str, bool]:
        options = dict(arguments.options)
        options["to"] = self._address
        return options, self._salt, bool(options.get("dy", False))

    def _assemble(
        self, options: dict[str, Any], converted: OpParamsResult, salt: str
    ) -> dict[str, Any]:
        prefix = self._codec.address_prefix(
            self._input_types, converted.params, salt, converted.short_addr
        )
        encoded = self._codec.encode_params(
            self._input_types, converted.params, converted.short_addr
        )
        options["data"] = prefix + self.signature() + encoded
        logger.debug("Built payload for %s: %s", self._name, options["data"])
        return options

    def _check_payable(self, arguments: CallArguments) -> None:
        value = option_quantity(arguments.options, "value")
        if value > 0 and not self._payable:
            raise PayableError(self._name, value)

    # ------------------------------------------------------------------
    # Output decoding
    # ------------------------------------------------------------------
    def unpack_output(self, output: str | bytes | None, callback: Callable[..., Any] | None = None) -> Any:
        """Decode raw call output into the declared output values.

        Structured ``Error(string)`` payloads raise RevertError. Short address
        placeholders in the output are resolved to full addresses through the
        transport before decoding.
        """
        if not output:
            if callback is not None:
                callback(None, None)
            return None

        raw = strip_hex(output)
        try:
            reason = self._codec.revert_reason(raw)
            if reason is not None:
                raise RevertError(reason, raw)
            short_addresses = (
                self._codec.decode_short_address(self._output_types, raw)
                if self._output_types
                else []
            )
        except DeceProtocolError as exc:
            if callback is None:
                raise
            callback(exc, None)
            return None

        if callback is None:
            if not self._output_types:
                return None
            address_map = (
                self._transport.get_full_address(short_addresses) if short_addresses else {}
            )
            return _single(self._codec.decode_params(self._output_types, raw, address_map))

        if not self._output_types:
            callback(None, None)
            return None

        if short_addresses:

            def on_addresses(error: Exception | None, address_map: Mapping[str, str] | None) -> None:
                if error is not None:
                    callback(error, None)
                    return
                self._decode_into(raw, address_map, callback)

            self._transport.get_full_address(short_addresses, callback=on_addresses)
            return None

        self._decode_into(raw, None, callback)
        return None

    def _decode_into(
        self, raw: str, address_map: Mapping[str, str] | None, callback: Callable[..., Any]
    ) -> None:
        try:
            values = self._codec.decode_params(self._output_types, raw, address_map)
        except DeceProtocolError as exc:
            callback(exc, None)
            return
        callback(None, _single(values))

    # ------------------------------------------------------------------
    # Call styles
    # ------------------------------------------------------------------
    def call(self, *args: Any) -> Any:
        """Run the function as a read-only query and decode its output."""
        arguments = self.split_arguments(args, allow_block_tag=True)
        callback = arguments.callback

        if callback is None:
            payload = self.to_payload(arguments)
            logger.debug("Calling %s at block %s", self._name, arguments.block_tag)
            output = self._transport.call(payload, arguments.block_tag)
            return self.unpack_output(output)

        def on_output(error: Exception | None, output: Any) -> None:
            if error is not None:
                callback(error, None)
                return
            self.unpack_output(output, callback)

        def on_payload(error: Exception | None, payload: dict[str, Any] | None) -> None:
            if error is not None:
                callback(error, None)
                return
            logger.debug("Calling %s at block %s", self._name, arguments.block_tag)
            self._transport.call(payload, arguments.block_tag, callback=on_output)

        self.to_payload_async(arguments, on_payload)
        return None

    def send_transaction(self, *args: Any) -> Any:
        """Submit a state-changing transaction and return its hash."""
        arguments = self.split_arguments(args)
        self._check_payable(arguments)
        callback = arguments.callback

        if callback is None:
            payload = self.to_payload(arguments)
            logger.info("Dispatching transaction %s to %s", self._name, self._address)
            return self._transport.send_transaction(payload)

        def on_payload(error: Exception | None, payload: dict[str, Any] | None) -> None:
            if error is not None:
                callback(error, None)
                return
            logger.info("Dispatching transaction %s to %s", self._name, self._address)
            self._transport.send_transaction(payload, callback=callback)

        self.to_payload_async(arguments, on_payload)
        return None

    def estimate_gas(self, *args: Any) -> Any:
        """Ask the node for a gas estimate of the call."""
        arguments = self.split_arguments(args)
        callback = arguments.callback

        if callback is None:
            return self._transport.estimate_gas(self.to_payload(arguments))

        def on_payload(error: Exception | None, payload: dict[str, Any] | None) -> None:
            if error is not None:
                callback(error, None)
                return
            self._transport.estimate_gas(payload, callback=callback)

        self.to_payload_async(arguments, on_payload)
        return None

    def get_data(self, *args: Any) -> Any:
        """Return the encoded calldata without contacting the node."""
        arguments = self.split_arguments(args)
        callback = arguments.callback

        if callback is None:
            return self.to_payload(arguments)["data"]

        def on_payload(error: Exception | None, payload: dict[str, Any] | None) -> None:
            if error is not None:
                callback(error, None)
                return
            callback(None, payload["data"] if payload else None)

        self.to_payload_async(arguments, on_payload)
        return None

    def request(self, *args: Any) -> RequestDescriptor:
        """Build a deferred request descriptor for batched dispatch."""
        arguments = self.split_arguments(args)
        if not self._constant:
            self._check_payable(arguments)
        payload = self.to_payload(arguments)
        method = RpcMethod.CALL if self._constant else RpcMethod.SEND_TRANSACTION
        return RequestDescriptor(
            method=method.value,
            callback=arguments.callback,
            params=[payload],
            format=self.unpack_output,
        )

    def execute(self, *args: Any) -> Any:
        """Call constant functions, send transactions for everything else."""
        if not self._constant:
            return self.send_transaction(*args)
        return self.call(*args)

    __call__ = execute

    # ------------------------------------------------------------------
    # Future-returning variants
    # ------------------------------------------------------------------
    def call_async(self, *args: Any) -> Future:
        return self._future(self.call, args)

    def send_transaction_async(self, *args: Any) -> Future:
        return self._future(self.send_transaction, args)

    def estimate_gas_async(self, *args: Any) -> Future:
        return self._future(self.estimate_gas, args)

    def get_data_async(self, *args: Any) -> Future:
        return self._future(self.get_data, args)

    def _future(self, operation: Callable[..., Any], args: Sequence[Any]) -> Future:
        future: Future = Future()

        def on_done(error: Exception | None, result: Any) -> None:
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        try:
            operation(*args, on_done)
        except DeceProtocolError as exc:
            if future.done():
                raise
            future.set_exception(exc)
        return future
