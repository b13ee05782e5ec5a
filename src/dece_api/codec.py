"""ABI codec with Dece short-address handling, built on eth_abi."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import ABITypeError, DecodingError, EncodingError, ParseError
from eth_abi.grammar import ABIType, TupleType
from eth_abi.grammar import parse as parse_type
from eth_typing import HexStr
from eth_utils import is_0x_prefixed, is_hex_address, keccak, remove_0x_prefix, to_checksum_address

from .config import DeceConfig
from .constants import ERROR_SELECTOR, SHORT_ADDRESS_LENGTH, ZERO_ADDRESS
from .exceptions import AbiDecodingError, AbiEncodingError, ValidationError
from .types import OpParamsResult
from .utils import address_to_bytes

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .transport import Transport

logger = logging.getLogger(__name__)

_ENCODE_ERRORS = (EncodingError, ParseError, ABITypeError, TypeError, ValueError, OverflowError)
_DECODE_ERRORS = (DecodingError, ParseError, ABITypeError, TypeError, ValueError)


def strip_hex(data: str | bytes) -> str:
    """Return hex data without the 0x prefix."""
    if isinstance(data, bytes | bytearray):
        return bytes(data).hex()
    return remove_0x_prefix(data) if is_0x_prefixed(data) else data


def is_full_address(value: Any) -> bool:
    """True if ``value`` is a base58 Dece address rather than a 20-byte placeholder."""
    if not isinstance(value, str) or not value or is_0x_prefixed(value):
        return False
    try:
        return len(address_to_bytes(value)) > SHORT_ADDRESS_LENGTH
    except ValidationError:
        return False


def derive_short_address(address: str, salt: str) -> str:
    """Derive the 20-byte placeholder for a full address under ``salt``."""
    digest = keccak(bytes.fromhex(strip_hex(salt)) + address_to_bytes(address))
    return to_checksum_address(digest[-SHORT_ADDRESS_LENGTH:])


def _walk_addresses(abi_type: ABIType, value: Any, fn: Callable[[Any], Any]) -> Any:
    if abi_type.is_array:
        item_type = abi_type.item_type
        items = [_walk_addresses(item_type, item, fn) for item in value]
        return tuple(items) if isinstance(value, tuple) else items
    if isinstance(abi_type, TupleType):
        return tuple(
            _walk_addresses(component, item, fn)
            for component, item in zip(abi_type.components, value)
        )
    if abi_type.base == "address":
        return fn(value)
    return value


def _contains_address(abi_type: ABIType) -> bool:
    if abi_type.is_array:
        return _contains_address(abi_type.item_type)
    if isinstance(abi_type, TupleType):
        return any(_contains_address(component) for component in abi_type.components)
    return abi_type.base == "address"


class AbiCodec:
    """Encode and decode contract parameters, resolving Dece short addresses."""

    def __init__(self, config: DeceConfig | None = None) -> None:
        self.config = config or DeceConfig()

    # ------------------------------------------------------------------
    # Type helpers
    # ------------------------------------------------------------------
    def get_solidity_types(self, types: Sequence[str]) -> list[ABIType]:
        parsed: list[ABIType] = []
        for type_str in types:
            try:
                abi_type = parse_type(type_str)
                abi_type.validate()
            except (ParseError, ABITypeError) as exc:
                raise ValidationError(
                    f"Unsupported ABI type {type_str!r}",
                    field="type",
                    value=type_str,
                    details={"error": str(exc)},
                ) from exc
            parsed.append(abi_type)
        return parsed

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------
    def encode_params(
        self,
        types: Sequence[str],
        values: Sequence[Any],
        short_addr: Sequence[bool] | None = None,
    ) -> HexStr:
        """ABI encode ``values`` as ``types`` and return hex without prefix."""
        if short_addr is not None and len(short_addr) != len(types):
            raise AbiEncodingError(
                "Short address flags do not match parameter count",
                types=types,
                details={"flags": list(short_addr)},
            )

        def normalise(value: Any) -> Any:
            if isinstance(value, str) and is_hex_address(value):
                return to_checksum_address(value)
            if is_full_address(value):
                raise AbiEncodingError(
                    "Full Dece address must be shortened before encoding",
                    types=types,
                    details={"address": value},
                )
            return value

        try:
            parsed = self.get_solidity_types(types)
            prepared = [
                _walk_addresses(abi_type, value, normalise)
                for abi_type, value in zip(parsed, values)
            ]
            encoded = abi_encode(list(types), prepared)
        except AbiEncodingError:
            raise
        except ValidationError as exc:
            raise AbiEncodingError(exc.message, types=types, details=exc.details) from exc
        except _ENCODE_ERRORS as exc:
            raise AbiEncodingError(
                f"Failed to encode parameters: {exc}",
                types=types,
                details={"values": list(values), "error": str(exc)},
            ) from exc

        return HexStr(encoded.hex())

    def address_prefix(
        self,
        types: Sequence[str],
        values: Sequence[Any],
        salt: str,
        short_addr: Sequence[bool] | None = None,
    ) -> str:
        """Return the routing prefix placed before the selector in calldata."""
        if short_addr and any(short_addr):
            return "0x" + strip_hex(salt)
        return "0x"

    def op_params(
        self,
        types: Sequence[str],
        values: Sequence[Any],
        salt: str,
        transport: Transport,
        dy: bool = False,
        callback: Callable[[Exception | None, OpParamsResult | None], None] | None = None,
    ) -> OpParamsResult | None:
        """Replace full addresses in ``values`` with short placeholders.

        Returns the result directly, or ``None`` when ``callback`` is given, in
        which case the callback receives ``(error, result)``.
        """
        parsed = self.get_solidity_types(types)
        full_addresses: list[str] = []

        def collect(value: Any) -> Any:
            if is_full_address(value) and value not in full_addresses:
                full_addresses.append(value)
            return value

        for abi_type, value in zip(parsed, values):
            if _contains_address(abi_type):
                _walk_addresses(abi_type, value, collect)

        def substitute(mapping: Mapping[str, str]) -> OpParamsResult:
            params: list[Any] = []
            flags: list[bool] = []
            for abi_type, value in zip(parsed, values):
                replaced = [False]

                def swap(item: Any) -> Any:
                    if isinstance(item, str) and item in mapping:
                        replaced[0] = True
                        return mapping[item]
                    return item

                if _contains_address(abi_type):
                    params.append(_walk_addresses(abi_type, value, swap))
                else:
                    params.append(value)
                flags.append(replaced[0])
            return OpParamsResult(params=params, short_addr=flags)

        if not full_addresses:
            result = OpParamsResult(params=list(values), short_addr=[False] * len(values))
            if callback is None:
                return result
            callback(None, result)
            return None

        logger.debug("Shortening %d address(es) with salt %s", len(full_addresses), salt)

        if not dy:
            mapping = {address: derive_short_address(address, salt) for address in full_addresses}
            result = substitute(mapping)
            if callback is None:
                return result
            callback(None, result)
            return None

        if callback is None:
            return substitute(transport.get_short_address(full_addresses, salt))

        def on_short_addresses(error: Exception | None, mapping: Mapping[str, str] | None) -> None:
            if error is not None:
                callback(error, None)
                return
            try:
                result = substitute(mapping or {})
            except Exception as exc:
                callback(exc, None)
                return
            callback(None, result)

        transport.get_short_address(full_addresses, salt, callback=on_short_addresses)
        return None

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------
    def decode_params(
        self,
        types: Sequence[str],
        output: str | bytes,
        address_map: Mapping[str, str] | None = None,
    ) -> list[Any]:
        """Decode ``output`` as ``types``, restoring full addresses from ``address_map``."""
        raw = strip_hex(output)
        try:
            parsed = self.get_solidity_types(types)
            decoded = abi_decode(list(types), bytes.fromhex(raw))
        except ValidationError as exc:
            raise AbiDecodingError(exc.message, output=raw, details=exc.details) from exc
        except _DECODE_ERRORS as exc:
            raise AbiDecodingError(
                f"Failed to decode output: {exc}", output=raw, details={"error": str(exc)}
            ) from exc

        if not address_map:
            return list(decoded)

        lookup = {key.lower(): value for key, value in address_map.items()}

        def restore(value: Any) -> Any:
            return lookup.get(str(value).lower(), value)

        return [
            _walk_addresses(abi_type, value, restore) if _contains_address(abi_type) else value
            for abi_type, value in zip(parsed, decoded)
        ]

    def decode_short_address(self, types: Sequence[str], output: str | bytes) -> list[str]:
        """Return the unique non-zero address placeholders contained in ``output``."""
        decoded = self.decode_params(types, output)
        parsed = self.get_solidity_types(types)
        found: list[str] = []

        def collect(value: Any) -> Any:
            address = to_checksum_address(value)
            if address != to_checksum_address(ZERO_ADDRESS) and address not in found:
                found.append(address)
            return value

        for abi_type, value in zip(parsed, decoded):
            if _contains_address(abi_type):
                _walk_addresses(abi_type, value, collect)
        return found

    def revert_reason(self, output: str | bytes) -> str | None:
        """Return the reason string of an ``Error(string)`` payload, else None."""
        raw = strip_hex(output)
        body = raw[len(ERROR_SELECTOR) :]
        if not raw.lower().startswith(ERROR_SELECTOR):
            return None
        if len(body) < 2 * 2 * self.config.padding or len(body) % (2 * self.config.padding):
            return None
        try:
            (reason,) = abi_decode(["string"], bytes.fromhex(body))
        except _DECODE_ERRORS:
            return None
        return reason
