"""Utility functions for the Dece contract API."""

from collections.abc import Mapping, Sequence
from typing import Any

import base58
from eth_utils import is_0x_prefixed, is_hex

from .config import DeceConfig
from .constants import BLOCK_TAGS, SALT_LENGTH
from .exceptions import ArgumentCountError, ValidationError
from .types import CallArguments

_QUANTITY_FIELDS = ("value", "gas", "gasPrice", "nonce")


def abi_param_type(param: Mapping[str, Any], abi_v2: bool = False) -> str:
    """Return the canonical ABI type for one input/output descriptor."""
    type_name = str(param.get("type", ""))
    if not type_name:
        raise ValidationError("ABI parameter is missing its type", field="type", value=param)

    if type_name.startswith("tuple"):
        if not abi_v2:
            raise ValidationError(
                "Tuple parameters require ABI v2 encoding", field="type", value=type_name
            )
        components = ",".join(
            abi_param_type(component, abi_v2) for component in param.get("components", [])
        )
        return f"({components}){type_name[len('tuple'):]}"

    return type_name


def transform_to_full_name(entry: Mapping[str, Any], abi_v2: bool = False) -> str:
    """Build ``name(type,type,...)`` from an ABI function entry."""
    if "(" in str(entry.get("name", "")):
        return str(entry["name"])
    types = ",".join(abi_param_type(param, abi_v2) for param in entry.get("inputs", []))
    return f"{entry.get('name', '')}({types})"


def extract_display_name(name: str) -> str:
    """Return the function name without its type signature."""
    index = name.find("(")
    return name[:index] if index != -1 else name


def extract_type_name(name: str) -> str:
    """Return the comma-joined parameter types inside the signature parentheses."""
    index = name.find("(")
    if index == -1:
        return ""
    return name[index + 1 : len(name) - 1].replace(" ", "")


def address_to_bytes(address: str) -> bytes:
    """Decode a base58 Dece address (or a 0x-prefixed hex address) to raw bytes."""
    if not isinstance(address, str) or not address:
        raise ValidationError("Address must be a non-empty string", field="address", value=address)

    if is_0x_prefixed(address):
        if not is_hex(address):
            raise ValidationError("Invalid hex address", field="address", value=address)
        return bytes.fromhex(address[2:])

    try:
        return base58.b58decode(address)
    except ValueError as exc:
        raise ValidationError(
            "Invalid base58 address", field="address", value=address, details={"error": str(exc)}
        ) from exc


def address_salt(address: str) -> str:
    """Return the 16-byte address-shortening salt derived from a contract address."""
    return "0x" + address_to_bytes(address)[:SALT_LENGTH].hex()


def is_options_mapping(value: Any) -> bool:
    """True for plain mappings used as call options."""
    return isinstance(value, Mapping)


def format_block_tag(tag: Any, config: DeceConfig | None = None) -> str | int:
    """Normalise a block reference to a named tag or a block number."""
    if tag is None:
        return (config or DeceConfig()).default_block

    if isinstance(tag, bool):
        raise ValidationError("Invalid block tag", field="block_tag", value=tag)

    if isinstance(tag, int):
        if tag < 0:
            raise ValidationError("Block number cannot be negative", field="block_tag", value=tag)
        return tag

    if isinstance(tag, str):
        if tag in BLOCK_TAGS:
            return tag
        if is_0x_prefixed(tag) and is_hex(tag):
            return int(tag, 16)
        if tag.isdigit():
            return int(tag)

    raise ValidationError("Invalid block tag", field="block_tag", value=tag)


def format_transaction_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-RPC friendly copy of a call payload with hex quantities."""
    formatted: dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            continue
        if key in _QUANTITY_FIELDS and isinstance(value, int) and not isinstance(value, bool):
            formatted[key] = hex(value)
        else:
            formatted[key] = value
    return formatted


def option_quantity(options: Mapping[str, Any], key: str) -> int:
    """Read an integer option that may be given as int or (hex) string."""
    value = options.get(key)
    if value is None:
        return 0
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError as exc:
            raise ValidationError(
                f"Option {key} must be numeric", field=key, value=value
            ) from exc
    try:
        quantity = int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationError(f"Option {key} must be numeric", field=key, value=value) from exc
    if quantity != value:
        raise ValidationError(f"Option {key} must be a whole number", field=key, value=value)
    return quantity


def split_call_arguments(
    args: Sequence[Any],
    input_count: int,
    *,
    function_name: str = "function",
    allow_block_tag: bool = False,
    config: DeceConfig | None = None,
) -> CallArguments:
    """Split positional call arguments into params, options, block tag and callback.

    The caller's sequence is never modified. Raises ArgumentCountError when the
    remaining parameters do not match ``input_count``.
    """
    remaining = [arg for arg in args if arg is not None]

    callback = None
    if remaining and callable(remaining[-1]):
        callback = remaining.pop()

    block_tag = None
    if (
        allow_block_tag
        and len(remaining) > input_count
        and not is_options_mapping(remaining[-1])
    ):
        block_tag = format_block_tag(remaining.pop(), config)

    options: dict[str, Any] = {}
    if len(remaining) > input_count and is_options_mapping(remaining[-1]):
        options = dict(remaining.pop())

    params = [arg for arg in remaining if not is_options_mapping(arg)]
    if len(params) != input_count:
        raise ArgumentCountError(function_name, input_count, len(params))

    if allow_block_tag and block_tag is None:
        block_tag = format_block_tag(None, config)

    return CallArguments(params=params, options=options, block_tag=block_tag, callback=callback)
