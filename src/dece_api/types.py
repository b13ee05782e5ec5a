"""Type definitions and data models for the Dece contract API."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from eth_typing import HexStr

Address = str  # base58 Dece address or 0x-prefixed short placeholder
HexData = HexStr  # hex string, optionally 0x-prefixed
Callback = Callable[[Exception | None, Any], None]


@dataclass
class CallArguments:
    """Positional contract arguments split from the trailing call extras."""

    params: list[Any]
    options: dict[str, Any] = field(default_factory=dict)
    block_tag: str | int | None = None
    callback: Callable[..., Any] | None = None

    @property
    def is_async(self) -> bool:
        return self.callback is not None


@dataclass
class OpParamsResult:
    """Arguments after address shortening, with one flag per parameter."""

    params: list[Any]
    short_addr: list[bool]

    @property
    def shortened(self) -> bool:
        return any(self.short_addr)


@dataclass
class RequestDescriptor:
    """Deferred RPC request built by SolidityFunction.request()."""

    method: str
    callback: Callable[..., Any] | None
    params: list[dict[str, Any]]
    format: Callable[..., Any]
