"""Configuration containers for the Dece contract API."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_DOWN

from .constants import PADDING, SIGNATURE_LENGTH, UNITS

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_POLLING_TIMEOUT = 0.5
DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True)
class DeceConfig:
    """Encoding and formatting settings shared by codec, formatters and unit helpers."""

    padding: int = PADDING
    signature_length: int = SIGNATURE_LENGTH
    units: tuple[str, ...] = field(default_factory=lambda: tuple(UNITS))
    rounding: str = ROUND_DOWN
    polling_timeout: float = DEFAULT_POLLING_TIMEOUT
    default_block: str | int = "latest"
    default_currency: str = "dece"
    default_account: str | None = None


@dataclass(frozen=True)
class TransportConfig:
    """Settings used to construct the JSON-RPC transport."""

    rpc_url: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    default_account: str | None = None

    def with_defaults(self) -> TransportConfig:
        """Return a copy with a normalised RPC URL."""

        return TransportConfig(
            rpc_url=self.rpc_url.rstrip("/"),
            request_timeout=self.request_timeout,
            max_workers=max(1, self.max_workers),
            default_account=self.default_account,
        )
