"""Contract handle exposing overload-aware function bindings."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from .codec import AbiCodec
from .config import DeceConfig
from .exceptions import ValidationError
from .function import SolidityFunction
from .transport import Transport

logger = logging.getLogger(__name__)


def function_entries(abi: Sequence[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Return the function entries of a contract ABI."""
    return [entry for entry in abi if entry.get("type", "function") == "function"]


class DeceContract:
    """Bindings for every function of a deployed contract.

    ``functions`` maps a display name to the first binding declared under it;
    ``overloads`` maps ``(display_name, type_name)`` to each individual binding.
    """

    def __init__(
        self,
        transport: Transport,
        abi: Sequence[Mapping[str, Any]],
        address: str,
        codec: AbiCodec | None = None,
        *,
        abi_v2: bool = False,
        config: DeceConfig | None = None,
    ) -> None:
        self.address = address
        self.abi = list(abi)
        self._transport = transport
        config = config or (codec.config if codec is not None else DeceConfig())
        codec = codec or AbiCodec(config)

        functions: dict[str, SolidityFunction] = {}
        overloads: dict[tuple[str, str], SolidityFunction] = {}
        for entry in function_entries(self.abi):
            binding = SolidityFunction(
                transport, entry, address, codec, abi_v2=abi_v2, config=config
            )
            key = (binding.display_name(), binding.type_name())
            if key in overloads:
                logger.warning("Duplicate ABI entry for %s ignored", binding.canonical_name)
                continue
            functions.setdefault(binding.display_name(), binding)
            overloads[key] = binding

        self._functions = functions
        self._overloads = overloads
        logger.debug("Bound %d function(s) for contract %s", len(overloads), address)

    @property
    def functions(self) -> Mapping[str, SolidityFunction]:
        return dict(self._functions)

    @property
    def overloads(self) -> Mapping[tuple[str, str], SolidityFunction]:
        return dict(self._overloads)

    def function(self, name: str, type_signature: str | None = None) -> SolidityFunction:
        """Look up a binding by display name and optional comma-joined type list."""
        if type_signature is None:
            binding = self._functions.get(name)
        else:
            binding = self._overloads.get((name, type_signature.replace(" ", "")))
        if binding is None:
            raise ValidationError(
                f"Contract has no function {name}"
                + (f"({type_signature})" if type_signature is not None else ""),
                field="name",
                value=name,
            )
        return binding

    def __getitem__(self, name: str) -> SolidityFunction:
        return self.function(name)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __repr__(self) -> str:
        return f"<DeceContract {self.address} functions={len(self._overloads)}>"
