"""Dece contract API - call ledger contract functions like local callables.

This library turns contract ABI entries into bindings that validate
arguments, encode calldata (including Dece short addresses), dispatch reads
and transactions over JSON-RPC, and decode the results.
"""

from .batch import RequestBatch
from .codec import AbiCodec
from .config import DeceConfig, TransportConfig
from .constants import ERROR_SELECTOR, UNITS, RpcMethod
from .contract import DeceContract
from .exceptions import (
    AbiDecodingError,
    AbiEncodingError,
    ArgumentCountError,
    DeceProtocolError,
    NetworkError,
    PayableError,
    RevertError,
    ValidationError,
)
from .function import SolidityFunction
from .transport import Transport, Web3Transport
from .types import CallArguments, OpParamsResult, RequestDescriptor
from .units import from_ta, to_ta
from .utils import (
    address_salt,
    extract_display_name,
    extract_type_name,
    format_block_tag,
    split_call_arguments,
    transform_to_full_name,
)

__version__ = "0.1.0"

__all__ = [
    # Bindings
    "SolidityFunction",
    "DeceContract",
    "RequestBatch",
    # Collaborators
    "AbiCodec",
    "Transport",
    "Web3Transport",
    # Configuration
    "DeceConfig",
    "TransportConfig",
    # Types and constants
    "CallArguments",
    "OpParamsResult",
    "RequestDescriptor",
    "RpcMethod",
    "ERROR_SELECTOR",
    "UNITS",
    # Exceptions
    "DeceProtocolError",
    "ValidationError",
    "ArgumentCountError",
    "PayableError",
    "AbiEncodingError",
    "AbiDecodingError",
    "RevertError",
    "NetworkError",
    # Utility functions
    "address_salt",
    "extract_display_name",
    "extract_type_name",
    "format_block_tag",
    "split_call_arguments",
    "transform_to_full_name",
    "to_ta",
    "from_ta",
]
