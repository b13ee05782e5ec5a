"""Constants and mappings for the Dece contract API."""

from enum import Enum

# 4-byte selector of Error(string), the structured revert payload
ERROR_SELECTOR = "08c379a0"

PADDING = 32
SIGNATURE_LENGTH = 4
SALT_LENGTH = 16
SHORT_ADDRESS_LENGTH = 20

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

BLOCK_TAGS = ("latest", "earliest", "pending", "safe", "finalized")

# Unit name -> power of ten relative to the base unit (ta)
UNITS: dict[str, int] = {
    "ta": 0,
    "kta": 3,
    "Mta": 6,
    "Gta": 9,
    "szabo": 12,
    "finney": 15,
    "femtodece": 3,
    "picodece": 6,
    "nanodece": 9,
    "microdece": 12,
    "millidece": 15,
    "nano": 9,
    "micro": 12,
    "milli": 15,
    "dece": 18,
    "grand": 21,
    "Mdece": 24,
    "Gdece": 27,
    "Tdece": 30,
    "Pdece": 33,
    "Edece": 36,
    "Zdece": 39,
    "Ydece": 42,
    "Ndece": 45,
    "Ddece": 48,
    "Vdece": 51,
    "Udece": 54,
}


class RpcMethod(str, Enum):
    """JSON-RPC methods exposed by Dece nodes."""

    CALL = "dece_call"
    SEND_TRANSACTION = "dece_sendTransaction"
    ESTIMATE_GAS = "dece_estimateGas"
    GET_FULL_ADDRESS = "dece_getFullAddress"
    GET_SHORT_ADDRESS = "dece_getShortAddress"
