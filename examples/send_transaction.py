"""Transaction example for the Dece contract API."""

import json
import os

from dotenv import load_dotenv

from dece_api import (
    DeceContract,
    PayableError,
    RevertError,
    TransportConfig,
    Web3Transport,
    to_ta,
)

# Load environment variables from .env file
load_dotenv()


def main() -> None:
    rpc_url = os.getenv("DECE_RPC_URL")
    contract_address = os.getenv("DECE_CONTRACT_ADDRESS")
    sender = os.getenv("DECE_ACCOUNT")
    recipient = os.getenv("DECE_RECIPIENT")
    if not rpc_url or not contract_address or not sender or not recipient:
        raise ValueError("DECE_RPC_URL, DECE_CONTRACT_ADDRESS, DECE_ACCOUNT and DECE_RECIPIENT must be set")

    with open(os.getenv("DECE_CONTRACT_ABI", "abi.json")) as handle:
        abi = json.load(handle)

    transport = Web3Transport(TransportConfig(rpc_url=rpc_url, default_account=sender))
    transport.connect()

    try:
        token = DeceContract(transport, abi, contract_address)
        transfer = token["transfer"]

        amount = to_ta("1.5", "dece")
        print(f"Calldata: {transfer.get_data(recipient, amount)}")
        print(f"Gas estimate: {transfer.estimate_gas(recipient, amount)}")

        try:
            tx_hash = transfer.send_transaction(recipient, amount, {"gas": 200_000})
            print(f"Transaction sent: {tx_hash}")
        except NetworkError as exc:
            print(f"Transfer failed: {exc.details.get('error', exc.message)}")

        # transfer is not payable, so attaching value fails before dispatch
        try:
            transfer.send_transaction(recipient, amount, {"value": 1})
        except PayableError as exc:
            print(f"Rejected: {exc}")
    finally:
        transport.disconnect()


if __name__ == "__main__":
    main()
