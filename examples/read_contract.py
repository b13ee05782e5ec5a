"""Read-only contract call example for the Dece contract API."""

import json
import os

from dotenv import load_dotenv

from dece_api import DeceContract, TransportConfig, Web3Transport

# Load environment variables from .env file
load_dotenv()


def main() -> None:
    rpc_url = os.getenv("DECE_RPC_URL")
    contract_address = os.getenv("DECE_CONTRACT_ADDRESS")
    abi_path = os.getenv("DECE_CONTRACT_ABI", "abi.json")
    if not rpc_url or not contract_address:
        raise ValueError("DECE_RPC_URL and DECE_CONTRACT_ADDRESS must be set")

    with open(abi_path) as handle:
        abi = json.load(handle)

    transport = Web3Transport(TransportConfig(rpc_url=rpc_url))
    transport.connect()

    try:
        token = DeceContract(transport, abi, contract_address)

        # Blocking call
        supply = token["totalSupply"].call()
        print(f"Total supply: {supply}")

        # Same call with a callback, completed on the transport worker pool
        def on_balance(error, balance):
            if error is not None:
                print(f"balanceOf failed: {error}")
            else:
                print(f"Balance: {balance}")

        token["balanceOf"].call(contract_address, on_balance)

        # Future-returning variant
        future = token["balanceOf"].call_async(contract_address)
        print(f"Balance (future): {future.result(timeout=30)}")
    finally:
        transport.disconnect()


if __name__ == "__main__":
    main()
