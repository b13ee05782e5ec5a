"""Tests for the ABI codec and short address handling."""

from __future__ import annotations

import base58
import pytest
from conftest import CONTRACT_ADDRESS, RECIPIENT_ADDRESS, DummyTransport, Recorder
from eth_abi import encode as abi_encode
from eth_utils import keccak, to_checksum_address

from dece_api.codec import AbiCodec, derive_short_address, is_full_address
from dece_api.exceptions import AbiDecodingError, AbiEncodingError, NetworkError, ValidationError
from dece_api.utils import address_salt

SHORT_A = "0x" + "11" * 20
SHORT_B = "0x" + "22" * 20
SALT = address_salt(CONTRACT_ADDRESS)


@pytest.fixture
def codec() -> AbiCodec:
    return AbiCodec()


class TestEncoding:
    def test_round_trip(self, codec: AbiCodec) -> None:
        types = ["uint256", "bool", "string", "uint8[]"]
        values = [42, True, "hello", [1, 2, 3]]

        encoded = codec.encode_params(types, values)

        assert not encoded.startswith("0x")
        decoded = codec.decode_params(types, encoded)
        assert decoded[:3] == [42, True, "hello"]
        assert list(decoded[3]) == [1, 2, 3]

    def test_encodes_lowercase_address(self, codec: AbiCodec) -> None:
        encoded = codec.encode_params(["address"], [SHORT_A])
        assert encoded == abi_encode(["address"], [to_checksum_address(SHORT_A)]).hex()

    def test_out_of_range_value(self, codec: AbiCodec) -> None:
        with pytest.raises(AbiEncodingError) as excinfo:
            codec.encode_params(["uint8"], [256])
        assert excinfo.value.types == ["uint8"]
        assert excinfo.value.__cause__ is not None

    def test_full_address_must_be_shortened(self, codec: AbiCodec) -> None:
        with pytest.raises(AbiEncodingError):
            codec.encode_params(["address"], [RECIPIENT_ADDRESS])

    def test_flag_count_mismatch(self, codec: AbiCodec) -> None:
        with pytest.raises(AbiEncodingError):
            codec.encode_params(["uint256"], [1], [True, False])

    def test_unsupported_type(self, codec: AbiCodec) -> None:
        with pytest.raises(ValidationError):
            codec.get_solidity_types(["uint7"])


class TestDecoding:
    def test_truncated_output(self, codec: AbiCodec) -> None:
        with pytest.raises(AbiDecodingError) as excinfo:
            codec.decode_params(["uint256"], "0x1234")
        assert excinfo.value.output == "1234"
        assert "output = 1234" in str(excinfo.value)

    def test_address_map_restores_full_addresses(self, codec: AbiCodec) -> None:
        output = "0x" + abi_encode(["address", "uint256"], [SHORT_A, 7]).hex()

        decoded = codec.decode_params(
            ["address", "uint256"], output, {to_checksum_address(SHORT_A): RECIPIENT_ADDRESS}
        )

        assert decoded == [RECIPIENT_ADDRESS, 7]

    def test_unmapped_addresses_are_kept(self, codec: AbiCodec) -> None:
        output = abi_encode(["address[]"], [[SHORT_A, SHORT_B]]).hex()

        (addresses,) = codec.decode_params(["address[]"], output, {SHORT_A: RECIPIENT_ADDRESS})

        assert addresses[0] == RECIPIENT_ADDRESS
        assert addresses[1].lower() == SHORT_B

    def test_decode_short_address(self, codec: AbiCodec) -> None:
        zero = "0x" + "00" * 20
        types = ["address", "address[]", "uint256"]
        output = abi_encode(types, [SHORT_A, [SHORT_B, SHORT_A, zero], 5]).hex()

        found = codec.decode_short_address(types, output)

        assert [address.lower() for address in found] == [SHORT_A, SHORT_B]

    def test_decode_short_address_without_addresses(self, codec: AbiCodec) -> None:
        output = abi_encode(["uint256"], [1]).hex()
        assert codec.decode_short_address(["uint256"], output) == []

    def test_decode_short_address_rejects_garbage(self, codec: AbiCodec) -> None:
        with pytest.raises(AbiDecodingError):
            codec.decode_short_address(["address"], "00")

    def test_revert_reason(self, codec: AbiCodec) -> None:
        output = "0x08c379a0" + abi_encode(["string"], ["execution failed"]).hex()
        assert codec.revert_reason(output) == "execution failed"

    def test_revert_reason_ignores_regular_output(self, codec: AbiCodec) -> None:
        assert codec.revert_reason(abi_encode(["uint256"], [1]).hex()) is None
        assert codec.revert_reason("08c379a0" + "00" * 3) is None
        assert codec.revert_reason("") is None


class TestShortAddresses:
    def test_is_full_address(self) -> None:
        assert is_full_address(RECIPIENT_ADDRESS)
        assert not is_full_address(SHORT_A)
        assert not is_full_address(base58.b58encode(b"short").decode())
        assert not is_full_address("not-base58!")
        assert not is_full_address(12)

    def test_derive_short_address(self) -> None:
        expected = to_checksum_address(
            keccak(bytes(range(1, 17)) + base58.b58decode(RECIPIENT_ADDRESS))[-20:]
        )
        assert derive_short_address(RECIPIENT_ADDRESS, SALT) == expected

    def test_op_params_local(self, codec: AbiCodec, transport: DummyTransport) -> None:
        result = codec.op_params(["address", "uint256"], [RECIPIENT_ADDRESS, 1], SALT, transport)

        assert result is not None
        assert result.params == [derive_short_address(RECIPIENT_ADDRESS, SALT), 1]
        assert result.short_addr == [True, False]
        assert result.shortened
        assert transport.short_requests == []

    def test_op_params_arrays(self, codec: AbiCodec, transport: DummyTransport) -> None:
        result = codec.op_params(["address[]"], [[RECIPIENT_ADDRESS, SHORT_B]], SALT, transport)

        assert result is not None
        assert result.params == [[derive_short_address(RECIPIENT_ADDRESS, SALT), SHORT_B]]
        assert result.short_addr == [True]

    def test_op_params_without_full_addresses(self, codec: AbiCodec, transport: DummyTransport) -> None:
        result = codec.op_params(["address", "bool"], [SHORT_A, True], SALT, transport)

        assert result is not None
        assert result.params == [SHORT_A, True]
        assert result.short_addr == [False, False]
        assert not result.shortened

    def test_op_params_dynamic_uses_transport(self, codec: AbiCodec) -> None:
        transport = DummyTransport(short_addresses={RECIPIENT_ADDRESS: SHORT_B})

        result = codec.op_params(["address"], [RECIPIENT_ADDRESS], SALT, transport, dy=True)

        assert result is not None
        assert result.params == [SHORT_B]
        assert transport.short_requests == [([RECIPIENT_ADDRESS], SALT)]

    def test_op_params_callback(self, codec: AbiCodec, recorder: Recorder) -> None:
        transport = DummyTransport(short_addresses={RECIPIENT_ADDRESS: SHORT_B})

        returned = codec.op_params(
            ["address"], [RECIPIENT_ADDRESS], SALT, transport, dy=True, callback=recorder
        )

        assert returned is None
        assert recorder.error is None
        assert recorder.result.params == [SHORT_B]
        assert recorder.result.short_addr == [True]

    def test_op_params_callback_error(self, codec: AbiCodec, recorder: Recorder) -> None:
        transport = DummyTransport(error=NetworkError("unreachable"))

        codec.op_params(
            ["address"], [RECIPIENT_ADDRESS], SALT, transport, dy=True, callback=recorder
        )

        assert isinstance(recorder.error, NetworkError)
        assert recorder.result is None

    def test_address_prefix(self, codec: AbiCodec) -> None:
        assert codec.address_prefix(["uint256"], [1], SALT, [False]) == "0x"
        assert codec.address_prefix(["address"], [SHORT_A], SALT, [True]) == "0x" + SALT[2:]
