"""Tests for DER signature decoding and fixed-width scalar encoding."""

import pytest

from kms_signer.base import MalformedSignatureError
from kms_signer.der import (
    DERDecodeError,
    decode_ecdsa_signature,
    der_signature_to_raw,
    int_to_fixed_width,
    read_tlv,
)

# r has its top bit set (DER adds a 0x00), s is 31 bytes (raw form pads it)
R_BYTES = "8f" + "11" * 31
S_BYTES = "7f" + "22" * 30
DER_SIGNATURE = "3044" + "022100" + R_BYTES + "021f" + S_BYTES
RAW_SIGNATURE = R_BYTES + "00" + S_BYTES


class TestIntToFixedWidth:
    """Tests for the three scalar encoding cases."""

    def test_exact_width_unchanged(self):
        """Test that a 32-byte value is returned as-is."""
        value = bytes(range(1, 33))
        assert int_to_fixed_width(value) == value

    def test_short_value_left_padded(self):
        """Test that a short value is zero-padded on the left."""
        assert int_to_fixed_width(b"\x05") == b"\x00" * 31 + b"\x05"

    def test_sign_byte_dropped(self):
        """Test that the DER sign byte is stripped from a 33-byte value."""
        value = b"\x80" + b"\x01" * 31
        assert int_to_fixed_width(b"\x00" + value) == value

    def test_multiple_leading_zeros_dropped(self):
        """Test that any number of leading zero bytes is tolerated."""
        assert int_to_fixed_width(b"\x00\x00\x00\x07") == b"\x00" * 31 + b"\x07"
        assert int_to_fixed_width(b"\x00" * 34 + b"\x07") == b"\x00" * 31 + b"\x07"

    def test_value_too_large(self):
        """Test that a value needing 33 significant bytes is rejected."""
        with pytest.raises(MalformedSignatureError):
            int_to_fixed_width(b"\x01" + b"\x00" * 32)

    def test_custom_width(self):
        """Test padding to a width other than 32."""
        assert int_to_fixed_width(b"\x01", width=4) == b"\x00\x00\x00\x01"


class TestDecodeSignature:
    """Tests for DER (r, s) parsing."""

    def test_known_vector(self):
        """Test a fixed DER signature decodes to the expected r || s."""
        raw = der_signature_to_raw(bytes.fromhex(DER_SIGNATURE))

        assert len(raw) == 64
        assert raw.hex() == RAW_SIGNATURE

    def test_leading_zero_matches_plain_encoding(self):
        """Test that a disambiguating 0x00 does not change the decoded scalar."""
        with_zero = bytes.fromhex("3007" + "02020080" + "020105")
        r, s = decode_ecdsa_signature(with_zero)
        raw = der_signature_to_raw(with_zero)

        assert r == b"\x00\x80"
        assert s == b"\x05"
        assert raw[:32] == int_to_fixed_width(b"\x80")
        assert raw[32:] == int_to_fixed_width(b"\x05")

    def test_full_width_scalars(self):
        """Test scalars that already use exactly 32 bytes."""
        r = "7f" + "aa" * 31
        s = "01" + "bb" * 31
        der = bytes.fromhex("3044" + "0220" + r + "0220" + s)

        assert der_signature_to_raw(der).hex() == r + s

    def test_oversized_scalar_rejected(self):
        """Test that an r larger than 32 bytes is malformed."""
        der = bytes.fromhex("3026" + "0221" + "01" + "00" * 32 + "020105")
        with pytest.raises(MalformedSignatureError):
            der_signature_to_raw(der)

    @pytest.mark.parametrize(
        "der_hex",
        [
            "",
            "30",
            "3006020101020101"[:-2],      # truncated
            "3106020101020101",           # wrong outer tag
            "3006040101020101",           # r is not an INTEGER
            "3003020101",                 # only one integer
            "3009020101020101020101",     # three integers
            "300602010102010100",         # trailing byte
            "3006020180020101",           # negative r
            "3005020002010101"[:14],      # empty r
            "3080020101020101",           # indefinite length
        ],
    )
    def test_malformed_signatures(self, der_hex):
        """Test that malformed DER raises MalformedSignatureError."""
        with pytest.raises(MalformedSignatureError):
            der_signature_to_raw(bytes.fromhex(der_hex))


class TestReadTlv:
    """Tests for low-level element decoding."""

    def test_long_form_length(self):
        """Test a length encoded in long form."""
        data = bytes([0x04, 0x81, 0x80]) + b"\x00" * 0x80
        tag, value, end = read_tlv(data)

        assert tag == 0x04
        assert len(value) == 0x80
        assert end == len(data)

    def test_non_minimal_length_rejected(self):
        """Test that long form for a short length is rejected."""
        with pytest.raises(DERDecodeError):
            read_tlv(bytes([0x04, 0x81, 0x01, 0x00]))

    def test_truncated_value(self):
        """Test that a value shorter than its length is rejected."""
        with pytest.raises(DERDecodeError):
            read_tlv(bytes([0x04, 0x05, 0x00]))
