"""Strict DER decoding of ECDSA signatures returned by custody services.

Signature format: 0x30 [len] 0x02 [r-len] [r] 0x02 [s-len] [s]

DER integers are signed, so a value whose top bit is set is prefixed with a
0x00 byte. Raw signatures drop that byte and pad each scalar to 32 bytes.
"""

from typing import Tuple

from kms_signer.base import MalformedSignatureError

TAG_INTEGER = 0x02
TAG_SEQUENCE = 0x30

SCALAR_SIZE = 32


class DERDecodeError(ValueError):
    """Raised when bytes are not valid DER for the expected structure."""
    pass


def read_tlv(data: bytes, offset: int = 0) -> Tuple[int, bytes, int]:
    """Read one tag-length-value element.

    Args:
        data: Encoded bytes
        offset: Position of the tag byte

    Returns:
        Tuple of (tag, value, offset after the element)

    Raises:
        DERDecodeError: On truncation or a non-DER length
    """
    if offset + 2 > len(data):
        raise DERDecodeError("truncated element header")

    tag = data[offset]
    length = data[offset + 1]
    offset += 2

    if length & 0x80:
        num_bytes = length & 0x7F
        if num_bytes == 0:
            raise DERDecodeError("indefinite length is not allowed in DER")
        if num_bytes > 4 or offset + num_bytes > len(data):
            raise DERDecodeError("truncated or oversized length")
        length = int.from_bytes(data[offset : offset + num_bytes], "big")
        # Long form is only valid for lengths that need it
        if length < 0x80 or data[offset] == 0:
            raise DERDecodeError("non-minimal length encoding")
        offset += num_bytes

    end = offset + length
    if end > len(data):
        raise DERDecodeError("truncated element value")

    return tag, data[offset:end], end


def expect(data: bytes, tag: int, offset: int = 0) -> Tuple[bytes, int]:
    """Read an element and check its tag."""
    actual, value, end = read_tlv(data, offset)
    if actual != tag:
        raise DERDecodeError(f"expected tag 0x{tag:02x}, got 0x{actual:02x}")
    return value, end


def read_unsigned_integer(data: bytes, offset: int = 0) -> Tuple[bytes, int]:
    """Read an INTEGER that must be non-negative. Returns its content bytes."""
    value, end = expect(data, TAG_INTEGER, offset)
    if not value:
        raise DERDecodeError("empty integer")
    if value[0] & 0x80:
        raise DERDecodeError("negative integer")
    return value, end


def int_to_fixed_width(value: bytes, width: int = SCALAR_SIZE) -> bytes:
    """Encode an unsigned big-endian integer into exactly ``width`` bytes.

    Three cases:
    - exactly ``width`` bytes: returned unchanged
    - shorter: left-padded with zero bytes
    - longer: leading zero bytes (DER sign padding) are dropped; if the
      value still does not fit it is not a valid curve scalar

    Raises:
        MalformedSignatureError: If the value needs more than ``width`` bytes
    """
    if len(value) == width:
        return value

    if len(value) < width:
        return value.rjust(width, b"\x00")

    trimmed = value.lstrip(b"\x00")
    if len(trimmed) > width:
        raise MalformedSignatureError(
            f"Integer of {len(trimmed)} bytes does not fit in {width} bytes"
        )
    return trimmed.rjust(width, b"\x00")


def decode_ecdsa_signature(der_signature: bytes) -> Tuple[bytes, bytes]:
    """Parse a DER ECDSA signature into its r and s integer bytes.

    Raises:
        MalformedSignatureError: If the bytes are not SEQUENCE { INTEGER, INTEGER }
    """
    try:
        body, end = expect(der_signature, TAG_SEQUENCE)
        if end != len(der_signature):
            raise DERDecodeError("trailing bytes after signature")

        r, offset = read_unsigned_integer(body)
        s, offset = read_unsigned_integer(body, offset)
        if offset != len(body):
            raise DERDecodeError("unexpected elements in signature sequence")
    except DERDecodeError as e:
        raise MalformedSignatureError(f"Invalid DER signature: {e}") from e

    return r, s


def der_signature_to_raw(der_signature: bytes) -> bytes:
    """Convert a DER ECDSA signature to the 64-byte r || s form."""
    r, s = decode_ecdsa_signature(der_signature)
    return int_to_fixed_width(r) + int_to_fixed_width(s)
