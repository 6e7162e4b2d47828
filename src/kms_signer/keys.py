"""Public key resolution and encoding.

Custody services return public keys as DER SubjectPublicKeyInfo:

    SEQUENCE {
        SEQUENCE { OID id-ecPublicKey, OID secp256k1 }
        BIT STRING (0x04 || x || y)
    }

The ledger identifies ECDSA keys by the 33-byte compressed point.
"""

import logging
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat, load_der_public_key

from kms_signer.base import CustodyClient, UnsupportedKeyFormatError
from kms_signer.crypto import keccak256, verify_raw_signature

logger = logging.getLogger(__name__)

COMPRESSED_POINT_SIZE = 33

# Ledger DER form of a compressed secp256k1 key: AlgorithmIdentifier + BIT STRING header
LEDGER_ECDSA_DER_PREFIX = bytes.fromhex("302d300706052b8104000a032200")


def _load_point(point: bytes) -> ec.EllipticCurvePublicKey:
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), point)
    except ValueError as e:
        raise UnsupportedKeyFormatError(f"Not a valid secp256k1 point: {e}") from e


def decode_spki_public_key(der_key: bytes) -> bytes:
    """Decode a SubjectPublicKeyInfo to a compressed secp256k1 point.

    Args:
        der_key: DER-encoded SubjectPublicKeyInfo

    Returns:
        33-byte compressed point

    Raises:
        UnsupportedKeyFormatError: If the key is not an EC key on secp256k1
    """
    try:
        public_key = load_der_public_key(der_key)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise UnsupportedKeyFormatError(f"Invalid SubjectPublicKeyInfo: {e}") from e

    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise UnsupportedKeyFormatError(
            f"Unsupported key algorithm {type(public_key).__name__}, expected EC public key"
        )
    if not isinstance(public_key.curve, ec.SECP256K1):
        raise UnsupportedKeyFormatError(
            f"Unsupported curve {public_key.curve.name}, expected secp256k1"
        )

    return public_key.public_bytes(Encoding.X962, PublicFormat.CompressedPoint)


@dataclass(frozen=True)
class PublicKey:
    """secp256k1 public key in the ledger's compressed-point form."""

    compressed: bytes

    def __post_init__(self):
        if len(self.compressed) != COMPRESSED_POINT_SIZE:
            raise UnsupportedKeyFormatError(
                f"Compressed point must be {COMPRESSED_POINT_SIZE} bytes, got {len(self.compressed)}"
            )

    @classmethod
    def from_bytes_ecdsa(cls, data: bytes) -> "PublicKey":
        """Build from a compressed (33 byte) or uncompressed (65 byte) point."""
        public_key = _load_point(data)
        return cls(public_key.public_bytes(Encoding.X962, PublicFormat.CompressedPoint))

    @classmethod
    def from_spki(cls, der_key: bytes) -> "PublicKey":
        return cls(decode_spki_public_key(der_key))

    def to_bytes_raw(self) -> bytes:
        return self.compressed

    def to_string_raw(self) -> str:
        return self.compressed.hex()

    def to_bytes_der(self) -> bytes:
        return LEDGER_ECDSA_DER_PREFIX + self.compressed

    def to_string_der(self) -> str:
        return self.to_bytes_der().hex()

    def to_evm_address(self) -> str:
        """EVM address: last 20 bytes of keccak256(x || y)."""
        uncompressed = self._key().public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
        return "0x" + keccak256(uncompressed[1:])[-20:].hex()

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify a raw 64-byte signature over keccak256(message)."""
        return verify_raw_signature(self._key(), message, signature)

    def _key(self) -> ec.EllipticCurvePublicKey:
        return _load_point(self.compressed)

    def __str__(self) -> str:
        return self.to_string_der()


async def resolve_public_key(client: CustodyClient, key_id: str) -> PublicKey:
    """Fetch and decode the public key for a custody-service key.

    Args:
        client: Custody service client
        key_id: Key identifier

    Returns:
        PublicKey in compressed form

    Raises:
        KeyNotFoundError: If the key does not exist
        ServiceUnavailableError: If the request fails
        UnsupportedKeyFormatError: If the key is not secp256k1
    """
    der_key = await client.get_public_key(key_id)
    public_key = PublicKey.from_spki(der_key)
    logger.info(f"Resolved public key for {key_id}: {public_key.to_string_raw()}")
    return public_key
