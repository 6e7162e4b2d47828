"""Hashing and verification helpers for secp256k1 ECDSA.

The ledger signs keccak256(message); the digest is handed to the custody
service as a precomputed hash, so verification uses a prehashed ECDSA check.
"""

import logging

from Crypto.Hash import keccak
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed, encode_dss_signature

from kms_signer.der import SCALAR_SIZE

logger = logging.getLogger(__name__)


def keccak256(data: bytes) -> bytes:
    """Return the 32-byte keccak256 digest of data."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def verify_raw_signature(public_key: ec.EllipticCurvePublicKey, message: bytes, signature: bytes) -> bool:
    """Check a 64-byte r || s signature over keccak256(message).

    Args:
        public_key: secp256k1 public key
        message: Signed message (hashed here)
        signature: Raw 64-byte signature

    Returns:
        True if the signature is valid
    """
    if len(signature) != 2 * SCALAR_SIZE:
        logger.debug(f"Raw signature must be {2 * SCALAR_SIZE} bytes, got {len(signature)}")
        return False

    der_signature = encode_dss_signature(
        int.from_bytes(signature[:SCALAR_SIZE], "big"),
        int.from_bytes(signature[SCALAR_SIZE:], "big"),
    )

    try:
        public_key.verify(
            der_signature,
            keccak256(message),
            ec.ECDSA(Prehashed(hashes.SHA256())),
        )
        return True
    except InvalidSignature:
        logger.debug("Signature verification failed")
        return False
