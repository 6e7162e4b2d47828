"""Pytest configuration and fixtures."""

import os

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

# Keep tests independent of a developer's AWS setup
for _var in ("AWS_KMS_KEY_ID", "AWS_KMS_REGION", "AWS_KMS_ACCESS_KEY_ID", "AWS_KMS_SECRET_ACCESS_KEY"):
    os.environ.pop(_var, None)

from kms_signer.base import CustodyClient, KeyNotFoundError, SigningServiceError
from kms_signer.factory import reset_custody_client

# secp256k1 generator point (public key for private key 1)
GENERATOR_X = "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
GENERATOR_Y = "483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8"
SPKI_SECP256K1_PREFIX = "3056301006072a8648ce3d020106052b8104000a034200"


class FakeCustodyService(CustodyClient):
    """In-process custody service holding real secp256k1 keys."""

    def __init__(self, keys: dict[str, ec.EllipticCurvePrivateKey]):
        self._keys = keys
        self.sign_calls: list[tuple[str, bytes, str]] = []
        self.fail_next_sign = False

    async def get_public_key(self, key_id: str) -> bytes:
        if key_id not in self._keys:
            raise KeyNotFoundError(f"KMS key not found: {key_id}", code="NotFoundException")
        return self._keys[key_id].public_key().public_bytes(
            Encoding.DER, PublicFormat.SubjectPublicKeyInfo
        )

    async def sign_digest(self, key_id: str, digest: bytes, signing_algorithm: str) -> bytes:
        self.sign_calls.append((key_id, digest, signing_algorithm))
        if self.fail_next_sign:
            self.fail_next_sign = False
            raise SigningServiceError("KMS sign failed: throttled", code="ThrottlingException")
        if key_id not in self._keys:
            raise SigningServiceError(f"KMS key not found: {key_id}", code="NotFoundException")
        if len(digest) != 32:
            raise SigningServiceError("Digest is invalid length", code="ValidationException")
        return self._keys[key_id].sign(digest, ec.ECDSA(Prehashed(hashes.SHA256())))


@pytest.fixture(autouse=True)
def reset_factory():
    """Clear cached settings and client before each test."""
    reset_custody_client()
    yield
    reset_custody_client()


@pytest.fixture
def private_key() -> ec.EllipticCurvePrivateKey:
    return ec.derive_private_key(1, ec.SECP256K1())


@pytest.fixture
def custody(private_key) -> FakeCustodyService:
    return FakeCustodyService({"alias/ledger-key": private_key})


@pytest.fixture
def generator_spki() -> bytes:
    """SubjectPublicKeyInfo for the secp256k1 generator point."""
    return bytes.fromhex(SPKI_SECP256K1_PREFIX + "04" + GENERATOR_X + GENERATOR_Y)


@pytest.fixture
def generator_compressed() -> bytes:
    return bytes.fromhex("02" + GENERATOR_X)
