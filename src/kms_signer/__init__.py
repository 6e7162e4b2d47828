"""Remote-key ECDSA signing.

Provides a ledger-compatible signer whose private key stays in a custody
service:
- resolve_public_key: fetch and compress the secp256k1 public key
- KmsSigner: async signer returning raw 64-byte r || s signatures
- AwsKmsClient: AWS KMS custody client
"""

from kms_signer.base import (
    CustodyClient,
    KeyNotFoundError,
    MalformedSignatureError,
    ServiceUnavailableError,
    SigningError,
    SigningServiceError,
    UnsupportedKeyFormatError,
)
from kms_signer.keys import PublicKey, resolve_public_key
from kms_signer.kms import AwsKmsClient
from kms_signer.signer import KmsSigner, create_kms_signer

__all__ = [
    "CustodyClient",
    "KeyNotFoundError",
    "MalformedSignatureError",
    "ServiceUnavailableError",
    "SigningError",
    "SigningServiceError",
    "UnsupportedKeyFormatError",
    "PublicKey",
    "resolve_public_key",
    "AwsKmsClient",
    "KmsSigner",
    "create_kms_signer",
]
