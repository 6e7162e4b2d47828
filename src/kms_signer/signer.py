"""Remote signer bound to a custody-service key.

The ledger client consumes a public key plus an async ``(bytes) -> bytes``
signer returning raw 64-byte r || s signatures. KmsSigner provides both.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from kms_signer.base import CustodyClient
from kms_signer.crypto import keccak256
from kms_signer.der import der_signature_to_raw
from kms_signer.keys import PublicKey, resolve_public_key

logger = logging.getLogger(__name__)

DEFAULT_SIGNING_ALGORITHM = "ECDSA_SHA_256"


@dataclass(frozen=True)
class KmsSigner:
    """Signing capability for one custody-service key.

    Instances are immutable and hold no per-call state, so one signer can be
    shared across concurrent tasks. Calling the instance is the same as
    calling ``sign``.

    Build signers with ``create_kms_signer``, which resolves the public key
    first, so a signer only exists for a key the custody service knows.
    Constructing one directly skips that lookup and is meant for tests and
    for callers that already hold the resolved key.

    Attributes:
        key_id: Custody-service key identifier
        public_key: Resolved public key
        client: Custody service client
        signing_algorithm: Algorithm name sent with each sign request
    """

    key_id: str
    public_key: PublicKey
    client: CustodyClient
    signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM

    async def sign(self, message: bytes) -> bytes:
        """Sign keccak256(message) with the remote key.

        No low-s normalization is applied; the service's (r, s) is returned
        as-is.

        Args:
            message: Arbitrary bytes to sign

        Returns:
            64-byte raw signature (r || s)

        Raises:
            SigningServiceError: If the custody service rejects the request
            MalformedSignatureError: If the returned signature cannot be decoded
        """
        digest = keccak256(bytes(message))
        der_signature = await self.client.sign_digest(self.key_id, digest, self.signing_algorithm)
        signature = der_signature_to_raw(der_signature)
        logger.debug(f"Signed {len(message)} byte message with {self.key_id}")
        return signature

    async def __call__(self, message: bytes) -> bytes:
        return await self.sign(message)

    def __repr__(self) -> str:
        return f"KmsSigner(key_id={self.key_id!r}, public_key={self.public_key.to_string_raw()})"


async def create_kms_signer(
    key_id: str,
    client: Optional[CustodyClient] = None,
    signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM,
) -> KmsSigner:
    """Resolve a key's public key and bind a signer to it.

    Args:
        key_id: Custody-service key identifier
        client: Custody client (defaults to the configured AWS KMS client)
        signing_algorithm: Algorithm name sent with each sign request

    Returns:
        KmsSigner exposing ``public_key`` and ``sign``

    Raises:
        KeyNotFoundError, ServiceUnavailableError, UnsupportedKeyFormatError
    """
    if client is None:
        from kms_signer.factory import get_custody_client
        client = get_custody_client()

    public_key = await resolve_public_key(client, key_id)
    return KmsSigner(
        key_id=key_id,
        public_key=public_key,
        client=client,
        signing_algorithm=signing_algorithm,
    )
