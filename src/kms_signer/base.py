"""Base interfaces for remote-key signing.

Signing flow:
1. Resolve the public key for a custody-service key identifier
2. Hash the message locally (keccak256)
3. Submit the digest to the custody service (key never leaves it)
4. Convert the returned DER signature to raw r || s
"""

from abc import ABC, abstractmethod
from typing import Optional


class SigningError(Exception):
    """Base exception for remote signing failures."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class KeyNotFoundError(SigningError):
    """Exception raised when the custody service does not know the key."""
    pass


class ServiceUnavailableError(SigningError):
    """Exception raised when the custody service cannot be reached or errors."""
    pass


class UnsupportedKeyFormatError(SigningError):
    """Exception raised when public key material is not a secp256k1 EC key."""
    pass


class SigningServiceError(SigningError):
    """Exception raised when the custody service rejects a sign request."""
    pass


class MalformedSignatureError(SigningError):
    """Exception raised when a returned signature is not a valid DER (r, s) pair."""
    pass


class CustodyClient(ABC):
    """Abstract client for a service that holds private keys.

    Implementations must translate their transport errors into the
    SigningError hierarchy and must be safe for concurrent use.
    """

    @abstractmethod
    async def get_public_key(self, key_id: str) -> bytes:
        """Fetch public key material for a key identifier.

        Args:
            key_id: Custody-service key identifier

        Returns:
            DER-encoded SubjectPublicKeyInfo

        Raises:
            KeyNotFoundError: If the key does not exist
            ServiceUnavailableError: If the request fails
        """
        pass

    @abstractmethod
    async def sign_digest(self, key_id: str, digest: bytes, signing_algorithm: str) -> bytes:
        """Sign a precomputed digest.

        The service must treat ``digest`` as already hashed.

        Args:
            key_id: Custody-service key identifier
            digest: 32-byte digest
            signing_algorithm: Service algorithm name (e.g. ECDSA_SHA_256)

        Returns:
            DER-encoded ECDSA signature

        Raises:
            SigningServiceError: If the request fails
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
