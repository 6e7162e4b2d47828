"""AWS KMS custody client.

Fetches SubjectPublicKeyInfo with GetPublicKey and signs keccak256 digests
with Sign in DIGEST mode; the private key stays inside KMS.

Setup:
1. Create an asymmetric key in AWS KMS (ECC_SECG_P256K1, SIGN_VERIFY)
2. Set AWS_KMS_KEY_ID (key ID, ARN or alias)
3. Set AWS_KMS_REGION and credentials (AWS_KMS_ACCESS_KEY_ID /
   AWS_KMS_SECRET_ACCESS_KEY, or the default boto3 credential chain)

Reference:
- https://docs.aws.amazon.com/kms/latest/APIReference/API_Sign.html
"""

import asyncio
import logging
import threading
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from kms_signer.base import (
    CustodyClient,
    KeyNotFoundError,
    ServiceUnavailableError,
    SigningServiceError,
)

logger = logging.getLogger(__name__)


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class AwsKmsClient(CustodyClient):
    """AWS KMS client for secp256k1 keys.

    boto3 calls are blocking, so they run in the event loop's default
    executor. boto3 clients are thread-safe; one client is shared by all
    calls made through this instance.

    ``key_id`` is passed to KMS unchanged, so a bare key UUID, a full key
    ARN or an ``alias/...`` name all work. NotFoundException becomes
    KeyNotFoundError on lookup; every sign failure is SigningServiceError.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ):
        """Initialize KMS client.

        Args:
            region: AWS region (defaults to the boto3 default chain)
            access_key_id: Explicit access key (defaults to the boto3 chain)
            secret_access_key: Explicit secret key
            endpoint_url: Alternative KMS endpoint, e.g. a local emulator
            client: Preconfigured boto3 KMS client
        """
        self.region = region
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self.endpoint_url = endpoint_url
        self._client = client
        self._client_lock = threading.Lock()

    @property
    def client(self):
        """Lazily created boto3 KMS client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = boto3.client(
                        "kms",
                        region_name=self.region,
                        aws_access_key_id=self._access_key_id,
                        aws_secret_access_key=self._secret_access_key,
                        endpoint_url=self.endpoint_url,
                    )
                    logger.info(f"Created KMS client for region {self.region or '(default)'}")
        return self._client

    async def _call(self, method: str, **kwargs) -> dict:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            lambda: getattr(self.client, method)(**kwargs),
        )

    async def get_public_key(self, key_id: str) -> bytes:
        """Get DER SubjectPublicKeyInfo from KMS."""
        try:
            response = await self._call("get_public_key", KeyId=key_id)
        except ClientError as e:
            code = _error_code(e)
            if code == "NotFoundException":
                raise KeyNotFoundError(f"KMS key not found: {key_id}", code=code) from e
            logger.error(f"KMS get_public_key error for {key_id}: {e}")
            raise ServiceUnavailableError(f"KMS get_public_key failed: {e}", code=code) from e
        except BotoCoreError as e:
            logger.error(f"KMS unreachable: {e}")
            raise ServiceUnavailableError(f"KMS get_public_key failed: {e}") from e

        return response["PublicKey"]

    async def sign_digest(self, key_id: str, digest: bytes, signing_algorithm: str) -> bytes:
        """Sign a digest using KMS (MessageType=DIGEST, no re-hashing)."""
        try:
            response = await self._call(
                "sign",
                KeyId=key_id,
                Message=digest,
                MessageType="DIGEST",
                SigningAlgorithm=signing_algorithm,
            )
        except ClientError as e:
            code = _error_code(e)
            if code == "AccessDeniedException":
                logger.error(f"Access denied to KMS key {key_id}. Check IAM permissions.")
            else:
                logger.error(f"KMS signing error for {key_id}: {e}")
            raise SigningServiceError(f"KMS sign failed: {e}", code=code) from e
        except BotoCoreError as e:
            logger.error(f"KMS signing failed: {e}")
            raise SigningServiceError(f"KMS sign failed: {e}") from e

        return response["Signature"]

    def __repr__(self) -> str:
        return f"AwsKmsClient(region={self.region!r})"
