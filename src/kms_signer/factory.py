"""Custody client factory.

Creates the AWS KMS client and signers from configuration.
"""

import logging
from typing import Optional

from kms_signer.base import CustodyClient, KeyNotFoundError
from kms_signer.config import get_settings
from kms_signer.kms import AwsKmsClient
from kms_signer.signer import KmsSigner, create_kms_signer

logger = logging.getLogger(__name__)

_client_instance: Optional[CustodyClient] = None


def get_custody_client() -> CustodyClient:
    """Get the configured custody client.

    Returns singleton instance built from settings.
    """
    global _client_instance

    if _client_instance is not None:
        return _client_instance

    settings = get_settings()
    logger.info("Initializing AWS KMS client")
    _client_instance = AwsKmsClient(
        region=settings.aws_kms_region,
        access_key_id=settings.aws_kms_access_key_id,
        secret_access_key=settings.aws_kms_secret_access_key,
        endpoint_url=settings.kms_endpoint_url,
    )
    return _client_instance


def reset_custody_client():
    """Reset the client instance (for testing)."""
    global _client_instance
    _client_instance = None
    get_settings.cache_clear()


async def create_signer_from_settings(key_id: Optional[str] = None) -> KmsSigner:
    """Create a signer for the configured (or given) KMS key.

    Args:
        key_id: Overrides AWS_KMS_KEY_ID

    Raises:
        KeyNotFoundError: If no key is configured or KMS does not know it
    """
    settings = get_settings()
    key_id = key_id or settings.aws_kms_key_id
    if not key_id:
        raise KeyNotFoundError("No KMS key configured (set AWS_KMS_KEY_ID)")

    return await create_kms_signer(
        key_id,
        client=get_custody_client(),
        signing_algorithm=settings.kms_signing_algorithm,
    )
