"""Application configuration using pydantic-settings.

Credentials and key selection for the AWS KMS custody service.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # AWS KMS
    # ======================
    aws_kms_access_key_id: Optional[str] = Field(
        default=None, description="AWS access key ID (falls back to the boto3 credential chain)"
    )
    aws_kms_secret_access_key: Optional[str] = Field(
        default=None, description="AWS secret access key"
    )
    aws_kms_region: Optional[str] = Field(default=None, description="AWS region of the KMS key")
    aws_kms_key_id: Optional[str] = Field(
        default=None, description="KMS key ID, ARN or alias (ECC_SECG_P256K1)"
    )
    kms_endpoint_url: Optional[str] = Field(
        default=None, description="Alternative KMS endpoint (e.g. local emulator)"
    )
    kms_signing_algorithm: str = Field(
        default="ECDSA_SHA_256", description="KMS SigningAlgorithm sent with digest sign requests"
    )

    # ======================
    # Environment
    # ======================
    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def has_credentials(self) -> bool:
        """Check if explicit AWS credentials are configured."""
        return bool(self.aws_kms_access_key_id and self.aws_kms_secret_access_key)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "aws_kms_region": self.aws_kms_region or "(default)",
            "aws_kms_key_id": self.aws_kms_key_id or "(not set)",
            "aws_kms_access_key_id": "***" if self.aws_kms_access_key_id else "(not set)",
            "aws_kms_secret_access_key": "***" if self.aws_kms_secret_access_key else "(not set)",
            "kms_endpoint_url": self.kms_endpoint_url or "(default)",
            "kms_signing_algorithm": self.kms_signing_algorithm,
            "debug": self.debug,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
