"""Command line entry point.

    kms-signer public-key [--key-id KEY]
    kms-signer sign [--key-id KEY] MESSAGE_HEX
"""

import argparse
import asyncio
import logging
import sys

from kms_signer.base import SigningError
from kms_signer.config import get_settings
from kms_signer.factory import create_signer_from_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kms-signer",
        description="Sign ledger messages with an AWS KMS secp256k1 key",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    public_key = subparsers.add_parser("public-key", help="Show the KMS key's public key")
    public_key.add_argument("--key-id", help="KMS key ID (default: AWS_KMS_KEY_ID)")

    sign = subparsers.add_parser("sign", help="Sign a hex-encoded message")
    sign.add_argument("--key-id", help="KMS key ID (default: AWS_KMS_KEY_ID)")
    sign.add_argument("message", help="Message bytes as hex")

    return parser


async def run(args: argparse.Namespace) -> int:
    signer = await create_signer_from_settings(args.key_id)

    if args.command == "public-key":
        print(f"KMS Public Key: {signer.public_key.to_string_raw()}")
        print(f"DER: {signer.public_key.to_string_der()}")
        print(f"EVM address: {signer.public_key.to_evm_address()}")
        return 0

    message = bytes.fromhex(args.message.removeprefix("0x"))
    signature = await signer.sign(message)
    print(signature.hex())
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return asyncio.run(run(args))
    except SigningError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
