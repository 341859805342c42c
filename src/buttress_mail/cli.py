"""Command-line entry point for composing and sending a single email record.

Reads an email record from a JSON file, composes the MIME message, and
either prints it (``--dry-run``) or dispatches it through the chosen
provider and prints the resulting delivery record as JSON.

Usage::

    python -m buttress_mail.cli --provider google --email email.json \\
        --access-token ya29... --refresh-token 1//...
    python -m buttress_mail.cli --provider microsoft --email email.json --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

import httpx
import structlog

from buttress_mail.config import Settings, get_settings
from buttress_mail.domain.errors import ButtressMailError
from buttress_mail.domain.types import Provider
from buttress_mail.mail.mailer import Mailer
from buttress_mail.mail.models import EmailRecord, OAuthTokens
from buttress_mail.mime.parts import to_string
from buttress_mail.observability.logs import configure_logging
from buttress_mail.providers import create_transport, provider_credentials

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the send command.

    Returns:
        A configured :class:`argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(description="Compose and send a Buttress email record")

    parser.add_argument(
        "--provider",
        type=str,
        choices=[p.value for p in Provider],
        required=True,
        help="Mail provider to dispatch through",
    )
    parser.add_argument(
        "--email",
        type=str,
        required=True,
        help="Path to a JSON email record",
    )
    parser.add_argument(
        "--access-token",
        type=str,
        default="",
        help="Sender OAuth access token",
    )
    parser.add_argument(
        "--refresh-token",
        type=str,
        default=None,
        help="Sender OAuth refresh token (enables recovery from expiry)",
    )
    parser.add_argument(
        "--debug-redirect",
        action="store_true",
        help="Redirect the message to DEVELOPMENT_EMAIL_ADDRESS",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the composed MIME message instead of sending it",
    )

    return parser


def load_email(path: Path) -> EmailRecord:
    """Load and validate an email record from a JSON file."""
    with path.open(encoding="utf-8") as f:
        return EmailRecord.model_validate(json.load(f))


async def run(args: argparse.Namespace, settings: Settings) -> str:
    """Execute the command described by *args* and return the text to print."""
    provider = Provider(args.provider)
    email = load_email(Path(args.email))
    debug_redirect = args.debug_redirect or settings.debug_redirect_all

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        mailer = Mailer(create_transport(provider, client), settings)

        if args.dry_run:
            message = await mailer.compose(email, debug_redirect)
            return to_string(message)

        if not args.access_token:
            raise ButtressMailError("--access-token is required unless --dry-run is given")

        tokens = OAuthTokens(access_token=args.access_token, refresh_token=args.refresh_token)
        record = await mailer.send(
            email, provider_credentials(settings, provider), tokens, debug_redirect
        )
        return record.model_dump_json(indent=2)


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the command, and print its output."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(production=settings.production)

    try:
        output = asyncio.run(run(args, settings))
    except ButtressMailError as exc:
        logger.error("send_failed", error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
