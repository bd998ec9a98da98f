"""CLI for producing and checking ``signed_payload`` values locally.

Usage::

    uv run python -m scripts.signed_payload <command> [options]

Commands:
    sign        Print a signed payload for a store hash
    verify      Check a signed payload and print its data

The secret defaults to BC_CLIENT_SECRET from the environment / .env.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable

from myrover_carrier.auth.signed_payload import decode_signed_payload, sign
from myrover_carrier.config import settings
from myrover_carrier.errors import SignatureInvalidError


def _secret(args: argparse.Namespace) -> str:
    secret: str = args.secret or settings.shared_secret
    if not secret:
        print("No secret: pass --secret or set BC_CLIENT_SECRET", file=sys.stderr)
        sys.exit(1)
    return secret


def sign_payload(args: argparse.Namespace) -> None:
    """Print a signed payload for the given store."""
    data: dict[str, object] = {"store_hash": args.store_hash}
    if args.user_id is not None:
        data["user"] = {"id": args.user_id}
    print(sign(data, _secret(args)))


def verify_payload(args: argparse.Namespace) -> None:
    """Print the decoded data, or exit 1 if verification fails."""
    try:
        data = decode_signed_payload(args.payload, _secret(args))
    except SignatureInvalidError as exc:
        print(f"Invalid: {exc}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(data, indent=2))


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and dispatch to the command handler."""
    parser = argparse.ArgumentParser(description="Signed payload helper")
    parser.add_argument("--secret", default="", help="Shared secret override")
    sub = parser.add_subparsers(dest="command", required=True)

    p_sign = sub.add_parser("sign", help="Sign a payload for a store")
    p_sign.add_argument("store_hash", help="Store hash, e.g. abc123")
    p_sign.add_argument("--user-id", type=int, default=None, help="Owner user id")

    p_verify = sub.add_parser("verify", help="Verify a signed payload")
    p_verify.add_argument("payload", help="signature.data string")

    args = parser.parse_args(argv)

    commands: dict[str, Callable[[argparse.Namespace], None]] = {
        "sign": sign_payload,
        "verify": verify_payload,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
