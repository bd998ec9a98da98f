"""Verification of the host platform's ``signed_payload`` token.

Format: ``<signature>.<data>``, both Base64 (standard or URL-safe alphabet,
padding optional). The signature is the raw HMAC-SHA256 of the *encoded*
data segment, keyed with the app's client secret.

Verification is fail-closed: anything that cannot be decoded or compared
counts as an invalid signature.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from typing import Any

from myrover_carrier.errors import SignatureInvalidError

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def _b64decode(segment: str) -> bytes:
    """Decode a Base64 segment in either alphabet, restoring padding.

    Raises:
        ValueError: on characters outside the alphabet or bad length.
    """
    normalized = segment.translate(_URLSAFE_TO_STANDARD)
    normalized += "=" * (-len(normalized) % 4)
    return base64.b64decode(normalized, validate=True)


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _split(signed_payload: str) -> tuple[str, str] | None:
    parts = signed_payload.split(".")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def verify(signed_payload: str, shared_secret: str) -> bool:
    """Check a signed payload against the shared secret.

    Args:
        signed_payload: ``signature.data`` string as sent by the platform.
        shared_secret: App client secret.

    Returns:
        True only if the HMAC of the data segment equals the signature.
        Never raises.
    """
    if not signed_payload or not shared_secret:
        return False

    parts = _split(signed_payload)
    if parts is None:
        return False
    signature_part, data_part = parts

    try:
        received = _b64decode(signature_part).hex()
        expected = hmac.new(
            shared_secret.encode("utf-8"),
            data_part.encode("ascii"),
            hashlib.sha256,
        ).hexdigest()
    except (binascii.Error, ValueError):
        return False

    return hmac.compare_digest(expected, received)


def sign(data: dict[str, Any], shared_secret: str) -> str:
    """Build a signed payload for ``data`` in the format ``verify`` accepts."""
    data_part = _b64encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))
    signature = hmac.new(
        shared_secret.encode("utf-8"),
        data_part.encode("ascii"),
        hashlib.sha256,
    ).digest()
    return f"{_b64encode(signature)}.{data_part}"


def decode_signed_payload(signed_payload: str, shared_secret: str) -> dict[str, Any]:
    """Verify the payload, then return its decoded JSON data.

    Raises:
        SignatureInvalidError: If verification fails or the data segment
            is not a Base64-encoded JSON object.
    """
    if not verify(signed_payload, shared_secret):
        raise SignatureInvalidError("Signed payload verification failed")

    _, data_part = signed_payload.split(".")
    try:
        data = json.loads(_b64decode(data_part))
    except (binascii.Error, ValueError) as exc:
        raise SignatureInvalidError("Signed payload data is not valid JSON") from exc

    if not isinstance(data, dict):
        raise SignatureInvalidError("Signed payload data is not a JSON object")
    return data


def tenant_id_from_payload(data: dict[str, Any]) -> str | None:
    """Extract the store hash from decoded payload data."""
    store_hash = data.get("store_hash")
    if isinstance(store_hash, str) and store_hash:
        return store_hash

    context = data.get("context")
    if isinstance(context, str) and context:
        tenant_id = context.removeprefix("stores/")
        return tenant_id or None
    return None
