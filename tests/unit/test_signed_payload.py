"""Tests for signed_payload verification."""

import base64
import hashlib
import hmac

import pytest

from myrover_carrier.auth.signed_payload import (
    decode_signed_payload,
    sign,
    tenant_id_from_payload,
    verify,
)
from myrover_carrier.errors import SignatureInvalidError

SECRET = "s3cret"
# base64url('{"store_hash":"abc123"}') and base64(HMAC-SHA256(SECRET, DATA)),
# computed independently with openssl.
DATA = "eyJzdG9yZV9oYXNoIjoiYWJjMTIzIn0"
SIG_STANDARD = "OZdc6jpXcvqFvfPigdCGUIIWyGwVkwg+kgWiTXYxqs8="
SIG_URLSAFE = "OZdc6jpXcvqFvfPigdCGUIIWyGwVkwg-kgWiTXYxqs8"
EXPECTED_HEX = "39975cea3a5772fa85bdf3e281d086508216c86c1593083e9205a24d7631aacf"


def _signed_raw(raw_data: bytes) -> str:
    """Validly sign an arbitrary (possibly non-JSON) data segment."""
    data_part = base64.urlsafe_b64encode(raw_data).decode().rstrip("=")
    raw = hmac.new(SECRET.encode(), data_part.encode(), hashlib.sha256).digest()
    sig = base64.urlsafe_b64encode(raw).decode().rstrip("=")
    return f"{sig}.{data_part}"


class TestVerify:
    def test_known_payload_standard_alphabet(self) -> None:
        """Hand-computed signature in +/ alphabet with padding verifies."""
        assert verify(f"{SIG_STANDARD}.{DATA}", SECRET) is True

    def test_known_payload_urlsafe_alphabet(self) -> None:
        """Same signature in -_ alphabet without padding verifies."""
        assert verify(f"{SIG_URLSAFE}.{DATA}", SECRET) is True

    def test_signature_decodes_to_expected_hex(self) -> None:
        assert base64.b64decode(SIG_STANDARD).hex() == EXPECTED_HEX

    def test_wrong_secret(self) -> None:
        assert verify(f"{SIG_STANDARD}.{DATA}", "other") is False

    def test_tampered_data(self) -> None:
        tampered = DATA[:-1] + ("A" if DATA[-1] != "A" else "B")
        assert verify(f"{SIG_STANDARD}.{tampered}", SECRET) is False

    def test_hmac_over_encoded_segment_not_decoded_json(self) -> None:
        """Signing the decoded JSON instead of the encoded segment is rejected."""
        raw = hmac.new(
            SECRET.encode(), b'{"store_hash":"abc123"}', hashlib.sha256
        ).digest()
        sig = base64.b64encode(raw).decode()
        assert verify(f"{sig}.{DATA}", SECRET) is False

    @pytest.mark.parametrize(
        "payload",
        [
            "",
            "no-dot-at-all",
            f".{DATA}",
            f"{SIG_STANDARD}.",
            f"{SIG_STANDARD}.{DATA}.extra",
            f"!!!notbase64!!!.{DATA}",
            f"A.{DATA}",
            f"{SIG_STANDARD}.dätä",
        ],
    )
    def test_malformed_returns_false(self, payload: str) -> None:
        """Malformed payloads fail closed without raising."""
        assert verify(payload, SECRET) is False

    def test_empty_secret(self) -> None:
        assert verify(f"{SIG_STANDARD}.{DATA}", "") is False


class TestSign:
    def test_sign_matches_known_payload(self) -> None:
        assert sign({"store_hash": "abc123"}, SECRET) == f"{SIG_URLSAFE}.{DATA}"

    def test_sign_then_verify(self) -> None:
        payload = sign({"context": "stores/xyz", "user": {"id": 1}}, SECRET)
        assert verify(payload, SECRET) is True


class TestDecodeSignedPayload:
    def test_returns_data(self) -> None:
        data = decode_signed_payload(f"{SIG_STANDARD}.{DATA}", SECRET)
        assert data == {"store_hash": "abc123"}

    def test_invalid_signature_raises(self) -> None:
        with pytest.raises(SignatureInvalidError):
            decode_signed_payload(f"{SIG_STANDARD}.{DATA}", "wrong")

    def test_non_json_data_raises(self) -> None:
        with pytest.raises(SignatureInvalidError):
            decode_signed_payload(_signed_raw(b"not json"), SECRET)

    def test_non_object_json_raises(self) -> None:
        with pytest.raises(SignatureInvalidError):
            decode_signed_payload(_signed_raw(b"[1,2]"), SECRET)


class TestTenantIdFromPayload:
    def test_store_hash(self) -> None:
        assert tenant_id_from_payload({"store_hash": "abc"}) == "abc"

    def test_context_fallback(self) -> None:
        assert tenant_id_from_payload({"context": "stores/xyz"}) == "xyz"

    def test_missing(self) -> None:
        assert tenant_id_from_payload({"user": {"id": 1}}) is None

    def test_empty_context(self) -> None:
        assert tenant_id_from_payload({"context": "stores/"}) is None
