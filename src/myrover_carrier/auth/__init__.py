"""OAuth install flow and signed-payload verification."""

from myrover_carrier.auth.context import TenantCredential
from myrover_carrier.auth.exchange import AuthorizationExchanger, tenant_id_from_context
from myrover_carrier.auth.signed_payload import decode_signed_payload, sign, verify

__all__ = [
    "AuthorizationExchanger",
    "TenantCredential",
    "decode_signed_payload",
    "sign",
    "tenant_id_from_context",
    "verify",
]
