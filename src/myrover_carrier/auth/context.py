"""Tenant credential obtained from the OAuth install flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class TenantCredential:
    """Access token held for one store installation.

    Created by the authorization exchange; replaced on re-install,
    dropped on uninstall.
    """

    tenant_id: str
    access_token: str
    obtained_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    scope: str = ""
    user_id: int | None = None
    user_email: str | None = None
