"""Tenant credential storage.

Handlers depend on the ``CredentialStore`` protocol only. The in-memory
implementation is the default; a persistent backend can be dropped in
behind the same three methods.
"""

from __future__ import annotations

from threading import Lock
from typing import Protocol

from myrover_carrier.auth.context import TenantCredential


class CredentialStore(Protocol):
    """Key-value store of credentials keyed by tenant id (store hash)."""

    def get(self, tenant_id: str) -> TenantCredential | None: ...

    def set(self, tenant_id: str, credential: TenantCredential) -> None: ...

    def delete(self, tenant_id: str) -> bool: ...


class InMemoryCredentialStore:
    """Process-local credential table.

    Thread-safe via Lock. Contents are lost on restart.
    """

    def __init__(self) -> None:
        self._credentials: dict[str, TenantCredential] = {}
        self._lock = Lock()

    def get(self, tenant_id: str) -> TenantCredential | None:
        with self._lock:
            return self._credentials.get(tenant_id)

    def set(self, tenant_id: str, credential: TenantCredential) -> None:
        """Store credential, replacing any previous one (last write wins)."""
        with self._lock:
            self._credentials[tenant_id] = credential

    def delete(self, tenant_id: str) -> bool:
        """Remove credential.

        Returns:
            True if a credential was present.
        """
        with self._lock:
            return self._credentials.pop(tenant_id, None) is not None

    def __contains__(self, tenant_id: object) -> bool:
        with self._lock:
            return tenant_id in self._credentials

    def __len__(self) -> int:
        with self._lock:
            return len(self._credentials)
