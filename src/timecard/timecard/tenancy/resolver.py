from __future__ import annotations

from typing import Mapping, Optional, Protocol

from ..core.exceptions import NotFound


class TenantResolver(Protocol):
    def resolve(self, tenant_key: Optional[str]) -> str:
        """Physical database name for a tenant identity."""

        raise NotImplementedError


class StaticTenantResolver:
    """Resolves tenants from a fixed mapping, e.g. the TENANT_DATABASES setting."""

    def __init__(self, mapping: Mapping[str, str], *, default: Optional[str] = None):
        self._mapping = dict(mapping)
        self._default = default

    @property
    def databases(self) -> list[str]:
        names = list(self._mapping.values())
        if self._default:
            names.append(self._default)
        return list(dict.fromkeys(names))

    def resolve(self, tenant_key: Optional[str]) -> str:
        if tenant_key and tenant_key in self._mapping:
            return self._mapping[tenant_key]
        if tenant_key is None and self._default:
            return self._default
        raise NotFound(f"Unknown tenant {tenant_key!r}")


def parse_tenant_databases(raw: Optional[str]) -> dict[str, str]:
    """Parse ``"acme:acme_db,globex:globex_db"`` into a mapping."""
    mapping: dict[str, str] = {}
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, database = item.partition(":")
        if not sep or not key.strip() or not database.strip():
            raise ValueError(f"Invalid TENANT_DATABASES entry {item!r}, expected tenant:database")
        mapping[key.strip()] = database.strip()
    return mapping
