"""
Tenant authorization gate.

Resolves a bearer token to a user via Supabase Auth, maps the user to a
tenant and rejects requests for any tenant other than that one. The
``admin`` tenant may act on behalf of every tenant.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from supabase import Client

from agenda.core.exceptions import Forbidden, Unauthenticated
from agenda.services.appointment_store import TenantStore

logger = logging.getLogger(__name__)

TENANT_CLAIM_KEYS = ("tenant_id", "cliente_id")


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str]
    tenant_id: str


@dataclass(frozen=True)
class TenantScope:
    tenant_id: str
    user_id: str
    acting_as_admin: bool = False


def _claim(metadata: Optional[Mapping[str, Any]], keys: Sequence[str]) -> Optional[str]:
    if not metadata:
        return None
    for key in keys:
        value = metadata.get(key)
        if value not in (None, ""):
            return str(value)
    return None


class TenantGate:
    def __init__(
        self,
        client: Client,
        tenants: TenantStore,
        admin_tenant_id: str = "admin",
        fallback_tenant_id: Optional[str] = None,
        claim_keys: Sequence[str] = TENANT_CLAIM_KEYS,
    ):
        self.client = client
        self.tenants = tenants
        self.admin_tenant_id = admin_tenant_id
        self.fallback_tenant_id = fallback_tenant_id
        self.claim_keys = claim_keys

    async def resolve_identity(self, token: Optional[str]) -> Identity:
        if not token:
            raise Unauthenticated("Token not provided")

        try:
            res = self.client.auth.get_user(token)
        except Exception as e:
            logger.info(f"Token verification failed: {e}")
            raise Unauthenticated("Invalid token")

        user = res.user if res else None
        if not user:
            raise Unauthenticated("Invalid token")

        tenant_id = self._resolve_tenant(user)
        return Identity(user_id=str(user.id), email=user.email, tenant_id=tenant_id)

    def _resolve_tenant(self, user) -> str:
        # 1. Server-controlled claims
        tenant_id = _claim(user.app_metadata, self.claim_keys)
        if tenant_id:
            return tenant_id

        # 2. User-to-tenant binding
        tenant_id = self.tenants.tenant_for_user(str(user.id))
        if tenant_id:
            return tenant_id

        # 3. Legacy user_metadata claim; user-editable, so it can never grant admin
        tenant_id = _claim(user.user_metadata, self.claim_keys)
        if tenant_id == self.admin_tenant_id:
            logger.warning(f"User {user.id} claims the admin tenant through user_metadata; ignored")
        elif tenant_id:
            return tenant_id

        # 4. Operator-configured fallback, off by default
        if self.fallback_tenant_id:
            logger.warning(
                f"User {user.id} has no tenant binding; using fallback tenant {self.fallback_tenant_id}"
            )
            return self.fallback_tenant_id

        logger.warning(f"User {user.id} has no tenant binding")
        raise Forbidden("User is not bound to a tenant")

    async def authorize(self, token: Optional[str], requested_tenant: str) -> TenantScope:
        identity = await self.resolve_identity(token)

        if identity.tenant_id == str(requested_tenant):
            return TenantScope(tenant_id=str(requested_tenant), user_id=identity.user_id)

        if identity.tenant_id == self.admin_tenant_id:
            logger.warning(f"Admin user {identity.user_id} acting on tenant {requested_tenant}")
            return TenantScope(tenant_id=str(requested_tenant), user_id=identity.user_id, acting_as_admin=True)

        logger.warning(
            f"Tenant mismatch for user {identity.user_id}: token tenant {identity.tenant_id}, "
            f"requested {requested_tenant}"
        )
        raise Forbidden("Access denied")
