"""Bearer-token identity and role checks.

Tokens are verified by Supabase Auth. Roles come from the stored profile
(``user:{id}``), falling back to the identity's user metadata.
"""
import logging
from dataclasses import dataclass, field
from typing import Protocol

from supabase import AsyncClient, AuthError, acreate_client

from config import settings
from errors import BadRequest, Forbidden, ServiceUnavailable

logger = logging.getLogger(__name__)

STUDENT_ROLE = "student"
TEACHER_ROLE = "teacher"
ROLES = (STUDENT_ROLE, TEACHER_ROLE)


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def role(self) -> str:
        role = self.metadata.get("role")
        return role if role in ROLES else STUDENT_ROLE

    @property
    def name(self) -> str | None:
        return self.metadata.get("name")


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str | None
    name: str | None = None


def require_role(caller: Caller | None, role: str = TEACHER_ROLE) -> Caller:
    """Single guard for privileged operations."""
    if caller is None or caller.role != role:
        raise Forbidden()
    return caller


def extract_bearer_token(header: str | None) -> str | None:
    if not header:
        return None
    token = header[7:] if header.startswith("Bearer ") else header
    return token.strip() or None


class IdentityProvider(Protocol):
    async def resolve_token(self, token: str) -> Identity | None: ...

    async def create_user(self, email: str, password: str, name: str, role: str) -> Identity: ...


def _identity_from_user(user) -> Identity:
    return Identity(
        user_id=user.id,
        email=getattr(user, "email", None),
        metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


class SupabaseIdentityProvider:
    """Identity provider backed by Supabase Auth.

    The anon-key client verifies access tokens; the service-role client is
    only needed to create accounts.
    """

    def __init__(self, url: str, anon_key: str, service_role_key: str = ""):
        self.url = url
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self._anon_client: AsyncClient | None = None
        self._admin_client: AsyncClient | None = None

    async def _client(self, admin: bool = False) -> AsyncClient:
        if admin:
            if not self.url or not self.service_role_key:
                raise ServiceUnavailable("SUPABASE_SERVICE_ROLE_KEY is not configured")
            if self._admin_client is None:
                self._admin_client = await acreate_client(self.url, self.service_role_key)
            return self._admin_client

        if not self.url or not self.anon_key:
            raise ServiceUnavailable("SUPABASE_URL / SUPABASE_ANON_KEY are not configured")
        if self._anon_client is None:
            self._anon_client = await acreate_client(self.url, self.anon_key)
        return self._anon_client

    async def resolve_token(self, token: str) -> Identity | None:
        client = await self._client()
        try:
            response = await client.auth.get_user(token)
        except AuthError as e:
            logger.warning("Rejected access token: %s", e)
            return None
        if response is None or response.user is None:
            return None
        return _identity_from_user(response.user)

    async def create_user(self, email: str, password: str, name: str, role: str) -> Identity:
        client = await self._client(admin=True)
        try:
            response = await client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "user_metadata": {"name": name, "role": role},
                    "email_confirm": True,
                }
            )
        except AuthError as e:
            logger.info("Signup rejected for %s: %s", email, e)
            raise BadRequest(e.message) from e
        return _identity_from_user(response.user)


identity_provider = SupabaseIdentityProvider(
    settings.SUPABASE_URL,
    settings.SUPABASE_ANON_KEY,
    settings.SUPABASE_SERVICE_ROLE_KEY,
)


def get_identity_provider() -> IdentityProvider:
    return identity_provider
