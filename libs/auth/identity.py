"""Admin role lookups against the identity provider.

Role freshness is an explicit policy (``ADMIN_ROLE_SOURCE``):

- ``claims``: trust the role embedded in the session token. No network call,
  but a revoked role stays valid until the token expires.
- ``provider``: read ``public_metadata.role`` from the provider's user API.
  Results are cached per user for ``ROLE_CACHE_TTL_SECONDS``; a TTL of 0
  re-fetches on every request.
"""

import time
from typing import Optional

import httpx
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

ADMIN_ROLE = "admin"

_DEFAULT_TIMEOUT = 10.0

# user_id -> (role, expires_at)
_role_cache: dict[str, tuple[Optional[str], float]] = {}


class IdentityProviderError(Exception):
    """Raised when the identity provider cannot be reached or rejects a call."""


def _headers() -> dict[str, str]:
    settings = get_settings()
    if not settings.IDENTITY_API_KEY:
        raise IdentityProviderError("IDENTITY_API_KEY is not configured")
    return {"Authorization": f"Bearer {settings.IDENTITY_API_KEY}"}


async def fetch_user_role(user_id: str) -> Optional[str]:
    """Fetch a user's role from the identity provider's user API."""
    settings = get_settings()
    url = f"{settings.IDENTITY_API_URL}/users/{user_id}"
    try:
        async with httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT) as client:
            response = await client.get(url, headers=_headers())
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise IdentityProviderError(f"Failed to fetch user {user_id}: {e}") from e

    data = response.json()
    public_metadata = data.get("public_metadata") or {}
    return public_metadata.get("role")


def invalidate_role(user_id: str) -> None:
    _role_cache.pop(user_id, None)


def clear_role_cache() -> None:
    _role_cache.clear()


async def resolve_role(user: AuthUser) -> Optional[str]:
    """Return the user's role according to the configured freshness policy."""
    settings = get_settings()
    if settings.ADMIN_ROLE_SOURCE == "claims":
        return user.claimed_role

    ttl = settings.ROLE_CACHE_TTL_SECONDS
    now = time.monotonic()
    if ttl > 0:
        cached = _role_cache.get(user.user_id)
        if cached and cached[1] > now:
            return cached[0]

    role = await fetch_user_role(user.user_id)
    if ttl > 0:
        _role_cache[user.user_id] = (role, now + ttl)
    return role


async def is_admin(user: AuthUser) -> bool:
    return await resolve_role(user) == ADMIN_ROLE


async def grant_admin_role(user_id: str) -> None:
    """Set ``public_metadata.role = "admin"`` on the provider's user record."""
    settings = get_settings()
    url = f"{settings.IDENTITY_API_URL}/users/{user_id}/metadata"
    try:
        async with httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT) as client:
            response = await client.patch(
                url,
                headers=_headers(),
                json={"public_metadata": {"role": ADMIN_ROLE}},
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise IdentityProviderError(f"Failed to grant admin to {user_id}: {e}") from e

    invalidate_role(user_id)
    logger.info("Granted admin role to user %s", user_id)
