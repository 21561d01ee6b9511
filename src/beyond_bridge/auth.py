"""
Bearer token acquisition for D&D Beyond.

Exchanges a long-lived cobalt session cookie for a short-lived bearer token
and keeps the token in a SessionCache. Lookups never raise: any failure is
logged and reported as ``None``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Callable

import httpx

from .cache import SessionCache
from .config import Settings
from .translators.base import AuthFailure

logger = logging.getLogger("beyond-bridge")


def cache_id(value: str) -> str:
    """Derive a stable cache id from a credential without storing it in clear text."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def is_embeddable(credential: str) -> bool:
    """Check that a credential can be embedded as a JSON string payload."""
    escaped = credential.replace('"', '\\"')
    try:
        payload = json.loads(f'{{ "cobalt": "{escaped}" }}')
    except ValueError:
        return False
    return isinstance(payload, dict)


class AuthBroker:
    """Exchanges cobalt credentials for bearer tokens, caching the result.

    Usage:
        broker = AuthBroker(SessionCache("AUTH", ttl_hours=0.08), settings)
        token = await broker.get_bearer_token("campaign-42", cobalt)
        if token is None:
            ...  # authentication failed, do not proceed
    """

    def __init__(
        self,
        cache: SessionCache,
        settings: Settings | None = None,
        client_factory: Callable[..., httpx.AsyncClient] | None = None,
    ) -> None:
        self.cache = cache
        self.settings = settings or Settings()
        self._client_factory = client_factory

    def _effective_credential(self, credential: str | None) -> str | None:
        if credential:
            return credential
        return self.settings.fallback_credential or None

    async def get_bearer_token(self, id: str, credential: str | None = None) -> str | None:
        """Return a bearer token for ``id``, or None if authentication failed.

        Args:
            id: Cache key for the token (e.g. a hashed credential or user id).
            credential: Cobalt session cookie. Falls back to the configured one.

        Returns:
            Bearer token string, or None.
        """
        effective = self._effective_credential(credential)
        if not effective:
            logger.warning("No cobalt credential provided and none configured")
            return None

        cached = self.cache.exists(id)
        if cached is not None:
            logger.debug(f"Bearer token cache hit for '{id}'")
            return cached.data

        if not is_embeddable(effective):
            logger.warning(f"Invalid credential format for '{id}'")
            return None

        logger.debug(f"Requesting bearer token for '{id}'")
        try:
            async with (self._client_factory or httpx.AsyncClient)() as client:
                response = await client.post(
                    self.settings.auth_url,
                    headers={
                        "Content-Type": "application/json",
                        "Cookie": f"CobaltSession={effective}",
                    },
                    timeout=self.settings.http_timeout,
                )

                if response.status_code < 200 or response.status_code >= 300:
                    logger.error(f"Auth service responded with HTTP {response.status_code}")
                    return None

                data = response.json()

        except httpx.HTTPError as e:
            logger.error(f"Auth service request failed: {e}")
            return None
        except ValueError as e:
            logger.error(f"Auth service returned an unreadable body: {e}")
            return None

        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            logger.warning("Invalid or empty token in auth service response")
            return None

        self.cache.add(id, token)
        logger.debug(f"Obtained bearer token for '{id}'")
        return token

    async def require_token(self, id: str, credential: str | None = None) -> str:
        """Like get_bearer_token() but raises AuthFailure instead of returning None."""
        token = await self.get_bearer_token(id, credential)
        if token is None:
            raise AuthFailure(
                "Could not authenticate with D&D Beyond. "
                "Check the cobalt cookie or set COBALT_COOKIE."
            )
        return token


__all__ = [
    "AuthBroker",
    "cache_id",
    "is_embeddable",
]
