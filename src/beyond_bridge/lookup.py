"""
Provider configuration lookup.

The D&D Beyond configuration document lists source books and other reference
tables. It changes rarely, so it is served from a SessionCache for an hour.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from .cache import SessionCache
from .config import Settings

logger = logging.getLogger("beyond-bridge")

CONFIG_CACHE_KEY = "DDB_CONFIG"


class ConfigBroker:
    """Fetches and caches the provider configuration document."""

    def __init__(
        self,
        cache: SessionCache,
        settings: Settings | None = None,
        client_factory: Callable[..., httpx.AsyncClient] | None = None,
    ) -> None:
        self.cache = cache
        self.settings = settings or Settings()
        self._client_factory = client_factory

    async def get_config(self) -> dict[str, Any] | None:
        """
        Return the provider configuration document.

        Only documents carrying a ``sources`` key are accepted and cached.

        Returns:
            Configuration dictionary, or None if it could not be retrieved.
        """
        cached = self.cache.exists(CONFIG_CACHE_KEY)
        if cached is not None:
            logger.debug("Provider config served from cache")
            return cached.data

        logger.debug(f"Retrieving provider config from {self.settings.config_url}")
        try:
            async with (self._client_factory or httpx.AsyncClient)() as client:
                response = await client.get(
                    self.settings.config_url,
                    headers={"Accept": "*/*"},
                    timeout=self.settings.http_timeout,
                    follow_redirects=True,
                )
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            logger.warning(f"Provider config request returned HTTP {e.response.status_code}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Failed to retrieve provider config: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Provider config is not valid JSON: {e}")
            return None

        if not isinstance(data, dict) or not data.get("sources"):
            logger.warning("Received no valid provider config data (missing 'sources')")
            return None

        self.cache.add(CONFIG_CACHE_KEY, data)
        return data


def source_names(config: dict[str, Any] | None) -> dict[int, str]:
    """Map the config's ``sources`` list to ``{id: name}``.

    Entries without an integer id or a name are skipped.
    """
    names: dict[int, str] = {}
    if not config:
        return names

    for source in config.get("sources") or []:
        if not isinstance(source, dict):
            continue
        source_id = source.get("id")
        name = source.get("name") or source.get("description")
        if isinstance(source_id, int) and name:
            names[source_id] = str(name)
    return names


__all__ = [
    "ConfigBroker",
    "CONFIG_CACHE_KEY",
    "source_names",
]
