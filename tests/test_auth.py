"""Tests for bearer token acquisition."""

import pytest
from unittest.mock import AsyncMock, patch, MagicMock
import httpx

from beyond_bridge.auth import AuthBroker, cache_id, is_embeddable
from beyond_bridge.cache import SessionCache
from beyond_bridge.config import DEFAULT_AUTH_URL, Settings
from beyond_bridge.translators.base import AuthFailure


def _client_returning(mock_client_class, status_code=200, body=None):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = body

    mock_client = MagicMock()
    mock_client.post = AsyncMock(return_value=mock_response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client_class.return_value = mock_client
    return mock_client


class TestCredentialHelpers:
    """Test credential hashing and format checks."""

    def test_cache_id_is_stable_and_opaque(self):
        """The same credential always hashes to the same id, never itself."""
        assert cache_id("secret-cookie") == cache_id("secret-cookie")
        assert cache_id("secret-cookie") != cache_id("other-cookie")
        assert "secret-cookie" not in cache_id("secret-cookie")
        assert len(cache_id("x")) == 64

    def test_plain_cookie_is_embeddable(self):
        """Typical cookie values pass the format check."""
        assert is_embeddable("eyJhbGciOi.abc-123_DEF")

    def test_quotes_are_escaped(self):
        """Double quotes inside the cookie are escaped, not rejected."""
        assert is_embeddable('abc"def')

    def test_trailing_backslash_is_rejected(self):
        """A cookie that breaks the JSON payload is rejected."""
        assert not is_embeddable("abc\\")

    def test_control_character_is_rejected(self):
        """Raw control characters cannot be embedded."""
        assert not is_embeddable("abc\ndef")


class TestGetBearerToken:
    """Test AuthBroker.get_bearer_token()."""

    @pytest.mark.asyncio
    async def test_empty_credential_without_fallback_returns_none(self):
        """No credential and no configured fallback yields None without a request."""
        broker = AuthBroker(SessionCache("AUTH"), Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            token = await broker.get_bearer_token("campaign-1", "")

        assert token is None
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_successful_exchange(self):
        """A 200 response with a token returns and caches the token."""
        cache = SessionCache("AUTH")
        broker = AuthBroker(cache, Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client_returning(mock_client_class, body={"token": "bearer-abc", "ttl": 300})

            token = await broker.get_bearer_token("campaign-1", "cobalt-value")

        assert token == "bearer-abc"
        assert cache.get("campaign-1") == "bearer-abc"

        args, kwargs = mock_client.post.call_args
        assert args[0] == DEFAULT_AUTH_URL
        assert kwargs["headers"]["Cookie"] == "CobaltSession=cobalt-value"
        assert kwargs["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_second_call_uses_cache(self):
        """Two calls for the same id make a single network exchange."""
        broker = AuthBroker(SessionCache("AUTH"), Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client_returning(mock_client_class, body={"token": "bearer-abc"})

            first = await broker.get_bearer_token("campaign-1", "cobalt-value")
            second = await broker.get_bearer_token("campaign-1", "cobalt-value")

        assert first == second == "bearer-abc"
        assert mock_client.post.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, clock):
        """After the token TTL passes a new exchange is made."""
        broker = AuthBroker(SessionCache("AUTH", ttl_hours=0.08, clock=clock), Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client_returning(mock_client_class, body={"token": "bearer-abc"})

            await broker.get_bearer_token("campaign-1", "cobalt-value")
            clock.advance_hours(0.1)
            await broker.get_bearer_token("campaign-1", "cobalt-value")

        assert mock_client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_fallback_credential_is_used(self):
        """Without a caller credential the configured cookie is sent."""
        broker = AuthBroker(SessionCache("AUTH"), Settings(fallback_credential="env-cookie"))

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client_returning(mock_client_class, body={"token": "bearer-env"})

            token = await broker.get_bearer_token("default")

        assert token == "bearer-env"
        _, kwargs = mock_client.post.call_args
        assert kwargs["headers"]["Cookie"] == "CobaltSession=env-cookie"

    @pytest.mark.asyncio
    async def test_invalid_credential_format(self):
        """A credential that cannot be embedded is rejected before any request."""
        broker = AuthBroker(SessionCache("AUTH"), Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            token = await broker.get_bearer_token("campaign-1", "bad\\")

        assert token is None
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_2xx_returns_none(self):
        """An HTTP error status yields None and nothing is cached."""
        cache = SessionCache("AUTH")
        broker = AuthBroker(cache, Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            _client_returning(mock_client_class, status_code=401, body={"error": "unauthorized"})

            token = await broker.get_bearer_token("campaign-1", "cobalt-value")

        assert token is None
        assert cache.size == 0

    @pytest.mark.asyncio
    async def test_missing_token_returns_none(self):
        """A 200 response without a token yields None."""
        cache = SessionCache("AUTH")
        broker = AuthBroker(cache, Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            _client_returning(mock_client_class, body={"token": ""})

            token = await broker.get_bearer_token("campaign-1", "cobalt-value")

        assert token is None
        assert cache.size == 0

    @pytest.mark.asyncio
    async def test_network_error_returns_none(self):
        """Transport errors are swallowed into None."""
        broker = AuthBroker(SessionCache("AUTH"), Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = MagicMock()
            mock_client.post = AsyncMock(side_effect=httpx.ConnectError("Connection refused"))
            mock_client.__aenter__ = AsyncMock(return_value=mock_client)
            mock_client.__aexit__ = AsyncMock(return_value=None)
            mock_client_class.return_value = mock_client

            token = await broker.get_bearer_token("campaign-1", "cobalt-value")

        assert token is None

    @pytest.mark.asyncio
    async def test_unreadable_body_returns_none(self):
        """A body that is not JSON yields None."""
        broker = AuthBroker(SessionCache("AUTH"), Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client_returning(mock_client_class)
            mock_client.post.return_value.json.side_effect = ValueError("Expecting value")

            token = await broker.get_bearer_token("campaign-1", "cobalt-value")

        assert token is None

    @pytest.mark.asyncio
    async def test_custom_client_factory(self):
        """An injected client factory replaces httpx.AsyncClient."""
        mock_response = MagicMock()
        mock_response.status_code = 201
        mock_response.json.return_value = {"token": "bearer-injected"}
        mock_client = MagicMock()
        mock_client.post = AsyncMock(return_value=mock_response)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)

        broker = AuthBroker(SessionCache("AUTH"), Settings(), client_factory=lambda: mock_client)

        assert await broker.get_bearer_token("x", "cobalt-value") == "bearer-injected"


class TestRequireToken:
    """Test the raising variant used by batch runs."""

    @pytest.mark.asyncio
    async def test_require_token_raises(self):
        """require_token() raises AuthFailure when no token is available."""
        broker = AuthBroker(SessionCache("AUTH"), Settings())

        with pytest.raises(AuthFailure) as exc_info:
            await broker.require_token("campaign-1")

        assert "cobalt" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_require_token_returns_cached(self):
        """A cached token is returned without a request."""
        cache = SessionCache("AUTH")
        cache.add("campaign-1", "bearer-cached")
        broker = AuthBroker(cache, Settings())

        with patch("httpx.AsyncClient") as mock_client_class:
            token = await broker.require_token("campaign-1", "cobalt-value")

        assert token == "bearer-cached"
        mock_client_class.assert_not_called()
