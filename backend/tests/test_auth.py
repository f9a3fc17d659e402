"""
Tests for internal API key authentication.

Tests: api_key_matches, require_internal_api_key
"""
import pytest
from fastapi import HTTPException
from unittest.mock import MagicMock

from middleware.auth import api_key_matches, require_internal_api_key
from tests.conftest import INTERNAL_API_KEY


def _request():
    request = MagicMock()
    request.client.host = "127.0.0.1"
    request.url.path = "/api/create-checkout"
    return request


class TestApiKeyMatches:

    @pytest.mark.unit
    def test_exact_match(self):
        assert api_key_matches("secret", "secret") is True

    @pytest.mark.unit
    @pytest.mark.parametrize("provided", [None, "", "Secret", "secret ", "other"])
    def test_mismatch(self, provided):
        assert api_key_matches(provided, "secret") is False

    @pytest.mark.unit
    def test_empty_expected_never_matches(self):
        assert api_key_matches("", "") is False


class TestRequireInternalApiKey:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_valid_key_passes(self, settings):
        await require_internal_api_key(_request(), x_api_key=INTERNAL_API_KEY, settings=settings)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_key_raises_401(self, settings):
        with pytest.raises(HTTPException) as exc_info:
            await require_internal_api_key(_request(), x_api_key=None, settings=settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "UNAUTHORIZED"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_wrong_key_raises_401(self, settings):
        with pytest.raises(HTTPException) as exc_info:
            await require_internal_api_key(_request(), x_api_key="nope", settings=settings)
        assert exc_info.value.status_code == 401
