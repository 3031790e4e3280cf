"""Tests for admin API authentication."""

import os
import sys
from types import SimpleNamespace

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from reservations.auth import require_admin_token


# ── Fixture: fake request carrying app settings ────────────────────

class FakeSettings:
    def __init__(self, admin_api_key="", debug=False):
        self.admin_api_key = admin_api_key
        self.debug = debug


def _request(**settings):
    state = SimpleNamespace(settings=FakeSettings(**settings))
    return SimpleNamespace(app=SimpleNamespace(state=state), url=SimpleNamespace(path="/api/sessions"))


def _bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestRequireAdminToken:
    """Test the require_admin_token dependency directly."""

    async def test_rejects_no_token_when_key_set(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(_request(admin_api_key="secret"), credentials=None)
        assert exc_info.value.status_code == 401

    async def test_rejects_wrong_token(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(_request(admin_api_key="secret"), credentials=_bearer("wrong"))
        assert exc_info.value.status_code == 401

    async def test_allows_correct_token(self):
        await require_admin_token(_request(admin_api_key="secret"), credentials=_bearer("secret"))

    async def test_allows_no_key_debug_mode(self):
        await require_admin_token(_request(admin_api_key="", debug=True), credentials=None)

    async def test_forbids_no_key_production(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(_request(admin_api_key="", debug=False), credentials=None)
        assert exc_info.value.status_code == 403

    async def test_challenge_header_on_401(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(_request(admin_api_key="secret"), credentials=None)
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    async def test_non_ascii_token_rejected_not_crashing(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(_request(admin_api_key="secret"), credentials=_bearer("sécret"))
        assert exc_info.value.status_code == 401
