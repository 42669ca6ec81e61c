"""Tests for bearer-token handling."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import timedelta

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from utils.auth import Principal, create_access_token, decode_token, get_current_principal

SECRET = "test-secret"


def test_round_trip_token():
    token = create_access_token("user-1", email="a@example.com", secret=SECRET)
    assert decode_token(token, secret=SECRET) == Principal(id="user-1", email="a@example.com")


def test_wrong_secret_rejected():
    token = create_access_token("user-1", secret=SECRET)
    assert decode_token(token, secret="other-secret") is None


def test_expired_token_rejected():
    token = create_access_token("user-1", expires_delta=timedelta(seconds=-5), secret=SECRET)
    assert decode_token(token, secret=SECRET) is None


def test_garbage_token_rejected():
    assert decode_token("not-a-jwt", secret=SECRET) is None
    assert decode_token("", secret=SECRET) is None


def test_missing_secret_rejects_everything(monkeypatch):
    from config.settings import settings

    monkeypatch.setattr(settings, "JWT_SECRET", "")
    token = create_access_token("user-1", secret=SECRET)
    assert decode_token(token) is None


@pytest.mark.asyncio
async def test_dependency_resolves_principal(monkeypatch):
    from config.settings import settings

    monkeypatch.setattr(settings, "JWT_SECRET", SECRET)
    token = create_access_token("user-9", secret=SECRET)
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

    assert (await get_current_principal(credentials)).id == "user-9"
    assert await get_current_principal(None) is None
