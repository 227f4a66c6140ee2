"""
Tests for access-token verification and trigger secrets.
"""
from datetime import timedelta

from app.core.security import decode_access_token, secrets_match
from app.tests.support import make_token


def test_decode_valid_token():
    payload = decode_access_token(make_token("user-a", "ana@example.com"))
    assert payload["sub"] == "user-a"
    assert payload["email"] == "ana@example.com"


def test_decode_rejects_expired_token():
    assert decode_access_token(make_token("user-a", "ana@example.com", expires_in=timedelta(minutes=-5))) is None


def test_decode_rejects_wrong_secret():
    assert decode_access_token(make_token("user-a", "ana@example.com", secret="other")) is None


def test_decode_rejects_wrong_audience():
    assert decode_access_token(make_token("user-a", "ana@example.com", aud="anon")) is None


def test_secrets_match():
    assert secrets_match("s3cret", "s3cret")
    assert not secrets_match("s3cret", "other")
    assert not secrets_match(None, "s3cret")
    assert not secrets_match("", "")
