"""
Tests for token issuing and verification.
"""
import time
from datetime import timedelta

import jwt
import pytest

from leafbase.auth.errors import InvalidSignatureError, MalformedTokenError, TokenExpiredError
from leafbase.auth.jwt import TokenIssuer
from leafbase.tests.conftest import TEST_SECRET


def _tamper_signature(token: str) -> str:
    header, payload, signature = token.split(".")
    # A middle character always maps to real signature bits
    i = len(signature) // 2
    replacement = "A" if signature[i] != "A" else "B"
    return ".".join([header, payload, signature[:i] + replacement + signature[i + 1:]])


def test_issue_and_verify(issuer):
    token = issuer.issue(42)
    assert token.token_type == "bearer"

    data = issuer.verify(token.access_token)
    assert data.user_id == 42
    assert data.expires_at - data.issued_at == 3600
    assert data.expires_at == token.expires_at


def test_claims_are_standard(issuer):
    token = issuer.issue(7, ttl=timedelta(minutes=5))
    payload = jwt.decode(token.access_token, TEST_SECRET, algorithms=["HS256"])
    assert payload["sub"] == "7"
    assert payload["exp"] - payload["iat"] == 300


def test_zero_ttl_is_expired(issuer):
    token = issuer.issue(1, ttl=timedelta(0))
    with pytest.raises(TokenExpiredError):
        issuer.verify(token.access_token)


def test_token_expires_after_ttl():
    past = time.time() - 7200
    old_issuer = TokenIssuer(secret_key=TEST_SECRET, clock=lambda: past)
    token = old_issuer.issue(1, ttl=timedelta(hours=1))

    with pytest.raises(TokenExpiredError):
        TokenIssuer(secret_key=TEST_SECRET).verify(token.access_token)


def test_tampered_signature(issuer):
    token = issuer.issue(1)
    with pytest.raises(InvalidSignatureError):
        issuer.verify(_tamper_signature(token.access_token))


def test_rotated_key_rejects_old_tokens(issuer):
    token = issuer.issue(1)
    rotated = TokenIssuer(secret_key=TEST_SECRET + "-rotated")
    with pytest.raises(InvalidSignatureError):
        rotated.verify(token.access_token)


def test_tampered_payload_fails_signature(issuer):
    token = issuer.issue(1)
    other = issuer.issue(2)
    header, _, signature = token.access_token.split(".")
    forged = ".".join([header, other.access_token.split(".")[1], signature])
    with pytest.raises(InvalidSignatureError):
        issuer.verify(forged)


@pytest.mark.parametrize("bad_token", ["", "not-a-token", "a.b.c", "invalid.token.here"])
def test_malformed_token(issuer, bad_token):
    with pytest.raises(MalformedTokenError):
        issuer.verify(bad_token)


def test_missing_claims_are_malformed(issuer):
    token = jwt.encode({"sub": "1"}, TEST_SECRET, algorithm="HS256")
    with pytest.raises(MalformedTokenError):
        issuer.verify(token)


def test_non_numeric_subject_is_malformed(issuer):
    now = int(time.time())
    token = jwt.encode({"sub": "alice", "iat": now, "exp": now + 60}, TEST_SECRET, algorithm="HS256")
    with pytest.raises(MalformedTokenError):
        issuer.verify(token)


def test_algorithm_none_rejected(issuer):
    now = int(time.time())
    token = jwt.encode({"sub": "1", "iat": now, "exp": now + 60}, None, algorithm="none")
    with pytest.raises((MalformedTokenError, InvalidSignatureError)):
        issuer.verify(token)


def test_fractional_timestamps_accepted(issuer):
    now = time.time()
    token = jwt.encode({"sub": "1", "iat": now - 1.5, "exp": now + 60.5}, TEST_SECRET, algorithm="HS256")
    data = issuer.verify(token)
    assert data.user_id == 1
    assert data.expires_at == int(now + 60.5)
    assert data.issued_at == int(now - 1.5)
