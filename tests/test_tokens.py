from datetime import datetime, timedelta, timezone

import jwt
import pytest

from gym_access.services.auth import (
    TokenExpired,
    TokenInvalid,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_create_and_decode_token():
    issued_at = datetime.now(timezone.utc).replace(microsecond=0)
    token, data = create_access_token(
        "user-42",
        "member",
        issued_at=issued_at,
        ttl_hours=24,
        secret="test-secret",
        algorithm="HS256",
    )

    decoded = decode_access_token(token, secret="test-secret", algorithm="HS256")

    assert decoded.subject == "user-42"
    assert decoded.role == "member"
    assert decoded.issued_at == issued_at
    assert decoded.expires_at == issued_at + timedelta(hours=24)
    assert data.expires_at == decoded.expires_at


def test_decode_expired_token():
    issued_at = datetime.now(timezone.utc) - timedelta(hours=25)
    token, _ = create_access_token(
        "user-42",
        "member",
        issued_at=issued_at,
        ttl_hours=24,
        secret="test-secret",
        algorithm="HS256",
    )

    with pytest.raises(TokenExpired):
        decode_access_token(token, secret="test-secret", algorithm="HS256")


def test_decode_invalid_token():
    token, _ = create_access_token(
        "1",
        "admin",
        issued_at=datetime.now(timezone.utc),
        ttl_hours=24,
        secret="test-secret",
        algorithm="HS256",
    )

    with pytest.raises(TokenInvalid):
        decode_access_token(token, secret="wrong-secret", algorithm="HS256")


def test_decode_rejects_unknown_role():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "1", "role": "trainer", "iat": int(now.timestamp()), "exp": int((now + timedelta(hours=1)).timestamp())},
        "test-secret",
        algorithm="HS256",
    )

    with pytest.raises(TokenInvalid):
        decode_access_token(token, secret="test-secret", algorithm="HS256")


def test_password_hashing():
    hashed = hash_password("correct horse")

    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed) is True
    assert verify_password("wrong horse", hashed) is False
    assert verify_password("correct horse", "not-a-bcrypt-hash") is False
