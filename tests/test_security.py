import pytest
from jose import jwt

from tactjam.auth.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from tactjam.core.config import settings
from tactjam.core.exceptions import PermissionDeniedError


def test_password_hash_round_trip():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_verify_against_garbage_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_token_carries_user_id():
    token = create_access_token("user-123")
    assert decode_access_token(token) == "user-123"


def test_expired_token_is_rejected():
    token = create_access_token("user-123", expires_minutes=-1)
    with pytest.raises(PermissionDeniedError):
        decode_access_token(token)


def test_token_signed_with_another_key_is_rejected():
    token = jwt.encode({"sub": "user-123"}, "some-other-secret", algorithm="HS256")
    with pytest.raises(PermissionDeniedError):
        decode_access_token(token)


def test_token_without_subject_is_rejected():
    token = jwt.encode({"iat": 0}, settings.auth.secret_key, algorithm=settings.auth.algorithm)
    with pytest.raises(PermissionDeniedError):
        decode_access_token(token)
