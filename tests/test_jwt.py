from datetime import timedelta

import jwt
import pytest

from storyboard_api.utils.jwt import create_access_token, decode_access_token


def test_round_trip_keeps_subject():
    token = create_access_token({"sub": "user-42"})
    payload = decode_access_token(token)

    assert payload["sub"] == "user-42"
    assert payload["exp"] > payload["iat"]


def test_expired_token_rejected():
    token = create_access_token({"sub": "user-42"}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)


def test_tampered_token_rejected():
    token = create_access_token({"sub": "user-42"})
    forged = jwt.encode({"sub": "user-42"}, "a-different-signing-secret-for-tests", algorithm="HS256")

    assert token != forged
    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(forged)
