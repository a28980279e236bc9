"""
Tests for password hashing and session token helpers.
"""

import pytest
from datetime import datetime, timedelta, timezone

import jwt

from novaplayer.security import (
    SessionTokenError,
    decode_session_token,
    encode_session_token,
    generate_reset_token,
    generate_verification_code,
    hash_password,
    verify_password,
)

SECRET = 'unit-test-secret'


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password('password123', rounds=4)
        assert hashed.startswith('$2')
        assert verify_password('password123', hashed) is True
        assert verify_password('password124', hashed) is False

    def test_no_hash(self):
        assert verify_password('anything', None) is False

    def test_malformed_hash(self):
        assert verify_password('anything', 'not-a-bcrypt-hash') is False


class TestSessionTokens:

    def test_round_trip(self):
        token = encode_session_token(42, 'a@example.com', SECRET)

        claims = decode_session_token(token, SECRET)

        assert claims['sub'] == '42'
        assert claims['user_id'] == 42
        assert claims['email'] == 'a@example.com'
        assert claims['exp'] - claims['iat'] == 3600

    def test_expired(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = encode_session_token(1, None, SECRET, now=past)
        with pytest.raises(SessionTokenError, match='expired'):
            decode_session_token(token, SECRET)

    def test_wrong_secret(self):
        token = encode_session_token(1, None, SECRET)
        with pytest.raises(SessionTokenError, match='Invalid'):
            decode_session_token(token, 'other-secret')

    def test_missing(self):
        with pytest.raises(SessionTokenError, match='Missing'):
            decode_session_token('', SECRET)

    def test_non_numeric_subject(self):
        token = jwt.encode(
            {'sub': 'abc', 'exp': datetime.now(timezone.utc) + timedelta(hours=1)},
            SECRET,
            algorithm='HS256',
        )
        with pytest.raises(SessionTokenError, match='subject'):
            decode_session_token(token, SECRET)


class TestRandomValues:

    def test_verification_code(self):
        code = generate_verification_code()
        assert len(code) == 6
        assert code.isdigit()

    def test_reset_tokens_are_unique(self):
        assert generate_reset_token() != generate_reset_token()
