"""Tests for auth utility functions."""
import pytest
from datetime import timedelta


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_password_is_salted_bcrypt(self):
        """Hashes are bcrypt and differ between calls."""
        from app.utils.auth import hash_password

        hashed = hash_password("mysecretpassword123")

        assert hashed.startswith("$2b$")
        assert hashed != hash_password("mysecretpassword123")

    def test_verify_password(self):
        """Only the original password verifies."""
        from app.utils.auth import hash_password, verify_password

        hashed = hash_password("mysecretpassword123")

        assert verify_password("mysecretpassword123", hashed) is True
        assert verify_password("wrongpassword", hashed) is False
        assert verify_password("", hashed) is False


class TestJWTTokens:
    """Tests for JWT token functions."""

    def test_verify_returns_integer_user_id(self):
        """The subject round-trips as the integer user id."""
        from app.utils.auth import create_access_token, verify_access_token

        token = create_access_token(user_id=42)

        assert verify_access_token(token) == 42

    def test_subject_claim_is_string(self):
        """JWT subjects are strings on the wire."""
        from app.utils.auth import create_access_token
        from jose import jwt
        from app.config import settings

        token = create_access_token(user_id=7)
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])

        assert payload["sub"] == "7"
        assert "exp" in payload

    def test_verify_access_token_invalid(self):
        """Garbage tokens are rejected."""
        from app.utils.auth import verify_access_token
        from jose import JWTError

        with pytest.raises(JWTError):
            verify_access_token("invalid.token.here")

    def test_verify_access_token_expired(self):
        """Expired tokens are rejected."""
        from app.utils.auth import create_access_token, verify_access_token
        from jose import JWTError

        token = create_access_token(user_id=1, expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            verify_access_token(token)

    def test_non_numeric_subject_rejected(self):
        """A token whose subject is not a user id is invalid."""
        from app.utils.auth import verify_access_token
        from app.config import settings
        from jose import JWTError, jwt

        token = jwt.encode({"sub": "user123"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(JWTError, match="not a user id"):
            verify_access_token(token)

    def test_missing_subject_rejected(self):
        """A token without a subject is invalid."""
        from app.utils.auth import verify_access_token
        from app.config import settings
        from jose import JWTError, jwt

        token = jwt.encode({"role": "admin"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(JWTError, match="missing 'sub'"):
            verify_access_token(token)
