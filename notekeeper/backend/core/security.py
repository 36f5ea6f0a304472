"""
Security Utilities.

bcrypt password hashes and the signed bearer token that represents a
signed-in session. A token's ``sub`` is the user id; ``type`` is always
"access" and ``aud`` comes from security.yaml, so tokens minted for
another audience or purpose are refused.
"""

from datetime import timedelta
from typing import Any

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from notekeeper.backend.core.config import get_app_config, get_settings
from notekeeper.backend.core.exceptions import AuthenticationError
from notekeeper.backend.core.logging import get_logger
from notekeeper.backend.core.utils import utc_now

logger = get_logger(__name__)

TOKEN_TYPE = "access"

# bcrypt only hashes the first 72 bytes and refuses longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_access_token(
    user_id: str,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign a session token for user_id.

    The lifetime defaults to security.jwt.access_token_expire_minutes.
    """
    jwt_config = get_app_config().security.jwt
    if expires_delta is None:
        expires_delta = timedelta(minutes=jwt_config.access_token_expire_minutes)

    issued_at = utc_now()
    claims: dict[str, Any] = {
        "sub": user_id,
        "type": TOKEN_TYPE,
        "aud": jwt_config.audience,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, get_settings().jwt_secret, algorithm=jwt_config.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Verify a session token and return its claims.

    Raises:
        AuthenticationError: AUTH_SESSION_EXPIRED once past ``exp``,
            AUTH_UNAUTHORIZED for anything else that does not verify
    """
    jwt_config = get_app_config().security.jwt
    try:
        claims = jwt.decode(
            token,
            get_settings().jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except ExpiredSignatureError as e:
        raise AuthenticationError("Session has expired", code="AUTH_SESSION_EXPIRED") from e
    except JWTError as e:
        logger.warning("Token rejected", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token") from e

    if claims.get("type") != TOKEN_TYPE or not claims.get("sub"):
        raise AuthenticationError("Invalid or expired token")
    return claims
