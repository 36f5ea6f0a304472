"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.backend.core.database import get_db_session
from notekeeper.backend.core.exceptions import AuthenticationError
from notekeeper.backend.core.logging import get_logger
from notekeeper.backend.core.security import decode_token
from notekeeper.backend.models.user import User
from notekeeper.backend.repositories.user import UserRepository

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

_bearer = HTTPBearer(auto_error=False)


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_current_user(
    db: DbSession,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User:
    """
    Resolve the signed-in user from the bearer token.

    Raises:
        AuthenticationError: If the token is missing, invalid, or the user is gone
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()

    payload = decode_token(credentials.credentials)
    user = await UserRepository(db).get_by_id_or_none(payload["sub"])
    if user is None:
        logger.warning("Token subject no longer exists", extra={"user_id": payload["sub"]})
        raise AuthenticationError("Invalid or expired token")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
