"""
Auth Service.

Email/password accounts and session tokens. Each failure carries its own
error code so clients can show a specific message.
"""

import re

from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ValidationError,
)
from notekeeper.backend.core.security import (
    MAX_PASSWORD_BYTES,
    create_access_token,
    hash_password,
    verify_password,
)
from notekeeper.backend.models.user import User
from notekeeper.backend.repositories.user import UserRepository
from notekeeper.backend.schemas.auth import SessionResponse
from notekeeper.backend.services.base import BaseService

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str) -> str:
    """Strip and lower-case an email address."""
    return email.strip().lower()


class AuthService(BaseService):
    """Service for sign-up and sign-in."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = UserRepository(session)

    def _check_email(self, email: str) -> str:
        normalized = normalize_email(email)
        if not EMAIL_PATTERN.match(normalized):
            raise ValidationError(
                "Invalid email address",
                details={"email": "Not a valid email address"},
                code="AUTH_INVALID_EMAIL",
            )
        return normalized

    def _check_password(self, password: str) -> None:
        min_length = get_app_config().security.passwords.min_length
        if len(password) < min_length:
            raise ValidationError(
                "Password is too weak",
                details={"password": f"Minimum length is {min_length}"},
                code="AUTH_WEAK_PASSWORD",
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                "Password is too long",
                details={"password": f"Maximum length is {MAX_PASSWORD_BYTES} bytes"},
                code="AUTH_PASSWORD_TOO_LONG",
            )

    def _session_for(self, user: User) -> SessionResponse:
        token = create_access_token(user.id, email=user.email)
        return SessionResponse(access_token=token, user_id=user.id, email=user.email)

    async def sign_up(self, email: str, password: str) -> SessionResponse:
        """
        Register a new account and open a session for it.

        Raises:
            ValidationError: AUTH_INVALID_EMAIL, AUTH_WEAK_PASSWORD or
                AUTH_PASSWORD_TOO_LONG
            ConflictError: AUTH_EMAIL_IN_USE
        """
        email = self._check_email(email)
        self._check_password(password)

        if await self.repo.exists_by_email(email):
            raise ConflictError("Email already registered", code="AUTH_EMAIL_IN_USE")

        self._log_operation("Registering user", email=email)
        user = await self._execute_db_operation(
            "sign_up",
            self.repo.create(email=email, hashed_password=hash_password(password)),
            conflict_code="AUTH_EMAIL_IN_USE",
        )
        return self._session_for(user)

    async def sign_in(self, email: str, password: str) -> SessionResponse:
        """
        Open a session for an existing account.

        Raises:
            ValidationError: AUTH_INVALID_EMAIL
            AuthenticationError: AUTH_INVALID_CREDENTIALS
        """
        email = self._check_email(email)
        user = await self.repo.get_by_email(email)

        if user is None or not verify_password(password, user.hashed_password):
            self._logger.warning("Sign-in failed", extra={"email": email})
            raise AuthenticationError(
                "Invalid email or password",
                code="AUTH_INVALID_CREDENTIALS",
            )

        self._log_operation("User signed in", user_id=user.id)
        return self._session_for(user)
