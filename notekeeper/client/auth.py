"""
Auth Client and Auth Gate.

Sign-in state of the client and the route guard that sends signed-out
users to the login screen.
"""

import re
from collections.abc import Callable

import httpx

from notekeeper.backend.core.logging import get_logger, log_with_source
from notekeeper.backend.schemas.auth import SessionResponse
from notekeeper.client.api import APIClient, data_of, details_of, error_of
from notekeeper.client.errors import AuthError

logger = get_logger(__name__)

GENERIC_ERROR = "An error occurred. Please try again."

ERROR_MESSAGES = {
    "AUTH_INVALID_EMAIL": "Invalid email format.",
    "AUTH_WEAK_PASSWORD": "Password should be at least 6 characters.",
    "AUTH_PASSWORD_TOO_LONG": "Password is too long.",
    "AUTH_EMAIL_IN_USE": "An account already exists with this email.",
    "AUTH_INVALID_CREDENTIALS": "Incorrect email or password. Please try again.",
    "AUTH_UNAUTHORIZED": "Please sign in to continue.",
    "AUTH_SESSION_EXPIRED": "Your session has expired. Please sign in again.",
}


def message_for(code: str) -> str:
    """User-facing message for an auth error code."""
    return ERROR_MESSAGES.get(code, GENERIC_ERROR)


def _request_validation_code(details: dict) -> str:
    """Auth code for a 422, picked from the first rejected field it can name."""
    for error in details.get("validation_errors", []):
        field = str(error.get("field", "")).rsplit(".", 1)[-1]
        if field == "email":
            return "AUTH_INVALID_EMAIL"
        if field == "password" and error.get("type") == "string_too_long":
            return "AUTH_PASSWORD_TOO_LONG"
    return "VAL_REQUEST_INVALID"


SessionCallback = Callable[[SessionResponse | None], None]


class AuthClient:
    """
    Sign-in/sign-up against the backend and the current session.

    The bearer token of the session is installed on the shared API client
    so every later request is authenticated.
    """

    def __init__(self, api: APIClient) -> None:
        self.api = api
        self._session: SessionResponse | None = None
        self._listeners: list[SessionCallback] = []

    @property
    def current_session(self) -> SessionResponse | None:
        return self._session

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        """Observe sign-in/sign-out. Returns the unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_session(self, session: SessionResponse | None) -> None:
        self._session = session
        self.api.set_token(session.access_token if session else None)
        for callback in list(self._listeners):
            callback(session)

    async def _authenticate(self, path: str, email: str, password: str) -> SessionResponse:
        try:
            response = await self.api.post(path, json={"email": email, "password": password})
        except httpx.HTTPError as e:
            raise AuthError(GENERIC_ERROR, code="AUTH_UNAVAILABLE") from e

        if not response.is_success:
            code, _ = error_of(response)
            if response.status_code == 422:
                code = _request_validation_code(details_of(response))
            log_with_source(logger, "client", "warning", "Authentication rejected", code=code)
            raise AuthError(message_for(code), code=code)

        session = SessionResponse.model_validate(data_of(response))
        self._set_session(session)
        return session

    async def sign_in(self, email: str, password: str) -> SessionResponse:
        """
        Sign in with email and password.

        Raises:
            AuthError: With a user-facing message
        """
        return await self._authenticate("/api/v1/auth/login", email, password)

    async def sign_up(self, email: str, password: str) -> SessionResponse:
        """
        Create an account and sign in.

        Raises:
            AuthError: With a user-facing message
        """
        return await self._authenticate("/api/v1/auth/register", email, password)

    def sign_out(self) -> None:
        if self._session is not None:
            log_with_source(logger, "client", "info", "Signed out", user_id=self._session.user_id)
        self._set_session(None)


LOGIN = "/login"

_PUBLIC_ROUTES = [
    re.compile(r"^/login$"),
    re.compile(r"^/register$"),
    re.compile(r"^/notes/public/[^/]+$"),
]

_PROTECTED_ROUTES = [
    re.compile(r"^/notes$"),
    re.compile(r"^/notes/create$"),
    re.compile(r"^/notes/edit/[^/]+$"),
    re.compile(r"^/notes/[^/]+$"),
    re.compile(r"^/trash$"),
]


class AuthGate:
    """
    Route guard.

    Public routes always resolve to themselves. Protected routes resolve
    to themselves with a session and to /login without one. Anything else
    falls back to /login.
    """

    def __init__(self, auth: AuthClient) -> None:
        self.auth = auth

    @staticmethod
    def _normalize(path: str) -> str:
        path = path.split("?", 1)[0].split("#", 1)[0]
        if len(path) > 1:
            path = path.rstrip("/")
        return path or "/"

    def resolve(self, path: str) -> str:
        path = self._normalize(path)
        if any(route.match(path) for route in _PUBLIC_ROUTES):
            return path
        if any(route.match(path) for route in _PROTECTED_ROUTES):
            return path if self.auth.current_session is not None else LOGIN
        return LOGIN

    def require_session(self) -> SessionResponse:
        """
        Raises:
            AuthError: When signed out
        """
        session = self.auth.current_session
        if session is None:
            raise AuthError(message_for("AUTH_UNAUTHORIZED"), code="AUTH_UNAUTHORIZED")
        return session
