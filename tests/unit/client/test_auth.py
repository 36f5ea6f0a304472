"""
Unit Tests for the Auth Client and Auth Gate.
"""

import httpx
import pytest

from notekeeper.client.api import APIClient
from notekeeper.client.auth import (
    GENERIC_ERROR,
    LOGIN,
    AuthClient,
    AuthGate,
    message_for,
)
from notekeeper.client.errors import AuthError

SESSION = {
    "access_token": "token-abc",
    "token_type": "bearer",
    "user_id": "user-1",
    "email": "ada@example.com",
}


def _auth(handler) -> AuthClient:
    return AuthClient(APIClient(base_url="http://test", timeout=5, transport=httpx.MockTransport(handler)))


def _error(status: int, code: str) -> httpx.Response:
    return httpx.Response(status, json={"success": False, "error": {"code": code, "message": "x"}})


class TestMessages:
    """Tests for user-facing error messages."""

    @pytest.mark.parametrize(
        "code, message",
        [
            ("AUTH_INVALID_EMAIL", "Invalid email format."),
            ("AUTH_WEAK_PASSWORD", "Password should be at least 6 characters."),
            ("AUTH_PASSWORD_TOO_LONG", "Password is too long."),
            ("AUTH_EMAIL_IN_USE", "An account already exists with this email."),
            ("AUTH_INVALID_CREDENTIALS", "Incorrect email or password. Please try again."),
        ],
    )
    def test_known_codes(self, code, message):
        assert message_for(code) == message

    def test_unknown_code_gets_generic_message(self):
        assert message_for("SOMETHING_ELSE") == GENERIC_ERROR


class TestAuthClient:
    """Tests for sign-in, sign-up and sign-out."""

    @pytest.mark.asyncio
    async def test_sign_in_installs_token(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"success": True, "data": SESSION})

        auth = _auth(handler)
        changes = []
        auth.on_session_change(changes.append)

        session = await auth.sign_in("ada@example.com", "secret1")

        assert paths == ["/api/v1/auth/login"]
        assert session.user_id == "user-1"
        assert auth.current_session == session
        assert auth.api.token == "token-abc"
        assert changes == [session]

    @pytest.mark.asyncio
    async def test_sign_up_uses_register(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(201, json={"success": True, "data": SESSION})

        await _auth(handler).sign_up("ada@example.com", "secret1")

        assert paths == ["/api/v1/auth/register"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, code",
        [
            (400, "AUTH_INVALID_EMAIL"),
            (400, "AUTH_WEAK_PASSWORD"),
            (409, "AUTH_EMAIL_IN_USE"),
            (401, "AUTH_INVALID_CREDENTIALS"),
        ],
    )
    async def test_rejections_carry_message(self, status, code):
        auth = _auth(lambda request: _error(status, code))

        with pytest.raises(AuthError) as exc_info:
            await auth.sign_in("ada@example.com", "secret1")

        assert exc_info.value.code == code
        assert exc_info.value.message == message_for(code)
        assert auth.current_session is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field, error_type, code",
        [
            ("body.email", "string_too_long", "AUTH_INVALID_EMAIL"),
            ("body.password", "string_too_long", "AUTH_PASSWORD_TOO_LONG"),
            ("body.password", "missing", "VAL_REQUEST_INVALID"),
        ],
    )
    async def test_request_validation_failure_names_the_field(self, field, error_type, code):
        details = {"validation_errors": [{"field": field, "message": "x", "type": error_type}]}

        def handler(request):
            return httpx.Response(
                422,
                json={
                    "success": False,
                    "error": {"code": "VAL_REQUEST_INVALID", "message": "x", "details": details},
                },
            )

        with pytest.raises(AuthError) as exc_info:
            await _auth(handler).sign_up("ada@example.com", "x" * 200)

        assert exc_info.value.code == code
        assert exc_info.value.message == message_for(code)

    @pytest.mark.asyncio
    async def test_request_validation_failure_without_details_is_generic(self):
        auth = _auth(lambda request: _error(422, "VAL_REQUEST_INVALID"))

        with pytest.raises(AuthError) as exc_info:
            await auth.sign_up("ada@example.com", "secret1")

        assert exc_info.value.code == "VAL_REQUEST_INVALID"
        assert exc_info.value.message == GENERIC_ERROR

    @pytest.mark.asyncio
    async def test_unreachable_backend(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(AuthError) as exc_info:
            await _auth(handler).sign_in("ada@example.com", "secret1")

        assert exc_info.value.message == GENERIC_ERROR

    @pytest.mark.asyncio
    async def test_sign_out_clears_session_and_token(self):
        auth = _auth(lambda request: httpx.Response(200, json={"success": True, "data": SESSION}))
        await auth.sign_in("ada@example.com", "secret1")
        changes = []
        auth.on_session_change(changes.append)

        auth.sign_out()

        assert auth.current_session is None
        assert auth.api.token is None
        assert changes == [None]


class TestAuthGate:
    """Tests for route resolution."""

    @pytest.fixture
    def signed_out(self):
        return AuthGate(_auth(lambda request: httpx.Response(500)))

    @pytest.fixture
    async def signed_in(self):
        auth = _auth(lambda request: httpx.Response(200, json={"success": True, "data": SESSION}))
        await auth.sign_in("ada@example.com", "secret1")
        return AuthGate(auth)

    @pytest.mark.parametrize("path", ["/login", "/register", "/notes/public/n-1"])
    def test_public_routes_always_resolve(self, signed_out, path):
        assert signed_out.resolve(path) == path

    @pytest.mark.parametrize(
        "path", ["/notes", "/notes/create", "/notes/edit/n-1", "/notes/n-1", "/trash"]
    )
    def test_protected_routes_redirect_when_signed_out(self, signed_out, path):
        assert signed_out.resolve(path) == LOGIN

    @pytest.mark.parametrize(
        "path", ["/notes", "/notes/create", "/notes/edit/n-1", "/notes/n-1", "/trash"]
    )
    def test_protected_routes_open_when_signed_in(self, signed_in, path):
        assert signed_in.resolve(path) == path

    def test_query_fragment_and_trailing_slash_are_ignored(self, signed_in):
        assert signed_in.resolve("/notes/?folder=Pinned#top") == "/notes"

    @pytest.mark.parametrize("path", ["/", "", "/settings", "/notes/edit"])
    def test_unknown_routes_go_to_login(self, signed_in, path):
        assert signed_in.resolve(path) == LOGIN

    def test_require_session(self, signed_out, signed_in):
        with pytest.raises(AuthError):
            signed_out.require_session()
        assert signed_in.require_session().user_id == "user-1"
