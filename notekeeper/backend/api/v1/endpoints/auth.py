"""
Auth API Endpoints.

Sign-up, sign-in and the current account.
"""

from fastapi import APIRouter

from notekeeper.backend.core.dependencies import CurrentUser, DbSession
from notekeeper.backend.schemas.auth import Credentials, SessionResponse, UserResponse
from notekeeper.backend.schemas.base import ApiResponse
from notekeeper.backend.services.auth import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[SessionResponse],
    status_code=201,
    summary="Create an account",
)
async def register(data: Credentials, db: DbSession) -> ApiResponse[SessionResponse]:
    """Register and sign in."""
    session = await AuthService(db).sign_up(data.email, data.password)
    return ApiResponse(data=session)


@router.post(
    "/login",
    response_model=ApiResponse[SessionResponse],
    summary="Sign in",
)
async def login(data: Credentials, db: DbSession) -> ApiResponse[SessionResponse]:
    session = await AuthService(db).sign_in(data.email, data.password)
    return ApiResponse(data=session)


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Current account",
)
async def me(user: CurrentUser) -> ApiResponse[UserResponse]:
    return ApiResponse(data=UserResponse.model_validate(user))
