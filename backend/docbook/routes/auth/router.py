from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi.responses import JSONResponse
from typing import Optional

from docbook.core.cookies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    clear_session_cookies,
    set_session_cookies,
)
from docbook.core.errors import BrokerError
from docbook.core.identity import IdentityProvider
from docbook.core.middleware import get_current_user, get_identity_provider
from docbook.routes.auth.services import (
    login_user,
    logout_user,
    refresh_user_session,
    register_user,
)
from docbook.schemas.auth_response import AuthResponse
from docbook.schemas.login_request import LoginRequest
from docbook.schemas.register_request import RegisterRequest
from docbook.schemas.shared import UserOut

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: RegisterRequest,
    response: Response,
    provider: IdentityProvider = Depends(get_identity_provider),
):
    outcome = await register_user(provider, user_data)
    if outcome.session is None:
        # email confirmation pending: no session, no cookies
        response.status_code = status.HTTP_200_OK
    else:
        set_session_cookies(response, outcome.session)
    return AuthResponse(message=outcome.message, user=outcome.user)


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: LoginRequest,
    response: Response,
    provider: IdentityProvider = Depends(get_identity_provider),
):
    outcome = await login_user(provider, login_data)
    set_session_cookies(response, outcome.session)
    return AuthResponse(message=outcome.message, user=outcome.user)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_TOKEN_COOKIE),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    try:
        outcome = await refresh_user_session(provider, refresh_token)
    except BrokerError as e:
        failed = JSONResponse(status_code=e.status_code, content=e.to_dict())
        if e.status_code == status.HTTP_401_UNAUTHORIZED:
            clear_session_cookies(failed)
        return failed
    set_session_cookies(response, outcome.session)
    return AuthResponse(message=outcome.message, user=outcome.user)


@router.post("/logout", response_model=AuthResponse)
async def logout(
    response: Response,
    access_token: Optional[str] = Cookie(None, alias=ACCESS_TOKEN_COOKIE),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    await logout_user(provider, access_token)
    clear_session_cookies(response)
    return AuthResponse(message="Logout successful")


@router.get("/profile", response_model=AuthResponse)
async def profile(user: UserOut = Depends(get_current_user)):
    return AuthResponse(message="Profile retrieved", user=user)
