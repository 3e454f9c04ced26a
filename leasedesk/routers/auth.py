"""Login, logout and current-user endpoints backed by session cookies."""

from fastapi import APIRouter, HTTPException, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from leasedesk.config import settings
from leasedesk.schemas.auth import AuthUserResponse, LoginRequest, MessageResponse, PublicUser
from leasedesk.services.auth import (
    RequireAuth,
    authenticate_user,
    create_session,
    delete_session,
    security_logger,
)

router = APIRouter()

# Rate limiter for auth endpoints (stricter than global limit)
limiter = Limiter(key_func=get_remote_address)


def _login_rate_limit() -> str:
    return f"{settings.login_rate_limit_per_minute}/minute"


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.enforce_https,
        path="/",
    )


@router.post("/login", response_model=AuthUserResponse)
@limiter.limit(_login_rate_limit)
async def login(
    request: Request,  # Required for rate limiting
    response: Response,
    credentials: LoginRequest,
) -> AuthUserResponse:
    """Check login and password, then start a session cookie."""
    ip_address = get_remote_address(request)

    user = await authenticate_user(credentials.login, credentials.password, ip_address)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid login or password",
        )

    token = await create_session(user)
    _set_session_cookie(response, token)
    return AuthUserResponse(user=PublicUser.from_user(user))


@router.get("/me", response_model=AuthUserResponse)
async def get_current_user_info(current_user: RequireAuth) -> AuthUserResponse:
    """Get the current authenticated user's information."""
    return AuthUserResponse(user=PublicUser.from_user(current_user))


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response) -> MessageResponse:
    """End the current session, if any, and clear the cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        await delete_session(token)
        security_logger.info("Logout: ip=%s", get_remote_address(request))

    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return MessageResponse(message="Successfully logged out")
