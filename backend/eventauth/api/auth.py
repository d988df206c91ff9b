"""Authentication API endpoints."""
from fastapi import APIRouter, Depends, Request, Response, status

from eventauth.api.deps import get_access_token, get_session_manager
from eventauth.api.errors import auth_error_response
from eventauth.config import Settings, get_settings
from eventauth.errors import InvalidToken, MissingToken, TokenExpired, UserNotFound
from eventauth.schemas.auth import (
    AuthResult,
    MessageResponse,
    RefreshRequest,
    RefreshResult,
    SigninRequest,
    SignoutRequest,
    SignupRequest,
    VerifySessionResult,
)
from eventauth.schemas.records import PublicUser
from eventauth.services.session_manager import SessionManager

router = APIRouter(prefix="/auth", tags=["auth"])


def set_auth_cookies(
    response: Response,
    settings: Settings,
    access_token: str,
    refresh_token: str,
) -> None:
    """Issue secure HttpOnly access and refresh cookies."""
    for key, value, max_age_ms, path in (
        (settings.access_cookie_name, access_token, settings.access_token_ttl_ms, settings.access_cookie_path),
        (settings.refresh_cookie_name, refresh_token, settings.refresh_token_ttl_ms, settings.cookie_path),
    ):
        response.set_cookie(
            key=key,
            value=value,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
            path=path,
            max_age=max_age_ms // 1000,
        )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    """Clear access and refresh cookies."""
    for key, path in (
        (settings.access_cookie_name, settings.access_cookie_path),
        (settings.refresh_cookie_name, settings.cookie_path),
    ):
        response.delete_cookie(
            key=key,
            path=path,
            secure=settings.cookie_secure,
            httponly=True,
            samesite=settings.cookie_samesite,
        )


def get_request_ip(request: Request) -> str | None:
    """Extract best-effort client IP for session metadata."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


@router.post("/signup", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
):
    """Register a new organizer account and sign it in."""
    result = manager.signup(
        body.email,
        body.password,
        name=body.name,
        user_agent=request.headers.get("user-agent"),
        ip_address=get_request_ip(request),
    )
    set_auth_cookies(response, get_settings(), result.access_token, result.refresh_token)
    return result


@router.post("/signin", response_model=AuthResult)
def signin(
    body: SigninRequest,
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
):
    """Login and get tokens."""
    result = manager.signin(
        body.email,
        body.password,
        user_agent=request.headers.get("user-agent"),
        ip_address=get_request_ip(request),
    )
    set_auth_cookies(response, get_settings(), result.access_token, result.refresh_token)
    return result


@router.post("/refresh", response_model=RefreshResult)
def refresh_session(
    request: Request,
    response: Response,
    body: RefreshRequest | None = None,
    manager: SessionManager = Depends(get_session_manager),
):
    """Rotate the token pair using the body token or the refresh cookie."""
    settings = get_settings()
    refresh_token = (body.refresh_token if body else None) or request.cookies.get(settings.refresh_cookie_name)
    if not refresh_token:
        raise MissingToken("Missing refresh token")

    try:
        result = manager.refresh(
            refresh_token,
            user_agent=request.headers.get("user-agent"),
            ip_address=get_request_ip(request),
        )
    except (InvalidToken, TokenExpired, UserNotFound) as exc:
        # The client must re-authenticate, so drop the dead cookies too.
        error_response = auth_error_response(exc)
        clear_auth_cookies(error_response, settings)
        return error_response

    set_auth_cookies(response, settings, result.access_token, result.refresh_token)
    return result


@router.post("/signout", response_model=MessageResponse)
def signout(
    request: Request,
    response: Response,
    body: SignoutRequest | None = None,
    access_token: str | None = Depends(get_access_token),
    manager: SessionManager = Depends(get_session_manager),
):
    """Delete the current session. Safe to call repeatedly."""
    settings = get_settings()
    token = (body.access_token if body else None) or access_token
    if token:
        manager.signout(token)
    else:
        refresh_token = request.cookies.get(settings.refresh_cookie_name)
        if refresh_token:
            manager.signout_by_refresh_token(refresh_token)
    clear_auth_cookies(response, settings)
    return MessageResponse(message="Successfully signed out")


@router.get("/me", response_model=PublicUser | None)
def get_current_user(
    access_token: str | None = Depends(get_access_token),
    manager: SessionManager = Depends(get_session_manager),
):
    """Current user for a live access token, or null."""
    if not access_token:
        return None
    return manager.get_current_user(access_token)


@router.get("/verify", response_model=VerifySessionResult)
def verify_session(
    access_token: str | None = Depends(get_access_token),
    manager: SessionManager = Depends(get_session_manager),
):
    """Lightweight session check; signals when a refresh would succeed."""
    return manager.verify_session(access_token or "")
