"""
Login and logout.

A successful login stores a signed session token in an HttpOnly cookie;
the same token is returned in the body for API clients that prefer the
Authorization header.
"""

import structlog
from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse

from fashion_api.config import Settings
from fashion_api.dependencies import get_auth_service, get_client_ip, get_settings_dependency
from fashion_api.models.auth import ErrorResponse, LoginRequest, TokenResponse
from fashion_api.rate_limit import limiter, login_rate_limit
from fashion_api.services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter(
    tags=["Authentication"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
    }
)


@router.get("/login", summary="Login page")
def login_page() -> dict:
    return {"title": "Login"}


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="User Login",
    description="""
    Authenticate with username and password form fields.

    **Success Response (200):**
    Sets the session cookie and returns the session token.

    **Error Responses:**
    - 401: Invalid credentials
    - 429: Too many login attempts
    """,
)
@limiter.limit(login_rate_limit)
def login(
    request: Request,
    response: Response,
    username: str = Form(..., min_length=1, max_length=50),
    password: str = Form(..., min_length=1),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings_dependency),
    client_ip: str = Depends(get_client_ip)
) -> TokenResponse:
    """
    Authenticate user and start a session.

    Raises:
        HTTPException: If authentication fails
    """
    logger.info("login_attempt", username=username, ip_address=client_ip)

    token_response = auth_service.login(LoginRequest(username=username, password=password))

    if not token_response:
        logger.warning("login_failed", username=username, ip_address=client_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"}
        )

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token_response.access_token,
        max_age=token_response.expires_in,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )

    logger.info("login_success", username=username, ip_address=client_ip)
    return token_response


@router.api_route("/logout", methods=["GET", "POST"], summary="Logout")
def logout(settings: Settings = Depends(get_settings_dependency)) -> RedirectResponse:
    """End the session and go back to the home page."""
    response = RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name)
    logger.info("logout")
    return response
