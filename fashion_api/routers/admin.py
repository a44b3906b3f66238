"""
Admin router for style list management and user accounts.

Provides endpoints for:
- Listing, adding, editing and deleting styles
- Creating user accounts

All endpoints require an authenticated administrator. Form submissions
redirect back to the style list, including when the submitted style
identifier is missing or malformed.
"""

import structlog
from typing import Optional, Union
from fastapi import APIRouter, Depends, Form, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from fashion_api.dependencies import (
    get_auth_service,
    get_style_repository,
    require_admin,
)
from fashion_api.exceptions import InvalidStyleIdError, UserAlreadyExistsError
from fashion_api.models.auth import CreateUserRequest, CurrentUser, ErrorResponse, UserResponse
from fashion_api.models.style import StyleEditPage, StyleListPage
from fashion_api.repositories.style_repo import StyleRepository
from fashion_api.services.auth_service import AuthService

logger = structlog.get_logger(__name__)

ADMIN_HOME = "/admin"

router = APIRouter(
    prefix="/admin",
    tags=["Administration"],
    responses={
        403: {"model": ErrorResponse, "description": "Forbidden"},
    }
)


def _back_to_admin() -> RedirectResponse:
    return RedirectResponse(url=ADMIN_HOME, status_code=status.HTTP_303_SEE_OTHER)


# ============================================================================
# STYLE LIST ENDPOINTS
# ============================================================================


@router.get("", response_model=StyleListPage, summary="Style list")
def list_styles(
    admin: CurrentUser = Depends(require_admin),
    style_repo: StyleRepository = Depends(get_style_repository)
) -> StyleListPage:
    return StyleListPage(title="Style List", styles=style_repo.list_styles())


@router.post("/style/add/submit", summary="Add a style")
def add_style(
    stylename: str = Form(default=""),
    admin: CurrentUser = Depends(require_admin),
    style_repo: StyleRepository = Depends(get_style_repository)
) -> RedirectResponse:
    """Insert a style and return to the style list. Blank names are ignored."""
    name = stylename.strip()
    if not name:
        logger.warning("style_add_rejected_blank_name", username=admin.username)
        return _back_to_admin()

    style_repo.add_style(name)
    return _back_to_admin()


@router.get(
    "/style/edit",
    response_model=None,
    summary="Edit page for a style",
    description="""
    Returns the style list together with the style being edited.

    Redirects to the style list when `styleid` is missing, malformed or
    names no style.
    """,
)
def edit_style_page(
    styleid: Optional[str] = Query(default=None),
    admin: CurrentUser = Depends(require_admin),
    style_repo: StyleRepository = Depends(get_style_repository)
) -> Union[StyleEditPage, RedirectResponse]:
    if not styleid:
        return _back_to_admin()

    try:
        style = style_repo.get_style(styleid)
    except InvalidStyleIdError:
        logger.warning("style_edit_invalid_id", style_id=styleid)
        return _back_to_admin()

    if style is None:
        return _back_to_admin()

    return StyleEditPage(stylelist=style_repo.list_styles(), edit_style=style)


@router.post("/style/edit/submit", summary="Rename a style")
def edit_style(
    style_id: Optional[str] = Form(default=None, alias="styleId"),
    stylename: str = Form(default=""),
    admin: CurrentUser = Depends(require_admin),
    style_repo: StyleRepository = Depends(get_style_repository)
) -> RedirectResponse:
    name = stylename.strip()
    if not name:
        logger.warning("style_edit_rejected_blank_name", style_id=style_id)
        return _back_to_admin()

    style_repo.update_style(style_id, name)
    return _back_to_admin()


@router.post("/style/delete", summary="Delete a style")
def delete_style(
    style_id: Optional[str] = Form(default=None, alias="styleId"),
    admin: CurrentUser = Depends(require_admin),
    style_repo: StyleRepository = Depends(get_style_repository)
) -> RedirectResponse:
    style_repo.delete_style(style_id)
    return _back_to_admin()


# ============================================================================
# USER MANAGEMENT ENDPOINTS
# ============================================================================


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    responses={
        409: {"model": ErrorResponse, "description": "Username already exists"},
    }
)
def create_user(
    create_request: CreateUserRequest,
    admin: CurrentUser = Depends(require_admin),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    """
    Create a user account.

    Raises:
        HTTPException: 409 if the username is taken
    """
    try:
        user = auth_service.register_user(
            create_request.username,
            create_request.password,
            create_request.role
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    logger.info(
        "user_created_by_admin",
        admin=admin.username,
        user_id=user.id,
        username=user.username,
        role=user.role.value
    )

    return UserResponse(id=user.id, username=user.username, role=user.role, created_at=user.created_at)
