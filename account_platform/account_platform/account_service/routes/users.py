"""
User account routes: registration, login, logout, token refresh and
password change.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..auth import TokenPair, TokenVerificationError, decode_token
from ..config import settings
from ..controller import AccountSessionController, SessionResult
from ..db import get_db
from ..errors import Unauthorized
from ..models import User
from ..schemas import ApiResponse, ChangePasswordRequest, RefreshTokenRequest, UserLogin
from ..store import AccountStore
from ..utils.image_host import ImageHost, get_image_host, remove_local_file
from ..utils.uploads import save_upload

router = APIRouter(prefix="/api/v1/users", tags=["users"])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def cookie_options() -> dict:
    return {"httponly": settings.COOKIE_HTTPONLY, "secure": settings.COOKIE_SECURE}


def get_controller(
    request: Request,
    db: Session = Depends(get_db),
    image_host: ImageHost = Depends(get_image_host),
) -> AccountSessionController:
    return AccountSessionController(AccountStore(db), image_host, request=request)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Resolve the access token on the request into the authenticated account.

    The token is read from the ``accessToken`` cookie, falling back to an
    ``Authorization: Bearer`` header.

    Raises:
        Unauthorized: if no token is presented, it does not verify, or the
            account it names no longer exists
    """
    token = request.cookies.get(ACCESS_COOKIE)
    if not token:
        authorization = request.headers.get("Authorization")
        if authorization and authorization.lower().startswith("bearer "):
            token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise Unauthorized("Unauthorized request")

    try:
        claims = decode_token(token, settings.ACCESS_TOKEN_SECRET, "access")
    except TokenVerificationError as e:
        raise Unauthorized(str(e)) from e

    user = AccountStore(db).find_by_id(claims["sub"])
    if user is None:
        raise Unauthorized("Invalid access token")
    return user


def _set_token_cookies(response: JSONResponse, tokens: TokenPair) -> None:
    options = cookie_options()
    response.set_cookie(ACCESS_COOKIE, tokens.access_token, **options)
    response.set_cookie(REFRESH_COOKIE, tokens.refresh_token, **options)


def to_response(result: SessionResult) -> JSONResponse:
    body = ApiResponse(statusCode=result.status_code, data=result.data, message=result.message)
    response = JSONResponse(status_code=result.status_code, content=body.model_dump(mode="json"))
    if result.tokens is not None:
        _set_token_cookies(response, result.tokens)
    if result.clear_tokens:
        options = cookie_options()
        response.delete_cookie(ACCESS_COOKIE, **options)
        response.delete_cookie(REFRESH_COOKIE, **options)
    return response


@router.post("/register", status_code=201)
def register(
    userName: Optional[str] = Form(default=None),
    fullName: Optional[str] = Form(default=None),
    email: Optional[str] = Form(default=None),
    password: Optional[str] = Form(default=None),
    avatarImage: Optional[UploadFile] = File(default=None),
    coverImage: Optional[UploadFile] = File(default=None),
    controller: AccountSessionController = Depends(get_controller),
):
    avatar_path = save_upload(avatarImage)
    cover_path = save_upload(coverImage)
    try:
        result = controller.register(userName, fullName, email, password, avatar_path, cover_path)
    finally:
        # Files the image host never consumed are still on disk
        for path in (avatar_path, cover_path):
            if path:
                remove_local_file(path)
    return to_response(result)


@router.post("/login")
def login(credentials: UserLogin, controller: AccountSessionController = Depends(get_controller)):
    result = controller.login(credentials.user_name, credentials.email, credentials.password)
    return to_response(result)


@router.post("/logout")
def logout(
    user: User = Depends(get_current_user),
    controller: AccountSessionController = Depends(get_controller),
):
    return to_response(controller.logout(user))


@router.post("/refresh-token")
def refresh_token(
    request: Request,
    payload: Optional[RefreshTokenRequest] = Body(default=None),
    controller: AccountSessionController = Depends(get_controller),
):
    """An explicit body token wins over the cookie so clients can refresh a specific session."""
    incoming = (payload.refresh_token if payload else None) or request.cookies.get(REFRESH_COOKIE)
    return to_response(controller.refresh_access_token(incoming))


@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    controller: AccountSessionController = Depends(get_controller),
):
    result = controller.change_password(user.id, payload.old_password, payload.new_password)
    return to_response(result)


@router.get("/current-user")
def current_user(
    user: User = Depends(get_current_user),
    controller: AccountSessionController = Depends(get_controller),
):
    return to_response(controller.current_user(user))
