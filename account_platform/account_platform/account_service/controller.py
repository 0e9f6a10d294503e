"""
Account session controller.

Orchestrates registration, login, logout, token refresh and password
change on top of the account store, the credential/token helpers in
``auth.py`` and the image host. Each operation returns a ``SessionResult``
describing the response body and which token cookies the transport layer
should set or clear; failures are raised as ``ApiError`` subclasses.
"""
from dataclasses import dataclass
from typing import Optional
import hmac
import logging

from fastapi import Request
from sqlalchemy.exc import IntegrityError

from .auth import (
    TokenPair,
    TokenVerificationError,
    decode_token,
    hash_password,
    issue_token_pair,
    verify_password,
)
from .config import settings
from .errors import Conflict, Internal, InvalidInput, Unauthorized
from .models import User
from .schemas import AccountOut
from .store import AccountStore
from .utils.event_logger import log_auth_event
from .utils.image_host import ImageHost

logger = logging.getLogger(__name__)


@dataclass
class SessionResult:
    status_code: int
    data: dict
    message: str
    tokens: Optional[TokenPair] = None
    clear_tokens: bool = False


def _blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def sanitize(user: User) -> dict:
    return AccountOut.from_user(user).model_dump(mode="json", by_alias=True)


class AccountSessionController:
    def __init__(self, store: AccountStore, image_host: ImageHost, request: Optional[Request] = None):
        self.store = store
        self.image_host = image_host
        self.request = request

    def _audit(self, event_type: str, user: User, metadata: dict = None) -> None:
        log_auth_event(event_type, user, self.request, self.store.db, metadata)

    def _sanitized(self, user_id: str) -> Optional[dict]:
        user = self.store.find_by_id(user_id)
        return sanitize(user) if user is not None else None

    def register(
        self,
        user_name: Optional[str],
        full_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        avatar_path: Optional[str] = None,
        cover_path: Optional[str] = None,
    ) -> SessionResult:
        if any(_blank(v) for v in (user_name, full_name, email, password)):
            raise InvalidInput("All fields are required")

        user_name = user_name.strip().lower()
        email = email.strip().lower()

        if self.store.find_one(user_name=user_name, email=email) is not None:
            raise Conflict("User already exists")

        if not avatar_path and not cover_path:
            raise InvalidInput("Profile images are required")

        avatar = self.image_host.upload(avatar_path) if avatar_path else None
        cover = self.image_host.upload(cover_path) if cover_path else None
        if not avatar and not cover:
            raise InvalidInput("Profile images are required")

        try:
            user = self.store.create(
                user_name=user_name,
                full_name=full_name.strip(),
                email=email,
                password=hash_password(password),
                avatar_image=avatar["url"] if avatar else None,
                cover_image=cover["url"] if cover else None,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same keys
            orphaned = [image["url"] for image in (avatar, cover) if image]
            logger.warning("[Register] Insert conflict for username=%s, orphaned images: %s", user_name, orphaned)
            raise Conflict("User already exists") from e

        created = self._sanitized(user.id)
        if created is None:
            raise Internal("User not created")

        self._audit("register", user)
        logger.info("[Register] New account: user_id=%s, username=%s", user.id, user.user_name)
        return SessionResult(
            status_code=201,
            data={"isUserCreated": created},
            message="User registered successfully",
        )

    def login(self, user_name: Optional[str], email: Optional[str], password: Optional[str]) -> SessionResult:
        if _blank(user_name) and _blank(email):
            raise InvalidInput("Username or email is required")
        if _blank(password):
            raise InvalidInput("Password is required")

        user = self.store.find_one(
            user_name=user_name.strip().lower() if not _blank(user_name) else None,
            email=email.strip().lower() if not _blank(email) else None,
        )
        if user is None:
            raise Unauthorized("User does not exist")

        if not verify_password(password, user.password):
            self._audit("login_failure", user)
            raise Unauthorized("Invalid password")

        tokens = issue_token_pair(self.store, user.id)
        logged_in = self._sanitized(user.id)

        self._audit("login_success", user)
        logger.info("[Login] Successful login: user_id=%s, username=%s", user.id, user.user_name)
        return SessionResult(
            status_code=200,
            data={
                "user": logged_in,
                "accessToken": tokens.access_token,
                "refreshToken": tokens.refresh_token,
            },
            message="User logged in successfully",
            tokens=tokens,
        )

    def logout(self, user: User) -> SessionResult:
        updated = self.store.find_by_id_and_update(user.id, {"refresh_token": None})
        if updated is not None:
            self._audit("logout", updated)
        logger.info("[Logout] Session ended: user_id=%s", user.id)
        return SessionResult(
            status_code=200,
            data={},
            message="User logged out successfully",
            clear_tokens=True,
        )

    def refresh_access_token(self, incoming_refresh_token: Optional[str]) -> SessionResult:
        if not incoming_refresh_token:
            raise Unauthorized("Unauthorized request")

        try:
            claims = decode_token(incoming_refresh_token, settings.REFRESH_TOKEN_SECRET, "refresh")
        except TokenVerificationError as e:
            raise Unauthorized(str(e)) from e

        user = self.store.find_by_id(claims["sub"])
        if user is None:
            raise Unauthorized("Invalid refresh token")

        if not user.refresh_token or not hmac.compare_digest(
            incoming_refresh_token.encode("utf-8"), user.refresh_token.encode("utf-8")
        ):
            self._audit("token_refresh_failure", user, {"reason": "refresh token mismatch"})
            raise Unauthorized("Refresh token is expired or used")

        tokens = issue_token_pair(self.store, user.id)

        self._audit("token_refresh", user)
        logger.info("[Token] Access token refreshed: user_id=%s", user.id)
        return SessionResult(
            status_code=200,
            data={"accessToken": tokens.access_token, "refreshToken": tokens.refresh_token},
            message="Access token refreshed",
            tokens=tokens,
        )

    def change_password(
        self, user_id: str, old_password: Optional[str], new_password: Optional[str]
    ) -> SessionResult:
        if _blank(old_password) or _blank(new_password):
            raise InvalidInput("Old and new password are required")

        user = self.store.find_by_id(user_id)
        if user is None:
            raise Unauthorized("User does not exist")

        if not verify_password(old_password, user.password):
            self._audit("password_change_failure", user)
            raise Unauthorized("Old password does not match")

        user.password = hash_password(new_password)
        self.store.save(user)

        self._audit("password_change", user)
        logger.info("[Password] Password changed: user_id=%s", user.id)
        return SessionResult(status_code=200, data={}, message="Password changed successfully")

    def current_user(self, user: User) -> SessionResult:
        return SessionResult(status_code=200, data=sanitize(user), message="Current user fetched successfully")
