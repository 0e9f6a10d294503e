from passlib.context import CryptContext
from passlib.exc import UnknownHashError
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import uuid
import jwt
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .errors import Internal, NotFound
from .models import User
from .store import AccountStore

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenVerificationError(Exception):
    """Raised for any malformed, expired, wrongly signed or wrong-type token."""


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (UnknownHashError, ValueError) as e:
        logger.warning("[Auth] Stored password hash could not be verified: %s", e)
        return False


def create_access_token(user: User) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": user.id,
        "username": user.user_name,
        "email": user.email,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.ACCESS_TOKEN_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(user_id: str) -> str:
    expire = datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    # jti keeps two tokens minted within the same second distinct
    payload = {"sub": user_id, "type": "refresh", "jti": uuid.uuid4().hex, "exp": expire}
    return jwt.encode(payload, settings.REFRESH_TOKEN_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, secret: str, expected_type: str) -> dict:
    """
    Verify a token's signature and expiry and return its claims.

    Args:
        token: Encoded JWT
        secret: Signing secret for this token kind
        expected_type: "access" or "refresh"

    Raises:
        TokenVerificationError: with the underlying reason, for every kind of failure
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenVerificationError("Token has expired") from e
    except jwt.PyJWTError as e:
        raise TokenVerificationError(f"Invalid token: {e}") from e

    if claims.get("type") != expected_type:
        raise TokenVerificationError("Invalid token type")
    if not claims.get("sub"):
        raise TokenVerificationError("Token is missing subject")
    return claims


def issue_token_pair(store: AccountStore, user_id: str) -> TokenPair:
    """
    Mint an access/refresh token pair and persist the refresh token.

    The persisted refresh token is overwritten, so any token issued
    earlier for this account stops being accepted by refresh.

    Raises:
        NotFound: if the account does not exist
        Internal: if signing or persisting the refresh token fails
    """
    user = store.find_by_id(user_id)
    if user is None:
        raise NotFound("User not found")

    try:
        access_token = create_access_token(user)
        refresh_token = create_refresh_token(user.id)
        user.refresh_token = refresh_token
        store.save(user)
    except (jwt.PyJWTError, SQLAlchemyError) as e:
        logger.error("[Token] Failed to issue tokens for user_id=%s: %s", user_id, e)
        raise Internal("Error while generating tokens") from e

    logger.info("[Token] Issued token pair: user_id=%s", user_id)
    return TokenPair(access_token=access_token, refresh_token=refresh_token)
