from datetime import datetime, timedelta
from unittest.mock import patch

import jwt
import pytest
from sqlalchemy.exc import OperationalError

from account_platform.account_service.auth import (
    TokenVerificationError,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    issue_token_pair,
    verify_password,
)
from account_platform.account_service.config import settings
from account_platform.account_service.errors import Internal, NotFound
from account_platform.account_service.models import User
from account_platform.account_service.store import AccountStore

from .conftest import ensure_user


def test_verify_password_accepts_correct_and_rejects_wrong():
    hashed = hash_password("pw123")
    assert hashed != "pw123"
    assert verify_password("pw123", hashed) is True
    for wrong in ("pw1234", "PW123", "", " pw123"):
        assert verify_password(wrong, hashed) is False


def test_verify_password_returns_false_for_unrecognized_hash():
    assert verify_password("pw123", "not-a-hash") is False


def test_access_token_carries_identity_claims(db_session):
    info = ensure_user()
    user = db_session.get(User, info["id"])

    claims = decode_token(create_access_token(user), settings.ACCESS_TOKEN_SECRET, "access")
    assert claims["sub"] == info["id"]
    assert claims["username"] == "alice"
    assert claims["email"] == "alice@x.com"


def test_refresh_tokens_minted_back_to_back_differ():
    assert create_refresh_token("abc") != create_refresh_token("abc")


def test_decode_rejects_expired_token():
    expired = jwt.encode(
        {"sub": "abc", "type": "refresh", "exp": datetime.utcnow() - timedelta(minutes=1)},
        settings.REFRESH_TOKEN_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(TokenVerificationError) as exc_info:
        decode_token(expired, settings.REFRESH_TOKEN_SECRET, "refresh")
    assert "expired" in str(exc_info.value)


def test_decode_rejects_wrong_secret_and_garbage():
    token = create_refresh_token("abc")
    with pytest.raises(TokenVerificationError):
        decode_token(token, settings.ACCESS_TOKEN_SECRET, "refresh")
    with pytest.raises(TokenVerificationError):
        decode_token("not.a.jwt", settings.REFRESH_TOKEN_SECRET, "refresh")


def test_decode_rejects_wrong_token_type():
    token = create_refresh_token("abc")
    with pytest.raises(TokenVerificationError) as exc_info:
        decode_token(token, settings.REFRESH_TOKEN_SECRET, "access")
    assert "type" in str(exc_info.value)


def test_issue_token_pair_persists_refresh_token(db_session):
    info = ensure_user()
    store = AccountStore(db_session)

    pair = issue_token_pair(store, info["id"])

    db_session.expire_all()
    assert db_session.get(User, info["id"]).refresh_token == pair.refresh_token
    claims = decode_token(pair.access_token, settings.ACCESS_TOKEN_SECRET, "access")
    assert claims["sub"] == info["id"]


def test_second_issuance_rotates_out_first_refresh_token(db_session):
    info = ensure_user()
    store = AccountStore(db_session)

    first = issue_token_pair(store, info["id"])
    second = issue_token_pair(store, info["id"])

    db_session.expire_all()
    persisted = db_session.get(User, info["id"]).refresh_token
    assert persisted == second.refresh_token
    assert persisted != first.refresh_token


def test_issue_token_pair_for_missing_account_raises_not_found(db_session):
    with pytest.raises(NotFound):
        issue_token_pair(AccountStore(db_session), "does-not-exist")


def test_issue_token_pair_wraps_persistence_failure(db_session):
    info = ensure_user()
    store = AccountStore(db_session)

    with patch.object(store, "save", side_effect=OperationalError("UPDATE users", {}, Exception("disk full"))):
        with pytest.raises(Internal) as exc_info:
            issue_token_pair(store, info["id"])

    assert exc_info.value.message == "Error while generating tokens"
