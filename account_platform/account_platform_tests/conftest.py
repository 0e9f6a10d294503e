"""
Pytest configuration for account service tests.

Points the service at a throwaway SQLite database and temporary upload/log
directories before any service module is imported.
"""
import os
import tempfile

_tmp_dir = tempfile.mkdtemp(prefix="account_service_tests_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_tmp_dir, 'test_app.db')}")
os.environ.setdefault("LOG_DIR", os.path.join(_tmp_dir, "logs"))
os.environ.setdefault("UPLOAD_DIR", os.path.join(_tmp_dir, "uploads"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from account_platform.account_service.main import app  # noqa: E402
from account_platform.account_service.db import Base, engine, SessionLocal  # noqa: E402
from account_platform.account_service.models import User  # noqa: E402
from account_platform.account_service.auth import hash_password  # noqa: E402
from account_platform.account_service.utils.image_host import ImageHost, get_image_host  # noqa: E402


class FakeImageHost(ImageHost):
    """Image host that never leaves the process."""

    def __init__(self, fail: bool = False):
        super().__init__("https://images.example.com/upload")
        self.fail = fail
        self.uploaded = []

    def upload(self, local_path):
        if not local_path:
            return None
        self.uploaded.append(local_path)
        if self.fail:
            return None
        return {"url": f"https://images.example.com/{os.path.basename(local_path)}"}


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture
def image_host():
    host = FakeImageHost()
    app.dependency_overrides[get_image_host] = lambda: host
    yield host
    app.dependency_overrides.pop(get_image_host, None)


@pytest.fixture
def client(image_host):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.close()


def ensure_user(user_name="alice", email="alice@x.com", password="pw123", full_name="Alice A"):
    db = SessionLocal()
    try:
        u = db.query(User).filter(User.user_name == user_name).first()
        if not u:
            u = User(
                user_name=user_name,
                full_name=full_name,
                email=email,
                password=hash_password(password),
                avatar_image="https://images.example.com/avatar.png",
            )
            db.add(u)
            db.commit()
            db.refresh(u)
        # return stable scalar values to avoid DetachedInstance
        return {"id": u.id, "user_name": user_name, "email": email}
    finally:
        db.close()
