"""
Account record store backed by a SQLAlchemy session.

The session controller receives an ``AccountStore`` built from the
request-scoped session instead of talking to the database module directly.
"""
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .models import User


class AccountStore:
    def __init__(self, db: Session):
        self.db = db

    def find_one(self, user_name: Optional[str] = None, email: Optional[str] = None) -> Optional[User]:
        """Return the first account matching ``user_name`` OR ``email``.

        Only the keys that were supplied take part in the predicate.
        """
        clauses = []
        if user_name:
            clauses.append(User.user_name == user_name)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return None
        return self.db.query(User).filter(or_(*clauses)).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def create(self, **fields) -> User:
        user = User(**fields)
        self.db.add(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def find_by_id_and_update(self, user_id: str, patch: dict) -> Optional[User]:
        """Apply ``patch`` to the account and return the updated record."""
        user = self.find_by_id(user_id)
        if user is None:
            return None
        for key, value in patch.items():
            setattr(user, key, value)
        self.save(user)
        self.db.refresh(user)
        return user

    def save(self, user: User) -> None:
        self.db.add(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
