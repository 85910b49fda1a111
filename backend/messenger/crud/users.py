# backend/messenger/crud/users.py
from __future__ import annotations

from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from messenger.core.security import hash_password
from messenger.models.user import User


def get_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalar_one_or_none()


def get_many(db: Session, user_ids: Iterable[str]) -> List[User]:
    ids = list(set(user_ids))
    if not ids:
        return []
    stmt = select(User).where(User.id.in_(ids))
    return list(db.execute(stmt).scalars())


def create_user(db: Session, name: str, email: str, password: str) -> User:
    u = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
    )

    db.add(u)
    db.commit()
    db.refresh(u)
    return u
