# backend/messenger/api/routes/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from messenger.api.deps import get_settings, login_rate_limit
from messenger.core.errors import Conflict, Unauthenticated
from messenger.core.security import create_access_token, verify_password
from messenger.crud.users import create_user, get_by_email
from messenger.db.session import get_db
from messenger.schemas.auth import LoginIn, RegisterIn, RegisterOut, TokenOut


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterOut)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    if get_by_email(db, payload.email):
        raise Conflict("User exists")

    try:
        u = create_user(db, payload.name, payload.email, payload.password)
    except IntegrityError:
        # Lost a race against a concurrent registration of the same email
        db.rollback()
        raise Conflict("User exists")

    logger.info("Registered user %s", u.id)
    return RegisterOut(message="Registered")


@router.post("/login", response_model=TokenOut, dependencies=[Depends(login_rate_limit)])
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    u = get_by_email(db, payload.email)
    if not u or not verify_password(payload.password, u.password_hash):
        logger.warning("Failed login attempt")
        raise Unauthenticated("Invalid credentials")

    token = create_access_token(subject=u.id, cfg=get_settings(request))
    logger.info("User %s logged in", u.id)
    return TokenOut(token=token)
