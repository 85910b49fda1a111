# backend/messenger/db/init_db.py
from sqlalchemy import Engine

from messenger.db.base import Base

# Import models so SQLAlchemy registers their tables on Base.metadata
from messenger import models  # noqa: F401


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
