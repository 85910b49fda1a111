"""
Message store interface and its SQLAlchemy implementation.

The service layer only talks to ``MessageStore``. Every call is a
suspension point: the SQL implementation runs the blocking session work
in a worker thread and bounds it with a deadline. Work that outlives its
deadline is rolled back rather than committed.
"""

from __future__ import annotations

import abc
import asyncio
import functools
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from messenger.core.errors import ServiceUnavailable
from messenger.crud import messages as message_crud
from messenger.crud import users as user_crud
from messenger.db.session import session_scope
from messenger.schemas.message import MessageOut, UserPublic


logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Deadline:
    """
    Settles, under a lock, whether a worker commits or its caller gives up.

    Whichever side claims first wins; the other side sees the outcome.
    """

    COMMIT = "commit"
    ABANDON = "abandon"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcome: Optional[str] = None

    def claim(self, outcome: str) -> bool:
        with self._lock:
            if self._outcome is None:
                self._outcome = outcome
            return self._outcome == outcome


class MessageStore(abc.ABC):
    """Abstract create/find/update operations over Message records."""

    @abc.abstractmethod
    async def create(self, sender_id: str, receiver_id: str, content: str) -> MessageOut:
        ...

    @abc.abstractmethod
    async def get(self, message_id: str) -> Optional[MessageOut]:
        ...

    @abc.abstractmethod
    async def list_for_receiver(self, user_id: str, skip: int, limit: int) -> List[MessageOut]:
        """Messages addressed to ``user_id``, newest first."""

    @abc.abstractmethod
    async def list_for_sender(self, user_id: str, skip: int, limit: int) -> List[MessageOut]:
        """Messages written by ``user_id``, newest first."""

    @abc.abstractmethod
    async def mark_read_if_unread(self, message_id: str, receiver_id: str) -> Optional[MessageOut]:
        """Atomically set ``read``; None if it was already set."""

    @abc.abstractmethod
    async def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, UserPublic]:
        ...


class SqlMessageStore(MessageStore):
    """MessageStore backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session], timeout: float = 5.0) -> None:
        self.session_factory = session_factory
        self.timeout = timeout

    async def _run(self, fn: Callable[[Session], T]) -> T:
        deadline = _Deadline()

        def _in_session() -> Optional[T]:
            with session_scope(self.session_factory) as db:
                result = fn(db)
                if not deadline.claim(_Deadline.COMMIT):
                    # Caller already answered 503; nothing may persist
                    db.rollback()
                    logger.warning("Rolled back store work that finished after the deadline")
                    return None
                return result

        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, _in_session)
        try:
            try:
                return await asyncio.wait_for(asyncio.shield(future), timeout=self.timeout)
            except asyncio.TimeoutError:
                if deadline.claim(_Deadline.ABANDON):
                    logger.error("Message store did not answer within %.2fs", self.timeout)
                    raise ServiceUnavailable()
                # The worker got to commit first; its result stands
                return await future
        except OperationalError:
            logger.exception("Message store unreachable")
            raise ServiceUnavailable()

    async def create(self, sender_id: str, receiver_id: str, content: str) -> MessageOut:
        def _create(db: Session) -> MessageOut:
            msg = message_crud.create_message(db, sender_id, receiver_id, content)
            return MessageOut.from_model(msg)

        return await self._run(_create)

    async def get(self, message_id: str) -> Optional[MessageOut]:
        def _get(db: Session) -> Optional[MessageOut]:
            msg = message_crud.get_message(db, message_id)
            return MessageOut.from_model(msg) if msg else None

        return await self._run(_get)

    async def list_for_receiver(self, user_id: str, skip: int, limit: int) -> List[MessageOut]:
        fn = functools.partial(message_crud.list_received, receiver_id=user_id, skip=skip, limit=limit)
        return await self._run(lambda db: [MessageOut.from_model(m) for m in fn(db)])

    async def list_for_sender(self, user_id: str, skip: int, limit: int) -> List[MessageOut]:
        fn = functools.partial(message_crud.list_sent, sender_id=user_id, skip=skip, limit=limit)
        return await self._run(lambda db: [MessageOut.from_model(m) for m in fn(db)])

    async def mark_read_if_unread(self, message_id: str, receiver_id: str) -> Optional[MessageOut]:
        def _mark(db: Session) -> Optional[MessageOut]:
            if not message_crud.mark_read_if_unread(db, message_id, receiver_id):
                return None
            return MessageOut.from_model(message_crud.get_message(db, message_id))

        return await self._run(_mark)

    async def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, UserPublic]:
        ids = list(user_ids)

        def _profiles(db: Session) -> Dict[str, UserPublic]:
            return {
                u.id: UserPublic(id=u.id, name=u.name, email=u.email)
                for u in user_crud.get_many(db, ids)
            }

        return await self._run(_profiles)
