"""Expiring share store for extracted exam records.

An entry is Active while now < expires_at, Expired once now >= expires_at
(still physically present until swept, but never returned), and Removed
after a sweep deletes it. Entries are immutable; there is no update path.

All operations run in their own transaction and are serialized by a
process-local lock, so a sweep racing a create can neither observe a
half-written row nor delete an unexpired one.
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from database import create_db_engine, create_session_factory, session_scope
from domain.errors import InvalidTTL
from domain.exams.models import ExamRecord
from models.base import Base
from models.shared_exam import SharedExam
from observability.metrics import (
    share_resolutions_total,
    shares_created_total,
    shares_stored,
    shares_swept_total,
)

logger = logging.getLogger(__name__)

# uuid4 collisions are practically impossible; the bound only guards a
# misbehaving id_factory from looping forever.
MAX_ID_ATTEMPTS = 5

# Longest accepted share lifetime. Keeps expires_at inside the range of a
# 64-bit INTEGER column and of an ISO-8601 year.
MAX_TTL_SECONDS = 365 * 24 * 60 * 60


def epoch_seconds() -> int:
    return int(time.time())


def new_share_id() -> str:
    """Return a fresh share id (UUID v4, 122 random bits)."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ShareEntry:
    """A stored share as seen by callers."""
    id: str
    record: ExamRecord
    created_at: int
    expires_at: int

    def is_expired(self, now: int) -> bool:
        return now >= self.expires_at


class ShareStore:
    """Keyed, expiring store of ExamRecords backed by SQLAlchemy.

    Args:
        engine: Engine bound to the share database
        clock: Returns the current time in epoch seconds
        id_factory: Returns a new candidate share id
        max_ttl_seconds: Longest lifetime create() accepts
    """

    def __init__(
        self,
        engine: Engine,
        clock: Callable[[], int] = epoch_seconds,
        id_factory: Callable[[], str] = new_share_id,
        max_ttl_seconds: int = MAX_TTL_SECONDS,
    ):
        self.engine = engine
        self.clock = clock
        self.id_factory = id_factory
        self.max_ttl_seconds = max_ttl_seconds
        self._session_factory = create_session_factory(engine)
        self._lock = threading.Lock()

    @classmethod
    def from_url(cls, database_url: str, **kwargs) -> "ShareStore":
        return cls(create_db_engine(database_url), **kwargs)

    def create_schema(self) -> None:
        """Create the shared_exams table if it does not exist.

        Production databases are migrated with Alembic; this is for local
        SQLite files and tests.
        """
        Base.metadata.create_all(bind=self.engine, tables=[SharedExam.__table__])

    def dispose(self) -> None:
        self.engine.dispose()

    def create(self, record: ExamRecord, ttl_seconds: int) -> ShareEntry:
        """Persist a record that stays resolvable for ttl_seconds.

        Expired entries are swept first.

        Raises:
            InvalidTTL: ttl_seconds is not a positive integer or exceeds
                max_ttl_seconds (nothing is written)
        """
        if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int) or ttl_seconds <= 0:
            raise InvalidTTL(f"expiresIn must be a positive number of seconds, got {ttl_seconds!r}")
        if ttl_seconds > self.max_ttl_seconds:
            raise InvalidTTL(
                f"expiresIn must be at most {self.max_ttl_seconds} seconds, got {ttl_seconds}"
            )

        data = record.model_dump_json()

        with self._lock:
            self._sweep_locked()

            for attempt in range(1, MAX_ID_ATTEMPTS + 1):
                now = self.clock()
                entry = ShareEntry(
                    id=self.id_factory(),
                    record=record,
                    created_at=now,
                    expires_at=now + ttl_seconds,
                )
                try:
                    with session_scope(self._session_factory) as session:
                        session.add(SharedExam(
                            id=entry.id,
                            data=data,
                            expires_at=entry.expires_at,
                            created_at=entry.created_at,
                        ))
                except IntegrityError:
                    logger.warning(
                        f"Share id collision on attempt {attempt}, generating a new id",
                        extra={"share_id": entry.id},
                    )
                    continue

                shares_created_total.inc()
                shares_stored.inc()
                logger.info(
                    f"Created share expiring in {ttl_seconds}s",
                    extra={"share_id": entry.id},
                )
                return entry

        raise RuntimeError(f"Could not allocate a unique share id after {MAX_ID_ATTEMPTS} attempts")

    def resolve(self, share_id: str) -> Optional[ShareEntry]:
        """Return the entry if it exists and has not expired, else None.

        Unknown and expired ids are indistinguishable. Never writes.
        """
        with self._lock:
            now = self.clock()
            with session_scope(self._session_factory) as session:
                row = session.execute(
                    select(SharedExam).where(
                        SharedExam.id == share_id,
                        SharedExam.expires_at > now,
                    )
                ).scalar_one_or_none()

                if row is None:
                    share_resolutions_total.labels(outcome="not_found").inc()
                    return None

                entry = ShareEntry(
                    id=row.id,
                    record=ExamRecord.model_validate_json(row.data),
                    created_at=row.created_at,
                    expires_at=row.expires_at,
                )

        share_resolutions_total.labels(outcome="found").inc()
        return entry

    def sweep(self) -> int:
        """Delete every entry with expires_at <= now.

        Returns:
            Number of entries removed (0 on an already-clean store)
        """
        with self._lock:
            return self._sweep_locked()

    def count(self) -> int:
        """Number of rows physically stored, expired-but-unswept included."""
        with self._lock:
            with session_scope(self._session_factory) as session:
                total = session.execute(select(func.count()).select_from(SharedExam)).scalar_one()
        shares_stored.set(total)
        return total

    def _sweep_locked(self) -> int:
        now = self.clock()
        with session_scope(self._session_factory) as session:
            result = session.execute(
                delete(SharedExam).where(SharedExam.expires_at <= now)
            )
            removed = result.rowcount or 0

        if removed:
            shares_swept_total.inc(removed)
            shares_stored.dec(removed)
            logger.info(f"Swept {removed} expired shares", extra={"removed": removed})
        return removed
