"""
Write serialization for scheduling.

Booking and availability replacement are read-then-decide-then-write. Requests
touching the same interviewer (or the same candidate) must not interleave, so
writers hold:

- a process-local lock per interviewer / candidate id (covers SQLite, which
  ignores SELECT ... FOR UPDATE), and
- row locks on those rows inside the request's transaction (covers several
  worker processes against PostgreSQL/MySQL).

Locks are always taken candidate first, then interviewer. Row locks are
released by the transaction's commit/rollback.
"""
import threading
import weakref
from contextlib import ExitStack, contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from ..models.candidate import Candidate
from ..models.interviewer import Interviewer

_registry_lock = threading.Lock()
# Entries vanish once no request holds or waits on the lock.
_locks: "weakref.WeakValueDictionary[tuple[str, int], threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(kind: str, key: int) -> threading.Lock:
    with _registry_lock:
        lock = _locks.get((kind, key))
        if lock is None:
            lock = threading.Lock()
            _locks[(kind, key)] = lock
        return lock


@contextmanager
def scheduling_lock(*, interviewer_id: int, candidate_id: int | None = None) -> Iterator[None]:
    with ExitStack() as stack:
        if candidate_id is not None:
            stack.enter_context(_lock_for("candidate", int(candidate_id)))
        stack.enter_context(_lock_for("interviewer", int(interviewer_id)))
        yield


def lock_interviewer_row(db: Session, interviewer_id: int) -> Interviewer | None:
    return (
        db.query(Interviewer)
        .filter(Interviewer.id == int(interviewer_id))
        .with_for_update()
        .first()
    )


def lock_candidate_row(db: Session, candidate_id: int) -> Candidate | None:
    return (
        db.query(Candidate)
        .filter(Candidate.id == int(candidate_id))
        .with_for_update()
        .first()
    )
