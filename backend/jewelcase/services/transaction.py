# Overview: Unit-of-work helper shared by the mutating services.

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy.orm import Session


@contextmanager
def atomic(session: Session):
    """
    Run the enclosed block as one transaction on the given session.

    Commits on success. On any exception the session is rolled back and the
    exception propagates, so partial writes are never observable.
    No retry: concurrent writers race at the storage engine level.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
