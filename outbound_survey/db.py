import threading
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine, select

from outbound_survey.enum import CallStatus
from outbound_survey.errors import StoreError
from outbound_survey.logger import get_logger
from outbound_survey.models import CallResult


logger = get_logger(__name__)


def database_url(location: str) -> str:
    """Accepts a SQLAlchemy URL or a plain path to a SQLite file."""
    if "://" in location:
        return location
    return f"sqlite:///{location}"


class ResultStore:
    """Durable store of call results, keyed by call SID."""

    def __init__(self, engine):
        self.engine = engine
        # Callbacks arrive a handful at a time, one coarse lock is enough.
        self._lock = threading.Lock()

    @classmethod
    def open(cls, location: str) -> "ResultStore":
        """Connects to the store and creates the results table if it is missing.

        Raises:
            StoreError: the store can't be reached or initialised, or its
                database driver isn't installed
        """
        url = database_url(location)
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        try:
            engine = create_engine(url, connect_args=connect_args)
            SQLModel.metadata.create_all(engine)
        except (SQLAlchemyError, ImportError) as e:
            raise StoreError(f"Unable to initialize the result store at {location}") from e

        logger.debug("Result store open at %s", location)
        return cls(engine)

    def completed_destinations(self) -> list[str]:
        """Destinations already reached by a completed call, in any run."""
        statement = select(CallResult.destination).where(
            CallResult.status == CallStatus.COMPLETED
        )
        try:
            with Session(self.engine) as session:
                return list(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise StoreError("Unable to query the completed calls") from e

    def get(self, sid: str) -> CallResult | None:
        with Session(self.engine) as session:
            return session.get(CallResult, sid)

    def save(self, result: CallResult) -> CallResult:
        """Inserts the result, or updates the stored one with the same SID.

        Raises:
            StoreError: the result has no SID or the write failed
        """
        if result.sid is None:
            raise StoreError(f"Call result for {result.destination} has no call SID")

        with self._lock, Session(self.engine) as session:
            try:
                stored = session.get(CallResult, result.sid)
                if stored is None:
                    stored = result
                else:
                    stored.update_from(result)
                session.add(stored)
                session.commit()
                session.refresh(stored)
            except SQLAlchemyError as e:
                session.rollback()
                raise StoreError(f"Unable to store call result for SID {result.sid}") from e

        logger.debug("Call %s persisted.", stored.sid)
        return stored

    def close(self):
        try:
            self.engine.dispose()
        except SQLAlchemyError:
            logger.exception("Unable to close the result store.")


def get_store(request: Request) -> ResultStore:
    return request.app.state.store


StoreDep = Annotated[ResultStore, Depends(get_store)]
