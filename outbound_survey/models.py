from typing import Any, Optional
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from sqlalchemy import Column, DateTime, func

from sqlmodel import SQLModel, Field

from outbound_survey.enum import CallStatus, CallDirection, TwilioAnsweredBy
from outbound_survey.logger import get_logger


logger = get_logger(__name__)


def create_timestamp():
    return datetime.now(timezone.utc)


def parse_duration(value: Any) -> int:
    """Reads a call duration in seconds, falling back to 0."""
    if value is None or value == "":
        return 0
    try:
        duration = int(value)
    except (TypeError, ValueError):
        logger.warning("Unable to read the call duration: %r", value)
        return 0
    return max(duration, 0)


def parse_timestamp(value: Any) -> datetime | None:
    """Reads an RFC 2822 timestamp (``Wed, 18 Nov 2015 19:00:00 +0000``)."""
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning("Unable to read the call timestamp: %r", value)
        return None


class CallResult(SQLModel, table=True):
    """Outcome of one call attempt.

    Identity is the Twilio call SID: two results are equal when their SIDs are
    equal, whatever else they carry. A result without a SID is a call that was
    never placed and only equals itself.
    """
    __tablename__ = "call_results"

    sid: str | None = Field(default=None, primary_key=True, max_length=64)
    destination: str = Field(index=True, max_length=32)
    duration: int = Field(default=0)
    human_answered: bool = Field(default=False)
    status: CallStatus = Field(sa_column=CallStatus.Column(index=True), default=CallStatus.UNKNOWN)
    direction: CallDirection = Field(sa_column=CallDirection.Column(), default=CallDirection.UNKNOWN)
    call_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    digits: str | None = Field(default=None, max_length=32)

    created_at: Optional[datetime] = Field(default_factory=create_timestamp)
    updated_at: Optional[datetime] = Field(
        default_factory=create_timestamp,
        sa_column=Column(
            DateTime(timezone=True), onupdate=func.now(), default=func.now()
        )
    )

    def __eq__(self, other):
        if not isinstance(other, CallResult):
            return NotImplemented
        if self.sid is None or other.sid is None:
            return self is other
        return self.sid == other.sid

    def __hash__(self):
        if self.sid is None:
            return id(self)
        return hash(self.sid)

    @classmethod
    def from_call(cls, call) -> "CallResult":
        """Snapshot of a call as returned by ``client.calls.create``.

        The call is still in flight at this point, so the status is usually
        ``queued``. Digits are never known at dial time.
        """
        return cls(
            sid=call.sid,
            destination=call.to,
            duration=parse_duration(call.duration),
            human_answered=call.answered_by == TwilioAnsweredBy.HUMAN,
            status=CallStatus.from_desc(call.status),
            direction=CallDirection.from_desc(call.direction),
            call_date=parse_timestamp(call.date_created),
        )

    @classmethod
    def from_callback(cls, payload) -> "CallResult":
        """Maps a Twilio callback (see ``CallResultCallback``) into a result."""
        return cls(
            sid=payload.CallSid,
            destination=payload.Caller or payload.To or "",
            duration=parse_duration(payload.CallDuration),
            human_answered=payload.AnsweredBy == TwilioAnsweredBy.HUMAN,
            status=CallStatus.from_desc(payload.CallStatus),
            direction=CallDirection.from_desc(payload.Direction),
            call_date=parse_timestamp(payload.Timestamp),
            digits=payload.Digits or None,
        )

    @classmethod
    def failed_call(cls, destination: str) -> "CallResult":
        return cls(destination=destination, status=CallStatus.FAILED)

    def update_from(self, other: "CallResult"):
        """Takes the newer values reported for the same call.

        Digits, timestamp and destination are only replaced when the newer
        report carries them; the terminal status callback doesn't repeat digits
        gathered earlier in the call.
        """
        self.duration = other.duration
        self.human_answered = self.human_answered or other.human_answered
        self.status = other.status
        self.direction = other.direction
        if other.destination:
            self.destination = other.destination
        if other.call_date is not None:
            self.call_date = other.call_date
        if other.digits:
            self.digits = other.digits


__all__ = [
    "CallResult",
    "parse_duration",
    "parse_timestamp",
]
