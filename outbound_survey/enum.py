import enum
from sqlalchemy import Column, Integer
from sqlalchemy.types import TypeDecorator


class BaseEnum(str, enum.Enum):

    def __str__(self):
        return self.value


class CodedEnum(BaseEnum):
    """Enum carrying both the provider's wire value and a stable internal code.

    The wire value is the enum value, so members compare equal to the strings
    Twilio sends. The internal code is what gets persisted. Every subclass must
    define an UNKNOWN member, which is what unrecognised values decode to.

    Codes are append-only: new wire values get new codes and a retired code is
    never handed out again.
    """

    def __new__(cls, desc: str, code: int):
        member = str.__new__(cls, desc)
        member._value_ = desc
        member.code = code
        return member

    @classmethod
    def from_desc(cls, desc: str | None):
        return cls._value2member_map_.get(desc, cls.UNKNOWN)

    @classmethod
    def from_code(cls, code: int | None):
        for member in cls:
            if member.code == code:
                return member
        return cls.UNKNOWN

    @classmethod
    def Column(cls, **kwargs):
        return Column(CodedEnumType(cls), nullable=False, **kwargs)


class CodedEnumType(TypeDecorator):
    """Persists a CodedEnum as its integer code."""

    impl = Integer
    cache_ok = True

    def __init__(self, enum_class, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        return self.enum_class.from_desc(value).code

    def process_result_value(self, value, dialect):
        return self.enum_class.from_code(value)


class CallStatus(CodedEnum):
    """https://www.twilio.com/docs/voice/api/call-resource#call-status-values
    """
    QUEUED = ("queued", 0)              # The call is ready and waiting in line before dialing.
    INITIATED = ("initiated", 1)
    RINGING = ("ringing", 2)            # The call is currently ringing.
    IN_PROGRESS = ("in-progress", 3)    # The call was answered and is currently in progress.
    CANCELED = ("canceled", 4)          # The call was hung up while it was queued or ringing.
    COMPLETED = ("completed", 5)        # The call was answered and has ended normally.
    BUSY = ("busy", 6)                  # The caller received a busy signal.
    FAILED = ("failed", 7)              # The call could not be completed as dialed.
    NO_ANSWER = ("no-answer", 8)        # There was no answer or the call was rejected.
    UNKNOWN = ("unknown", -1)


class CallDirection(CodedEnum):
    INBOUND = ("inbound", 0)
    OUTBOUND = ("outbound-api", 1)
    UNKNOWN = ("unknown", -1)


class TwilioAnsweredBy(BaseEnum):
    """https://www.twilio.com/docs/voice/answering-machine-detection#webhook-parameters
    """
    HUMAN = "human"
    MACHINE_START = "machine_start"
    MACHINE_END_BEEP = "machine_end_beep"
    MACHINE_END_SILENCE = "machine_end_silence"
    MACHINE_END_OTHER = "machine_end_other"
    FAX = "fax"
    UNKNOWN = "unknown"

    @classmethod
    def is_machine(cls, answered_by: str | None) -> bool:
        return answered_by in (
            cls.MACHINE_START,
            cls.MACHINE_END_BEEP,
            cls.MACHINE_END_SILENCE,
            cls.MACHINE_END_OTHER,
            cls.FAX,
        )


class RunState(BaseEnum):
    NOT_STARTED = "not-started"
    STORE_OPEN = "store-open"
    NUMBERS_RESOLVED = "numbers-resolved"
    DIALING = "dialing"
    AGGREGATED = "aggregated"
    STORE_CLOSED = "store-closed"
    FAILED = "failed"
