from typing import Optional
from pydantic import BaseModel


class CallResultCallback(BaseModel):
    """Form fields Twilio posts to the status callback and Gather action.

    Everything is optional: a malformed or partial callback still produces a
    result with default values instead of being rejected.
    """
    CallSid: Optional[str] = None
    Caller: Optional[str] = None
    To: Optional[str] = None
    CallDuration: Optional[str] = None
    AnsweredBy: Optional[str] = None
    CallStatus: Optional[str] = None
    Direction: Optional[str] = None
    Digits: Optional[str] = None
    Timestamp: Optional[str] = None


class CallResultResponse(BaseModel):
    call_sid: str
    status: str


class StoredCallResult(BaseModel):
    sid: str
    destination: str
    duration: int
    human_answered: bool
    status: str
    direction: str
    call_date: Optional[str] = None
    digits: Optional[str] = None
