from functools import lru_cache
from typing import Annotated, List

from fastapi import APIRouter, Form, HTTPException, Request, Response
from twilio.twiml.voice_response import Gather, VoiceResponse

from outbound_survey.api.typing import CallResultCallback, CallResultResponse, StoredCallResult
from outbound_survey.config import settings
from outbound_survey.db import StoreDep
from outbound_survey.enum import TwilioAnsweredBy
from outbound_survey.errors import StoreError
from outbound_survey.logger import get_logger
from outbound_survey.models import CallResult


logger = get_logger(__name__)

router = APIRouter(prefix="/survey", tags=["Survey"])

DEFAULT_SCRIPT = ["Hello! Thank you for taking part in our survey."]


@lru_cache
def read_script(path: str | None) -> List[str]:
    """Lines of the survey script, one prompt per non-blank line."""
    if not path:
        return DEFAULT_SCRIPT
    try:
        with open(path, encoding="utf-8") as script:
            return [line.strip() for line in script if line.strip()]
    except (OSError, UnicodeDecodeError):
        logger.exception("Unable to read the survey script %s, playing the default prompt.", path)
        return DEFAULT_SCRIPT


def twiml(resp: VoiceResponse) -> Response:
    return Response(content=str(resp), media_type="application/xml")


def save_result(payload: CallResultCallback, store) -> CallResult:
    if not payload.CallSid:
        raise HTTPException(
            status_code=422,
            detail=[
                {
                    "loc": ["body", "CallSid"],
                    "msg": "CallSid is required.",
                    "type": "value_error",
                }
            ],
        )

    result = CallResult.from_callback(payload)
    logger.info("Call result: %s", result)
    try:
        return store.save(result)
    except StoreError:
        logger.exception("Unable to store call results for SID: %s.", result.sid)
        return result


@router.post("/call-handler")
async def call_handler(request: Request):
    """TwiML played once the call is answered.

    Plays the survey script and, when configured, collects the callee's
    keypad answer. Hangs up straight away on answering machines.
    """
    payload = await request.form()
    logger.debug("/call-handler -> payload")
    logger.debug(payload)

    resp = VoiceResponse()
    answered_by = payload.get("AnsweredBy")
    if TwilioAnsweredBy.is_machine(answered_by):
        logger.info("Call %s answered by %s, hanging up", payload.get("CallSid"), answered_by)
        resp.hangup()
        return twiml(resp)

    if settings.survey_digits > 0:
        prompt = Gather(
            input="dtmf",
            num_digits=settings.survey_digits,
            action=f"{settings.base_url}/v1/survey/digits",
            method="POST",
        )
        resp.append(prompt)
    else:
        prompt = resp

    for line in read_script(settings.survey_script):
        prompt.say(line, voice=settings.survey_voice, language=settings.survey_language)

    # Nobody answered the prompt, hang up.
    resp.hangup()

    return twiml(resp)


@router.post("/digits")
async def digits(payload: Annotated[CallResultCallback, Form()], store: StoreDep):
    """Gather action: keeps the digits the callee entered."""
    save_result(payload, store)

    resp = VoiceResponse()
    resp.say("Thank you. Goodbye!", voice=settings.survey_voice, language=settings.survey_language)
    resp.hangup()

    return twiml(resp)


@router.post("/call-result")
async def call_result(payload: Annotated[CallResultCallback, Form()], store: StoreDep) -> CallResultResponse:
    """Status callback: stores how the call ended."""
    result = save_result(payload, store)

    return CallResultResponse(call_sid=result.sid, status=str(result.status))


@router.get("/results/{sid}")
async def get_result(sid: str, store: StoreDep) -> StoredCallResult:
    result = store.get(sid)
    if result is None:
        raise HTTPException(status_code=404, detail="Call result not found.")

    return StoredCallResult(
        sid=result.sid,
        destination=result.destination,
        duration=result.duration,
        human_answered=result.human_answered,
        status=str(result.status),
        direction=str(result.direction),
        call_date=result.call_date.isoformat() if result.call_date else None,
        digits=result.digits,
    )
