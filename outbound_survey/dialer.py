from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client
from twilio.rest.api.v2010.account.call import CallInstance

from outbound_survey.errors import AuthenticationError, DialError
from outbound_survey.logger import get_logger


logger = get_logger(__name__)

RING_TIMEOUT = 30


class Dialer:
    """Places survey calls through Twilio, one destination at a time.

    Every call rings for at most 30 seconds and runs answering machine
    detection; the call handler hangs up when a machine answers.
    """

    def __init__(self, configuration):
        try:
            self.client = Client(configuration.account_sid, configuration.auth_token)
        except TwilioException as e:
            raise AuthenticationError(f"Unable to set up the Twilio client: {e}") from e

        self.call_params = dict(
            from_=configuration.caller_number,
            url=configuration.call_handler_url,
            method="POST",
            status_callback=configuration.call_result_url,
            status_callback_method="POST",
            timeout=RING_TIMEOUT,
            machine_detection="Enable",
        )

    def dial(self, destination: str) -> CallInstance:
        """Queues a call to ``destination``.

        Returns the call as Twilio acknowledged it, usually still ``queued``.
        The final outcome arrives later on the status callback.

        Raises:
            DialError: Twilio rejected the call or couldn't be reached
        """
        logger.debug("Queuing phone call to %s", destination)
        try:
            return self.client.calls.create(to=destination, **self.call_params)
        except TwilioRestException as e:
            raise DialError(destination, e.msg, status=e.status) from e
        except (TwilioException, OSError) as e:
            raise DialError(destination, str(e)) from e
