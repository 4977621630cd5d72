from typing import Iterable

from pydantic import ValidationError

from outbound_survey.errors import InvalidConfiguration
from outbound_survey.survey.configuration import SurveyConfiguration
from outbound_survey.survey.orchestrator import SurveyOrchestrator


class SurveyBuilder:
    """Collects the survey parameters and builds a ready-to-run orchestrator.

    Example:
        orchestrator = (
            SurveyBuilder()
            .with_numbers_csv("numbers.csv")
            .with_database("survey.db")
            .with_call_handler_url("https://example.org/v1/survey/call-handler")
            .with_call_result_url("https://example.org/v1/survey/call-result")
            .with_account_sid(account_sid)
            .with_auth_token(auth_token)
            .with_caller_number("+351210000000")
            .build()
        )
    """

    def __init__(self):
        self._fields = {}

    def with_caller_number(self, caller_number: str) -> "SurveyBuilder":
        self._fields["caller_number"] = caller_number
        return self

    def with_numbers_csv(self, numbers_csv: str) -> "SurveyBuilder":
        self._fields["numbers_csv"] = numbers_csv
        self._fields["file_based"] = True
        self._fields.pop("numbers", None)
        return self

    def with_numbers(self, numbers: Iterable[str]) -> "SurveyBuilder":
        self._fields["numbers"] = tuple(numbers) if numbers is not None else None
        self._fields["file_based"] = False
        self._fields.pop("numbers_csv", None)
        return self

    def with_database(self, database: str) -> "SurveyBuilder":
        self._fields["database"] = database
        return self

    def with_call_handler_url(self, call_handler_url: str) -> "SurveyBuilder":
        self._fields["call_handler_url"] = call_handler_url
        return self

    def with_call_result_url(self, call_result_url: str) -> "SurveyBuilder":
        self._fields["call_result_url"] = call_result_url
        return self

    def with_account_sid(self, account_sid: str) -> "SurveyBuilder":
        self._fields["account_sid"] = account_sid
        return self

    def with_auth_token(self, auth_token: str) -> "SurveyBuilder":
        self._fields["auth_token"] = auth_token
        return self

    def with_international_prefix(self, international_prefix: str) -> "SurveyBuilder":
        self._fields["international_prefix"] = international_prefix
        self._fields["prefix_configured"] = True
        return self

    def build_configuration(self) -> SurveyConfiguration:
        """Validates the collected parameters.

        Raises:
            InvalidConfiguration: on the first missing or malformed parameter
        """
        try:
            return SurveyConfiguration(**self._fields)
        except ValidationError as e:
            error = e.errors()[0]
            field = error.get("ctx", {}).get("field") or ".".join(str(loc) for loc in error["loc"])
            raise InvalidConfiguration(field, error["msg"]) from e

    def build(self, **kwargs) -> SurveyOrchestrator:
        """Validates the parameters and sets up the orchestrator.

        Keyword arguments are passed to ``SurveyOrchestrator``.

        Raises:
            InvalidConfiguration: on the first missing or malformed parameter
            AuthenticationError: the Twilio client can't be set up
        """
        return SurveyOrchestrator(self.build_configuration(), **kwargs)
