from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic_core import PydanticCustomError


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _invalid(field: str, message: str, value=None):
    return PydanticCustomError(
        "invalid_configuration",
        message,
        {"field": field, "value": value},
    )


class SurveyConfiguration(BaseModel):
    """Everything a survey run needs. Immutable once validated.

    Numbers come either from a CSV file (``file_based``) or from an in-memory
    list, never both.
    """
    model_config = ConfigDict(frozen=True)

    numbers_csv: Optional[str] = None
    numbers: Optional[Tuple[str, ...]] = None
    file_based: bool = True
    database: Optional[str] = None
    call_handler_url: Optional[str] = None
    call_result_url: Optional[str] = None
    account_sid: Optional[str] = None
    auth_token: Optional[str] = None
    caller_number: Optional[str] = None
    prefix_configured: bool = False
    international_prefix: Optional[str] = None

    @model_validator(mode="after")
    def validate_survey(self) -> "SurveyConfiguration":
        if self.file_based:
            if _is_blank(self.numbers_csv) or not self.numbers_csv.lower().endswith(".csv"):
                raise _invalid("numbers_csv", "Invalid CSV file: {value}", self.numbers_csv)
        elif not self.numbers:
            raise _invalid("numbers", "Invalid or empty numbers list.")

        if _is_blank(self.database):
            raise _invalid("database", "Invalid result store location: {value}", self.database)

        for field, label in (
            ("call_handler_url", "call handler URL"),
            ("call_result_url", "call result URL"),
            ("account_sid", "Twilio account SID"),
            ("auth_token", "auth token"),
            ("caller_number", "Twilio caller number"),
        ):
            value = getattr(self, field)
            if _is_blank(value):
                raise _invalid(field, f"Invalid {label}: {{value}}", value)

        if self.prefix_configured and _is_blank(self.international_prefix):
            raise _invalid(
                "international_prefix", "Invalid international prefix: {value}", self.international_prefix
            )

        return self
