import logging
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    app_name: str = "Outbound Survey"
    base_url: str = "http://localhost:8000"
    database_url: str = "sqlite:///survey.db"
    debug: bool = False
    log_level: str = "INFO"
    # 
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_phone_number: str | None = None
    #
    call_handler_url: str | None = None
    call_result_url: str | None = None
    #
    survey_script: str | None = None
    survey_voice: str = "alice"
    survey_language: str = "en-US"
    survey_digits: int = 1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    
    @property
    def get_log_level(self) -> int:
        """Converts the LOG_LEVEL string into the logging constant.

        Returns:
            int: logging level, INFO when the name is not recognised
        """
        return getattr(logging, self.log_level.upper(), logging.INFO)

settings = Settings()
