"""Settings via pydantic-settings with ASCENT_ env prefix.

Credentials and endpoints use validation_alias to read the unprefixed
env vars (GEMINI_API_KEY, GITHUB_TOKEN, ...) that the deployment already
exports, so one .env file serves both.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_BASE_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-1.5-pro:generateContent"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ASCENT_", env_file=".env")

    # Model endpoint, unprefixed aliases
    gemini_api_key: str = Field("", validation_alias="GEMINI_API_KEY")
    gemini_base_url: str = Field(DEFAULT_GEMINI_BASE_URL, validation_alias="GEMINI_BASE_URL")

    # Activity endpoint
    github_token: str = Field("", validation_alias="GITHUB_TOKEN")
    github_api_url: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"
    github_username: str = ""  # default user for /activity

    # Interview sessions
    opening_message: str = "I'm ready to discuss my design for {title}."
    max_sessions: int = Field(100, ge=1)

    # HTTP
    http_timeout: float = 60.0  # seconds, one budget for the whole request

    # Runtime
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    def missing_credentials(self) -> list[str]:
        """Names of required configuration values that are unset."""
        missing = []
        if not self.gemini_base_url:
            missing.append("GEMINI_BASE_URL")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.github_token:
            missing.append("GITHUB_TOKEN")
        return missing
