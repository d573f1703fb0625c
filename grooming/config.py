"""Application configuration via Pydantic Settings.

NOTE: We explicitly map the .env variable names (JIRA_URL, OPENAI_API_KEY,
GROOMING_LOOKBACK_DAYS, etc.) to avoid silent misconfiguration.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

EMAIL_RE = re.compile(r'^[^\s@"\\]+@[^\s@"\\]+\.[^\s@"\\]+$')


def split_email_list(raw: str) -> list[str]:
    """Split a comma-separated email list, rejecting malformed entries."""
    emails = [e.strip() for e in (raw or "").split(",") if e.strip()]
    invalid = [e for e in emails if not EMAIL_RE.match(e)]
    if invalid:
        raise ValueError(f"Invalid email format(s): {', '.join(invalid)}")
    return emails


class Settings(BaseSettings):
    # Jira
    jira_url: str = Field(default="", validation_alias="JIRA_URL")
    jira_username: str = Field(default="", validation_alias="JIRA_USERNAME")
    jira_token: str = Field(default="", validation_alias="JIRA_TOKEN")
    jira_assignee_emails: str = Field(default="", validation_alias="JIRA_ASSIGNEE_EMAILS")
    jira_max_results: int = Field(default=1000, ge=1, validation_alias="JIRA_MAX_RESULTS")

    # Grooming
    grooming_engineer_emails: str = Field(default="", validation_alias="GROOMING_ENGINEER_EMAILS")
    grooming_lookback_days: int = Field(default=90, ge=1, validation_alias="GROOMING_LOOKBACK_DAYS")
    consensus_trials: int = Field(default=5, ge=1, validation_alias="CONSENSUS_TRIALS")

    # OpenAI
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
    llm_temperature: float = Field(default=0.3, ge=0.0, le=1.0, validation_alias="LLM_TEMPERATURE")
    trial_temperature: float = Field(default=0.8, ge=0.0, le=2.0, validation_alias="TRIAL_TEMPERATURE")

    # App
    debug: bool = Field(default=False, validation_alias="DEBUG")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("jira_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not re.match(r"^https?://[^/\s]+", value):
            raise ValueError(
                f"Invalid JIRA_URL format: {value} (expected https://your-company.atlassian.net)"
            )
        return value

    @field_validator("jira_assignee_emails", "grooming_engineer_emails")
    @classmethod
    def _validate_emails(cls, value: str) -> str:
        split_email_list(value)
        return value

    @property
    def assignee_emails(self) -> list[str]:
        return split_email_list(self.jira_assignee_emails)

    @property
    def engineer_emails(self) -> list[str]:
        """Engineers considered for grooming; defaults to the assignee list."""
        return split_email_list(self.grooming_engineer_emails) or self.assignee_emails


settings = Settings()
