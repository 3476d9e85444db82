from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.enums import WeekStart

load_dotenv()

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Bot token
    calendar_bot_token: str = Field(default="")

    # Where calendar instances keep their displayed month; in memory when blank
    state_file: Optional[Path] = Field(default=Path("calendar_state.json"))

    # Which calendars each chat has open; in memory when blank
    chat_data_file: Optional[Path] = Field(default=Path("calendar_chat_data.pickle"))

    # Grid layout and labels
    week_start: WeekStart = Field(default=WeekStart.SUNDAY)
    locale: str = Field(default="en")

    # Environment
    log_level: str = Field(default="INFO")
    environment: str = Field(default="development")

    @field_validator("state_file", "chat_data_file", mode="before")
    @classmethod
    def _blank_file_means_memory(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("week_start", mode="before")
    @classmethod
    def _week_start_is_case_insensitive(cls, value):
        return value.lower() if isinstance(value, str) else value

settings = Settings()
