import logging

from pydantic import BaseModel, ValidationError, field_validator

from catalog import SUPPORTED_AVAILABILITY


class SettingsSchema(BaseModel):
    db_path: str = "training.db"
    default_weekly_availability: int = 3
    fallback_weekly_availability: int = 4
    log_level: str = "WARNING"

    @field_validator("default_weekly_availability", "fallback_weekly_availability")
    @classmethod
    def _supported_split(cls, value: int) -> int:
        if value not in SUPPORTED_AVAILABILITY:
            raise ValueError(f"must be one of {list(SUPPORTED_AVAILABILITY)}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value}")
        return value

def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
