"""
Configuration Module
====================

Loads application settings from environment variables and the ``.env`` file:
default category column, output format and log level.
"""

from pydantic_settings import BaseSettings
from pydantic import field_validator
from dotenv import load_dotenv

load_dotenv()

_OUTPUT_FORMATS = ("json", "yaml")


class Settings(BaseSettings):
    """
    Application settings, populated from the environment by pydantic.

    Attributes:
        CATEGORY_COLUMN: column holding the configuration item of each row
        OUTPUT_FORMAT: serialization format of the output document (json | yaml)
        OUTPUT_INDENT: indentation used when writing JSON
        LOG_LEVEL: level of the ``configbook`` logger
    """
    CATEGORY_COLUMN: str = "configuration_item"
    OUTPUT_FORMAT: str = "json"
    OUTPUT_INDENT: int = 2
    LOG_LEVEL: str = "INFO"

    @field_validator("CATEGORY_COLUMN")
    @classmethod
    def validate_category_column(cls, v: str) -> str:
        """Fall back to the conventional column name when left blank."""
        if v is None or v.strip() == "":
            return "configuration_item"
        return v.strip()

    @field_validator("OUTPUT_FORMAT")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        fmt = (v or "").strip().lower()
        if fmt not in _OUTPUT_FORMATS:
            raise ValueError(
                f"OUTPUT_FORMAT must be one of {_OUTPUT_FORMATS}, got {v!r}"
            )
        return fmt

    class Config:
        env_file = ".env"
        case_sensitive = False


# Process-wide singleton so the environment is read once
_settings_instance = None


def get_settings() -> Settings:
    """
    Return the settings singleton, creating it on first call.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
