"""
Application Settings for the Scholarship Matcher API
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from app.utils.exceptions import ConfigurationError

# Load environment variables from .env
load_dotenv()


class Settings(BaseModel):
    """Runtime configuration, read once at process start"""
    environment: str = Field(default="development", description="development, production or testing")
    log_level: str = Field(default="INFO", description="Root log level")

    rate_limit_max_requests: int = Field(default=25, ge=1, description="Requests allowed per client per window")
    rate_limit_window_seconds: float = Field(default=60.0, gt=0, description="Rate limit window length in seconds")

    max_body_bytes: int = Field(default=1024 * 1024, ge=1, description="Largest accepted request body")
    slow_request_threshold: float = Field(default=2.0, gt=0, description="Seconds before a request is logged as slow")

    catalog_path: Optional[str] = Field(default=None, description="JSON catalog file; mock catalog when unset")
    skip_invalid_records: bool = Field(default=True, description="Skip malformed catalog records instead of failing")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        v = v.strip().lower()
        if v not in ("development", "production", "testing"):
            raise ValueError("ENVIRONMENT must be development, production or testing")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        v = v.strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v


# Environment variable -> Settings field
ENV_VARS = {
    "ENVIRONMENT": "environment",
    "LOG_LEVEL": "log_level",
    "RATE_LIMIT_MAX_REQUESTS": "rate_limit_max_requests",
    "RATE_LIMIT_WINDOW_SECONDS": "rate_limit_window_seconds",
    "MAX_BODY_BYTES": "max_body_bytes",
    "SLOW_REQUEST_THRESHOLD": "slow_request_threshold",
    "CATALOG_PATH": "catalog_path",
    "SKIP_INVALID_RECORDS": "skip_invalid_records",
}


def get_settings() -> Settings:
    """Build settings from the environment, raising ConfigurationError on bad values"""
    values = {}
    for env_name, field_name in ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw.strip() != "":
            values[field_name] = raw.strip()

    try:
        return Settings(**values)
    except ValidationError as e:
        first = e.errors()[0]
        field_name = str(first["loc"][0]) if first.get("loc") else None
        env_name = next((k for k, v in ENV_VARS.items() if v == field_name), field_name)
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            config_key=env_name,
            config_value=values.get(field_name),
            cause=e,
        ) from e
