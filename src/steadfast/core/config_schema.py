"""Pydantic models for steadfast config files."""

from __future__ import annotations

from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors.types import ErrorCategory


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Optional[str] = None
    format: Optional[Literal["kv", "json", "pretty"]] = None
    console: Optional[bool] = None
    file: Optional[bool] = None
    dev_file: Optional[bool] = Field(None, alias="devFile")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class PolicyOverride(BaseModel):
    """Partial retry policy; unset fields keep the category default."""
    eligible: Optional[bool] = None
    max_attempts: Optional[int] = Field(None, alias="maxAttempts", ge=0)
    base_delay_ms: Optional[int] = Field(None, alias="baseDelayMs", ge=0)
    max_delay_ms: Optional[int] = Field(None, alias="maxDelayMs", ge=0)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class RetryConfig(BaseModel):
    """Retry policy overrides keyed by error category."""
    policies: Dict[ErrorCategory, PolicyOverride] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class Config(BaseModel):
    """Main configuration schema."""
    schema_: Optional[str] = Field(None, alias="$schema")
    log_level: Optional[str] = Field(None, alias="logLevel")
    logging: Optional[LoggingConfig] = None
    retry: RetryConfig = Field(default_factory=RetryConfig)
    messages: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @model_validator(mode="after")
    def _reject_blank_messages(self) -> "Config":
        blank = sorted(code for code, text in self.messages.items() if not text.strip())
        if blank:
            raise ValueError(f"messages must not be empty: {', '.join(blank)}")
        return self
