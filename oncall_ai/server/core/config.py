"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from oncall_ai.agent_core.runtime.models import LoopConfig
from oncall_ai.agent_core.safety.config import RateLimitConfig


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Server host address to bind to",
        alias="ONCALL_AI_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="Server port number",
        alias="ONCALL_AI_SERVER_PORT",
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="ONCALL_AI_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write logs to a file",
        alias="ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # Agent Loop Configuration
    # =====================================================================
    llm_model: str = Field(
        default="openai:gpt-4o",
        description="pydantic-ai model name used by the investigator",
        alias="ONCALL_AI_LLM_MODEL",
    )
    max_iterations: int = Field(
        default=15,
        description="Iteration budget per run",
        alias="AGENT_MAX_ITERATIONS",
    )
    timeout_seconds: float = Field(
        default=300.0,
        description="Wall-clock budget per engine invocation",
        alias="AGENT_TIMEOUT_SECONDS",
    )
    temperature: float = Field(
        default=0.2,
        description="LLM sampling temperature",
        alias="AGENT_TEMPERATURE",
    )
    max_tokens: int = Field(
        default=4096,
        description="LLM completion token ceiling",
        alias="AGENT_MAX_TOKENS",
    )

    # =====================================================================
    # Approval Configuration
    # =====================================================================
    approval_window_seconds: float = Field(
        default=1800.0,
        description="How long a destructive action waits for a decision before it expires",
        alias="APPROVAL_WINDOW_SECONDS",
    )
    continue_after_rejection: bool = Field(
        default=False,
        description="Keep a run going after a rejection instead of failing it",
        alias="CONTINUE_AFTER_REJECTION",
    )

    # =====================================================================
    # Rate Limit Configuration (per workspace)
    # =====================================================================
    rate_limit_window_seconds: float = Field(
        default=3600.0,
        description="Length of one rate-limit window",
        alias="RATE_LIMIT_WINDOW_SECONDS",
    )
    rate_limit_max_requests: int = Field(
        default=100,
        description="Tool calls allowed per window",
        alias="RATE_LIMIT_MAX_REQUESTS",
    )
    rate_limit_max_cost: float = Field(
        default=50.0,
        description="Estimated tool cost (USD) allowed per window",
        alias="RATE_LIMIT_MAX_COST",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: Optional[str] = Field(
        default=None,
        description="Async SQLAlchemy URL for run state and approvals; in-memory storage when unset",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def loop_config(self) -> LoopConfig:
        """Get agent loop limits as a ``LoopConfig``."""
        return LoopConfig(
            max_iterations=self.max_iterations,
            timeout_seconds=self.timeout_seconds,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    @property
    def rate_limit_config(self) -> RateLimitConfig:
        """Get per-workspace rate-limit ceilings as a ``RateLimitConfig``."""
        return RateLimitConfig(
            window_seconds=self.rate_limit_window_seconds,
            max_requests=self.rate_limit_max_requests,
            max_cost=self.rate_limit_max_cost,
        )


settings = Settings()
