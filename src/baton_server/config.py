"""Configuration module for baton-server using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BatonServerSettings(BaseSettings):
    """Main configuration settings for baton-server.

    All settings can be overridden via environment variables with the BATON_ prefix.
    For example, BATON_PROBE_INTERVAL_SECONDS will override probe_interval_seconds.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = Field(default=9000, ge=1, le=65535)

    # Reasoning model (Ollama)
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    reasoning_temperature: float = 0.7

    # Seed agents
    seed_default_agents: bool = True
    wallet_balance_agent_url: str = "http://localhost:41252"
    negotiation_agent_url: str = "http://localhost:41251"
    payment_agent_url: str = "http://localhost:41245"

    # Agent transport
    agent_message_path: str = "/a2a/messages"
    probe_path: str = "/health"

    # Timing
    probe_on_startup: bool = True
    probe_interval_seconds: float = Field(default=30.0, gt=0)
    probe_timeout_seconds: float = Field(default=5.0, gt=0)
    step_timeout_seconds: float = Field(default=30.0, gt=0)

    # Retention
    session_timeout_seconds: float = Field(default=3600.0, gt=0)
    max_sessions: int = Field(default=100, ge=1)
    workflow_retention_seconds: float = Field(default=3600.0, gt=0)
    max_workflow_instances: int = Field(default=500, ge=1)
    housekeeping_interval_seconds: float = Field(default=60.0, gt=0)

    # Output formatting
    result_preview_chars: int = Field(default=200, ge=1)

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="BATON_")
