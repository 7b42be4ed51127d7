# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
mtrrun Configuration — Environment-driven settings.

All configuration is loaded from environment variables (or .env file).
The agent reads AGENT_* variables, the collector server reads SERVER_*.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class AgentSettings(BaseSettings):
    """Agent configuration loaded from environment."""

    # ── Collector endpoint ────────────────────────────────────
    HOST: str = Field(
        default="127.0.0.1:8080",
        description="host:port of the collector server",
    )
    TIMEOUT: float = Field(
        default=5.0,
        description="Per-request timeout in seconds",
    )
    MAX_IDLE_CONNS: int = Field(
        default=100,
        description="Max idle keep-alive connections kept in the pool",
    )

    # ── Report cycle ──────────────────────────────────────────
    MAX_REQUESTS_PER_MOMENT: int = Field(
        default=5,
        description="Max concurrent update requests within one report cycle",
    )
    REPORT_INTERVAL: float = Field(
        default=2.0,
        description="Seconds between report cycles",
    )
    POLL_INTERVAL: float = Field(
        default=10.0,
        description="Seconds between runtime metric polls",
    )

    LOG_LEVEL: str = Field(default="INFO")

    model_config = {
        "env_prefix": "AGENT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",  # Server vars may share the .env
    }


class ServerSettings(BaseSettings):
    """Collector server configuration loaded from environment."""

    HOST: str = Field(default="127.0.0.1", description="Bind host")
    PORT: int = Field(default=8080, description="Bind port")
    LOG_LEVEL: str = Field(default="INFO")

    model_config = {
        "env_prefix": "SERVER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


_agent_settings: AgentSettings | None = None
_server_settings: ServerSettings | None = None


def get_agent_settings() -> AgentSettings:
    """Return a cached AgentSettings singleton."""
    global _agent_settings
    if _agent_settings is None:
        _agent_settings = AgentSettings()
    return _agent_settings


def get_server_settings() -> ServerSettings:
    """Return a cached ServerSettings singleton."""
    global _server_settings
    if _server_settings is None:
        _server_settings = ServerSettings()
    return _server_settings
