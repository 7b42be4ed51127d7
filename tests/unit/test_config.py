# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.
"""Unit tests for agent and server settings."""

from mtrrun.core.config import AgentSettings, ServerSettings


class TestAgentSettings:
    def test_defaults(self):
        s = AgentSettings(_env_file=None)
        assert s.HOST == "127.0.0.1:8080"
        assert s.TIMEOUT == 5.0
        assert s.MAX_IDLE_CONNS == 100
        assert s.MAX_REQUESTS_PER_MOMENT == 5
        assert s.REPORT_INTERVAL == 2.0
        assert s.POLL_INTERVAL == 10.0
        assert s.LOG_LEVEL == "INFO"

    def test_custom_values(self):
        s = AgentSettings(_env_file=None, HOST="collector:9000", REPORT_INTERVAL=0.5)
        assert s.HOST == "collector:9000"
        assert s.REPORT_INTERVAL == 0.5

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("AGENT_HOST", "from-env:8080")
        monkeypatch.setenv("AGENT_MAX_REQUESTS_PER_MOMENT", "9")
        s = AgentSettings(_env_file=None)
        assert s.HOST == "from-env:8080"
        assert s.MAX_REQUESTS_PER_MOMENT == 9

    def test_server_vars_ignored(self, monkeypatch):
        monkeypatch.setenv("SERVER_PORT", "9999")
        s = AgentSettings(_env_file=None)
        assert s.HOST == "127.0.0.1:8080"


class TestServerSettings:
    def test_defaults(self):
        s = ServerSettings(_env_file=None)
        assert s.HOST == "127.0.0.1"
        assert s.PORT == 8080
        assert s.LOG_LEVEL == "INFO"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SERVER_PORT", "9090")
        assert ServerSettings(_env_file=None).PORT == 9090
