"""Tests for environment settings and the command line interface."""

import logging

import pytest
from pydantic import ValidationError
from typer.testing import CliRunner

import crisis_cli
from crisislens.core import config as crisis_config
from crisislens.core import logging as crisis_logging
from crisislens.core.config import Settings, get_settings
from crisislens.core.exceptions import ConfigurationError

runner = CliRunner()


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(crisis_config, "settings", None)
    monkeypatch.chdir(tmp_path)


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("OPENAI_API_KEY", "NEWS_API_KEY", "CRISISLENS_BATCH_SIZE", "CRISISLENS_OFFLINE"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("CRISISLENS_RESULT_LIMIT", "")

        settings = get_settings()

        assert settings.batch_size == 5
        assert settings.result_limit == 20
        assert settings.analysis_timeout_seconds == 30.0
        assert not settings.offline

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CRISISLENS_BATCH_SIZE", "3")
        monkeypatch.setenv("CRISISLENS_OFFLINE", "yes")
        monkeypatch.setenv("CRISISLENS_ANALYSIS_TIMEOUT_SECONDS", "none")
        monkeypatch.setenv("CRISISLENS_INCLUDE_TIMING", "false")

        settings = get_settings()

        assert settings.batch_size == 3
        assert settings.offline
        assert settings.analysis_timeout_seconds is None
        assert not settings.include_timing

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_field_names_accepted_in_code(self):
        settings = Settings(batch_size=2, offline=True)

        assert settings.batch_size == 2
        assert settings.offline

    @pytest.mark.parametrize("name,value", [
        ("CRISISLENS_BATCH_SIZE", "five"),
        ("CRISISLENS_BATCH_SIZE", "0"),
        ("CRISISLENS_RESULT_LIMIT", "-3"),
        ("CRISISLENS_ANALYSIS_TIMEOUT_SECONDS", "soon"),
    ])
    def test_invalid_values_raise_configuration_error(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            get_settings()

        assert "invalid configuration" in exc_info.value.message.lower()
        assert exc_info.value.details["errors"]

    def test_out_of_range_rejected_in_code(self):
        with pytest.raises(ValidationError):
            Settings(batch_size=0)



class TestLogging:
    def test_setup_installs_console_handler_once(self):
        crisis_logging.setup_logging(enable_file=False)
        crisis_logging.setup_logging(enable_file=False)

        ours = [h for h in logging.getLogger().handlers if getattr(h, "_crisislens", False)]
        assert len(ours) == 1

    def test_file_logging(self, tmp_path):
        crisis_logging.setup_logging(enable_file=True, log_dir=tmp_path)
        logging.getLogger("crisislens.test").error("disk check")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert (tmp_path / crisis_logging.ERROR_LOG_NAME).exists()
        crisis_logging.setup_logging(enable_file=False)


class TestCli:
    def test_version(self):
        result = runner.invoke(crisis_cli.app, ["version"])
        assert result.exit_code == 0
        assert "CRISISLENS" in result.output

    def test_aggregate_offline_json(self):
        result = runner.invoke(crisis_cli.app, ["aggregate", "--offline", "--json", "-n", "5"])

        assert result.exit_code == 0
        assert '"fallback_used": false' in result.output

    def test_briefing_offline(self):
        result = runner.invoke(crisis_cli.app, ["briefing", "--offline"])

        assert result.exit_code == 0
        assert "Recommendations" in result.output

    def test_sources_offline(self):
        result = runner.invoke(crisis_cli.app, ["sources", "--offline", "--check"])

        assert result.exit_code == 0
        assert "Wire Services" in result.output

    def test_invalid_environment_exits_cleanly(self, monkeypatch):
        monkeypatch.setenv("CRISISLENS_BATCH_SIZE", "five")

        result = runner.invoke(crisis_cli.app, ["aggregate", "--offline"])

        assert result.exit_code == 2
        assert "Invalid configuration" in result.output
