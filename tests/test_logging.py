"""Tests for structured logging configuration."""

import json
from collections.abc import Iterator

import pytest
import structlog

from hauspreis.utils.logging import configure_logging, get_logger, log_context


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that JSON events go to stderr with context."""
        configure_logging("INFO", json_output=True)
        log = get_logger("hauspreis.test")

        with log_context(method="lasso"):
            log.info("Training model", n_samples=90)

        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip().splitlines()[-1])
        assert event["event"] == "Training model"
        assert event["method"] == "lasso"
        assert event["n_samples"] == 90
        assert event["level"] == "info"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that events below the level are dropped."""
        configure_logging("WARNING", json_output=True)
        log = get_logger("hauspreis.test")

        log.info("hidden")
        log.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_context_is_scoped(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that bound context ends with the block."""
        configure_logging("INFO", json_output=True)
        log = get_logger("hauspreis.test")

        with log_context(method="ridge"):
            pass
        log.info("after")

        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert "method" not in event
