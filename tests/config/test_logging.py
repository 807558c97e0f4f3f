"""Tests for structlog configuration."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Generator

import pytest
import structlog

from depgraph.config.logging import HANDLER_NAME, build_handler, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    app = logging.getLogger("depgraph")
    app_level = app.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    app.setLevel(app_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("depgraph").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("depgraph").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        structlog.get_logger("depgraph.test").warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "depgraph.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("depgraph.services.cycles").debug("Analyzing circular dependencies")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Analyzing circular dependencies"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "depgraph.services.cycles"

    def test_sqlalchemy_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("sqlalchemy.engine").debug("SELECT noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        ours = [h for h in logging.getLogger().handlers if h.get_name() == HANDLER_NAME]
        assert len(ours) == 1

    def test_foreign_handlers_survive(self) -> None:
        foreign = logging.NullHandler()
        logging.getLogger().addHandler(foreign)
        configure_logging()
        assert foreign in logging.getLogger().handlers


class TestBuildHandler:
    def test_json_traceback_is_structured(self) -> None:
        stream = io.StringIO()
        handler = build_handler(log_json=True, stream=stream)
        logger = logging.getLogger("depgraph.test.handler")
        logger.addHandler(handler)
        logger.propagate = False
        try:
            try:
                raise ValueError("bad manifest")
            except ValueError:
                logger.exception("ingest failed")
        finally:
            logger.removeHandler(handler)
            logger.propagate = True
        parsed = json.loads(stream.getvalue())
        assert parsed["event"] == "ingest failed"
        assert parsed["exception"][0]["exc_type"] == "ValueError"
