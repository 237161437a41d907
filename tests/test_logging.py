#!/usr/bin/env python3
"""
Tests for the centralized logging module
"""

import json
import logging
import re
import sys


def _record(msg="Test message", level=logging.INFO, name="rainzones.test", exc_info=None, **extra):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for JSON-structured log formatter"""

    def test_formats_basic_entry_as_json(self):
        """Test that a record formats as JSON with a UTC timestamp."""
        from rainzones.core.logging import StructuredFormatter

        parsed = json.loads(StructuredFormatter().format(_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "rainzones.test"
        assert parsed["message"] == "Test message"
        assert "+00:00" in parsed["timestamp"]

    def test_includes_pipeline_extra_fields(self):
        """Test that pipeline extra fields are copied into the JSON entry."""
        from rainzones.core.logging import StructuredFormatter

        record = _record(stage="tiles", frame=1700000000, zoom=9, count=12)
        parsed = json.loads(StructuredFormatter().format(record))

        assert parsed["stage"] == "tiles"
        assert parsed["frame"] == 1700000000
        assert parsed["zoom"] == 9
        assert parsed["count"] == 12

    def test_omits_missing_extra_fields(self):
        """Test that absent extra fields are left out."""
        from rainzones.core.logging import StructuredFormatter

        parsed = json.loads(StructuredFormatter().format(_record()))
        assert "stage" not in parsed
        assert "zoom" not in parsed

    def test_includes_exception_info(self):
        """Test that exception tracebacks are included."""
        from rainzones.core.logging import StructuredFormatter

        try:
            raise ValueError("Tile decode failed")
        except ValueError:
            record = _record(msg="Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(StructuredFormatter().format(record))
        assert "ValueError" in parsed["exception"]
        assert "Tile decode failed" in parsed["exception"]


class TestConsoleFormatter:
    """Tests for human-readable console formatter"""

    def test_formats_with_clock_timestamp(self):
        """Test that console lines start with a clock timestamp."""
        from rainzones.core.logging import ConsoleFormatter

        output = ConsoleFormatter().format(_record(msg="Catalog fetched"))
        assert re.match(r"^\[\d{2}:\d{2}:\d{2}\] ", output)
        assert output.endswith("Catalog fetched")

    def test_prefixes_stage(self):
        """Test that the stage prefixes the message."""
        from rainzones.core.logging import ConsoleFormatter

        output = ConsoleFormatter().format(_record(msg="Fetched 4 tiles", stage="tiles"))
        assert "tiles: Fetched 4 tiles" in output

    def test_uses_level_icons(self):
        """Test that the level icon appears in the line."""
        from rainzones.core.logging import ConsoleFormatter

        formatter = ConsoleFormatter()
        error = formatter.format(_record(level=logging.ERROR))
        assert ConsoleFormatter.LEVEL_ICONS["ERROR"] in error


class TestSetupLogging:
    """Tests for setup_logging"""

    def test_returns_package_logger(self):
        """Test that setup_logging configures the package logger."""
        from rainzones.core.logging import setup_logging

        logger = setup_logging()
        assert logger.name == "rainzones"
        assert logger.propagate is False

    def test_respects_level(self):
        """Test that level names are accepted in any case."""
        from rainzones.core.logging import setup_logging

        assert setup_logging(level="DEBUG").level == logging.DEBUG
        assert setup_logging(level="warning").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        """Test that an unknown level name falls back to INFO."""
        from rainzones.core.logging import setup_logging

        assert setup_logging(level="LOUD").level == logging.INFO

    def test_reconfiguration_does_not_duplicate_handlers(self):
        """Test that calling setup_logging twice keeps one handler."""
        from rainzones.core.logging import setup_logging

        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_structured_output(self):
        """Test that structured=True installs the JSON formatter."""
        from rainzones.core.logging import StructuredFormatter, setup_logging

        logger = setup_logging(structured=True)
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_log_file_gets_json_lines(self, tmp_path):
        """Test that the log file receives JSON lines."""
        from rainzones.core.logging import get_logger, setup_logging

        log_file = tmp_path / "rainzones.log"
        setup_logging(level="INFO", log_file=str(log_file))

        get_logger("rainzones.processing.extractor").info("Frame done", extra={"stage": "extraction"})
        for handler in logging.getLogger("rainzones").handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "Frame done"
        assert entry["stage"] == "extraction"

    def test_console_goes_to_stderr(self, capsys):
        """Test that console logs go to stderr and leave stdout alone."""
        from rainzones.core.logging import get_logger, setup_logging

        setup_logging(level="INFO")
        get_logger("rainzones.cli").info("hello radar")

        captured = capsys.readouterr()
        assert "hello radar" in captured.err
        assert captured.out == ""


class TestConfigureFromEnv:
    """Tests for environment-driven configuration"""

    def test_reads_level_and_format(self):
        """Test that level and format are read from the environment."""
        from rainzones.core.logging import StructuredFormatter, configure_from_env

        logger = configure_from_env({"RAINZONES_LOG_LEVEL": "DEBUG", "RAINZONES_LOG_FORMAT": "json"})

        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_defaults_to_console_info(self):
        """Test that an empty environment gives console output at INFO."""
        from rainzones.core.logging import ConsoleFormatter, configure_from_env

        logger = configure_from_env({})

        assert logger.level == logging.INFO
        assert isinstance(logger.handlers[0].formatter, ConsoleFormatter)


class TestGetLogger:
    """Tests for get_logger"""

    def test_child_loggers_share_package_handlers(self):
        """Test that module loggers inherit the package level."""
        from rainzones.core.logging import get_logger, setup_logging

        setup_logging(level="DEBUG")
        child = get_logger("rainzones.processing.contour")

        assert child.name == "rainzones.processing.contour"
        assert child.getEffectiveLevel() == logging.DEBUG
