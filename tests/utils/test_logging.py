# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the structured JSON logger.

We verify:
  - output is valid JSON
  - all mandatory fields are present (ts, level, module, msg)
  - log levels filter correctly
  - extra context fields get merged into the JSON
  - set_package_level reaches loggers created earlier
"""

import json
import logging
from pathlib import Path

import pytest

from seqcrf.logging.logger import get_logger, set_package_level


@pytest.fixture(autouse=True)
def _reset_loggers() -> None:
    """
    Clear test logger handlers between tests so get_logger's handler-stacking
    guard doesn't interfere with test isolation.
    """
    yield  # type: ignore[misc]
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("seqcrf_test"):
            logger = logging.getLogger(name)
            logger.handlers.clear()


class TestJsonOutput:
    def test_output_is_valid_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("seqcrf_test.json", log_level="INFO")
        logger.info("hello")
        captured = capsys.readouterr()

        parsed = json.loads(captured.out.strip())
        assert isinstance(parsed, dict)

    def test_mandatory_fields_are_present(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("seqcrf_test.fields", log_level="INFO")
        logger.info("test message")
        captured = capsys.readouterr()

        parsed = json.loads(captured.out.strip())
        assert parsed["level"] == "INFO"
        assert parsed["module"] == "seqcrf_test.fields"
        assert parsed["msg"] == "test message"
        assert "ts" in parsed

    def test_extra_fields_are_included(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("seqcrf_test.extra", log_level="DEBUG")
        logger.info("Training finished", extra={"iterations": 42, "final_loss": 1.23})
        captured = capsys.readouterr()

        parsed = json.loads(captured.out.strip())
        assert parsed["iterations"] == 42
        assert parsed["final_loss"] == 1.23

    def test_exception_info_is_included(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("seqcrf_test.exc", log_level="INFO")
        try:
            raise RuntimeError("kaput")
        except RuntimeError:
            logger.error("failed", exc_info=True)
        parsed = json.loads(capsys.readouterr().out.strip())
        assert "RuntimeError: kaput" in parsed["exc"]


class TestLogLevelFiltering:
    def test_debug_messages_hidden_at_info_level(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        logger = get_logger("seqcrf_test.level_filter", log_level="INFO")
        logger.debug("this should not appear")
        captured = capsys.readouterr()
        assert captured.out.strip() == ""

    def test_repeated_calls_do_not_duplicate_handlers(self) -> None:
        first = get_logger("seqcrf_test.repeat", log_level="INFO")
        second = get_logger("seqcrf_test.repeat", log_level="DEBUG")
        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.DEBUG

    def test_package_level_reaches_existing_loggers(self) -> None:
        logger = get_logger("seqcrf_test.pkg.child", log_level="INFO")
        set_package_level("WARNING", package="seqcrf_test.pkg")
        assert logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in logger.handlers)


class TestFileOutput:
    def test_logs_are_written_to_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "test.log"
        logger = get_logger("seqcrf_test.file_output", log_level="INFO", log_file=log_file)
        logger.info("file log test")

        content = log_file.read_text(encoding="utf-8")
        parsed = json.loads(content.strip())
        assert parsed["msg"] == "file log test"


class TestInvalidLogLevel:
    def test_invalid_level_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            get_logger("seqcrf_test.invalid", log_level="INVALID")


@pytest.mark.usefixtures("isolated_package_logging")
class TestPackageSettings:
    def test_log_file_reaches_loggers_created_later(self, tmp_path: Path) -> None:
        log_file = tmp_path / "run.log"
        set_package_level("INFO", package="seqcrf_test.late", log_file=log_file)

        logger = get_logger("seqcrf_test.late.child")
        logger.info("late logger message")

        lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert [entry["msg"] for entry in lines] == ["late logger message"]

    def test_package_level_wins_over_the_default(self) -> None:
        set_package_level("ERROR", package="seqcrf_test.quiet")
        logger = get_logger("seqcrf_test.quiet.child")
        assert logger.level == logging.ERROR

    def test_log_file_is_attached_once(self, tmp_path: Path) -> None:
        log_file = tmp_path / "once.log"
        logger = get_logger("seqcrf_test.once.child", log_file=log_file)
        set_package_level("INFO", package="seqcrf_test.once", log_file=log_file)
        set_package_level("INFO", package="seqcrf_test.once", log_file=log_file)

        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
