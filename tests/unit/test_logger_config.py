"""Tests for logging setup."""

import logging
import shutil
import tempfile
from pathlib import Path

from msg_classifier.utils.logger_config import get_logger, preview, setup_logging


class TestSetupLogging:
    """Test cases for setup_logging."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root = logging.getLogger()
        self.saved_handlers = list(self.root.handlers)
        self.saved_level = self.root.level

    def teardown_method(self):
        for handler in self.root.handlers:
            handler.close()
        self.root.handlers[:] = self.saved_handlers
        self.root.setLevel(self.saved_level)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_file_handlers_created(self):
        log_dir = Path(self.temp_dir) / "logs"
        setup_logging("debug", str(log_dir), console_output=False)

        assert self.root.level == logging.DEBUG
        assert len(self.root.handlers) == 2
        assert (log_dir / "errors.log").exists()
        assert list(log_dir.glob("msg_classifier_*.log"))

    def test_errors_go_to_error_log(self):
        log_dir = Path(self.temp_dir) / "logs"
        setup_logging(logging.INFO, str(log_dir), console_output=False)

        get_logger("msg_classifier.test").error("classifier exploded")
        for handler in self.root.handlers:
            handler.flush()

        assert "classifier exploded" in (log_dir / "errors.log").read_text()

    def test_console_only(self):
        setup_logging(logging.WARNING, str(Path(self.temp_dir) / "unused"), file_output=False)

        assert len(self.root.handlers) == 1
        assert not (Path(self.temp_dir) / "unused").exists()


def test_preview():
    assert preview("short") == "short"
    assert preview("x" * 60) == "x" * 50 + "..."
    assert preview(None) == ""
