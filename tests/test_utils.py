"""
Tests for logger setup.
"""

import io
import logging

import pytest

from imagesync.utils import COLOR_CYAN, setup_logger, use_color


class FakeTerminal(io.StringIO):
    def isatty(self):
        return True


@pytest.fixture(autouse=True)
def no_color_unset(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)


class TestSetupLogger:
    """Test setup_logger."""

    def test_namespaced_and_isolated(self):
        """Test that command loggers live under imagesync and do not propagate."""
        logger = setup_logger("pull", stream=io.StringIO())

        assert logger.name == "imagesync.pull"
        assert logger.propagate is False
        assert logger.level == logging.INFO

    def test_debug_level(self):
        """Test that debug mode lowers the level."""
        assert setup_logger("push", debug=True, stream=io.StringIO()).level == logging.DEBUG

    def test_redirected_output_is_plain(self):
        """Test that progress lines written to a pipe carry no ANSI codes."""
        stream = io.StringIO()
        logger = setup_logger("pull", stream=stream)

        logger.info("[pull] nginx:1.21 (Started)")

        output = stream.getvalue()
        assert "[pull] nginx:1.21 (Started)" in output
        assert "\033[" not in output

    def test_terminal_output_is_colored(self):
        """Test that terminal output is coloured."""
        stream = FakeTerminal()
        logger = setup_logger("pull", stream=stream)

        logger.info("[pull] nginx:1.21 complete.")

        assert COLOR_CYAN in stream.getvalue()

    def test_no_color_env(self, monkeypatch):
        """Test that NO_COLOR disables colour on a terminal."""
        monkeypatch.setenv("NO_COLOR", "1")

        assert use_color(FakeTerminal()) is False

    def test_repeated_setup_does_not_duplicate_handlers(self):
        """Test that calling setup twice keeps a single console handler."""
        setup_logger("sync", stream=io.StringIO())
        logger = setup_logger("sync", stream=io.StringIO())

        assert len(logger.handlers) == 1

    def test_log_file_per_command(self, tmp_path):
        """Test that file logs are plain and named after the command."""
        logger = setup_logger("sync", log_dir=tmp_path, stream=io.StringIO(), color=True)

        logger.info("[push] registry.example.com/app:1.0 complete.")
        for handler in logger.handlers:
            handler.flush()

        log_files = list(tmp_path.glob("imagesync-sync_*.log"))
        assert len(log_files) == 1
        content = log_files[0].read_text(encoding="utf-8")
        assert "[push] registry.example.com/app:1.0 complete." in content
        assert "\033[" not in content

        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
