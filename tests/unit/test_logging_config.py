"""Tests for CLI logging setup."""

import logging

from zosctl.logging_config import setup_logging


def zosctl_handlers(logger):
    return [h for h in logger.handlers if getattr(h, "_zosctl_handler", False)]


class TestSetupLogging:
    def test_levels_from_flags(self):
        assert setup_logging().level == logging.WARNING
        assert setup_logging(verbose=True).level == logging.INFO
        assert setup_logging(verbose=True, debug=True).level == logging.DEBUG

    def test_environment_level_wins(self, monkeypatch):
        monkeypatch.setenv("ZOSCTL_LOG_LEVEL", "error")
        assert setup_logging(debug=True).level == logging.ERROR

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(zosctl_handlers(logger)) == 1

    def test_log_file_is_sanitized(self, tmp_path, monkeypatch):
        log_file = tmp_path / "zosctl.log"
        monkeypatch.setenv("ZOSCTL_LOG_FILE", str(log_file))
        logger = setup_logging(debug=True)

        logging.getLogger("zosctl.test").debug("sending password=hunter2 to %s", "mf.example.com")
        for handler in zosctl_handlers(logger):
            handler.flush()

        content = log_file.read_text()
        assert "mf.example.com" in content
        assert "hunter2" not in content

    def test_default_log_file_in_config_dir(self, isolated_config, monkeypatch):
        monkeypatch.setenv("ZOSCTL_LOG_FILE", "true")
        logger = setup_logging(verbose=True)

        logging.getLogger("zosctl.test").info("hello")
        for handler in zosctl_handlers(logger):
            handler.flush()

        assert "hello" in (isolated_config / "logs" / "zosctl.log").read_text()
