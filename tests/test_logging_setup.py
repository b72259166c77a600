"""Tests for logging setup."""

import logging

import logscanner.logging_setup as ls


def _own_handlers(logger):
    """Handlers added by setup_logging, ignoring pytest's capture handlers."""
    return [h for h in logger.handlers if type(h) in (logging.StreamHandler, logging.FileHandler)]


class TestSetupLogging:
    def setup_method(self):
        # Reset the module-level flag for each test
        ls._CONFIGURED = False
        logger = logging.getLogger("logscanner")
        for handler in _own_handlers(logger):
            handler.close()
            logger.removeHandler(handler)

    teardown_method = setup_method

    def test_setup_creates_handler(self):
        ls.setup_logging()
        logger = logging.getLogger("logscanner")
        handlers = _own_handlers(logger)
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert logger.level == logging.INFO

    def test_idempotent(self):
        ls.setup_logging()
        ls.setup_logging()
        logger = logging.getLogger("logscanner")
        assert len(_own_handlers(logger)) == 1

    def test_level_name(self):
        ls.setup_logging(level="debug")
        assert logging.getLogger("logscanner").level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        path = tmp_path / "logs" / "scanner.log"
        ls.setup_logging(log_file=path)
        [handler] = _own_handlers(logging.getLogger("logscanner"))
        assert isinstance(handler, logging.FileHandler)
        logging.getLogger("logscanner.pipeline").info("hello file")
        handler.flush()
        assert "hello file" in path.read_text()
