import logging
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from runtime.logging_config import LOGGER_NAME, setup_logging


def test_setup_logging_writes_file_and_replaces_handlers(tmp_path):
    log_path = tmp_path / "run.log"
    logger = setup_logging(str(log_path), quiet=True)
    assert logger.name == LOGGER_NAME == "surface_descent"
    assert len(logger.handlers) == 1

    logger.info("hello from the engine")
    for handler in logger.handlers:
        handler.flush()
    assert "hello from the engine" in log_path.read_text()

    logger = setup_logging(None, quiet=False)
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert logger.propagate is True
    setup_logging(None, quiet=True)


def test_debug_flag_sets_level():
    assert setup_logging(None, quiet=True, debug=True).level == logging.DEBUG
    assert setup_logging(None, quiet=True).level == logging.INFO


def test_unwritable_log_file_is_reported(tmp_path, capsys):
    setup_logging(str(tmp_path / "missing_dir" / "run.log"), quiet=True)
    assert "Could not open log file" in capsys.readouterr().out
