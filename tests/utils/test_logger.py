import logging

from goldcast.utils.logger import configure_logging, get_logger


def test_logger_is_namespaced():
    logger = get_logger("some_module")
    assert logger.name == "goldcast.some_module"
    assert get_logger("goldcast.already").name == "goldcast.already"


def test_no_duplicate_handlers():
    first = get_logger("dup_check")
    second = get_logger("dup_check")
    assert first is second
    assert len(second.handlers) == 1


def test_level_is_applied():
    logger = get_logger("level_check", level="DEBUG")
    assert logger.level == logging.DEBUG


def test_file_handler_writes(tmp_path):
    log_file = tmp_path / "logs" / "goldcast.log"
    logger = get_logger("file_check", log_file=str(log_file))
    logger.info("hello file")
    for handler in logger.handlers:
        handler.flush()

    assert log_file.exists()
    assert "hello file" in log_file.read_text()

    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            handler.close()
            logger.removeHandler(handler)


def test_configure_logging_updates_existing_and_future_loggers():
    existing = get_logger("configure_existing")
    try:
        configure_logging("WARNING")
        assert existing.level == logging.WARNING
        assert get_logger("configure_future").level == logging.WARNING
    finally:
        configure_logging("INFO")
    assert existing.level == logging.INFO
