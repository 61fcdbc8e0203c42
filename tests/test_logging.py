import logging

from sitelang.logging import NOISY_LOGGERS, attach_file_logging, configure_logging


def test_client_libraries_stay_quiet_in_debug(monkeypatch):
    for name in NOISY_LOGGERS:
        monkeypatch.setattr(logging.getLogger(name), "level", logging.NOTSET)
    configure_logging(logging.DEBUG)
    assert all(logging.getLogger(name).level == logging.WARNING for name in NOISY_LOGGERS)


def test_file_logging_creates_directory(tmp_path):
    path = tmp_path / "logs" / "sitelang.log"
    handler = attach_file_logging(str(path))
    try:
        logging.getLogger("sitelang.test").warning("hello file")
        handler.flush()
        assert "hello file" in path.read_text(encoding="utf-8")
    finally:
        logging.getLogger().removeHandler(handler)
        handler.close()
