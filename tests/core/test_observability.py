import io
import json
import logging

from svcbus.config import LoggingConfig
from svcbus.observability import configure_logging


def test_json_logging_lines():
    buf = io.StringIO()
    log = configure_logging(LoggingConfig(level="debug", format="json"), buf)
    try:
        logging.getLogger("svcbus.test").info("hello %s", "world")
        rec = json.loads(buf.getvalue().strip().splitlines()[-1])
        assert rec["msg"] == "hello world"
        assert rec["level"] == "info"
        assert rec["logger"] == "svcbus.test"
    finally:
        for h in list(log.handlers):
            log.removeHandler(h)
        log.setLevel(logging.NOTSET)


def test_reconfigure_replaces_own_handler():
    log = configure_logging(LoggingConfig(), io.StringIO())
    try:
        configure_logging(LoggingConfig(level="warn"), io.StringIO())
        own = [h for h in log.handlers if getattr(h, "_svcbus_handler", False)]
        assert len(own) == 1
        assert log.level == logging.WARNING
    finally:
        for h in list(log.handlers):
            log.removeHandler(h)
        log.setLevel(logging.NOTSET)


def test_defaults_from_repository_config():
    log = configure_logging(stream=io.StringIO())
    try:
        assert log.level == logging.INFO
    finally:
        for h in list(log.handlers):
            log.removeHandler(h)
        log.setLevel(logging.NOTSET)
