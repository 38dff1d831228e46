import json
import logging

import pytest

from khqrkit.config import LoggingConfig
from khqrkit.logging_conf import JsonFormatter, configure_logging


def _record(msg: str, *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord("khqrkit.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        output = json.loads(JsonFormatter().format(_record("hello %s", "world")))
        assert output == {"level": "INFO", "logger": "khqrkit.test", "message": "hello world"}

    def test_extra_fields_included(self):
        output = json.loads(JsonFormatter().format(_record("khqr rejected", code="ERR_FIELD_INVALID", tag="59")))
        assert output["code"] == "ERR_FIELD_INVALID"
        assert output["tag"] == "59"

    def test_non_serializable_extra(self):
        output = json.loads(JsonFormatter().format(_record("x", value=object())))
        assert output["value"].startswith("<object")

    def test_khmer_text_kept(self):
        formatted = JsonFormatter().format(_record("សុខា"))
        assert "សុខា" in formatted


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    def test_json_handler(self, restore_root_logger):
        configure_logging(LoggingConfig(level="DEBUG", json_logs=True))
        assert restore_root_logger.level == logging.DEBUG
        assert any(isinstance(h.formatter, JsonFormatter) for h in restore_root_logger.handlers)

    def test_text_handler(self, restore_root_logger):
        configure_logging(LoggingConfig(level="WARNING", json_logs=False))
        assert restore_root_logger.level == logging.WARNING
        assert not any(isinstance(h.formatter, JsonFormatter) for h in restore_root_logger.handlers)
