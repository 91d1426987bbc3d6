import importlib
import json
import logging
import warnings

import pytest

import passport.core.logging as passport_logging
from passport.core.config import get_settings


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def test_json_formatter_import_is_current():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        importlib.reload(passport_logging)


def test_json_lines_use_renamed_fields(root_logger):
    settings = get_settings().model_copy(update={"log_json": True, "log_level": "info"})

    passport_logging.configure_logging(settings)

    [handler] = root_logger.handlers
    record = logging.LogRecord("passport.test", logging.INFO, __file__, 1, "saved %s", ("passport",), None)
    line = json.loads(handler.format(record))
    assert line["level"] == "INFO"
    assert line["logger"] == "passport.test"
    assert line["message"] == "saved passport"
