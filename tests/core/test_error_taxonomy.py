import pytest

from eventcore.config import ConfigError
from eventcore.errors import (
    EventCoreError,
    HandlerModuleError,
    InvalidArgument,
    map_exception,
    validate_error_type,
)


def test_error_taxonomy_known():
    assert validate_error_type("invalid-argument") == "invalid-argument"
    assert validate_error_type("event-handler-error") == "event-handler-error"
    assert validate_error_type("config-out-of-range") == "config-out-of-range"


def test_error_taxonomy_unknown():
    with pytest.raises(AssertionError):
        validate_error_type("not-a-code")


def test_exception_hierarchy():
    assert issubclass(InvalidArgument, ValueError)
    assert issubclass(HandlerModuleError, ImportError)
    assert issubclass(ConfigError, EventCoreError)


def test_map_exception():
    assert map_exception(InvalidArgument("x"), "dispatch") == "invalid-argument"
    assert map_exception(RuntimeError("x"), "dispatch") == "event-handler-error"
    assert map_exception(ImportError("x"), "startup") == "handler-module-import"
    assert map_exception(ConfigError("x"), "anything") == "config-invalid"
