from __future__ import annotations

import logging

import pytest

from app.core.logging import (
    RequestContextFilter,
    _ContainerFormatter,
    _JsonFormatter,
    setup_logging,
)


def _record(level: int, msg: str = "hello", *, pathname: str = "svc.py", lineno: int = 1):
    return logging.LogRecord(
        name="app.services.attempt_lifecycle",
        level=level,
        pathname=pathname,
        lineno=lineno,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


@pytest.mark.parametrize("name", ["uvicorn", "httpx", "sqlalchemy.engine"])
def test_setup_logging_quiets_noisy_loggers_at_debug(name: str) -> None:
    setup_logging("debug")
    assert logging.getLogger(name).level == logging.WARNING


def test_setup_logging_allows_uvicorn_at_error() -> None:
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_setup_logging_installs_single_handler() -> None:
    setup_logging("info")
    setup_logging("info")
    assert len(logging.getLogger().handlers) == 1


def test_setup_logging_attaches_context_filter_to_handler() -> None:
    setup_logging("info")
    handler = logging.getLogger().handlers[0]
    assert any(isinstance(f, RequestContextFilter) for f in handler.filters)


def test_setup_logging_picks_json_formatter() -> None:
    setup_logging("info", json_format=True)
    assert isinstance(logging.getLogger().handlers[0].formatter, _JsonFormatter)

    setup_logging("info", json_format=False)
    assert isinstance(logging.getLogger().handlers[0].formatter, _ContainerFormatter)


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO, pathname="test.py"))
    assert "hello" in output
    assert "[test.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(
        _record(logging.WARNING, "rejected commit", pathname="test.py", lineno=42)
    )
    assert "rejected commit" in output
    assert "[test.py:42]" in output


def test_formatter_includes_location_for_error() -> None:
    output = _ContainerFormatter().format(_record(logging.ERROR, lineno=99))
    assert "[svc.py:99]" in output
