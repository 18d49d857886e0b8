from __future__ import annotations

import importlib

import pytest

logging_utils = importlib.import_module("anchorsvc.logging_utils")


def test_configure_logging_runs_once_per_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    added: list[dict] = []

    class _FakeLogger:
        def remove(self) -> None:
            added.clear()

        def add(self, sink, **kwargs) -> int:
            added.append(kwargs)
            return len(added)

    monkeypatch.setattr(logging_utils, "logger", _FakeLogger())
    monkeypatch.setattr(logging_utils, "_CONFIGURED", None)
    monkeypatch.setenv("ANCHOR_LOG_LEVEL", "debug")

    logging_utils.configure_logging()
    logging_utils.configure_logging()

    assert len(added) == 1
    assert added[0]["level"] == "DEBUG"


def test_console_profile_uses_rich_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    sinks: list[object] = []

    class _FakeLogger:
        def remove(self) -> None:
            return None

        def add(self, sink, **kwargs) -> int:
            sinks.append(sink)
            return 1

    monkeypatch.setattr(logging_utils, "logger", _FakeLogger())
    monkeypatch.setattr(logging_utils, "_CONFIGURED", None)

    logging_utils.configure_logging(profile="console", level="warning")

    assert type(sinks[0]).__name__ == "RichHandler"


def test_configure_logging_applies_a_new_level(monkeypatch: pytest.MonkeyPatch) -> None:
    levels: list[str] = []

    class _FakeLogger:
        def remove(self) -> None:
            return None

        def add(self, sink, **kwargs) -> int:
            levels.append(kwargs["level"])
            return len(levels)

    monkeypatch.setattr(logging_utils, "logger", _FakeLogger())
    monkeypatch.setattr(logging_utils, "_CONFIGURED", None)

    logging_utils.configure_logging(level="info")
    logging_utils.configure_logging(level="debug")

    assert levels == ["INFO", "DEBUG"]
