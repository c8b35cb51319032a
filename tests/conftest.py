"""Shared fixtures for IdeaInbox tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import pytest

from ideainbox.storage import DraftRepository, KeyValueStore, SettingsRepository

IDEAINBOX_ENV_VARS = [
    "IDEAINBOX_DB_PATH",
    "IDEAINBOX_LOG_PATH",
    "IDEAINBOX_VERBOSE",
    "IDEAINBOX_ENHANCER",
    "IDEAINBOX_HANDOFF",
    "IDEAINBOX_DEBOUNCE_MS",
    "IDEAINBOX_MAX_LENGTH",
    "IDEAINBOX_DEFAULT_COLLECTION",
    "IDEAINBOX_DEFAULT_SUB_PATH",
    "IDEAINBOX_GEMINI_API_KEY",
    "IDEAINBOX_GEMINI_MODEL",
    "IDEAINBOX_GEMINI_BASE_URL",
    "IDEAINBOX_PROXY_URL",
    "IDEAINBOX_REQUEST_TIMEOUT",
    "IDEAINBOX_DOWNLOAD_DIR",
    "IDEAINBOX_URI_SCHEME",
    "IDEAINBOX_URI_ACTION",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without IDEAINBOX_* variables.

    Setting before deleting makes monkeypatch remove anything a test (or
    load_dotenv) adds during the test.
    """
    for name in IDEAINBOX_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval: float, function: Callable[[], None]):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def is_alive(self) -> bool:
        return self.started and not self.cancelled

    def fire(self) -> None:
        self.function()


class TimerRecorder:
    def __init__(self) -> None:
        self.created: List[FakeTimer] = []

    def __call__(self, interval: float, function: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, function)
        self.created.append(timer)
        return timer

    @property
    def live(self) -> List[FakeTimer]:
        return [t for t in self.created if t.is_alive()]


@pytest.fixture
def timers() -> TimerRecorder:
    return TimerRecorder()


@pytest.fixture
def store(tmp_path: Path):
    kv = KeyValueStore(tmp_path / "ideainbox.db")
    yield kv
    kv.close()


@pytest.fixture
def settings_repo(store) -> SettingsRepository:
    return SettingsRepository(store)


@pytest.fixture
def draft_repo(store) -> DraftRepository:
    return DraftRepository(store)
