"""Tests for hand-off providers and their registry."""

import subprocess

import pytest

from ideainbox.errors import HandoffError
from ideainbox.handoff import alternatives, available_methods, get_provider, provider_from_env
from ideainbox.handoff.base import NoopHandoffProvider
from ideainbox.handoff.clipboard import ClipboardProvider
from ideainbox.handoff.deeplink import DeepLinkProvider
from ideainbox.handoff.file import FileDownloadProvider
from ideainbox.payload import SyncPayload, build_uri


@pytest.fixture
def payload():
    return SyncPayload(
        file_base_name="My_Idea_",
        export_text="# My Idea!\n\nBody text\n\n#idea #note",
        destination_ref="Inbox/My_Idea_",
        collection_name="Main",
    )


# ---------------------------------------------------------------------------
# File download
# ---------------------------------------------------------------------------


def test_file_download_writes_export_text(tmp_path, payload):
    result = FileDownloadProvider(tmp_path).deliver(payload)

    path = tmp_path / "My_Idea_.md"
    assert result.method == "file"
    assert result.target == str(path)
    assert path.read_bytes() == payload.export_text.encode("utf-8")


def test_file_download_never_overwrites(tmp_path, payload):
    provider = FileDownloadProvider(tmp_path)
    provider.deliver(payload)
    second = provider.deliver(payload)
    third = provider.deliver(payload)

    assert second.target == str(tmp_path / "My_Idea_ (1).md")
    assert third.target == str(tmp_path / "My_Idea_ (2).md")


def test_file_download_uses_env_directory(tmp_path, monkeypatch, payload):
    monkeypatch.setenv("IDEAINBOX_DOWNLOAD_DIR", str(tmp_path / "dl"))

    result = FileDownloadProvider().deliver(payload)
    assert result.target == str(tmp_path / "dl" / "My_Idea_.md")


def test_file_download_failure_raises_handoff_error(tmp_path, payload):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(HandoffError) as exc_info:
        FileDownloadProvider(blocker).deliver(payload)
    assert exc_info.value.method == "file"


# ---------------------------------------------------------------------------
# Clipboard
# ---------------------------------------------------------------------------


def _only_on_path(name):
    return lambda cmd: f"/usr/bin/{cmd}" if cmd == name else None


def test_clipboard_pipes_export_text(monkeypatch, payload):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr("ideainbox.handoff.clipboard.shutil.which", _only_on_path("xclip"))
    monkeypatch.setattr("ideainbox.handoff.clipboard.subprocess.run", fake_run)

    result = ClipboardProvider().deliver(payload)

    cmd, kwargs = calls[0]
    assert cmd == ["xclip", "-selection", "clipboard"]
    assert kwargs["input"] == payload.export_text
    assert result.method == "clipboard"
    assert result.target == "xclip"


def test_clipboard_without_tool_fails(monkeypatch, payload):
    monkeypatch.setattr("ideainbox.handoff.clipboard.shutil.which", lambda cmd: None)

    with pytest.raises(HandoffError) as exc_info:
        ClipboardProvider().deliver(payload)
    assert exc_info.value.method == "clipboard"


def test_clipboard_tool_failure(monkeypatch, payload):
    def fake_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd, output="", stderr="Can't open display")

    monkeypatch.setattr("ideainbox.handoff.clipboard.shutil.which", _only_on_path("pbcopy"))
    monkeypatch.setattr("ideainbox.handoff.clipboard.subprocess.run", fake_run)

    with pytest.raises(HandoffError, match="Can't open display"):
        ClipboardProvider().deliver(payload)


# ---------------------------------------------------------------------------
# Deep link
# ---------------------------------------------------------------------------


def test_deeplink_opens_uri(monkeypatch, payload):
    opened = []
    monkeypatch.setattr("ideainbox.handoff.deeplink.webbrowser.open", lambda uri: opened.append(uri) or True)

    result = DeepLinkProvider().deliver(payload)

    assert opened == [build_uri(payload)]
    assert result.target == opened[0]


def test_deeplink_scheme_from_env(monkeypatch, payload):
    monkeypatch.setenv("IDEAINBOX_URI_SCHEME", "notes")
    monkeypatch.setattr("ideainbox.handoff.deeplink.webbrowser.open", lambda uri: True)

    result = DeepLinkProvider().deliver(payload)
    assert result.target.startswith("notes://new?vault=Main&file=Inbox%2FMy_Idea_")


def test_deeplink_rejected(monkeypatch, payload):
    monkeypatch.setattr("ideainbox.handoff.deeplink.webbrowser.open", lambda uri: False)

    with pytest.raises(HandoffError) as exc_info:
        DeepLinkProvider().deliver(payload)
    assert exc_info.value.method == "deeplink"


def test_deeplink_requires_collection(monkeypatch):
    opened = []
    monkeypatch.setattr("ideainbox.handoff.deeplink.webbrowser.open", lambda uri: opened.append(uri) or True)
    empty = SyncPayload("Idea", "# Idea\n\n#note", "Idea", "  ")

    with pytest.raises(HandoffError, match="vault"):
        DeepLinkProvider().deliver(empty)
    assert opened == []


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_registry_resolution():
    assert isinstance(get_provider(None), ClipboardProvider)
    assert isinstance(get_provider("FILE"), FileDownloadProvider)
    assert isinstance(get_provider("deeplink"), DeepLinkProvider)
    assert isinstance(get_provider("noop"), NoopHandoffProvider)


def test_registry_rejects_unknown_method():
    with pytest.raises(KeyError):
        get_provider("carrier-pigeon")


def test_available_methods_and_alternatives():
    assert available_methods() == ["clipboard", "file", "deeplink"]
    assert alternatives("clipboard") == ["file", "deeplink"]
    assert alternatives("deeplink") == ["clipboard", "file"]


def test_provider_from_env(monkeypatch):
    monkeypatch.setenv("IDEAINBOX_HANDOFF", "file")
    assert provider_from_env().name == "file"


def test_noop_delivers_nothing(payload):
    result = NoopHandoffProvider().deliver(payload)
    assert result.method == "noop"
    assert result.target == payload.destination_ref
