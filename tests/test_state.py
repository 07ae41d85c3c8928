"""Tests for persisted suppression state, configuration and build identity."""

import json
import subprocess
from pathlib import Path

import pytest

from menubar_version.build_info import plugin_commit
from menubar_version.config import load_config
from menubar_version.errors import BuildInfoError, ConfigError, InvalidVersion, StoreError
from menubar_version.store import JsonSuppressionStore
from menubar_version.versioning import SemVer


def test_store_absent_file_means_no_suppression(tmp_path: Path) -> None:
    store = JsonSuppressionStore(tmp_path / "missing" / "data.json")

    assert store.get() is None


def test_store_set_then_get_preserves_other_keys(tmp_path: Path) -> None:
    path = tmp_path / "cache" / "bitbar-version.json"
    path.parent.mkdir()
    path.write_text(json.dumps({"somethingElse": 1}), encoding="utf-8")
    store = JsonSuppressionStore(path)

    store.set(SemVer(1, 2, 0))

    assert store.get() == SemVer(1, 2, 0)
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "somethingElse": 1,
        "hideUntilHomebrewGt": "1.2.0",
    }


def test_store_creates_parent_directories(tmp_path: Path) -> None:
    path = tmp_path / "bitbar" / "plugin-cache" / "bitbar-version.json"

    JsonSuppressionStore(path).set(SemVer(2, 0, 0))

    assert path.exists()


def test_store_null_threshold(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text('{"hideUntilHomebrewGt": null}', encoding="utf-8")

    assert JsonSuppressionStore(path).get() is None


def test_store_malformed_documents(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        JsonSuppressionStore(path).get()

    path.write_text('{"hideUntilHomebrewGt": "soon"}', encoding="utf-8")
    with pytest.raises(InvalidVersion):
        JsonSuppressionStore(path).get()


def test_store_default_path_uses_xdg_data_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    store = JsonSuppressionStore()

    assert store.path == tmp_path / "bitbar" / "plugin-cache" / "bitbar-version.json"


def test_config_defaults_when_file_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.json", environ={})

    assert config.github_token is None
    assert config.timeout == 30.0
    assert config.user_agent.startswith("menubar-version/")
    assert "Authorization" not in config.github_headers()


def test_config_token_from_file_and_environment(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"githubToken": "from-file"}), encoding="utf-8")

    assert load_config(path, environ={}).github_token == "from-file"
    config = load_config(path, environ={"GITHUB_TOKEN": "from-env"})
    assert config.github_token == "from-env"
    assert config.github_headers()["Authorization"] == "token from-env"


def test_config_default_path_uses_xdg_config_home(tmp_path: Path) -> None:
    path = tmp_path / "bitbar" / "plugins" / "bitbar-version.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"githubToken": "xdg"}), encoding="utf-8")

    assert load_config(environ={"XDG_CONFIG_HOME": str(tmp_path)}).github_token == "xdg"


def test_config_rejects_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path, environ={})

    path.write_text('{"githubToken": 5}', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path, environ={})


def test_plugin_commit_prefers_environment() -> None:
    def fail_runner(*args, **kwargs):
        raise AssertionError("git should not be called")

    assert plugin_commit({"MENUBAR_VERSION_COMMIT": "abc123\n"}, runner=fail_runner) == "abc123"


def test_plugin_commit_reads_git_head(tmp_path: Path) -> None:
    captured = {}

    def fake_runner(cmd, **kwargs):
        captured["cmd"] = cmd
        captured["cwd"] = kwargs["cwd"]
        return subprocess.CompletedProcess(cmd, 0, stdout="deadbeef\n", stderr="")

    assert plugin_commit({}, runner=fake_runner, source_dir=tmp_path) == "deadbeef"
    assert captured == {"cmd": ["git", "rev-parse", "HEAD"], "cwd": tmp_path}


def test_plugin_commit_failure_is_an_error(tmp_path: Path) -> None:
    def failing_runner(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 128, stdout="", stderr="fatal: not a git repository")

    def missing_git(cmd, **kwargs):
        raise FileNotFoundError("git")

    with pytest.raises(BuildInfoError):
        plugin_commit({}, runner=failing_runner, source_dir=tmp_path)
    with pytest.raises(BuildInfoError):
        plugin_commit({}, runner=missing_git, source_dir=tmp_path)


def test_plugin_commit_os_error_is_an_error(tmp_path: Path) -> None:
    def denied(cmd, **kwargs):
        raise PermissionError("permission denied: git")

    with pytest.raises(BuildInfoError):
        plugin_commit({}, runner=denied, source_dir=tmp_path)


def test_store_failed_write_keeps_previous_document(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "bitbar-version.json"
    store = JsonSuppressionStore(path)
    store.set(SemVer(1, 0, 0))

    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("menubar_version.store.os.replace", failing_replace)

    with pytest.raises(StoreError):
        store.set(SemVer(2, 0, 0))

    assert json.loads(path.read_text(encoding="utf-8")) == {"hideUntilHomebrewGt": "1.0.0"}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["bitbar-version.json"]
