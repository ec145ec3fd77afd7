from __future__ import annotations

from pathlib import Path

import pytest

from adbforwarder.core.config_loader import load_config
from adbforwarder.core.errors import ConfigLoadError, ConfigValidationError
from adbforwarder.core.model import DEFAULT_ALLOW_LIST, DEFAULT_LAUNCH_COMMAND, ForwardRule


def _write_config(tmp_path: Path, content: str) -> None:
    path = tmp_path / "cfg" / "adbforwarder" / "config.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))


def test_packaged_defaults() -> None:
    loaded = load_config()
    config = loaded.config
    assert config.allow_list == DEFAULT_ALLOW_LIST
    assert config.forward_ports == (ForwardRule(9943, 9943), ForwardRule(9944, 9944))
    assert config.launch_command == DEFAULT_LAUNCH_COMMAND
    assert config.settle_delay_ms == 1000
    assert config.endpoint.port == 5037
    assert loaded.warnings == ()
    assert len(loaded.sources) == 1


def test_user_override_replaces_top_level_keys(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
settle_delay_ms: 2500
adb:
  port: 5038
allow_list: ["eureka"]
""",
    )

    loaded = load_config()
    assert loaded.config.settle_delay_ms == 2500
    assert loaded.config.endpoint.port == 5038
    assert loaded.config.endpoint.host == "127.0.0.1"
    assert loaded.config.allow_list == frozenset({"eureka"})
    assert loaded.config.forward_ports[0] == ForwardRule(9943, 9943)
    assert any("allow-list" in warning for warning in loaded.warnings)


def test_empty_allow_list_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "allow_list: []\n")

    with pytest.raises(ConfigValidationError):
        load_config()


def test_unknown_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "settle_delay: 5\n")

    with pytest.raises(ConfigValidationError):
        load_config()


def test_port_out_of_range_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
forward_ports:
  - local: 70000
    remote: 9943
""",
    )

    with pytest.raises(ConfigValidationError):
        load_config()


def test_reused_local_port_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
forward_ports:
  - local: 9943
    remote: 9943
  - local: 9943
    remote: 9944
""",
    )

    with pytest.raises(ConfigValidationError):
        load_config()


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "settle_delay_ms: 10\nsettle_delay_ms: 20\n")

    with pytest.raises(ConfigValidationError):
        load_config()


def test_explicit_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_config(tmp_path / "nope.yaml")


def test_explicit_path_is_used(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text('launch_command: "am start -n com.example/.Main"\n', encoding="utf-8")

    loaded = load_config(path)
    assert loaded.config.launch_command == "am start -n com.example/.Main"
    assert str(path) in loaded.sources
