"""Configuration loading and validation for YAML-based adbforwarder settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from adbforwarder.core.errors import ConfigLoadError, ConfigValidationError
from adbforwarder.core.model import AdbEndpoint, ForwarderConfig, ForwardRule

CONFIG_FILENAME = "config.yaml"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedConfig:
    config: ForwarderConfig
    sources: tuple[str, ...]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("adbforwarder.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def user_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "adbforwarder" / CONFIG_FILENAME


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], source: Path | Traversable | str) -> None:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def build_config(doc: dict[str, Any]) -> ForwarderConfig:
    """Turn a validated, fully-merged document into a ForwarderConfig."""
    _validate(doc, "merged configuration")
    defaults = ForwarderConfig()

    rules = tuple(
        ForwardRule(local_port=int(entry["local"]), remote_port=int(entry["remote"]))
        for entry in doc.get("forward_ports", ())
    ) or defaults.forward_ports
    locals_seen = [rule.local_port for rule in rules]
    if len(set(locals_seen)) != len(locals_seen):
        raise ConfigValidationError("forward_ports must not reuse a local port")

    adb = doc.get("adb", {})
    return ForwarderConfig(
        allow_list=frozenset(doc.get("allow_list", defaults.allow_list)),
        forward_ports=rules,
        launch_command=doc.get("launch_command", defaults.launch_command),
        settle_delay_ms=int(doc.get("settle_delay_ms", defaults.settle_delay_ms)),
        endpoint=AdbEndpoint(
            host=adb.get("host", "127.0.0.1"),
            port=int(adb.get("port", 5037)),
        ),
        adb_path=adb.get("path"),
        poll_interval_s=float(doc.get("poll_interval_s", 1.0)),
        command_timeout_s=float(doc.get("command_timeout_s", 30.0)),
    )


def load_config(path: Path | None = None) -> LoadedConfig:
    defaults_path = resources.files("adbforwarder.defaults").joinpath(CONFIG_FILENAME)
    doc = _read_yaml(defaults_path)
    _validate(doc, defaults_path)
    sources = [str(defaults_path)]
    warnings: list[str] = []

    override_path = path or user_config_path()
    if path is not None and not path.exists():
        raise ConfigLoadError(f"Config file {path} does not exist")
    if override_path.exists():
        override = _read_yaml(override_path)
        _validate(override, override_path)
        for key in sorted(override):
            if key == "adb":
                doc["adb"] = {**doc.get("adb", {}), **override["adb"]}
            else:
                doc[key] = override[key]
        if "allow_list" in override:
            warning = f"Device allow-list overridden by {override_path}"
            LOGGER.warning(warning)
            warnings.append(warning)
        sources.append(str(override_path))

    return LoadedConfig(config=build_config(doc), sources=tuple(sources), warnings=tuple(warnings))
