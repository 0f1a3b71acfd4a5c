"""Configuration loading for fruit runs (.fruit.yml)."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".fruit.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class BuildConfig:
    """How the generated driver is turned into an executable."""

    command: List[str] = field(default_factory=lambda: ["make"])


@dataclass
class ReportConfig:
    """External converters for structured reports."""

    junit_converter: List[str] = field(default_factory=lambda: ["util/fruit2junit.sh"])


@dataclass
class FruitConfig:
    """Represents the settings defined in .fruit.yml."""

    root: Path
    framework_module: str = "fruit"
    templates_dir: Optional[Path] = None
    source_suffix: str = ".f90"
    build: BuildConfig = field(default_factory=BuildConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    run_command: Optional[str] = None


def load_config(config_path: Path) -> FruitConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return FruitConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = FruitConfig(root=root)

    framework_data = _as_dict(data.get("framework"))
    module = _as_str(framework_data.get("module"))
    if module:
        config.framework_module = module
    templates_dir = _as_str(framework_data.get("templates_dir"))
    if templates_dir:
        config.templates_dir = root / templates_dir

    sources_data = _as_dict(data.get("sources"))
    suffix = _as_str(sources_data.get("suffix"))
    if suffix:
        config.source_suffix = suffix if suffix.startswith(".") else f".{suffix}"

    build_data = _as_dict(data.get("build"))
    build_command = _as_command(build_data.get("command"))
    if build_command:
        config.build.command = build_command

    report_data = _as_dict(data.get("report"))
    converter = _as_command(report_data.get("junit_converter"))
    if converter:
        config.report.junit_converter = converter

    run_data = _as_dict(data.get("run"))
    run_command = _as_str(run_data.get("command"))
    config.run_command = run_command or None

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value).strip() if isinstance(value, (str, int, float)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_command(value: Any) -> List[str]:
    """Accept either a shell-style string or a list of arguments."""
    if isinstance(value, str):
        try:
            return shlex.split(value)
        except ValueError as exc:
            raise ConfigError(f"Invalid command {value!r}: {exc}") from exc
    return _as_str_list(value)


__all__ = [
    "BuildConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "FruitConfig",
    "ReportConfig",
    "load_config",
]
