"""Configuration loading for specbuild (.specbuild.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".specbuild.yml"

_DEFAULT_EXCLUDES = [".git", "node_modules", "__pycache__"]


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ArtifactConfig:
    """Optional auxiliary inputs copied into the output directory."""

    schema_path: Optional[Path] = None
    mocks_dir: Optional[Path] = None


@dataclass
class SpecBuildConfig:
    """Represents the settings defined in .specbuild.yml."""

    root: Path
    spec_dir: Path
    output_dir: Path
    layers_dir: str = "layers"
    docs_dir: str = "docs"
    max_workers: int = 4
    exclude: List[str] = field(default_factory=lambda: list(_DEFAULT_EXCLUDES))
    artifacts: ArtifactConfig = field(default_factory=ArtifactConfig)

    @property
    def layers_root(self) -> Path:
        return self.spec_dir / self.layers_dir


def default_config(root: Path) -> SpecBuildConfig:
    """Return the configuration used when no .specbuild.yml exists."""
    root = root.expanduser().resolve()
    return SpecBuildConfig(
        root=root,
        spec_dir=root / "spec",
        output_dir=root / "generated",
    )


def load_config(config_path: Path) -> SpecBuildConfig:
    """Load configuration from disk, falling back to defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    config = default_config(root)

    if not config_file.exists():
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    spec_dir = _as_str(data.get("spec_dir"))
    if spec_dir:
        config.spec_dir = (root / spec_dir).resolve()

    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = (root / output_dir).resolve()

    layers_dir = _as_str(data.get("layers_dir"))
    if layers_dir:
        config.layers_dir = layers_dir

    docs_dir = _as_str(data.get("docs_dir"))
    if docs_dir:
        config.docs_dir = docs_dir

    max_workers = _as_int(data.get("max_workers"))
    if max_workers is not None:
        if max_workers < 1:
            raise ConfigError("max_workers must be a positive integer")
        config.max_workers = max_workers

    if "exclude" in data:
        config.exclude = _as_str_list(data.get("exclude"))

    artifact_data = _as_dict(data.get("artifacts"))
    if artifact_data:
        schema_path = _as_str(artifact_data.get("schema_path"))
        mocks_dir = _as_str(artifact_data.get("mocks_dir"))
        config.artifacts = ArtifactConfig(
            schema_path=(root / schema_path).resolve() if schema_path else None,
            mocks_dir=(root / mocks_dir).resolve() if mocks_dir else None,
        )

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
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
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
