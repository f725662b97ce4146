"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from conform.common.errors import ConfigError
from conform.common.fs import read_yaml
from conform.common.schema import validate_pipeline_config


@dataclass(frozen=True)
class ConfigBundle:
    sources: dict
    output: dict
    publish: dict

    def source_paths(self, source_dir: Path | None = None) -> dict[str, Path]:
        root = source_dir if source_dir is not None else Path(self.sources["root"])
        return {entity: root / name for entity, name in self.sources["files"].items()}


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / "pipeline.yml"
    cfg = validate_pipeline_config(
        _load_yaml_with_overlay(config_dir / "pipeline.yml", overlay_path),
        allow_unknown=allow_unknown,
    )
    return ConfigBundle(sources=cfg["sources"], output=cfg["output"], publish=cfg["publish"])
