"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from conform.common.constants import ENTITY_TYPES
from conform.common.errors import ConfigError

OUTPUT_DATASETS = ("customer_dimension", "product_dimension", "sales_fact")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def validate_pipeline_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"sources", "output", "publish"}
    _assert_required_keys(cfg, top_required, "pipeline config")
    _assert_no_unknown_keys(cfg, top_required, "pipeline config", allow_unknown)

    _assert_required_keys(cfg["sources"], {"root", "files"}, "sources")
    _assert_required_keys(cfg["sources"]["files"], set(ENTITY_TYPES), "sources.files")
    _assert_no_unknown_keys(cfg["sources"]["files"], set(ENTITY_TYPES), "sources.files", allow_unknown)

    _assert_required_keys(cfg["output"], set(OUTPUT_DATASETS), "output")
    filenames = [cfg["output"][name] for name in OUTPUT_DATASETS]
    dupes = {name for name in filenames if filenames.count(name) > 1}
    if dupes:
        raise ConfigError(f"Duplicate output filenames: {', '.join(sorted(dupes))}")

    _assert_required_keys(cfg["publish"], {"keep_snapshots"}, "publish")
    keep = cfg["publish"]["keep_snapshots"]
    if not isinstance(keep, int) or isinstance(keep, bool) or keep < 1:
        raise ConfigError("publish.keep_snapshots must be a positive integer")

    return cfg
