"""Thin CSV source loader producing the raw batch consumed by the pipeline."""

from __future__ import annotations

from pathlib import Path

from conform.common.constants import ENTITY_TYPES
from conform.common.errors import StageError
from conform.common.fs import read_csv

RawBatch = dict[str, list[dict[str, str]]]


def _clean_header(name: str) -> str:
    return name.strip().lower()


def read_source_file(path: Path) -> list[dict[str, str]]:
    if not path.exists():
        raise StageError(f"Missing source file: {path}")
    _header, rows = read_csv(path)
    return [{_clean_header(key): value for key, value in row.items() if key is not None} for row in rows]


def load_raw_batch(source_paths: dict[str, Path]) -> RawBatch:
    missing = [entity for entity in ENTITY_TYPES if entity not in source_paths]
    if missing:
        raise StageError(f"No source configured for: {', '.join(missing)}")
    return {entity: read_source_file(source_paths[entity]) for entity in ENTITY_TYPES}
