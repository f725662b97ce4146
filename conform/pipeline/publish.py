"""Atomic publication of conformed model snapshots.

Each run writes a complete snapshot directory next to the previous ones and
only then replaces the ``CURRENT`` pointer file. Readers that resolve the
pointer always see one whole snapshot; a failed run leaves the pointer on the
last good snapshot.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from conform.common.constants import SURROGATE_KEY_NOTE
from conform.common.errors import PublishError
from conform.common.fs import ensure_dir, read_json, write_json
from conform.common.logging import log_event
from conform.common.models import ConformedModel
from conform.common.time_utils import utc_timestamp_iso
from conform.pipeline.export import write_model_datasets

POINTER_NAME = "CURRENT"
SNAPSHOTS_DIRNAME = "snapshots"
STAGING_PREFIX = ".staging-"


def model_root(data_dir: Path) -> Path:
    return data_dir / "model"


def _snapshots_dir(data_dir: Path) -> Path:
    return model_root(data_dir) / SNAPSHOTS_DIRNAME


# Readers on some platforms hold the pointer open briefly; replacing it then fails.
@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=0.05, max=1.0),
    retry=retry_if_exception_type(PermissionError),
    reraise=True,
)
def _replace_pointer(tmp_path: Path, pointer_path: Path) -> None:
    os.replace(tmp_path, pointer_path)


def _swap_pointer(data_dir: Path, run_id: str) -> None:
    root = model_root(data_dir)
    tmp_path = root / f".{POINTER_NAME}.{run_id}.tmp"
    tmp_path.write_text(f"{run_id}\n", encoding="utf-8")
    try:
        _replace_pointer(tmp_path, root / POINTER_NAME)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise PublishError(f"Could not swap model pointer to {run_id}") from exc


def current_run_id(data_dir: Path) -> str | None:
    pointer_path = model_root(data_dir) / POINTER_NAME
    if not pointer_path.exists():
        return None
    value = pointer_path.read_text(encoding="utf-8").strip()
    return value or None


def current_snapshot_dir(data_dir: Path) -> Path | None:
    run_id = current_run_id(data_dir)
    if run_id is None:
        return None
    path = _snapshots_dir(data_dir) / run_id
    if not path.is_dir():
        raise PublishError(f"Model pointer references missing snapshot: {run_id}")
    return path


def _published_at(snapshot: Path) -> str:
    manifest_path = snapshot / "manifest.json"
    if not manifest_path.exists():
        return ""
    return str(read_json(manifest_path).get("published_at", ""))


def prune_snapshots(data_dir: Path, *, keep: int) -> list[str]:
    """Remove the oldest snapshots beyond ``keep``; the current one always survives."""
    snapshots_dir = _snapshots_dir(data_dir)
    if not snapshots_dir.exists():
        return []
    current = current_run_id(data_dir)
    snapshots = [
        path
        for path in snapshots_dir.iterdir()
        if path.is_dir() and not path.name.startswith(STAGING_PREFIX)
    ]
    ordered = sorted(snapshots, key=lambda path: (_published_at(path), path.name), reverse=True)
    retained = {current} if current is not None else set()
    for path in ordered:
        if len(retained) >= keep:
            break
        retained.add(path.name)

    removed: list[str] = []
    for path in ordered:
        if path.name in retained:
            continue
        shutil.rmtree(path)
        removed.append(path.name)
    return sorted(removed)


def publish_snapshot(
    model: ConformedModel,
    *,
    data_dir: Path,
    run_id: str,
    run_date: str,
    output_names: dict[str, str],
    keep_snapshots: int,
    logger: logging.Logger | None = None,
) -> Path:
    snapshots_dir = _snapshots_dir(data_dir)
    final_dir = snapshots_dir / run_id
    if final_dir.exists():
        raise PublishError(f"Snapshot already exists for run {run_id}")

    staging_dir = snapshots_dir / f"{STAGING_PREFIX}{run_id}"
    if staging_dir.exists():
        shutil.rmtree(staging_dir)
    ensure_dir(staging_dir)

    row_counts = {
        "customer_dimension": len(model.customers),
        "product_dimension": len(model.products),
        "sales_fact": len(model.sales),
    }
    try:
        written = write_model_datasets(model, staging_dir, output_names)
        write_json(staging_dir / "quality.json", model.quality)
        write_json(
            staging_dir / "manifest.json",
            {
                "run_id": run_id,
                "run_date": run_date,
                "published_at": utc_timestamp_iso(),
                "datasets": {
                    name: {"file": path.name, "rows": row_counts[name]}
                    for name, path in written.items()
                },
                "surrogate_key_note": SURROGATE_KEY_NOTE,
            },
        )
        os.rename(staging_dir, final_dir)
    except OSError as exc:
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise PublishError(f"Could not build snapshot for run {run_id}") from exc

    _swap_pointer(data_dir, run_id)
    # The run is published once the pointer moves; retention must not undo that.
    try:
        prune_snapshots(data_dir, keep=keep_snapshots)
    except (OSError, ValueError) as exc:
        if logger is not None:
            log_event(
                logger,
                f"snapshot pruning failed: {exc}",
                run_id=run_id,
                stage="publish",
                event="PRUNE_FAIL",
                status="warn",
            )
    return final_dir
