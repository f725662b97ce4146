"""Run summary reporting."""

from __future__ import annotations

from pathlib import Path

from conform.common.fs import write_json
from conform.pipeline.publish import current_run_id, model_root
from conform.pipeline.runner import RunResult


def _warnings(quality: dict) -> list[str]:
    warnings: list[str] = []
    if quality.get("unmatched_customer_refs"):
        warnings.append("UNMATCHED_CUSTOMER_REFERENCES")
    if quality.get("unmatched_product_refs"):
        warnings.append("UNMATCHED_PRODUCT_REFERENCES")
    if any(quality.get("field_issues", {}).values()):
        warnings.append("FIELD_VALUES_NULLED")
    return warnings


def write_run_summary(data_dir: Path, result: RunResult) -> Path:
    quality = result.quality or {}
    payload = {
        "run_id": result.run_id,
        "run_date": result.run_date,
        "status": result.status,
        "published_run_id": current_run_id(data_dir),
        "snapshot_dir": str(result.snapshot_dir) if result.snapshot_dir is not None else None,
        "failure": None
        if result.ok
        else {
            "stage": result.failed_stage,
            "error_code": result.error_code,
            "message": result.message,
        },
        "totals": quality.get("rows_out", {}),
        "warnings": _warnings(quality),
    }
    summary_path = model_root(data_dir) / "reports" / f"{result.run_id}_summary.json"
    write_json(summary_path, payload)
    return summary_path
