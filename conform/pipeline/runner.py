"""Full-reload pipeline run with an explicit success/failure result."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from conform.common.config_loader import ConfigBundle
from conform.common.errors import PipelineError
from conform.common.logging import StageLog, log_event
from conform.pipeline.build import conform_batch
from conform.pipeline.publish import publish_snapshot
from conform.pipeline.sources import load_raw_batch

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class RunResult:
    run_id: str
    run_date: str
    status: str
    snapshot_dir: Path | None = None
    failed_stage: str | None = None
    error_code: str | None = None
    message: str | None = None
    quality: dict | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS


def run_pipeline(
    bundle: ConfigBundle,
    *,
    data_dir: Path,
    run_id: str,
    run_date: str,
    logger: logging.Logger | None = None,
    source_dir: Path | None = None,
) -> RunResult:
    """Rebuild and publish the conformed model.

    A failure in any stage is returned as a failed result and the previously
    published snapshot stays current.
    """
    stages = StageLog(logger, run_id)
    try:
        with stages.stage("load") as counts:
            batch = load_raw_batch(bundle.source_paths(source_dir))
            counts["rows_out"] = sum(len(rows) for rows in batch.values())

        model = conform_batch(batch, as_of=date.fromisoformat(run_date), stages=stages)

        with stages.stage("publish", rows_in=len(model.sales)) as counts:
            snapshot_dir = publish_snapshot(
                model,
                data_dir=data_dir,
                run_id=run_id,
                run_date=run_date,
                output_names=bundle.output,
                keep_snapshots=int(bundle.publish["keep_snapshots"]),
                logger=logger,
            )
            counts["rows_out"] = len(model.sales)
    except PipelineError as exc:
        return _failed(stages, logger, run_id, run_date, exc.error_code, str(exc))
    except Exception as exc:
        if logger is not None:
            logger.exception("unexpected failure in stage %s", stages.current, extra={"run_id": run_id})
        return _failed(stages, logger, run_id, run_date, "UNEXPECTED_ERROR", f"{type(exc).__name__}: {exc}")

    return RunResult(
        run_id=run_id,
        run_date=run_date,
        status=STATUS_SUCCESS,
        snapshot_dir=snapshot_dir,
        quality=model.quality,
    )


def _failed(
    stages: StageLog,
    logger: logging.Logger | None,
    run_id: str,
    run_date: str,
    error_code: str,
    message: str,
) -> RunResult:
    if logger is not None:
        log_event(
            logger,
            f"stage failed: {message}",
            run_id=run_id,
            stage=stages.current,
            event="STAGE_FAIL",
            status="error",
            error_code=error_code,
        )
    return RunResult(
        run_id=run_id,
        run_date=run_date,
        status=STATUS_FAILED,
        failed_stage=stages.current,
        error_code=error_code,
        message=message,
    )
