"""JSON logging with stable schema."""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from conform.common.constants import JSON_LOG_FIELDS, STAGES
from conform.common.fs import ensure_dir
from conform.common.time_utils import utc_timestamp_iso


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {"timestamp": utc_timestamp_iso(), "message": record.getMessage()}
        for field in JSON_LOG_FIELDS:
            payload.setdefault(field, getattr(record, field, None))
        return json.dumps(payload, ensure_ascii=False, default=str)


def build_logger(run_id: str, data_dir: Path, level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(f"conform.{run_id}")
    logger.setLevel(level.upper())
    logger.handlers.clear()
    logger.propagate = False

    stream = logging.StreamHandler()
    stream.setFormatter(JsonLineFormatter())
    logger.addHandler(stream)

    log_path = data_dir / "run_meta" / f"{run_id}.log.jsonl"
    ensure_dir(log_path.parent)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(JsonLineFormatter())
    logger.addHandler(file_handler)

    return logger


def close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def log_event(logger: logging.Logger, message: str, **event_fields: Any) -> None:
    logger.info(message, extra=event_fields)


class StageLog:
    """Emits STAGE_START/STAGE_END events and remembers the stage in progress."""

    def __init__(self, logger: logging.Logger | None, run_id: str | None) -> None:
        self.logger = logger
        self.run_id = run_id
        self.current: str | None = None

    @contextmanager
    def stage(self, name: str, *, entity: str | None = None, rows_in: int | None = None) -> Iterator[dict]:
        if name not in STAGES:
            raise ValueError(f"Unknown stage: {name}")
        self.current = name
        counts: dict[str, Any] = {}
        started = time.monotonic()
        self._emit("stage start", stage=name, entity=entity, event="STAGE_START", status="ok", rows_in=rows_in)
        yield counts
        self._emit(
            "stage end",
            stage=name,
            entity=entity,
            event="STAGE_END",
            status="ok",
            rows_in=rows_in,
            rows_out=counts.get("rows_out"),
            duration_ms=int((time.monotonic() - started) * 1000),
        )

    def _emit(self, message: str, **fields: Any) -> None:
        if self.logger is not None:
            log_event(self.logger, message, run_id=self.run_id, **fields)
