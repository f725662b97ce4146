"""CLI entrypoint for the CRM/ERP conformance pipeline."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from conform.common.config_loader import load_all_configs
from conform.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_SUCCESS
from conform.common.errors import PipelineError
from conform.common.ids import generate_run_id
from conform.common.logging import build_logger, close_logger, log_event
from conform.common.time_utils import parse_run_date
from conform.pipeline.reports import write_run_summary
from conform.pipeline.runner import run_pipeline
from conform.pipeline.validate import validate_published_model


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--run-date", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--source-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    run_date = parse_run_date(args.run_date)
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)
    source_dir = Path(args.source_dir) if args.source_dir else None

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)

        if args.command == "validate":
            try:
                report_path = validate_published_model(data_dir, bundle.output)
            except PipelineError as exc:
                log_event(
                    logger,
                    f"validation failed: {exc}",
                    run_id=run_id,
                    stage="validate",
                    event="STAGE_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                return EXIT_HARD_FAIL
            log_event(logger, f"validation report written to {report_path}", run_id=run_id, stage="validate", status="ok")
            return EXIT_SUCCESS

        result = run_pipeline(
            bundle,
            data_dir=data_dir,
            run_id=run_id,
            run_date=run_date,
            logger=logger,
            source_dir=source_dir,
        )
        write_run_summary(data_dir, result)
        if not result.ok:
            return EXIT_HARD_FAIL
        return EXIT_SUCCESS
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
