from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ssg_upload.api.client import SsgApiClient
from ssg_upload.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ssg_upload.excel.reader import DecodeError, decode_workbook, list_sheet_names
from ssg_upload.logging.error_log import ErrorLogBuffer
from ssg_upload.logging.init import log_summary, setup_logging
from ssg_upload.models.config_models import UploadConfig
from ssg_upload.models.record_kind import RecordKind
from ssg_upload.models.upload_result import UploadSummary
from ssg_upload.services.orchestrator import UploadSession, UploadStateError, submit_record
from ssg_upload.services.summary import render_summary_body

"""CLI entrypoint.

Flow for a spreadsheet:
- load .env, then config/upload.yml
- decode the workbook, choose a sheet (--sheet, else the first sheet whose
  name matches the record kind, else the first sheet)
- map + validate; any diagnostic blocks submission (exit 2)
- submit each record (unless --dry-run or the kind is preview only)

--record submits a single JSON record instead (validated without row numbers).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so that its values win over config/upload.yml."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Spreadsheet -> SSG training API bulk upload")
    p.add_argument("file", nargs="?", type=Path, help="Spreadsheet (.xlsx) to upload")
    p.add_argument(
        "--kind",
        required=True,
        choices=[k.value for k in RecordKind],
        help="Record kind the sheet (or --record) holds",
    )
    p.add_argument("--record", type=Path, help="Validate and submit a single JSON record instead of a spreadsheet")
    p.add_argument("--sheet", help="Sheet to upload (default: first matching sheet)")
    p.add_argument("--list-sheets", action="store_true", help="Print sheet names and exit")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    p.add_argument("--dry-run", action="store_true", help="Map and validate only; print records instead of submitting")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config file (default: config/upload.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _inspect_data(data: bytes) -> int:
    sheets = decode_workbook(data)
    for name, rows in sheets.items():
        columns = list(rows[0].keys()) if rows else []
        print(f"SHEET: {name} rows={len(rows)} cols={columns}")
        print("  sample_rows=", json.dumps(rows[:3], ensure_ascii=False, default=str))
    return EXIT_SUCCESS_ALL


def _print_records(records: list[dict[str, Any]]) -> None:
    print(json.dumps(records, indent=2, ensure_ascii=False, default=str))


def _run_single_record(cfg: UploadConfig, kind: RecordKind, args: argparse.Namespace, logger) -> int:
    try:
        record = json.loads(args.record.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"record: cannot read {args.record}: {e}")
        return EXIT_FATAL
    if not isinstance(record, dict):
        logger.error("record: top level must be a JSON object")
        return EXIT_FATAL

    client = None
    if not args.dry_run and kind.submittable:
        client = SsgApiClient(cfg.api, cfg.training_provider_uen)
    try:
        verdict, outcome = asyncio.run(submit_record(kind, record, client))
    finally:
        if client is not None:
            client.close()

    for d in verdict.errors:
        logger.error(str(d))
    if not verdict.valid:
        return EXIT_PARTIAL_FAILURE
    if outcome is None:
        logger.info(f"{kind.label} record is valid")
        return EXIT_SUCCESS_ALL
    if not outcome.success:
        logger.error(f"{kind.label} record failed: {outcome.reason}")
        return EXIT_PARTIAL_FAILURE
    logger.info(f"{kind.label} record submitted")
    return EXIT_SUCCESS_ALL


def _run_upload(cfg: UploadConfig, kind: RecordKind, args: argparse.Namespace, data: bytes, logger) -> int:
    started = time.monotonic()
    error_log = ErrorLogBuffer(cfg.error_log_dir)

    submitter = None
    if not args.dry_run and kind.submittable:
        if kind is RecordKind.COURSE_RUNS and not cfg.training_provider_uen:
            logger.error("config: training_provider.uen is required to publish course runs")
            return EXIT_FATAL
        submitter = SsgApiClient(cfg.api, cfg.training_provider_uen)

    session = UploadSession(kind, submitter, max_concurrency=cfg.max_concurrency, error_log=error_log)
    try:
        try:
            session.load(data, file_name=args.file.name)
        except DecodeError as e:
            logger.error(f"decode: {e}")
            return EXIT_FATAL

        sheet = args.sheet or session.preferred_sheet()
        try:
            session.choose_sheet(sheet)
        except ValueError as e:
            logger.error(f"sheet: {e}")
            return EXIT_FATAL
        logger.info(f"sheet '{sheet}': {len(session.records)} record(s)")

        diagnostics = session.diagnostics
        record_count = len(session.records)
        for d in diagnostics:
            logger.error(str(d))
        session.log_diagnostics()

        submitted = failed = 0
        if diagnostics:
            logger.warning(f"{len(diagnostics)} problem(s) found; nothing was submitted")
            code = EXIT_PARTIAL_FAILURE
        elif submitter is None:
            _print_records(session.records)
            code = EXIT_SUCCESS_ALL
        elif not record_count:
            logger.info("no records to submit")
            code = EXIT_SUCCESS_ALL
        else:
            try:
                report = asyncio.run(session.confirm())
            except UploadStateError as e:
                logger.error(f"submit: {e}")
                return EXIT_FATAL
            submitted, failed = report.succeeded, report.failed
            code = EXIT_SUCCESS_ALL if failed == 0 else EXIT_PARTIAL_FAILURE

        summary = UploadSummary(
            sheet=sheet,
            kind=kind.value,
            records=record_count,
            diagnostics=len(diagnostics),
            submitted=submitted,
            failed=failed,
            elapsed_seconds=round(time.monotonic() - started, 3),
        )
        log_summary(render_summary_body(summary))
        return code
    finally:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written to {log_path}")
        if submitter is not None:
            submitter.close()


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    kind = RecordKind.from_cli(args.kind)

    if args.record is not None:
        return _run_single_record(cfg, kind, args, logger)

    if args.file is None:
        logger.error("a spreadsheet file or --record is required")
        return EXIT_FATAL
    try:
        data = args.file.read_bytes()
    except OSError as e:
        logger.error(f"file: cannot read {args.file}: {e}")
        return EXIT_FATAL

    try:
        if args.list_sheets:
            for name in list_sheet_names(data):
                print(name)
            return EXIT_SUCCESS_ALL
        if args.inspect_data:
            return _inspect_data(data)
    except DecodeError as e:
        logger.error(f"decode: {e}")
        return EXIT_FATAL

    if kind is RecordKind.ASSESSMENTS:
        logger.error("assessments can only be submitted one at a time with --record")
        return EXIT_FATAL

    return _run_upload(cfg, kind, args, data, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
