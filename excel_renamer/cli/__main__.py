from __future__ import annotations

import argparse
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv

from excel_renamer.config.loader import DEFAULT_CONFIG_PATH, ConfigError, RenameConfig, load_config
from excel_renamer.excel.reader import ReferenceDataError, read_reference_file, suggest_match_column
from excel_renamer.logging.init import log_summary, setup_logging
from excel_renamer.models.processing_result import RunSummary
from excel_renamer.services.archive import ArchiveError, write_archive
from excel_renamer.services.orchestrator import (
    UNMATCHED_POLICIES,
    ProcessingError,
    RenameSession,
    record_unmatched,
    scan_source_files,
)
from excel_renamer.services.progress import ProgressTracker
from excel_renamer.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config (CLI flags override config values)
- Read the reference sheet and build the index on the match column
- Preview every file in the source directory (one INFO/WARN line per file)
- Unless --dry-run: package the renamed files into a ZIP archive
- Print the SUMMARY line and exit with 0 (all matched), 2 (some unmatched)
  or 1 (fatal error)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "EXCEL_RENAMER_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv. Failures only warn."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="excel-renamer",
        description="Rename files from the rows of an Excel/CSV reference sheet",
    )
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--reference", dest="reference_file", help="Reference sheet (.xlsx, .xlsm, .csv)")
    p.add_argument("--source-dir", dest="source_directory", help="Directory with the files to rename")
    p.add_argument("--match-column", help="Reference column that identifies each file")
    p.add_argument("--template", help='New name template, e.g. "{nome} - {matricula}"')
    p.add_argument("--output", help="ZIP archive to write")
    p.add_argument("--sheet", help="Sheet name (default: first sheet)")
    p.add_argument("--unmatched-policy", choices=UNMATCHED_POLICIES, help="What to do with unmatched files")
    p.add_argument("--recursive", action="store_true", default=None, help="Scan the source directory recursively")
    p.add_argument("--dry-run", action="store_true", help="Preview only, do not write the archive")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print reference columns & first rows then exit")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> RenameConfig:
    """Config file (if any) + CLI overrides.

    Without a config file, --reference, --source-dir and --template are required.
    """
    env_path = os.getenv(CONFIG_ENV_VAR)
    path = args.config or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
    overrides = {
        "reference_file": args.reference_file,
        "source_directory": args.source_directory,
        "match_column": args.match_column,
        "template": args.template,
        "output": args.output,
        "sheet": args.sheet,
        "unmatched_policy": args.unmatched_policy,
        "recursive": args.recursive,
    }
    if path.exists() or args.config is not None:
        return load_config(path).with_overrides(**overrides)

    missing = [flag for flag, key in (
        ("--reference", "reference_file"),
        ("--source-dir", "source_directory"),
        ("--template", "template"),
    ) if not overrides[key]]
    if missing:
        raise ConfigError(f"config file not found: {path} (or pass {', '.join(missing)})")
    return RenameConfig(
        reference_file=overrides["reference_file"],
        source_directory=overrides["source_directory"],
        template=overrides["template"],
    ).with_overrides(**overrides)


def _inspect_data(cfg: RenameConfig) -> int:
    path = Path(cfg.reference_file)
    try:
        sheet = read_reference_file(path, sheet=cfg.sheet, encoding=cfg.csv_encoding)
    except ReferenceDataError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {path.name}")
    print(f"  SHEET: {sheet.sheet_name} cols={sheet.columns} rows={len(sheet.rows)}")
    print(f"  suggested_match_column={suggest_match_column(sheet.columns)}")
    print("    sample_rows=", sheet.preview_rows(3))
    return 0


def _summary(session: RenameSession, archived: int, skipped: int, start: datetime) -> RunSummary:
    end = datetime.now(UTC)
    return RunSummary(
        total_files=len(session.previews),
        matched_files=session.matched_count,
        unmatched_files=session.unmatched_count,
        archived_files=archived,
        skipped_files=skipped,
        start_time=start,
        end_time=end,
        elapsed_seconds=(end - start).total_seconds(),
    )


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()
    start = datetime.now(UTC)

    # None only: an empty list must not fall back to sys.argv (pytest args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    reference_path = Path(cfg.reference_file)
    output_path = Path(cfg.output)
    try:
        files = scan_source_files(directory, recursive=cfg.recursive, exclude=[reference_path, output_path])
    except ProcessingError as e:
        logger.error(f"scan: {e}")
        return EXIT_FATAL
    logger.info(f"Processing {len(files)} file(s) from: {directory}")

    session = RenameSession(
        template=cfg.template,
        files=files,
        name_like_terms=cfg.name_like_terms,
        duplicate_policy=cfg.duplicate_keys,
        unmatched_policy=cfg.unmatched_policy,
        max_workers=cfg.max_workers,
    )
    if not session.load_reference(reference_path, cfg.match_column, sheet=cfg.sheet, encoding=cfg.csv_encoding):
        return EXIT_FATAL

    with ProgressTracker(len(files), description="Matching files") as progress:
        previews = session.preview(on_progress=progress.advance_to)

    for item in previews:
        if item.error:
            logger.warning(f"{item.original_name}: {item.error} (candidate: {item.candidate})")
        else:
            logger.info(f"{item.original_name} -> {item.new_name}")

    archived = 0
    skipped = 0
    if args.dry_run:
        record_unmatched(previews, session.error_log)
        skipped = session.unmatched_count
    elif files:
        with ProgressTracker(len(files), description="Packaging files") as progress:
            result = session.commit(on_progress=progress.advance_to)
        if result is None:
            session.error_log.flush()
            return EXIT_FATAL
        try:
            write_archive(result.entries, output_path)
        except ArchiveError as e:
            logger.error(f"archive: {e}")
            return EXIT_FATAL
        archived = result.packaged
        skipped = len(result.skipped)
        logger.info(f"archive written: {output_path} ({archived} file(s))")
    else:
        logger.info("no files to rename, archive not written")

    try:
        log_path = session.error_log.flush()
    except OSError as e:
        logger.warning(f"error log not written: {e}")
        log_path = None
    if log_path is not None:
        logger.info(f"error log: {log_path}")

    summary_line = render_summary_line(_summary(session, archived, skipped, start))
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(summary_line[len("SUMMARY "):])

    if session.unmatched_count > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
