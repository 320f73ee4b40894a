from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from obsimport.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from obsimport.excel.builder import build_workbook
from obsimport.excel.document import Document
from obsimport.excel.errors import DocumentLoadError, StructuralError
from obsimport.excel.generic_parser import parse_workbook
from obsimport.logging.init import log_summary, set_debug, setup_logging
from obsimport.services.orchestrator import ProcessingError, import_files, resolve_paths
from obsimport.services.summary import render_summary_line

"""CLI entrypoint.

Subcommands:
- import   : import .xlsx files (or directories of them) for a record type
- template : write a blank template workbook for a record type
- parse    : schema-agnostic parse of one workbook, printed as JSON

Exit codes: 0 = clean, 2 = some file failed or some row is invalid, 1 = fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="obsimport", description="Observation spreadsheet import / template export")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Validate spreadsheet rows for a record type")
    imp.add_argument("--type", dest="record_type", required=True, help="Record type key")
    imp.add_argument("--json", action="store_true", help="Print each file's import summary as JSON")
    imp.add_argument("paths", nargs="*", type=Path, help="Files or directories (default: import.source_directory)")

    tpl = sub.add_parser("template", help="Write a blank template workbook")
    tpl.add_argument("--type", dest="record_type", required=True, help="Record type key")
    tpl.add_argument("--output", "-o", type=Path, required=True, help="Output .xlsx path")

    prs = sub.add_parser("parse", help="Parse a workbook without record validation")
    prs.add_argument("--headers", default="", help="Comma separated expected headers")
    prs.add_argument("file", type=Path)
    return p.parse_args(argv)


def _cmd_import(args: argparse.Namespace, cfg, logger) -> int:
    paths = args.paths or [Path(cfg.settings.source_directory)]
    try:
        files = resolve_paths(paths)
    except ProcessingError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    logger.info(f"Importing {len(files)} file(s) as type={args.record_type}")
    try:
        result = import_files(files, args.record_type, cfg)
    except StructuralError as e:
        logger.error(f"type: {e}")
        return EXIT_FATAL

    if args.json:
        for name, summary in result.summaries.items():
            print(json.dumps({"file": name, **summary.to_dict()}, ensure_ascii=False))

    summary_line = render_summary_line(len(files), result)
    # log_summary が "SUMMARY " を付けるので先頭を除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0 or result.invalid_rows > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _cmd_template(args: argparse.Namespace, cfg, logger) -> int:
    try:
        document = build_workbook(args.record_type, cfg.registry, cfg.style)
    except StructuralError as e:
        logger.error(f"template: {e}")
        return EXIT_FATAL
    path = document.save(args.output)
    logger.info(f"template written: {path}")
    return EXIT_SUCCESS_ALL


def _cmd_parse(args: argparse.Namespace, logger) -> int:
    expected = [h.strip() for h in args.headers.split(",") if h.strip()]
    try:
        document = Document.load(args.file)
        results = parse_workbook(document, expected)
    except (DocumentLoadError, StructuralError) as e:
        logger.error(f"parse: {e}")
        return EXIT_FATAL
    payload = [{"headers": r.headers, "rows": r.rows, "rowCount": r.row_count} for r in results]
    # datetime セルは isoformat で出力
    print(json.dumps(payload, ensure_ascii=False, default=lambda v: v.isoformat() if hasattr(v, "isoformat") else str(v)))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストからの main([]) 呼び出し対策)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.command == "parse":
        return _cmd_parse(args, logger)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "import":
        return _cmd_import(args, cfg, logger)
    return _cmd_template(args, cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
