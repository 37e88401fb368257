from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .app import MachineMetaApp
from .commands import batch as cmd_batch
from .commands import doctor as cmd_doctor
from .commands import parse as cmd_parse
from .config import load_settings
from .core.parsing import TitleParser
from .errors import MachineMetaError, StoreUnavailableError

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def configure_logging(level_name: str, warn_log_path: Optional[Path]) -> WarningBufferHandler:
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(warn_buffer)

    if warn_log_path is not None:
        file_handler = logging.FileHandler(warn_log_path, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)
    return warn_buffer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Machine listing brand/model extraction")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    parse_parser = subparsers.add_parser("parse", help="Parse a single title and print the result")
    parse_parser.add_argument("title", help="Listing title")
    parse_parser.add_argument("--brand", default=None, help="Brand from a dedicated field, if known")
    parse_parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON to stdout")

    subparsers.add_parser("init", help="Create the listing and brand/model tables in the store")

    add_parser = subparsers.add_parser("add", help="Insert a listing record")
    add_parser.add_argument("title", help="Listing title")
    add_parser.add_argument("--brand", default=None, help="Value for the brand field")

    update_parser = subparsers.add_parser("update", help="Parse one stored listing and write the results back")
    update_parser.add_argument("record_id", help="Listing record id")

    batch_parser = subparsers.add_parser("batch", help="Update every listing in the table")
    batch_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Concurrent updates (defaults to parser.worker_concurrency)",
    )

    subparsers.add_parser("doctor", help="Run basic config/store/table checks")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    writes_store = args.command in {"update", "batch"}
    warn_log_path = Path.cwd() / "machine-meta-warnings.log" if writes_store else None
    warn_buffer = configure_logging(args.log_level, warn_log_path)

    if args.command == "parse":
        try:
            cmd_parse.run(
                TitleParser(settings.tables.to_parser_tables()),
                args.title,
                brand=args.brand,
                json_output=args.json,
            )
        except MachineMetaError as exc:
            raise SystemExit(str(exc)) from exc
        return
    if args.command == "doctor":
        report = cmd_doctor.run(settings)
        for line in report.checks:
            print(line)
        if not report.ok:
            raise SystemExit(1)
        return

    app = MachineMetaApp.create(settings)
    try:
        match args.command:
            case "init":
                app.init_schema()
                print(f"Initialised {settings.store.path}")
            case "add":
                fm = settings.field_map
                values = {fm.title: args.title}
                if args.brand:
                    values[fm.brand] = args.brand
                try:
                    print(app.store.create_record(settings.store.table, values))
                except MachineMetaError as exc:
                    raise SystemExit(f"{exc} (run `machine-meta init`)") from exc
            case "update":
                try:
                    summary = app.get_updater().update(args.record_id)
                except StoreUnavailableError as exc:
                    if exc.record is not None:
                        print(cmd_parse.format_record(exc.record))
                    raise SystemExit(f"Store unavailable: {exc}") from exc
                except MachineMetaError as exc:
                    raise SystemExit(str(exc)) from exc
                print(summary.render())
            case "batch":
                record_ids = [rid for rid, _payload in app.store.list_records(settings.store.table)]
                workers = args.workers or settings.parser.worker_concurrency
                report = cmd_batch.run(app.get_updater(), record_ids, workers=workers)
                print(f"Updated {report.updated} record(s), {report.failed} failed")
                if report.failed:
                    raise SystemExit(1)
            case _:
                parser.error("Unknown command")
    finally:
        app.close()
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")
            if warn_log_path is not None:
                print(f"\nFull warning log: {warn_log_path}")
