import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from enrollment_ingest.config.settings import Settings
from enrollment_ingest.database.connection import close_pool, init_pool
from enrollment_ingest.logging.logger import Log
from enrollment_ingest.processor.exceptions import ProcessorError
from enrollment_ingest.processor.file_loader import FileLoader
from enrollment_ingest.processor.processor import build_processor
from enrollment_ingest.scheduler.batch_scheduler import BatchScheduler
from enrollment_ingest.scheduler.metrics import system_stats
from enrollment_ingest.scheduler.models import ProcessMode, report_to_dict
from enrollment_ingest.store.factory import EnrollmentStoreFactory


def build_arg_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="enrollment-ingest",
        description="Stress-test the enrollment receipt ingestion pipeline.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    stress = subparsers.add_parser("stress", help="Process every receipt in a directory")
    stress.add_argument("directory", type=Path, help="Directory with receipt images or PDFs")
    stress.add_argument(
        "--mode",
        choices=[m.value for m in ProcessMode],
        default=settings.default_process_mode,
    )
    stress.add_argument("--batch-size", type=int, default=settings.batch_size)
    stress.add_argument(
        "--persist",
        action="store_true",
        help="Write accepted receipts to the store (default: dry run)",
    )
    stress.add_argument(
        "--no-detailed-metrics",
        dest="detailed_metrics",
        action="store_false",
        help="Omit per-file results from the report",
    )

    subparsers.add_parser("stats", help="Print process and system statistics")
    return parser


def run_stress(args: argparse.Namespace, settings: Settings) -> int:
    try:
        documents = FileLoader().load_directory(args.directory)
    except ProcessorError as exc:
        Log.error(str(exc))
        return 2
    if not documents:
        Log.error(f"No files to process in {args.directory}")
        return 2

    use_pool = EnrollmentStoreFactory.needs_pool(settings)
    if use_pool:
        init_pool(settings)
    try:
        store = EnrollmentStoreFactory.create(settings)
        scheduler = BatchScheduler(build_processor(settings, store))
        report = scheduler.run(
            documents,
            mode=ProcessMode(args.mode),
            skip_persist=not args.persist,
            detailed_metrics=args.detailed_metrics,
            batch_size=args.batch_size,
        )
    finally:
        if use_pool:
            close_pool()

    print(json.dumps(report_to_dict(report), indent=2, ensure_ascii=False, default=str))
    return 0 if report.failed_files == 0 else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse arguments -> configure logging -> dispatch command."""
    settings = Settings()
    Log.configure(settings.log_level)
    args = build_arg_parser(settings).parse_args(argv)

    if args.command == "stats":
        print(json.dumps(system_stats(), indent=2))
        return 0
    return run_stress(args, settings)


if __name__ == "__main__":
    sys.exit(main())
