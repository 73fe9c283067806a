from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .app import OrganizerApp
from .commands import analyze as cmd_analyze
from .commands import classify as cmd_classify
from .commands import consistency as cmd_consistency
from .commands import consolidate as cmd_consolidate
from .commands import dictionary as cmd_dictionary
from .commands import organize as cmd_organize
from .commands import override as cmd_override
from .commands import plan as cmd_plan
from .config import STAGE_NAMES, Settings, StageSettings, load_settings
from .scanner import LibraryScanner

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"
WARNING_LOG = "music-organizer-warnings.log"

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


def configure_logging(level_name: str, warn_log_path: Path) -> WarningBufferHandler:
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

    file_handler = logging.FileHandler(warn_log_path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(file_handler)

    logging.getLogger("musicbrainzngs").setLevel(logging.WARNING)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return warn_buffer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="FLAC library genre classification and reorganization")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Analyze music library structure and metadata")
    analyze_parser.add_argument("path", type=Path, help="Path to music library")
    analyze_parser.add_argument(
        "-o", "--output", type=Path, default=Path("analysis-report.json"),
        help="Output file for analysis report (JSON)",
    )
    analyze_parser.add_argument(
        "--no-metadata", action="store_true", help="Skip metadata extraction (faster scan)"
    )
    analyze_parser.add_argument("--non-recursive", action="store_true", help="Do not scan subdirectories")

    classify_parser = subparsers.add_parser("classify", help="Classify albums by genre")
    classify_parser.add_argument("path", type=Path, help="Path to music library")
    classify_parser.add_argument(
        "-o", "--output", type=Path, default=Path("classifications.json"),
        help="Output file for classification results (JSON)",
    )
    classify_parser.add_argument(
        "--stages",
        default=None,
        help=f"Comma-separated stages to use ({','.join(STAGE_NAMES)} or all)",
    )
    classify_parser.add_argument(
        "--skip-cache", action="store_true", help="Ignore cached classifications"
    )

    plan_parser = subparsers.add_parser("plan", help="Generate a reorganization plan from cached classifications")
    plan_parser.add_argument("path", type=Path, help="Path to music library")
    plan_parser.add_argument(
        "-o", "--output", type=Path, default=Path("reorganization-plan.json"),
        help="Output file for the plan (JSON)",
    )
    plan_parser.add_argument("--target", type=Path, help="Target library root")
    plan_parser.add_argument(
        "--no-performer-folders",
        action="store_true",
        help="Do not add conductor/orchestra subfolders for classical albums",
    )

    organize_parser = subparsers.add_parser("organize", help="Execute library reorganization from plan")
    organize_parser.add_argument("plan", type=Path, help="Path to reorganization plan JSON file")
    organize_parser.add_argument("--mode", choices=("copy", "move"), default=None, help="Operation mode")
    organize_parser.add_argument(
        "--no-verify", action="store_true", help="Skip file integrity verification"
    )
    organize_parser.add_argument(
        "--dry-run", action="store_true", help="Simulate operations without file changes"
    )
    organize_parser.add_argument("--backup", type=Path, default=None, help="Create backup manifest in directory")

    override_parser = subparsers.add_parser("override", help="Manually set the genre of an album")
    override_parser.add_argument("artist")
    override_parser.add_argument("album")
    override_parser.add_argument("genre", help="Main genre, e.g. 'Rock' or 'Classical'")
    override_parser.add_argument("--subgenre", default=None)
    override_parser.add_argument("--year", type=int, default=None)

    dictionary_parser = subparsers.add_parser(
        "generate-dictionary", help="Build the artist/composer dictionary from a report"
    )
    dictionary_parser.add_argument("report", type=Path, help="Classification report JSON")
    dictionary_parser.add_argument("-o", "--output", type=Path, default=None)

    consistency_parser = subparsers.add_parser(
        "check-consistency", help="Report artists classified into more than one genre"
    )
    consistency_parser.add_argument("report", type=Path, help="Classification report JSON")
    consistency_parser.add_argument(
        "--fix-classical",
        action="store_true",
        help="Relabel albums titled 'Composer: Work' as Classical before checking",
    )

    consolidate_parser = subparsers.add_parser(
        "consolidate", help="Merge several reports, keeping the best result per album"
    )
    consolidate_parser.add_argument("reports", type=Path, nargs="+")
    consolidate_parser.add_argument("-o", "--output", type=Path, required=True)
    return parser


def _stages(settings: Settings, args: argparse.Namespace) -> StageSettings:
    use_cache = not args.skip_cache
    if args.stages:
        try:
            return StageSettings.from_names(args.stages, use_cache=use_cache)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
    return settings.classification.model_copy(update={"use_cache": use_cache})


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(args.config)
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from exc
    warn_log_path = Path.cwd() / WARNING_LOG
    warn_buffer = configure_logging(args.log_level, warn_log_path)

    app: OrganizerApp | None = None
    uses_app = args.command in {"classify", "plan", "organize", "override"}
    if uses_app:
        app = OrganizerApp.create(settings)
        if args.command in {"plan", "override"} or (args.command == "classify" and not args.skip_cache):
            app.open()

    try:
        match args.command:
            case "analyze":
                cmd_analyze.run(
                    LibraryScanner(settings.library),
                    args.path.resolve(),
                    output=args.output.resolve(),
                    read_tags=not args.no_metadata,
                    recursive=not args.non_recursive,
                )
            case "classify":
                cmd_classify.run(
                    app,
                    args.path.resolve(),
                    output=args.output.resolve(),
                    stages=_stages(settings, args),
                )
            case "plan":
                cmd_plan.run(
                    app,
                    args.path.resolve(),
                    output=args.output.resolve(),
                    target=args.target.resolve() if args.target else None,
                    use_performer_folders=False if args.no_performer_folders else None,
                )
            case "organize":
                cmd_organize.run(
                    app,
                    args.plan.resolve(),
                    mode=args.mode,
                    verify=not args.no_verify,
                    dry_run=args.dry_run,
                    backup=args.backup.resolve() if args.backup else None,
                )
            case "override":
                cmd_override.run(
                    app.cache,
                    args.artist,
                    args.album,
                    args.genre,
                    subgenre=args.subgenre,
                    year=args.year,
                )
            case "generate-dictionary":
                cmd_dictionary.run(
                    args.report.resolve(),
                    output=(args.output or settings.storage.dictionary_path).resolve(),
                )
            case "check-consistency":
                cmd_consistency.run(args.report.resolve(), fix_classical=args.fix_classical)
            case "consolidate":
                cmd_consolidate.run(
                    [path.resolve() for path in args.reports],
                    output=args.output.resolve(),
                )
            case _:
                parser.error("Unknown command")
    finally:
        if app:
            app.close()
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")
            print(f"\nFull warning log: {warn_log_path}")
