"""
Handles command-line argument parsing and initiates the ragging.
This is the entry point for the console script.
"""
import argparse
import logging
from pathlib import Path

from .core.batch_processor import BatchProcessor
from .utils.config import ConfigError, RagConfig, load_options
from .utils.logger import LOG_DIR, setup_main_logger
from .utils.structures import FileReport, HTML_SUFFIXES


# Get logger (will be configured in run_cli)
log = logging.getLogger("raggedast")

RULE_TOGGLES = {
    "words": "Bind prepositions, articles and conjunctions to the next word.",
    "symbols": "Bind spaced math operators and dashes to both neighbours.",
    "units": "Bind numbers to their units (3 km).",
    "numbers": "Group thousands with the thin space (1 234 567).",
    "emphasis": "Keep short emphasized phrases on one line.",
    "quotes": "Keep short quotations on one line.",
    "months": "Keep dates together (5 May 2013).",
}


def non_negative_int(value):
    """Checks if value is an int >= 0."""
    ivalue = int(value)
    if ivalue < 0:
        raise argparse.ArgumentTypeError(f"Value must not be negative, got {ivalue}")
    return ivalue


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="raggedast",
        description="Improves the text rag of HTML paragraphs by binding words with hard spaces.",
    )
    parser.add_argument("input_paths", type=Path, nargs="+",
                        help="Input .html, .htm, .xhtml files or/and folders separated by a space.")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output folder or filename (for single input). If omitted, files are rewritten in place.")
    parser.add_argument("-c", "--config", type=Path, default=None,
                        help="JSON file with options (e.g. {\"shortWords\": 3, \"limit\": 4}). Flags override it.")
    parser.add_argument("--selector", default=None,
                        help="CSS selector of the blocks to process. (default: p)")
    parser.add_argument("--space", default=None,
                        help="Hard-space marker. (default: &#160;)")
    parser.add_argument("--thin-space", default=None,
                        help="Thin-space marker for digit groups. (default: &#8239;)")
    for name, help_text in RULE_TOGGLES.items():
        parser.add_argument(f"--{name}", action=argparse.BooleanOptionalAction, default=None,
                            help=f"{help_text} (default: on)")
    parser.add_argument("--orphans", type=int, default=None,
                        help="Minimal number of words on the last line, 1 or less to disable. (default: 2)")
    parser.add_argument("--short-words", type=non_negative_int, default=None,
                        help="Bind words up to this many characters to the next word, 0 to disable. (default: 2)")
    parser.add_argument("--limit", type=int, default=None,
                        help="Maximal number of consecutive hard spaces, 0 to disable. (default: 0)")
    parser.add_argument("--threads", type=non_negative_int, default=None,
                        help="Number of parallel processes to use. 0 to use max. (default: 0)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print progress information to the console.")
    parser.add_argument("--log-dir", type=Path, default=LOG_DIR,
                        help=f"Folder for the log files. (default: {LOG_DIR})")
    return parser


def collect_files(input_paths: list[Path]) -> list[Path]:
    """Expands folders into the HTML files they contain. Missing inputs are skipped."""
    files_to_process = []
    for path in input_paths:
        if not path.exists():
            log.warning(f"Input path does not exist, skipping: {path}")
            continue
        if path.is_dir():
            files_to_process.extend(sorted(
                p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in HTML_SUFFIXES
            ))
        elif path.suffix.lower() in HTML_SUFFIXES:
            files_to_process.append(path)
        else:
            log.warning(f"Not an HTML file, skipping: {path}")
    return files_to_process


def make_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> RagConfig:
    """Defaults < options file < command-line flags."""
    try:
        options = load_options(args.config) if args.config else {}
        overrides = {name: getattr(args, name) for name in RULE_TOGGLES}
        return RagConfig.from_options(
            options,
            selector=args.selector,
            space=args.space,
            thin_space=args.thin_space,
            orphans=args.orphans,
            short_words=args.short_words,
            limit=args.limit,
            output_path=args.output,
            num_threads=args.threads,
            **overrides,
        )
    except ConfigError as e:
        parser.error(str(e))


def run_cli(argv: list[str] | None = None) -> int:
    """
    The main function for the command-line interface.
    Parses arguments and runs the ragging pipeline.

    Returns:
        int: The process exit code, 1 if any file failed.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    console_level = logging.INFO if args.verbose else logging.ERROR
    setup_main_logger(console_level, args.log_dir)
    log.info(f"Console logger set to level: {logging.getLevelName(console_level)}")

    config = make_config(parser, args)

    # Collect all files to be processed
    files_to_process = collect_files(args.input_paths)
    if not files_to_process:
        log.warning("No .html, .htm or .xhtml files found to process.")
        return 0

    if config.output_path is not None and config.output_path.suffix.lower() in HTML_SUFFIXES \
            and len(files_to_process) > 1:
        parser.error("An output filename can only be used with a single input file.")

    processor = BatchProcessor(config)

    num_files = len(files_to_process)
    log.info(f"Found {num_files} files. Starting ragging...")

    completed_count = 0
    def progress_callback(path: Path, report: FileReport | None, exc: Exception | None):
        nonlocal completed_count
        completed_count += 1
        # pad completed_count with spaces for alignment
        completed_str = str(completed_count).rjust(len(str(num_files)))
        prefix = f"[{completed_str}/{num_files}]"
        if exc:
            print(f"{prefix} ❌ Error: {path.name}", flush=True)
            print(f"  └─ {exc}", flush=True)
            # File log has the full trace from the worker
            log.error(f"Failed to rag {path.name}: {exc}", exc_info=False)
        else:
            hard_spaces = report.hard_spaces if report else 0
            print(f"{prefix} ✅ Done: {path.name} ({hard_spaces} hard spaces)", flush=True)

    results = processor.run(files_to_process, progress_callback)

    failed = sum(1 for _, _, exc in results if exc is not None)
    print(f"\nBatch ragging finished: {len(results) - failed} done, {failed} failed.")

    return 1 if failed else 0
