"""
Logging setup for the main process and for the worker processes of a batch.

The main process logs to the console at the level the CLI picks, and to a new
DEBUG log file per run. Workers log into memory; the main process copies their
output into its own file once a file is done.
"""
import io
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

LOGGER_NAME = "raggedast"
LOG_DIR = Path("./logs")
LOG_PATTERN = "raggedast_*.log"
MAX_LOG_FILES = 20
CONSOLE_LOG_FORMAT = "%(levelname)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s [%(process)d] %(levelname)s - [%(module)s:%(lineno)d] - %(message)s"


def _reset(logger: logging.Logger):
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)


def _prune_logs(log_dir: Path, keep: int):
    """Deletes the oldest run logs so that `keep` remain, counting the one about to be created."""
    logs = sorted((p for p in log_dir.glob(LOG_PATTERN) if p.is_file()), key=os.path.getmtime)
    for old_log in logs[:max(0, len(logs) - keep)]:
        try:
            old_log.unlink()
        except OSError:
            pass  # Still open elsewhere, next run gets it


def _run_log_handler(log_dir: Path) -> logging.FileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    _prune_logs(log_dir, MAX_LOG_FILES - 1)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    handler = logging.FileHandler(log_dir / LOG_PATTERN.replace("*", stamp), encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_main_logger(console_level=logging.ERROR, log_dir: Path = LOG_DIR):
    """
    Configures the "raggedast" logger of the main process: a stdout handler
    at `console_level` and a DEBUG file handler writing a new file in `log_dir`.
    Calling it again replaces the handlers of the previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    _reset(logger)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_LOG_FORMAT))
    logger.addHandler(console)

    try:
        file_handler = _run_log_handler(log_dir)
    except OSError:
        logger.error("Failed to set up file logging.", exc_info=True)
        return
    logger.addHandler(file_handler)
    logger.info(
        "Main logger initialized. Console level: %s, File level: DEBUG. Logging to: %s",
        logging.getLevelName(console_level),
        file_handler.baseFilename,
    )


def setup_worker_logger() -> tuple[io.StringIO, logging.Handler]:
    """
    Points the "raggedast" logger of a worker process at an in-memory buffer.
    Handlers inherited from the parent are dropped.

    Returns:
        The buffer and its handler. Both must be closed by the caller.
    """
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%H:%M:%S"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    return buffer, handler
