"""
Handles the parallel processing of a batch of files.
This class contains the ProcessPoolExecutor and is used by the CLI.
"""
import logging
import os
import concurrent.futures
from pathlib import Path
from typing import Callable

from .pipeline import RagPipeline
from ..lexicon.lexical_tables import LexicalTables, Tables
from ..utils.config import RagConfig
from ..utils.logger import setup_worker_logger
from ..utils.structures import FileReport

# The main logger is configured by the entry point (CLI)
# We just get it here to write high-level status updates from the main process
log = logging.getLogger("raggedast")


Result = tuple[Path, FileReport | None, Exception | None]


def _init_worker(tables: Tables):
    """
    This function runs once inside every new child process.
    It receives the lexical tables and injects them into the local class.
    """
    LexicalTables.inject_tables(tables)


def _rag_single_file(path: Path, config: RagConfig) -> tuple[Path, str, FileReport | None, Exception | None]:
    """
    A standalone function to be the target for the executor.
    It runs the ragging pipeline on a single file and
    captures all its log output.

    Returns:
        tuple[Path, str, FileReport | None, Exception | None]:
            - The path of the processed file.
            - The captured log output as a string.
            - The file report, if the file was processed.
            - An exception object if one occurred, else None.
    """
    # Set up in-memory logging for this worker process
    log_stream, log_handler = setup_worker_logger()
    worker_log = logging.getLogger("raggedast")

    try:
        worker_log.info(f"Ragging: {path.name}")

        pipeline = RagPipeline(config)
        report = pipeline.process(path)

        worker_log.info(f"Successfully finished ragging for: {path.name}")
        return path, log_stream.getvalue(), report, None

    except Exception as e:
        # 1. Log the full traceback locally to the worker's buffer.
        # This ensures the details are saved to the log file later.
        worker_log.error(f"Failed ragging for: {path.name}", exc_info=True)

        # 2. Sanitize the exception.
        # Convert the exception to a built-in type with the string message,
        # so the main process can always unpickle it.
        safe_exc = RuntimeError(f"{type(e).__name__}: {str(e)}")
        return path, log_stream.getvalue(), None, safe_exc

    finally:
        # Clean up handlers and close the stream
        log_handler.close()
        log_stream.close()


class BatchProcessor:
    """Orchestrates the ragging of multiple files in parallel."""

    def __init__(self, config: RagConfig):
        self.config = config


    def run(self, files: list[Path], progress_callback: Callable | None = None) -> list[Result]:
        """
        Processes a list of files in parallel using a ProcessPoolExecutor.

        Args:
            files: A list of Path objects to rag.
            progress_callback: A function to be called as each file completes.
                               It receives the (path, report, exception).

        Returns:
            list: (path, report, exception) for every existing file, in the original order.
        """
        existing = []
        for path in files:
            # Warn on and remove missing source files
            if not path.is_file():
                log.warning(f'Source file "{path}" not found.')
                continue
            existing.append(path)

        if not existing:
            return []

        # Determine the number of worker processes
        th = self.config.num_threads
        max_workers = min(th if th > 0 else (os.cpu_count() or 1), len(existing))
        log.info(f"Starting batch processing with up to {max_workers} worker processes.")

        # This list will store results in the original file order
        # Each item will be: (path, log_string, report, exception)
        ordered_results: list[tuple[Path, str, FileReport | None, Exception | None] | None] = [None] * len(existing)

        with concurrent.futures.ProcessPoolExecutor(
            max_workers,
            initializer=_init_worker,                   # Function to run on start
            initargs=(LexicalTables.get_tables(),)      # Arguments for that function
        ) as executor:
            # Submit all tasks, keyed by their original index
            future_to_index = {
                executor.submit(_rag_single_file, path, self.config): idx
                for idx, path in enumerate(existing)
            }

            # Process results as they are completed
            for future in concurrent.futures.as_completed(future_to_index):
                idx = future_to_index[future]
                path = existing[idx]

                try:
                    p, log_string, report, exc = future.result()
                    ordered_results[idx] = (p, log_string, report, exc)

                except Exception as e:
                    # This catches a critical failure *in the worker itself*
                    # (e.g., the process died)
                    log.error(f"Critical worker failure for {path.name}: {e}", exc_info=True)
                    report, exc = None, e
                    ordered_results[idx] = (path, f"CRITICAL FAILURE: {e}\n", None, e)

                # Call progress callback *as items complete*
                if progress_callback:
                    progress_callback(path, report, exc)


        # --- All processing is done ---
        log.info("Batch processing complete. Writing ordered logs...")
        self._write_worker_logs(ordered_results)

        return [(path, report, exc) for path, _, report, exc in ordered_results]  # type: ignore[misc]


    @staticmethod
    def _write_worker_logs(ordered_results: list):
        """Writes the buffered worker logs to the main log file, in the original file order."""
        # Find the main file handler to write the buffered logs
        file_handler = next(
            (h for h in log.handlers if isinstance(h, logging.FileHandler)), None
        )
        if file_handler is None:
            return

        for result in ordered_results:
            if result is None:
                # This should not happen if logic is correct
                log.error("Missing result in ordered list.")
                continue

            path, log_string, _, _ = result
            if not log_string:
                continue
            try:
                file_handler.stream.write(f"\n--- Log for {path.name} ---\n")
                file_handler.stream.write(log_string)
                file_handler.stream.write(f"--- End log for {path.name} ---\n")
            except Exception as e:
                log.error(f"Failed to write buffered log for {path.name}: {e}")

        log.info("Ordered log writing complete.")
