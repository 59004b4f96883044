"""
The per-file ragging pipeline (Facade).

This module reads one HTML file, adjusts the rag of every selected block
and writes the result to its destination.
"""
import logging
from pathlib import Path

from ..typography.typography import improve_rag
from ..utils import html_utils as hu
from ..utils.config import RagConfig
from ..utils.structures import FileReport, HTML_SUFFIXES


log = logging.getLogger("raggedast")


class RagPipeline:
    """
    A facade that simplifies processing a single file.

    The batch processor interacts with this class to run one file.
    It coordinates the parser, the typography pass, and the writer.
    """

    def __init__(self, config: RagConfig):
        """Initializes the pipeline with a specific configuration."""
        self.config = config


    def destination(self, source_path: Path) -> Path:
        """
        Where the result for `source_path` is written.
        In place without an output path; the output path itself if it names an HTML file;
        otherwise a file of the same name inside the output folder.
        """
        output = self.config.output_path
        if output is None:
            return source_path
        if output.suffix.lower() in HTML_SUFFIXES:
            return output
        return output / source_path.name


    def process(self, source_path: Path) -> FileReport:
        """Executes ragging for a single file."""
        # 1. Read and parse the source
        source = source_path.read_text(encoding="utf-8")
        document = hu.parse_document(source, xml=source_path.suffix.lower() == ".xhtml")

        # 2. Rewrite the selected blocks
        blocks = improve_rag(document.root, self.config)

        # 3. Serialize and write the result
        output = hu.serialize_document(document)
        dest = self.destination(source_path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(output, encoding="utf-8")

        hard_spaces = hu.count_markers(output, self.config.space)
        log.info(f'{hard_spaces} hard spaces added to file "{dest}".')
        log.debug(f"{blocks} blocks rewritten in {source_path.name}.")

        return FileReport(source_path, dest, blocks, hard_spaces)
