from pathlib import Path
from typing import NamedTuple

from lxml import etree

__all__ = ["ParsedDocument", "FileReport", "HTML_SUFFIXES"]


HTML_SUFFIXES = ('.html', '.htm', '.xhtml')


class ParsedDocument(NamedTuple):
    """A parsed source file and what is needed to write it back the same way."""
    root: etree._Element
    declaration: str = ''
    is_fragment: bool = False
    """Fragments are wrapped in a `div` that is never written out."""
    is_xml: bool = False
    """XHTML sources are parsed and written back as XML."""


class FileReport(NamedTuple):
    """Outcome of ragging a single file."""
    source: Path
    dest: Path
    blocks: int
    hard_spaces: int
