import logging

from lxml import etree

from ..utils.config import RagConfig
from ..utils import html_utils as hu
from .limiter import limit_streaks
from .rules import apply_rules


log = logging.getLogger("raggedast")


def rag_contents(contents: str, config: RagConfig) -> str:
    """Runs the rule pipeline and then the run-length limiter over one block's inline markup."""
    return limit_streaks(apply_rules(contents, config), config)


def improve_rag(root: etree._Element, config: RagConfig) -> int:
    """
    Adjusts the text rag of every block matching `config.selector` below `root`.
    `root` itself is never a block, so a fragment wrapper is not ragged as a whole.

    Each block's inner markup is rewritten as a string and parsed back into the tree.
    Blocks nested inside another selected block are handled as part of the outer one.
    Hard and thin spaces already in the document count as markers.

    Returns:
        int: The number of blocks rewritten.
    """
    blocks = hu.select_blocks(root, config.selector)
    selected = set(blocks)
    # Picked before any rewrite, which detaches the nested elements
    outer_blocks = [
        block for block in blocks
        if not any(ancestor in selected for ancestor in block.iterancestors())
    ]
    rewritten = 0

    for block in outer_blocks:
        contents = hu.inner_html(block)
        if not contents.strip():
            continue

        contents = hu.encode_markers(contents, config.space, config.thin_space)
        ragged = rag_contents(contents, config)
        if ragged == contents:
            continue

        hu.replace_inner_html(block, ragged)
        rewritten += 1
        log.debug(f"Ragged <{hu.get_tag_name(block)}>: {ragged[:80]!r}")

    return rewritten
