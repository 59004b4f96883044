from pathlib import Path
import logging
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from raggedast.lexicon.lexical_tables import LexicalTables  # noqa: E402
from raggedast.utils.config import RagConfig  # noqa: E402

H = '&#160;'
T = '&#8239;'


@pytest.fixture(autouse=True)
def _reset_logger():
    """Handlers added by setup_main_logger would otherwise leak between tests."""
    yield
    logger = logging.getLogger("raggedast")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


@pytest.fixture(scope="session", autouse=True)
def _lexicon():
    LexicalTables.load_tables()


def only(rule: str, **kwargs) -> RagConfig:
    """A config with every rule switched off except `rule`."""
    values = dict(
        words=False, symbols=False, units=False, numbers=False,
        emphasis=False, quotes=False, months=False, orphans=0, short_words=0,
    )
    if rule in values and isinstance(values[rule], bool):
        values[rule] = True
    values.update(kwargs)
    return RagConfig(**values)
