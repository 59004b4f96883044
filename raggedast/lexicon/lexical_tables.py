import logging
from typing import NamedTuple

from ..resources.loader import load_lexicon_json


log = logging.getLogger("raggedast")


class Tables(NamedTuple):
    """Word lists the typographic rules match against."""
    words: tuple[str, ...]
    months: tuple[str, ...]
    units: tuple[str, ...]


class LexicalTables:
    """
    Static word lists: function words that must not end a line, month names
    and unit abbreviations. Loaded once from the packaged lexicon.json and
    shared read-only by every rule.
    """
    _TABLES: Tables | None = None

    @staticmethod
    def _get_json_data(filename: str) -> Tables:
        """Parses json data and returns a Tables tuple."""
        data = load_lexicon_json(filename)
        tables = Tables(*(tuple(data.get(key, ())) for key in Tables._fields))
        for key, values in zip(Tables._fields, tables):
            if not values:
                log.warning(f"Lexicon table '{key}' is empty. Rules using it will not match.")
        return tables


    @classmethod
    def load_tables(cls, filename: str = "lexicon.json"):
        """Reads the tables from the packaged resources."""
        cls._TABLES = cls._get_json_data(filename)


    @classmethod
    def inject_tables(cls, tables: Tables):
        """
        Manually sets tables returned by get_tables().
        Used for initialization in multiprocessing.
        """
        cls._TABLES = Tables(*tables)


    @classmethod
    def get_tables(cls) -> Tables:
        """Returns the loaded tables, loading them on first use."""
        if cls._TABLES is None:
            log.debug("[LexicalTables] Missing tables. Loading from file.")
            cls.load_tables()
        return cls._TABLES  # type: ignore[return-value]


    @classmethod
    def words(cls) -> tuple[str, ...]:
        return cls.get_tables().words


    @classmethod
    def months(cls) -> tuple[str, ...]:
        return cls.get_tables().months


    @classmethod
    def short_months(cls) -> tuple[str, ...]:
        """Three-letter month abbreviations, e.g. 'Jan'."""
        return tuple(month[:3] for month in cls.months())


    @classmethod
    def units(cls) -> tuple[str, ...]:
        return cls.get_tables().units

# --- END of LexicalTables class ---
