"""Reads the data files packaged under `raggedast/resources`."""
import json
import logging
from importlib import resources as res


log = logging.getLogger("raggedast")


LEXICON_PACKAGE = "raggedast.resources.lexicon"


def read_resource(package: str, filename: str) -> str | None:
    """Returns a packaged text file, or None when it can't be read."""
    try:
        return res.files(package).joinpath(filename).read_text(encoding="utf-8")
    except (ModuleNotFoundError, OSError) as e:
        log.error(f"Resource not found: {package}/{filename}: {e}")
        return None


def load_json(package: str, filename: str) -> dict:
    """Loads a packaged JSON object. Problems are logged and give an empty dict."""
    text = read_resource(package, filename)
    if text is None:
        return {}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        log.error(f"Failed to load JSON {filename}: {e}")
        return {}
    if not isinstance(data, dict):
        log.error(f"JSON {filename} must hold an object, got {type(data).__name__}")
        return {}
    return data


def load_lexicon_json(filename: str = "lexicon.json") -> dict:
    return load_json(LEXICON_PACKAGE, filename)
