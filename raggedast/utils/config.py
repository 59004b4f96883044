"""
Defines configuration and settings for a ragging run.
"""
import json
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from cssselect import HTMLTranslator, SelectorError


class ConfigError(ValueError):
    """Raised for a conflicting or out-of-range option. Aborts the whole run."""


# Option file names -> RagConfig field names
OPTION_ALIASES = {
    "thinSpace": "thin_space",
    "shortWords": "short_words",
    "output": "output_path",
    "threads": "num_threads",
}

_BOOL_FIELDS = ("words", "symbols", "units", "numbers", "emphasis", "quotes", "months")
_INT_FIELDS = ("orphans", "short_words", "limit", "num_threads")
_FORBIDDEN_IN_MARKER = re.compile(r'[<>]|[^\S\xa0\u2007\u202f]')


@dataclass(frozen=True)
class RagConfig:
    """
    A container for all settings of a ragging run.
    Created once by the CLI and shared read-only by every rule, block, file and worker.
    """
    selector: str = 'p'
    space: str = '&#160;'
    thin_space: str = '&#8239;'
    # rule toggles
    words: bool = True
    symbols: bool = True
    units: bool = True
    numbers: bool = True
    emphasis: bool = True
    quotes: bool = True
    months: bool = True
    orphans: int = 2        # <= 1 disables
    short_words: int = 2    # 0 disables
    limit: int = 0          # <= 0 disables
    output_path: Path | None = None
    num_threads: int = 0    # 0 means cpu count

    def __post_init__(self):
        for name in _BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"Option '{name}' must be true or false, got {getattr(self, name)!r}")
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"Option '{name}' must be an integer, got {value!r}")
        if self.short_words < 0:
            raise ConfigError(f"Option 'short_words' must not be negative, got {self.short_words}")
        if self.num_threads < 0:
            raise ConfigError(f"Option 'num_threads' must not be negative, got {self.num_threads}")

        self._check_marker('space', self.space)
        self._check_marker('thin_space', self.thin_space)
        if self.space.lower() in self.thin_space.lower() or self.thin_space.lower() in self.space.lower():
            raise ConfigError(
                f"Hard space {self.space!r} and thin space {self.thin_space!r} must be distinct markers")

        if not isinstance(self.selector, str) or not self.selector.strip():
            raise ConfigError("Option 'selector' must be a non-empty CSS selector")
        try:
            HTMLTranslator().css_to_xpath(self.selector)
        except SelectorError as e:
            raise ConfigError(f"Invalid selector {self.selector!r}: {e}") from e

        if self.output_path is not None and not isinstance(self.output_path, Path):
            object.__setattr__(self, 'output_path', Path(self.output_path))

    @staticmethod
    def _check_marker(name: str, marker: Any):
        if not isinstance(marker, str) or not marker:
            raise ConfigError(f"Option '{name}' must be a non-empty string")
        if _FORBIDDEN_IN_MARKER.search(marker):
            raise ConfigError(f"Option '{name}' must not contain breakable whitespace, '<' or '>': {marker!r}")

    @classmethod
    def from_options(cls, options: Mapping[str, Any], **overrides) -> 'RagConfig':
        """
        Builds a config from camelCase option names (e.g. `thinSpace`, `shortWords`),
        snake_case names are accepted too. Keyword overrides that are None are ignored.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in options.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ConfigError(f"Unknown option: '{key}'")
            values[name] = value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def load_options(path: Path) -> dict[str, Any]:
    """Reads a JSON object of options from a file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read options file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Options file '{path}' must contain a JSON object")
    return data
