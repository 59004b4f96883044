"""
Typographic rules that turn breakable whitespace into hard spaces.

Every rule is a pure function `(contents, config) -> contents` over one block's inline
markup. Rules run in a fixed order, each one seeing the output of the previous one.
A later rule can extend an earlier binding because the hard space counts as a gap,
while thin-space digit groups stay frozen.
"""
import re
from functools import lru_cache
from operator import attrgetter
from typing import Callable, NamedTuple

from ..lexicon.lexical_tables import LexicalTables
from ..utils.config import RagConfig
from .gaps import gap_model, bind, bind_after_lead, OUTSIDE_TAG, QUOTE_PAIRS, TAG, WHITESPACE


Rule = Callable[[str, RagConfig], str]

EMPHASIS_TAGS = ('strong', 'em', 'b', 'i')
# Math operators, en and em dash. Not the hyphen.
SYMBOLS = '×+/=−–—'
SHORT_WORD_CHAR = r"[\w\-–’']"


def _alternation(words) -> str:
    # Longest first, so the longest word wins at the same position
    return '(?:' + '|'.join(re.escape(w) for w in sorted(words, key=len, reverse=True)) + ')'


# --- Patterns, compiled once per marker pair and table contents ---

@lru_cache(maxsize=None)
def _emphasis_re(space: str, thin_space: str) -> re.Pattern:
    """
    1. Word boundary, kept out of the binding.
    2. Opening emphasis tag, with or without attributes.
    3. One or two words followed by a gap that does not close the span.
    4. The last word.
    5. The matching closing tag.
    """
    g = gap_model(space, thin_space)
    closing = r'</(?P=tag)>'
    inner_gap = '(?:(?!' + closing + ')' + TAG + '|' + WHITESPACE + '|' + g.space + ')'
    return re.compile(
        g.boundary  # 1.
        + r'<(?P<tag>' + '|'.join(EMPHASIS_TAGS) + r')(?:\s[^>]*)?>'  # 2.
        + '(?:' + g.token + inner_gap + '+){1,2}'  # 3.
        + g.token + inner_gap + '*'  # 4.
        + closing + r'(?!\w)',  # 5.
        re.IGNORECASE)


@lru_cache(maxsize=None)
def _quotes_re(space: str, thin_space: str) -> re.Pattern:
    g = gap_model(space, thin_space)
    phrases = []
    for opening, closing in QUOTE_PAIRS:
        # A quoted word must not swallow the closing mark
        token = g.token_without(closing)
        phrases.append(
            re.escape(opening)
            + '(?:' + token + g.gap + '+){1,2}'
            + token + g.gap + '*'
            + re.escape(closing))
    return re.compile(g.boundary + '(?:' + '|'.join(phrases) + ')', re.IGNORECASE)


@lru_cache(maxsize=None)
def _words_re(space: str, thin_space: str, words: tuple[str, ...]) -> re.Pattern:
    """
    1. Optional opening quote mark.
    2. A function word followed by a gap. Repeated greedily, so the longest
       run of such words is chained in one match.
    3. The token the run is bound to. Not consumed.
    """
    g = gap_model(space, thin_space)
    return re.compile(
        g.boundary
        + g.opening_quote + '?'  # 1.
        + '(?:' + _alternation(words) + g.gap + '+' + OUTSIDE_TAG + ')+'  # 2.
        + '(?=' + g.token_char + ')',  # 3.
        re.IGNORECASE)


@lru_cache(maxsize=None)
def _symbols_re(space: str, thin_space: str) -> re.Pattern:
    g = gap_model(space, thin_space)
    # A token on both sides, so leading or trailing whitespace of the block stays breakable
    return re.compile(
        r'(?<=[^\s>])' + g.gap + '+[' + re.escape(SYMBOLS) + ']' + OUTSIDE_TAG + g.gap + '+'
        + '(?=' + g.token_char + ')',
        re.IGNORECASE)


@lru_cache(maxsize=None)
def _units_re(space: str, thin_space: str, units: tuple[str, ...]) -> re.Pattern:
    g = gap_model(space, thin_space)
    # Case matters for units: m vs M, s vs S
    return re.compile(r'\d' + g.gap + '+' + _alternation(units) + r'(?![^\W\d_])')


@lru_cache(maxsize=None)
def _numbers_re(space: str, thin_space: str) -> re.Pattern:
    g = gap_model(space, thin_space)
    return re.compile(r'\d(?:' + g.gap + r'+\d{3}(?!\d))+')


@lru_cache(maxsize=None)
def _months_re(space: str, thin_space: str, months: tuple[str, ...]) -> re.Pattern:
    """
    Either '12 Dec[ember] [2013]' or 'Dec[ember] 12[, 2013]'.
    The month must not be glued to other letters, so 'Jane' or 'Mayor' never match.
    """
    g = gap_model(space, thin_space)
    month = _alternation(months)
    day_first = (
        r'(?<!\d)\d{1,2}' + g.gap + '+' + month + r'(?![^\W\d_])'
        + '(?:' + g.gap + r'+\d{1,4})?')
    month_first = (
        r'(?<![^\W\d_])' + month + g.gap + r'+\d{1,2}'
        + '(?:,' + g.gap + r'+\d{1,4})?')
    return re.compile(day_first + '|' + month_first, re.IGNORECASE)


@lru_cache(maxsize=None)
def _orphans_re(space: str, thin_space: str, tokens: int) -> re.Pattern:
    """
    The last `tokens` words of the content, each preceded by a gap.
    Closing tags and punctuation may follow; trailing whitespace is left out of the match.
    Text after a tag cannot start inside the last word, so a long word is scanned once.
    """
    g = gap_model(space, thin_space)
    return re.compile(
        '(?:' + g.gap + '+' + g.grouped_token + '){1,%d}' % tokens
        + '(?:' + TAG + g.token_char + '*)*'
        + '(?=' + WHITESPACE + r'*\Z)')


@lru_cache(maxsize=None)
def _short_words_re(space: str, thin_space: str, length: int) -> re.Pattern:
    g = gap_model(space, thin_space)
    return re.compile(
        g.boundary
        + g.opening_quote + '?'
        + '(?:' + SHORT_WORD_CHAR + '{1,%d}' % length + g.gap + '+' + OUTSIDE_TAG + ')+'
        + '(?=' + g.token_char + ')',
        re.IGNORECASE)


# --- Rules ---

def bind_emphasis(contents: str, config: RagConfig) -> str:
    """Keeps short emphasized phrases (2-3 words in `em`, `strong`, `b`, `i`) on one line."""
    regex = _emphasis_re(config.space, config.thin_space)
    return regex.sub(lambda m: bind_after_lead(m, config.space), contents)


def bind_quotes(contents: str, config: RagConfig) -> str:
    """Keeps short quotations (2-3 words between a pair of quote marks) on one line."""
    regex = _quotes_re(config.space, config.thin_space)
    return regex.sub(lambda m: bind_after_lead(m, config.space), contents)


def bind_words(contents: str, config: RagConfig) -> str:
    """Glues prepositions, articles and conjunctions to the word that follows them."""
    words = LexicalTables.words()
    if not words:
        return contents
    regex = _words_re(config.space, config.thin_space, words)
    return regex.sub(lambda m: bind_after_lead(m, config.space), contents)


def bind_symbols(contents: str, config: RagConfig) -> str:
    """Never leaves a spaced operator or dash alone at a line edge."""
    regex = _symbols_re(config.space, config.thin_space)
    return regex.sub(lambda m: bind(m.group(0), config.space), contents)


def bind_units(contents: str, config: RagConfig) -> str:
    """Keeps a number with its unit, e.g. '3 km'."""
    units = LexicalTables.units()
    if not units:
        return contents
    regex = _units_re(config.space, config.thin_space, units)
    return regex.sub(lambda m: bind(m.group(0), config.space), contents)


def bind_numbers(contents: str, config: RagConfig) -> str:
    """Groups thousands with the thin space, e.g. '1 234 567'."""
    regex = _numbers_re(config.space, config.thin_space)
    return regex.sub(lambda m: bind(m.group(0), config.thin_space), contents)


def bind_months(contents: str, config: RagConfig) -> str:
    months = LexicalTables.months()
    if not months:
        return contents
    regex = _months_re(config.space, config.thin_space, months + LexicalTables.short_months())
    return regex.sub(lambda m: bind(m.group(0), config.space), contents)


def bind_orphans(contents: str, config: RagConfig) -> str:
    """
    Binds the last `orphans - 1` gaps of the block, so its final line
    always holds at least `orphans` words.
    """
    if config.orphans <= 1:
        return contents
    regex = _orphans_re(config.space, config.thin_space, config.orphans - 1)
    return regex.sub(lambda m: bind(m.group(0), config.space), contents, count=1)


def bind_short_words(contents: str, config: RagConfig) -> str:
    """Glues runs of words up to `short_words` characters long to the next word."""
    if config.short_words <= 0:
        return contents
    regex = _short_words_re(config.space, config.thin_space, config.short_words)
    return regex.sub(lambda m: bind_after_lead(m, config.space), contents)


class RuleSpec(NamedTuple):
    name: str
    rule: Rule
    enabled: Callable[[RagConfig], bool]


# Order matters
RULES: tuple[RuleSpec, ...] = (
    RuleSpec('emphasis', bind_emphasis, attrgetter('emphasis')),
    RuleSpec('quotes', bind_quotes, attrgetter('quotes')),
    RuleSpec('words', bind_words, attrgetter('words')),
    RuleSpec('symbols', bind_symbols, attrgetter('symbols')),
    RuleSpec('units', bind_units, attrgetter('units')),
    RuleSpec('numbers', bind_numbers, attrgetter('numbers')),
    RuleSpec('months', bind_months, attrgetter('months')),
    RuleSpec('orphans', bind_orphans, lambda config: config.orphans > 1),
    RuleSpec('short_words', bind_short_words, lambda config: config.short_words > 0),
)


def active_rules(config: RagConfig) -> list[Rule]:
    """The rules the config enables, in pipeline order."""
    return [spec.rule for spec in RULES if spec.enabled(config)]


def apply_rules(contents: str, config: RagConfig) -> str:
    for rule in active_rules(config):
        contents = rule(contents, config)
    return contents
