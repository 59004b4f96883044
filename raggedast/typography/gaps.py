"""
Shared regex building blocks: token boundaries, gaps between tokens, quote pairs,
and the whitespace binder every rule uses to glue tokens together.

A gap is any mix of inline tags, breakable whitespace and hard-space markers.
The thin-space marker is deliberately neither a gap nor a token character, so once
digits are grouped with it no rule can see through or into the group.
"""
import re
from functools import lru_cache
from typing import NamedTuple


# No-break characters that must never be treated as breakable whitespace
NO_BREAK_CHARS = '\\xa0\\u2007\\u202f'
WHITESPACE = r'[^\S' + NO_BREAK_CHARS + r']'
TAG = r'<[^>]+>'
# Not followed by the rest of a tag, i.e. not inside `<...>`
OUTSIDE_TAG = r'(?![^<>]*>)'

# (opening, closing)
QUOTE_PAIRS = (
    ('"', '"'),
    ("'", "'"),
    ('“', '”'),
    ('‘', '’'),
    ('„', '“'),
    ('„', '”'),
    ('‚', '‘'),
    ('‚', '’'),
    ('‟', '”'),
    ('‛', '’'),
    ('«', '»'),
    ('»', '«'),
    ('‹', '›'),
    ('›', '‹'),
    ('`', "'"),
    ('´', '´'),
)
OPENING_QUOTES = ''.join(dict.fromkeys(opening for opening, _ in QUOTE_PAIRS))

_WHITESPACE_RUN_RE = re.compile(WHITESPACE + '+' + OUTSIDE_TAG)


class GapModel(NamedTuple):
    """Regex fragments for one pair of markers."""
    space: str
    thin_space: str
    gap: str
    boundary: str
    token_char: str
    token: str
    grouped_token: str
    opening_quote: str

    def token_without(self, chars: str) -> str:
        """A token that must not contain any of `chars`."""
        return '(?:(?!' + self.space + '|' + self.thin_space + '|' + WHITESPACE + ')[^<' + re.escape(chars) + '])+'


@lru_cache(maxsize=None)
def gap_model(space: str, thin_space: str) -> GapModel:
    """Builds the shared fragments for the given hard-space and thin-space markers."""
    sp = re.escape(space)
    th = re.escape(thin_space)
    token_char = '(?:(?!' + sp + '|' + th + '|' + WHITESPACE + ')[^<])'
    token = token_char + '+'
    return GapModel(
        space=sp,
        thin_space=th,
        gap='(?:' + TAG + '|' + WHITESPACE + '|' + sp + ')',
        # Consumed, so it lives in a group rules can hand back untouched
        boundary=r'(?P<lead>' + WHITESPACE + r'|^|\(|\[|>|' + sp + ')',
        token_char=token_char,
        token=token,
        grouped_token=token + '(?:' + th + token + ')*',
        opening_quote='[' + re.escape(OPENING_QUOTES) + ']',
    )


def bind(text: str, marker: str) -> str:
    """Replaces every breakable whitespace run outside of tags with `marker`."""
    return _WHITESPACE_RUN_RE.sub(lambda _: marker, text)


def bind_after_lead(match: re.Match, marker: str) -> str:
    """Binds a match, keeping the boundary that introduced it as is."""
    lead = match.group('lead') or ''
    return lead + bind(match.group(0)[len(lead):], marker)


@lru_cache(maxsize=None)
def marker_pattern(marker: str) -> re.Pattern:
    return re.compile(re.escape(marker), re.IGNORECASE)
