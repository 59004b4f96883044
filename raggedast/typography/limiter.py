"""
Caps how many tokens may be chained together by hard spaces.

Too many rules firing next to each other can lock a whole sentence into one
unbreakable run. Every streak with `limit` or more hard spaces is split
recursively at its middle hard space until each part has fewer than `limit`.
"""
import re
from functools import lru_cache

from ..utils.config import RagConfig
from .gaps import gap_model, marker_pattern, TAG, WHITESPACE


Span = tuple[int, int]


@lru_cache(maxsize=None)
def _streak_re(space: str, thin_space: str, limit: int) -> re.Pattern:
    """Words (tags included) each followed by a hard space, at least `limit` times in a row."""
    g = gap_model(space, thin_space)
    return re.compile(
        '(?:(?:' + TAG + '|(?!' + WHITESPACE + ').)+?' + g.space + '){%d,}' % limit,
        re.IGNORECASE)


def split_points(markers: list[Span], limit: int) -> list[Span]:
    """
    Picks the markers to relax: the one at ordinal round(count / 2) (halves round up),
    then recursively the markers of the left and right halves.
    """
    count = len(markers)
    if count < limit:
        return []
    middle = (count + 1) // 2 - 1
    return (split_points(markers[:middle], limit)
            + [markers[middle]]
            + split_points(markers[middle + 1:], limit))


def reduce_streak(streak: str, marker: str, limit: int) -> str:
    """Replaces the chosen hard spaces of one streak with plain spaces."""
    markers = [m.span() for m in marker_pattern(marker).finditer(streak)]
    pieces = []
    position = 0
    for start, end in split_points(markers, limit):
        pieces.append(streak[position:start])
        pieces.append(' ')
        position = end
    pieces.append(streak[position:])
    return ''.join(pieces)


def limit_streaks(contents: str, config: RagConfig) -> str:
    """Applies the run-length limit to one block. No-op when `limit <= 0`."""
    limit = config.limit
    if limit <= 0:
        return contents

    # Nothing can break the limit if there aren't enough hard spaces in total
    total = len(marker_pattern(config.space).findall(contents))
    if total < limit:
        return contents

    regex = _streak_re(config.space, config.thin_space, limit)
    return regex.sub(lambda m: reduce_streak(m.group(0), config.space, limit), contents)
