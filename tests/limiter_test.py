from raggedast.typography.limiter import limit_streaks, reduce_streak, split_points
from raggedast.utils.config import RagConfig

from conftest import H, T


def test_split_points_pick_middle_then_halves():
    assert split_points(list(range(7)), 3) == [1, 3, 5]
    assert split_points(list(range(5)), 3) == [2]
    assert split_points(list(range(2)), 3) == []


def test_split_points_round_half_up():
    # Four markers: round(4 / 2) = 2, so the second one, then the first of the right half
    assert split_points(list(range(4)), 2) == [1, 2]


def test_six_tokens_split_in_the_middle():
    text = H.join('abcdef')
    assert limit_streaks(text, RagConfig(limit=3)) == f'a{H}b{H}c d{H}e{H}f'


def test_short_streaks_survive():
    text = f'a{H}b{H}c x{H}y'
    assert limit_streaks(text, RagConfig(limit=2)) == f'a b{H}c x{H}y'


def test_disabled_or_below_limit():
    text = H.join('abcdef')
    assert limit_streaks(text, RagConfig(limit=0)) == text
    assert limit_streaks(text, RagConfig(limit=-1)) == text
    assert limit_streaks(text, RagConfig(limit=6)) == text


def test_thin_spaces_are_left_alone():
    text = f'a{H}1{T}234{H}b{H}c'
    assert limit_streaks(text, RagConfig(limit=3)) == f'a{H}1{T}234 b{H}c'


def test_streak_through_tags():
    text = f'<b>a</b>{H}b{H}c'
    assert limit_streaks(text, RagConfig(limit=2)) == f'<b>a</b> b{H}c'


def test_reduce_streak_matches_marker_case_insensitively():
    assert reduce_streak('a&#xa0;b&#XA0;', '&#xA0;', 2) == 'a b&#XA0;'
