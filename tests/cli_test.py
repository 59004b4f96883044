import html
import json
from pathlib import Path

import pytest

from raggedast.cli import build_parser, collect_files, make_config, run_cli


def _config(*argv):
    parser = build_parser()
    return make_config(parser, parser.parse_args(['in.html', *argv]))


def test_flags_build_config():
    config = _config('--no-words', '--short-words', '3', '--limit', '4', '--selector', 'p, li',
                     '-o', 'out', '--thin-space', '^')
    assert config.words is False
    assert config.symbols is True
    assert config.short_words == 3
    assert config.limit == 4
    assert config.selector == 'p, li'
    assert config.output_path == Path('out')
    assert config.thin_space == '^'
    assert config.orphans == 2


def test_flags_override_options_file(tmp_path):
    options = tmp_path / 'options.json'
    options.write_text(json.dumps({'shortWords': 3, 'thinSpace': '^', 'months': False}), encoding='utf-8')

    config = _config('--config', str(options), '--short-words', '1', '--months')

    assert config.short_words == 1
    assert config.thin_space == '^'
    assert config.months is True


@pytest.mark.parametrize('argv', [
    ['--space', 'a b'],
    ['--space', '~', '--thin-space', '~'],
    ['--selector', 'p['],
    ['--short-words', '-1'],
    ['--threads', 'many'],
])
def test_invalid_options_exit_with_usage_error(argv):
    with pytest.raises(SystemExit) as excinfo:
        _config(*argv)
    assert excinfo.value.code == 2


def test_collect_files(tmp_path, caplog):
    (tmp_path / 'book' / 'part').mkdir(parents=True)
    for name in ('book/a.html', 'book/part/b.XHTML', 'book/notes.txt', 'c.htm'):
        (tmp_path / name).write_text('<p>x</p>', encoding='utf-8')

    files = collect_files([tmp_path / 'book', tmp_path / 'c.htm', tmp_path / 'nope.html'])

    assert files == [tmp_path / 'book/a.html', tmp_path / 'book/part/b.XHTML', tmp_path / 'c.htm']
    assert 'Input path does not exist' in caplog.text


def test_run_cli(tmp_path, capsys):
    source = tmp_path / 'chapter.html'
    source.write_text('<p>Walk into the house today.</p>', encoding='utf-8')
    out_dir = tmp_path / 'out'

    code = run_cli([str(source), '-o', str(out_dir), '--log-dir', str(tmp_path / 'logs')])

    assert code == 0
    assert 'Walk into\xa0the\xa0house\xa0today.' in html.unescape((out_dir / 'chapter.html').read_text(encoding='utf-8'))
    assert '✅ Done: chapter.html (3 hard spaces)' in capsys.readouterr().out
    assert list((tmp_path / 'logs').glob('raggedast_*.log'))


def test_run_cli_reports_failures(tmp_path, capsys):
    good = tmp_path / 'good.html'
    good.write_text('<p>Go to it</p>', encoding='utf-8')
    bad = tmp_path / 'bad.html'
    bad.write_bytes(b'\xff')

    code = run_cli([str(good), str(bad), '--log-dir', str(tmp_path / 'logs')])

    assert code == 1
    out = capsys.readouterr().out
    assert '❌ Error: bad.html' in out
    assert '1 done, 1 failed' in out


def test_run_cli_without_html_files(tmp_path):
    assert run_cli([str(tmp_path), '--log-dir', str(tmp_path / 'logs')]) == 0


def test_output_file_needs_single_input(tmp_path):
    for name in ('a.html', 'b.html'):
        (tmp_path / name).write_text('<p>x</p>', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        run_cli([str(tmp_path / 'a.html'), str(tmp_path / 'b.html'), '-o', str(tmp_path / 'out.html'),
                 '--log-dir', str(tmp_path / 'logs')])
    assert excinfo.value.code == 2
