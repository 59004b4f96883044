import logging

from raggedast.lexicon import lexical_tables
from raggedast.lexicon.lexical_tables import LexicalTables, Tables
from raggedast.resources.loader import LEXICON_PACKAGE, load_json
from raggedast.typography.rules import bind_months, bind_words

from conftest import H, only


def test_packaged_tables():
    assert 'the' in LexicalTables.words()
    assert 'December' in LexicalTables.months()
    assert 'Dec' in LexicalTables.short_months()
    assert 'km' in LexicalTables.units()


def test_injected_tables_drive_the_rules(monkeypatch):
    monkeypatch.setattr(LexicalTables, '_TABLES', None)
    LexicalTables.inject_tables(Tables(words=('foo',), months=(), units=()))

    assert LexicalTables.words() == ('foo',)
    assert bind_words('go foo bar', only('words')) == f'go foo{H}bar'
    # Empty tables switch their rules off
    assert bind_months('5 May', only('months')) == '5 May'


def test_tables_load_lazily(monkeypatch):
    monkeypatch.setattr(LexicalTables, '_TABLES', None)
    assert LexicalTables.get_tables().words


def test_empty_tables_are_reported(monkeypatch, caplog):
    monkeypatch.setattr(LexicalTables, '_TABLES', None)
    monkeypatch.setattr(lexical_tables, 'load_lexicon_json', lambda filename: {'words': ['a']})

    with caplog.at_level(logging.WARNING, logger='raggedast'):
        LexicalTables.load_tables()

    assert LexicalTables.words() == ('a',)
    assert "'months' is empty" in caplog.text
    assert "'units' is empty" in caplog.text


def test_missing_resource_loads_empty(caplog):
    assert load_json(LEXICON_PACKAGE, 'missing.json') == {}
    assert 'missing.json' in caplog.text
