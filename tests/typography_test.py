import html

from lxml import etree

from raggedast.typography.typography import improve_rag, rag_contents
from raggedast.utils import html_utils as hu
from raggedast.utils.config import RagConfig

from conftest import H, only


def test_all_rules_on_a_short_sentence():
    assert rag_contents('This is a short test.', RagConfig()) == f'This{H}is{H}a{H}short{H}test.'


def test_words_rule_alone():
    # 'This' is a function word, matched case-insensitively
    assert rag_contents('This is a short test.', only('words')) == f'This{H}is a{H}short test.'


def test_short_words_rule_alone():
    config = only('short_words', short_words=2)
    assert rag_contents('This is a short test.', config) == f'This is{H}a{H}short test.'


def test_limit_runs_after_the_rules():
    config = only('short_words', short_words=2, limit=3)
    assert rag_contents('a b c d e f', config) == f'a{H}b{H}c d{H}e{H}f'


def test_improve_rag_rewrites_selected_blocks():
    doc = hu.parse_document('<p>Go to it now</p><div><p>Nothing</p></div><p> </p>')
    assert improve_rag(doc.root, RagConfig()) == 1
    assert doc.root[0].text == 'Go\xa0to\xa0it\xa0now'


def test_improve_rag_skips_nested_blocks():
    doc = hu.parse_document('<div class="note"><p>Go to it now</p></div>')
    config = RagConfig(selector='div.note, p')
    assert improve_rag(doc.root, config) == 1
    assert doc.root[0][0].text == 'Go\xa0to\xa0it\xa0now'


def test_improve_rag_respects_selector():
    doc = hu.parse_document('<p>Go to it</p><h2>Go to it</h2>')
    assert improve_rag(doc.root, RagConfig(selector='h2')) == 1
    assert doc.root[0].text == 'Go to it'
    assert doc.root[1].text == 'Go\xa0to\xa0it'


def test_improve_rag_twice_is_a_no_op():
    doc = hu.parse_document('<p>Walk into the house today.</p>')
    assert improve_rag(doc.root, RagConfig()) == 1
    once = hu.serialize_document(doc)
    assert improve_rag(doc.root, RagConfig()) == 0
    assert hu.serialize_document(doc) == once


def test_improve_rag_keeps_markup():
    doc = hu.parse_document('<p>See <a href="x.html">the page</a> now</p>')
    improve_rag(doc.root, RagConfig())
    assert html.unescape(hu.serialize_document(doc)) == '<p>See <a href="x.html">the\xa0page</a>\xa0now</p>'


def test_trailing_whitespace_stays_breakable():
    assert rag_contents('He went to\n', RagConfig()) == f'He{H}went{H}to\n'


def test_fragment_blocks_are_ragged_one_by_one():
    doc = hu.parse_document('<div>Walk into</div>\n<div>the house now</div>')
    assert improve_rag(doc.root, RagConfig(selector='div')) == 2
    assert html.unescape(hu.serialize_document(doc)) == '<div>Walk\xa0into</div>\n<div>the\xa0house\xa0now</div>'


def test_universal_selector_skips_the_fragment_wrapper():
    doc = hu.parse_document('<p>one two</p><p>three four</p>')
    assert improve_rag(doc.root, RagConfig(selector='*')) == 2
    assert html.unescape(hu.serialize_document(doc)) == '<p>one\xa0two</p><p>three\xa0four</p>'


def test_improve_rag_on_xhtml_keeps_it_well_formed():
    doc = hu.parse_document(
        '<?xml version="1.0" encoding="utf-8"?>\n<!DOCTYPE html>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">'
        '<head><title>t</title></head>'
        '<body><p epub:type="x">Line one<br/>go to it&nbsp;now</p><img src="a.png" alt=""/></body></html>')
    assert doc.is_xml
    assert improve_rag(doc.root, RagConfig()) == 1

    output = hu.serialize_document(doc)
    assert output.startswith('<?xml version="1.0" encoding="utf-8"?>\n<!DOCTYPE html>')
    assert '<img src="a.png" alt=""/>' in output

    tree = etree.fromstring(output.encode('utf-8'))
    p = tree.find('.//{http://www.w3.org/1999/xhtml}p')
    assert p.get('{http://www.idpf.org/2007/ops}type') == 'x'
    assert p[0].tag == '{http://www.w3.org/1999/xhtml}br'
    assert ''.join(p.itertext()) == 'Line onego\xa0to\xa0it\xa0now'
