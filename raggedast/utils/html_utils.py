import html
import re
from functools import lru_cache
from html.entities import name2codepoint

import lxml.html
from lxml import etree
from lxml.cssselect import CSSSelector, LxmlTranslator

from .structures import ParsedDocument


XML_DECLARATION_RE = re.compile(r'^\s*<\?xml[^>]*\?>\s*', re.IGNORECASE)
FULL_DOCUMENT_RE = re.compile(r'<!doctype|<html[\s>]', re.IGNORECASE)
XHTML_NAMESPACE_RE = re.compile(r'xmlns\s*=\s*["\']http://www\.w3\.org/1999/xhtml["\']')
ENTITY_RE = re.compile(r'&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[a-zA-Z][a-zA-Z0-9]*);')
NAMED_ENTITY_RE = re.compile(r'&([a-zA-Z][a-zA-Z0-9]*);')
XML_ENTITIES = {'amp', 'lt', 'gt', 'quot', 'apos'}

# Keep documents without a doctype doctype-less
_PARSER = lxml.html.HTMLParser(default_doctype=False)
# XHTML is written back as XML, so void elements stay self-closed
_XML_PARSER = etree.XMLParser(resolve_entities=False, remove_blank_text=False)


# --- Parsing / serialization ---

def parse_document(source: str, xml: bool = False) -> ParsedDocument:
    """
    Parses a whole document, or a fragment wrapped in a `div`.
    A leading XML declaration is kept aside, lxml refuses it in unicode strings.

    Sources with an XML declaration or the XHTML namespace, and any source
    with `xml=True`, are parsed as XML; everything else as HTML.
    """
    declaration = ''
    if match := XML_DECLARATION_RE.match(source):
        declaration = match.group(0)
        source = source[match.end():]
    is_xml = xml or bool(declaration) or bool(XHTML_NAMESPACE_RE.search(source))
    is_fragment = not FULL_DOCUMENT_RE.search(source)

    if is_xml:
        source = xml_entities(source)
        if is_fragment:
            source = f'<div>{source}</div>'
        root = etree.fromstring(source, _XML_PARSER)
    elif is_fragment:
        root = lxml.html.fragment_fromstring(source, create_parent='div', parser=_PARSER)
    else:
        root = lxml.html.document_fromstring(source, parser=_PARSER)

    return ParsedDocument(root, declaration, is_fragment, is_xml)


def serialize_document(document: ParsedDocument) -> str:
    """Writes a parsed document back, with its doctype and XML declaration."""
    if document.is_fragment:
        output = inner_html(document.root)
    else:
        method = 'xml' if document.is_xml else 'html'
        output = etree.tostring(document.root.getroottree(), method=method, encoding='unicode')
    return document.declaration + output


def xml_entities(source: str) -> str:
    """Rewrites named HTML entities that XML does not define (`&nbsp;`) as character references."""
    def to_reference(match: re.Match) -> str:
        name = match.group(1)
        if name in XML_ENTITIES or name not in name2codepoint:
            return match.group(0)
        return f'&#{name2codepoint[name]};'

    return NAMED_ENTITY_RE.sub(to_reference, source)


# --- Block selection ---

class LocalNameTranslator(LxmlTranslator):
    """Matches type selectors by local name, so `p` finds XHTML's namespaced `<p>` too."""

    def xpath_element(self, selector):
        xpath = super().xpath_element(selector)
        if selector.element and not selector.namespace and xpath.element != '*':
            xpath.add_condition(f'local-name() = {self.xpath_literal(xpath.element)}')
            xpath.element = '*'
        return xpath


@lru_cache(maxsize=None)
def _xml_selector(selector: str) -> CSSSelector:
    return CSSSelector(selector, translator=LocalNameTranslator())


def select_blocks(root: etree._Element, selector: str) -> list[etree._Element]:
    """Elements below `root` matching the CSS selector, in document order. `root` itself is never selected."""
    if isinstance(root, lxml.html.HtmlElement):
        blocks = root.cssselect(selector)
    else:
        blocks = _xml_selector(selector)(root)
    return [block for block in blocks if block is not root]


# --- Inner markup helpers ---

def get_tag_name(element: etree._Element) -> str:
    """Returns tag name without a namespace prefix."""
    return etree.QName(element.tag).localname


def inner_html(element: etree._Element) -> str:
    """Returns the markup between the element's opening and closing tags."""
    if not isinstance(element, lxml.html.HtmlElement):
        return _inner_xml(element)

    parts = [html.escape(element.text, quote=False)] if element.text else []
    parts.extend(
        lxml.html.tostring(child, method='html', encoding='unicode', with_tail=True)
        for child in element
    )
    return ''.join(parts)


def _inner_xml(element: etree._Element) -> str:
    # Serialized in one piece, so the children don't repeat the namespace declarations
    if not element.text and not len(element):
        return ''
    markup = etree.tostring(element, method='xml', encoding='unicode', with_tail=False)
    return markup[markup.index('>') + 1:markup.rindex('</')]


def replace_inner_html(element: etree._Element, markup: str):
    """Replaces the element's content with `markup`. The element's own tail is untouched."""
    for child in list(element):
        element.remove(child)
    element.text = None
    if not markup:
        return

    if isinstance(element, lxml.html.HtmlElement):
        wrapper = lxml.html.fragment_fromstring(markup, create_parent='div', parser=_PARSER)
    else:
        # The element's namespaces are in scope for the markup
        declarations = ''.join(
            f' xmlns="{uri}"' if prefix is None else f' xmlns:{prefix}="{uri}"'
            for prefix, uri in element.nsmap.items()
        )
        wrapper = etree.fromstring(f'<div{declarations}>{xml_entities(markup)}</div>', _XML_PARSER)

    element.text = wrapper.text
    # Appending moves the children out of the wrapper
    for child in list(wrapper):
        element.append(child)


def count_markers(output: str, marker: str) -> int:
    """Counts a marker in serialized output, whatever entity form the serializer picked."""
    return html.unescape(output).count(html.unescape(marker))


def encode_markers(contents: str, *markers: str) -> str:
    """
    Turns decoded markers back into their markup form.
    The parser decodes `&#160;` into U+00A0 and the serializer may write it back as `&nbsp;`,
    which the rules would otherwise read as letters.
    """
    decoded = {html.unescape(marker): marker for marker in markers}
    decoded = {char: marker for char, marker in decoded.items() if char != marker}
    if not decoded:
        return contents

    pattern = re.compile(ENTITY_RE.pattern + '|' + '|'.join(map(re.escape, decoded)))

    def encode(match: re.Match) -> str:
        text = match.group(0)
        return decoded.get(html.unescape(text), text)

    return pattern.sub(encode, contents)
