# src/head_auditor/dom/builder.py
import bisect
import logging
import re
from typing import Dict, List, Optional, Tuple
from bs4 import BeautifulSoup, Tag, NavigableString, Comment

from .models import HTMLDocument
from .core import ElementNode
from ..model import SourceSpan

logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset([
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr',
])
RAW_TEXT_ELEMENTS = frozenset(['script', 'style', 'title', 'textarea'])

TAG_OPEN_PATTERN = re.compile(r'<([^\s/>]+)')
GAP_PATTERN = re.compile(r'[\s/]*')
ATTRIBUTE_PATTERN = re.compile(r'''([^\s"'>/=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+)))?''')


class SourceLocator:
    """
    Maps bs4 line/column positions back to character offsets and recovers the
    ranges of elements and attribute values from the raw markup.
    """

    def __init__(self, source: str, prefix: int = 0):
        # `prefix` characters (a BOM) were hidden from the parser, so its
        # first-line columns are short by that much
        self.source = source
        self.prefix = prefix
        self.line_starts = [0] + [m.end() for m in re.finditer('\n', source)]

    def offset(self, line: int, column: int) -> int:
        return self.line_starts[line - 1] + column + (self.prefix if line == 1 else 0)

    def span(self, start: int, end: int) -> SourceSpan:
        line = bisect.bisect_right(self.line_starts, start)
        return SourceSpan(start=start, end=end, line=line, column=start - self.line_starts[line - 1])

    def locate(self, tag: Tag) -> Tuple[Optional[SourceSpan], Dict[str, SourceSpan]]:
        """Returns the element span and the value spans of its attributes."""
        line, column = getattr(tag, 'sourceline', None), getattr(tag, 'sourcepos', None)
        if line is None or column is None or line > len(self.line_starts):
            return None, {}

        start = self.offset(line, column)
        opening = TAG_OPEN_PATTERN.match(self.source, start)
        if not opening or opening.group(1).lower() != tag.name.lower():
            logger.debug(f"No start tag for <{tag.name}> at {line}:{column}")
            return None, {}

        attr_spans, start_tag_end = self._scan_start_tag(opening.end())
        end = self._element_end(tag.name.lower(), start_tag_end)
        return self.span(start, end), attr_spans

    def _scan_start_tag(self, pos: int) -> Tuple[Dict[str, SourceSpan], int]:
        source = self.source
        attr_spans: Dict[str, SourceSpan] = {}

        while pos < len(source):
            pos = GAP_PATTERN.match(source, pos).end()
            if pos >= len(source) or source[pos] == '>':
                break
            attr = ATTRIBUTE_PATTERN.match(source, pos)
            if not attr:
                break

            name = attr.group(1).lower()
            for group in (2, 3, 4):
                if attr.group(group) is not None and name not in attr_spans:
                    attr_spans[name] = self.span(attr.start(group), attr.end(group))
            pos = attr.end()

        close = source.find('>', pos)
        return attr_spans, (close + 1 if close != -1 else len(source))

    def _element_end(self, name: str, start_tag_end: int) -> int:
        if name in VOID_ELEMENTS or self.source[start_tag_end - 2:start_tag_end] == '/>':
            return start_tag_end

        if name in RAW_TEXT_ELEMENTS:
            closing = re.compile(rf'</{re.escape(name)}\s*>', re.IGNORECASE).search(self.source, start_tag_end)
            return closing.end() if closing else start_tag_end

        # Nesting-aware search for the matching end tag
        depth = 1
        pattern = re.compile(rf'<(/?){re.escape(name)}(?=[\s/>])[^>]*>', re.IGNORECASE)
        for match in pattern.finditer(self.source, start_tag_end):
            if match.group(1):
                depth -= 1
                if depth == 0:
                    return match.end()
            elif not match.group(0).endswith('/>'):
                depth += 1
        return start_tag_end


class DOMBuilder:
    """
    Builder responsible for parsing raw HTML into an HTMLDocument whose head
    containers are simplified ElementNode trees with source positions.
    """

    def parse_doc(self, html: str) -> HTMLDocument:
        """
        Parses raw HTML content into an HTMLDocument.

        Args:
            html (str): The raw HTML string.

        Returns:
            HTMLDocument: The source text and every <head> element found in it.
        """
        if not html:
            return HTMLDocument(doc_errors=["missing_head"])

        # The parser never sees a leading BOM, but spans index the text as given
        prefix = 1 if html.startswith('\ufeff') else 0

        # html.parser keeps invalid elements where the author put them,
        # multi_valued_attributes=None keeps rel/class as plain strings and
        # repeated attributes keep their first value, as browsers do.
        soup = BeautifulSoup(
            html[prefix:], 'html.parser',
            multi_valued_attributes=None,
            on_duplicate_attribute='ignore',
        )
        locator = SourceLocator(html, prefix)

        heads = [self._build_tree(tag, locator) for tag in soup.find_all('head')]
        logger.debug(f"Parsed document with {len(heads)} head container(s)")

        return HTMLDocument(
            source=html,
            heads=heads,
            doc_errors=[] if heads else ["missing_head"],
        )

    def _build_tree(self, tag: Tag, locator: SourceLocator) -> ElementNode:
        """
        Recursively builds a simplified element tree from a BeautifulSoup Tag.
        Text and comment children are dropped; direct text is kept on `text`.
        """
        children: List[ElementNode] = [
            self._build_tree(child, locator) for child in tag.children if isinstance(child, Tag)
        ]

        text = "".join(
            str(child) for child in tag.children
            if isinstance(child, NavigableString) and not isinstance(child, Comment)
        )
        span, attr_spans = locator.locate(tag)

        return ElementNode(
            tag=tag.name,
            attrs=dict(tag.attrs),
            text=text,
            children=children,
            span=span,
            attr_spans=attr_spans,
        )
