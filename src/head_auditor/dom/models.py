# src/head_auditor/dom/models.py
from functools import reduce
from typing import Callable, Iterator, List, Tuple
from pydantic import BaseModel, ConfigDict, Field

from .core import ElementNode
from ..validators import is_content_type, is_meta_viewport


class HeadSummary(BaseModel):
    """
    Immutable per-head counters, folded once from one head's children.

    Each tuple holds the child indexes of the matching elements in document
    order, so "first seen" is element 0 and the count is the length.
    """
    model_config = ConfigDict(frozen=True)

    title_indexes: Tuple[int, ...] = ()
    base_indexes: Tuple[int, ...] = ()
    charset_indexes: Tuple[int, ...] = ()
    viewport_indexes: Tuple[int, ...] = ()


def _fold_child(summary: HeadSummary, item: Tuple[int, ElementNode]) -> HeadSummary:
    index, node = item
    updates = {}
    if node.name == 'title':
        updates['title_indexes'] = summary.title_indexes + (index,)
    if node.name == 'base':
        updates['base_indexes'] = summary.base_indexes + (index,)
    if is_content_type(node):
        updates['charset_indexes'] = summary.charset_indexes + (index,)
    if is_meta_viewport(node):
        updates['viewport_indexes'] = summary.viewport_indexes + (index,)
    return summary.model_copy(update=updates) if updates else summary


def summarize_head(children: List[ElementNode]) -> HeadSummary:
    """Folds one head's children into a fresh HeadSummary."""
    return reduce(_fold_child, enumerate(children), HeadSummary())


class HeadScope(BaseModel):
    """
    One head container under evaluation: the head node, its element children and
    the summary folded from them. Nothing in a scope is shared with other heads.
    """
    model_config = ConfigDict(frozen=True)

    head: ElementNode
    children: List[ElementNode] = Field(default_factory=list)
    summary: HeadSummary = Field(default_factory=HeadSummary)

    @classmethod
    def from_head(cls, head: ElementNode) -> 'HeadScope':
        children = list(head.children)
        return cls(head=head, children=children, summary=summarize_head(children))

    def each(self, predicate: Callable[[ElementNode], bool]) -> Iterator[Tuple[int, ElementNode]]:
        """Yields (index, child) for the children matching `predicate`."""
        for index, child in enumerate(self.children):
            if predicate(child):
                yield index, child


class HTMLDocument(BaseModel):
    """
    Represents a parsed HTML document.

    Holds the source text the spans refer to and every head container found in
    it, nested ones included, each to be evaluated independently.
    """
    source: str = ""
    heads: List[ElementNode] = Field(default_factory=list)
    doc_errors: List[str] = Field(default_factory=list)
