# src/head_auditor/classifier.py
from enum import Enum
from typing import Callable, List, Tuple

from .dom.core import ElementNode, get_attribute, has_attribute, text_content


class Category(Enum):
    """
    Loading-priority categories for head children, highest priority first.
    The value is the ordering weight (higher = should come earlier).
    """
    META = 11  # Pragma directives (meta charset, meta viewport, base, meta http-equiv)
    TITLE = 10
    PRECONNECT = 9
    ASYNC_SCRIPT = 8
    IMPORT_STYLES = 7  # @import in <style>
    SYNC_SCRIPT = 6
    SYNC_STYLES = 5
    PRELOAD = 4
    DEFER_SCRIPT = 3
    PREFETCH_PRERENDER = 2
    OTHER = 1

    @property
    def weight(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        """Display name used in diagnostic messages."""
        return self.name


# Meta http-equiv keywords that have high priority
META_HTTP_EQUIV_KEYWORDS = frozenset([
    'accept-ch',
    'content-security-policy',
    'content-type',
    'default-style',
    'delegate-ch',
    'origin-trial',
    'x-dns-prefetch-control',
])


def _lower(value) -> str:
    return value.lower() if value else ""


def _rel(node: ElementNode) -> str:
    return _lower(get_attribute(node, 'rel'))


def _type(node: ElementNode) -> str:
    return _lower(get_attribute(node, 'type'))


# --- PREDICATES ---

def is_meta(node: ElementNode) -> bool:
    if node.name == 'base':
        return True
    if node.name != 'meta':
        return False
    if has_attribute(node, 'charset'):
        return True
    if _lower(get_attribute(node, 'name')) == 'viewport':
        return True
    return _lower(get_attribute(node, 'http-equiv')) in META_HTTP_EQUIV_KEYWORDS


def is_title(node: ElementNode) -> bool:
    return node.name == 'title'


def is_preconnect(node: ElementNode) -> bool:
    return node.name == 'link' and _rel(node) == 'preconnect'


def is_async_script(node: ElementNode) -> bool:
    return node.name == 'script' and has_attribute(node, 'src') and has_attribute(node, 'async')


def is_import_styles(node: ElementNode) -> bool:
    return node.name == 'style' and '@import' in text_content(node)


def is_sync_script(node: ElementNode) -> bool:
    if node.name != 'script':
        return False

    # Inline scripts are always parser-blocking
    if not has_attribute(node, 'src'):
        return True

    script_type = _type(node)
    return (
        not has_attribute(node, 'defer')
        and not has_attribute(node, 'async')
        and 'module' not in script_type
        and 'json' not in script_type
    )


def is_sync_styles(node: ElementNode) -> bool:
    if node.name == 'style':
        return True
    return node.name == 'link' and _rel(node) == 'stylesheet'


def is_preload(node: ElementNode) -> bool:
    return node.name == 'link' and _rel(node) in ('preload', 'modulepreload')


def is_defer_script(node: ElementNode) -> bool:
    if node.name != 'script' or not has_attribute(node, 'src'):
        return False
    if has_attribute(node, 'defer'):
        return True
    return _type(node) == 'module' and not has_attribute(node, 'async')


def is_prefetch_prerender(node: ElementNode) -> bool:
    return node.name == 'link' and _rel(node) in ('prefetch', 'dns-prefetch', 'prerender')


# Evaluated top to bottom; the first matching predicate decides the category.
CLASSIFICATION_TABLE: List[Tuple[Callable[[ElementNode], bool], Category]] = [
    (is_meta, Category.META),
    (is_title, Category.TITLE),
    (is_preconnect, Category.PRECONNECT),
    (is_async_script, Category.ASYNC_SCRIPT),
    (is_import_styles, Category.IMPORT_STYLES),
    (is_sync_script, Category.SYNC_SCRIPT),
    (is_sync_styles, Category.SYNC_STYLES),
    (is_preload, Category.PRELOAD),
    (is_defer_script, Category.DEFER_SCRIPT),
    (is_prefetch_prerender, Category.PREFETCH_PRERENDER),
]


def classify(node: ElementNode) -> Category:
    """
    Assigns a head child its loading-priority category.

    Args:
        node (ElementNode): An element child of a head container.

    Returns:
        Category: The category of the first matching predicate, or OTHER.
    """
    for predicate, category in CLASSIFICATION_TABLE:
        if predicate(node):
            return category
    return Category.OTHER


def get_weight(node: ElementNode) -> int:
    return classify(node).weight


def get_category_name(node: ElementNode) -> str:
    return classify(node).label


def optimal_order_description() -> List[str]:
    """Human-readable listing of the optimal head order, e.g. for help output."""
    return [
        f"{position}. {category.label} - weight {category.weight}"
        for position, category in enumerate(Category, start=1)
    ]
