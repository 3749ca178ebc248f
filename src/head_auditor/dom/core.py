# src/head_auditor/dom/core.py
from typing import Dict, Any, List, Callable, Optional, Set
from pydantic import BaseModel, ConfigDict, Field

from ..model import Finding, Patch, SourceSpan


def audit_spec(codes: List[str]):
    """
    Decorator to declare which diagnostic codes a specific rule function returns.
    Facilitates auto-discovery by the RuleRegistry.
    """
    def decorator(func):
        func.defined_codes = codes
        return func
    return decorator


class ElementNode(BaseModel):
    """
    Read-only data model representing a markup element in the simplified tree.

    Attribute values are text, or None for presence-only attributes. Only
    element children are kept; text and comment nodes never appear in `children`.
    """
    model_config = ConfigDict(frozen=True)

    tag: str
    attrs: Dict[str, Any] = Field(default_factory=dict)
    text: str = ""
    children: List['ElementNode'] = Field(default_factory=list)

    # Source positions, present when the node was built from markup text
    span: Optional[SourceSpan] = None
    attr_spans: Dict[str, SourceSpan] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        """Lower-cased tag name."""
        return self.tag.lower()


# --- ATTRIBUTE ACCESSOR ---

def _find_key(node: ElementNode, name: str) -> Optional[str]:
    if not node.attrs:
        return None
    wanted = name.lower()
    for key in node.attrs:
        if isinstance(key, str) and key.lower() == wanted:
            return key
    return None


def get_attribute(node: ElementNode, name: str) -> Optional[str]:
    """
    Case-insensitive attribute lookup.

    Returns None when the attribute is absent, when the node has no attributes,
    or when the stored value is not text.
    """
    key = _find_key(node, name)
    if key is None:
        return None
    value = node.attrs[key]
    return value if isinstance(value, str) else None


def has_attribute(node: ElementNode, name: str) -> bool:
    """Presence test for boolean attributes such as async, defer or charset."""
    return _find_key(node, name) is not None


def get_attribute_span(node: ElementNode, name: str) -> Optional[SourceSpan]:
    """Source range of an attribute's value text, if the builder recorded one."""
    return node.attr_spans.get(name.lower())


def text_content(node: ElementNode) -> str:
    return node.text or ""


# --- RULE DEFINITION ---

class RuleDefinition:
    """
    Configuration object binding a rule name to its check function and messages.

    `check` receives a HeadScope and the AuditOptions and returns Findings,
    usually built through `report()`.
    """

    def __init__(
            self,
            name: str,
            check: Callable[..., List[Finding]],
            messages: Dict[str, str],
            description: str = "",
            category: str = "",
            kind: str = "problem",
            possible_codes: Optional[List[str]] = None
    ):
        self.name = name
        self.check = check
        self.messages = messages
        self.description = description
        self.category = category
        self.kind = kind

        # --- Auto-Discovery of Diagnostic Codes ---
        final_codes: Set[str] = set(possible_codes or [])
        if hasattr(check, 'defined_codes'):
            final_codes.update(check.defined_codes)

        self.codes = sorted(list(final_codes))

    def format_message(self, message_id: str, data: Optional[Dict[str, Any]] = None) -> str:
        template = self.messages.get(message_id, message_id)
        try:
            return template.format(**(data or {}))
        except (KeyError, IndexError):
            return template

    def report(
            self,
            code: str,
            node: ElementNode,
            data: Optional[Dict[str, Any]] = None,
            patches: Optional[List[Patch]] = None,
            message: Optional[str] = None
    ) -> Finding:
        """Builds a Finding for `node`, formatting the message template for `code`."""
        data = dict(data or {})
        return Finding(
            rule=self.name,
            code=code,
            message=message if message is not None else self.format_message(code, data),
            data=data,
            tag=node.name,
            span=node.span,
            patches=patches or [],
        )

    def replace_value(
            self,
            message_id: str,
            node: ElementNode,
            attribute: str,
            replacement: str,
            data: Optional[Dict[str, Any]] = None
    ) -> Patch:
        """Suggests replacing the value text of `attribute` on `node`."""
        return Patch(
            message_id=message_id,
            message=self.format_message(message_id, data),
            action="replace_value",
            attribute=attribute.lower(),
            replacement=replacement,
            span=get_attribute_span(node, attribute),
        )

    def remove_element(
            self,
            message_id: str,
            node: ElementNode,
            include_line: bool = False,
            automatic: bool = False,
            data: Optional[Dict[str, Any]] = None
    ) -> Patch:
        """Suggests removing `node` entirely, optionally with its enclosing line."""
        return Patch(
            message_id=message_id,
            message=self.format_message(message_id, data),
            action="remove_element",
            include_line=include_line,
            automatic=automatic,
            span=node.span,
        )
