from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding
from ..validators import is_valid_head_element


@audit_spec(codes=["invalidElement"])
def check_head_elements(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """Rule: only metadata content (base, link, meta, noscript, script, style, template, title) in <head>."""
    res = []
    for _, node in scope.each(lambda child: not is_valid_head_element(child.tag)):
        data = {"tagName": node.name}
        res.append(DEFINITION.report(
            "invalidElement", node, data=data,
            patches=[DEFINITION.remove_element("removeElement", node, include_line=True, data=data)],
        ))
    return res


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="no-invalid-head-elements",
    check=check_head_elements,
    category="Best Practices",
    description="Disallow invalid elements in the HTML head",
    messages={
        "invalidElement": "{tagName} elements are not allowed in the <head>",
        "removeElement": "Remove this {tagName} element from <head>",
    },
)
