from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding


@audit_spec(codes=["duplicateBase"])
def check_duplicate_base(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """Rule: at most one <base>. `count` is the running total at the reported element."""
    res = []
    for count, index in enumerate(scope.summary.base_indexes, start=1):
        if count == 1:
            continue
        node = scope.children[index]
        res.append(DEFINITION.report(
            "duplicateBase", node, data={"count": count},
            patches=[DEFINITION.remove_element("removeDuplicate", node, include_line=True)],
        ))
    return res


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="no-duplicate-base",
    check=check_duplicate_base,
    category="Best Practices",
    description="Disallow multiple base elements in the head",
    messages={
        "duplicateBase": "Expected at most 1 <base> element, found {count}",
        "removeDuplicate": "Remove this duplicate <base> element",
    },
)
