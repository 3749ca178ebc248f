from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding
from ..ordering import check_order


@audit_spec(codes=["wrongOrder"])
def check_head_order(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """
    Rule: head children should follow the optimal loading-priority order.
    Advisory only; reordering is never patched automatically.
    """
    return [
        DEFINITION.report(
            "wrongOrder",
            scope.children[violation.current_index],
            data={
                "current": violation.current,
                "currentWeight": violation.current_weight,
                "next": violation.next,
                "nextWeight": violation.next_weight,
            },
        )
        for violation in check_order(scope.children)
    ]


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="head-element-order",
    check=check_head_order,
    kind="suggestion",
    category="Performance",
    description="Enforce optimal ordering of head elements for performance",
    messages={
        "wrongOrder": (
            "Element order suboptimal: {current} (weight {currentWeight}) "
            "should come after {next} (weight {nextWeight})."
        ),
    },
)
