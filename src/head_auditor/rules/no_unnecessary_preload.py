from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding
from ..validators import find_unnecessary_preloads


@audit_spec(codes=["unnecessaryPreload"])
def check_preloads(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """
    Rule: a preload is pointless when a script or stylesheet in the same head
    already loads the resource, wherever that element sits.
    """
    return [
        DEFINITION.report(
            issue.code, node, data=issue.data,
            patches=[DEFINITION.remove_element("removePreload", node)],
        )
        for node, issue in find_unnecessary_preloads(scope.children)
    ]


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="no-unnecessary-preload",
    check=check_preloads,
    kind="suggestion",
    category="Performance",
    description="Disallow preload links for resources already discoverable by other elements",
    messages={
        "unnecessaryPreload": (
            'This preload has little to no effect. "{href}" is already discoverable by a <{tagName}> element.'
        ),
        "removePreload": "Remove this unnecessary preload",
    },
)
