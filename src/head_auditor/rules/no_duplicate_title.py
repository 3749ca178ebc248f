from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding


@audit_spec(codes=["duplicateTitle"])
def check_duplicate_title(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """Rule: only the first <title> in a head counts; later ones are removable."""
    return [
        DEFINITION.report(
            "duplicateTitle", scope.children[index],
            patches=[DEFINITION.remove_element("removeDuplicateTitle", scope.children[index], include_line=True)],
        )
        for index in scope.summary.title_indexes[1:]
    ]


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="no-duplicate-title",
    check=check_duplicate_title,
    category="Best Practices",
    description="Disallow duplicate title elements in the head",
    messages={
        "duplicateTitle": "Only one <title> element is allowed in the <head>",
        "removeDuplicateTitle": "Remove this duplicate <title> element",
    },
)
