from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding


@audit_spec(codes=["missingViewport"])
def check_viewport_present(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    if scope.summary.viewport_indexes:
        return []
    return [DEFINITION.report("missingViewport", scope.head)]


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="require-meta-viewport",
    check=check_viewport_present,
    category="Accessibility",
    description="Require a meta viewport element in the head",
    messages={
        "missingViewport": (
            'The <head> element should contain a <meta name="viewport"> element for responsive design'
        ),
    },
)
