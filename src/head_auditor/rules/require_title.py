from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding


@audit_spec(codes=["missingTitle"])
def check_title_present(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    if scope.summary.title_indexes:
        return []
    return [DEFINITION.report("missingTitle", scope.head)]


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="require-title",
    check=check_title_present,
    category="Best Practices",
    description="Require a title element in the head",
    messages={
        "missingTitle": "The <head> element must contain a <title> element",
    },
)
