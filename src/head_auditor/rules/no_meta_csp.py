from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding
from ..validators import is_meta_csp, validate_csp


@audit_spec(codes=["cspReportOnly", "cspDisablesPreloadScanner", "missingCspContent", "unsupportedCspDirective"])
def check_meta_csp(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """Rule: CSP belongs in HTTP headers; every CSP meta finding suggests removing the tag."""
    res = []
    for _, node in scope.each(is_meta_csp):
        for issue in validate_csp(node):
            res.append(DEFINITION.report(
                issue.code, node, data=issue.data, message=issue.message,
                patches=[DEFINITION.remove_element("removeTag", node)],
            ))
    return res


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="no-meta-csp",
    check=check_meta_csp,
    category="Performance",
    description="Disallow CSP meta tags that disable the preload scanner",
    messages={
        "removeTag": "Remove this CSP meta tag (use HTTP headers instead)",
    },
)
