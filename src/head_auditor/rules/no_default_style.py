from typing import List

from ..dom.core import RuleDefinition, audit_spec
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding
from ..validators import is_default_style, validate_default_style


@audit_spec(codes=["missingContent", "flashOfUnstyledContent"])
def check_default_style(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    res = []
    for _, node in scope.each(is_default_style):
        for issue in validate_default_style(node):
            res.append(DEFINITION.report(
                issue.code, node, data=issue.data, message=issue.message,
                patches=[DEFINITION.remove_element("removeTag", node)],
            ))
    return res


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="no-default-style",
    check=check_default_style,
    kind="suggestion",
    category="Best Practices",
    description="Disallow default-style meta tag (causes FOUC)",
    messages={
        "removeTag": "Remove this default-style meta tag",
    },
)
