from typing import List

from ..dom.core import RuleDefinition, audit_spec, get_attribute
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding
from ..validators import (
    is_content_type, is_default_style, is_http_equiv, is_meta_csp, is_origin_trial,
    is_valid_http_equiv, validate_http_equiv,
)


def _has_dedicated_rule(node) -> bool:
    return is_meta_csp(node) or is_origin_trial(node) or is_default_style(node) or is_content_type(node)


@audit_spec(codes=["noEffect", "deprecatedIEFeature", "nonConforming", "nonStandard", "didYouMean", "discouraged"])
def check_http_equiv(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """
    Rule: meta[http-equiv] values must do something useful.
    Only values that do not work at all get a removal suggestion.
    """
    res = []
    for _, node in scope.each(is_http_equiv):
        if _has_dedicated_rule(node):
            continue

        removable = not is_valid_http_equiv(get_attribute(node, 'http-equiv'))
        for issue in validate_http_equiv(node):
            patches = [DEFINITION.remove_element("removeTag", node, include_line=True)] if removable else []
            res.append(DEFINITION.report(issue.code, node, data=issue.data, message=issue.message, patches=patches))
    return res


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="no-invalid-http-equiv",
    check=check_http_equiv,
    category="Best Practices",
    description="Disallow invalid or deprecated http-equiv meta tags",
    messages={
        "removeTag": "Remove this deprecated meta tag",
    },
)
