from typing import List

from ..dom.core import RuleDefinition, audit_spec, get_attribute
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding
from ..validators import is_meta_viewport, remove_viewport_directive, validate_meta_viewport

# Accessibility issues that can be fixed by dropping the offending directive
REMOVAL_PATCHES = {
    "userScalableAccessibility": ("removeUserScalable", "user-scalable"),
    "maximumScaleAccessibility": ("removeMaximumScale", "maximum-scale"),
}


@audit_spec(codes=[
    "redundantViewport", "viewportCount", "missingContent", "invalidWidth", "invalidHeight",
    "invalidScale", "maximumScaleAccessibility", "userScalableAccessibility", "unsupportedValue",
    "obsoleteShrinkToFit", "invalidDirective",
])
def check_viewport(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """
    Rule: the first meta viewport is validated directive by directive; any
    further one is reported as redundant without being validated.
    """
    res = []
    indexes = scope.summary.viewport_indexes

    for index, node in scope.each(is_meta_viewport):
        if index != indexes[0]:
            res.append(DEFINITION.report("redundantViewport", node))
            continue

        content = get_attribute(node, 'content') or ""
        for issue in validate_meta_viewport(node):
            patches = []
            if issue.code in REMOVAL_PATCHES:
                message_id, directive = REMOVAL_PATCHES[issue.code]
                patches.append(DEFINITION.replace_value(
                    message_id, node, 'content', remove_viewport_directive(content, directive)
                ))
            res.append(DEFINITION.report(issue.code, node, data=issue.data, message=issue.message, patches=patches))

    if len(indexes) > 1:
        res.append(DEFINITION.report("viewportCount", scope.head, data={"count": len(indexes)}))

    return res


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="valid-meta-viewport",
    check=check_viewport,
    category="Accessibility",
    description="Ensure meta viewport is properly configured",
    messages={
        "redundantViewport": (
            "Another meta viewport element has already been declared. "
            "Having multiple viewport settings can lead to unexpected behavior."
        ),
        "viewportCount": "Expected exactly 1 <meta name=viewport> element, found {count}",
        "removeUserScalable": 'Remove "user-scalable=no" to allow zooming',
        "removeMaximumScale": 'Remove "maximum-scale" to allow zooming',
    },
)
