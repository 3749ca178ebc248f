from typing import List

from ..dom.core import RuleDefinition, audit_spec, get_attribute, has_attribute
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding
from ..origin_trial import validate_token
from ..validators import is_origin_trial

# Failures where the whole tag is dead weight; the token itself is never rewritten
REMOVABLE = ("expiredToken", "emptyToken", "invalidToken")


@audit_spec(codes=["missingContent", "emptyToken", "invalidToken", "expiredToken", "invalidOrigin", "invalidSubdomain"])
def check_origin_trial(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """
    Rule: origin trial tokens must decode, be unexpired and, when the site
    origin is configured, belong to it.
    """
    res = []
    for _, node in scope.each(is_origin_trial):
        if not has_attribute(node, 'content'):
            res.append(DEFINITION.report(
                "missingContent", node,
                patches=[DEFINITION.remove_element("removeTag", node, automatic=True)],
            ))
            continue

        content = get_attribute(node, 'content')
        if content is None:
            # Non-text value the host did not normalize; nothing to decode
            continue

        result = validate_token(content, options.expected_origin, now=options.now)
        if result.valid:
            continue

        patches = []
        if result.code in REMOVABLE:
            patches.append(DEFINITION.remove_element("removeTag", node, automatic=True))
        res.append(DEFINITION.report(result.code, node, data=result.data, patches=patches))
    return res


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="no-invalid-origin-trial",
    check=check_origin_trial,
    category="Possible Errors",
    description="Disallow invalid or expired origin trial tokens",
    messages={
        "missingContent": "Origin trial meta tag is missing the content attribute",
        "emptyToken": "Origin trial token cannot be empty",
        "invalidToken": "Origin trial token is invalid or malformed",
        "expiredToken": "Origin trial token expired on {expiryDate}",
        "invalidOrigin": "Origin trial token is for {tokenOrigin} but expected {expectedOrigin}",
        "invalidSubdomain": "Origin trial token requires isSubdomain flag for subdomain usage",
        "removeTag": "Remove this origin trial meta tag",
    },
)
