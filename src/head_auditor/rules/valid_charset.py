from typing import List

from ..dom.core import RuleDefinition, audit_spec, get_attribute
from ..dom.models import HeadScope
from ..model import AuditOptions, Finding, Patch
from ..validators import find_charset_in_content, is_content_type, validate_content_type


def _utf8_patch(node) -> List[Patch]:
    if get_attribute(node, 'charset'):
        return [DEFINITION.replace_value("fixToUtf8", node, 'charset', 'utf-8')]

    # http-equiv form: rewrite only the charset portion of the content value
    content = get_attribute(node, 'content')
    charset_range = find_charset_in_content(content)
    if charset_range is None:
        return []
    start, end = charset_range
    return [DEFINITION.replace_value("fixToUtf8", node, 'content', content[:start] + 'utf-8' + content[end:])]


@audit_spec(codes=["duplicateCharset", "invalidCharset"])
def check_charset(scope: HeadScope, options: AuditOptions) -> List[Finding]:
    """
    Rule: one character encoding declaration per head, and it must be UTF-8.
    The second and later declarations are only reported as duplicates.
    """
    res = []
    first = scope.summary.charset_indexes[:1]

    for index, node in scope.each(is_content_type):
        if index not in first:
            res.append(DEFINITION.report("duplicateCharset", node))
            continue

        for issue in validate_content_type(node):
            res.append(DEFINITION.report(
                issue.code, node, data=issue.data, message=issue.message, patches=_utf8_patch(node)
            ))
    return res


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    name="valid-charset",
    check=check_charset,
    category="Best Practices",
    description="Ensure proper UTF-8 character encoding is declared",
    messages={
        "duplicateCharset": "There can only be one meta-based character encoding declaration per document.",
        "invalidCharset": 'Documents are required to use UTF-8 encoding. Found "{charset}".',
        "fixToUtf8": 'Change charset to "utf-8"',
    },
)
