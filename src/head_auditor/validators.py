# src/head_auditor/validators.py
import math
import re
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlsplit, urlunsplit

from .dom.core import ElementNode, get_attribute, has_attribute
from .model import Issue

VALID_HEAD_ELEMENTS = frozenset([
    'base',
    'link',
    'meta',
    'noscript',
    'script',
    'style',
    'template',
    'title',
])

CHARSET_IN_CONTENT = re.compile(r'text/html;\s*charset=(.*)', re.IGNORECASE)
NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
CSP_SEPARATOR = re.compile(r'\s*;\s*')

# Placeholder base used to resolve relative URLs into a comparable form
URL_BASE = "https://head-auditor.invalid/"


# --- APPLICABILITY PREDICATES ---

def _http_equiv(node: ElementNode) -> str:
    value = get_attribute(node, 'http-equiv')
    return value.lower() if value else ""


def is_valid_head_element(tag_name: str) -> bool:
    return tag_name.lower() in VALID_HEAD_ELEMENTS


def is_meta_csp(node: ElementNode) -> bool:
    return node.name == 'meta' and 'content-security-policy' in _http_equiv(node)


def is_origin_trial(node: ElementNode) -> bool:
    return node.name == 'meta' and _http_equiv(node) == 'origin-trial'


def is_meta_viewport(node: ElementNode) -> bool:
    if node.name != 'meta':
        return False
    name = get_attribute(node, 'name')
    return bool(name) and name.lower() == 'viewport'


def is_default_style(node: ElementNode) -> bool:
    return node.name == 'meta' and _http_equiv(node) == 'default-style'


def is_content_type(node: ElementNode) -> bool:
    """meta[charset] or meta[http-equiv=content-type]."""
    if node.name != 'meta':
        return False
    return _http_equiv(node) == 'content-type' or has_attribute(node, 'charset')


def is_http_equiv(node: ElementNode) -> bool:
    return node.name == 'meta' and has_attribute(node, 'http-equiv')


def is_preload(node: ElementNode) -> bool:
    if node.name != 'link':
        return False
    rel = get_attribute(node, 'rel')
    return bool(rel) and rel.lower() in ('preload', 'modulepreload')


# --- CHARSET ---

def find_charset_in_content(content: Optional[str]) -> Optional[Tuple[int, int]]:
    """Range of the charset name inside a `text/html; charset=X` content value."""
    if not content:
        return None
    match = CHARSET_IN_CONTENT.search(content)
    if not match:
        return None

    start, end = match.span(1)
    raw = match.group(1)
    start += len(raw) - len(raw.lstrip())
    end -= len(raw) - len(raw.rstrip())
    return start, end


def extract_charset(node: ElementNode) -> Optional[str]:
    """
    Normalizes both declaration forms (meta[charset] and the http-equiv
    content-type `content` value) to the declared charset string.
    """
    charset = get_attribute(node, 'charset')
    if charset:
        return charset

    content = get_attribute(node, 'content')
    charset_range = find_charset_in_content(content)
    if charset_range is None:
        return None
    start, end = charset_range
    return content[start:end]


def validate_content_type(node: ElementNode) -> List[Issue]:
    charset = extract_charset(node)
    if charset and charset.lower() != 'utf-8':
        return [Issue(
            code='invalidCharset',
            message=(
                f'Documents are required to use UTF-8 encoding. Found "{charset}". Learn more: '
                'https://html.spec.whatwg.org/multipage/semantics.html#character-encoding-declaration'
            ),
            data={'charset': charset},
        )]
    return []


# --- VIEWPORT ---

VIEWPORT_DIRECTIVES = (
    'width',
    'height',
    'initial-scale',
    'minimum-scale',
    'maximum-scale',
    'user-scalable',
    'interactive-widget',
    'viewport-fit',
    'shrink-to-fit',
)

USER_SCALABLE_VALUES = ('0', '1', 'yes', 'no')
INTERACTIVE_WIDGET_VALUES = ('resizes-visual', 'resizes-content', 'overlays-content')
VIEWPORT_FIT_VALUES = ('auto', 'contain', 'cover')


def _to_number(value: Optional[str]) -> float:
    if value is None or not NUMBER_PATTERN.match(value):
        return math.nan
    return float(value)


def parse_viewport_content(content: str) -> Dict[str, Optional[str]]:
    """
    Parses `key=value` directives separated by commas. Keys are lower-cased and
    the last occurrence of a duplicate key wins. A key without `=` maps to None.
    """
    directives: Dict[str, Optional[str]] = {}
    for part in content.lower().split(','):
        key, sep, value = part.partition('=')
        key = key.strip()
        if not key:
            continue
        directives[key] = value.split('=')[0].strip() if sep else None
    return directives


def _check_dimension(name: str, keyword: str, value: Optional[str]) -> Optional[Issue]:
    number = _to_number(value)
    if not math.isnan(number) and (number < 1 or number > 10000):
        return Issue(
            code=f'invalid{name.capitalize()}',
            message=f'Invalid {name} "{value}". Numeric values must be between 1 and 10000.',
            data={'directive': name, 'value': value},
        )
    if math.isnan(number) and value != keyword:
        return Issue(
            code=f'invalid{name.capitalize()}',
            message=f'Invalid {name} "{value or ""}".',
            data={'directive': name, 'value': value},
        )
    return None


def _check_scale(directive: str, label: str, value: Optional[str]) -> Tuple[Optional[Issue], float]:
    number = _to_number(value)
    if math.isnan(number):
        return Issue(
            code='invalidScale',
            message=f'Invalid {label} zoom level "{value or ""}". Values must be numeric.',
            data={'directive': directive, 'value': value},
        ), number
    if number < 0.1 or number > 10:
        return Issue(
            code='invalidScale',
            message=f'Invalid {label} zoom level "{value}". Values must be between 0.1 and 10.',
            data={'directive': directive, 'value': value},
        ), number
    return None, number


def validate_meta_viewport(node: ElementNode) -> List[Issue]:
    """
    Validates the `content` of a meta viewport element.

    Every problem in the content string is reported; the pass never stops at
    the first one.
    """
    content = get_attribute(node, 'content')
    if not content:
        return [Issue(code='missingContent', message='Invalid viewport. The content attribute must be set.')]

    directives = parse_viewport_content(content)
    issues: List[Issue] = []

    if 'width' in directives:
        issue = _check_dimension('width', 'device-width', directives['width'])
        if issue:
            issues.append(issue)

    if 'height' in directives:
        issue = _check_dimension('height', 'device-height', directives['height'])
        if issue:
            issues.append(issue)

    for directive, label in (('initial-scale', 'initial'), ('minimum-scale', 'minimum')):
        if directive in directives:
            issue, _ = _check_scale(directive, label, directives[directive])
            if issue:
                issues.append(issue)

    if 'maximum-scale' in directives:
        value = directives['maximum-scale']
        issue, number = _check_scale('maximum-scale', 'maximum', value)
        if issue:
            issues.append(issue)
        elif number < 2:
            issues.append(Issue(
                code='maximumScaleAccessibility',
                message=f'Disabling zoom levels under 2x can cause accessibility issues. Found "{value}".',
                data={'directive': 'maximum-scale', 'value': value},
            ))

    if 'user-scalable' in directives:
        value = directives['user-scalable']
        if value in ('no', '0'):
            issues.append(Issue(
                code='userScalableAccessibility',
                message=(
                    'Disabling zooming can cause accessibility issues to users with visual impairments. '
                    f'Found "{value}".'
                ),
                data={'directive': 'user-scalable', 'value': value},
            ))
        if value not in USER_SCALABLE_VALUES:
            issues.append(Issue(
                code='unsupportedValue',
                message=f'Unsupported value "{value or ""}" found.',
                data={'directive': 'user-scalable', 'value': value},
            ))

    if 'interactive-widget' in directives:
        value = directives['interactive-widget']
        if value not in INTERACTIVE_WIDGET_VALUES:
            issues.append(Issue(
                code='unsupportedValue',
                message=f'Unsupported value "{value or ""}" found.',
                data={'directive': 'interactive-widget', 'value': value},
            ))

    if 'viewport-fit' in directives:
        value = directives['viewport-fit']
        if value not in VIEWPORT_FIT_VALUES:
            issues.append(Issue(
                code='unsupportedValue',
                message=(
                    f'Unsupported value "{value or ""}" found. '
                    f'Should be one of: {", ".join(VIEWPORT_FIT_VALUES)}.'
                ),
                data={'directive': 'viewport-fit', 'value': value},
            ))

    if 'shrink-to-fit' in directives:
        issues.append(Issue(
            code='obsoleteShrinkToFit',
            message=(
                'The shrink-to-fit directive has been obsolete since iOS 9.2. '
                'See https://www.scottohara.me/blog/2018/12/11/shrink-to-fit.html'
            ),
            data={'directive': 'shrink-to-fit'},
        ))

    for directive in directives:
        if directive not in VIEWPORT_DIRECTIVES:
            issues.append(Issue(
                code='invalidDirective',
                message=f'Invalid viewport directive "{directive}".',
                data={'directive': directive},
            ))

    return issues


def remove_viewport_directive(content: str, directive: str) -> str:
    """
    Drops every `directive=...` entry from a viewport content string, keeping
    the remaining directives and their original spacing.
    """
    kept = [
        part for part in content.split(',')
        if part.partition('=')[0].strip().lower() != directive
    ]
    return ','.join(part for part in kept if part.strip()).strip()


# --- CONTENT SECURITY POLICY ---

UNSUPPORTED_CSP_DIRECTIVES = {
    'report-uri': 'Content-Security-Policy-Report-Only',
    'frame-ancestors': 'Content-Security-Policy',
    'sandbox': 'Content-Security-Policy',
}


def parse_csp_directives(content: str) -> Dict[str, str]:
    directives: Dict[str, str] = {}
    for part in CSP_SEPARATOR.split(content.strip()):
        tokens = part.split()
        if tokens:
            directives[tokens[0].lower()] = ' '.join(tokens[1:])
    return directives


def validate_csp(node: ElementNode) -> List[Issue]:
    http_equiv = _http_equiv(node)

    if http_equiv == 'content-security-policy-report-only':
        return [Issue(code='cspReportOnly', message='CSP Report-Only is forbidden in meta tags')]

    issues: List[Issue] = []
    if http_equiv == 'content-security-policy':
        issues.append(Issue(
            code='cspDisablesPreloadScanner',
            message=(
                'CSP meta tags disable the preload scanner due to a bug in Chrome. '
                'Use the CSP header instead. Learn more: https://crbug.com/1458493'
            ),
        ))

    content = get_attribute(node, 'content')
    if not content:
        issues.append(Issue(code='missingCspContent', message='Invalid CSP. The content attribute must be set.'))
        return issues

    directives = parse_csp_directives(content)
    for directive, header in UNSUPPORTED_CSP_DIRECTIVES.items():
        if directive in directives:
            issues.append(Issue(
                code='unsupportedCspDirective',
                message=f'The {directive} directive is not supported. Use the {header} HTTP header instead.',
                data={'directive': directive, 'alternative': header},
            ))

    return issues


# --- HTTP-EQUIV ---

# Values that actually work (even if discouraged); anything else may be removed.
VALID_HTTP_EQUIV_VALUES = frozenset([
    'content-security-policy',
    'content-security-policy-report-only',
    'origin-trial',
    'content-type',
    'default-style',
    'refresh',
    'x-dns-prefetch-control',
    'accept-ch',
    'delegate-ch',
])

# Values owned by a dedicated validator
DEDICATED_HTTP_EQUIV_VALUES = frozenset([
    'content-security-policy',
    'content-security-policy-report-only',
    'origin-trial',
    'content-type',
    'default-style',
])

NO_CACHE_EFFECT = "This doesn't do anything. Use HTTP headers for any cache directives."
IE_FEATURE = "This doesn't do anything. It was an Internet Explorer feature and is now deprecated."
USE_HEADERS = 'This is non-standard and may not work across browsers. Use HTTP headers instead.'
GENERIC_NON_STANDARD = (
    'This is non-standard and may not work across browsers. '
    'http-equiv is not an alternative to HTTP headers.'
)

# value -> (defect kind, explanation); `{value}` is filled with the http-equiv value
HTTP_EQUIV_TABLE: Dict[str, Tuple[str, str]] = {
    'cache-control': ('noEffect', NO_CACHE_EFFECT),
    'etag': ('noEffect', NO_CACHE_EFFECT),
    'pragma': ('noEffect', NO_CACHE_EFFECT),
    'expires': ('noEffect', NO_CACHE_EFFECT),
    'last-modified': ('noEffect', NO_CACHE_EFFECT),
    'x-frame-options': (
        'noEffect',
        "This doesn't do anything. Use the CSP HTTP header with the frame-ancestors directive instead.",
    ),
    'x-ua-compatible': ('deprecatedIEFeature', IE_FEATURE),
    'content-style-type': ('deprecatedIEFeature', IE_FEATURE),
    'content-script-type': ('deprecatedIEFeature', IE_FEATURE),
    'imagetoolbar': ('deprecatedIEFeature', IE_FEATURE),
    'cleartype': ('deprecatedIEFeature', IE_FEATURE),
    'page-enter': ('deprecatedIEFeature', IE_FEATURE),
    'page-exit': ('deprecatedIEFeature', IE_FEATURE),
    'site-enter': ('deprecatedIEFeature', IE_FEATURE),
    'site-exit': ('deprecatedIEFeature', IE_FEATURE),
    'msthemecompatible': ('deprecatedIEFeature', IE_FEATURE),
    'window-target': ('deprecatedIEFeature', IE_FEATURE),
    'content-language': ('nonConforming', 'This is non-conforming. Use the html[lang] attribute instead.'),
    'language': ('nonConforming', 'This is non-conforming. Use the html[lang] attribute instead.'),
    'set-cookie': ('nonConforming', 'This is non-conforming. Use the Set-Cookie HTTP header instead.'),
    'encoding': ('didYouMean', "This doesn't do anything. Did you mean `meta[charset]`?"),
    'title': ('didYouMean', "This doesn't do anything. Did you mean to use the `title` tag instead?"),
    'accept-ch': ('nonStandard', USE_HEADERS),
    'delegate-ch': ('nonStandard', USE_HEADERS),
}

for _name in (
        'application-name', 'author', 'description', 'generator', 'keywords', 'referrer',
        'theme-color', 'color-scheme', 'viewport', 'creator', 'googlebot', 'publisher', 'robots'):
    HTTP_EQUIV_TABLE[_name] = ('didYouMean', "This doesn't do anything. Did you mean `meta[name={value}]`?")


def is_valid_http_equiv(value: Optional[str]) -> bool:
    """True for values that work in browsers, even when discouraged."""
    return bool(value) and value.lower() in VALID_HTTP_EQUIV_VALUES


def _refresh_issue(content: str) -> Issue:
    if not content:
        return Issue(
            code='noEffect',
            message="This doesn't do anything. The content attribute must be set. "
                    "However, using refresh is discouraged.",
        )
    if 'url=' in content:
        return Issue(code='discouraged', message='Meta auto-redirects are discouraged. Use HTTP 3XX responses instead.')
    return Issue(
        code='discouraged',
        message='Meta auto-refreshes are discouraged unless users have the ability to disable it.',
    )


def _dns_prefetch_issue(content: str) -> Issue:
    if content == 'on':
        return Issue(
            code='noEffect',
            message=f'DNS prefetching is enabled by default. Setting it to "{content}" has no effect.',
        )
    if content != 'off':
        return Issue(
            code='nonStandard',
            message=(
                'This is a non-standard way of disabling DNS prefetching, which is a performance '
                f'optimization. Found content="{content}". Use content="off" if you have a legitimate '
                'security concern, otherwise remove it.'
            ),
        )
    return Issue(
        code='nonStandard',
        message=(
            'This is non-standard, however most browsers support disabling speculative DNS prefetching. '
            'It should still be noted that DNS prefetching is a generally accepted performance optimization '
            'and you should only disable it if you have specific security concerns.'
        ),
    )


def validate_http_equiv(node: ElementNode) -> List[Issue]:
    """
    Explains what is wrong with a meta[http-equiv] value.

    Values handled by a dedicated validator (CSP, origin-trial, content-type,
    default-style) produce nothing here.
    """
    value = _http_equiv(node)
    if not value or value in DEDICATED_HTTP_EQUIV_VALUES:
        return []

    content = (get_attribute(node, 'content') or '').lower()

    if value == 'refresh':
        issue = _refresh_issue(content)
    elif value == 'x-dns-prefetch-control':
        issue = _dns_prefetch_issue(content)
    elif value in HTTP_EQUIV_TABLE:
        kind, message = HTTP_EQUIV_TABLE[value]
        issue = Issue(code=kind, message=message.format(value=value))
    else:
        issue = Issue(code='nonStandard', message=GENERIC_NON_STANDARD)

    data = dict(issue.data, httpEquiv=value)
    return [issue.model_copy(update={'data': data})]


# --- DEFAULT-STYLE ---

def validate_default_style(node: ElementNode) -> List[Issue]:
    issues: List[Issue] = []
    if not get_attribute(node, 'content'):
        issues.append(Issue(
            code='missingContent',
            message='This has no effect. The content attribute must be set to a valid stylesheet title.',
        ))

    issues.append(Issue(
        code='flashOfUnstyledContent',
        message=(
            'Even when used correctly, the default-style method of setting a preferred stylesheet results in '
            'a flash of unstyled content. Use modern CSS features like @media rules instead.'
        ),
    ))
    return issues


# --- REDUNDANT PRELOAD ---

def normalize_url(url: Optional[str]) -> Optional[str]:
    """
    Resolves `url` against a fixed placeholder base so equivalent relative
    forms (`./app.js`, `app.js`, `/app.js`) compare equal. Fragments are dropped.
    """
    if not url or not url.strip():
        return None
    try:
        parts = urlsplit(urljoin(URL_BASE, url.strip()))
    except ValueError:
        return None
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path or '/', parts.query, ''))


def resource_url(node: ElementNode) -> Optional[str]:
    """URL loaded by a script or stylesheet link; None for anything else."""
    if node.name == 'script':
        return get_attribute(node, 'src')
    if node.name == 'link':
        rel = get_attribute(node, 'rel')
        if rel and rel.lower() == 'stylesheet':
            return get_attribute(node, 'href')
    return None


def find_unnecessary_preloads(children: Sequence[ElementNode]) -> List[Tuple[ElementNode, Issue]]:
    """
    Finds preloads whose resource is already discoverable by a script or
    stylesheet anywhere in the same head, before or after the preload.
    """
    discoverable: Dict[str, str] = {}
    for child in children:
        normalized = normalize_url(resource_url(child))
        if normalized and normalized not in discoverable:
            discoverable[normalized] = child.name

    results = []
    for child in children:
        if not is_preload(child):
            continue
        href = get_attribute(child, 'href')
        normalized = normalize_url(href)
        if normalized is None or normalized not in discoverable:
            continue

        tag_name = discoverable[normalized]
        results.append((child, Issue(
            code='unnecessaryPreload',
            message=(
                f'This preload has little to no effect. "{href}" is already discoverable '
                f'by a <{tag_name}> element.'
            ),
            data={'href': href, 'tagName': tag_name},
        )))

    return results
