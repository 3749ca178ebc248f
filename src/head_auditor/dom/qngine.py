# src/head_auditor/dom/qngine.py
import logging
from typing import Dict, List, Optional, Tuple

from .builder import DOMBuilder
from .core import ElementNode, RuleDefinition
from .models import HTMLDocument, HeadScope
from .registry import RuleRegistry
from ..model import AuditOptions, Finding
from ..utils.config_loader import SEVERITIES, get_nested_config, get_preset

logger = logging.getLogger(__name__)


class QNGINE:
    """
    Quality Engine (QNGINE) for auditing document heads.

    Every head container is evaluated on its own: a fresh HeadScope is folded
    from its children and handed to each enabled rule. Severities come from the
    preset and never from the rules themselves.
    """

    def __init__(self, preset: Optional[str] = None, rules: Optional[Dict[str, str]] = None):
        """
        Initializes the engine by discovering all rules and resolving their severities.

        Args:
            preset (Optional[str]): Preset name from settings.json, or 'all'.
                Defaults to the configured 'audit.preset'.
            rules (Optional[Dict[str, str]]): Per-rule severity overrides ('error', 'warn', 'off').

        Raises:
            ValueError: On an unknown preset, rule name or severity.
        """
        RuleRegistry.discover()
        self.preset = preset or get_nested_config("audit.preset", "recommended")
        self.severities = self._resolve_severities(self.preset, rules or {})
        self.rules: List[Tuple[RuleDefinition, str]] = [
            (rule, self.severities[rule.name])
            for rule in RuleRegistry.get_all_rules()
            if self.severities.get(rule.name, "off") != "off"
        ]
        logger.debug(f"QNGINE ready with {len(self.rules)} active rule(s) from preset '{self.preset}'")

    @staticmethod
    def _resolve_severities(preset: str, overrides: Dict[str, str]) -> Dict[str, str]:
        if preset == "all":
            severities = {
                rule.name: "error" if rule.kind == "problem" else "warn"
                for rule in RuleRegistry.get_all_rules()
            }
        else:
            severities = get_preset(preset)

        for name, severity in overrides.items():
            if RuleRegistry.get_rule(name) is None:
                raise ValueError(f"Unknown rule '{name}'")
            if severity not in SEVERITIES:
                raise ValueError(f"Unsupported severity '{severity}' for rule '{name}'")
            severities[name] = severity

        return severities

    def audit_head(self, head: ElementNode, options: Optional[AuditOptions] = None) -> List[Finding]:
        """
        Runs every active rule against one head container.

        Args:
            head (ElementNode): The head element; its children are the sequence under analysis.
            options (Optional[AuditOptions]): Options for the rules, e.g. the expected origin.

        Returns:
            List[Finding]: Findings with severities assigned, in source order where known.
        """
        options = options or AuditOptions(expected_origin=get_nested_config("audit.origin"))
        scope = HeadScope.from_head(head)
        findings: List[Finding] = []

        for rule, severity in self.rules:
            for finding in rule.check(scope, options):
                findings.append(finding.model_copy(update={"severity": severity}))

        findings.sort(key=lambda f: f.span.start if f.span else -1)
        return findings

    def run_audit(self, doc: HTMLDocument, options: Optional[AuditOptions] = None) -> List[Finding]:
        """
        Runs the audit suite on every head container of a parsed document.

        Args:
            doc (HTMLDocument): The parsed document.
            options (Optional[AuditOptions]): Options for the rules.

        Returns:
            List[Finding]: All findings, head by head.
        """
        if "missing_head" in doc.doc_errors:
            logger.debug("Document has no <head>; nothing to audit")

        findings: List[Finding] = []
        for head in doc.heads:
            findings.extend(self.audit_head(head, options))
        return findings

    def audit_html(self, html: str, options: Optional[AuditOptions] = None) -> List[Finding]:
        """Parses `html` with the DOMBuilder and audits it."""
        return self.run_audit(DOMBuilder().parse_doc(html), options)
