import logging
from collections import Counter, defaultdict
from typing import Any, Dict, List, Mapping, Optional

from tqdm import tqdm

from head_auditor.dom.builder import DOMBuilder
from head_auditor.dom.qngine import QNGINE
from head_auditor.model import AuditOptions, Finding

logger = logging.getLogger(__name__)


class AuditController:
    """
    Orchestrates auditing several named documents in one run and aggregates
    the findings into a per-rule, per-code summary. Every document, and every
    head inside it, is evaluated with fresh state.
    """

    def __init__(self, engine: Optional[QNGINE] = None, options: Optional[AuditOptions] = None):
        self.engine = engine or QNGINE()
        self.options = options
        self.builder = DOMBuilder()

        # Results Buffers
        self.findings: Dict[str, List[Finding]] = {}
        self.stats = defaultdict(Counter)

    def run_audit(self, documents: Mapping[str, str], show_progress: bool = True) -> Dict[str, Any]:
        """
        Audits every document and returns a summary.

        Args:
            documents (Mapping[str, str]): Document name -> HTML source.
            show_progress (bool): Show a tqdm progress bar.

        Returns:
            Dict[str, Any]: Counts of analyzed documents, documents with findings,
            total findings and the per-code breakdown.
        """
        # Reset Buffers
        self.findings = {}
        self.stats = defaultdict(Counter)
        documents_with_findings = 0

        for name, html in tqdm(documents.items(), total=len(documents), desc="Auditing",
                               unit="doc", disable=not show_progress):
            findings = self.engine.run_audit(self.builder.parse_doc(html), self.options)
            self.findings[name] = findings

            if findings:
                documents_with_findings += 1
            for finding in findings:
                self.stats[finding.rule][finding.code] += 1

            logger.debug(f"{name}: {len(findings)} finding(s)")

        total = sum(len(f) for f in self.findings.values())
        logger.info(f"Audited {len(documents)} document(s), {total} finding(s)")

        return {
            "summary": {
                "documents_analyzed": len(documents),
                "documents_with_findings": documents_with_findings,
                "total_findings": total,
            },
            "breakdown": [
                {"rule": rule, "code": code, "count": count}
                for rule, codes in sorted(self.stats.items())
                for code, count in sorted(codes.items())
            ],
        }

    # --- Result Getters ---
    def get_findings(self, name: str) -> List[Finding]:
        return self.findings.get(name, [])

    def get_results_for_export(self) -> List[Dict[str, Any]]:
        """Flat rows, one per finding, for JSON or tabular export."""
        return [
            {
                "Document": name,
                "Rule": f.rule,
                "Code": f.code,
                "Severity": f.severity,
                "Line": f.span.line if f.span else None,
                "Message": f.message,
            }
            for name, findings in self.findings.items()
            for f in findings
        ]
