# src/wcag_auditor/services/scoring_service.py
import logging
from collections import OrderedDict
from typing import Dict, Iterable, List

from wcag_auditor.exceptions import AggregationError
from wcag_auditor.model import (
    Finding,
    HealthcareElementType,
    Recommendation,
    Severity,
    ValidationSummary,
)

logger = logging.getLogger(__name__)

COMPLIANCE_SCORE = 85
MAX_RECOMMENDATIONS = 5


class ScoringService:
    """
    Aggregates rule findings into the compliance summary.

    Pure function of its input: identical findings always yield an identical
    summary, including recommendation order.
    """

    def __init__(self, numeric_rule_ids: Iterable[str] = ()):
        self.numeric_rule_ids = set(numeric_rule_ids)

    def summarize(self, violations: List[Finding], passes: List[Finding]) -> ValidationSummary:
        self._check_invariants(violations, passes)

        total_checks = len(violations) + len(passes)
        overall_score = round(100 * len(passes) / total_checks) if total_checks else 0

        by_severity: Dict[str, int] = {s.value: 0 for s in Severity}
        for v in violations:
            by_severity[v.severity.value] += 1

        healthcare_compliance = overall_score >= COMPLIANCE_SCORE and by_severity[Severity.CRITICAL.value] == 0
        emergency_compliance = not any(
            v.healthcare_context == HealthcareElementType.EMERGENCY for v in violations
        )

        summary = ValidationSummary(
            overall_score=overall_score,
            total_checks=total_checks,
            total_violations=len(violations),
            total_passes=len(passes),
            violations_by_severity=by_severity,
            healthcare_compliance=healthcare_compliance,
            emergency_compliance=emergency_compliance,
            wcag_level="AA" if healthcare_compliance else "Below AA",
            recommendations=self.top_recommendations(violations),
        )
        logger.debug(
            "Summary: score=%s critical=%s high=%s",
            overall_score, by_severity["critical"], by_severity["high"]
        )
        return summary

    @staticmethod
    def top_recommendations(violations: List[Finding], limit: int = MAX_RECOMMENDATIONS) -> List[Recommendation]:
        """
        Groups violations by rule and ranks the groups by
        (highest severity weight desc, frequency desc). Ties keep first-seen order.
        """
        groups: "OrderedDict[str, Dict]" = OrderedDict()
        for v in violations:
            group = groups.setdefault(v.rule_id, {"count": 0, "severity": v.severity, "fixes": []})
            group["count"] += 1
            if v.severity.weight > group["severity"].weight:
                group["severity"] = v.severity
            if v.fix_hint and v.fix_hint not in group["fixes"]:
                group["fixes"].append(v.fix_hint)

        ranked = sorted(
            groups.items(),
            key=lambda item: (-item[1]["severity"].weight, -item[1]["count"]),
        )
        return [
            Recommendation(rule_id=rule_id, severity=data["severity"], count=data["count"], fixes=data["fixes"])
            for rule_id, data in ranked[:limit]
        ]

    def _check_invariants(self, violations: List[Finding], passes: List[Finding]) -> None:
        for v in violations:
            if v.severity is None:
                raise AggregationError(f"Violation from '{v.rule_id}' on {v.element_selector} has no severity")
        for p in passes:
            if p.severity is not None:
                raise AggregationError(f"Pass from '{p.rule_id}' on {p.element_selector} carries a severity")
        for f in (*violations, *passes):
            if f.execution_error or f.rule_id not in self.numeric_rule_ids:
                continue
            if f.found_value is None or f.required_value is None:
                raise AggregationError(
                    f"Numeric finding from '{f.rule_id}' on {f.element_selector} lacks found/required values"
                )
