# tests/core/test_scoring_service.py
import pytest

from wcag_auditor.exceptions import AggregationError
from wcag_auditor.model import Finding, HealthcareElementType, Severity
from wcag_auditor.services.scoring_service import ScoringService


def violation(rule_id="healthcare-navigation", severity=Severity.HIGH, fix="Fix it",
              context=HealthcareElementType.GENERAL, **kwargs):
    return Finding(rule_id=rule_id, element_selector="div", severity=severity,
                   healthcare_context=context, fix_hint=fix, **kwargs)


def passed(rule_id="healthcare-navigation", **kwargs):
    return Finding(rule_id=rule_id, element_selector="div", **kwargs)


@pytest.fixture
def scoring():
    return ScoringService(numeric_rule_ids=["healthcare-color-contrast"])


def test_critical_violation_blocks_compliance_at_85(scoring):
    violations = [violation(), violation(), violation(severity=Severity.CRITICAL)]
    summary = scoring.summarize(violations, [passed() for _ in range(17)])

    assert summary.overall_score == 85
    assert summary.total_checks == 20
    assert summary.violations_by_severity == {"critical": 1, "high": 2, "medium": 0, "low": 0}
    assert summary.healthcare_compliance is False
    assert summary.wcag_level == "Below AA"


def test_score_at_threshold_without_critical_is_compliant(scoring):
    summary = scoring.summarize([violation() for _ in range(3)], [passed() for _ in range(17)])
    assert summary.healthcare_compliance is True
    assert summary.wcag_level == "AA"


def test_score_rounds_to_nearest_integer(scoring):
    summary = scoring.summarize([violation()], [passed(), passed()])
    assert summary.overall_score == 67


def test_empty_input_scores_zero(scoring):
    summary = scoring.summarize([], [])
    assert summary.overall_score == 0
    assert summary.total_checks == 0
    assert summary.healthcare_compliance is False
    assert summary.emergency_compliance is True
    assert summary.recommendations == []


def test_emergency_compliance_tracks_emergency_violations(scoring):
    summary = scoring.summarize(
        [violation(severity=Severity.MEDIUM, context=HealthcareElementType.EMERGENCY)], [passed()]
    )
    assert summary.emergency_compliance is False


def test_recommendations_ranked_by_severity_then_count(scoring):
    violations = [
        violation("rule-a", Severity.MEDIUM, "a1"),
        violation("rule-a", Severity.MEDIUM, "a2"),
        violation("rule-a", Severity.MEDIUM, "a1"),
        violation("rule-b", Severity.HIGH, "b1"),
        violation("rule-c", Severity.HIGH, "c1"),
        violation("rule-c", Severity.HIGH, "c1"),
        violation("rule-d", Severity.LOW, "d1"),
        violation("rule-d", Severity.CRITICAL, "d2"),
    ]
    recommendations = scoring.summarize(violations, []).recommendations

    assert [r.rule_id for r in recommendations] == ["rule-d", "rule-c", "rule-b", "rule-a"]
    assert recommendations[0].severity == Severity.CRITICAL
    assert recommendations[1].count == 2
    assert recommendations[3].fixes == ["a1", "a2"]


def test_recommendations_are_capped_at_five(scoring):
    violations = [violation(f"rule-{i}") for i in range(8)]
    recommendations = scoring.summarize(violations, []).recommendations
    assert [r.rule_id for r in recommendations] == [f"rule-{i}" for i in range(5)]


def test_violation_without_severity_is_rejected(scoring):
    with pytest.raises(AggregationError):
        scoring.summarize([passed()], [])


def test_pass_with_severity_is_rejected(scoring):
    with pytest.raises(AggregationError):
        scoring.summarize([], [violation()])


def test_numeric_finding_requires_values(scoring):
    incomplete = passed("healthcare-color-contrast", found_value=4.6)
    with pytest.raises(AggregationError):
        scoring.summarize([], [incomplete])


def test_execution_error_findings_skip_numeric_check(scoring):
    error = violation("healthcare-color-contrast", execution_error=True)
    summary = scoring.summarize([error], [])
    assert summary.total_violations == 1
