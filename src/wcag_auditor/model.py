# src/wcag_auditor/model.py
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        """Ranking weight used when ordering recommendations."""
        return SEVERITY_WEIGHTS[self]


SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class HealthcareElementType(str, Enum):
    """Role of an element in a medical workflow. Derived per call, never stored."""
    EMERGENCY = "emergency"
    MEDICAL = "medical"
    PRIMARY = "primary"
    GENERAL = "general"


class Finding(BaseModel):
    """
    One rule-evaluation result.

    A violation carries a severity and a fix hint; a pass has neither.
    Numeric rules (contrast, touch target) always fill both found_value and
    required_value.
    """
    rule_id: str
    element_selector: str
    severity: Optional[Severity] = None
    healthcare_context: HealthcareElementType = HealthcareElementType.GENERAL
    message: str = ""
    found_value: Optional[float] = None
    required_value: Optional[float] = None
    fix_hint: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    execution_error: bool = False

    def to_report_dict(self) -> Dict[str, Any]:
        """camelCase dictionary consumed by the external report renderers."""
        data = {
            "ruleId": self.rule_id,
            "elementSelector": self.element_selector,
            "healthcareContext": self.healthcare_context.value,
            "message": self.message,
            "foundValue": self.found_value,
            "requiredValue": self.required_value,
        }
        if self.severity is not None:
            data["severity"] = self.severity.value
            data["fixHint"] = self.fix_hint
        if self.details:
            data["details"] = self.details
        if self.execution_error:
            data["executionError"] = True
        return data


class Recommendation(BaseModel):
    rule_id: str
    severity: Severity
    count: int
    fixes: List[str] = Field(default_factory=list)


class ValidationSummary(BaseModel):
    overall_score: int = 0
    total_checks: int = 0
    total_violations: int = 0
    total_passes: int = 0
    violations_by_severity: Dict[str, int] = Field(
        default_factory=lambda: {s.value: 0 for s in Severity}
    )
    healthcare_compliance: bool = False
    emergency_compliance: bool = True
    wcag_level: str = "Below AA"
    recommendations: List[Recommendation] = Field(default_factory=list)

    def to_report_dict(self) -> Dict[str, Any]:
        return {
            "overallScore": self.overall_score,
            "totalChecks": self.total_checks,
            "totalViolations": self.total_violations,
            "totalPasses": self.total_passes,
            "violationsBySeverity": dict(self.violations_by_severity),
            "healthcareCompliance": self.healthcare_compliance,
            "emergencyCompliance": self.emergency_compliance,
            "wcagLevel": self.wcag_level,
            "recommendations": [
                {"rule": r.rule_id, "severity": r.severity.value, "count": r.count, "fixes": r.fixes}
                for r in self.recommendations
            ],
        }


class ValidationResult(BaseModel):
    """Final, self-contained output of one validation run."""
    violations: List[Finding] = Field(default_factory=list)
    passes: List[Finding] = Field(default_factory=list)
    summary: ValidationSummary
    url: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_report_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "timestamp": self.timestamp.isoformat(),
            "summary": self.summary.to_report_dict(),
            "violations": [f.to_report_dict() for f in self.violations],
            "passes": [f.to_report_dict() for f in self.passes],
        }
