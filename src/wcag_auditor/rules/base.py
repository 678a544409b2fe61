# src/wcag_auditor/rules/base.py
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.dom.models import SnapshotDocument
from wcag_auditor.exceptions import RuleExecutionError
from wcag_auditor.model import Finding, HealthcareElementType, Severity
from wcag_auditor.services.classifier_service import ElementClassifier
from wcag_auditor.services.contrast_service import ColorCalculator
from wcag_auditor.settings import RuleConfiguration, RuleDefinition

logger = logging.getLogger(__name__)

DOCUMENT_SELECTOR = "document"


@dataclass(frozen=True)
class RuleContext:
    """Read-only inputs shared by all rules during one validation run."""
    document: SnapshotDocument
    classifier: ElementClassifier
    calculator: ColorCalculator
    config: RuleConfiguration


@dataclass
class RuleOutcome:
    violations: List[Finding] = field(default_factory=list)
    passes: List[Finding] = field(default_factory=list)


class HealthcareRule:
    """
    Base class for the healthcare rules.

    Subclasses set `key` (entry in the configuration's rule table) and
    `position` (fixed execution order), then implement `candidates` and
    `evaluate` for per-element checks and/or `check_document` for
    document-level checks. Any exception raised while collecting candidates
    or evaluating an element is wrapped in a RuleExecutionError carrying the
    partial outcome.
    """
    key: str = ""
    position: int = 0
    numeric: bool = False

    def definition(self, config: RuleConfiguration) -> RuleDefinition:
        return config.rule(self.key)

    def rule_id(self, config: RuleConfiguration) -> str:
        return self.definition(config).id

    def run(self, ctx: RuleContext) -> RuleOutcome:
        outcome = RuleOutcome()
        rule_id = self.rule_id(ctx.config)

        try:
            self.check_document(ctx, outcome)
        except Exception as e:
            raise RuleExecutionError(rule_id, DOCUMENT_SELECTOR, e, partial=outcome) from e

        try:
            elements = list(self.candidates(ctx))
        except Exception as e:
            raise RuleExecutionError(rule_id, DOCUMENT_SELECTOR, e, partial=outcome) from e

        for element in elements:
            try:
                self.evaluate(element, ctx, outcome)
            except Exception as e:
                raise RuleExecutionError(rule_id, element.selector, e, partial=outcome) from e

        logger.debug(
            "%s: %d violations, %d passes", rule_id, len(outcome.violations), len(outcome.passes)
        )
        return outcome

    # --- Hooks ---

    def check_document(self, ctx: RuleContext, outcome: RuleOutcome) -> None:
        return None

    def candidates(self, ctx: RuleContext) -> Iterable[ElementSnapshot]:
        return ()

    def evaluate(self, element: ElementSnapshot, ctx: RuleContext, outcome: RuleOutcome) -> None:
        return None

    # --- Finding factories ---

    def violation(
            self,
            ctx: RuleContext,
            selector: str,
            severity: Severity,
            context: HealthcareElementType,
            message: str,
            fix_hint: str,
            found: Optional[float] = None,
            required: Optional[float] = None,
            **details: Any
    ) -> Finding:
        return Finding(
            rule_id=self.rule_id(ctx.config),
            element_selector=selector,
            severity=severity,
            healthcare_context=context,
            message=message,
            found_value=found,
            required_value=required,
            fix_hint=fix_hint,
            details=details,
        )

    def passed(
            self,
            ctx: RuleContext,
            selector: str,
            context: HealthcareElementType,
            message: str,
            found: Optional[float] = None,
            required: Optional[float] = None,
            **details: Any
    ) -> Finding:
        return Finding(
            rule_id=self.rule_id(ctx.config),
            element_selector=selector,
            healthcare_context=context,
            message=message,
            found_value=found,
            required_value=required,
            details=details,
        )


def contains_any(haystack: Optional[str], needles: Iterable[str]) -> bool:
    """Case-insensitive substring check."""
    if not haystack:
        return False
    lowered = haystack.lower()
    return any(n.lower() in lowered for n in needles)
