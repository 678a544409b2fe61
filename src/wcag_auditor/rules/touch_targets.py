# src/wcag_auditor/rules/touch_targets.py
from typing import Iterable

from wcag_auditor.dom.core import NATIVE_INTERACTIVE_TAGS, ElementSnapshot
from wcag_auditor.model import HealthcareElementType, Severity
from .base import HealthcareRule, RuleContext, RuleOutcome


def is_interactive(element: ElementSnapshot) -> bool:
    """button, a, input, select, textarea, [role=button], [tabindex], [onclick]"""
    return (
        element.tag in NATIVE_INTERACTIVE_TAGS
        or element.role == "button"
        or element.has_attr("tabindex")
        or element.has_attr("onclick")
    )


class TouchTargetRule(HealthcareRule):
    """
    Rule: interactive elements need a minimum tappable size.

    emergency 72px, primary 64px, medical (healthcare context) 56px, default 44px,
    measured on the smaller side of the bounding box. Elements without a
    captured box cannot be measured and are skipped.
    """
    key = "touch_targets"
    position = 2
    numeric = True

    def candidates(self, ctx: RuleContext) -> Iterable[ElementSnapshot]:
        if not ctx.config.options.mobile_first:
            return []
        return ctx.document.find_all(lambda el: is_interactive(el) and el.box is not None)

    def evaluate(self, element: ElementSnapshot, ctx: RuleContext, outcome: RuleOutcome) -> None:
        min_dimension = element.box.min_dimension
        element_type = ctx.classifier.classify(element)
        required = self.required_size(element_type, ctx)

        if min_dimension < required:
            outcome.violations.append(self.violation(
                ctx, element.selector,
                severity=Severity.CRITICAL if element_type == HealthcareElementType.EMERGENCY else Severity.HIGH,
                context=element_type,
                message=f"Touch target {min_dimension:g}px is smaller than {required:g}px",
                fix_hint=f"Vergrößern Sie das Touch-Target auf mindestens {required:g}px für {element_type.value}-Elemente",
                found=min_dimension,
                required=required,
            ))
        else:
            outcome.passes.append(self.passed(
                ctx, element.selector,
                context=element_type,
                message=f"Touch target {min_dimension:g}px meets {required:g}px",
                found=min_dimension,
                required=required,
            ))

    def required_size(self, element_type: HealthcareElementType, ctx: RuleContext) -> float:
        thresholds = self.definition(ctx.config).thresholds
        if element_type == HealthcareElementType.EMERGENCY:
            return thresholds["emergency"]
        if element_type == HealthcareElementType.PRIMARY:
            return thresholds["primary"]
        if element_type == HealthcareElementType.MEDICAL:
            return thresholds["healthcare"]
        return thresholds["minimum"]


RULE = TouchTargetRule()
