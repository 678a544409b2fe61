# src/wcag_auditor/rules/color_contrast.py
from typing import Iterable

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.model import HealthcareElementType, Severity
from .base import HealthcareRule, RuleContext, RuleOutcome

NON_RENDERED_TAGS = frozenset({"script", "style", "template", "noscript", "head", "title", "meta"})


class ColorContrastRule(HealthcareRule):
    """
    Rule: text must meet the contrast ratio required by its healthcare context.

    emergency 7.0, medical 5.0, otherwise large text 3.0 and normal text 4.5.
    Elements whose foreground or background cannot be parsed are skipped and
    count neither as pass nor as violation.
    """
    key = "color_contrast"
    position = 1
    numeric = True

    def candidates(self, ctx: RuleContext) -> Iterable[ElementSnapshot]:
        return ctx.document.find_all(lambda el: el.has_text and el.tag not in NON_RENDERED_TAGS)

    def evaluate(self, element: ElementSnapshot, ctx: RuleContext, outcome: RuleOutcome) -> None:
        calc = ctx.calculator
        foreground = calc.parse_color(element.style.color)
        background = calc.parse_color(element.style.background_color)
        if foreground is None or background is None:
            return

        ratio = calc.contrast_ratio(foreground, background)
        element_type = ctx.classifier.classify(element)
        required = self.required_ratio(element, element_type, ctx)
        found = round(ratio, 2)

        if ratio < required:
            outcome.violations.append(self.violation(
                ctx, element.selector,
                severity=Severity.CRITICAL if element_type == HealthcareElementType.EMERGENCY else Severity.HIGH,
                context=element_type,
                message=f"Contrast {found}:1 is below the required {required}:1",
                fix_hint=f"Erhöhen Sie den Kontrast auf mindestens {required}:1 für {element_type.value}-Elemente",
                found=found,
                required=required,
            ))
        else:
            outcome.passes.append(self.passed(
                ctx, element.selector,
                context=element_type,
                message=f"Contrast {found}:1 meets the required {required}:1",
                found=found,
                required=required,
            ))

    def required_ratio(self, element: ElementSnapshot, element_type: HealthcareElementType, ctx: RuleContext) -> float:
        thresholds = self.definition(ctx.config).thresholds
        if element_type == HealthcareElementType.EMERGENCY:
            return thresholds["emergency"]
        if element_type == HealthcareElementType.MEDICAL:
            return thresholds["medical"]
        if ctx.calculator.is_large_text(element.style.font_size_px, element.style.font_weight):
            return thresholds["large"]
        return thresholds["normal"]


RULE = ColorContrastRule()
