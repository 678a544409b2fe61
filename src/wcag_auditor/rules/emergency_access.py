# src/wcag_auditor/rules/emergency_access.py
from typing import Iterable, List

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.model import HealthcareElementType, Severity
from wcag_auditor.settings import EmergencySelectors
from .base import DOCUMENT_SELECTOR, HealthcareRule, RuleContext, RuleOutcome, contains_any


def matches_emergency_selector(element: ElementSnapshot, selectors: EmergencySelectors) -> bool:
    data_value = (element.get_attr("data-healthcare") or "").strip().lower()
    if data_value and data_value in {v.lower() for v in selectors.data_values}:
        return True
    if any(cls in selectors.classes for cls in element.class_list):
        return True
    return contains_any(element.aria_label, selectors.aria_label_markers)


class EmergencyAccessRule(HealthcareRule):
    """
    Rule: the page must expose emergency contacts, and each one must be
    visible, keyboard-focusable and carry an accessible name.
    """
    key = "emergency_access"
    position = 4

    def _emergency_elements(self, ctx: RuleContext) -> List[ElementSnapshot]:
        selectors = ctx.config.emergency_selectors
        return ctx.document.find_all(lambda el: matches_emergency_selector(el, selectors))

    def check_document(self, ctx: RuleContext, outcome: RuleOutcome) -> None:
        if self._emergency_elements(ctx) or not ctx.config.options.emergency_required:
            return
        outcome.violations.append(self.violation(
            ctx, DOCUMENT_SELECTOR,
            severity=Severity.CRITICAL,
            context=HealthcareElementType.EMERGENCY,
            message="No emergency contact elements found",
            fix_hint="Fügen Sie sichtbare Notfall-Kontaktinformationen hinzu (Banner, Button, oder Link)",
        ))

    def candidates(self, ctx: RuleContext) -> Iterable[ElementSnapshot]:
        return self._emergency_elements(ctx)

    def evaluate(self, element: ElementSnapshot, ctx: RuleContext, outcome: RuleOutcome) -> None:
        visible = not self._hidden_in_tree(element, ctx)
        focusable = element.is_keyboard_focusable
        named = bool(element.aria_label or element.text_content.strip())
        issues = []

        if not visible:
            issues.append(self.violation(
                ctx, element.selector, Severity.CRITICAL, HealthcareElementType.EMERGENCY,
                message="Emergency element not visible",
                fix_hint="Stellen Sie sicher, dass Notfall-Elemente immer sichtbar sind",
            ))
        if not focusable:
            issues.append(self.violation(
                ctx, element.selector, Severity.CRITICAL, HealthcareElementType.EMERGENCY,
                message="Emergency element not keyboard accessible",
                fix_hint='Fügen Sie tabindex="0" hinzu oder verwenden Sie button/a Element',
            ))
        if not named:
            issues.append(self.violation(
                ctx, element.selector, Severity.HIGH, HealthcareElementType.EMERGENCY,
                message="Emergency element missing accessible name",
                fix_hint="Fügen Sie aria-label mit Notfall-Kontext hinzu",
            ))

        if issues:
            outcome.violations.extend(issues)
        else:
            outcome.passes.append(self.passed(
                ctx, element.selector, HealthcareElementType.EMERGENCY,
                message="Emergency element is visible, focusable and named",
                visible=visible, keyboard_accessible=focusable, accessible_name=named,
            ))

    @staticmethod
    def _hidden_in_tree(element: ElementSnapshot, ctx: RuleContext) -> bool:
        if element.is_hidden:
            return True
        return any(
            (a.style.display or "").lower() == "none" or a.has_attr("hidden")
            for a in ctx.document.ancestors_of(element)
        )


RULE = EmergencyAccessRule()
