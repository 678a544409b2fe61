# src/wcag_auditor/rules/healthcare_navigation.py
from typing import Iterable, List

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.model import HealthcareElementType, Severity
from wcag_auditor.settings import NavigationPatterns
from .base import DOCUMENT_SELECTOR, HealthcareRule, RuleContext, RuleOutcome, contains_any


def is_skip_to_emergency(element: ElementSnapshot, patterns: NavigationPatterns) -> bool:
    if any(cls in patterns.skip_link_classes for cls in element.class_list):
        return True
    return element.tag == "a" and contains_any(element.get_attr("href"), patterns.skip_link_hrefs)


def is_navigation_landmark(element: ElementSnapshot) -> bool:
    return element.tag == "nav" or element.role == "navigation"


def is_specialty_marker(element: ElementSnapshot, patterns: NavigationPatterns) -> bool:
    data_value = (element.get_attr("data-healthcare") or "").strip().lower()
    return (
        data_value in patterns.specialty_data_values
        or any(cls in patterns.specialty_classes for cls in element.class_list)
        or contains_any(element.aria_label, patterns.specialty_aria_markers)
    )


class HealthcareNavigationRule(HealthcareRule):
    """
    Rule: the page offers a skip link to emergency contacts and at least one
    labelled navigation landmark. Medical specialty navigation earns a bonus pass
    but is never required.
    """
    key = "healthcare_navigation"
    position = 7

    def check_document(self, ctx: RuleContext, outcome: RuleOutcome) -> None:
        patterns = ctx.config.navigation_patterns
        skip_links = ctx.document.find_all(lambda el: is_skip_to_emergency(el, patterns))
        if skip_links:
            outcome.passes.append(self.passed(
                ctx, skip_links[0].selector, HealthcareElementType.GENERAL,
                message="Skip-to-emergency link present",
                count=len(skip_links),
            ))
        else:
            outcome.violations.append(self.violation(
                ctx, DOCUMENT_SELECTOR, Severity.HIGH, HealthcareElementType.GENERAL,
                message="No skip-to-emergency link found",
                fix_hint="Fügen Sie einen Skip-Link zu Notfall-Kontakten hinzu",
            ))

        landmarks = ctx.document.find_all(is_navigation_landmark)
        if not landmarks:
            outcome.violations.append(self.violation(
                ctx, DOCUMENT_SELECTOR, Severity.MEDIUM, HealthcareElementType.GENERAL,
                message="No main navigation found",
                fix_hint='Fügen Sie eine Hauptnavigation mit role="navigation" hinzu',
            ))
            return

        # One labelled landmark satisfies the page; otherwise the first one is reported
        labelled = [nav for nav in landmarks if nav.aria_label]
        if labelled:
            outcome.passes.append(self.passed(
                ctx, labelled[0].selector, HealthcareElementType.GENERAL,
                message=f'Navigation labelled "{labelled[0].aria_label}"',
            ))
        else:
            outcome.violations.append(self.violation(
                ctx, landmarks[0].selector, Severity.MEDIUM, HealthcareElementType.GENERAL,
                message="Navigation missing aria-label",
                fix_hint='Fügen Sie aria-label="Hauptnavigation für medizinische Dienste" hinzu',
            ))

    def candidates(self, ctx: RuleContext) -> Iterable[ElementSnapshot]:
        return ctx.document.find_all(is_navigation_landmark)

    def evaluate(self, nav: ElementSnapshot, ctx: RuleContext, outcome: RuleOutcome) -> None:
        patterns = ctx.config.navigation_patterns
        specialty_links: List[ElementSnapshot] = [
            el for el in nav.iter_descendants()
            if el.tag == "a" and contains_any(el.get_attr("href"), patterns.specialty_hrefs)
        ]
        if specialty_links or is_specialty_marker(nav, patterns):
            outcome.passes.append(self.passed(
                ctx, nav.selector, HealthcareElementType.MEDICAL,
                message=f"Medical specialty navigation ({len(specialty_links)} specialties)",
                specialty_links=len(specialty_links),
            ))


RULE = HealthcareNavigationRule()
