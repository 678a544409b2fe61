# src/wcag_auditor/rules/patient_data_privacy.py
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.model import HealthcareElementType, Severity
from wcag_auditor.settings import PrivacyPatterns
from .base import HealthcareRule, RuleContext, RuleOutcome, contains_any

FIELD_TAGS = frozenset({"input", "textarea", "select"})


def is_medical_field(element: ElementSnapshot, patterns: PrivacyPatterns) -> bool:
    if element.tag not in FIELD_TAGS:
        return False
    return (
        contains_any(element.get_attr("name"), patterns.medical_field_patterns)
        or contains_any(element.get_attr("placeholder"), patterns.medical_field_patterns)
    )


def is_privacy_indicator(element: ElementSnapshot, patterns: PrivacyPatterns) -> bool:
    if any(element.has_attr(attr) for attr in patterns.indicator_attributes):
        return True
    if any(cls in patterns.indicator_classes for cls in element.class_list):
        return True
    if contains_any(element.aria_label, patterns.aria_label_markers):
        return True
    return (
        element.tag == "input"
        and (element.get_attr("type") or "").lower() == "checkbox"
        and contains_any(element.get_attr("name"), patterns.consent_checkbox_names)
    )


def is_secure_target(action: Optional[str], document_url: Optional[str]) -> bool:
    """
    A form without action posts back to its own page and is judged secure.
    Relative actions resolve against the document URL when it is known.
    """
    if not action or not action.strip():
        return True
    target = urljoin(document_url, action.strip()) if document_url else action.strip()
    scheme = urlparse(target).scheme.lower()
    if not scheme:
        return True
    return scheme == "https"


class PatientDataPrivacyRule(HealthcareRule):
    """
    Rule: forms collecting patient data need a GDPR privacy/consent indicator
    (high) and must submit over HTTPS (critical).
    """
    key = "patient_data_privacy"
    position = 5

    def candidates(self, ctx: RuleContext) -> Iterable[ElementSnapshot]:
        data_values = {v.lower() for v in ctx.config.privacy_patterns.form_data_values}
        return ctx.document.find_all(
            lambda el: el.tag == "form"
            or (el.get_attr("data-healthcare") or "").strip().lower() in data_values
        )

    def evaluate(self, form: ElementSnapshot, ctx: RuleContext, outcome: RuleOutcome) -> None:
        patterns = ctx.config.privacy_patterns
        descendants: List[ElementSnapshot] = list(form.iter_descendants())
        medical_fields = [el for el in descendants if is_medical_field(el, patterns)]
        if not medical_fields:
            return

        has_indicator = any(is_privacy_indicator(el, patterns) for el in descendants)
        secure = is_secure_target(form.get_attr("action"), ctx.document.url)

        if not has_indicator:
            outcome.violations.append(self.violation(
                ctx, form.selector, Severity.HIGH, HealthcareElementType.MEDICAL,
                message="Medical form missing privacy indicator",
                fix_hint="Fügen Sie DSGVO/Datenschutz Indikatoren für medizinische Formulare hinzu",
                medical_field_count=len(medical_fields),
            ))
        if not secure:
            outcome.violations.append(self.violation(
                ctx, form.selector, Severity.CRITICAL, HealthcareElementType.MEDICAL,
                message="Medical form not using HTTPS",
                fix_hint="Verwenden Sie HTTPS für alle medizinischen Datenübertragungen",
                action=form.get_attr("action"),
            ))
        if has_indicator and secure:
            outcome.passes.append(self.passed(
                ctx, form.selector, HealthcareElementType.MEDICAL,
                message="Medical form shows a privacy indicator and submits securely",
                medical_field_count=len(medical_fields),
            ))


RULE = PatientDataPrivacyRule()
