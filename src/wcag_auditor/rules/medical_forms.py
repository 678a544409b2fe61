# src/wcag_auditor/rules/medical_forms.py
from typing import Iterable, List

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.model import HealthcareElementType, Severity
from wcag_auditor.settings import FormPatterns
from .base import HealthcareRule, RuleContext, RuleOutcome, contains_any

CONTROL_TAGS = frozenset({"input", "select", "textarea"})


def is_form_control(element: ElementSnapshot, patterns: FormPatterns) -> bool:
    if element.tag in CONTROL_TAGS:
        if element.tag == "input":
            return (element.get_attr("type") or "text").lower() not in patterns.skipped_input_types
        return True
    return element.role in patterns.control_roles


class MedicalFormRule(HealthcareRule):
    """
    Rule: every form control needs an explicit label, a visible required
    indicator when required, an error description when invalid, and medical
    fields need a helpful description.

    Each missing item is reported separately: high for medical-context
    fields, medium otherwise. A control without any problem yields one pass.
    """
    key = "medical_forms"
    position = 6

    def candidates(self, ctx: RuleContext) -> Iterable[ElementSnapshot]:
        patterns = ctx.config.form_patterns
        return ctx.document.find_all(lambda el: is_form_control(el, patterns))

    def evaluate(self, control: ElementSnapshot, ctx: RuleContext, outcome: RuleOutcome) -> None:
        doc = ctx.document
        patterns = ctx.config.form_patterns
        labels = doc.labels_for(control)
        label_text = " ".join(lbl.text_content for lbl in labels)
        described_by = control.get_attr("aria-describedby") or ""

        medical = self._is_medical_field(control, label_text, patterns)
        severity = Severity.HIGH if medical else Severity.MEDIUM
        context = HealthcareElementType.MEDICAL if medical else ctx.classifier.classify(control)

        problems: List[tuple] = []
        features: List[str] = []

        if control.aria_label or control.get_attr("aria-labelledby") or labels:
            features.append("explicit label")
        else:
            problems.append((
                "Missing explicit label",
                "Verknüpfen Sie das Feld mit einem <label> oder setzen Sie aria-label",
            ))

        required = control.has_attr("required") or control.get_attr("aria-required") == "true"
        if required:
            if self._has_required_indicator(control, label_text, described_by, doc, patterns):
                features.append("required indicator")
            else:
                problems.append((
                    "Required field missing visual indicator",
                    "Kennzeichnen Sie Pflichtfelder sichtbar (z. B. mit *) und programmatisch",
                ))

        if control.get_attr("aria-invalid") == "true":
            if doc.resolves_ids(described_by):
                features.append("error description")
            else:
                problems.append((
                    "Invalid field missing error description",
                    "Verknüpfen Sie die Fehlermeldung über aria-describedby mit dem Feld",
                ))

        if medical:
            if doc.resolves_ids(described_by):
                features.append("medical description")
            else:
                problems.append((
                    "Medical field missing helpful description",
                    "Fügen Sie eine hilfreiche Beschreibung für das medizinische Feld hinzu (aria-describedby)",
                ))

        for message, fix in problems:
            outcome.violations.append(self.violation(
                ctx, control.selector, severity, context,
                message=message, fix_hint=fix, medical_field=medical,
            ))
        if not problems:
            outcome.passes.append(self.passed(
                ctx, control.selector, context,
                message="Form control is fully accessible",
                features=features, medical_field=medical,
            ))

    @staticmethod
    def _is_medical_field(control: ElementSnapshot, label_text: str, patterns: FormPatterns) -> bool:
        return (
            contains_any(control.get_attr("name"), patterns.medical_name_patterns)
            or contains_any(control.get_attr("placeholder"), patterns.medical_text_patterns)
            or contains_any(label_text, patterns.medical_text_patterns)
        )

    @staticmethod
    def _has_required_indicator(control, label_text, described_by, doc, patterns: FormPatterns) -> bool:
        if "*" in label_text:
            return True
        parent = doc.parent_of(control)
        if parent is not None and any(
                patterns.required_indicator_class in el.class_list for el in parent.iter_descendants()
        ):
            return True
        return "required" in described_by.lower()


RULE = MedicalFormRule()
