# src/wcag_auditor/rules/medical_terminology.py
import re
from typing import Iterable, List, Optional

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.model import HealthcareElementType, Severity
from .base import HealthcareRule, RuleContext, RuleOutcome
from .color_contrast import NON_RENDERED_TAGS

# Terms up to this length only match as whole words ('hno' must not hit 'Wohnort').
SHORT_TERM_LENGTH = 3
SIBLINGS_TO_SCAN = 2


def term_in_text(term: str, text: str) -> bool:
    if len(term) <= SHORT_TERM_LENGTH:
        return re.search(rf"\b{re.escape(term)}\b", text) is not None
    return term in text


class MedicalTerminologyRule(HealthcareRule):
    """
    Rule: every German medical term needs an explanation for lay readers.

    Accepted explanations: aria-describedby pointing at an existing node, a
    title attribute, one of the next two siblings explaining the term
    ("bedeutet", "ist", "bezeichnet"), or a role=tooltip descendant.
    """
    key = "medical_terminology"
    position = 3

    def candidates(self, ctx: RuleContext) -> Iterable[ElementSnapshot]:
        return ctx.document.find_all(lambda el: el.has_text and el.tag not in NON_RENDERED_TAGS)

    def evaluate(self, element: ElementSnapshot, ctx: RuleContext, outcome: RuleOutcome) -> None:
        text = element.text.lower()
        for term in ctx.config.medical_terms:
            if not term_in_text(term, text):
                continue

            explanation = self.find_explanation(element, ctx)
            if explanation is None:
                outcome.violations.append(self.violation(
                    ctx, element.selector,
                    severity=Severity.MEDIUM,
                    context=HealthcareElementType.MEDICAL,
                    message=f'Medical term "{term}" has no explanation',
                    fix_hint=(
                        f'Fügen Sie eine Erklärung für den medizinischen Begriff "{term}" hinzu '
                        f'(aria-describedby, title, oder Tooltip)'
                    ),
                    medical_term=term,
                ))
            else:
                outcome.passes.append(self.passed(
                    ctx, element.selector,
                    context=HealthcareElementType.MEDICAL,
                    message=f'Medical term "{term}" is explained via {explanation}',
                    medical_term=term,
                    explanation=explanation,
                ))

    def find_explanation(self, element: ElementSnapshot, ctx: RuleContext) -> Optional[str]:
        """Returns how the term is explained, or None."""
        if ctx.document.resolves_ids(element.get_attr("aria-describedby")):
            return "aria-describedby"
        if (element.get_attr("title") or "").strip():
            return "title"
        if self._sibling_explains(element, ctx):
            return "text"
        if any(d.role == "tooltip" for d in element.iter_descendants()):
            return "tooltip"
        return None

    def _sibling_explains(self, element: ElementSnapshot, ctx: RuleContext) -> bool:
        markers: List[str] = ctx.config.explanation_markers
        for sibling in ctx.document.siblings_after(element, limit=SIBLINGS_TO_SCAN):
            sibling_text = sibling.text_content.lower()
            if any(re.search(rf"\b{re.escape(m.lower())}\b", sibling_text) for m in markers):
                return True
        return False


RULE = MedicalTerminologyRule()
