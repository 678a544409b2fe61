# tests/core/test_form_rules.py
import pytest

from wcag_auditor.model import HealthcareElementType, Severity
from wcag_auditor.rules.medical_forms import RULE as FORMS_RULE
from wcag_auditor.rules.patient_data_privacy import RULE as PRIVACY_RULE, is_secure_target


# --- Patient data privacy ---

def _medical_form(el, *extra, action=None, data_healthcare=None):
    attrs = {}
    if action is not None:
        attrs["action"] = action
    if data_healthcare:
        attrs["data-healthcare"] = data_healthcare
    return el("form", attrs=attrs, children=[
        el("textarea", attrs={"name": "symptom_description"}),
        *extra,
    ])


def test_compliant_medical_form_passes(make_ctx, el):
    consent = el("input", attrs={"type": "checkbox", "name": "privacy_consent"})
    outcome = PRIVACY_RULE.run(make_ctx(_medical_form(el, consent, action="https://example.de/api")))
    assert outcome.violations == []
    assert len(outcome.passes) == 1
    assert outcome.passes[0].details["medical_field_count"] == 1


def test_missing_privacy_indicator_is_high(make_ctx, el):
    outcome = PRIVACY_RULE.run(make_ctx(_medical_form(el, action="https://example.de/api")))
    assert [v.severity for v in outcome.violations] == [Severity.HIGH]
    assert outcome.passes == []


def test_insecure_submission_is_critical(make_ctx, el):
    indicator = el("p", "Ihre Daten sind geschützt", classes=["privacy-indicator"])
    outcome = PRIVACY_RULE.run(make_ctx(_medical_form(el, indicator, action="http://example.de/api")))
    assert [v.severity for v in outcome.violations] == [Severity.CRITICAL]
    assert outcome.violations[0].healthcare_context == HealthcareElementType.MEDICAL


def test_both_privacy_problems_reported_separately(make_ctx, el):
    outcome = PRIVACY_RULE.run(make_ctx(_medical_form(el, action="http://example.de/api")))
    assert [v.severity for v in outcome.violations] == [Severity.HIGH, Severity.CRITICAL]


def test_aria_label_privacy_marker(make_ctx, el):
    marker = el("div", attrs={"aria-label": "DSGVO Hinweis"})
    outcome = PRIVACY_RULE.run(make_ctx(_medical_form(el, marker, data_healthcare="form")))
    assert outcome.violations == []


def test_forms_without_medical_fields_are_ignored(make_ctx, el):
    form = el("form", attrs={"action": "http://example.de"}, children=[el("input", attrs={"name": "email"})])
    outcome = PRIVACY_RULE.run(make_ctx(form))
    assert outcome.violations == [] and outcome.passes == []


def test_placeholder_marks_medical_field(make_ctx, el):
    form = el("form", children=[el("input", attrs={"name": "q", "placeholder": "Patient ID"})])
    outcome = PRIVACY_RULE.run(make_ctx(form))
    assert len(outcome.violations) == 1


@pytest.mark.parametrize("action, url, secure", [
    (None, None, True),
    ("", "http://example.de", True),
    ("/api/contact", None, True),
    ("/api/contact", "https://example.de/kontakt", True),
    ("/api/contact", "http://example.de/kontakt", False),
    ("https://example.de/api", None, True),
    ("http://example.de/api", "https://example.de", False),
])
def test_is_secure_target(action, url, secure):
    assert is_secure_target(action, url) is secure


# --- Medical forms ---

def test_labelled_control_passes(make_ctx, el):
    outcome = FORMS_RULE.run(make_ctx(
        el("label", "E-Mail", attrs={"for": "email"}),
        el("input", attrs={"id": "email", "name": "email", "type": "email"}),
    ))
    assert outcome.violations == []
    assert outcome.passes[0].details["features"] == ["explicit label"]


def test_wrapping_label_counts(make_ctx, el):
    outcome = FORMS_RULE.run(make_ctx(el("label", "Name", children=[el("input", attrs={"name": "name"})])))
    assert outcome.violations == []


def test_missing_label_is_medium(make_ctx, el):
    outcome = FORMS_RULE.run(make_ctx(el("input", attrs={"name": "city"})))
    assert [(v.message, v.severity) for v in outcome.violations] == [("Missing explicit label", Severity.MEDIUM)]


def test_required_field_indicators(make_ctx, el):
    outcome = FORMS_RULE.run(make_ctx(
        el("label", "Name *", attrs={"for": "n1"}),
        el("input", attrs={"id": "n1", "name": "n1", "required": ""}),
        el("input", attrs={"name": "n2", "aria-label": "Ort", "aria-required": "true"}),
    ))
    assert [v.message for v in outcome.violations] == ["Required field missing visual indicator"]
    assert outcome.violations[0].element_selector == "input"


def test_required_indicator_class_in_parent(make_ctx, el):
    group = el("div", children=[
        el("input", attrs={"name": "plz", "aria-label": "PLZ", "required": ""}),
        el("span", "*", classes=["required-indicator"]),
    ])
    outcome = FORMS_RULE.run(make_ctx(group))
    assert outcome.violations == []


def test_invalid_field_needs_error_description(make_ctx, el):
    outcome = FORMS_RULE.run(make_ctx(
        el("input", attrs={"id": "a", "aria-label": "A", "aria-invalid": "true"}),
        el("input", attrs={"id": "b", "aria-label": "B", "aria-invalid": "true", "aria-describedby": "b-error"}),
        el("p", "Ungültig", attrs={"id": "b-error"}),
    ))
    assert [(v.element_selector, v.message) for v in outcome.violations] == [
        ("#a", "Invalid field missing error description"),
    ]


def test_medical_field_issues_are_high_and_separate(make_ctx, el):
    outcome = FORMS_RULE.run(make_ctx(el("textarea", attrs={"name": "health_history", "required": ""})))
    assert [v.message for v in outcome.violations] == [
        "Missing explicit label",
        "Required field missing visual indicator",
        "Medical field missing helpful description",
    ]
    assert all(v.severity == Severity.HIGH for v in outcome.violations)
    assert all(v.healthcare_context == HealthcareElementType.MEDICAL for v in outcome.violations)


def test_medical_context_from_label_text(make_ctx, el):
    outcome = FORMS_RULE.run(make_ctx(
        el("label", "Medizinische Vorgeschichte", attrs={"for": "hist"}),
        el("textarea", attrs={"id": "hist", "name": "hist", "aria-describedby": "hist-help"}),
        el("p", "Bitte nennen Sie frühere Behandlungen", attrs={"id": "hist-help"}),
    ))
    assert outcome.violations == []
    assert outcome.passes[0].details["medical_field"] is True


def test_hidden_and_button_inputs_are_not_controls(make_ctx, el):
    outcome = FORMS_RULE.run(make_ctx(
        el("input", attrs={"type": "hidden", "name": "token"}),
        el("input", attrs={"type": "submit", "value": "Senden"}),
        el("div", attrs={"role": "combobox"}),
    ))
    assert len(outcome.violations) == 1
    assert outcome.violations[0].element_selector == "div"
