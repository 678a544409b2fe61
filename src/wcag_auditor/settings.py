# src/wcag_auditor/settings.py
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator

# Rule keys in their fixed execution order.
RULE_KEYS = (
    "color_contrast",
    "touch_targets",
    "medical_terminology",
    "emergency_access",
    "patient_data_privacy",
    "medical_forms",
    "healthcare_navigation",
)

CONTRAST_KEYS = ("normal", "large", "emergency", "medical")
TOUCH_TARGET_KEYS = ("minimum", "healthcare", "primary", "emergency")


class RuleDefinition(BaseModel):
    """Declarative description of a single healthcare rule and its thresholds."""
    id: str
    wcag_level: str = "AA"
    healthcare_level: str = "Enhanced"
    thresholds: Dict[str, float] = Field(default_factory=dict)
    description: str = ""
    enabled: bool = True

    @field_validator('thresholds')
    @classmethod
    def positive_thresholds(cls, v: Dict[str, float]) -> Dict[str, float]:
        for key, value in v.items():
            if value <= 0:
                raise ValueError(f"threshold '{key}' must be positive, got {value}")
        return v


def _default_rules() -> Dict[str, RuleDefinition]:
    return {
        "color_contrast": RuleDefinition(
            id="healthcare-color-contrast",
            healthcare_level="Enhanced",
            thresholds={"normal": 4.5, "large": 3.0, "emergency": 7.0, "medical": 5.0},
            description="Healthcare applications require enhanced color contrast for medical safety",
        ),
        "touch_targets": RuleDefinition(
            id="healthcare-touch-targets",
            healthcare_level="Enhanced",
            thresholds={"minimum": 44, "healthcare": 56, "primary": 64, "emergency": 72},
            description="Healthcare touch targets must accommodate stressed and elderly users",
        ),
        "medical_terminology": RuleDefinition(
            id="healthcare-medical-terminology",
            healthcare_level="Medical",
            description="Medical terminology must be accessible to non-medical users",
        ),
        "emergency_access": RuleDefinition(
            id="healthcare-emergency-access",
            wcag_level="AAA",
            healthcare_level="Critical",
            description="Emergency features must meet highest accessibility standards",
        ),
        "patient_data_privacy": RuleDefinition(
            id="healthcare-patient-privacy",
            healthcare_level="Legal",
            description="Patient data collection must meet GDPR accessibility requirements",
        ),
        "medical_forms": RuleDefinition(
            id="healthcare-medical-forms",
            healthcare_level="Enhanced",
            description="Medical forms require enhanced accessibility for patient safety",
        ),
        "healthcare_navigation": RuleDefinition(
            id="healthcare-navigation",
            healthcare_level="Enhanced",
            description="Healthcare navigation must guide users efficiently to medical services",
        ),
    }


class CategoryMarkers(BaseModel):
    """Substrings that place an element into one healthcare category."""
    markers: List[str] = Field(default_factory=list)
    data_values: List[str] = Field(default_factory=list)  # exact data-healthcare values


class ClassificationMarkers(BaseModel):
    emergency: CategoryMarkers = Field(default_factory=lambda: CategoryMarkers(
        markers=["emergency", "notfall"], data_values=["emergency"]))
    medical: CategoryMarkers = Field(default_factory=lambda: CategoryMarkers(
        markers=["medical", "healthcare", "medizin"], data_values=["medical", "form"]))
    primary: CategoryMarkers = Field(default_factory=lambda: CategoryMarkers(
        markers=["primary", "cta"]))


class EmergencySelectors(BaseModel):
    data_values: List[str] = Field(default_factory=lambda: ["emergency"])
    classes: List[str] = Field(default_factory=lambda: ["emergency-banner", "emergency-contact"])
    aria_label_markers: List[str] = Field(default_factory=lambda: ["notfall", "emergency"])


class PrivacyPatterns(BaseModel):
    form_data_values: List[str] = Field(default_factory=lambda: ["form"])
    medical_field_patterns: List[str] = Field(
        default_factory=lambda: ["medical", "health", "patient", "symptom", "concern"])
    indicator_attributes: List[str] = Field(default_factory=lambda: ["data-privacy"])
    indicator_classes: List[str] = Field(default_factory=lambda: ["privacy-indicator"])
    aria_label_markers: List[str] = Field(default_factory=lambda: ["dsgvo", "datenschutz"])
    consent_checkbox_names: List[str] = Field(default_factory=lambda: ["privacy", "consent"])


class FormPatterns(BaseModel):
    control_roles: List[str] = Field(default_factory=lambda: ["textbox", "combobox", "listbox"])
    skipped_input_types: List[str] = Field(
        default_factory=lambda: ["hidden", "submit", "button", "reset", "image"])
    medical_name_patterns: List[str] = Field(default_factory=lambda: ["medical", "health", "symptom"])
    medical_text_patterns: List[str] = Field(default_factory=lambda: ["medizin"])
    required_indicator_class: str = "required-indicator"


class NavigationPatterns(BaseModel):
    skip_link_hrefs: List[str] = Field(default_factory=lambda: ["#emergency", "#notfall"])
    skip_link_classes: List[str] = Field(default_factory=lambda: ["skip-to-emergency"])
    specialty_hrefs: List[str] = Field(default_factory=lambda: ["kardiologie", "onkologie", "gallenblase"])
    specialty_data_values: List[str] = Field(default_factory=lambda: ["navigation"])
    specialty_classes: List[str] = Field(default_factory=lambda: ["medical-specialty-nav"])
    specialty_aria_markers: List[str] = Field(default_factory=lambda: ["fachbereich", "spezialist"])


class ValidationOptions(BaseModel):
    strict_mode: bool = False       # CI gate also fails on high violations
    emergency_required: bool = True
    mobile_first: bool = True       # evaluate touch targets


DEFAULT_MEDICAL_TERMS = [
    'kardiologie', 'onkologie', 'nephrologie', 'gallenblase', 'schilddrüse',
    'intensivmedizin', 'zweitmeinung', 'diagnose', 'anamnese', 'therapie',
    'pathologie', 'radiologie', 'endokrinologie', 'gastroenterologie',
    'dermatologie', 'pneumologie', 'rheumatologie', 'neurologie',
    'orthopädie', 'urologie', 'gynäkologie', 'hno', 'ophthalmologie',
]


class RuleConfiguration(BaseModel):
    """
    Complete threshold table for one validation run.

    Injected into the ValidationController; nothing in the engine reads
    configuration from module state.
    """
    rules: Dict[str, RuleDefinition] = Field(default_factory=_default_rules)
    markers: ClassificationMarkers = Field(default_factory=ClassificationMarkers)
    medical_terms: List[str] = Field(default_factory=lambda: list(DEFAULT_MEDICAL_TERMS))
    explanation_markers: List[str] = Field(default_factory=lambda: ["bedeutet", "ist", "bezeichnet"])
    emergency_selectors: EmergencySelectors = Field(default_factory=EmergencySelectors)
    privacy_patterns: PrivacyPatterns = Field(default_factory=PrivacyPatterns)
    form_patterns: FormPatterns = Field(default_factory=FormPatterns)
    navigation_patterns: NavigationPatterns = Field(default_factory=NavigationPatterns)
    options: ValidationOptions = Field(default_factory=ValidationOptions)

    @field_validator('medical_terms')
    @classmethod
    def lowercase_terms(cls, v: List[str]) -> List[str]:
        return [term.strip().lower() for term in v if term and term.strip()]

    @model_validator(mode='after')
    def check_rule_table(self):
        missing = [key for key in RULE_KEYS if key not in self.rules]
        if missing:
            raise ValueError(f"missing rule definitions: {', '.join(missing)}")

        contrast = self.rules["color_contrast"].thresholds
        for key in CONTRAST_KEYS:
            if key not in contrast:
                raise ValueError(f"color_contrast threshold '{key}' is missing")
            if not 1.0 <= contrast[key] <= 21.0:
                raise ValueError(f"contrast ratio '{key}' must lie within 1..21, got {contrast[key]}")

        touch = self.rules["touch_targets"].thresholds
        for key in TOUCH_TARGET_KEYS:
            if key not in touch:
                raise ValueError(f"touch_targets threshold '{key}' is missing")
        return self

    def rule(self, key: str) -> RuleDefinition:
        return self.rules[key]
