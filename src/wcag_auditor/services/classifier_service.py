# src/wcag_auditor/services/classifier_service.py
from typing import Callable, List, Tuple

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.model import HealthcareElementType
from wcag_auditor.settings import CategoryMarkers, ClassificationMarkers

Predicate = Callable[[ElementSnapshot], bool]


def marker_predicate(category: CategoryMarkers) -> Predicate:
    """
    Builds a predicate that matches when any marker appears in the class list,
    data-healthcare value, aria-label or text content (case-insensitive), or
    when data-healthcare equals one of the category's exact values.
    """
    markers = [m.lower() for m in category.markers]
    data_values = {v.lower() for v in category.data_values}

    def predicate(element: ElementSnapshot) -> bool:
        data_healthcare = (element.get_attr('data-healthcare') or "").strip().lower()
        if data_healthcare and data_healthcare in data_values:
            return True
        fields = (
            " ".join(element.class_list).lower(),
            data_healthcare,
            element.aria_label.lower(),
            element.text_content.lower(),
        )
        return any(marker in field for marker in markers for field in fields if field)

    return predicate


class ElementClassifier:
    """
    Assigns exactly one HealthcareElementType to an element.

    Categories are checked in priority order emergency > medical > primary;
    the first matching predicate wins and `general` is the fallback.
    """

    def __init__(self, markers: ClassificationMarkers):
        self.cascade: List[Tuple[Predicate, HealthcareElementType]] = [
            (marker_predicate(markers.emergency), HealthcareElementType.EMERGENCY),
            (marker_predicate(markers.medical), HealthcareElementType.MEDICAL),
            (marker_predicate(markers.primary), HealthcareElementType.PRIMARY),
        ]

    def classify(self, element: ElementSnapshot) -> HealthcareElementType:
        for predicate, category in self.cascade:
            if predicate(element):
                return category
        return HealthcareElementType.GENERAL
