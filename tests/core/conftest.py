# tests/core/conftest.py
import pytest

from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.dom.models import SnapshotDocument
from wcag_auditor.rules.base import RuleContext
from wcag_auditor.services.classifier_service import ElementClassifier
from wcag_auditor.services.contrast_service import ColorCalculator
from wcag_auditor.settings import RuleConfiguration


def make_element(tag, text="", classes=None, attrs=None, style=None, box=None, children=None):
    """Compact ElementSnapshot factory used throughout the tests."""
    data = {
        "tag": tag,
        "text": text,
        "classList": classes or [],
        "attrs": attrs or {},
        "style": style or {},
        "children": children or [],
    }
    if box is not None:
        data["box"] = {"width": box[0], "height": box[1]}
    return ElementSnapshot.model_validate(data)


@pytest.fixture
def el():
    return make_element


@pytest.fixture
def config():
    return RuleConfiguration()


@pytest.fixture
def make_ctx(config):
    """Builds a RuleContext around a body element containing the given children."""
    def factory(*children, calculator=None, cfg=None, url=None):
        cfg = cfg or config
        root = make_element("body", children=list(children))
        return RuleContext(
            document=SnapshotDocument(root=root, url=url),
            classifier=ElementClassifier(cfg.markers),
            calculator=calculator or ColorCalculator(),
            config=cfg,
        )
    return factory
