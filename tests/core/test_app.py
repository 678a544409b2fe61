# tests/core/test_app.py
import json

import pytest
import requests

from wcag_auditor import app
from wcag_auditor.model import Severity, ValidationResult, ValidationSummary

SKIP_LINK = {"tag": "a", "text": "Zum Notfall", "attrs": {"href": "#notfall"},
             "style": {"color": "#000000", "backgroundColor": "#ffffff"}}
NAVIGATION = {"tag": "nav", "attrs": {"aria-label": "Hauptnavigation"}, "children": [
    {"tag": "a", "text": "Start", "attrs": {"href": "/"},
     "style": {"color": "#000000", "backgroundColor": "#ffffff"}},
]}


def emergency_button(height):
    return {"tag": "button", "text": "Notruf 112", "classList": ["emergency-banner"],
            "style": {"color": "#ffffff", "backgroundColor": "#004166"},
            "box": {"width": 80, "height": height}}


def write_snapshot(path, *children):
    path.write_text(json.dumps({"url": "https://klinik.example", "root": {"tag": "body", "children": list(children)}}))
    return str(path)


COMPLIANT_HTML = """<html><body>
<a href="#notfall">Zum Notfall</a>
<nav aria-label="Hauptnavigation"><a href="/">Start</a></nav>
<button class="emergency-banner" style="width: 80px; height: 80px; color: #ffffff; background-color: #004166">Notruf 112</button>
</body></html>"""


def test_compliant_snapshot_exits_zero(tmp_path, capsys):
    target = write_snapshot(tmp_path / "page.json", SKIP_LINK, NAVIGATION, emergency_button(80))
    assert app.main(["validate", target]) == 0
    assert "Overall Score: 100%" in capsys.readouterr().out


def test_critical_violation_exits_one(tmp_path):
    target = write_snapshot(tmp_path / "page.json", SKIP_LINK, NAVIGATION, emergency_button(40))
    assert app.main(["validate", target]) == 1


def test_html_file_is_accepted(tmp_path):
    page = tmp_path / "page.html"
    page.write_text(COMPLIANT_HTML, encoding="utf-8")
    assert app.main(["validate", str(page)]) == 0


def test_missing_emergency_contact(tmp_path):
    target = write_snapshot(tmp_path / "page.json", SKIP_LINK, NAVIGATION)
    assert app.main(["validate", target]) == 1
    assert app.main(["validate", target, "--no-emergency"]) == 0
    assert app.main(["validate", target, "--profile", "development"]) == 0


def test_no_mobile_skips_touch_targets(tmp_path):
    target = write_snapshot(tmp_path / "page.json", SKIP_LINK, NAVIGATION, emergency_button(40))
    assert app.main(["validate", target, "--no-mobile"]) == 0


def test_output_writes_report(tmp_path):
    target = write_snapshot(tmp_path / "page.json", SKIP_LINK, NAVIGATION, emergency_button(40))
    output = tmp_path / "reports" / "wcag.json"
    app.main(["validate", target, "--output", str(output), "--workers", "3"])

    report = json.loads(output.read_text(encoding="utf-8"))
    assert report["url"] == "https://klinik.example"
    assert report["summary"]["emergencyCompliance"] is False
    assert report["summary"]["violationsBySeverity"]["critical"] == 1
    violation = report["violations"][0]
    assert violation["ruleId"] == "healthcare-touch-targets"
    assert violation["foundValue"] == 40
    assert violation["requiredValue"] == 72


@pytest.mark.parametrize("args", [
    ["validate", "does-not-exist.json"],
    ["validate", "{target}", "--profile", "staging"],
    ["validate", "{target}", "--config", "missing-thresholds.json"],
])
def test_fatal_errors_exit_one(tmp_path, capsys, args):
    target = write_snapshot(tmp_path / "page.json", SKIP_LINK)
    args = [a.replace("{target}", target) for a in args]
    assert app.main(args) == 1
    assert "validation failed" in capsys.readouterr().err


def test_malformed_snapshot_exits_one(tmp_path):
    page = tmp_path / "page.json"
    page.write_text("{not json")
    assert app.main(["validate", str(page)]) == 1


def test_missing_subcommand_prints_help(capsys):
    assert app.main([]) == 1
    assert "validate" in capsys.readouterr().out


class FakeResponse:
    text = COMPLIANT_HTML

    def raise_for_status(self):
        return None


def test_url_target_is_fetched(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse()

    monkeypatch.setattr(app.requests, "get", fake_get)
    document = app.load_snapshot("https://klinik.example/")
    assert calls == [("https://klinik.example/", app.FETCH_TIMEOUT_SECONDS)]
    assert document.url == "https://klinik.example/"


def test_unreachable_url_exits_one(monkeypatch):
    def fake_get(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(app.requests, "get", fake_get)
    assert app.main(["validate", "https://klinik.example/"]) == 1


@pytest.mark.parametrize("counts, compliant, strict, expected", [
    ({"critical": 0, "high": 0}, True, False, True),
    ({"critical": 0, "high": 2}, True, False, True),
    ({"critical": 0, "high": 2}, True, True, False),
    ({"critical": 1, "high": 0}, True, False, False),
    ({"critical": 0, "high": 0}, False, False, False),
])
def test_is_compliant(counts, compliant, strict, expected):
    summary = ValidationSummary(
        violations_by_severity={s.value: counts.get(s.value, 0) for s in Severity},
        healthcare_compliance=compliant,
    )
    assert app.is_compliant(ValidationResult(summary=summary), strict) is expected
