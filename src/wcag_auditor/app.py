# src/wcag_auditor/app.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from tqdm import tqdm

from wcag_auditor.controllers.validation_controller import ValidationController
from wcag_auditor.dom.builder import SnapshotBuilder
from wcag_auditor.dom.models import SnapshotDocument
from wcag_auditor.exceptions import InputError, WCAGAuditorError
from wcag_auditor.managers.config_manager import ConfigManager
from wcag_auditor.model import ValidationResult
from wcag_auditor.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = 30
HTML_SUFFIXES = (".html", ".htm")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="healthcare-wcag",
        description="Healthcare WCAG 2.1 AA validation for captured page snapshots."
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Subcommands")

    validate_parser = subparsers.add_parser("validate", help="Validate a snapshot, HTML file or URL")
    validate_parser.add_argument("target", help="Snapshot JSON, HTML file or http(s) URL.")
    validate_parser.add_argument("--strict", action="store_true",
                                 help="Fail on high violations as well as critical ones.")
    validate_parser.add_argument("--no-emergency", action="store_true",
                                 help="Do not require emergency contact elements.")
    validate_parser.add_argument("--no-mobile", action="store_true",
                                 help="Skip touch target evaluation.")
    validate_parser.add_argument("--config", type=str, default=None, help="JSON threshold table.")
    validate_parser.add_argument("--profile", type=str, default=None, help="Settings profile to apply.")
    validate_parser.add_argument("--output", type=str, default=None, help="Write the JSON report here.")
    validate_parser.add_argument("--workers", type=int, default=None, help="Rule worker threads.")
    validate_parser.add_argument("--log-level", type=str, default=None, help="Logging level.")
    return parser


def load_snapshot(target: str, builder: Optional[SnapshotBuilder] = None) -> SnapshotDocument:
    """Loads a snapshot from a URL, an HTML file or a snapshot JSON file."""
    builder = builder or SnapshotBuilder()

    if target.startswith(("http://", "https://")):
        try:
            response = requests.get(target, timeout=FETCH_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as e:
            raise InputError(f"Could not fetch {target}: {e}") from e
        return builder.from_html(response.text, url=target)

    path = Path(target)
    if not path.is_file():
        raise InputError(f"Input file not found: {target}")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Could not read {target}: {e}") from e

    if path.suffix.lower() in HTML_SUFFIXES:
        return builder.from_html(content, url=path.resolve().as_uri())
    return builder.from_json(content)


def is_compliant(result: ValidationResult, strict: bool) -> bool:
    counts = result.summary.violations_by_severity
    if counts["critical"] > 0 or not result.summary.healthcare_compliance:
        return False
    return not (strict and counts["high"] > 0)


def print_summary(result: ValidationResult) -> None:
    summary = result.summary
    print("\n🏥 Healthcare WCAG 2.1 AA Validation Summary:")
    print(f"📊 Overall Score: {summary.overall_score}%")
    print(f"🏥 Healthcare Compliance: {'PASSED' if summary.healthcare_compliance else 'FAILED'}")
    print(f"🚨 Emergency Compliance: {'PASSED' if summary.emergency_compliance else 'FAILED'}")
    print(f"❌ Critical Violations: {summary.violations_by_severity['critical']}")
    print(f"⚠️  High Priority Violations: {summary.violations_by_severity['high']}")


def handle_validate(parsed_args: argparse.Namespace, config_manager: ConfigManager) -> int:
    overrides: Dict[str, Any] = {"options": {}}
    if parsed_args.strict:
        overrides["options"]["strict_mode"] = True
    if parsed_args.no_emergency:
        overrides["options"]["emergency_required"] = False
    if parsed_args.no_mobile:
        overrides["options"]["mobile_first"] = False

    config = config_manager.build_configuration(
        config_path=parsed_args.config,
        profile=parsed_args.profile,
        overrides=overrides,
    )
    workers = parsed_args.workers or config_manager.get_nested("engine.workers", 1)
    controller = ValidationController(config, workers=workers)
    document = load_snapshot(parsed_args.target)

    with tqdm(total=len(controller.rules), desc="Rules", unit="rule", file=sys.stderr, leave=False) as bar:
        def on_progress(done: int, total: int) -> None:
            bar.update(done - bar.n)

        result = controller.validate(document, progress_callback=on_progress)

    if parsed_args.output:
        output_path = Path(parsed_args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(result.to_report_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("📋 WCAG validation results saved: %s", output_path)

    print_summary(result)
    return 0 if is_compliant(result, config.options.strict_mode) else 1


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the healthcare-wcag command."""
    parser = build_parser()
    try:
        parsed_args = parser.parse_args(argv)
    except SystemExit as e:
        return 0 if e.code == 0 else 1

    if parsed_args.subcommand != "validate":
        parser.print_help()
        return 1

    try:
        config_manager = ConfigManager()
        configure_logger(parsed_args.log_level or config_manager.get_nested("debug.level", "INFO"))
        return handle_validate(parsed_args, config_manager)
    except WCAGAuditorError as e:
        logger.debug("Fatal validation error", exc_info=True)
        print(f"❌ Healthcare WCAG validation failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
