# src/wcag_auditor/controllers/validation_controller.py
import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from wcag_auditor.dom.builder import SnapshotBuilder
from wcag_auditor.dom.core import ElementSnapshot
from wcag_auditor.dom.models import SnapshotDocument
from wcag_auditor.dom.registry import RuleRegistry
from wcag_auditor.exceptions import AggregationError, ConfigError, InputError, RuleExecutionError
from wcag_auditor.model import Finding, HealthcareElementType, Severity, ValidationResult
from wcag_auditor.rules.base import HealthcareRule, RuleContext, RuleOutcome
from wcag_auditor.services.classifier_service import ElementClassifier
from wcag_auditor.services.contrast_service import ColorCalculator
from wcag_auditor.services.scoring_service import ScoringService
from wcag_auditor.settings import RULE_KEYS, RuleConfiguration

logger = logging.getLogger(__name__)

SnapshotInput = Union[SnapshotDocument, ElementSnapshot, Dict[str, Any]]


class ValidationState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FATAL_ERROR = "fatal_error"


class ValidationController:
    """
    Orchestrates one healthcare WCAG validation run.

    Rules execute in their fixed order (or on a thread pool when workers > 1;
    results are merged back in rule order). A failure inside a rule becomes a
    high-severity finding and the run continues. Input, configuration and
    aggregation errors, and any other unexpected error, are fatal: the state
    moves to FATAL_ERROR and no partial result is returned.
    """

    def __init__(
            self,
            config: RuleConfiguration,
            calculator: Optional[ColorCalculator] = None,
            classifier: Optional[ElementClassifier] = None,
            workers: int = 1
    ):
        if not isinstance(config, RuleConfiguration):
            raise ConfigError(f"Expected a RuleConfiguration, got {type(config).__name__}")
        if workers < 1:
            raise ConfigError(f"workers must be >= 1, got {workers}")

        self.config = config
        self.calculator = calculator or ColorCalculator()
        self.classifier = classifier or ElementClassifier(config.markers)
        self.workers = workers
        self.state = ValidationState.IDLE

        self.rules = self._resolve_rules()
        self.scoring = ScoringService(
            numeric_rule_ids=[r.rule_id(config) for r in self.rules if r.numeric]
        )

    def _resolve_rules(self) -> List[HealthcareRule]:
        available = {rule.key: rule for rule in RuleRegistry.get_all_rules()}
        missing = [key for key in RULE_KEYS if key not in available]
        if missing:
            raise ConfigError(f"Rules not available: {', '.join(missing)}")
        return [
            rule for rule in sorted(available.values(), key=lambda r: r.position)
            if rule.definition(self.config).enabled
        ]

    def validate(
            self,
            snapshot: SnapshotInput,
            progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> ValidationResult:
        """Validates one snapshot and returns the complete result."""
        self.state = ValidationState.RUNNING
        try:
            document = self._coerce_document(snapshot)
            ctx = RuleContext(
                document=document,
                classifier=self.classifier,
                calculator=self.calculator,
                config=self.config,
            )
            logger.info(
                "Starting healthcare WCAG validation (%d elements, %d rules)",
                len(document.elements()), len(self.rules)
            )

            outcomes = self._execute_rules(ctx, progress_callback)

            violations: List[Finding] = []
            passes: List[Finding] = []
            for outcome in outcomes:
                violations.extend(outcome.violations)
                passes.extend(outcome.passes)

            summary = self.scoring.summarize(violations, passes)
        except (InputError, ConfigError, AggregationError) as e:
            self.state = ValidationState.FATAL_ERROR
            logger.error("Validation aborted: %s", e)
            raise
        except Exception:
            self.state = ValidationState.FATAL_ERROR
            logger.exception("Validation aborted by an unexpected error")
            raise

        self.state = ValidationState.COMPLETED
        logger.info(
            "Healthcare WCAG validation completed: %s%% compliant", summary.overall_score
        )
        return ValidationResult(
            violations=violations,
            passes=passes,
            summary=summary,
            url=document.url,
        )

    def _coerce_document(self, snapshot: SnapshotInput) -> SnapshotDocument:
        if isinstance(snapshot, SnapshotDocument):
            return snapshot
        if isinstance(snapshot, ElementSnapshot):
            return SnapshotDocument(root=snapshot)
        if isinstance(snapshot, dict):
            return SnapshotBuilder().from_dict(snapshot)
        raise InputError(f"Unsupported snapshot type: {type(snapshot).__name__}")

    def _execute_rules(
            self,
            ctx: RuleContext,
            progress_callback: Optional[Callable[[int, int], None]]
    ) -> List[RuleOutcome]:
        total = len(self.rules)

        if self.workers == 1:
            outcomes = []
            for i, rule in enumerate(self.rules):
                outcomes.append(self._run_rule(rule, ctx))
                if progress_callback:
                    progress_callback(i + 1, total)
            return outcomes

        # executor.map yields in submission order, which keeps output deterministic
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            outcomes = []
            for i, outcome in enumerate(executor.map(lambda r: self._run_rule(r, ctx), self.rules)):
                outcomes.append(outcome)
                if progress_callback:
                    progress_callback(i + 1, total)
            return outcomes

    def _run_rule(self, rule: HealthcareRule, ctx: RuleContext) -> RuleOutcome:
        try:
            return rule.run(ctx)
        except RuleExecutionError as e:
            logger.error(f"Rule {e.rule_id} failed on {e.element_selector}: {e.cause}")
            outcome = e.partial if isinstance(e.partial, RuleOutcome) else RuleOutcome()
            error_violation = self._error_finding(e)
            return RuleOutcome(
                violations=[*outcome.violations, error_violation],
                passes=list(outcome.passes),
            )

    @staticmethod
    def _error_finding(error: RuleExecutionError) -> Finding:
        finding = Finding(
            rule_id=error.rule_id,
            element_selector=error.element_selector,
            severity=Severity.HIGH,
            healthcare_context=HealthcareElementType.GENERAL,
            message=f"RuleExecutionError: {type(error.cause).__name__}: {error.cause}",
            fix_hint="Prüfen Sie das Element manuell; die automatische Prüfung ist fehlgeschlagen",
            details={"error_type": type(error.cause).__name__},
            execution_error=True,
        )
        return finding
