# src/wcag_auditor/exceptions.py
from typing import Any, Optional


class WCAGAuditorError(Exception):
    """Base class for every error raised by the validation engine."""


class InputError(WCAGAuditorError):
    """The snapshot handed to the engine is missing or malformed. Fatal."""


class ConfigError(WCAGAuditorError):
    """The rule-threshold table is invalid. Fatal."""


class AggregationError(WCAGAuditorError):
    """Findings violate an internal invariant during scoring. Fatal."""


class RuleExecutionError(WCAGAuditorError):
    """
    A rule failed while processing a single element.

    Non-fatal: the controller converts it into a high-severity finding and
    continues with the next rule. `partial` holds the findings the rule had
    produced before it failed.
    """

    def __init__(self, rule_id: str, element_selector: str, cause: BaseException, partial: Optional[Any] = None):
        self.rule_id = rule_id
        self.element_selector = element_selector
        self.cause = cause
        self.partial = partial
        super().__init__(f"Rule '{rule_id}' failed on {element_selector}: {cause}")
