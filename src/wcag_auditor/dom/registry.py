# src/wcag_auditor/dom/registry.py
import importlib
import logging
import pkgutil
from typing import Dict, List

from wcag_auditor.rules.base import HealthcareRule

logger = logging.getLogger(__name__)


class RuleRegistry:
    """
    Central registry for the healthcare rules.

    Dynamically discovers modules in the 'wcag_auditor.rules' package that
    expose a `RULE` attribute (a HealthcareRule instance) and keeps them sorted
    by their fixed position.
    """

    _rules: Dict[str, HealthcareRule] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        if cls._loaded:
            return

        try:
            import wcag_auditor.rules as rules_pkg

            for _, name, _ in pkgutil.iter_modules(rules_pkg.__path__):
                full_name = f"wcag_auditor.rules.{name}"
                try:
                    module = importlib.import_module(full_name)
                except Exception as e:
                    logger.error(f"Error loading rule module {name}: {e}")
                    continue

                rule = getattr(module, "RULE", None)
                if isinstance(rule, HealthcareRule):
                    cls._rules[rule.key] = rule
                    logger.debug(f"Rule loaded: {rule.key} (position {rule.position})")

            cls._loaded = True
        except ImportError as e:
            logger.error(f"Could not find rules package: {e}")

    @classmethod
    def get_all_rules(cls) -> List[HealthcareRule]:
        """All discovered rules in execution order."""
        cls.discover()
        return sorted(cls._rules.values(), key=lambda r: r.position)
