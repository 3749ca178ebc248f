# src/head_auditor/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Optional, Set

from .core import RuleDefinition

logger = logging.getLogger(__name__)


class RuleRegistry:
    """
    Central registry for head audit rules and their diagnostic codes.

    Dynamically discovers and loads RuleDefinition modules from the
    'head_auditor.rules' package.
    """

    _rules: Dict[str, RuleDefinition] = {}
    _all_codes: Set[str] = set()
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Discovers and registers all rule definitions found in the 'head_auditor.rules' package.

        This method scans the package for modules containing a `DEFINITION`
        attribute (instance of `RuleDefinition`) and registers each one under
        its rule name, collecting all possible diagnostic codes.
        """
        if cls._loaded:
            return

        try:
            import head_auditor.rules as rules_pkg

            for _, name, _ in pkgutil.iter_modules(rules_pkg.__path__):
                full_name = f"head_auditor.rules.{name}"
                try:
                    module = importlib.import_module(full_name)
                    if hasattr(module, "DEFINITION") and isinstance(module.DEFINITION, RuleDefinition):
                        cls.register(module.DEFINITION)
                except Exception as e:
                    logger.error(f"Error loading rule module {name}: {e}")

            cls._loaded = True
        except ImportError as e:
            logger.error(f"Could not find rules package: {e}")

    @classmethod
    def register(cls, definition: RuleDefinition) -> None:
        """Registers a single rule definition under its name."""
        if definition.name in cls._rules:
            logger.warning(f"Rule '{definition.name}' registered twice, keeping the latest")
        cls._rules[definition.name] = definition
        cls._all_codes.update(definition.codes)
        logger.debug(f"Rule loaded: {definition.name}")

    @classmethod
    def get_rule(cls, name: str) -> Optional[RuleDefinition]:
        """Retrieves a rule definition by name."""
        return cls._rules.get(name)

    @classmethod
    def get_all_rules(cls) -> List[RuleDefinition]:
        """Returns all registered rule definitions, sorted by name."""
        return [cls._rules[name] for name in sorted(cls._rules)]

    @classmethod
    def get_all_possible_codes(cls) -> List[str]:
        """Returns a list of all unique diagnostic codes registered in the system."""
        return sorted(list(cls._all_codes))
