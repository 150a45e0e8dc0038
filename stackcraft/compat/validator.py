"""Fail-fast validation of a fully merged ``ProjectConfig``.

The validator is a gate, not a transform: it either returns the exact
configuration object it was given or raises ``InvalidConfigurationError``
for the first rule that fails.  Nothing is coerced.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import InvalidConfigurationError
from ..models import ProjectConfig
from .rules import DEFAULT_RULES, Rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A failed rule and its message."""

    rule: str
    message: str


class ConfigValidator:
    """Runs an ordered rule set against a project configuration.

    Attributes:
        rules: The rules, evaluated in sequence.  The first failure wins.
    """

    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def validate(self, config: ProjectConfig) -> ProjectConfig:
        """Return *config* unchanged if every rule passes.

        Raises:
            InvalidConfigurationError: On the first violated rule.
        """
        for rule in self.rules:
            message = rule(config)
            if message is not None:
                logger.debug("Rule %s failed", rule.name)
                raise InvalidConfigurationError(rule.name, message)
        logger.debug("Configuration passed %d compatibility rules", len(self.rules))
        return config

    def violations(self, config: ProjectConfig) -> list[Violation]:
        """Evaluate every rule and collect all failures in rule order."""
        found: list[Violation] = []
        for rule in self.rules:
            message = rule(config)
            if message is not None:
                found.append(Violation(rule.name, message))
        return found

    def is_valid(self, config: ProjectConfig) -> bool:
        return not self.violations(config)


def validate_config(config: ProjectConfig) -> ProjectConfig:
    """Validate *config* against the default rule set."""
    return ConfigValidator().validate(config)
