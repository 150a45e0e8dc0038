"""Compatibility rules and the fail-fast configuration validator.

Quick usage::

    from stackcraft.compat import validate_config

    validate_config(config)  # raises InvalidConfigurationError on conflict
"""

from .rules import (
    ADDON_COMPATIBILITY,
    DEFAULT_RULES,
    Rule,
    allowed_apis_for_frontends,
    allowed_examples,
    check_addon_compatibility,
    is_example_ai_allowed,
    is_example_monetized_ai_allowed,
    is_example_todo_allowed,
    is_frontend_allowed_with_backend,
    is_web_frontend,
    split_frontends,
)
from .validator import ConfigValidator, Violation, validate_config

__all__ = [
    "ADDON_COMPATIBILITY",
    "ConfigValidator",
    "DEFAULT_RULES",
    "Rule",
    "Violation",
    "allowed_apis_for_frontends",
    "allowed_examples",
    "check_addon_compatibility",
    "is_example_ai_allowed",
    "is_example_monetized_ai_allowed",
    "is_example_todo_allowed",
    "is_frontend_allowed_with_backend",
    "is_web_frontend",
    "split_frontends",
    "validate_config",
]
