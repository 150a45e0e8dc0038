"""Exception hierarchy for stackcraft.

Every error the tool raises on purpose derives from ``StackcraftError`` so the
CLI can report it with a single message and a non-zero exit status.  I/O
errors raised while rendering templates are not wrapped and propagate as-is.
"""

from __future__ import annotations


class StackcraftError(Exception):
    """Base class for all stackcraft errors."""


class InvalidConfigurationError(StackcraftError):
    """Raised when a project configuration violates a compatibility rule.

    Attributes:
        rule: Name of the rule that failed (e.g. ``"api_frontend_compatible"``).
        message: The human-readable, actionable violation message.
    """

    def __init__(self, rule: str, message: str) -> None:
        self.rule = rule
        self.message = message
        super().__init__(message)


class MissingTemplateError(StackcraftError):
    """Raised in strict mode when a resolved template directory is absent."""

    def __init__(self, source: str, phase: str) -> None:
        self.source = source
        self.phase = phase
        super().__init__(
            f"Template '{source}' required by the {phase} phase was not found "
            f"in the template tree"
        )


class UnknownDependencyError(StackcraftError):
    """Raised when a dependency has no entry in the version table."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No version range known for dependency '{name}'")
