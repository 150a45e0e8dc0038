"""stackcraft -- scaffold full-stack TypeScript monorepos from a validated stack selection."""

__version__ = "0.1.0"
