"""stackcraft tool settings.

Settings for the scaffolder itself, as opposed to ``ProjectConfig`` which
describes the project being generated.  Uses a Pydantic v2 model so values
are validated at construction time and can be serialised to/from JSON or read
from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool | None:
    """Read a boolean environment variable; ``None`` when unset or empty."""
    raw = os.environ.get(name)
    if not raw:
        return None
    return raw.strip().lower() in _TRUTHY


class Settings(BaseModel):
    """Global stackcraft settings.

    Instances are created once by the CLI entry point and passed to the
    renderer and composer.
    """

    templates_dir: Path = Field(
        default=DEFAULT_TEMPLATES_DIR,
        description="Root of the template tree overlays are resolved against",
    )
    strict_templates: bool = Field(
        default=False,
        description="Treat a missing template directory as an error instead of skipping it",
    )
    verbose: bool = Field(default=False, description="Emit debug logging")
    config_filename: str = Field(
        default="stackcraft.json",
        description="Name of the configuration file written into the project root",
    )
    write_config: bool = Field(
        default=True, description="Write the project configuration file after scaffolding"
    )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the settings to a JSON file.

        Returns:
            The path where the file was written.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load previously saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            STACKCRAFT_TEMPLATES_DIR, STACKCRAFT_STRICT_TEMPLATES,
            STACKCRAFT_VERBOSE, STACKCRAFT_CONFIG_FILENAME.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("STACKCRAFT_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["STACKCRAFT_TEMPLATES_DIR"])
        if os.environ.get("STACKCRAFT_CONFIG_FILENAME"):
            kwargs["config_filename"] = os.environ["STACKCRAFT_CONFIG_FILENAME"]

        strict = _env_flag("STACKCRAFT_STRICT_TEMPLATES")
        if strict is not None:
            kwargs["strict_templates"] = strict
        verbose = _env_flag("STACKCRAFT_VERBOSE")
        if verbose is not None:
            kwargs["verbose"] = verbose

        return cls(**kwargs)
