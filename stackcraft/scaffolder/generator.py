"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and produces the project: validate, resolve the
template overlays, compose them, run the database provider step, and write
``stackcraft.json`` so the run can be reproduced.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from ..compat import ConfigValidator
from ..config import Settings
from ..models import ProjectConfig
from .composer import CompositionResult, ProjectComposer
from .providers import run_provider_setup
from .resolver import Overlay, resolve_overlays
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)


class ProjectGenerator:
    """Validates a configuration and scaffolds the project it describes.

    The renderer, composer and validator are built once here and owned by
    the generator for the duration of the run.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        renderer: Optional[TemplateRenderer] = None,
        validator: Optional[ConfigValidator] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.renderer = renderer or TemplateRenderer(self.settings.templates_dir)
        self.validator = validator or ConfigValidator()
        self.composer = ProjectComposer(self.renderer, self.settings)

    def plan(self, config: ProjectConfig) -> list[Overlay]:
        """Validate *config* and return its overlays without writing anything.

        Raises:
            InvalidConfigurationError: If the configuration is not legal.
        """
        self.validator.validate(config)
        return resolve_overlays(config)

    async def generate(
        self,
        config: ProjectConfig,
        project_dir: str | Path | None = None,
        on_overlay: Optional[Callable[[Overlay], None]] = None,
    ) -> CompositionResult:
        """Generate the project described by *config*.

        Validation happens before the first filesystem write, so an invalid
        configuration never leaves a partial project behind.

        Args:
            config: The merged project configuration.
            project_dir: Output root. Defaults to ``config.target_dir``.
            on_overlay: Progress callback passed to the composer.

        Returns:
            The composition result.
        """
        overlays = self.plan(config)
        root = Path(project_dir) if project_dir is not None else config.target_dir

        result = await self.composer.compose(
            config, root, overlays=overlays, on_overlay=on_overlay
        )

        if await asyncio.to_thread(run_provider_setup, config, root):
            logger.debug("Database provider setup finished for %s", config.db_setup.value)

        if self.settings.write_config:
            path = await asyncio.to_thread(
                config.save, root / self.settings.config_filename
            )
            logger.debug("Wrote %s", path)

        return result
