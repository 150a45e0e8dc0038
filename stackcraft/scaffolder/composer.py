"""Composition driver.

Applies resolved overlays to a project directory, strictly in order.  Each
render is awaited before the next one starts because later overlays are
allowed to overwrite files written by earlier ones.  The composer makes no
decisions about *which* templates apply; that is the resolver's job.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config import Settings
from ..errors import MissingTemplateError
from ..models import ProjectConfig
from .resolver import Overlay, Phase, resolve_overlays
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)


@dataclass
class CompositionResult:
    """What a composition run did."""

    project_dir: Path
    applied: list[Overlay] = field(default_factory=list)
    skipped: list[Overlay] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(set(self.files))

    def applied_phases(self) -> list[Phase]:
        """Phases that contributed at least one overlay, in order."""
        phases: list[Phase] = []
        for overlay in self.applied:
            if overlay.phase not in phases:
                phases.append(overlay.phase)
        return phases


class ProjectComposer:
    """Renders a sequence of overlays into a project directory.

    Attributes:
        renderer: The template render primitive.
        settings: Tool settings (only ``strict_templates`` is consulted).
    """

    def __init__(
        self,
        renderer: TemplateRenderer,
        settings: Optional[Settings] = None,
    ) -> None:
        self.renderer = renderer
        self.settings = settings or Settings(templates_dir=renderer.template_dir)

    async def compose(
        self,
        config: ProjectConfig,
        project_dir: str | Path | None = None,
        overlays: Optional[list[Overlay]] = None,
        on_overlay: Optional[Callable[[Overlay], None]] = None,
    ) -> CompositionResult:
        """Apply *overlays* (resolved from *config* when omitted) in order.

        Args:
            config: The validated configuration; also the template context.
            project_dir: Output root. Defaults to ``config.target_dir``.
            overlays: Pre-resolved overlays, e.g. from a dry run.
            on_overlay: Called before each overlay is applied.

        Raises:
            MissingTemplateError: In strict mode, before anything is written,
                when a resolved template is absent.
            OSError: Any I/O failure while rendering propagates unchanged.
        """
        root = Path(project_dir) if project_dir is not None else config.target_dir
        if overlays is None:
            overlays = resolve_overlays(config)
        if self.settings.strict_templates:
            missing = self.missing_templates(overlays)
            if missing:
                raise MissingTemplateError(missing[0].label, missing[0].phase.value)

        context = config.template_context()
        result = CompositionResult(project_dir=root)

        await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)

        for overlay in overlays:
            if on_overlay is not None:
                on_overlay(overlay)
            destination = root / overlay.destination if overlay.destination else root

            if overlay.ensure_destination:
                await asyncio.to_thread(destination.mkdir, parents=True, exist_ok=True)

            if not self.renderer.has_source(overlay.source, overlay.pattern):
                logger.debug("No template at %s, skipping", overlay.label)
                result.skipped.append(overlay)
                continue

            written = await self.renderer.render_tree(
                overlay.source,
                destination,
                context,
                overwrite=overlay.overwrite,
                pattern=overlay.pattern,
            )
            logger.debug(
                "Applied %s -> %s (%d files)",
                overlay.label,
                overlay.destination or ".",
                len(written),
            )
            result.applied.append(overlay)
            result.files.extend(written)

        return result

    def missing_templates(self, overlays: list[Overlay]) -> list[Overlay]:
        """Overlays whose template source is absent from the template tree."""
        return [
            o for o in overlays if not self.renderer.has_source(o.source, o.pattern)
        ]
