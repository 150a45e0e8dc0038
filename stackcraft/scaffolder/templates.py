"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which renders a directory of the template
tree (``stackcraft/templates/`` by default) into a destination directory.
Files ending in ``.j2`` are rendered with the project context and written
without the extension; every other file is copied byte for byte.  Two
reserved basenames become dotfiles on output: ``_gitignore`` and ``_npmrc``
(template trees cannot ship those names directly because package tooling
drops or interprets them).
"""

from __future__ import annotations

import asyncio
import re
import shutil
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

TEMPLATE_SUFFIX = ".j2"

# Template basename -> output basename
RESERVED_NAMES: dict[str, str] = {
    "_gitignore": ".gitignore",
    "_npmrc": ".npmrc",
}


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template directories into a project.

    The renderer is the only component that touches template files.  It is
    constructed once per run and handed to the composer.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["slugify"] = _slugify_filter
        self.env.filters["pascal_case"] = _pascal_case_filter
        self.env.filters["camel_case"] = _camel_case_filter

    # -- Lookup --------------------------------------------------------------

    def source_path(self, source: str) -> Path:
        """Absolute path of a template directory given relative to the root."""
        return self.template_dir / source

    def matching_files(self, source: str, pattern: str = "**/*") -> list[Path]:
        """Return the files under *source* matching *pattern*, sorted.

        Hidden files are included.  A missing source yields an empty list.
        """
        base = self.source_path(source)
        if not base.is_dir():
            return []
        return sorted(p for p in base.glob(pattern) if p.is_file())

    def has_source(self, source: str, pattern: str = "**/*") -> bool:
        """Whether *source* exists and contributes at least one file."""
        if not self.source_path(source).is_dir():
            return False
        if pattern == "**/*":
            return True
        return bool(self.matching_files(source, pattern))

    # -- Rendering -----------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: POSIX path relative to the template root (e.g.
                ``"base/package.json.j2"``).
            context: Variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    async def render_tree(
        self,
        source: str,
        output_dir: str | Path,
        context: dict[str, Any],
        *,
        overwrite: bool = True,
        pattern: str = "**/*",
    ) -> list[Path]:
        """Render every file under *source* matching *pattern* into *output_dir*.

        The directory structure is preserved: ``frontend/react/next/src/app.tsx``
        rendered with ``source="frontend/react/next"`` into ``apps/web`` writes
        ``apps/web/src/app.tsx``.

        Args:
            source: Directory inside the template root.
            output_dir: Destination directory, created as needed.
            context: Template context variables.
            overwrite: When ``False``, files that already exist at the
                destination are left untouched.
            pattern: Glob (relative to *source*) selecting the files to render.

        Returns:
            The paths that were written, in order.
        """
        out_base = Path(output_dir)
        written: list[Path] = []

        for template_file in self.matching_files(source, pattern):
            rel = template_file.relative_to(self.source_path(source))
            output_file = out_base / output_relpath(rel)

            if not overwrite and output_file.exists():
                continue

            if rel.name.endswith(TEMPLATE_SUFFIX):
                template_key = f"{source}/{rel.as_posix()}"
                content = self.render(template_key, context)
                await asyncio.to_thread(_write_file, output_file, content)
            else:
                await asyncio.to_thread(_copy_file, template_file, output_file)
            written.append(output_file)

        return written

    async def render_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render one template file to *output_path* (parents created)."""
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out

    # -- Utility -------------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return every file path under *prefix*, relative to the template root."""
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*")
            if p.is_file()
        )


def output_relpath(rel: Path) -> Path:
    """Map a template-relative path to its output-relative path.

    Strips the ``.j2`` suffix and renames reserved basenames::

        output_relpath(Path("src/index.ts.j2")) -> Path("src/index.ts")
        output_relpath(Path("_gitignore"))       -> Path(".gitignore")
    """
    name = rel.name
    if name.endswith(TEMPLATE_SUFFIX):
        name = name[: -len(TEMPLATE_SUFFIX)]
    name = RESERVED_NAMES.get(name, name)
    return rel.with_name(name)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word.capitalize() for word in parts if word)


def _camel_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = _pascal_case_filter(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _copy_file(source: Path, destination: Path) -> None:
    """Synchronous helper: create parent dirs and copy bytes and mode."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    shutil.copymode(source, destination)
