"""Shared pytest fixtures for the stackcraft test suite.

Provides reusable fixtures for:
- A clean environment (no package-manager user agent, no STACKCRAFT_* vars)
- Project configuration factories
- Throwaway template trees written into a temporary directory
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from stackcraft.models import ProjectConfig
from stackcraft.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

_ENV_VARS = (
    "npm_config_user_agent",
    "STACKCRAFT_TEMPLATES_DIR",
    "STACKCRAFT_STRICT_TEMPLATES",
    "STACKCRAFT_VERBOSE",
    "STACKCRAFT_CONFIG_FILENAME",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's shell from leaking into defaults."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Output directory for a generated project (not created up front)."""
    return tmp_path / "out" / "test-app"


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def make_config() -> Callable[..., ProjectConfig]:
    """Factory building a ``ProjectConfig`` with npm and test-friendly defaults.

    Usage::

        def test_something(make_config):
            config = make_config(frontend=["nuxt"], api="orpc")
    """

    def factory(**overrides: Any) -> ProjectConfig:
        values: dict[str, Any] = {
            "project_name": "test-app",
            "package_manager": "npm",
        }
        values.update(overrides)
        return ProjectConfig(**values)

    return factory


@pytest.fixture
def default_config(make_config) -> ProjectConfig:
    """The default stack: tanstack-router + hono + trpc + sqlite/drizzle."""
    return make_config()


@pytest.fixture
def scenario_config(make_config, project_dir: Path) -> ProjectConfig:
    """Next.js + Hono + tRPC + SQLite/Drizzle + Better Auth with the todo example."""
    return make_config(
        project_dir=project_dir,
        frontend=["next"],
        backend="hono",
        database="sqlite",
        orm="drizzle",
        auth="better-auth",
        api="trpc",
        addons=["turborepo"],
        examples=["todo"],
    )


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

@pytest.fixture
def make_template_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Factory writing ``{relative_path: content}`` into a fresh template root.

    Usage::

        def test_render(make_template_tree):
            root = make_template_tree({"base/README.md.j2": "# {{ project_name }}"})
    """

    def factory(files: dict[str, str]) -> Path:
        root = tmp_path / "templates"
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return factory


@pytest.fixture
def renderer_for(make_template_tree) -> Callable[[dict[str, str]], TemplateRenderer]:
    """Factory returning a ``TemplateRenderer`` over a throwaway tree."""

    def factory(files: dict[str, str]) -> TemplateRenderer:
        return TemplateRenderer(make_template_tree(files))

    return factory
