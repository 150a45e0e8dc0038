"""Pydantic v2 models for a stackcraft project configuration.

Defines the closed option enumerations (one per CLI flag) and the
``ProjectConfig`` record that every later stage reads.  The configuration is
built once per invocation, validated once, and treated as read-only after
that, so the model is frozen.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Frontend(str, Enum):
    """Web and native frontend frameworks."""
    TANSTACK_ROUTER = "tanstack-router"
    REACT_ROUTER = "react-router"
    TANSTACK_START = "tanstack-start"
    NEXT = "next"
    NUXT = "nuxt"
    SVELTE = "svelte"
    SOLID = "solid"
    NATIVE_NATIVEWIND = "native-nativewind"
    NATIVE_UNISTYLES = "native-unistyles"
    NONE = "none"


class Backend(str, Enum):
    """Server frameworks.  ``convex`` has its own package layout."""
    HONO = "hono"
    EXPRESS = "express"
    FASTIFY = "fastify"
    NEXT = "next"
    ELYSIA = "elysia"
    CONVEX = "convex"
    NONE = "none"


class Database(str, Enum):
    NONE = "none"
    SQLITE = "sqlite"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MONGODB = "mongodb"


class ORM(str, Enum):
    DRIZZLE = "drizzle"
    PRISMA = "prisma"
    MONGOOSE = "mongoose"
    NONE = "none"


class Auth(str, Enum):
    BETTER_AUTH = "better-auth"
    CLERK = "clerk"
    NONE = "none"


class API(str, Enum):
    TRPC = "trpc"
    ORPC = "orpc"
    NONE = "none"


class Runtime(str, Enum):
    BUN = "bun"
    NODE = "node"
    WORKERS = "workers"
    NONE = "none"


class DatabaseSetup(str, Enum):
    """Hosted or local database provisioning."""
    TURSO = "turso"
    NEON = "neon"
    PRISMA_POSTGRES = "prisma-postgres"
    PLANETSCALE = "planetscale"
    MONGODB_ATLAS = "mongodb-atlas"
    SUPABASE = "supabase"
    D1 = "d1"
    DOCKER = "docker"
    NONE = "none"


class WebDeploy(str, Enum):
    WRANGLER = "wrangler"
    ALCHEMY = "alchemy"
    NONE = "none"


class ServerDeploy(str, Enum):
    WRANGLER = "wrangler"
    ALCHEMY = "alchemy"
    NONE = "none"


class Addon(str, Enum):
    PWA = "pwa"
    TAURI = "tauri"
    STARLIGHT = "starlight"
    BIOME = "biome"
    HUSKY = "husky"
    RULER = "ruler"
    TURBOREPO = "turborepo"
    FUMADOCS = "fumadocs"
    ULTRACITE = "ultracite"
    OXLINT = "oxlint"
    NONE = "none"


class Example(str, Enum):
    TODO = "todo"
    AI = "ai"
    MONETIZED_AI = "monetized-ai"
    NONE = "none"


class PackageManager(str, Enum):
    NPM = "npm"
    PNPM = "pnpm"
    BUN = "bun"


# ---------------------------------------------------------------------------
# Frontend categories
# ---------------------------------------------------------------------------

WEB_FRAMEWORKS: tuple[Frontend, ...] = (
    Frontend.TANSTACK_ROUTER,
    Frontend.REACT_ROUTER,
    Frontend.TANSTACK_START,
    Frontend.NEXT,
    Frontend.NUXT,
    Frontend.SVELTE,
    Frontend.SOLID,
)

REACT_FRAMEWORKS: tuple[Frontend, ...] = (
    Frontend.TANSTACK_ROUTER,
    Frontend.REACT_ROUTER,
    Frontend.TANSTACK_START,
    Frontend.NEXT,
)

NATIVE_FRAMEWORKS: tuple[Frontend, ...] = (
    Frontend.NATIVE_NATIVEWIND,
    Frontend.NATIVE_UNISTYLES,
)

# Template sub-directory used for each native styling flavour.
NATIVE_STYLE_DIRS: dict[Frontend, str] = {
    Frontend.NATIVE_NATIVEWIND: "nativewind",
    Frontend.NATIVE_UNISTYLES: "unistyles",
}


def detect_package_manager() -> PackageManager:
    """Guess the invoking package manager from ``npm_config_user_agent``.

    ``pnpm create ...`` and ``bun create ...`` set the user agent to a string
    starting with the tool name.  Anything else falls back to npm.
    """
    user_agent = os.environ.get("npm_config_user_agent", "")
    if user_agent.startswith("pnpm"):
        return PackageManager.PNPM
    if user_agent.startswith("bun"):
        return PackageManager.BUN
    return PackageManager.NPM


def _dedupe(values: Sequence[Any], sentinel: Any) -> tuple[Any, ...]:
    """Drop the ``none`` sentinel and duplicate entries, keeping order."""
    seen: list[Any] = []
    for value in values:
        if value == sentinel or value in seen:
            continue
        seen.append(value)
    return tuple(seen)


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------

DEFAULT_PROJECT_NAME = "my-stack-app"


class ProjectConfig(BaseModel):
    """The complete, immutable description of the project to scaffold.

    Field names are snake_case in Python and camelCase in JSON (``dbSetup``,
    ``webDeploy``...), matching the flags users already know from the
    generated ``stackcraft.json``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    project_name: str = Field(default=DEFAULT_PROJECT_NAME, min_length=1)
    project_dir: Optional[Path] = Field(
        default=None, description="Target directory (defaults to ./<project_name>)"
    )
    frontend: tuple[Frontend, ...] = Field(default=(Frontend.TANSTACK_ROUTER,))
    backend: Backend = Field(default=Backend.HONO)
    runtime: Runtime = Field(default=Runtime.BUN)
    database: Database = Field(default=Database.SQLITE)
    orm: ORM = Field(default=ORM.DRIZZLE)
    auth: Auth = Field(default=Auth.BETTER_AUTH)
    api: API = Field(default=API.TRPC)
    db_setup: DatabaseSetup = Field(default=DatabaseSetup.NONE)
    web_deploy: WebDeploy = Field(default=WebDeploy.NONE)
    server_deploy: ServerDeploy = Field(default=ServerDeploy.NONE)
    addons: tuple[Addon, ...] = Field(default=(Addon.TURBOREPO,))
    examples: tuple[Example, ...] = Field(default=())
    package_manager: PackageManager = Field(default_factory=detect_package_manager)
    git: bool = Field(default=True)
    install: bool = Field(default=True)

    @field_validator("frontend")
    @classmethod
    def _normalise_frontend(cls, value: tuple[Frontend, ...]) -> tuple[Frontend, ...]:
        return _dedupe(value, Frontend.NONE)

    @field_validator("addons")
    @classmethod
    def _normalise_addons(cls, value: tuple[Addon, ...]) -> tuple[Addon, ...]:
        return _dedupe(value, Addon.NONE)

    @field_validator("examples")
    @classmethod
    def _normalise_examples(cls, value: tuple[Example, ...]) -> tuple[Example, ...]:
        return _dedupe(value, Example.NONE)

    # ------------------------------------------------------------------
    # Derived views (read-only properties)
    # ------------------------------------------------------------------

    @property
    def target_dir(self) -> Path:
        """Directory the project is written into."""
        if self.project_dir is not None:
            return Path(self.project_dir)
        return Path.cwd() / self.project_name

    @property
    def web_frontend(self) -> Frontend | None:
        """The selected web framework, if any."""
        return next((f for f in self.frontend if f in WEB_FRAMEWORKS), None)

    @property
    def native_frontend(self) -> Frontend | None:
        """The selected native framework, if any."""
        return next((f for f in self.frontend if f in NATIVE_FRAMEWORKS), None)

    @property
    def react_framework(self) -> Frontend | None:
        """The selected web framework when it is React based."""
        return next((f for f in self.frontend if f in REACT_FRAMEWORKS), None)

    @property
    def native_style(self) -> str | None:
        """``"nativewind"`` or ``"unistyles"`` when a native app is selected."""
        native = self.native_frontend
        return NATIVE_STYLE_DIRS[native] if native is not None else None

    @property
    def has_web(self) -> bool:
        return self.web_frontend is not None

    @property
    def has_native(self) -> bool:
        return self.native_frontend is not None

    @property
    def is_convex(self) -> bool:
        return self.backend is Backend.CONVEX

    @property
    def has_server_app(self) -> bool:
        """Whether an ``apps/server`` package is generated."""
        return self.backend not in (Backend.NONE, Backend.CONVEX)

    # ------------------------------------------------------------------
    # Rendering / persistence
    # ------------------------------------------------------------------

    def template_context(self) -> dict[str, Any]:
        """Build the Jinja2 context used when rendering template files."""
        data = self.model_dump(mode="json", exclude={"project_dir"})
        data.update(
            {
                "web_frontend": self.web_frontend.value if self.web_frontend else None,
                "native_frontend": (
                    self.native_frontend.value if self.native_frontend else None
                ),
                "react_framework": (
                    self.react_framework.value if self.react_framework else None
                ),
                "native_style": self.native_style,
                "has_web": self.has_web,
                "has_native": self.has_native,
                "has_server_app": self.has_server_app,
                "is_convex": self.is_convex,
            }
        )
        return data

    def to_json(self) -> str:
        """Serialise as camelCase JSON (the ``stackcraft.json`` format)."""
        return self.model_dump_json(
            indent=2, by_alias=True, exclude={"project_dir"}
        )

    def save(self, path: Path | None = None) -> Path:
        """Write the configuration to *path* (default ``<target>/stackcraft.json``).

        Returns:
            The path that was written.
        """
        target = path or (self.target_dir / "stackcraft.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.to_json() + "\n", encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ProjectConfig":
        """Load a configuration previously written by :meth:`save`."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    def reproducible_command(self) -> str:
        """Return the CLI invocation that recreates this configuration."""

        def _values(items: tuple[Any, ...]) -> str:
            return " ".join(i.value for i in items) if items else "none"

        parts = [
            "stackcraft",
            shlex.quote(self.project_name),
            f"--frontend {_values(self.frontend)}",
            f"--backend {self.backend.value}",
            f"--runtime {self.runtime.value}",
            f"--database {self.database.value}",
            f"--orm {self.orm.value}",
            f"--auth {self.auth.value}",
            f"--api {self.api.value}",
            f"--db-setup {self.db_setup.value}",
            f"--web-deploy {self.web_deploy.value}",
            f"--server-deploy {self.server_deploy.value}",
            f"--addons {_values(self.addons)}",
            f"--examples {_values(self.examples)}",
            f"--package-manager {self.package_manager.value}",
        ]
        if not self.git:
            parts.append("--no-git")
        if not self.install:
            parts.append("--no-install")
        return " ".join(parts)
