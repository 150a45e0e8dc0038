"""Template path resolution.

``resolve_overlays`` turns a validated ``ProjectConfig`` into the ordered list
of template overlays the composer applies.  It is a pure function: it reads
only the configuration, never the filesystem, so the same configuration
always yields the same list.  Whether a resolved template directory actually
exists is the composer's concern.

Overlay sources are POSIX paths relative to the template root; destinations
are relative to the project root (``""`` is the root itself).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rich.table import Table

from ..models import (
    API,
    ORM,
    Addon,
    Auth,
    Backend,
    Database,
    DatabaseSetup,
    Example,
    Frontend,
    PackageManager,
    ProjectConfig,
    ServerDeploy,
    WebDeploy,
)


# ---------------------------------------------------------------------------
# Destinations inside the generated project
# ---------------------------------------------------------------------------

ROOT_DIR = ""
WEB_APP_DIR = "apps/web"
NATIVE_APP_DIR = "apps/native"
SERVER_APP_DIR = "apps/server"
CONVEX_BACKEND_DIR = "packages/backend"

# Web deploy template sub-path for each web frontend.
WEB_DEPLOY_TEMPLATE_MAP: dict[Frontend, str] = {
    Frontend.TANSTACK_ROUTER: "react/tanstack-router",
    Frontend.TANSTACK_START: "react/tanstack-start",
    Frontend.REACT_ROUTER: "react/react-router",
    Frontend.SOLID: "solid",
    Frontend.NEXT: "react/next",
    Frontend.NUXT: "nuxt",
    Frontend.SVELTE: "svelte",
}

_PWA_VITE_FRONTENDS = (Frontend.TANSTACK_ROUTER, Frontend.REACT_ROUTER, Frontend.SOLID)
_AI_EXAMPLES = (Example.AI, Example.MONETIZED_AI)


class Phase(str, Enum):
    """Composition phases, declared in the order they run."""

    BASE = "base"
    FRONTEND = "frontend"
    BACKEND = "backend"
    DB = "db"
    AUTH = "auth"
    ADDONS = "addons"
    EXAMPLES = "examples"
    EXTRAS = "extras"
    DEPLOY = "deploy"


PHASE_ORDER: tuple[Phase, ...] = tuple(Phase)


@dataclass(frozen=True)
class Overlay:
    """One template directory to render onto the project.

    Attributes:
        phase: The composition phase that produced this overlay.
        source: Template directory relative to the template root.
        destination: Output directory relative to the project root.
        overwrite: Whether existing destination files are replaced.
        pattern: Glob selecting the files under *source*.
        ensure_destination: Create *destination* even when *source* is absent.
    """

    phase: Phase
    source: str
    destination: str = ROOT_DIR
    overwrite: bool = True
    pattern: str = "**/*"
    ensure_destination: bool = False

    @property
    def label(self) -> str:
        """Source path, with the file pattern appended for single-file overlays."""
        if self.pattern == "**/*":
            return self.source
        return f"{self.source}/{self.pattern}"


# ---------------------------------------------------------------------------
# Per-phase resolution
# ---------------------------------------------------------------------------

def _base(config: ProjectConfig) -> list[Overlay]:
    return [Overlay(Phase.BASE, "base")]


def _frontend(config: ProjectConfig) -> list[Overlay]:
    overlays: list[Overlay] = []
    web = config.web_frontend
    react = config.react_framework

    def add(source: str, destination: str) -> None:
        overlays.append(
            Overlay(Phase.FRONTEND, source, destination, ensure_destination=True)
        )

    if react is not None:
        add("frontend/react/web-base", WEB_APP_DIR)
        add(f"frontend/react/{react.value}", WEB_APP_DIR)
        if not config.is_convex and config.api != API.NONE:
            add(f"api/{config.api.value}/web/react/base", WEB_APP_DIR)
    elif web is not None:
        add(f"frontend/{web.value}", WEB_APP_DIR)
        if not config.is_convex and config.api == API.ORPC:
            add(f"api/{config.api.value}/web/{web.value}", WEB_APP_DIR)

    if config.native_style is not None:
        add("frontend/native/native-base", NATIVE_APP_DIR)
        add(f"frontend/native/{config.native_style}", NATIVE_APP_DIR)
        if not config.is_convex and config.api != API.NONE:
            add(f"api/{config.api.value}/native", NATIVE_APP_DIR)

    return overlays


def _backend(config: ProjectConfig) -> list[Overlay]:
    if config.backend == Backend.NONE:
        return []

    if config.is_convex:
        return [
            Overlay(
                Phase.BACKEND,
                "backend/convex/packages/backend",
                CONVEX_BACKEND_DIR,
                ensure_destination=True,
            )
        ]

    backend = config.backend.value
    overlays = [
        Overlay(Phase.BACKEND, "backend/server/server-base", SERVER_APP_DIR,
                ensure_destination=True),
        Overlay(Phase.BACKEND, f"backend/server/{backend}", SERVER_APP_DIR),
    ]
    if config.api != API.NONE:
        api = config.api.value
        overlays.append(Overlay(Phase.BACKEND, f"api/{api}/server/base", SERVER_APP_DIR))
        overlays.append(
            Overlay(Phase.BACKEND, f"api/{api}/server/{backend}", SERVER_APP_DIR)
        )
    return overlays


def _has_db_overlay(config: ProjectConfig) -> bool:
    return not (
        config.is_convex or config.orm == ORM.NONE or config.database == Database.NONE
    )


def _server_dir_created(config: ProjectConfig) -> bool:
    """Whether some earlier phase produces ``apps/server``.

    Besides a real server backend, the database overlay creates it even when
    ``backend`` is ``none``.
    """
    return config.has_server_app or _has_db_overlay(config)


def _db(config: ProjectConfig) -> list[Overlay]:
    overlays: list[Overlay] = []
    if _has_db_overlay(config):
        overlays.append(
            Overlay(
                Phase.DB,
                f"db/{config.orm.value}/{config.database.value}",
                SERVER_APP_DIR,
                ensure_destination=True,
            )
        )
    if config.db_setup == DatabaseSetup.DOCKER and config.database != Database.NONE:
        overlays.append(
            Overlay(
                Phase.DB,
                f"db-setup/docker-compose/{config.database.value}",
                SERVER_APP_DIR,
            )
        )
    return overlays


def _auth(config: ProjectConfig) -> list[Overlay]:
    if config.auth == Auth.NONE:
        return []

    if config.is_convex and config.auth == Auth.CLERK:
        return _convex_clerk(config)

    provider = config.auth.value
    overlays: list[Overlay] = []

    def add(source: str, destination: str) -> None:
        overlays.append(Overlay(Phase.AUTH, source, destination))

    if _server_dir_created(config):
        add(f"auth/{provider}/server/base", SERVER_APP_DIR)
        if config.backend == Backend.NEXT:
            add(f"auth/{provider}/server/next", SERVER_APP_DIR)
        if config.orm != ORM.NONE and config.database != Database.NONE:
            add(
                f"auth/{provider}/server/db/{config.orm.value}/{config.database.value}",
                SERVER_APP_DIR,
            )

    react = config.react_framework
    web = config.web_frontend
    if react is not None:
        add(f"auth/{provider}/web/react/base", WEB_APP_DIR)
        add(f"auth/{provider}/web/react/{react.value}", WEB_APP_DIR)
    elif web is not None:
        add(f"auth/{provider}/web/{web.value}", WEB_APP_DIR)

    if config.native_style is not None:
        add(f"auth/{provider}/native/native-base", NATIVE_APP_DIR)
        add(f"auth/{provider}/native/{config.native_style}", NATIVE_APP_DIR)

    return overlays


def _convex_clerk(config: ProjectConfig) -> list[Overlay]:
    """Clerk on Convex has its own overlays keyed only by framework."""
    overlays = [Overlay(Phase.AUTH, "auth/clerk/convex/backend", CONVEX_BACKEND_DIR)]
    react = config.react_framework
    if react is not None:
        overlays.append(
            Overlay(Phase.AUTH, f"auth/clerk/convex/web/react/{react.value}", WEB_APP_DIR)
        )
    if config.native_style is not None:
        overlays.append(Overlay(Phase.AUTH, "auth/clerk/convex/native/base", NATIVE_APP_DIR))
        overlays.append(
            Overlay(
                Phase.AUTH,
                f"auth/clerk/convex/native/{config.native_style}",
                NATIVE_APP_DIR,
            )
        )
    return overlays


def _addons(config: ProjectConfig) -> list[Overlay]:
    overlays: list[Overlay] = []
    for addon in config.addons:
        if addon != Addon.PWA:
            overlays.append(Overlay(Phase.ADDONS, f"addons/{addon.value}", ROOT_DIR))
            continue
        if not config.has_web:
            continue
        if Frontend.NEXT in config.frontend:
            source = "addons/pwa/apps/web/next"
        elif any(f in config.frontend for f in _PWA_VITE_FRONTENDS):
            source = "addons/pwa/apps/web/vite"
        else:
            continue
        overlays.append(Overlay(Phase.ADDONS, source, WEB_APP_DIR))
    return overlays


def _examples(config: ProjectConfig) -> list[Overlay]:
    overlays: list[Overlay] = []

    def add(source: str, destination: str) -> None:
        overlays.append(Overlay(Phase.EXAMPLES, source, destination, overwrite=False))

    orm = config.orm.value
    database = config.database.value
    react = config.react_framework
    web = config.web_frontend

    for example in config.examples:
        base = f"examples/{example.value}"

        if config.has_server_app:
            if example in _AI_EXAMPLES and config.backend == Backend.NEXT:
                add(f"{base}/server/next", SERVER_APP_DIR)
            if config.orm != ORM.NONE and config.database != Database.NONE:
                add(f"{base}/server/{orm}/base", SERVER_APP_DIR)
                add(f"{base}/server/{orm}/{database}", SERVER_APP_DIR)

        if react is not None:
            if example in _AI_EXAMPLES:
                add(f"{base}/web/react/base", WEB_APP_DIR)
            add(f"{base}/web/react/{react.value}", WEB_APP_DIR)
        elif web is not None:
            add(f"{base}/web/{web.value}", WEB_APP_DIR)

        if config.native_style is not None:
            add(f"{base}/native/{config.native_style}", NATIVE_APP_DIR)

    return overlays


def _extras(config: ProjectConfig) -> list[Overlay]:
    overlays: list[Overlay] = []
    pm = config.package_manager
    if pm == PackageManager.PNPM:
        overlays.append(Overlay(Phase.EXTRAS, "extras", ROOT_DIR, pattern="pnpm-workspace.yaml"))
    if pm == PackageManager.BUN:
        overlays.append(Overlay(Phase.EXTRAS, "extras", ROOT_DIR, pattern="bunfig.toml.j2"))
    if pm == PackageManager.PNPM and (config.has_native or Frontend.NUXT in config.frontend):
        overlays.append(Overlay(Phase.EXTRAS, "extras", ROOT_DIR, pattern="_npmrc.j2"))
    return overlays


def _deploy(config: ProjectConfig) -> list[Overlay]:
    overlays: list[Overlay] = []

    def alchemy(pattern: str, destination: str) -> None:
        overlays.append(Overlay(Phase.DEPLOY, "deploy/alchemy", destination, pattern=pattern))

    web_alchemy = config.web_deploy == WebDeploy.ALCHEMY
    server_alchemy = config.server_deploy == ServerDeploy.ALCHEMY

    if web_alchemy and server_alchemy:
        alchemy("alchemy.run.ts.j2", ROOT_DIR)
        if config.has_server_app:
            alchemy("env.d.ts.j2", SERVER_APP_DIR)
    else:
        if web_alchemy and config.has_web:
            alchemy("alchemy.run.ts.j2", WEB_APP_DIR)
        if server_alchemy and config.has_server_app:
            alchemy("alchemy.run.ts.j2", SERVER_APP_DIR)
            alchemy("env.d.ts.j2", SERVER_APP_DIR)

    if config.web_deploy not in (WebDeploy.NONE, WebDeploy.ALCHEMY) and config.has_web:
        for frontend in config.frontend:
            subpath = WEB_DEPLOY_TEMPLATE_MAP.get(frontend)
            if subpath is None:
                continue
            overlays.append(
                Overlay(
                    Phase.DEPLOY,
                    f"deploy/{config.web_deploy.value}/web/{subpath}",
                    WEB_APP_DIR,
                )
            )

    if (
        config.server_deploy not in (ServerDeploy.NONE, ServerDeploy.ALCHEMY)
        and config.has_server_app
    ):
        overlays.append(
            Overlay(
                Phase.DEPLOY,
                f"deploy/{config.server_deploy.value}/server",
                SERVER_APP_DIR,
            )
        )

    return overlays


_PHASE_RESOLVERS = {
    Phase.BASE: _base,
    Phase.FRONTEND: _frontend,
    Phase.BACKEND: _backend,
    Phase.DB: _db,
    Phase.AUTH: _auth,
    Phase.ADDONS: _addons,
    Phase.EXAMPLES: _examples,
    Phase.EXTRAS: _extras,
    Phase.DEPLOY: _deploy,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve_overlays(config: ProjectConfig) -> list[Overlay]:
    """Return the ordered overlays for *config*, phase by phase."""
    overlays: list[Overlay] = []
    for phase in PHASE_ORDER:
        overlays.extend(_PHASE_RESOLVERS[phase](config))
    return overlays


def overlay_sources(overlays: list[Overlay]) -> list[str]:
    """Just the source paths, in order."""
    return [o.label for o in overlays]


def describe_overlays(overlays: list[Overlay], title: str = "Template overlays") -> Table:
    """Build a Rich table listing *overlays* (used by ``--dry-run``)."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Phase", style="magenta")
    table.add_column("Template")
    table.add_column("Destination")
    table.add_column("Mode", style="dim")
    for index, overlay in enumerate(overlays, start=1):
        table.add_row(
            str(index),
            overlay.phase.value,
            overlay.label,
            overlay.destination or ".",
            "overwrite" if overlay.overwrite else "keep existing",
        )
    return table
