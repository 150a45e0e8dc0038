"""Compatibility rules over a ``ProjectConfig``.

Each constraint lives in its own small function.  The low-level predicates
(``is_frontend_allowed_with_backend``, ``allowed_apis_for_frontends``...) take
plain values so they can also filter the choices offered to a user; the
``check_*`` functions wrap them for the validator and return ``None`` when
the configuration passes or an actionable message when it does not.

``DEFAULT_RULES`` fixes the order in which the validator evaluates them, so
the first reported violation is deterministic.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Optional

from ..models import (
    API,
    NATIVE_FRAMEWORKS,
    WEB_FRAMEWORKS,
    Addon,
    Auth,
    Backend,
    Database,
    DatabaseSetup,
    Example,
    Frontend,
    ProjectConfig,
    Runtime,
    ServerDeploy,
    WebDeploy,
)


# ---------------------------------------------------------------------------
# Rule container
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """A named compatibility check.

    ``check`` returns ``None`` when the configuration satisfies the rule and
    the violation message otherwise.
    """

    name: str
    check: Callable[[ProjectConfig], Optional[str]]

    def __call__(self, config: ProjectConfig) -> Optional[str]:
        return self.check(config)


# ---------------------------------------------------------------------------
# Frontend helpers
# ---------------------------------------------------------------------------

def is_web_frontend(value: Frontend) -> bool:
    return value in WEB_FRAMEWORKS


def split_frontends(
    values: Iterable[Frontend] = (),
) -> tuple[list[Frontend], list[Frontend]]:
    """Split a frontend selection into ``(web, native)`` lists."""
    values = list(values)
    web = [f for f in values if is_web_frontend(f)]
    native = [f for f in values if f in NATIVE_FRAMEWORKS]
    return web, native


_NON_REACT_WEB = (Frontend.NUXT, Frontend.SVELTE, Frontend.SOLID)


def _first_present(
    frontends: Sequence[Frontend], candidates: Sequence[Frontend]
) -> Frontend | None:
    """Return the first of *candidates* that appears in *frontends*."""
    return next((c for c in candidates if c in frontends), None)


# ---------------------------------------------------------------------------
# Predicates (plain values in, bool out)
# ---------------------------------------------------------------------------

def is_frontend_allowed_with_backend(
    frontend: Frontend,
    backend: Backend | None = None,
    auth: Auth | str | None = None,
) -> bool:
    """Whether *frontend* can be paired with *backend* (and *auth*)."""
    if backend == Backend.CONVEX and frontend == Frontend.SOLID:
        return False
    if auth == Auth.CLERK and backend == Backend.CONVEX:
        if frontend in _NON_REACT_WEB:
            return False
    return True


def allowed_apis_for_frontends(frontends: Sequence[Frontend] = ()) -> list[API]:
    """API layers that can be offered for the given frontend selection."""
    if _first_present(frontends, _NON_REACT_WEB) is not None:
        return [API.ORPC, API.NONE]
    return [API.TRPC, API.ORPC, API.NONE]


def is_example_todo_allowed(
    backend: Backend | None = None,
    database: Database | None = None,
) -> bool:
    """The todo example needs a database whenever a real server exists."""
    return not (
        backend not in (Backend.CONVEX, Backend.NONE) and database == Database.NONE
    )


def is_example_ai_allowed(
    backend: Backend | None = None,
    frontends: Sequence[Frontend] = (),
) -> bool:
    return Frontend.SOLID not in frontends


def is_example_monetized_ai_allowed(
    backend: Backend | None = None,
    frontends: Sequence[Frontend] = (),
) -> bool:
    return _first_present(frontends, _NON_REACT_WEB) is None


def allowed_examples(
    backend: Backend | None,
    database: Database | None,
    frontends: Sequence[Frontend] = (),
) -> list[Example]:
    """Examples that can be offered for the given backend/database/frontends."""
    allowed: list[Example] = []
    if is_example_todo_allowed(backend, database):
        allowed.append(Example.TODO)
    if is_example_ai_allowed(backend, frontends):
        allowed.append(Example.AI)
    if is_example_monetized_ai_allowed(backend, frontends):
        allowed.append(Example.MONETIZED_AI)
    return allowed


# Frontends each addon works with.  An empty tuple means the addon has no
# frontend dependency.
ADDON_COMPATIBILITY: dict[Addon, tuple[Frontend, ...]] = {
    Addon.PWA: (
        Frontend.TANSTACK_ROUTER,
        Frontend.REACT_ROUTER,
        Frontend.SOLID,
        Frontend.NEXT,
    ),
    Addon.TAURI: (
        Frontend.TANSTACK_ROUTER,
        Frontend.REACT_ROUTER,
        Frontend.NUXT,
        Frontend.SVELTE,
        Frontend.SOLID,
        Frontend.NEXT,
    ),
    Addon.STARLIGHT: (),
    Addon.BIOME: (),
    Addon.HUSKY: (),
    Addon.RULER: (),
    Addon.TURBOREPO: (),
    Addon.FUMADOCS: (),
    Addon.ULTRACITE: (),
    Addon.OXLINT: (),
    Addon.NONE: (),
}


def check_addon_compatibility(
    addon: Addon, frontends: Sequence[Frontend] = ()
) -> tuple[bool, str]:
    """Return ``(is_compatible, reason)`` for *addon* with *frontends*."""
    allowed = ADDON_COMPATIBILITY.get(addon, ())
    if not allowed:
        return True, ""
    if any(f in allowed for f in frontends):
        return True, ""
    names = ", ".join(f.value for f in allowed)
    return False, f"{addon.value} addon requires one of these frontends: {names}"


# ---------------------------------------------------------------------------
# Rule checks (ProjectConfig in, message out)
# ---------------------------------------------------------------------------

def check_single_web_and_native(config: ProjectConfig) -> Optional[str]:
    web, native = split_frontends(config.frontend)
    if len(web) > 1:
        return (
            "Cannot select multiple web frameworks. Choose only one of: "
            "tanstack-router, tanstack-start, react-router, next, nuxt, svelte, solid"
        )
    if len(native) > 1:
        choices = ", ".join(f.value for f in NATIVE_FRAMEWORKS)
        return f"Cannot select multiple native frameworks. Choose only one of: {choices}"
    return None


def check_frontend_allowed_with_backend(config: ProjectConfig) -> Optional[str]:
    for frontend in config.frontend:
        if is_frontend_allowed_with_backend(frontend, config.backend, config.auth):
            continue
        if config.auth == Auth.CLERK:
            return (
                f"Clerk authentication with the Convex backend is not supported "
                f"with the '{frontend.value}' frontend. Please use a React or "
                f"native frontend, set '--auth none', or choose a different backend."
            )
        return (
            f"The Convex backend is not compatible with the '{frontend.value}' "
            f"frontend. Please choose a different frontend or backend."
        )
    return None


def check_api_frontend_compatible(config: ProjectConfig) -> Optional[str]:
    if config.api != API.TRPC:
        return None
    offending = _first_present(config.frontend, _NON_REACT_WEB)
    if offending is None:
        return None
    return (
        f"tRPC API is not supported with '{offending.value}' frontend. "
        f"Please use --api orpc or --api none or remove '{offending.value}' "
        f"from --frontend."
    )


def check_workers_runtime_compatible(config: ProjectConfig) -> Optional[str]:
    if config.runtime != Runtime.WORKERS:
        return None
    if config.backend != Backend.HONO:
        return (
            f"Cloudflare Workers runtime (--runtime workers) is only supported "
            f"with Hono backend (--backend hono). Current backend: "
            f"{config.backend.value}. Please use '--backend hono' or choose a "
            f"different runtime."
        )
    if config.database == Database.MONGODB:
        return (
            "Cloudflare Workers runtime (--runtime workers) is not compatible "
            "with MongoDB database. MongoDB requires Prisma or Mongoose ORM, but "
            "Workers runtime only supports Drizzle or Prisma ORM. Please use a "
            "different database or runtime."
        )
    if config.db_setup == DatabaseSetup.DOCKER:
        return (
            "Cloudflare Workers runtime (--runtime workers) is not compatible "
            "with Docker setup. Workers runtime uses serverless databases (D1) "
            "and doesn't support local Docker containers. Please use "
            "'--db-setup d1' for SQLite or choose a different runtime."
        )
    return None


def check_web_deploy_requires_web_frontend(config: ProjectConfig) -> Optional[str]:
    if config.web_deploy != WebDeploy.NONE and not config.has_web:
        return (
            "'--web-deploy' requires a web frontend. Please select a web "
            "frontend or set '--web-deploy none'."
        )
    return None


def check_server_deploy_requires_backend(config: ProjectConfig) -> Optional[str]:
    if config.server_deploy != ServerDeploy.NONE and config.backend == Backend.NONE:
        return (
            "'--server-deploy' requires a backend. Please select a backend or "
            "set '--server-deploy none'."
        )
    return None


def check_addons_compatible(config: ProjectConfig) -> Optional[str]:
    for addon in config.addons:
        compatible, reason = check_addon_compatibility(addon, config.frontend)
        if not compatible:
            return f"Incompatible addon/frontend combination: {reason}"
    return None


def check_examples_compatible(config: ProjectConfig) -> Optional[str]:
    examples = config.examples
    if not examples:
        return None
    if Example.TODO in examples and not is_example_todo_allowed(
        config.backend, config.database
    ):
        return (
            "The 'todo' example requires a database if a backend (other than "
            "Convex) is present. Cannot use --examples todo when database is "
            "'none' and a backend is selected."
        )
    if Example.AI in examples and not is_example_ai_allowed(
        config.backend, config.frontend
    ):
        return "The 'ai' example is not compatible with the Solid frontend."
    if Example.MONETIZED_AI in examples and not is_example_monetized_ai_allowed(
        config.backend, config.frontend
    ):
        offending = _first_present(config.frontend, _NON_REACT_WEB)
        name = offending.value if offending else "selected"
        return (
            f"The 'monetized-ai' example is not compatible with the '{name}' "
            f"frontend. Please use a React frontend or remove 'monetized-ai' "
            f"from --examples."
        )
    return None


# ---------------------------------------------------------------------------
# Evaluation order
# ---------------------------------------------------------------------------

DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("single_web_and_native", check_single_web_and_native),
    Rule("frontend_allowed_with_backend", check_frontend_allowed_with_backend),
    Rule("api_frontend_compatible", check_api_frontend_compatible),
    Rule("workers_runtime_compatible", check_workers_runtime_compatible),
    Rule("web_deploy_requires_web_frontend", check_web_deploy_requires_web_frontend),
    Rule("server_deploy_requires_backend", check_server_deploy_requires_backend),
    Rule("addons_compatible", check_addons_compatible),
    Rule("examples_compatible", check_examples_compatible),
)
