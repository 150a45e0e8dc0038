"""Tests for template path resolution (stackcraft.scaffolder.resolver).

Covers:
- The full overlay list for a representative stack
- Phase ordering and idempotence
- Frontend, backend, db, auth, addon, example, extras and deploy branches
- Overwrite policy and destinations
- describe_overlays table output
"""

from __future__ import annotations

import pytest
from rich.table import Table

from stackcraft.scaffolder.resolver import (
    NATIVE_APP_DIR,
    PHASE_ORDER,
    SERVER_APP_DIR,
    WEB_APP_DIR,
    Overlay,
    Phase,
    describe_overlays,
    overlay_sources,
    resolve_overlays,
)

pytestmark = pytest.mark.unit


def _sources(config, phase: Phase | None = None) -> list[str]:
    overlays = resolve_overlays(config)
    if phase is not None:
        overlays = [o for o in overlays if o.phase == phase]
    return overlay_sources(overlays)


# ---------------------------------------------------------------------------
# Whole-list behaviour
# ---------------------------------------------------------------------------


class TestResolveOverlays:
    def test_representative_stack(self, scenario_config):
        assert _sources(scenario_config) == [
            "base",
            "frontend/react/web-base",
            "frontend/react/next",
            "api/trpc/web/react/base",
            "backend/server/server-base",
            "backend/server/hono",
            "api/trpc/server/base",
            "api/trpc/server/hono",
            "db/drizzle/sqlite",
            "auth/better-auth/server/base",
            "auth/better-auth/server/db/drizzle/sqlite",
            "auth/better-auth/web/react/base",
            "auth/better-auth/web/react/next",
            "addons/turborepo",
            "examples/todo/server/drizzle/base",
            "examples/todo/server/drizzle/sqlite",
            "examples/todo/web/react/next",
        ]

    def test_idempotent(self, scenario_config):
        assert resolve_overlays(scenario_config) == resolve_overlays(scenario_config)

    def test_phases_never_go_backwards(self, make_config):
        config = make_config(
            frontend=["next", "native-nativewind"],
            examples=["todo", "ai"],
            addons=["pwa", "biome"],
            package_manager="pnpm",
            web_deploy="wrangler",
            server_deploy="wrangler",
        )
        positions = [PHASE_ORDER.index(o.phase) for o in resolve_overlays(config)]
        assert positions == sorted(positions)

    def test_base_always_first(self, make_config):
        config = make_config(
            frontend=[],
            backend="none",
            database="none",
            orm="none",
            auth="none",
            addons=[],
        )
        overlays = resolve_overlays(config)
        assert overlays == [Overlay(Phase.BASE, "base")]

    def test_only_examples_are_non_destructive(self, make_config):
        config = make_config(frontend=["next"], examples=["todo", "ai"])
        for overlay in resolve_overlays(config):
            assert overlay.overwrite is (overlay.phase != Phase.EXAMPLES)


# ---------------------------------------------------------------------------
# Frontend
# ---------------------------------------------------------------------------


class TestFrontendPhase:
    def test_non_react_web_with_orpc(self, make_config):
        config = make_config(frontend=["svelte"], api="orpc")
        assert _sources(config, Phase.FRONTEND) == [
            "frontend/svelte",
            "api/orpc/web/svelte",
        ]

    def test_non_react_web_without_api(self, make_config):
        config = make_config(frontend=["nuxt"], api="none")
        assert _sources(config, Phase.FRONTEND) == ["frontend/nuxt"]

    def test_native_with_api(self, make_config):
        config = make_config(frontend=["native-unistyles"])
        overlays = [o for o in resolve_overlays(config) if o.phase == Phase.FRONTEND]
        assert [o.source for o in overlays] == [
            "frontend/native/native-base",
            "frontend/native/unistyles",
            "api/trpc/native",
        ]
        assert {o.destination for o in overlays} == {NATIVE_APP_DIR}

    def test_convex_skips_api_client(self, make_config):
        config = make_config(frontend=["next", "native-nativewind"], backend="convex")
        assert _sources(config, Phase.FRONTEND) == [
            "frontend/react/web-base",
            "frontend/react/next",
            "frontend/native/native-base",
            "frontend/native/nativewind",
        ]

    def test_frontend_overlays_ensure_destination(self, make_config):
        overlays = [o for o in resolve_overlays(make_config()) if o.phase == Phase.FRONTEND]
        assert all(o.ensure_destination for o in overlays)
        assert {o.destination for o in overlays} == {WEB_APP_DIR}


# ---------------------------------------------------------------------------
# Backend / DB
# ---------------------------------------------------------------------------


class TestBackendPhase:
    def test_no_backend(self, make_config):
        assert _sources(make_config(backend="none"), Phase.BACKEND) == []

    def test_convex_package(self, make_config):
        overlays = [
            o for o in resolve_overlays(make_config(backend="convex"))
            if o.phase == Phase.BACKEND
        ]
        assert [(o.source, o.destination) for o in overlays] == [
            ("backend/convex/packages/backend", "packages/backend"),
        ]

    def test_server_without_api(self, make_config):
        config = make_config(backend="express", api="none")
        assert _sources(config, Phase.BACKEND) == [
            "backend/server/server-base",
            "backend/server/express",
        ]


class TestDbPhase:
    def test_orm_and_database(self, make_config):
        config = make_config(database="postgres", orm="prisma")
        assert _sources(config, Phase.DB) == ["db/prisma/postgres"]

    @pytest.mark.parametrize(
        "overrides",
        [{"orm": "none"}, {"database": "none", "orm": "none"}, {"backend": "convex"}],
    )
    def test_skipped(self, make_config, overrides):
        assert _sources(make_config(**overrides), Phase.DB) == []

    def test_docker_compose(self, make_config):
        config = make_config(database="postgres", db_setup="docker")
        overlays = [o for o in resolve_overlays(config) if o.phase == Phase.DB]
        assert overlays[-1].source == "db-setup/docker-compose/postgres"
        assert overlays[-1].destination == SERVER_APP_DIR


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestAuthPhase:
    def test_no_auth(self, make_config):
        assert _sources(make_config(auth="none"), Phase.AUTH) == []

    def test_next_backend_gets_next_overlay(self, make_config):
        config = make_config(frontend=["next"], backend="next")
        assert "auth/better-auth/server/next" in _sources(config, Phase.AUTH)

    def test_non_react_web(self, make_config):
        config = make_config(frontend=["svelte"], api="orpc", orm="none")
        assert _sources(config, Phase.AUTH) == [
            "auth/better-auth/server/base",
            "auth/better-auth/web/svelte",
        ]

    def test_native(self, make_config):
        config = make_config(
            frontend=["native-nativewind"], backend="none", database="none", orm="none"
        )
        assert _sources(config, Phase.AUTH) == [
            "auth/better-auth/native/native-base",
            "auth/better-auth/native/nativewind",
        ]

    def test_database_without_backend_gets_server_auth(self, make_config):
        config = make_config(frontend=["next"], backend="none", api="none")
        assert _sources(config, Phase.AUTH) == [
            "auth/better-auth/server/base",
            "auth/better-auth/server/db/drizzle/sqlite",
            "auth/better-auth/web/react/base",
            "auth/better-auth/web/react/next",
        ]
        assert _sources(config, Phase.DB) == ["db/drizzle/sqlite"]

    def test_convex_never_gets_server_auth(self, make_config):
        config = make_config(frontend=["next"], backend="convex", api="none")
        assert not any("/server/" in s for s in _sources(config, Phase.AUTH))

    def test_convex_clerk(self, make_config):
        config = make_config(
            frontend=["tanstack-start", "native-unistyles"],
            backend="convex",
            auth="clerk",
        )
        assert _sources(config, Phase.AUTH) == [
            "auth/clerk/convex/backend",
            "auth/clerk/convex/web/react/tanstack-start",
            "auth/clerk/convex/native/base",
            "auth/clerk/convex/native/unistyles",
        ]


# ---------------------------------------------------------------------------
# Addons / Examples / Extras
# ---------------------------------------------------------------------------


class TestAddonsPhase:
    def test_plain_addons_go_to_root(self, make_config):
        config = make_config(addons=["biome", "husky"])
        overlays = [o for o in resolve_overlays(config) if o.phase == Phase.ADDONS]
        assert [(o.source, o.destination) for o in overlays] == [
            ("addons/biome", ""),
            ("addons/husky", ""),
        ]

    def test_pwa_next(self, make_config):
        config = make_config(frontend=["next"], addons=["pwa"])
        assert _sources(config, Phase.ADDONS) == ["addons/pwa/apps/web/next"]

    @pytest.mark.parametrize("frontend", ["tanstack-router", "react-router"])
    def test_pwa_vite(self, make_config, frontend):
        config = make_config(frontend=[frontend], addons=["pwa"])
        overlays = [o for o in resolve_overlays(config) if o.phase == Phase.ADDONS]
        assert overlays[0].source == "addons/pwa/apps/web/vite"
        assert overlays[0].destination == WEB_APP_DIR


class TestExamplesPhase:
    def test_ai_needs_react_base_first(self, make_config):
        config = make_config(frontend=["tanstack-router"], examples=["ai"])
        web = [s for s in _sources(config, Phase.EXAMPLES) if "/web/" in s]
        assert web == [
            "examples/ai/web/react/base",
            "examples/ai/web/react/tanstack-router",
        ]

    def test_ai_with_next_backend(self, make_config):
        config = make_config(frontend=["next"], backend="next", examples=["ai"])
        assert _sources(config, Phase.EXAMPLES)[0] == "examples/ai/server/next"

    def test_convex_has_no_server_side(self, make_config):
        config = make_config(frontend=["next"], backend="convex", examples=["todo"])
        assert _sources(config, Phase.EXAMPLES) == ["examples/todo/web/react/next"]

    def test_native_example(self, make_config):
        config = make_config(
            frontend=["native-nativewind"], backend="none", examples=["todo"]
        )
        assert _sources(config, Phase.EXAMPLES) == ["examples/todo/native/nativewind"]


class TestExtrasPhase:
    def test_npm_has_no_extras(self, make_config):
        assert _sources(make_config(package_manager="npm"), Phase.EXTRAS) == []

    def test_pnpm_workspace(self, make_config):
        assert _sources(make_config(package_manager="pnpm"), Phase.EXTRAS) == [
            "extras/pnpm-workspace.yaml",
        ]

    def test_pnpm_npmrc_with_native(self, make_config):
        config = make_config(package_manager="pnpm", frontend=["native-nativewind"])
        assert _sources(config, Phase.EXTRAS) == [
            "extras/pnpm-workspace.yaml",
            "extras/_npmrc.j2",
        ]

    def test_pnpm_npmrc_with_nuxt(self, make_config):
        config = make_config(package_manager="pnpm", frontend=["nuxt"], api="orpc")
        assert "extras/_npmrc.j2" in _sources(config, Phase.EXTRAS)

    def test_bun(self, make_config):
        assert _sources(make_config(package_manager="bun"), Phase.EXTRAS) == [
            "extras/bunfig.toml.j2",
        ]


# ---------------------------------------------------------------------------
# Deploy
# ---------------------------------------------------------------------------


class TestDeployPhase:
    def _deploy(self, config) -> list[tuple[str, str]]:
        return [
            (o.label, o.destination)
            for o in resolve_overlays(config)
            if o.phase == Phase.DEPLOY
        ]

    def test_no_deploy(self, make_config):
        assert self._deploy(make_config()) == []

    def test_alchemy_shared(self, make_config):
        config = make_config(web_deploy="alchemy", server_deploy="alchemy")
        assert self._deploy(config) == [
            ("deploy/alchemy/alchemy.run.ts.j2", ""),
            ("deploy/alchemy/env.d.ts.j2", SERVER_APP_DIR),
        ]

    def test_alchemy_web_only(self, make_config):
        config = make_config(web_deploy="alchemy")
        assert self._deploy(config) == [("deploy/alchemy/alchemy.run.ts.j2", WEB_APP_DIR)]

    def test_alchemy_server_only(self, make_config):
        config = make_config(server_deploy="alchemy")
        assert self._deploy(config) == [
            ("deploy/alchemy/alchemy.run.ts.j2", SERVER_APP_DIR),
            ("deploy/alchemy/env.d.ts.j2", SERVER_APP_DIR),
        ]

    def test_wrangler_web_uses_lookup_table(self, make_config):
        config = make_config(frontend=["next", "native-nativewind"], web_deploy="wrangler")
        assert self._deploy(config) == [("deploy/wrangler/web/react/next", WEB_APP_DIR)]

    def test_wrangler_server(self, make_config):
        config = make_config(server_deploy="wrangler")
        assert self._deploy(config) == [("deploy/wrangler/server", SERVER_APP_DIR)]

    def test_mixed_targets(self, make_config):
        config = make_config(
            frontend=["svelte"], api="orpc", web_deploy="wrangler", server_deploy="alchemy"
        )
        assert self._deploy(config) == [
            ("deploy/alchemy/alchemy.run.ts.j2", SERVER_APP_DIR),
            ("deploy/alchemy/env.d.ts.j2", SERVER_APP_DIR),
            ("deploy/wrangler/web/svelte", WEB_APP_DIR),
        ]


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------


class TestDescribeOverlays:
    def test_one_row_per_overlay(self, scenario_config):
        overlays = resolve_overlays(scenario_config)
        table = describe_overlays(overlays)
        assert isinstance(table, Table)
        assert table.row_count == len(overlays)

    def test_label_includes_pattern(self):
        overlay = Overlay(Phase.EXTRAS, "extras", pattern="bunfig.toml.j2")
        assert overlay.label == "extras/bunfig.toml.j2"
