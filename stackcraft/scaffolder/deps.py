"""Package manifest dependency updates.

``add_package_dependency`` adds dependencies to a generated package's
``package.json`` with version ranges taken from ``DEPENDENCY_VERSIONS``, the
single place where the scaffolded stack's versions are pinned.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..errors import UnknownDependencyError


DEPENDENCY_VERSIONS: dict[str, str] = {
    "better-auth": "^1.3.9",
    "@better-auth/expo": "^1.3.9",
    "@clerk/nextjs": "^6.31.5",
    "@clerk/clerk-react": "^5.45.0",
    "@clerk/tanstack-react-start": "^0.23.1",
    "@clerk/clerk-expo": "^2.14.25",
    "drizzle-orm": "^0.44.2",
    "drizzle-kit": "^0.31.2",
    "@planetscale/database": "^1.19.0",
    "@libsql/client": "^0.15.9",
    "@neondatabase/serverless": "^1.0.1",
    "pg": "^8.14.1",
    "@types/pg": "^8.11.11",
    "@types/ws": "^8.18.1",
    "ws": "^8.18.3",
    "mysql2": "^3.14.0",
    "@prisma/client": "^6.15.0",
    "prisma": "^6.15.0",
    "@prisma/adapter-d1": "^6.15.0",
    "@prisma/extension-accelerate": "^2.0.2",
    "@prisma/adapter-libsql": "^6.15.0",
    "@prisma/adapter-planetscale": "^6.15.0",
    "mongoose": "^8.14.0",
    "vite-plugin-pwa": "^1.0.1",
    "@vite-pwa/assets-generator": "^1.0.0",
    "@tauri-apps/cli": "^2.4.0",
    "@biomejs/biome": "^2.2.0",
    "oxlint": "^1.12.0",
    "husky": "^9.1.7",
    "lint-staged": "^16.1.2",
    "tsx": "^4.19.2",
    "@types/node": "^22.13.11",
    "@types/bun": "^1.2.6",
    "@elysiajs/node": "^1.3.1",
    "@elysiajs/cors": "^1.3.3",
    "@elysiajs/trpc": "^1.1.0",
    "elysia": "^1.3.21",
    "@hono/node-server": "^1.14.4",
    "@hono/trpc-server": "^0.4.0",
    "hono": "^4.8.2",
    "cors": "^2.8.5",
    "express": "^5.1.0",
    "@types/express": "^5.0.1",
    "@types/cors": "^2.8.17",
    "fastify": "^5.3.3",
    "@fastify/cors": "^11.0.1",
    "turbo": "^2.5.4",
    "ai": "^5.0.39",
    "@ai-sdk/google": "^2.0.13",
    "@ai-sdk/vue": "^2.0.39",
    "@ai-sdk/svelte": "^3.0.39",
    "@ai-sdk/react": "^2.0.39",
    "streamdown": "^1.2.0",
    "@merit-systems/echo-next-sdk": "^0.0.9",
    "@merit-systems/echo-react-sdk": "^1.0.20",
    "@orpc/server": "^1.8.6",
    "@orpc/client": "^1.8.6",
    "@orpc/openapi": "^1.8.6",
    "@orpc/zod": "^1.8.6",
    "@orpc/tanstack-query": "^1.8.6",
    "@trpc/tanstack-react-query": "^11.5.0",
    "@trpc/server": "^11.5.0",
    "@trpc/client": "^11.5.0",
    "convex": "^1.25.4",
    "@convex-dev/react-query": "^0.0.0-alpha.8",
    "convex-svelte": "^0.0.11",
    "convex-nuxt": "0.1.5",
    "convex-vue": "^0.1.5",
    "@tanstack/svelte-query": "^5.85.3",
    "@tanstack/svelte-query-devtools": "^5.85.3",
    "@tanstack/vue-query-devtools": "^5.83.0",
    "@tanstack/vue-query": "^5.83.0",
    "@tanstack/react-query-devtools": "^5.85.5",
    "@tanstack/react-query": "^5.85.5",
    "@tanstack/solid-query": "^5.75.0",
    "@tanstack/solid-query-devtools": "^5.75.0",
    "@tanstack/solid-router-devtools": "^1.131.25",
    "wrangler": "^4.23.0",
    "@cloudflare/vite-plugin": "^1.9.0",
    "@opennextjs/cloudflare": "^1.6.5",
    "nitro-cloudflare-dev": "^0.2.2",
    "@sveltejs/adapter-cloudflare": "^7.2.1",
    "@cloudflare/workers-types": "^4.20250822.0",
    "alchemy": "^0.65.1",
    "nitropack": "^2.12.4",
    "dotenv": "^17.2.1",
}


def _load_manifest(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def add_package_dependency(
    project_dir: str | Path,
    dependencies: list[str] | None = None,
    dev_dependencies: list[str] | None = None,
) -> Path:
    """Add dependencies to ``<project_dir>/package.json``.

    Existing entries are replaced with the version from the table.  Each
    section is kept sorted by name, the way package managers write it.

    Raises:
        FileNotFoundError: If the manifest does not exist.
        UnknownDependencyError: If a name has no entry in ``DEPENDENCY_VERSIONS``.

    Returns:
        The manifest path.
    """
    manifest_path = Path(project_dir) / "package.json"
    if not manifest_path.exists():
        raise FileNotFoundError(f"package.json not found in {project_dir}")

    for name in [*(dependencies or []), *(dev_dependencies or [])]:
        if name not in DEPENDENCY_VERSIONS:
            raise UnknownDependencyError(name)

    manifest = _load_manifest(manifest_path)
    for section, names in (
        ("dependencies", dependencies or []),
        ("devDependencies", dev_dependencies or []),
    ):
        if not names:
            continue
        entries: dict[str, str] = dict(manifest.get(section) or {})
        for name in names:
            entries[name] = DEPENDENCY_VERSIONS[name]
        manifest[section] = dict(sorted(entries.items()))

    manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    return manifest_path
