"""Post-composition setup for database providers.

Runs after every overlay has been applied.  Only Cloudflare D1 needs local
work today: placeholder credentials in ``apps/server/.env`` and the Prisma
D1 adapter when Prisma is deployed to Cloudflare.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..models import ORM, DatabaseSetup, ProjectConfig, ServerDeploy
from .deps import add_package_dependency
from .env import EnvVariable, add_env_variables
from .resolver import SERVER_APP_DIR

logger = logging.getLogger(__name__)


def _write_env_best_effort(env_path: Path, variables: list[EnvVariable]) -> None:
    """Add *variables*; a failed write is logged and otherwise ignored."""
    try:
        added = add_env_variables(env_path, variables)
        logger.debug("Added %d variable(s) to %s", added, env_path)
    except (OSError, UnicodeError) as exc:
        logger.debug("Could not update %s: %s", env_path, exc)


def setup_cloudflare_d1(config: ProjectConfig, project_dir: Path) -> None:
    """Prepare a project whose database is provisioned on Cloudflare D1."""
    server_dir = project_dir / SERVER_APP_DIR
    env_path = server_dir / ".env"
    deploy = config.server_deploy

    if deploy == ServerDeploy.WRANGLER:
        _write_env_best_effort(
            env_path,
            [
                EnvVariable("CLOUDFLARE_ACCOUNT_ID"),
                EnvVariable("CLOUDFLARE_DATABASE_ID"),
                EnvVariable("CLOUDFLARE_D1_TOKEN"),
            ],
        )

    if deploy in (ServerDeploy.WRANGLER, ServerDeploy.ALCHEMY) and config.orm == ORM.PRISMA:
        _write_env_best_effort(env_path, [EnvVariable("DATABASE_URL", "file:./local.db")])
        add_package_dependency(server_dir, dependencies=["@prisma/adapter-d1"])


PROVIDER_SETUPS: dict[DatabaseSetup, Callable[[ProjectConfig, Path], None]] = {
    DatabaseSetup.D1: setup_cloudflare_d1,
}


def run_provider_setup(config: ProjectConfig, project_dir: Path) -> bool:
    """Run the setup step for ``config.db_setup`` if one exists.

    Returns:
        ``True`` when a setup step ran.
    """
    setup = PROVIDER_SETUPS.get(config.db_setup)
    if setup is None:
        return False
    logger.debug("Running %s database setup", config.db_setup.value)
    setup(config, project_dir)
    return True
