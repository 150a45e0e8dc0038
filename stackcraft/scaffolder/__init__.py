"""stackcraft scaffolder -- resolves and renders template overlays.

Quick usage::

    from stackcraft.models import ProjectConfig
    from stackcraft.scaffolder import ProjectGenerator

    config = ProjectConfig(project_name="my-app", frontend=["next"])
    result = await ProjectGenerator().generate(config, "/tmp/my-app")
"""

from .composer import CompositionResult, ProjectComposer
from .env import EnvVariable, add_env_variables
from .deps import DEPENDENCY_VERSIONS, add_package_dependency
from .generator import ProjectGenerator
from .resolver import Overlay, Phase, describe_overlays, resolve_overlays
from .templates import TemplateRenderer

__all__ = [
    "CompositionResult",
    "DEPENDENCY_VERSIONS",
    "EnvVariable",
    "Overlay",
    "Phase",
    "ProjectComposer",
    "ProjectGenerator",
    "TemplateRenderer",
    "add_env_variables",
    "add_package_dependency",
    "describe_overlays",
    "resolve_overlays",
]
