"""Extraction settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from gradlesentinel.engines.dependency_extractor.registry_urls import (
    GRADLE_PLUGIN_PORTAL_URL,
    MAVEN_CENTRAL_URL,
)


@dataclass(frozen=True)
class ExtractConfig:
    """Registry defaults applied to every extracted record.

    The plain constructor never looks at the environment, so extraction
    stays a function of its inputs; callers opt in with :meth:`from_env`.
    """

    default_registry_url: str = MAVEN_CENTRAL_URL
    plugin_registry_url: str = GRADLE_PLUGIN_PORTAL_URL
    datasource: str = "maven"

    @classmethod
    def from_env(cls) -> ExtractConfig:
        """Read overrides from environment variables.

        GRADLESENTINEL_DEFAULT_REGISTRY_URL — first registry of every record
        GRADLESENTINEL_PLUGIN_REGISTRY_URL  — registry added for plugins
        GRADLESENTINEL_DATASOURCE           — datasource label (default: maven)
        """
        return cls(
            default_registry_url=os.environ.get(
                "GRADLESENTINEL_DEFAULT_REGISTRY_URL", MAVEN_CENTRAL_URL
            ),
            plugin_registry_url=os.environ.get(
                "GRADLESENTINEL_PLUGIN_REGISTRY_URL", GRADLE_PLUGIN_PORTAL_URL
            ),
            datasource=os.environ.get("GRADLESENTINEL_DATASOURCE", "maven"),
        )
