"""Registry URL accumulation for dependency records."""

from __future__ import annotations

from gradlesentinel.engines.dependency_extractor.models import DepType

MAVEN_CENTRAL_URL = "https://repo.maven.apache.org/maven2"
GRADLE_PLUGIN_PORTAL_URL = "https://plugins.gradle.org/m2/"
GOOGLE_MAVEN_URL = "https://dl.google.com/android/maven2/"
JCENTER_URL = "https://jcenter.bintray.com/"


class RegistryUrlAccumulator:
    """Ordered, de-duplicated registry URLs declared by one script.

    ``urls_for`` always starts with the default registry. Plugins get the
    plugin portal right after it, ahead of any custom URL.
    """

    def __init__(
        self,
        default_url: str = MAVEN_CENTRAL_URL,
        plugin_url: str = GRADLE_PLUGIN_PORTAL_URL,
    ) -> None:
        self.default_url = default_url
        self.plugin_url = plugin_url
        self._custom: dict[str, None] = {}

    def add(self, url: str) -> None:
        self._custom.setdefault(url, None)

    def extend(self, urls) -> None:
        for url in urls:
            self.add(url)

    @property
    def custom_urls(self) -> list[str]:
        return list(self._custom)

    def urls_for(self, dep_type: DepType) -> list[str]:
        head = [self.default_url]
        if dep_type == "plugin":
            head.append(self.plugin_url)
        return list(dict.fromkeys(head + self.custom_urls))
