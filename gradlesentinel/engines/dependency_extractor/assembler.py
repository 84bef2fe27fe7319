"""Dependency assembly — turn resolved tokens and catalog entries into records."""

from __future__ import annotations

import structlog

from gradlesentinel.engines.dependency_extractor.catalog import extract_catalog
from gradlesentinel.engines.dependency_extractor.config import ExtractConfig
from gradlesentinel.engines.dependency_extractor.exceptions import CatalogParseError
from gradlesentinel.engines.dependency_extractor.models import (
    Dependency,
    ManagerData,
    RawToken,
)
from gradlesentinel.engines.dependency_extractor.registry_urls import RegistryUrlAccumulator
from gradlesentinel.engines.dependency_extractor.resolver import resolve
from gradlesentinel.engines.dependency_extractor.scope import ScopeTree

log = structlog.get_logger("gradlesentinel.engine")


class DependencyAssembler:
    """Build :class:`Dependency` records against a finished scope tree."""

    def __init__(self, scope: ScopeTree, config: ExtractConfig | None = None) -> None:
        self._scope = scope
        self._config = config or ExtractConfig()

    def new_accumulator(self) -> RegistryUrlAccumulator:
        return RegistryUrlAccumulator(
            default_url=self._config.default_registry_url,
            plugin_url=self._config.plugin_registry_url,
        )

    def registry_urls(self, tokens: list[RawToken], directory: str) -> RegistryUrlAccumulator:
        """Collect the registry URLs declared by one script."""
        urls = self.new_accumulator()
        node = self._scope.node_for(directory)
        for token in tokens:
            if token.kind != "registry-url":
                continue
            resolved = resolve(token.raw_text, node)
            if resolved.literal is None:
                log.debug(
                    "assembler.url_unresolved",
                    package_file=token.package_file,
                    url=token.raw_text,
                    missing=resolved.unresolved_references,
                )
                continue
            urls.add(resolved.literal)
        return urls

    # ── scripts and property files ───────────────────────────────────────

    def from_tokens(
        self, tokens: list[RawToken], urls: RegistryUrlAccumulator
    ) -> list[Dependency]:
        return [
            self._from_token(token, urls)
            for token in tokens
            if token.kind in ("dependency-literal", "plugin-declaration") and token.name
        ]

    def _from_token(self, token: RawToken, urls: RegistryUrlAccumulator) -> Dependency:
        dep_type = "plugin" if token.kind == "plugin-declaration" else "dependency"
        dep = Dependency(
            dep_name=token.name,
            dep_type=dep_type,
            registry_urls=urls.urls_for(dep_type),
            manager_data=ManagerData(package_file=token.package_file),
        )
        if dep_type == "plugin":
            dep.package_name = f"{token.name}:{token.name}.gradle.plugin"
            dep.commit_message_topic = f"plugin {token.name}"

        resolved = resolve(token.raw_text, self._scope.node_for(token.directory))

        if resolved.unresolved_references:
            log.debug(
                "assembler.version_unresolved",
                package_file=token.package_file,
                dep_name=token.name,
                missing=resolved.unresolved_references,
            )
            dep.skip_reason = "unknown-version"
        elif resolved.composition_kind != "none" and not resolved.is_exact_reference:
            # No single span holds the composed value; reported for display only.
            dep.current_value = resolved.literal
            dep.skip_reason = "contains-variable"
        elif resolved.composition_kind == "single-variable":
            binding = resolved.bindings[0]
            dep.current_value = binding.value
            dep.group_name = binding.name
            dep.manager_data = ManagerData(
                package_file=binding.package_file,
                file_replace_position=binding.offset,
            )
        else:
            dep.current_value = token.raw_text
            dep.manager_data.file_replace_position = token.offset
        return dep

    # ── catalogs ─────────────────────────────────────────────────────────

    def from_catalog(self, package_file: str, content: str) -> list[Dependency]:
        try:
            entries = extract_catalog(content, package_file)
        except CatalogParseError as exc:
            log.warning("assembler.catalog_invalid", package_file=package_file, error=str(exc))
            return []

        urls = self.new_accumulator()
        return [
            Dependency(
                dep_name=entry.dep_name,
                dep_type=entry.dep_type,
                package_name=entry.package_name,
                current_value=entry.current_value,
                group_name=entry.group_name,
                commit_message_topic=entry.commit_message_topic,
                skip_reason=entry.skip_reason,
                registry_urls=urls.urls_for(entry.dep_type),
                manager_data=ManagerData(
                    package_file=package_file,
                    file_replace_position=(
                        None if entry.skip_reason else entry.file_replace_position
                    ),
                ),
            )
            for entry in entries
        ]
