"""Parser for Gradle version catalogs (gradle/libs.versions.toml).

Formats:
  [versions]
  kotest = "4.6.0"

  [libraries]
  kotest-runner = { module = "io.kotest:kotest-runner-junit5", version.ref = "kotest" }
  mockito = { group = "org.mockito", name = "mockito-core", version = "3.10.0" }
  okhttp = "com.squareup.okhttp3:okhttp:4.9.0"

  [bundles]
  kotest = ["kotest-runner"]

  [plugins]
  detekt = { id = "io.gitlab.arturbosch.detekt", version.ref = "detekt" }
  kotlinJvm = "org.jetbrains.kotlin.jvm:1.5.21"

TOML decoding goes through tomllib; positions of version strings are then
located in the raw text so they can be rewritten in place later.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import structlog

from gradlesentinel.engines.dependency_extractor.exceptions import CatalogParseError
from gradlesentinel.engines.dependency_extractor.models import DepType, SkipReason

log = structlog.get_logger("gradlesentinel.engine")

# Plain versions, dynamic versions ("1.+", "+") and ranges ("[1.0,2.0)").
_VERSION_RE = re.compile(r"^(?:\+|[A-Za-z0-9][\w.+\-]*|[\[\]\(][^\[\]()]*[\[\])])$")

# Rich version keys that each carry a single version string.
_RICH_VERSION_KEYS = ("require", "prefer", "strictly")

_Spans = list[tuple[int, int]]

_HEADER_RE = re.compile(r"^[ \t]*\[([^\[\]\n]+)\][ \t]*(?:#.*)?$", re.MULTILINE)


@dataclass
class VersionCatalog:
    versions: dict[str, Any] = field(default_factory=dict)
    libraries: dict[str, Any] = field(default_factory=dict)
    plugins: dict[str, Any] = field(default_factory=dict)
    bundles: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class CatalogEntry:
    """A library or plugin from the catalog with its version resolved."""

    alias: str
    dep_type: DepType
    dep_name: str
    package_name: str | None = None
    current_value: str | None = None
    file_replace_position: int | None = None
    group_name: str | None = None
    commit_message_topic: str | None = None
    skip_reason: SkipReason | None = None


@dataclass
class _Version:
    current_value: str | None = None
    offset: int | None = None
    skip_reason: SkipReason | None = None
    version_ref: str | None = None


def _table(data: dict, name: str, package_file: str) -> dict:
    value = data.get(name, {})
    if not isinstance(value, dict):
        log.warning("catalog.bad_table", package_file=package_file, table=name)
        return {}
    return value


def parse_catalog(content: str, package_file: str) -> VersionCatalog:
    """Decode the catalog tables. Raises :class:`CatalogParseError` on bad TOML."""
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise CatalogParseError(package_file, exc) from exc

    bundles: dict[str, list[str]] = {}
    for alias, members in _table(data, "bundles", package_file).items():
        if isinstance(members, list):
            bundles[alias] = [m for m in members if isinstance(m, str)]

    return VersionCatalog(
        versions=_table(data, "versions", package_file),
        libraries=_table(data, "libraries", package_file),
        plugins=_table(data, "plugins", package_file),
        bundles=bundles,
    )


def _normalize_key(raw: str) -> str:
    return ".".join(part.strip().strip("\"'") for part in raw.split("."))


class _Locator:
    """Find version strings in the raw catalog text."""

    def __init__(self, content: str) -> None:
        self.content = content
        headers = [
            (_normalize_key(m.group(1)), m.end(), m.start())
            for m in _HEADER_RE.finditer(content)
        ]
        self._tables: dict[str, tuple[int, int]] = {}
        for i, (name, body_start, _) in enumerate(headers):
            body_end = headers[i + 1][2] if i + 1 < len(headers) else len(content)
            self._tables.setdefault(name, (body_start, body_end))

    def entry_spans(self, table: str, alias: str) -> _Spans:
        """Text spans holding the value of ``table.alias``.

        One span for a ``[table.alias]`` sub-table or an ``alias = ...``
        line, one per line for dotted keys (``alias.version = ...``).
        """
        sub_table = self._tables.get(f"{table}.{alias}")
        if sub_table is not None:
            return [sub_table]
        body = self._tables.get(table)
        if body is None:
            return []
        key = re.escape(alias)
        pattern = re.compile(
            rf"""^[ \t]*(?:{key}|"{key}"|'{key}')[ \t]*(?P<sep>[=.])[^\n]*""", re.MULTILINE
        )
        spans: _Spans = []
        for m in pattern.finditer(self.content, body[0], body[1]):
            if m.group("sep") == "=":
                # inline tables are single-line
                return [(m.end("sep"), m.end())]
            spans.append((m.start("sep"), m.end()))
        return spans

    def value_offset(self, spans: _Spans, value: str, key: str | None = None) -> int | None:
        """Offset of the first character of the quoted *value* inside *spans*."""
        prefix = rf"\b{re.escape(key)}\s*=\s*" if key else ""
        pattern = re.compile(rf"""{prefix}(?P<q>['"])(?P<v>{re.escape(value)})(?P=q)""")
        for start, end in spans:
            m = pattern.search(self.content, start, end)
            if m:
                return m.start("v")
        return None


class _CatalogResolver:
    def __init__(self, catalog: VersionCatalog, content: str) -> None:
        self.catalog = catalog
        self.locator = _Locator(content)

    # ── versions ─────────────────────────────────────────────────────────

    def literal_version(
        self, version: Any, spans: _Spans, key: str | None = None
    ) -> _Version:
        if version is None or version == "":
            return _Version(skip_reason="no-version")

        if isinstance(version, str):
            if not _VERSION_RE.match(version):
                return _Version(skip_reason="unsupported-version")
            return _Version(
                current_value=version,
                offset=self.locator.value_offset(spans, version, key),
            )

        if isinstance(version, dict):
            if "reject" in version or version.get("rejectAll"):
                return _Version(skip_reason="unsupported-version")
            present = [k for k in _RICH_VERSION_KEYS if k in version]
            if len(present) > 1:
                return _Version(skip_reason="multiple-constraint-dep")
            if not present:
                return _Version(skip_reason="unknown-version")
            value = version[present[0]]
            if not isinstance(value, str) or not _VERSION_RE.match(value):
                return _Version(skip_reason="unsupported-version")
            return _Version(
                current_value=value,
                offset=self.locator.value_offset(spans, value, present[0]),
            )

        return _Version(skip_reason="unsupported-version")

    def version(self, version: Any, spans: _Spans) -> _Version:
        if isinstance(version, dict) and "ref" in version:
            ref = version["ref"]
            if not isinstance(ref, str) or ref not in self.catalog.versions:
                return _Version(
                    skip_reason="unknown-version",
                    version_ref=ref if isinstance(ref, str) else None,
                )
            result = self.literal_version(
                self.catalog.versions[ref], self.locator.entry_spans("versions", ref)
            )
            result.version_ref = ref
            return result
        return self.literal_version(version, spans, key="version")

    def _notation_offset(
        self, spans: _Spans, notation: str, version: str
    ) -> int | None:
        start = self.locator.value_offset(spans, notation)
        if start is None:
            return None
        return start + len(notation) - len(version)

    # ── entries ──────────────────────────────────────────────────────────

    def library(self, alias: str, descriptor: Any) -> CatalogEntry:
        spans = self.locator.entry_spans("libraries", alias)

        if isinstance(descriptor, str):
            parts = descriptor.split(":")
            if len(parts) == 2 and all(parts):
                return CatalogEntry(alias, "dependency", alias, skip_reason="no-version")
            if len(parts) != 3 or not all(parts):
                return CatalogEntry(alias, "dependency", alias, skip_reason="unsupported-version")
            group, name, value = parts
            if not _VERSION_RE.match(value):
                return CatalogEntry(alias, "dependency", alias, skip_reason="unsupported-version")
            return CatalogEntry(
                alias,
                "dependency",
                f"{group}:{name}",
                current_value=value,
                file_replace_position=self._notation_offset(spans, descriptor, value),
            )

        if not isinstance(descriptor, dict):
            return CatalogEntry(alias, "dependency", alias, skip_reason="unsupported-version")

        module = descriptor.get("module")
        group, name = descriptor.get("group"), descriptor.get("name")
        if isinstance(module, str) and module.count(":") == 1:
            dep_name = module
        elif isinstance(group, str) and isinstance(name, str):
            dep_name = f"{group}:{name}"
        else:
            dep_name = alias

        if "version" not in descriptor:
            return CatalogEntry(alias, "dependency", alias, skip_reason="no-version")

        version = self.version(descriptor["version"], spans)
        if version.skip_reason:
            return CatalogEntry(alias, "dependency", alias, skip_reason=version.skip_reason)
        return CatalogEntry(
            alias,
            "dependency",
            dep_name,
            current_value=version.current_value,
            file_replace_position=version.offset,
            group_name=version.version_ref,
        )

    def plugin(self, alias: str, descriptor: Any) -> CatalogEntry:
        spans = self.locator.entry_spans("plugins", alias)
        pointer = False

        if isinstance(descriptor, str):
            plugin_id, _, value = descriptor.partition(":")
            version = self.literal_version(value or None, [])
            if version.current_value is not None:
                version.offset = self._notation_offset(spans, descriptor, value)
        elif isinstance(descriptor, dict):
            plugin_id = descriptor.get("id") if isinstance(descriptor.get("id"), str) else alias
            raw = descriptor.get("version")
            pointer = isinstance(raw, dict) and "ref" in raw
            version = self.version(raw, spans) if raw is not None else _Version(skip_reason="no-version")
        else:
            plugin_id = alias
            version = _Version(skip_reason="unsupported-version")

        entry = CatalogEntry(
            alias,
            "plugin",
            plugin_id,
            package_name=f"{plugin_id}:{plugin_id}.gradle.plugin",
            current_value=version.current_value,
            file_replace_position=version.offset,
            commit_message_topic=f"plugin {alias}",
            skip_reason=version.skip_reason,
        )
        if pointer and version.skip_reason is None:
            # grouped entries share one change announcement
            entry.group_name = version.version_ref
            entry.commit_message_topic = None
        return entry


def extract_catalog(content: str, package_file: str) -> list[CatalogEntry]:
    """Resolve every library, then every plugin, in file order."""
    catalog = parse_catalog(content, package_file)
    resolver = _CatalogResolver(catalog, content)

    for bundle, members in catalog.bundles.items():
        dangling = [m for m in members if m not in catalog.libraries]
        if dangling:
            log.debug(
                "catalog.bundle_dangling",
                package_file=package_file,
                bundle=bundle,
                members=dangling,
            )

    entries = [resolver.library(alias, d) for alias, d in catalog.libraries.items()]
    entries += [resolver.plugin(alias, d) for alias, d in catalog.plugins.items()]

    for entry in entries:
        if entry.skip_reason is None and entry.file_replace_position is None:
            # e.g. a version written with TOML escapes
            log.debug("catalog.version_unlocated", package_file=package_file, alias=entry.alias)
            entry.skip_reason = "unsupported-version"
            entry.current_value = None
            if entry.dep_type == "dependency":
                entry.dep_name = entry.alias
    return entries
