"""Lexers for Gradle scripts and property files.

The script lexer does not parse Groovy or Kotlin. It runs one regex per
token class over the whole text and keeps every hit, so it tolerates any
surrounding syntax:

  - variable assignments   foo = "1.0"  /  ext.foo = '1.0'  /  extra["foo"] = "1.0"
  - dependency literals    "group:artifact:version"  /  group: 'g', name: 'a', version: 'v'
  - registry URLs          url "https://..."  /  maven("https://...")  /  mavenCentral()
  - plugin declarations    id "x" version "1.0"  /  kotlin("jvm") version "1.5.21"

Every token records the offset of its value, which for dependencies and
plugins is the version text.
"""

from __future__ import annotations

import re

from gradlesentinel.engines.dependency_extractor.models import RawToken
from gradlesentinel.engines.dependency_extractor.registry_urls import (
    GOOGLE_MAVEN_URL,
    GRADLE_PLUGIN_PORTAL_URL,
    JCENTER_URL,
    MAVEN_CENTRAL_URL,
)

_ARTIFACT = r"[A-Za-z][\w\-]*(?:\.[A-Za-z0-9][\w\-]*)*"

# ── variable assignments ─────────────────────────────────────────────────

# def foo = "1.0" / val foo = "1.0" / ext.foo = "1.0" / project.ext.foo = "1.0"
_ASSIGNMENT_RE = re.compile(
    r"(?<![\w.$])(?:(?:def|val|var)\s+)?(?:rootProject\.|project\.)?(?:ext\.|extra\.)?"
    r"([A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)"
    r"""\s*=(?!=)\s*(['"])([^'"$\n]*)\2"""
)

# extra["foo"] = "1.0" / ext["foo"] = "1.0" / set("foo", "1.0")
_INDEXED_ASSIGNMENT_RE = re.compile(
    r"""(?:\bextra\[|\bext\[|\bset\(\s*)\s*(['"])([A-Za-z_][\w.\-]*)\1\s*(?:\]\s*=|,)\s*"""
    r"""(['"])([^'"$\n]*)\3"""
)

# val foo by extra("1.0")
_DELEGATED_ASSIGNMENT_RE = re.compile(
    r"""\bval\s+([A-Za-z_]\w*)\s+by\s+extra\(\s*(['"])([^'"$\n]*)\2"""
)

# ── dependency literals ──────────────────────────────────────────────────

# "group:artifact:version", optionally ":classifier" and "@extension"
_DEPENDENCY_RE = re.compile(
    rf"""(['"])({_ARTIFACT}):({_ARTIFACT}):([^'"\s@:]+)(?::[\w.\-]+)?(?:@\w+)?\1"""
)

# group: "g", name: "a", version: "v"   (Kotlin uses "=")
_MAP_DEPENDENCY_RE = re.compile(
    rf"""\bgroup\s*[:=]\s*(['"])({_ARTIFACT})\1\s*,\s*"""
    rf"""name\s*[:=]\s*(['"])({_ARTIFACT})\3\s*,\s*"""
    r"""version\s*[:=]\s*(['"])([^'"\s]+)\5"""
)

# ── registry URLs ────────────────────────────────────────────────────────

# url "…" / url = "…" / url("…") / url = uri("…") / url(uri("…"))
_URL_RE = re.compile(
    r"""\burl\s*(?:=\s*)?\(?\s*(?:uri\s*\(\s*)?(['"])([^'"\s]+)\1"""
)

# maven("…") / maven(url = "…") / maven(uri("…"))
_MAVEN_SHORTHAND_RE = re.compile(
    r"""\bmaven\s*\(\s*(?:url\s*=\s*)?(?:uri\s*\(\s*)?(['"])([^'"\s]+)\1"""
)

_PREDEFINED_RE = re.compile(r"\b(mavenCentral|jcenter|google|gradlePluginPortal)\s*\(\s*\)")

PREDEFINED_REGISTRIES = {
    "mavenCentral": MAVEN_CENTRAL_URL,
    "jcenter": JCENTER_URL,
    "google": GOOGLE_MAVEN_URL,
    "gradlePluginPortal": GRADLE_PLUGIN_PORTAL_URL,
}

# ── plugins ──────────────────────────────────────────────────────────────

# id "x" version "1.0" / id("x") version "1.0" / kotlin("jvm") version kotlinVersion
_PLUGIN_RE = re.compile(
    r"""\b(id|kotlin)\s*\(?\s*(['"])([\w.\-]+)\2\s*\)?[ \t]*"""
    r"""\bversion\s*\(?\s*(?:(['"])([^'"\s]+)\4|([A-Za-z_]\w*)(?![\w.(]))"""
)

_KOTLIN_PLUGIN_PREFIX = "org.jetbrains.kotlin."

# ── property files ───────────────────────────────────────────────────────

_PROPERTY_RE = re.compile(
    r"^[ \t]*([A-Za-z_][\w.\-]*)[ \t]*[=:][ \t]*(.*?)[ \t\r]*$",
    re.MULTILINE,
)

_DEPENDENCY_STRING_RE = re.compile(rf"^({_ARTIFACT}):({_ARTIFACT}):([^\s@:]+)(?:@\w+)?$")


def lex_script(content: str, package_file: str, directory: str) -> list[RawToken]:
    """Scan a build script for all four token classes, in source order."""
    tokens: list[RawToken] = []

    def emit(kind, raw_text: str, offset: int, name: str | None = None) -> None:
        tokens.append(
            RawToken(
                kind=kind,
                raw_text=raw_text,
                offset=offset,
                directory=directory,
                package_file=package_file,
                name=name,
            )
        )

    for m in _ASSIGNMENT_RE.finditer(content):
        emit("variable-assignment", m.group(3), m.start(3), m.group(1))
    for m in _INDEXED_ASSIGNMENT_RE.finditer(content):
        emit("variable-assignment", m.group(4), m.start(4), m.group(2))
    for m in _DELEGATED_ASSIGNMENT_RE.finditer(content):
        emit("variable-assignment", m.group(3), m.start(3), m.group(1))

    for m in _DEPENDENCY_RE.finditer(content):
        emit("dependency-literal", m.group(4), m.start(4), f"{m.group(2)}:{m.group(3)}")
    for m in _MAP_DEPENDENCY_RE.finditer(content):
        emit("dependency-literal", m.group(6), m.start(6), f"{m.group(2)}:{m.group(4)}")

    for m in _URL_RE.finditer(content):
        emit("registry-url", m.group(2), m.start(2))
    for m in _MAVEN_SHORTHAND_RE.finditer(content):
        emit("registry-url", m.group(2), m.start(2))
    for m in _PREDEFINED_RE.finditer(content):
        emit("registry-url", PREDEFINED_REGISTRIES[m.group(1)], m.start())

    for m in _PLUGIN_RE.finditer(content):
        plugin_id = m.group(3)
        if m.group(1) == "kotlin":
            plugin_id = _KOTLIN_PLUGIN_PREFIX + plugin_id
        if m.group(5) is not None:
            emit("plugin-declaration", m.group(5), m.start(5), plugin_id)
        else:
            # Kotlin DSL: `version someVal` refers to a variable directly
            emit("plugin-declaration", "${" + m.group(6) + "}", m.start(6), plugin_id)

    # sort() is stable, so tokens sharing an offset keep matcher order
    tokens.sort(key=lambda t: t.offset)
    return tokens


def lex_properties(content: str, package_file: str, directory: str) -> list[RawToken]:
    """Scan a ``gradle.properties`` file.

    Each ``key=value`` line becomes a variable binding, except values shaped
    like ``group:artifact:version``, which are dependency literals.
    """
    tokens: list[RawToken] = []
    for m in _PROPERTY_RE.finditer(content):
        key, value = m.group(1), m.group(2)
        offset = m.start(2)
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
            offset += 1
        if not value:
            continue

        dep = _DEPENDENCY_STRING_RE.match(value)
        if dep:
            tokens.append(
                RawToken(
                    kind="dependency-literal",
                    raw_text=dep.group(3),
                    offset=offset + dep.start(3),
                    directory=directory,
                    package_file=package_file,
                    name=f"{dep.group(1)}:{dep.group(2)}",
                )
            )
            continue

        tokens.append(
            RawToken(
                kind="variable-assignment",
                raw_text=value,
                offset=offset,
                directory=directory,
                package_file=package_file,
                name=key,
            )
        )
    return tokens
