"""File conventions — classify candidate paths and order them for evaluation."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from fnmatch import fnmatch

from gradlesentinel.engines.dependency_extractor.models import FileKind

# Matched against the basename only.
FILE_PATTERNS: dict[FileKind, list[str]] = {
    "properties": ["gradle.properties"],
    "script": ["*.gradle", "*.gradle.kts"],
    "catalog": ["*.versions.toml"],
}

BUILD_SCRIPT_NAMES = ("build.gradle", "build.gradle.kts")

ROOT_DIRECTORY = "."


def classify(path: str) -> FileKind | None:
    """Return the kind of a candidate file, or None when it is not recognized."""
    name = posixpath.basename(path.replace("\\", "/"))
    for kind, patterns in FILE_PATTERNS.items():
        if any(fnmatch(name, pattern) for pattern in patterns):
            return kind
    return None


def directory_of(path: str) -> str:
    """Normalized POSIX directory of *path*; the root is ``"."``."""
    return posixpath.normpath(posixpath.dirname(path.replace("\\", "/")) or ROOT_DIRECTORY)


def parent_directory(directory: str) -> str | None:
    if directory == ROOT_DIRECTORY:
        return None
    parent = posixpath.dirname(directory)
    if parent == directory:
        return None
    return parent or ROOT_DIRECTORY


def ancestors(directory: str) -> list[str]:
    """Ancestors of *directory*, nearest first."""
    result: list[str] = []
    current = parent_directory(directory)
    while current is not None:
        result.append(current)
        current = parent_directory(current)
    return result


def _rank(path: str, kind: FileKind) -> int:
    if kind == "properties":
        return 0
    if kind == "script":
        return 2 if posixpath.basename(path) in BUILD_SCRIPT_NAMES else 1
    return 3


def reorder_files(paths: Iterable[str]) -> list[str]:
    """Put recognized files into Gradle evaluation order.

    Ancestor directories come before their descendants; inside one directory
    property files come first, then helper scripts such as ``settings.gradle``,
    then ``build.gradle``, then catalogs. Everything else keeps caller order.
    Unrecognized paths and duplicates are dropped.
    """
    by_directory: dict[str, list[tuple[int, int, str]]] = {}
    for index, path in enumerate(dict.fromkeys(paths)):
        kind = classify(path)
        if kind is None:
            continue
        by_directory.setdefault(directory_of(path), []).append(
            (_rank(path, kind), index, path)
        )

    ordered_dirs: list[str] = []
    visited: set[str] = set()

    def visit(directory: str) -> None:
        if directory in visited:
            return
        visited.add(directory)
        for ancestor in reversed(ancestors(directory)):
            if ancestor in by_directory:
                visit(ancestor)
        ordered_dirs.append(directory)

    for directory in by_directory:
        visit(directory)

    return [path for d in ordered_dirs for _, _, path in sorted(by_directory[d])]
