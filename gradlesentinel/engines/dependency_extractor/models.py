"""Data models for the dependency extractor engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

FileKind = Literal["properties", "script", "catalog"]

TokenKind = Literal[
    "variable-assignment",
    "dependency-literal",
    "registry-url",
    "plugin-declaration",
]

CompositionKind = Literal["none", "single-variable", "multi-variable"]

DepType = Literal["dependency", "plugin"]

SkipReason = Literal[
    "contains-variable",
    "no-version",
    "unsupported-version",
    "unknown-version",
    "multiple-constraint-dep",
]


@dataclass
class VariableBinding:
    """A literal value bound to a name in one directory scope."""

    name: str
    value: str
    package_file: str  # file that declares the binding
    offset: int  # index of the value's first character in that file


@dataclass
class RawToken:
    """A recognizable substring found by one of the lexers."""

    kind: TokenKind
    raw_text: str
    offset: int
    directory: str
    package_file: str
    name: str | None = None  # variable name / group:artifact / plugin id


@dataclass
class ResolvedValue:
    """Result of substituting scope variables into a raw value."""

    literal: str | None
    composition_kind: CompositionKind
    unresolved_references: list[str] = field(default_factory=list)
    bindings: list[VariableBinding] = field(default_factory=list)
    is_exact_reference: bool = False


@dataclass
class ManagerData:
    package_file: str
    file_replace_position: int | None = None


@dataclass
class Dependency:
    """A single dependency record ready for the update pipeline."""

    dep_name: str
    manager_data: ManagerData
    dep_type: DepType = "dependency"
    package_name: str | None = None
    current_value: str | None = None
    group_name: str | None = None
    commit_message_topic: str | None = None
    registry_urls: list[str] = field(default_factory=list)
    skip_reason: SkipReason | None = None

    @property
    def file_replace_position(self) -> int | None:
        return self.manager_data.file_replace_position


@dataclass
class PackageFile:
    """All dependencies whose version text lives in one file."""

    package_file: str
    deps: list[Dependency] = field(default_factory=list)
    datasource: str | None = None
