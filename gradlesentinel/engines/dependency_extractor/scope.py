"""Scope tree — per-directory variable bindings with upward inheritance."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from gradlesentinel.engines.dependency_extractor.files import (
    ROOT_DIRECTORY,
    ancestors,
    directory_of,
)
from gradlesentinel.engines.dependency_extractor.models import (
    FileKind,
    RawToken,
    VariableBinding,
)

log = structlog.get_logger("gradlesentinel.engine")


@dataclass
class ScopeNode:
    """Variables visible to files in one directory."""

    path: str
    variables: Mapping[str, VariableBinding] = field(default_factory=dict)
    parent: ScopeNode | None = None

    def lookup(self, name: str) -> VariableBinding | None:
        """Closest definition of *name*, walking from this node to the root."""
        node: ScopeNode | None = self
        while node is not None:
            binding = node.variables.get(name)
            if binding is not None:
                return binding
            node = node.parent
        return None


class ScopeTree:
    """Parent-linked tree of ScopeNodes mirroring the directory hierarchy.

    Built once per extraction run; read-only afterwards.
    """

    def __init__(self, nodes: dict[str, ScopeNode]) -> None:
        self._nodes = nodes

    @classmethod
    def build(cls, lexed_files: Iterable[tuple[str, FileKind, list[RawToken]]]) -> ScopeTree:
        """Build the tree from ``(path, kind, tokens)`` triples.

        Property-file bindings are applied before script bindings, so a
        script wins over ``gradle.properties`` in the same directory.
        Among scripts of one directory the later file wins.
        """
        lexed = list(lexed_files)
        nodes: dict[str, ScopeNode] = {}
        bindings: dict[str, dict[str, VariableBinding]] = {}

        for path, _, _ in lexed:
            directory = directory_of(path)
            for d in [directory, *ancestors(directory)]:
                if d not in nodes:
                    nodes[d] = ScopeNode(path=d)
                    bindings[d] = {}

        for wanted in ("properties", "script"):
            for path, kind, tokens in lexed:
                if kind != wanted:
                    continue
                scope = bindings[directory_of(path)]
                for token in tokens:
                    if token.kind != "variable-assignment" or token.name is None:
                        continue
                    scope[token.name] = VariableBinding(
                        name=token.name,
                        value=token.raw_text,
                        package_file=token.package_file,
                        offset=token.offset,
                    )

        for d, node in nodes.items():
            node.variables = MappingProxyType(bindings[d])
            parent = ancestors(d)
            node.parent = nodes[parent[0]] if parent else None

        log.debug(
            "scope.built",
            directories=len(nodes),
            variables=sum(len(b) for b in bindings.values()),
        )
        return cls(nodes)

    def node_for(self, directory: str) -> ScopeNode:
        """Node for *directory*, or its nearest known ancestor."""
        for d in [directory, *ancestors(directory)]:
            node = self._nodes.get(d)
            if node is not None:
                return node
        return self._nodes.get(ROOT_DIRECTORY) or ScopeNode(path=ROOT_DIRECTORY)

    def __contains__(self, directory: object) -> bool:
        return directory in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
