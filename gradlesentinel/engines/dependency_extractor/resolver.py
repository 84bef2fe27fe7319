"""Variable resolution — substitute ``$name`` / ``${name}`` references."""

from __future__ import annotations

import re

from gradlesentinel.engines.dependency_extractor.models import ResolvedValue
from gradlesentinel.engines.dependency_extractor.scope import ScopeNode

# ${dotted.name} or $name; the short form stops at the first non-word char,
# so "$foo.$bar" holds two references.
_REFERENCE_RE = re.compile(r"\$\{([A-Za-z_][\w.]*)\}|\$([A-Za-z_]\w*)")


def find_references(raw: str) -> list[str]:
    """Names referenced in *raw*, in order of appearance."""
    return [m.group(1) or m.group(2) for m in _REFERENCE_RE.finditer(raw)]


def resolve(raw: str, scope: ScopeNode) -> ResolvedValue:
    """Resolve every reference in *raw* against *scope* and its ancestors.

    ``literal`` is the fully substituted text, or None when at least one
    reference has no binding anywhere up the chain.
    """
    matches = list(_REFERENCE_RE.finditer(raw))
    if not matches:
        return ResolvedValue(literal=raw, composition_kind="none")

    result = ResolvedValue(
        literal=None,
        composition_kind="single-variable" if len(matches) == 1 else "multi-variable",
        is_exact_reference=len(matches) == 1 and matches[0].group(0) == raw,
    )

    parts: list[str] = []
    pos = 0
    for m in matches:
        parts.append(raw[pos : m.start()])
        name = m.group(1) or m.group(2)
        binding = scope.lookup(name)
        if binding is None:
            result.unresolved_references.append(name)
        else:
            result.bindings.append(binding)
            parts.append(binding.value)
        pos = m.end()
    parts.append(raw[pos:])

    if not result.unresolved_references:
        result.literal = "".join(parts)
    return result
