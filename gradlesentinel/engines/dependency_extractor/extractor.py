"""Entry point — extract dependencies from a batch of Gradle files.

The caller decides which files are candidates and how to read them; this
module never touches the disk. A file that cannot be read is treated as
absent and does not stop the rest of the batch.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

import structlog

from gradlesentinel.engines.dependency_extractor.assembler import DependencyAssembler
from gradlesentinel.engines.dependency_extractor.config import ExtractConfig
from gradlesentinel.engines.dependency_extractor.files import (
    classify,
    directory_of,
    reorder_files,
)
from gradlesentinel.engines.dependency_extractor.lexer import lex_properties, lex_script
from gradlesentinel.engines.dependency_extractor.models import (
    FileKind,
    PackageFile,
    RawToken,
)
from gradlesentinel.engines.dependency_extractor.registry_urls import RegistryUrlAccumulator
from gradlesentinel.engines.dependency_extractor.scope import ScopeTree

log = structlog.get_logger("gradlesentinel.engine")

FileReader = Callable[[str], "str | None"]


@dataclass
class _Source:
    path: str
    kind: FileKind
    directory: str
    content: str | None
    tokens: list[RawToken] = field(default_factory=list)


def _read(reader: FileReader, path: str) -> str | None:
    try:
        content = reader(path)
    except Exception:
        log.warning("extractor.read_failed", package_file=path, exc_info=True)
        return None
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    return content


def _load(path: str, reader: FileReader) -> _Source:
    kind = classify(path)
    directory = directory_of(path)
    content = _read(reader, path)
    source = _Source(path=path, kind=kind, directory=directory, content=content)
    if content:
        if kind == "properties":
            source.tokens = lex_properties(content, path, directory)
        elif kind == "script":
            source.tokens = lex_script(content, path, directory)
    return source


def extract_all_package_files(
    package_files: Sequence[str],
    read_file: FileReader | Mapping[str, str | None],
    config: ExtractConfig | None = None,
) -> list[PackageFile] | None:
    """Extract dependency records from *package_files*.

    *read_file* is either a callable returning the content of a path (or
    None when it does not exist) or a mapping of path to content.

    Returns one :class:`PackageFile` per recognized input file in Gradle
    evaluation order, or None when no file yielded any dependency. A
    dependency is listed under the file holding its version text, which is
    not necessarily the file that declares it.
    """
    config = config or ExtractConfig()
    reader: FileReader = read_file.get if isinstance(read_file, Mapping) else read_file

    ordered = reorder_files(package_files)
    ignored = [p for p in dict.fromkeys(package_files) if classify(p) is None]
    if ignored:
        log.debug("extractor.ignored_files", files=ignored)

    sources = [_load(path, reader) for path in ordered]
    tree = ScopeTree.build((s.path, s.kind, s.tokens) for s in sources)
    assembler = DependencyAssembler(tree, config)

    script_urls: dict[str, RegistryUrlAccumulator] = {}
    directory_urls: dict[str, RegistryUrlAccumulator] = {}
    for source in sources:
        if source.kind != "script":
            continue
        urls = assembler.registry_urls(source.tokens, source.directory)
        script_urls[source.path] = urls
        directory_urls.setdefault(source.directory, assembler.new_accumulator()).extend(
            urls.custom_urls
        )

    records = {
        s.path: PackageFile(package_file=s.path, datasource=config.datasource)
        for s in sources
    }
    total = 0
    for source in sources:
        if source.kind == "catalog":
            deps = assembler.from_catalog(source.path, source.content) if source.content else []
        else:
            urls = (
                script_urls.get(source.path)
                or directory_urls.get(source.directory)
                or assembler.new_accumulator()
            )
            deps = assembler.from_tokens(source.tokens, urls)
        for dep in deps:
            records[dep.manager_data.package_file].deps.append(dep)
        total += len(deps)

    if total == 0:
        log.debug("extractor.empty", files=len(records))
        return None

    log.info("extractor.done", files=len(records), deps=total)
    return list(records.values())
