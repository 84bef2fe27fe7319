#!/usr/bin/env python3
"""Standalone Gradle dependency extractor for a local checkout.

Usage:
    python scan_deps.py /path/to/repo
    python scan_deps.py .                     # scan current directory
    python scan_deps.py /path/to/repo --json  # camelCase records as JSON
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from gradlesentinel.core.logging import setup_logging
from gradlesentinel.engines.dependency_extractor import (
    ExtractConfig,
    PackageFile,
    extract_all_package_files,
    to_wire,
)
from gradlesentinel.engines.dependency_extractor.files import FILE_PATTERNS


def discover(repo: Path) -> list[str]:
    """Candidate Gradle files under *repo*, as sorted POSIX paths relative to it."""
    found: set[str] = set()
    for patterns in FILE_PATTERNS.values():
        for pattern in patterns:
            for hit in repo.glob(f"**/{pattern}"):
                if hit.is_file():
                    found.add(hit.relative_to(repo).as_posix())
    return sorted(found)


def _reader(repo: Path):
    def read(path: str) -> str | None:
        target = repo / path
        if not target.is_file():
            return None
        return target.read_text(encoding="utf-8", errors="replace")

    return read


def _print_records(records: list[PackageFile] | None, as_json: bool) -> None:
    if as_json:
        print(json.dumps(to_wire(records) or [], indent=2))
        return

    if not records:
        print("No dependencies found.")
        return

    total = sum(len(r.deps) for r in records)
    print(f"Found {total} dependencies in {len(records)} file(s)\n")

    for record in records:
        print(f"  {record.package_file}  ({record.datasource})")
        for d in record.deps:
            version = d.current_value or ""
            skip = f"  [{d.skip_reason}]" if d.skip_reason else ""
            print(f"    {d.dep_name} {version}{skip}")
        print()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Extract Gradle dependencies from a repo")
    parser.add_argument("target", help="Local path to scan")
    parser.add_argument("--json", action="store_true", dest="as_json", help="Output as JSON")
    args = parser.parse_args(argv)

    setup_logging()

    repo = Path(args.target).resolve()
    if not repo.is_dir():
        print(f"Error: {repo} is not a directory", file=sys.stderr)
        sys.exit(1)

    records = extract_all_package_files(discover(repo), _reader(repo), ExtractConfig.from_env())
    _print_records(records, args.as_json)


if __name__ == "__main__":
    main()
