"""Dependency extractor engine — Gradle scripts, properties and version catalogs."""

from gradlesentinel.engines.dependency_extractor.config import ExtractConfig
from gradlesentinel.engines.dependency_extractor.extractor import extract_all_package_files
from gradlesentinel.engines.dependency_extractor.models import (
    Dependency,
    ManagerData,
    PackageFile,
)
from gradlesentinel.engines.dependency_extractor.schemas import to_wire

__all__ = [
    "Dependency",
    "ExtractConfig",
    "ManagerData",
    "PackageFile",
    "extract_all_package_files",
    "to_wire",
]
