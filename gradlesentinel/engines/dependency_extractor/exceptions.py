"""Custom exceptions for the dependency extractor."""


class ExtractorError(Exception):
    """Base exception for all extractor errors."""


class CatalogParseError(ExtractorError):
    """Raised when a version catalog is not valid TOML."""

    def __init__(self, package_file: str, cause: Exception):
        self.package_file = package_file
        self.cause = cause
        super().__init__(f"Cannot parse version catalog '{package_file}': {cause}")
