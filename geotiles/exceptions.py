"""Custom exceptions for the geotiles library."""


class GeoTilesError(Exception):
    """Base exception for all geotiles errors."""
    pass


class ConfigurationError(GeoTilesError):
    """Raised when configuration is invalid or incomplete."""
    pass


class SourceDataError(GeoTilesError):
    """Raised when an input dataset cannot be read or parsed."""
    pass


class TransientAPIError(GeoTilesError):
    """Raised for upstream responses that are worth retrying (5xx, 429)."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(message or f"Transient API error: HTTP {status_code}")


class StoreError(GeoTilesError):
    """Raised when the tile store is missing or cannot be written."""
    pass


class QualityGateError(GeoTilesError):
    """Raised when a build fails one or more data-quality gates."""

    def __init__(self, report):
        self.report = report
        failed = ", ".join(r.name for r in report.failed)
        super().__init__(f"Quality gates failed: {failed}")
