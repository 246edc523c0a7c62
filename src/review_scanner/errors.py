from __future__ import annotations


class ReviewScannerError(Exception):
    pass


class ConfigError(ReviewScannerError, ValueError):
    pass


class CatalogError(ReviewScannerError):
    pass


class ProviderError(ReviewScannerError, RuntimeError):
    pass


class HttpError(ReviewScannerError, RuntimeError):
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status
