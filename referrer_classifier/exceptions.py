"""Exceptions raised while loading search engine definitions."""


class ReferrerClassifierError(Exception):
    """Base class for all errors raised by this package."""


class DefinitionFormatError(ReferrerClassifierError):
    """The definitions document does not have the expected structure."""


class CatalogLoadError(ReferrerClassifierError):
    """The catalog could not be loaded; nothing was installed."""
    
    def __init__(self, message: str, source: str = "") -> None:
        super().__init__(message)
        self.source = source
