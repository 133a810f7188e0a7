"""
Referrer Classifier - search engine and keyword detection for referrer URLs.

Given a referrer URL and a catalog of known search engine URL patterns, the
classifier identifies the search engine that sent a visit and extracts the
keyword the visitor searched for, decoded and lowercased.
"""

__version__ = "1.0.0"

from .core.builder import Catalog, CatalogBuilder, build_catalog
from .core.engine import SearchEngineClassifier
from .exceptions import CatalogLoadError, DefinitionFormatError, ReferrerClassifierError
from .loader import DefinitionsLoader
from .models.response import MatchResult

__all__ = [
    "Catalog",
    "CatalogBuilder",
    "build_catalog",
    "SearchEngineClassifier",
    "DefinitionsLoader",
    "MatchResult",
    "CatalogLoadError",
    "DefinitionFormatError",
    "ReferrerClassifierError",
]
