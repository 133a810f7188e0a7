"""Core referrer classification functionality."""

from .builder import Catalog, CatalogBuilder, build_catalog
from .engine import SearchEngineClassifier
from .extractor import KeywordExtractor
from .matcher import UrlMatcher
from .normalizer import UrlNormalizer
from .resolver import BacklinkResolver
from .store import DefinitionStore

__all__ = [
    "Catalog",
    "CatalogBuilder",
    "build_catalog",
    "SearchEngineClassifier",
    "KeywordExtractor",
    "UrlMatcher",
    "UrlNormalizer",
    "BacklinkResolver",
    "DefinitionStore",
]
