"""Search engine referrer classifier."""

import os
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import structlog

from ..cache import TransientCache
from ..config import Settings, get_settings
from ..models.definition import SearchEngineDefinition
from ..models.response import MatchResult
from .builder import Catalog
from .extractor import KeywordExtractor
from .matcher import UrlMatcher
from .normalizer import UrlNormalizer
from .resolver import BacklinkResolver
from .store import DefinitionStore


logger = structlog.get_logger(__name__)


class SearchEngineClassifier:
    """Detects the search engine and keyword behind referrer URLs."""

    def __init__(
        self,
        catalog: Catalog,
        settings: Optional[Settings] = None,
        transient_cache: Optional[TransientCache] = None,
        asset_exists: Optional[Callable[[str], bool]] = None
    ) -> None:
        """
        Initialize the classifier.

        Args:
            catalog: Catalog of search engine URL patterns
            settings: Settings providing labels and the logo location
            transient_cache: Cache for the derived engine name index
            asset_exists: Predicate for logo paths, defaults to a filesystem check
                under ``settings.assets_base_path``
        """
        self.settings = settings or get_settings()
        self.normalizer = UrlNormalizer()
        self.matcher = UrlMatcher(self.normalizer)
        self.extractor = KeywordExtractor(self.normalizer)
        self.store = DefinitionStore(catalog, transient_cache)

        if asset_exists is None:
            base_path = self.settings.assets_base_path

            def asset_exists(path: str) -> bool:
                return os.path.isfile(os.path.join(base_path, path))

        self.resolver = BacklinkResolver(
            self.store,
            assets_root=self.settings.assets_root,
            keyword_not_defined_label=self.settings.keyword_not_defined_label,
            keyword_not_defined_url=self.settings.keyword_not_defined_url,
            asset_exists=asset_exists,
            normalizer=self.normalizer,
        )

        # Performance tracking
        self._stats = {
            "total_classifications": 0,
            "keyword_matches": 0,
            "no_keyword_matches": 0,
            "no_matches": 0,
            "total_execution_time": 0.0
        }

    @property
    def catalog(self) -> Catalog:
        return self.store.catalog

    def replace_catalog(self, catalog: Catalog) -> None:
        """
        Swap in a newly loaded catalog.

        Classifications already running keep the snapshot they started with.

        Args:
            catalog: Replacement catalog
        """
        self.store = DefinitionStore(catalog, TransientCache())
        self.resolver.store = self.store
        logger.info("Catalog replaced", total_urls=len(catalog))

    def classify(self, referrer_url: str) -> Optional[MatchResult]:
        """
        Extract the search engine and keyword from a referrer URL.

        The keyword is decoded to text using the engine's charsets, trimmed
        and lowercased: "QUErY test!" is returned as "query test!".

        Args:
            referrer_url: Referrer URL, e.g. ``http://www.google.com/search?q=web+analytics``

        Returns:
            MatchResult, with ``keywords`` False when the engine matched but
            sent no keyword, or None when the referrer is not a known
            search engine
        """
        start_time = time.time()
        self._stats["total_classifications"] += 1

        # One snapshot for the whole call
        store = self.store

        result = None
        resolved = self.matcher.resolve_host(referrer_url, store.catalog)
        if resolved is not None:
            definition = store.get_definition_by_host(resolved.key)
            result = self.extractor.extract(resolved, definition)

        if result is None:
            self._stats["no_matches"] += 1
        elif result.keywords is False:
            self._stats["no_keyword_matches"] += 1
        else:
            self._stats["keyword_matches"] += 1

        self._stats["total_execution_time"] += (time.time() - start_time) * 1000
        return result

    def classify_many(self, referrer_urls: Iterable[str]) -> List[Optional[MatchResult]]:
        """
        Classify several referrers.

        Args:
            referrer_urls: Referrer URLs

        Returns:
            Results in input order
        """
        return [self.classify(url) for url in referrer_urls]

    def get_definition_by_host(self, host: str) -> Optional[SearchEngineDefinition]:
        return self.store.get_definition_by_host(host)

    def get_parameter_names_by_host(self, host: str) -> List[str]:
        return self.store.get_parameter_names_by_host(host)

    def get_backlink_pattern_by_host(self, host: str) -> Optional[str]:
        return self.store.get_backlink_pattern_by_host(host)

    def get_charsets_by_host(self, host: str) -> List[str]:
        return self.store.get_charsets_by_host(host)

    def get_search_engine_names(self) -> Dict[str, str]:
        return self.store.get_search_engine_names()

    def get_url_from_name(self, name: str) -> str:
        """
        Return the URL of a search engine by name.

        Args:
            name: Search engine name, e.g. ``Google``

        Returns:
            URL such as ``http://www.google.com``, or the unknown-URL label
        """
        url = self.store.get_url_by_name(name)
        if url is None:
            return self.settings.unknown_url_label
        return "http://" + url

    def get_backlink_from_url_and_keyword(self, url: str, keyword: Union[str, bool]) -> Optional[str]:
        return self.resolver.get_backlink_from_url_and_keyword(url, keyword)

    def get_logo_from_url(self, url: str) -> str:
        return self.resolver.get_logo_from_url(url)

    def get_stats(self) -> Dict[str, Any]:
        """Get classifier statistics."""
        stats = self._stats.copy()

        total = stats["total_classifications"]
        if total > 0:
            stats["average_execution_time_ms"] = stats["total_execution_time"] / total
            stats["match_rate"] = (stats["keyword_matches"] + stats["no_keyword_matches"]) / total
            stats["no_match_rate"] = stats["no_matches"] / total
        else:
            stats["average_execution_time_ms"] = 0.0
            stats["match_rate"] = 0.0
            stats["no_match_rate"] = 0.0

        stats["catalog_urls"] = len(self.store.catalog)
        return stats
