"""Lookup access to a loaded search engine catalog."""

from typing import Dict, List, Optional

from ..cache import TransientCache
from ..models.definition import SearchEngineDefinition
from .builder import Catalog


NAME_INDEX_CACHE_ID = "SearchEngine.getSearchEngineNames"


class DefinitionStore:
    """Host and name lookups over one Catalog snapshot."""

    def __init__(self, catalog: Catalog, transient_cache: Optional[TransientCache] = None) -> None:
        """
        Initialize the store.

        Args:
            catalog: Catalog to serve lookups from
            transient_cache: Cache holding the derived name index
        """
        self.catalog = catalog
        self.transient_cache = transient_cache if transient_cache is not None else TransientCache()

    def get_definition_by_host(self, host: str) -> Optional[SearchEngineDefinition]:
        """Definition registered for an exact URL pattern, or None."""
        return self.catalog.get(host)

    def get_parameter_names_by_host(self, host: str) -> List[str]:
        """
        Keyword parameters defined for a URL pattern.

        Args:
            host: URL pattern

        Returns:
            Raw parameter names (regular expressions included), empty if none
        """
        definition = self.get_definition_by_host(host)
        if definition is None:
            return []
        return definition.parameter_names()

    def get_backlink_pattern_by_host(self, host: str) -> Optional[str]:
        definition = self.get_definition_by_host(host)
        if definition is None or not definition.backlink:
            return None
        return definition.backlink

    def get_charsets_by_host(self, host: str) -> List[str]:
        definition = self.get_definition_by_host(host)
        if definition is None:
            return []
        return list(definition.charsets)

    def get_search_engine_names(self) -> Dict[str, str]:
        """
        Map each engine name to its first URL pattern in catalog order.

        The index is derived lazily and kept in the transient cache until
        the catalog is replaced.

        Returns:
            Dictionary of engine name to URL pattern
        """
        name_to_url = self.transient_cache.fetch(NAME_INDEX_CACHE_ID)
        if name_to_url:
            return dict(name_to_url)

        name_to_url = {}
        for url, definition in self.catalog.items():
            if definition.name not in name_to_url:
                name_to_url[definition.name] = url

        self.transient_cache.save(NAME_INDEX_CACHE_ID, name_to_url)
        return dict(name_to_url)

    def get_url_by_name(self, name: str) -> Optional[str]:
        """First URL pattern registered for an engine name, or None."""
        return self.get_search_engine_names().get(name)

    def invalidate(self) -> None:
        """Drop derived indexes."""
        self.transient_cache.delete(NAME_INDEX_CACHE_ID)
