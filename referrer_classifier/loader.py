"""Loading of the search engine catalog from its definitions sources."""

import json
from typing import Any, Callable, List, Optional

import structlog
import yaml

from .cache import MemoryCache
from .config import Settings, get_settings
from .core.builder import Catalog, CatalogBuilder
from .exceptions import CatalogLoadError, DefinitionFormatError
from .persistence import InMemoryOptionStore, JsonFileOptionStore, OptionStore


logger = structlog.get_logger(__name__)

# Called with the builder before the catalog is frozen
CatalogHook = Callable[[CatalogBuilder], None]


class DefinitionsLoader:
    """
    Builds the Catalog once and hands out the same snapshot afterwards.

    Sources are tried in order: the eager cache, the flattened catalog
    persisted in the option store, and finally the bundled YAML document
    (whose flattened form is then persisted). Registered hooks may add or
    override entries before the catalog is frozen.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        option_store: Optional[OptionStore] = None,
        eager_cache: Optional[MemoryCache] = None,
        hooks: Optional[List[CatalogHook]] = None
    ) -> None:
        """
        Initialize the loader.

        Args:
            settings: Settings naming the definitions file and option name
            option_store: Persistent store for the flattened catalog
            eager_cache: Process-lifetime cache for the built catalog
            hooks: Callbacks run with the builder before freezing
        """
        self.settings = settings or get_settings()
        if option_store is None:
            if self.settings.option_storage_path:
                option_store = JsonFileOptionStore(self.settings.option_storage_path)
            else:
                option_store = InMemoryOptionStore()
        self.option_store = option_store
        self.eager_cache = eager_cache if eager_cache is not None else MemoryCache()
        self.hooks: List[CatalogHook] = list(hooks or [])

    @property
    def cache_id(self) -> str:
        return f"SearchEngine-{self.settings.option_storage_name}"

    def add_hook(self, hook: CatalogHook) -> None:
        """Register a callback that contributes entries to future loads."""
        self.hooks.append(hook)

    def get_catalog(self) -> Catalog:
        """
        Return the catalog, building it on first use.

        Raises:
            CatalogLoadError: If no valid catalog could be built
        """
        if self.settings.enable_cache and self.eager_cache.contains(self.cache_id):
            return self.eager_cache.fetch(self.cache_id)

        catalog = self._load()
        if self.settings.enable_cache:
            self.eager_cache.save(self.cache_id, catalog)
        return catalog

    def reload(self) -> Catalog:
        """Build a fresh catalog, ignoring the cached one."""
        self.eager_cache.delete(self.cache_id)
        return self.get_catalog()

    def load_yaml(self, text: str, persist: bool = True) -> Catalog:
        """
        Build a catalog from a YAML definitions document.

        Args:
            text: YAML document (engine name to list of definition blocks)
            persist: Whether to store the flattened result in the option store

        Returns:
            Frozen Catalog, hooks applied

        Raises:
            CatalogLoadError: If the document cannot be parsed or is malformed
        """
        builder = CatalogBuilder()
        self._add_yaml(builder, text, source="yaml")
        if persist:
            self._persist(builder)
        catalog = self._finish(builder, source="yaml")
        if self.settings.enable_cache:
            self.eager_cache.save(self.cache_id, catalog)
        return catalog

    def _load(self) -> Catalog:
        builder = CatalogBuilder()

        stored = self._read_stored()
        if stored:
            source = "option"
            self._add_stored(builder, stored)
        else:
            source = self.settings.definitions_file
            try:
                with open(self.settings.definitions_file, 'r', encoding='utf-8') as f:
                    text = f.read()
            except OSError as e:
                logger.error("Failed to read definitions file", path=source, error=str(e))
                raise CatalogLoadError(f"Cannot read definitions file: {e}", source) from e

            self._add_yaml(builder, text, source=source)
            self._persist(builder)

        return self._finish(builder, source=source)

    def _read_stored(self) -> Optional[str]:
        try:
            return self.option_store.get(self.settings.option_storage_name)
        except (ValueError, OSError) as e:
            logger.error("Failed to read stored definitions", error=str(e))
            raise CatalogLoadError(f"Cannot read stored definitions: {e}", "option") from e

    def _add_yaml(self, builder: CatalogBuilder, text: str, source: str) -> None:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            logger.error("Failed to parse definitions document", source=source, error=str(e))
            raise CatalogLoadError(f"Invalid definitions document: {e}", source) from e

        self._apply(builder.add_definitions, data, source)

    def _add_stored(self, builder: CatalogBuilder, stored: str) -> None:
        try:
            data = json.loads(stored)
        except ValueError as e:
            logger.error("Failed to decode stored definitions", error=str(e))
            raise CatalogLoadError(f"Invalid stored definitions: {e}", "option") from e

        self._apply(builder.add_flat, data, "option")

    @staticmethod
    def _apply(add: Callable[[Any], None], data: Any, source: str) -> None:
        try:
            add(data)
        except DefinitionFormatError as e:
            logger.error("Malformed search engine definitions", source=source, error=str(e))
            raise CatalogLoadError(str(e), source) from e

    def _persist(self, builder: CatalogBuilder) -> None:
        flat = builder.freeze().to_flat()
        try:
            self.option_store.set(self.settings.option_storage_name, json.dumps(flat, ensure_ascii=False))
        except (ValueError, OSError) as e:
            logger.error("Failed to persist definitions", error=str(e))
            raise CatalogLoadError(f"Cannot persist definitions: {e}", "option") from e

    def _finish(self, builder: CatalogBuilder, source: str) -> Catalog:
        for hook in self.hooks:
            try:
                hook(builder)
            except DefinitionFormatError as e:
                logger.error("Catalog hook failed", hook=getattr(hook, "__name__", repr(hook)), error=str(e))
                raise CatalogLoadError(str(e), source) from e

        catalog = builder.freeze()
        logger.info("Search engine definitions loaded", source=source, total_urls=len(catalog))
        return catalog
