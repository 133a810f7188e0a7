"""Backlink and logo resolution for search engine URLs."""

import os
from typing import Callable, Optional, Union
from urllib.parse import quote_plus

from .normalizer import UrlNormalizer
from .store import DefinitionStore


FALLBACK_LOGO_NAME = "xx"


class BacklinkResolver:
    """Rebuilds search URLs and logo paths from an engine URL."""

    def __init__(
        self,
        store: DefinitionStore,
        assets_root: str,
        keyword_not_defined_label: str,
        keyword_not_defined_url: str,
        asset_exists: Optional[Callable[[str], bool]] = None,
        normalizer: Optional[UrlNormalizer] = None
    ) -> None:
        """
        Initialize the resolver.

        Args:
            store: Definition store providing backlink patterns
            assets_root: Directory (relative path) holding ``<host>.png`` logos
            keyword_not_defined_label: Keyword label used when no keyword is known
            keyword_not_defined_url: URL returned for that label
            asset_exists: Predicate telling whether an asset path exists
            normalizer: URL normalizer used to derive hosts
        """
        self.store = store
        self.assets_root = assets_root.rstrip("/")
        self.keyword_not_defined_label = keyword_not_defined_label
        self.keyword_not_defined_url = keyword_not_defined_url
        self.asset_exists = asset_exists or os.path.exists
        self.normalizer = normalizer or UrlNormalizer()

    def get_backlink_from_url_and_keyword(self, url: str, keyword: Union[str, bool]) -> Optional[str]:
        """
        Build the search results URL for an engine URL and keyword.

        Args:
            url: Engine URL, e.g. ``http://www.google.com``
            keyword: Keyword, e.g. ``web analytics``

        Returns:
            Search URL such as ``http://www.google.com/search?q=web+analytics``,
            or None when the engine has no backlink pattern
        """
        if keyword == self.keyword_not_defined_label:
            return self.keyword_not_defined_url

        if keyword is False or keyword is None:
            keyword = ""

        # A literal "+" in the keyword must survive as a space in the pattern
        encoded = quote_plus(str(keyword)).replace(quote_plus("+"), quote_plus(" "))

        position = url.find("//")
        host = url[position + 2:] if position != -1 else url

        pattern = self.store.get_backlink_pattern_by_host(host)
        if not pattern:
            return None

        path = pattern.replace("{k}", encoded)
        separator = "" if url.endswith("/") else "/"
        return url + separator + path.lstrip("/")

    def get_logo_from_url(self, url: str) -> str:
        """
        Relative path of the logo for an engine URL.

        Args:
            url: Engine URL, e.g. ``http://www.google.com``

        Returns:
            ``<assets_root>/<host>.png`` when that file exists, else the
            generic ``<assets_root>/xx.png``
        """
        host = self.normalizer.get_host_from_url(url)
        path = f"{self.assets_root}/{host}.png"
        if host and self.asset_exists(path):
            return path
        return f"{self.assets_root}/{FALLBACK_LOGO_NAME}.png"
