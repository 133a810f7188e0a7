"""Resolution of a referrer URL to a catalog URL pattern."""

from collections.abc import Mapping
from typing import Optional

import structlog

from ..models.response import ResolvedHost
from .normalizer import UrlNormalizer


logger = structlog.get_logger(__name__)

GOOGLE_CUSTOM_SEARCH_QUERY_PREFIX = "cx=partner-pub-"
GOOGLE_CUSTOM_SEARCH_KEY = "google.com/cse"

INFOSPACE_PATH_PREFIX = "/pemonitorhosted/ws/results/"
INFOSPACE_KEY = "wsdsold.infospace.com"

YAHOO_IMAGES_HOST_MARKER = ".images.search.yahoo.com"
YAHOO_IMAGES_KEY = "images.search.yahoo.com"

YAHOO_HOST_MARKER = ".search.yahoo.com"
YAHOO_KEY = "search.yahoo.com"


class UrlMatcher:
    """Finds the catalog entry that best matches a referrer URL."""

    def __init__(self, normalizer: Optional[UrlNormalizer] = None) -> None:
        """
        Initialize the matcher.

        Args:
            normalizer: URL normalizer providing parsing and lossy hosts
        """
        self.normalizer = normalizer or UrlNormalizer()

    def resolve_host(self, referrer_url: str, catalog: Mapping) -> Optional[ResolvedHost]:
        """
        Resolve a referrer to a catalog key.

        Candidates are tried in a fixed order and the first one present in
        the catalog wins:

        1. host + path
        2. host
        3. lossy host + path
        4. lossy host
        5. special cases (Google custom search, InfoSpace private label,
           Yahoo! Images and Yahoo! regional hosts)

        Args:
            referrer_url: Referrer URL
            catalog: Mapping of URL patterns to definitions

        Returns:
            ResolvedHost, or None when nothing matches
        """
        parsed = self.normalizer.parse_url(referrer_url)
        if parsed is None:
            return None

        host, path, fragment = parsed.host, parsed.path, parsed.fragment

        # Some engines put the keyword after the fragment marker
        query = parsed.query
        if fragment:
            query += "&" + fragment

        lossy_host = self.normalizer.get_lossy_url(host)

        for candidate in (host + path, host, lossy_host + path, lossy_host):
            if candidate in catalog:
                key = candidate
                break
        else:
            key = self._special_case_key(host, path, query)
            if key is None or key not in catalog:
                logger.debug("Referrer host not recognized", host=host)
                return None

        return ResolvedHost(
            referrer_url=referrer_url,
            key=key,
            host=host,
            path=path,
            query=query,
            fragment=fragment,
        )

    @staticmethod
    def _special_case_key(host: str, path: str, query: str) -> Optional[str]:
        if query.startswith(GOOGLE_CUSTOM_SEARCH_QUERY_PREFIX):
            return GOOGLE_CUSTOM_SEARCH_KEY

        if path.startswith(INFOSPACE_PATH_PREFIX):
            return INFOSPACE_KEY

        # The marker must not be at the start of the host
        if host.find(YAHOO_IMAGES_HOST_MARKER) > 0:
            return YAHOO_IMAGES_KEY

        if host.find(YAHOO_HOST_MARKER) > 0:
            return YAHOO_KEY

        return None
