"""Keyword extraction from a resolved referrer."""

from typing import List, Optional, Sequence, Union
from urllib.parse import unquote_plus

import structlog

from ..models.definition import PatternParam, SearchEngineDefinition
from ..models.response import MatchResult, ResolvedHost
from .normalizer import UrlNormalizer


logger = structlog.get_logger(__name__)

GOOGLE = "Google"
GOOGLE_IMAGES = "Google Images"
GOOGLE_VIDEO = "Google Video"
GOOGLE_SHOPPING = "Google Shopping"
YAHOO = "Yahoo!"

YAHOO_REDIRECT_HOST = "r.search.yahoo.com"

# Engines that are known to send visitors without any keyword
NO_KEYWORD_ENGINES = frozenset(["Ixquick", GOOGLE_IMAGES, "DuckDuckGo"])

# Google "top bar menu" parameter values
GOOGLE_TBM_ENGINES = {
    "isch": GOOGLE_IMAGES,
    "vid": GOOGLE_VIDEO,
    "shop": GOOGLE_SHOPPING,
}

# Raw keyword: bytes when found, False for "engine matched without a keyword"
RawKeyword = Union[None, bytes, bool]


class CharsetDecoder:
    """Converts raw keyword bytes to text using the engine's declared charsets."""

    fallback_encoding = "utf-8"

    @staticmethod
    def detect(raw: bytes, charsets: Sequence[str]) -> Optional[str]:
        """
        Pick the first declared charset the bytes are valid in.

        Args:
            raw: Keyword bytes
            charsets: Candidate encodings, in order of preference

        Returns:
            Charset name, or None when none of them fits
        """
        for charset in charsets:
            try:
                raw.decode(charset)
            except (UnicodeDecodeError, LookupError):
                continue
            return charset
        return None

    def decode(self, raw: bytes, charsets: Sequence[str]) -> str:
        """
        Decode keyword bytes.

        The first charset is the default. When several are declared the
        detected one wins. Invalid sequences are dropped; if that leaves
        nothing, or the charset is unknown, the bytes are read as UTF-8.

        Args:
            raw: Keyword bytes
            charsets: Charsets declared for the search engine

        Returns:
            Decoded keyword
        """
        if charsets:
            charset = charsets[0]
            if len(charsets) > 1:
                charset = self.detect(raw, charsets) or charsets[0]

            try:
                text = raw.decode(charset, errors="ignore")
            except LookupError:
                logger.warning("Unknown keyword charset", charset=charset)
                text = ""

            if text:
                return text

        return raw.decode(self.fallback_encoding, errors="replace")


class KeywordExtractor:
    """Extracts the search keyword from a referrer already matched to an engine."""

    def __init__(
        self,
        normalizer: Optional[UrlNormalizer] = None,
        charset_decoder: Optional[CharsetDecoder] = None
    ) -> None:
        """
        Initialize the extractor.

        Args:
            normalizer: URL normalizer used for query string access
            charset_decoder: Decoder applied to found keywords
        """
        self.normalizer = normalizer or UrlNormalizer()
        self.charset_decoder = charset_decoder or CharsetDecoder()

    def extract(self, resolved: ResolvedHost, definition: SearchEngineDefinition) -> Optional[MatchResult]:
        """
        Extract engine name and keyword.

        Args:
            resolved: Referrer resolved to a catalog key
            definition: Definition stored under that key

        Returns:
            MatchResult (keywords may be False when the engine is known to
            send no keyword), or None when no keyword could be found
        """
        name = definition.name
        query = resolved.query
        key: RawKeyword = None

        if name == GOOGLE_IMAGES or (name == GOOGLE and "/imgres" in resolved.referrer_url):
            if "&prev" in query:
                query = self._recover_image_search_query(query)
            name = GOOGLE_IMAGES
        elif name == GOOGLE and ("&as_" in query or query.startswith("as_")):
            key = self._advanced_search_keyword(query)

        if name == GOOGLE:
            tbm = self.normalizer.get_parameter_from_query_string(query, "tbm")
            name = GOOGLE_TBM_ENGINES.get(tbm, name)

        if not key:
            key = self._keyword_from_params(resolved, definition, name, query)

        # False is a match without a keyword, None or empty is no match at all
        if key is None or key == b"":
            logger.debug("No keyword found", engine=name, key=resolved.key)
            return None

        if key is False:
            return MatchResult(name=name, keywords=False)

        keywords = self.charset_decoder.decode(key, definition.charsets)
        return MatchResult(name=name, keywords=keywords.lower())

    def _recover_image_search_query(self, query: str) -> str:
        # The preceding search sits URL-encoded in "prev", e.g. /search?q=cats&tbm=isch
        prev = self.normalizer.get_parameter_from_query_string(query, "prev") or ""
        inner = unquote_plus(prev.strip())

        position = inner.find("?")
        if position == -1:
            return ""

        return inner[position:].replace("&", "&amp;")

    def _advanced_search_keyword(self, query: str) -> bytes:
        get = self.normalizer.get_parameter_from_query_string
        parts: List[str] = []

        value = get(query, "as_q")
        if value:
            parts.append(value)

        value = get(query, "as_oq")
        if value:
            parts.append(value.replace("+", " OR "))

        value = get(query, "as_epq")
        if value:
            parts.append(f'"{value}"')

        value = get(query, "as_eq")
        if value:
            parts.append(f"-{value}")

        return self.normalizer.url_decode(" ".join(parts)).strip()

    def _keyword_from_params(
        self,
        resolved: ResolvedHost,
        definition: SearchEngineDefinition,
        name: str,
        query: str
    ) -> RawKeyword:
        key: RawKeyword = None

        for rule in definition.params:
            if isinstance(rule, PatternParam):
                match = rule.regex.search(resolved.referrer_url)
                if match:
                    return self.normalizer.url_decode(match.group(1) or "").strip()
                continue

            raw = self.normalizer.get_parameter_from_query_string(query, rule.name)
            key = self.normalizer.url_decode(raw or "").strip()

            if not key and self._is_keywordless_visit(resolved, name, query, rule.name):
                key = False

            if key or key is False:
                break

        return key

    @staticmethod
    def _is_keywordless_visit(resolved: ResolvedHost, name: str, query: str, param: str) -> bool:
        # Google home page
        if name == GOOGLE and not query and resolved.path in ("", "/") and not resolved.fragment:
            return True

        # Yahoo! redirect relay
        if name == YAHOO and resolved.host == YAHOO_REDIRECT_HOST:
            return True

        # Keyword parameter present but empty
        if f"&{param}=" in query or f"?{param}=" in query:
            return True

        return name in NO_KEYWORD_ENGINES
