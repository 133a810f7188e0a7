"""URL normalization utilities used for referrer matching."""

import re
from typing import Dict, NamedTuple, Optional
from urllib.parse import unquote_to_bytes, urlsplit


# ISO 3166-1 alpha-2 codes, plus "uk" which is used as a TLD in place of "gb"
COUNTRY_CODES = (
    "ad ae af ag ai al am ao aq ar as at au aw ax az ba bb bd be bf bg bh bi bj bl bm bn bo "
    "bq br bs bt bv bw by bz ca cc cd cf cg ch ci ck cl cm cn co cr cu cv cw cx cy cz de dj "
    "dk dm do dz ec ee eg eh er es et fi fj fk fm fo fr ga gb gd ge gf gg gh gi gl gm gn gp "
    "gq gr gs gt gu gw gy hk hm hn hr ht hu id ie il im in io iq ir is it je jm jo jp ke kg "
    "kh ki km kn kp kr kw ky kz la lb lc li lk lr ls lt lu lv ly ma mc md me mf mg mh mk ml "
    "mm mn mo mp mq mr ms mt mu mv mw mx my mz na nc ne nf ng ni nl no np nr nu nz om pa pe "
    "pf pg ph pk pl pm pn pr ps pt pw py qa re ro rs ru rw sa sb sc sd se sg sh si sj sk sl "
    "sm sn so sr ss st sv sx sy sz tc td tf tg th tj tk tl tm tn to tr tt tv tw tz ua ug um "
    "us uy uz va vc ve vg vi vn vu wf ws ye yt za zm zw uk"
).split()


class ParsedUrl(NamedTuple):
    """Components of a referrer URL."""

    host: str
    path: str
    query: str
    fragment: str


class UrlNormalizer:
    """Handles URL parsing and host normalization for referrer matching."""

    def __init__(self) -> None:
        """Initialize the normalizer."""
        countries = "|".join(COUNTRY_CODES)

        # Applied in order, each one to every occurrence
        self.lossy_rules = [
            (re.compile(r"^(w+[0-9]*|search)\."), ""),
            (re.compile(r"(^|\.)m\."), r"\1"),
            (re.compile(r"(\.(com|org|net|co|it|edu))?\.(" + countries + r")(/|$)"), r".{}\4"),
            (re.compile(r"(^|\.)(" + countries + r")\."), r"\1{}."),
        ]

    def get_lossy_url(self, url: str) -> str:
        """
        Reduce a host (or host + path) to a coarser form for matching.

        Common variable parts are removed or replaced by a ``{}``
        placeholder: ``www.google.co.uk`` becomes ``google.{}`` and
        ``de.search.yahoo.com`` becomes ``{}.search.yahoo.com``.

        Args:
            url: Host, optionally followed by a path

        Returns:
            Normalized host
        """
        if not url:
            return ""

        lossy = url
        for pattern, replacement in self.lossy_rules:
            lossy = pattern.sub(replacement, lossy)

        return lossy

    def parse_url(self, url: str) -> Optional[ParsedUrl]:
        """
        Split a URL into the parts used for matching.

        Args:
            url: URL to parse

        Returns:
            ParsedUrl, or None when the URL has no host
        """
        if not url:
            return None

        try:
            parts = urlsplit(url.strip())
            host = parts.hostname
        except ValueError:
            return None

        if not host:
            return None

        return ParsedUrl(
            host=host,
            path=parts.path,
            query=parts.query,
            fragment=parts.fragment,
        )

    @staticmethod
    def get_array_from_query_string(query: str) -> Dict[str, str]:
        """
        Split a query string into raw, still encoded, values.

        Later occurrences of a parameter replace earlier ones. A segment
        without ``=`` maps to an empty value.

        Args:
            query: Query string, optionally starting with ``?``

        Returns:
            Dictionary of parameter names to raw values
        """
        values: Dict[str, str] = {}
        if not query:
            return values

        query = query.strip()
        if query.startswith("?"):
            query = query[1:]

        for segment in query.split("&"):
            name, _, value = segment.partition("=")
            if name:
                values[name] = value

        return values

    def get_parameter_from_query_string(self, query: str, name: str) -> Optional[str]:
        """
        Get the raw value of a single query string parameter.

        Args:
            query: Query string
            name: Parameter name

        Returns:
            Raw value, or None when the parameter is absent
        """
        return self.get_array_from_query_string(query).get(name)

    @staticmethod
    def url_decode(value: str) -> bytes:
        """Percent-decode a query value, ``+`` meaning space."""
        return unquote_to_bytes(value.replace("+", " "))

    @staticmethod
    def get_host_from_url(url: str) -> str:
        """
        Return the host of a URL, or of a bare ``host/path`` string.

        Args:
            url: URL such as ``http://www.google.com/search``

        Returns:
            Host, e.g. ``www.google.com``
        """
        position = url.find("//")
        if position > 0:
            url = url[position + 2:]

        slash = url.find("/")
        if slash != -1:
            url = url[:slash]

        return url
