"""Transformation of per-engine definitions into a flat URL catalog."""

import re
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional

from ..exceptions import DefinitionFormatError
from ..models.definition import LiteralParam, ParamRule, PatternParam, SearchEngineDefinition


REGEX_DELIMITER = "/"

REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,  # str patterns are always unicode-aware
}


def parse_param_rule(raw: Any) -> ParamRule:
    """
    Turn one raw parameter entry into a rule.

    Entries such as ``/\\/search\\/(.*)/i`` are delimited regular
    expressions; anything else is a query string parameter name.

    Args:
        raw: Parameter entry from the definitions document

    Returns:
        LiteralParam or PatternParam

    Raises:
        DefinitionFormatError: If the entry is empty or not a valid expression
    """
    if raw is None or raw == "":
        raise DefinitionFormatError("Empty keyword parameter in definition")

    raw = str(raw)
    if not raw.startswith(REGEX_DELIMITER):
        return LiteralParam(name=raw)

    end = raw.rfind(REGEX_DELIMITER)
    if end == 0:
        raise DefinitionFormatError(f"Unterminated regular expression parameter: {raw!r}")

    body, modifiers = raw[1:end], raw[end + 1:]
    flags = 0
    for modifier in modifiers:
        if modifier not in REGEX_FLAGS:
            raise DefinitionFormatError(f"Unsupported regular expression flag {modifier!r} in {raw!r}")
        flags |= REGEX_FLAGS[modifier]

    try:
        regex = re.compile(body, flags)
    except re.error as e:
        raise DefinitionFormatError(f"Invalid regular expression parameter {raw!r}: {e}") from e

    if regex.groups < 1:
        raise DefinitionFormatError(f"Regular expression parameter {raw!r} has no capture group")

    return PatternParam(source=raw, regex=regex)


def _as_list(value: Any, field: str) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return list(value)
    raise DefinitionFormatError(f"Field '{field}' must be a list, got {type(value).__name__}")


def make_definition(name: str, block: Mapping) -> SearchEngineDefinition:
    """
    Build the definition attached to every URL of a block.

    Args:
        name: Search engine name
        block: Definition block without (or ignoring) its ``urls``

    Returns:
        SearchEngineDefinition
    """
    params = tuple(parse_param_rule(raw) for raw in _as_list(block.get("params"), "params"))
    charsets = tuple(str(charset) for charset in _as_list(block.get("charsets"), "charsets") if charset)
    backlink = block.get("backlink") or None

    return SearchEngineDefinition(
        name=str(name),
        params=params,
        backlink=str(backlink) if backlink is not None else None,
        charsets=charsets,
    )


class Catalog(Mapping):
    """Read-only mapping of URL patterns to search engine definitions."""

    def __init__(self, entries: Dict[str, SearchEngineDefinition]) -> None:
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, key: str) -> SearchEngineDefinition:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Catalog({len(self)} urls)"

    def to_flat(self) -> Dict[str, Dict[str, Any]]:
        """Serializable form: URL pattern to raw block including the engine name."""
        return {url: definition.to_raw() for url, definition in self._entries.items()}


class CatalogBuilder:
    """
    Mutable catalog under construction.

    Entries are keyed by URL pattern. Adding a URL that is already present
    replaces the earlier entry, so the order in which definitions are added
    decides which engine owns a shared URL.
    """

    def __init__(self) -> None:
        """Initialize an empty builder."""
        self._entries: Dict[str, SearchEngineDefinition] = {}

    def add_url(self, url: str, definition: SearchEngineDefinition) -> None:
        """Register (or replace) the definition for one URL pattern."""
        if not url:
            raise DefinitionFormatError("URL pattern cannot be empty")
        self._entries[str(url)] = definition

    def add_block(self, name: str, block: Any) -> None:
        """
        Add every URL of a single definition block.

        Args:
            name: Search engine name
            block: Mapping with ``urls`` and optional ``params``, ``backlink``, ``charsets``

        Raises:
            DefinitionFormatError: If the block is not a mapping or has no ``urls``
        """
        if not isinstance(block, Mapping):
            raise DefinitionFormatError(
                f"Definition block for '{name}' must be a mapping, got {type(block).__name__}"
            )
        if "urls" not in block:
            raise DefinitionFormatError(f"Definition block for '{name}' is missing 'urls'")

        urls = _as_list(block["urls"], "urls")
        definition = make_definition(name, block)

        # Validate every URL first so a bad block leaves nothing behind
        for url in urls:
            if not url:
                raise DefinitionFormatError(f"Definition block for '{name}' has an empty URL")
        for url in urls:
            self.add_url(str(url), definition)

    def add_engine(self, name: str, blocks: Any) -> None:
        """Add all definition blocks of one search engine, in order."""
        if isinstance(blocks, Mapping):
            blocks = [blocks]
        if isinstance(blocks, str) or not isinstance(blocks, Sequence):
            raise DefinitionFormatError(
                f"Definitions for '{name}' must be a list of blocks, got {type(blocks).__name__}"
            )
        for block in blocks:
            self.add_block(name, block)

    def add_definitions(self, raw_definitions: Any) -> None:
        """
        Add a whole definitions document (engine name to list of blocks).

        Raises:
            DefinitionFormatError: If the document is not a mapping
        """
        if not isinstance(raw_definitions, Mapping):
            raise DefinitionFormatError(
                f"Definitions document must be a mapping, got {type(raw_definitions).__name__}"
            )
        for name, blocks in raw_definitions.items():
            self.add_engine(name, blocks)

    def add_flat(self, flat: Any) -> None:
        """
        Add an already flattened catalog (URL pattern to block with ``name``).

        Raises:
            DefinitionFormatError: If an entry has no engine name
        """
        if not isinstance(flat, Mapping):
            raise DefinitionFormatError(
                f"Flattened catalog must be a mapping, got {type(flat).__name__}"
            )
        for url, block in flat.items():
            if not isinstance(block, Mapping) or not block.get("name"):
                raise DefinitionFormatError(f"Catalog entry for '{url}' is missing 'name'")
            self.add_url(url, make_definition(block["name"], block))

    def remove_url(self, url: str) -> bool:
        """
        Remove a URL pattern.

        Returns:
            True if removed, False if not found
        """
        if url in self._entries:
            del self._entries[url]
            return True
        return False

    def get(self, url: str) -> Optional[SearchEngineDefinition]:
        return self._entries.get(url)

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def freeze(self) -> Catalog:
        """Snapshot the current entries into an immutable Catalog."""
        return Catalog(self._entries)


def build_catalog(raw_definitions: Any) -> Catalog:
    """
    Flatten a definitions document into a Catalog.

    Args:
        raw_definitions: Mapping of engine name to list of definition blocks

    Returns:
        Catalog keyed by every URL listed in the document

    Raises:
        DefinitionFormatError: If the document is structurally malformed
    """
    builder = CatalogBuilder()
    builder.add_definitions(raw_definitions)
    return builder.freeze()
