"""Unit tests for catalog building."""

import re

import pytest
from referrer_classifier.core.builder import Catalog, CatalogBuilder, build_catalog, parse_param_rule
from referrer_classifier.exceptions import DefinitionFormatError
from referrer_classifier.models.definition import LiteralParam, PatternParam, SearchEngineDefinition


class TestParseParamRule:
    """Test cases for parameter rule parsing."""
    
    def test_literal_name(self):
        """Plain names become literal rules."""
        rule = parse_param_rule("q")
        
        assert isinstance(rule, LiteralParam)
        assert rule.name == "q"
        assert rule.raw == "q"
    
    def test_delimited_expression(self):
        """Slash-delimited entries become compiled patterns."""
        rule = parse_param_rule(r"/\/search\/web\/([^\/?]+)/")
        
        assert isinstance(rule, PatternParam)
        assert rule.raw == r"/\/search\/web\/([^\/?]+)/"
        assert rule.regex.search("http://www.dogpile.com/search/web/cats").group(1) == "cats"
    
    def test_expression_flags(self):
        """Trailing modifiers map to regex flags."""
        rule = parse_param_rule(r"/\/SEARCH\/(.+)/i")
        
        assert rule.regex.flags & re.IGNORECASE
        assert rule.regex.search("http://x.com/search/dogs").group(1) == "dogs"
    
    def test_non_string_names_are_converted(self):
        """Numeric names from YAML are kept as strings."""
        rule = parse_param_rule(1)
        assert rule == LiteralParam(name="1")
    
    @pytest.mark.parametrize("raw", ["", "/unterminated", r"/(unbalanced/", "/no-group/", "/(x)/z"])
    def test_invalid_rules(self, raw):
        """Empty names and bad expressions are format errors."""
        with pytest.raises(DefinitionFormatError):
            parse_param_rule(raw)


class TestBuildCatalog:
    """Test cases for flattening definitions into a catalog."""
    
    @pytest.fixture
    def raw_definitions(self):
        """Definitions sharing one URL between two engines."""
        return {
            "Google": [
                {"urls": ["www.google.com", "google.{}"], "params": ["q"], "backlink": "search?q={k}"},
            ],
            "Dogpile": [
                {"urls": ["www.dogpile.com", "nbci.dogpile.com"], "params": ["q"]},
            ],
            "InfoSpace": [
                {"urls": ["infospace.com"], "params": ["q"]},
                {"urls": ["nbci.dogpile.com"], "params": ["qkw"], "charsets": ["utf-8", "gb2312"]},
            ],
        }
    
    def test_keys_are_all_listed_urls(self, raw_definitions):
        """Every URL of every block becomes a key."""
        catalog = build_catalog(raw_definitions)
        
        expected = set()
        for blocks in raw_definitions.values():
            for block in blocks:
                expected.update(block["urls"])
        
        assert set(catalog) == expected
        assert len(catalog) == 5
    
    def test_definition_fields(self, raw_definitions):
        """Block fields other than urls are attached with the engine name."""
        catalog = build_catalog(raw_definitions)
        definition = catalog["google.{}"]
        
        assert definition.name == "Google"
        assert definition.params == (LiteralParam(name="q"),)
        assert definition.backlink == "search?q={k}"
        assert definition.charsets == ()
    
    def test_later_url_wins(self, raw_definitions):
        """A URL listed twice belongs to the last block that lists it."""
        catalog = build_catalog(raw_definitions)
        definition = catalog["nbci.dogpile.com"]
        
        assert definition.name == "InfoSpace"
        assert definition.parameter_names() == ["qkw"]
        assert definition.charsets == ("utf-8", "gb2312")
        assert catalog["www.dogpile.com"].name == "Dogpile"
    
    def test_missing_urls(self):
        """A block without urls is rejected."""
        with pytest.raises(DefinitionFormatError, match="missing 'urls'"):
            build_catalog({"Broken": [{"params": ["q"]}]})
    
    @pytest.mark.parametrize("raw", [None, ["Google"], "Google"])
    def test_document_must_be_mapping(self, raw):
        """The top level must map engine names to blocks."""
        with pytest.raises(DefinitionFormatError):
            build_catalog(raw)
    
    def test_blocks_must_be_list(self):
        """Engine values must be lists of blocks."""
        with pytest.raises(DefinitionFormatError):
            build_catalog({"Google": "www.google.com"})
    
    def test_catalog_is_read_only(self, raw_definitions):
        """The built catalog cannot be modified."""
        catalog = build_catalog(raw_definitions)
        
        with pytest.raises(TypeError):
            catalog["example.com"] = catalog["www.google.com"]
    
    def test_empty_document(self):
        """An empty document yields an empty catalog."""
        assert len(build_catalog({})) == 0


class TestCatalogBuilder:
    """Test cases for the mutable builder handed to hooks."""
    
    @pytest.fixture
    def builder(self):
        """Builder holding one engine."""
        builder = CatalogBuilder()
        builder.add_engine("Bing", [{"urls": ["www.bing.com", "bing.com"], "params": ["q"]}])
        return builder
    
    def test_add_and_remove_url(self, builder):
        """URLs can be added and removed before freezing."""
        definition = SearchEngineDefinition(name="Example", params=(LiteralParam(name="s"),))
        builder.add_url("search.example.com", definition)
        
        assert "search.example.com" in builder
        assert builder.remove_url("bing.com") is True
        assert builder.remove_url("bing.com") is False
        assert set(builder.freeze()) == {"www.bing.com", "search.example.com"}
    
    def test_failed_block_leaves_nothing(self, builder):
        """A block with an invalid rule does not add any of its URLs."""
        with pytest.raises(DefinitionFormatError):
            builder.add_block("Bad", {"urls": ["bad.example.com", "bad2.example.com"], "params": ["/(oops/"]})
        
        assert "bad.example.com" not in builder
        assert len(builder) == 2
    
    def test_freeze_is_a_snapshot(self, builder):
        """Changes after freezing do not affect the frozen catalog."""
        catalog = builder.freeze()
        builder.remove_url("www.bing.com")
        
        assert "www.bing.com" in catalog
        assert isinstance(catalog, Catalog)
    
    def test_flat_round_trip(self, builder):
        """The flattened form rebuilds an equal catalog."""
        builder.add_block("Dogpile", {"urls": ["dogpile.com"], "params": ["q", r"/\/search\/web\/([^\/?]+)/"]})
        catalog = builder.freeze()
        
        rebuilt = CatalogBuilder()
        rebuilt.add_flat(catalog.to_flat())
        
        assert dict(rebuilt.freeze()) == dict(catalog)
    
    def test_flat_entries_need_a_name(self):
        """Flattened entries without an engine name are rejected."""
        with pytest.raises(DefinitionFormatError):
            CatalogBuilder().add_flat({"example.com": {"params": ["q"]}})
