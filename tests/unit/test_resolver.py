"""Unit tests for backlink and logo resolution."""

import pytest
from referrer_classifier.core.builder import build_catalog
from referrer_classifier.core.resolver import BacklinkResolver
from referrer_classifier.core.store import DefinitionStore


ASSETS_ROOT = "plugins/Referrers/images/searchEngines"


class TestBacklinkResolver:
    """Test cases for the BacklinkResolver class."""
    
    @pytest.fixture
    def existing_assets(self):
        """Logo files present on the asset store."""
        return {f"{ASSETS_ROOT}/www.google.com.png"}
    
    @pytest.fixture
    def resolver(self, existing_assets):
        """Create a resolver instance for testing."""
        catalog = build_catalog({
            "Google": [{"urls": ["www.google.com"], "params": ["q"], "backlink": "search?q={k}"}],
            "Baidu": [{"urls": ["www.baidu.com"], "params": ["wd"]}],
        })
        return BacklinkResolver(
            DefinitionStore(catalog),
            assets_root=ASSETS_ROOT + "/",
            keyword_not_defined_label="Keyword not defined",
            keyword_not_defined_url="http://piwik.org/faq/general/#faq_144",
            asset_exists=existing_assets.__contains__,
        )
    
    def test_backlink(self, resolver):
        """The keyword is encoded into the engine's backlink pattern."""
        backlink = resolver.get_backlink_from_url_and_keyword("http://www.google.com", "web analytics")
        assert backlink == "http://www.google.com/search?q=web+analytics"
    
    def test_backlink_encodes_keyword(self, resolver):
        """Reserved characters are percent-encoded."""
        backlink = resolver.get_backlink_from_url_and_keyword("http://www.google.com", "a&b=c")
        assert backlink == "http://www.google.com/search?q=a%26b%3Dc"
    
    def test_backlink_keyword_not_defined(self, resolver):
        """The not-defined label points to the informational page."""
        backlink = resolver.get_backlink_from_url_and_keyword("http://www.google.com", "Keyword not defined")
        assert backlink == "http://piwik.org/faq/general/#faq_144"
    
    def test_backlink_without_pattern(self, resolver):
        """Engines without a backlink pattern give None."""
        assert resolver.get_backlink_from_url_and_keyword("http://www.baidu.com", "x") is None
        assert resolver.get_backlink_from_url_and_keyword("http://unknown.example.com", "x") is None
    
    def test_logo(self, resolver):
        """Existing logos are returned by host."""
        assert resolver.get_logo_from_url("http://www.google.com") == f"{ASSETS_ROOT}/www.google.com.png"
        assert resolver.get_logo_from_url("http://www.google.com/search") == f"{ASSETS_ROOT}/www.google.com.png"
    
    def test_logo_fallback(self, resolver):
        """Missing logos fall back to the generic one."""
        assert resolver.get_logo_from_url("http://www.baidu.com") == f"{ASSETS_ROOT}/xx.png"
