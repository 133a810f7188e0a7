"""Unit tests for the classifier service."""

import pytest
from referrer_classifier.cache import TransientCache
from referrer_classifier.config import Settings
from referrer_classifier.core.builder import build_catalog
from referrer_classifier.core.engine import SearchEngineClassifier
from referrer_classifier.models.response import MatchResult


class TestSearchEngineClassifier:
    """Test cases for the SearchEngineClassifier class."""
    
    @pytest.fixture
    def raw_definitions(self):
        """Sample search engine definitions."""
        return {
            "Google": [{"urls": ["www.google.com", "google.{}"], "params": ["q"], "backlink": "search?q={k}"}],
            "Google Images": [{"urls": ["images.google.com"], "params": ["q"]}],
            "Bing": [{"urls": ["www.bing.com"], "params": ["q"], "backlink": "search?q={k}"}],
        }
    
    @pytest.fixture
    def classifier(self, raw_definitions):
        """Create a classifier instance for testing."""
        return SearchEngineClassifier(
            build_catalog(raw_definitions),
            settings=Settings(),
            transient_cache=TransientCache(),
            asset_exists=lambda path: path.endswith("/www.google.com.png"),
        )
    
    def test_classify(self, classifier):
        """A search referrer yields engine name and keyword."""
        result = classifier.classify("http://www.google.com/search?q=web+analytics")
        
        assert result == MatchResult(name="Google", keywords="web analytics")
        assert result.as_dict() == {"name": "Google", "keywords": "web analytics"}
        assert result.has_keyword
    
    def test_classify_no_keyword(self, classifier):
        """Keywordless engines match with keywords False."""
        result = classifier.classify("http://images.google.com/images?hl=en")
        
        assert result.name == "Google Images"
        assert result.keywords is False
        assert not result.has_keyword
    
    def test_classify_unknown(self, classifier):
        """Unknown referrers are not matches."""
        assert classifier.classify("http://example.org/") is None
        assert classifier.classify("garbage") is None
    
    def test_classify_is_idempotent(self, classifier):
        """Repeated calls give equal results."""
        url = "http://www.google.de/search?q=Piwik"
        assert classifier.classify(url) == classifier.classify(url)
    
    def test_classify_many(self, classifier):
        """Batch classification keeps input order."""
        results = classifier.classify_many([
            "http://www.bing.com/search?q=one",
            "http://example.org/",
            "http://www.google.com/search?q=two",
        ])
        
        assert [r and r.keywords for r in results] == ["one", None, "two"]
    
    def test_lookups(self, classifier):
        """Host lookups delegate to the definition store."""
        assert classifier.get_definition_by_host("www.bing.com").name == "Bing"
        assert classifier.get_parameter_names_by_host("google.{}") == ["q"]
        assert classifier.get_backlink_pattern_by_host("www.google.com") == "search?q={k}"
        assert classifier.get_charsets_by_host("www.google.com") == []
        assert classifier.get_search_engine_names()["Bing"] == "www.bing.com"
    
    def test_get_url_from_name(self, classifier):
        """Names map to URLs, unknown names to a fixed label."""
        assert classifier.get_url_from_name("Google") == "http://www.google.com"
        assert classifier.get_url_from_name("Unknown Engine") == "URL unknown!"
    
    def test_backlink_and_logo(self, classifier):
        """Backlinks and logos are resolved against the catalog."""
        assert classifier.get_backlink_from_url_and_keyword("http://www.bing.com", "cats") == "http://www.bing.com/search?q=cats"
        assert classifier.get_logo_from_url("http://www.google.com") == "plugins/Referrers/images/searchEngines/www.google.com.png"
        assert classifier.get_logo_from_url("http://www.bing.com") == "plugins/Referrers/images/searchEngines/xx.png"
    
    def test_replace_catalog(self, classifier):
        """A replaced catalog is used for classification and the name index."""
        assert classifier.get_url_from_name("Bing") == "http://www.bing.com"
        
        classifier.replace_catalog(build_catalog({
            "Bing": [{"urls": ["bing.com"], "params": ["q"]}],
        }))
        
        assert classifier.get_url_from_name("Bing") == "http://bing.com"
        assert classifier.classify("http://www.google.com/search?q=x") is None
        assert classifier.get_backlink_from_url_and_keyword("http://www.bing.com", "cats") is None
    
    def test_replace_catalog_ignores_late_index_from_old_store(self, classifier):
        """A name index built from the previous catalog never reaches the new one."""
        old_store = classifier.store

        classifier.replace_catalog(build_catalog({
            "Bing": [{"urls": ["bing.com"], "params": ["q"]}],
        }))
        # A reader still holding the old snapshot rebuilds its index afterwards
        assert old_store.get_search_engine_names()["Bing"] == "www.bing.com"

        assert classifier.get_search_engine_names() == {"Bing": "bing.com"}
        assert classifier.get_url_from_name("Google") == "URL unknown!"

    def test_stats(self, classifier):
        """Classification outcomes are counted."""
        classifier.classify("http://www.google.com/search?q=one")
        classifier.classify("http://images.google.com/")
        classifier.classify("http://example.org/")
        classifier.classify("http://example.net/")
        
        stats = classifier.get_stats()
        assert stats["total_classifications"] == 4
        assert stats["keyword_matches"] == 1
        assert stats["no_keyword_matches"] == 1
        assert stats["no_matches"] == 2
        assert stats["match_rate"] == 0.5
        assert stats["catalog_urls"] == 4
    
    def test_stats_empty(self, classifier):
        """Rates are zero before any classification."""
        stats = classifier.get_stats()
        assert stats["match_rate"] == 0.0
        assert stats["average_execution_time_ms"] == 0.0
    
    def test_default_asset_check(self, raw_definitions, tmp_path):
        """Without a predicate, logos are looked up under the assets base path."""
        logo_dir = tmp_path / "plugins" / "Referrers" / "images" / "searchEngines"
        logo_dir.mkdir(parents=True)
        (logo_dir / "www.bing.com.png").write_bytes(b"png")
        
        classifier = SearchEngineClassifier(
            build_catalog(raw_definitions),
            settings=Settings(assets_base_path=str(tmp_path)),
        )
        
        assert classifier.get_logo_from_url("http://www.bing.com") == "plugins/Referrers/images/searchEngines/www.bing.com.png"
        assert classifier.get_logo_from_url("http://www.google.com") == "plugins/Referrers/images/searchEngines/xx.png"
