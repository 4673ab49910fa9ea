"""Tests for the tool catalog."""
import json

import pytest

from workflow_runtime import ToolNotFoundError, ToolRecord
from workflow_studio.catalog import CATEGORIES, ToolCatalog


@pytest.fixture
def catalog(sample_tools):
    return ToolCatalog(sample_tools)


class TestToolCatalog:
    """Test ToolCatalog lookups and sidebar filtering."""

    def test_records_are_validated(self, catalog):
        assert len(catalog) == 4
        assert all(isinstance(tool, ToolRecord) for tool in catalog)

    def test_get(self, catalog):
        assert catalog.get("tool-3").name == "Sheet Analyzer"

    def test_get_unknown(self, catalog):
        with pytest.raises(ToolNotFoundError, match="Tool not found: tool-9"):
            catalog.get("tool-9")

    def test_filter_all(self, catalog):
        assert [t.id for t in catalog.filter()] == ["tool-1", "tool-2", "tool-3", "tool-4"]

    def test_filter_by_category(self, catalog):
        assert [t.id for t in catalog.filter(category="Content Creation")] == ["tool-1", "tool-2"]

    def test_filter_by_query_is_case_insensitive(self, catalog):
        assert [t.id for t in catalog.filter(query="  BOT ")] == ["tool-4"]

    def test_filter_category_and_query(self, catalog):
        assert catalog.filter(category="Communication", query="sheet") == []

    def test_default_limit(self):
        catalog = ToolCatalog([{"id": f"t{i}", "name": f"Tool {i}"} for i in range(15)])

        assert len(catalog.filter()) == 10
        assert len(catalog.filter(limit=None)) == 15

    def test_categories(self, catalog):
        categories = catalog.categories()
        categories.append("Mutated")

        assert catalog.categories() == CATEGORIES
        assert CATEGORIES[0] == "All"

    def test_extra_fields_are_kept(self):
        catalog = ToolCatalog([{"id": "t1", "name": "Tool", "vendor": "acme"}])

        assert catalog.get("t1").model_dump()["vendor"] == "acme"


class TestFromJsonFile:
    def test_loads_list(self, tmp_path, sample_tools):
        path = tmp_path / "tools.json"
        path.write_text(json.dumps(sample_tools))

        catalog = ToolCatalog.from_json_file(path)

        assert [t.id for t in catalog.list()] == ["tool-1", "tool-2", "tool-3", "tool-4"]

    def test_rejects_non_list(self, tmp_path):
        path = tmp_path / "tools.json"
        path.write_text(json.dumps({"tools": []}))

        with pytest.raises(ValueError):
            ToolCatalog.from_json_file(path)
