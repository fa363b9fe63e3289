"""
Tests for the Doc Builder.
"""

import json

import pytest

from scanstation.widgets.docbuilder import (
    STORAGE_KEY,
    DocBuilder,
    Document,
    download_filename,
    generate_markdown,
)
from scanstation.widgets.store import MemoryStore


@pytest.fixture
def builder() -> DocBuilder:
    return DocBuilder(MemoryStore())


def test_generate_markdown():
    assert generate_markdown("Plan", ["Mission", "KPIs"]) == (
        "# Plan\n\n## Mission\n- \n\n## KPIs\n- \n"
    )


def test_download_filename():
    doc = Document(name="Q3  Pricing review", template_name="Pricing Strategy")
    assert download_filename(doc) == "Q3_Pricing_review.md"


class TestState:
    """Tests for loading stored state."""

    def test_defaults(self, builder):
        state = builder.state()

        assert [t.name for t in state.templates] == [
            "Business Atlas",
            "SOP Builder",
            "Pricing Strategy",
        ]
        assert state.templates[0].sections[-1] == "Next 90 Days"
        assert state.docs == []

    def test_corrupt_state_loads_defaults(self):
        builder = DocBuilder(MemoryStore({STORAGE_KEY: '{"templates": "nope"}'}))
        assert len(builder.state().templates) == 3

    def test_empty_template_list_is_kept(self):
        builder = DocBuilder(MemoryStore({STORAGE_KEY: '{"templates": [], "docs": []}'}))
        assert builder.state().templates == []


class TestDocuments:
    """Tests for document operations."""

    def test_create_doc(self, builder):
        doc = builder.create_doc("  Atlas 2025 ", 0)

        assert doc.name == "Atlas 2025"
        assert doc.template_name == "Business Atlas"
        assert doc.content.startswith("# Atlas 2025\n\n## Mission\n- \n")
        assert doc.completed is False

        stored = json.loads(builder.store.get_item(STORAGE_KEY))
        assert stored["docs"][0]["templateName"] == "Business Atlas"

    def test_create_doc_prepends(self, builder):
        builder.create_doc("first", 1)
        builder.create_doc("second", 2)

        assert [d.name for d in builder.state().docs] == ["second", "first"]

    @pytest.mark.parametrize("name,index", [("", 0), ("doc", 5), ("doc", -1)])
    def test_create_doc_validation(self, builder, name, index):
        with pytest.raises(ValueError):
            builder.create_doc(name, index)

    def test_save_doc(self, builder):
        doc = builder.create_doc("SOP", 1)

        saved = builder.save_doc(doc.id, "# SOP\n\nDone", now_ms=1714550400000)

        assert saved.content == "# SOP\n\nDone"
        assert builder.get_doc(doc.id).updated_at == 1714550400000

    def test_save_missing_doc(self, builder):
        with pytest.raises(KeyError):
            builder.save_doc("missing", "x")

    def test_toggle_and_stats(self, builder):
        a = builder.create_doc("a", 0)
        builder.create_doc("b", 0)

        assert builder.toggle_complete(a.id).completed is True
        stats = builder.stats()

        assert (stats.docs, stats.templates, stats.completed) == (2, 3, 1)
        assert builder.toggle_complete(a.id).completed is False

    def test_remove_doc(self, builder):
        doc = builder.create_doc("a", 0)
        builder.remove_doc(doc.id)
        assert builder.get_doc(doc.id) is None


class TestTemplates:
    def test_add_template(self, builder):
        template = builder.add_template("Hiring", " Role, ,Interview Loop ,Offer")

        assert template.sections == ["Role", "Interview Loop", "Offer"]
        assert builder.state().templates[-1].name == "Hiring"

    def test_add_template_validation(self, builder):
        with pytest.raises(ValueError):
            builder.add_template("Hiring", " , ")
        with pytest.raises(ValueError):
            builder.add_template(" ", "Role")

    def test_delete_template(self, builder):
        builder.delete_template(1)
        assert [t.name for t in builder.state().templates] == [
            "Business Atlas",
            "Pricing Strategy",
        ]
