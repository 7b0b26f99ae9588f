import pytest
import pytest_asyncio

from config.settings import StandardsConfig
from server.manager import StandardsManager
from server.tools import (
    build_header,
    extract_topic_content,
    get_standard_docs,
    group_by_category,
    list_standards,
    resolve_standard,
)
from conftest import StaticSource, make_document


GUIDE = """# Logging Guide

Intro paragraph.

## Levels

Use INFO for lifecycle events.

## Formatting

Prefer structured output.
Mention levels here too.

## Retention

Keep logs for 30 days."""


@pytest_asyncio.fixture
async def manager(sample_documents):
    docs = sample_documents + [
        make_document(
            "backend-logging",
            title="Logging Guide",
            category="backend",
            tags=["logging"],
            version="1.2",
            content=GUIDE,
        ),
        make_document("zeta-notes", title="Zeta", category="zeta"),
    ]
    manager = StandardsManager(StandardsConfig(projectTitle="Team Standards"), sources=[StaticSource(docs)])
    await manager.initialize()
    return manager


@pytest.mark.asyncio
async def test_resolve_returns_results_with_snippets(manager):
    result = await resolve_standard(manager, "vue")

    assert result.total_count == 1
    assert result.results[0]["id"] == "frontend-vue-components"
    assert "Vue" in result.results[0]["snippet"]
    assert result.to_dict()["message"] == "Found 1 matching standards"


@pytest.mark.asyncio
async def test_resolve_caps_results_but_reports_total():
    docs = [make_document(f"doc-{i:02d}", title=f"Shared {i}") for i in range(15)]
    manager = StandardsManager(StandardsConfig(), sources=[StaticSource(docs)])
    await manager.initialize()

    result = await resolve_standard(manager, "shared")

    assert len(result.results) == 10
    assert result.total_count == 15
    assert result.results[0]["id"] == "doc-00"


@pytest.mark.asyncio
async def test_resolve_blank_query(manager):
    result = await resolve_standard(manager, "   ")
    assert result.message == "Please provide search keywords"
    assert result.results == []


@pytest.mark.asyncio
async def test_resolve_no_match_lists_categories(manager):
    result = await resolve_standard(manager, "nonexistent")
    assert result.total_count == 0
    assert "frontend, backend, zeta" in result.message


@pytest.mark.asyncio
async def test_get_docs_renders_header_and_content(manager):
    text = await get_standard_docs(manager, "backend-logging")

    assert text.startswith("# Logging Guide")
    assert "**Category**: backend" in text
    assert "**Version**: 1.2" in text
    assert text.endswith("Keep logs for 30 days.")


@pytest.mark.asyncio
async def test_get_docs_unknown_id_suggests_matches(manager):
    text = await get_standard_docs(manager, "logging")
    assert text.startswith("Standard not found: logging")
    assert "Did you mean:" in text
    assert "- backend-logging: Logging Guide" in text


@pytest.mark.asyncio
async def test_get_docs_unknown_id_without_suggestions(manager):
    assert await get_standard_docs(manager, "qqq") == "Standard not found: qqq"


@pytest.mark.asyncio
async def test_get_docs_truncates_to_token_budget(manager):
    text = await get_standard_docs(manager, "backend-logging", max_tokens=5)
    body = text.split("---\n\n", 1)[1]
    assert body == GUIDE[:20] + "\n\n... (content truncated)"


@pytest.mark.asyncio
async def test_get_docs_topic_filters_sections(manager):
    text = await get_standard_docs(manager, "backend-logging", topic="levels")
    assert "## Levels" in text
    assert "## Formatting" in text
    assert "## Retention" not in text


def test_topic_without_match_returns_full_content():
    result = extract_topic_content(GUIDE, "kubernetes")
    assert result.startswith('No content related to "kubernetes" was found.')
    assert result.endswith(GUIDE)


def test_header_includes_subcategory_and_tags():
    doc = make_document("d", title="T", category="frontend", subcategory="vue",
                        description="Desc", tags=["a", "b"])
    header = build_header(doc)
    assert "> Desc" in header
    assert "**Category**: frontend / vue | **Tags**: a, b" in header


@pytest.mark.asyncio
async def test_list_groups_by_configured_categories(manager):
    listing = await list_standards(manager)

    assert listing["project_title"] == "Team Standards"
    assert listing["total_count"] == 4
    assert [group["category"] for group in listing["categories"]] == ["frontend", "backend", "zeta"]
    backend = listing["categories"][1]
    assert [s["id"] for s in backend["standards"]] == ["backend-logging", "backend-api-restful"]
    assert backend["count"] == 2


@pytest.mark.asyncio
async def test_list_single_category(manager):
    listing = await list_standards(manager, category="zeta")
    assert listing["total_count"] == 1
    assert listing["categories"][0]["standards"][0]["id"] == "zeta-notes"


def test_group_unknown_categories_alphabetical():
    standards = [make_document("x", category=c).metadata() for c in ["zulu", "alpha", "custom"]]
    groups = group_by_category(standards, ["frontend", "custom"])
    assert [g["category"] for g in groups] == ["custom", "alpha", "zulu"]
