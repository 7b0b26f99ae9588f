"""Shared fixtures for the standards hub test suite."""

import sys
from pathlib import Path
from typing import List

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from indexer.source_schema import SourceType, StandardDocument


class FakeClock:
    """Manually advanced time source for cache tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticSource:
    """Document source returning a fixed list and counting loads."""

    def __init__(self, documents: List[StandardDocument], name: str = "static"):
        self.documents = list(documents)
        self.name = name
        self.load_count = 0

    def __repr__(self) -> str:
        return f"StaticSource({self.name!r})"

    async def load(self) -> List[StandardDocument]:
        self.load_count += 1
        return list(self.documents)


class FailingSource:
    """Document source whose load always raises."""

    def __init__(self, error: Exception = None):
        self.error = error or RuntimeError("source exploded")
        self.load_count = 0

    async def load(self) -> List[StandardDocument]:
        self.load_count += 1
        raise self.error


def make_document(doc_id: str, title: str = None, category: str = "custom", **kwargs) -> StandardDocument:
    """Build a StandardDocument with sensible defaults."""
    return StandardDocument(
        id=doc_id,
        title=title or doc_id,
        category=category,
        source=kwargs.pop('source', SourceType.LOCAL),
        path=kwargs.pop('path', f"{category}/{doc_id}.md"),
        content=kwargs.pop('content', f"Content of {doc_id}"),
        **kwargs
    )


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sample_documents():
    """The two-document corpus used across search tests."""
    return [
        make_document(
            "frontend-vue-components",
            title="Vue 3 组件开发规范",
            category="frontend",
            subcategory="vue",
            description="Vue 3 组件的命名与结构约定",
            tags=["vue", "vue3", "component"],
            content="# Vue 3 组件开发规范\n\n使用 Composition API 编写组件。",
        ),
        make_document(
            "backend-api-restful",
            title="RESTful API 设计规范",
            category="backend",
            subcategory="api",
            description="HTTP 接口设计约定",
            tags=["api", "restful", "http"],
            content="# RESTful API 设计规范\n\n资源命名使用复数名词。",
        ),
    ]


@pytest_asyncio.fixture
async def serve():
    """Start aiohttp applications on local ports for the duration of a test."""
    servers = []

    async def _serve(app: web.Application) -> TestServer:
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return server

    yield _serve

    for server in servers:
        await server.close()
