"""
Shared fakes for the chat pipeline tests.

Every fake records its calls so tests can assert that no upstream work
happens after an early failure.
"""
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessageChunk

from app.main import app
from app.repos.firestore_repo import InMemorySettingsRepo
from app.repos.pinecone_repo import PineconeRepo
from app.routes import get_chat_pipeline
from app.services.chat_pipeline import ChatPipeline
from app.services.completion import CompletionInvoker
from app.services.retriever import NamespaceRetriever


class UpstreamFailure(Exception):
    def __init__(self, message="upstream failed", status_code=None):
        super().__init__(message)
        self.status_code = status_code


class FakeEmbeddings:
    def __init__(self, error=None):
        self.queries = []
        self.error = error

    async def aembed_query(self, text):
        self.queries.append(text)
        if self.error:
            raise self.error
        return [0.1, 0.2, 0.3]


class FakeIndex:
    """Pinecone-like index: namespace → [(id, score, text)]."""

    def __init__(self, records=None, error=None):
        self.records = records or {}
        self.error = error
        self.calls = []

    def query(self, *, vector, top_k, namespace, include_metadata=True):
        self.calls.append({"namespace": namespace, "top_k": top_k})
        if self.error:
            raise self.error

        rows = sorted(self.records.get(namespace, []), key=lambda r: r[1], reverse=True)
        matches = [
            SimpleNamespace(id=vid, score=score, metadata={"text": text, "path": f"{vid}.py"})
            for vid, score, text in rows[:top_k]
        ]
        return SimpleNamespace(matches=matches)


class FakeChatModel:
    """astream() yields AIMessageChunks; can fail before or after output."""

    def __init__(self, fragments=("Hel", "lo"), fail_before=None, fail_after=None):
        self.fragments = list(fragments)
        self.fail_before = fail_before
        self.fail_after = fail_after
        self.calls = []
        self.closed = False

    async def astream(self, messages):
        self.calls.append(messages)
        try:
            if self.fail_before:
                raise self.fail_before
            for fragment in self.fragments:
                yield AIMessageChunk(content=fragment)
            if self.fail_after:
                raise self.fail_after
        finally:
            self.closed = True

    @property
    def prompt(self):
        return self.calls[-1][0].content


class Harness:
    def __init__(
        self,
        *,
        api_key="sk-test",
        repositories=None,
        records=None,
        embeddings=None,
        index=None,
        llm=None,
        error_marker="\n\n[response interrupted: upstream error]",
    ):
        self.settings = InMemorySettingsRepo(
            api_key=api_key,
            repositories={"R1": {}} if repositories is None else repositories,
        )
        self.embeddings = embeddings or FakeEmbeddings()
        self.index = index or FakeIndex(records)
        self.llm = llm or FakeChatModel()
        self.error_marker = error_marker
        self.retrievers_built = []
        self.invokers_built = []

    def build_retriever(self, api_key):
        self.retrievers_built.append(api_key)
        return NamespaceRetriever(
            embeddings=self.embeddings,
            pinecone=PineconeRepo(index=self.index),
        )

    def build_invoker(self, api_key):
        self.invokers_built.append(api_key)
        return CompletionInvoker(self.llm, error_marker=self.error_marker)

    def pipeline(self):
        return ChatPipeline(
            settings_repo=self.settings,
            retriever_factory=self.build_retriever,
            invoker_factory=self.build_invoker,
        )


@pytest.fixture
def harness():
    return Harness()


@pytest.fixture
def make_client():
    def _make(h):
        app.dependency_overrides[get_chat_pipeline] = h.pipeline
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
