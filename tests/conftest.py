"""Shared fixtures: fake models, a stub vector index and an engine factory.

Settings require ``GOOGLE_API_KEY``, so a dummy one is set before any
``codelogic`` module is imported.
"""

import os

os.environ.setdefault("GOOGLE_API_KEY", "test-key")
os.environ.setdefault("ENV", "dev")

import pytest
from langchain_core.documents import Document
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models import FakeListChatModel

from codelogic.src.core.categories import CategoryResolver, EmptySelectionPolicy, SourceFilterBuilder
from codelogic.src.core.chain import build_answer_chain
from codelogic.src.core.rag_engine import AnswerEngine

CORPUS_ROOT = "/corpus/"

CATEGORY_MAP = {
    "ADA": ["ADA_Standards_2010.pdf", "ADA_Standards_Guidance_2010.pdf"],
    "IBC": ["International_Building_Code_2021.pdf"],
    "IFC": ["International_Fire_Code_2021.pdf"],
}


class RecordingEmbedding(DeterministicFakeEmbedding):
    """Deterministic embeddings that remember every query they embedded."""

    queries: list[str] = []

    def embed_query(self, text: str) -> list[float]:
        self.queries.append(text)
        return super().embed_query(text)


class StubIndex:
    """In-memory ``VectorIndex``: returns stored documents in stored order."""

    def __init__(self, documents: list[Document], error: Exception | None = None) -> None:
        self.documents = documents
        self.error = error
        self.calls: list[tuple[list[float], int, object]] = []

    def similarity_search_by_vector(self, vector, k, source_filter=None):
        self.calls.append((vector, k, source_filter))
        if self.error is not None:
            raise self.error
        hits = [d for d in self.documents if source_filter is None or source_filter.matches(d.metadata)]
        return hits[:k]


class RecordingChainFactory:
    """Builds the real answer chain and counts how often it was asked to."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, llm, retriever):
        self.calls += 1
        return build_answer_chain(llm, retriever)


@pytest.fixture
def corpus() -> list[Document]:
    return [
        Document(page_content="IBC 1011.2: stair width 44 inches.", metadata={"source": CORPUS_ROOT + "International_Building_Code_2021.pdf", "chunk_index": 7}),
        Document(page_content="IFC 903.2: automatic sprinklers.", metadata={"source": CORPUS_ROOT + "International_Fire_Code_2021.pdf", "chunk_index": 3}),
        Document(page_content="IBC 1009.1: accessible means of egress.", metadata={"source": CORPUS_ROOT + "International_Building_Code_2021.pdf", "chunk_index": 2}),
        Document(page_content="ADA 405.2: ramp slope 1:12.", metadata={"source": CORPUS_ROOT + "ADA_Standards_2010.pdf", "chunk_index": 0}),
    ]


@pytest.fixture
def embedder() -> RecordingEmbedding:
    return RecordingEmbedding(size=8, queries=[])


@pytest.fixture
def chain_factory() -> RecordingChainFactory:
    return RecordingChainFactory()


@pytest.fixture
def make_engine(corpus, embedder):
    """Build an ``AnswerEngine`` around a ``StubIndex`` and a fake chat model."""

    def _make(index: StubIndex | None = None, responses: list[str] | None = None, policy: EmptySelectionPolicy = EmptySelectionPolicy.MATCH_NOTHING, chain_factory=build_answer_chain, timeout: float = 5.0, k: int = 9, max_history_turns: int | None = None) -> AnswerEngine:
        return AnswerEngine(
            vector_store=index if index is not None else StubIndex(corpus),
            embedder=embedder,
            llm=FakeListChatModel(responses=responses or ["Stairs must be 44 inches wide."]),
            resolver=CategoryResolver(CATEGORY_MAP),
            filter_builder=SourceFilterBuilder(CORPUS_ROOT, policy),
            k=k,
            timeout=timeout,
            max_history_turns=max_history_turns,
            chain_factory=chain_factory,
        )

    return _make
