"""Tests for the LanceDB-backed corpus store, run against a temporary database."""

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from codelogic.src.core.categories import SourceFilter
from codelogic.src.database.vector_store import CorpusVectorStore, VectorIndex

TEXTS = [
    "IBC stair width is 44 inches",
    "IFC requires automatic sprinklers",
    "ADA ramp slope is 1:12",
    "Guidance on accessible routes",
]
SOURCES = ["docs/IBC.pdf", "docs/IFC.pdf", "docs/ADA.pdf", "docs/O'Brien_Guidance.pdf"]


@pytest.fixture
def fake_embedder() -> DeterministicFakeEmbedding:
    return DeterministicFakeEmbedding(size=8)


@pytest.fixture
def store(tmp_path, fake_embedder) -> CorpusVectorStore:
    store = CorpusVectorStore(fake_embedder, db_path=tmp_path / "lancedb", table_name="codes", dim=8)
    store.add_documents(TEXTS, [{"source": s, "chunk_index": i} for i, s in enumerate(SOURCES)])
    return store


def test_satisfies_vector_index_protocol(store):
    assert isinstance(store, VectorIndex)


def test_count(store):
    assert store.count() == 4


def test_whole_corpus_search_ranks_exact_match_first(store, fake_embedder):
    docs = store.similarity_search_by_vector(fake_embedder.embed_query(TEXTS[1]), k=4)

    assert len(docs) == 4
    assert docs[0].page_content == TEXTS[1]
    assert docs[0].metadata["source"] == "docs/IFC.pdf"
    assert docs[0].metadata["chunk_index"] == 1


def test_filter_restricts_sources(store, fake_embedder):
    flt = SourceFilter(frozenset({"docs/ADA.pdf", "docs/O'Brien_Guidance.pdf"}))

    docs = store.similarity_search_by_vector(fake_embedder.embed_query(TEXTS[0]), k=9, source_filter=flt)

    assert {d.metadata["source"] for d in docs} == {"docs/ADA.pdf", "docs/O'Brien_Guidance.pdf"}


def test_k_limits_results(store, fake_embedder):
    assert len(store.similarity_search_by_vector(fake_embedder.embed_query("stairs"), k=2)) == 2


def test_empty_filter_returns_nothing(store, fake_embedder):
    assert store.similarity_search_by_vector(fake_embedder.embed_query("stairs"), k=9, source_filter=SourceFilter(frozenset())) == []


def test_reopens_existing_table(tmp_path, store, fake_embedder):
    reopened = CorpusVectorStore(fake_embedder, db_path=tmp_path / "lancedb", table_name="codes", dim=8)
    assert reopened.count() == 4


def test_add_documents_rejects_length_mismatch(store):
    with pytest.raises(ValueError, match="Length mismatch"):
        store.add_documents(["a", "b"], [{"source": "x"}])


def test_add_documents_needs_an_embedder(tmp_path):
    store = CorpusVectorStore(None, db_path=tmp_path / "db", table_name="t", dim=8)
    with pytest.raises(RuntimeError, match="without an embedder"):
        store.add_documents(["a"], [{"source": "x"}])
