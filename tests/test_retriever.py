"""Tests for the one-shot document capture and the grounded retriever."""

import pytest
from langchain_core.documents import Document

from codelogic.src.core.categories import SourceFilter
from codelogic.src.core.errors import RetrievalFailure
from codelogic.src.core.retriever import DocumentCapture, GroundedRetriever

from conftest import CORPUS_ROOT, StubIndex

IBC = CORPUS_ROOT + "International_Building_Code_2021.pdf"


class TestDocumentCapture:
    def test_collect_returns_fulfilled_documents(self):
        capture = DocumentCapture()
        docs = [Document(page_content="x")]
        capture.fulfil(docs)
        assert capture.fulfilled
        assert capture.collect() is docs

    def test_second_fulfilment_is_rejected(self):
        capture = DocumentCapture()
        capture.fulfil([])
        with pytest.raises(RuntimeError, match="already fulfilled"):
            capture.fulfil([])

    def test_second_collect_is_rejected(self):
        capture = DocumentCapture()
        capture.fulfil([])
        capture.collect()
        with pytest.raises(RuntimeError, match="already collected"):
            capture.collect()

    def test_collect_before_fulfilment_is_a_retrieval_failure(self):
        with pytest.raises(RetrievalFailure):
            DocumentCapture().collect()

    def test_failed_capture_reraises(self):
        capture = DocumentCapture()
        capture.fail(RetrievalFailure("index down"))
        with pytest.raises(RetrievalFailure, match="index down"):
            capture.collect()


class TestGroundedRetriever:
    @pytest.mark.asyncio
    async def test_capture_holds_exactly_what_was_returned(self, corpus, embedder):
        index = StubIndex(corpus)
        capture = DocumentCapture()
        retriever = GroundedRetriever(store=index, embedder=embedder, capture=capture, source_filter=SourceFilter(frozenset({IBC})), k=9)

        returned = await retriever.ainvoke("stair width")

        captured = capture.collect()
        assert captured == returned
        assert [d.page_content for d in captured] == ["IBC 1011.2: stair width 44 inches.", "IBC 1009.1: accessible means of egress."]
        assert all(a is b for a, b in zip(captured, [corpus[0], corpus[2]]))

    @pytest.mark.asyncio
    async def test_passes_filter_and_k_to_index(self, corpus, embedder):
        index = StubIndex(corpus)
        flt = SourceFilter(frozenset({IBC}))
        retriever = GroundedRetriever(store=index, embedder=embedder, capture=DocumentCapture(), source_filter=flt, k=1)

        returned = await retriever.ainvoke("stair width")

        assert len(returned) == 1
        vector, k, passed_filter = index.calls[0]
        assert k == 1
        assert passed_filter is flt
        assert vector == embedder.embed_query("stair width")

    @pytest.mark.asyncio
    async def test_index_error_becomes_retrieval_failure(self, embedder):
        index = StubIndex([], error=ConnectionError("lancedb unavailable"))
        capture = DocumentCapture()
        retriever = GroundedRetriever(store=index, embedder=embedder, capture=capture)

        with pytest.raises(RetrievalFailure, match="lancedb unavailable"):
            await retriever.ainvoke("anything")

        assert capture.fulfilled
        with pytest.raises(RetrievalFailure):
            capture.collect()

    @pytest.mark.asyncio
    async def test_reuse_is_rejected(self, corpus, embedder):
        retriever = GroundedRetriever(store=StubIndex(corpus), embedder=embedder, capture=DocumentCapture())
        await retriever.ainvoke("first")
        with pytest.raises(RuntimeError, match="already fulfilled"):
            await retriever.ainvoke("second")

    def test_sync_invoke_also_captures(self, corpus, embedder):
        capture = DocumentCapture()
        retriever = GroundedRetriever(store=StubIndex(corpus), embedder=embedder, capture=capture, k=2)
        returned = retriever.invoke("sprinklers")
        assert capture.collect() == returned
        assert len(returned) == 2
