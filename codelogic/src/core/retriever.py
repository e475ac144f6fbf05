"""
CodeLogic - Grounded Retriever
===============================
A LangChain retriever that reports, out of band, the exact documents it
handed to the answer chain.

``DocumentCapture``
    One-shot slot (a ``concurrent.futures.Future``) fulfilled by the
    retriever and collected by the orchestrator after the chain returns.
    Fulfilling twice or collecting twice raises ``RuntimeError``.

``GroundedRetriever``
    Embeds the query, runs one filtered top-K search, fulfils the
    capture with the very list it returns.  Built per request together
    with its capture; never reused.
"""

from __future__ import annotations

from concurrent.futures import Future

from langchain_core.callbacks import AsyncCallbackManagerForRetrieverRun, CallbackManagerForRetrieverRun
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_core.retrievers import BaseRetriever
from langchain_core.runnables.config import run_in_executor
from pydantic import ConfigDict, SkipValidation

from codelogic.src.core.categories import SourceFilter
from codelogic.src.core.errors import RetrievalFailure
from codelogic.src.database.vector_store import VectorIndex
from codelogic.src.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentCapture:
    """Single-fulfilment carrier for the documents of one retrieval."""

    __slots__ = ("_future", "_collected")

    def __init__(self) -> None:
        self._future: Future[list[Document]] = Future()
        self._collected = False


    @property
    def fulfilled(self) -> bool:
        return self._future.done()


    def fulfil(self, documents: list[Document]) -> None:
        if self._future.done():
            raise RuntimeError("DocumentCapture was already fulfilled; a retriever must not be reused.")
        self._future.set_result(documents)


    def fail(self, exc: BaseException) -> None:
        if self._future.done():
            raise RuntimeError("DocumentCapture was already fulfilled; a retriever must not be reused.")
        self._future.set_exception(exc)


    def collect(self) -> list[Document]:
        """
        Return the captured documents (or re-raise the retrieval error).

        Raises
        ------
        RetrievalFailure
            If the chain finished without ever calling the retriever.
        RuntimeError
            On a second call.
        """
        if self._collected:
            raise RuntimeError("DocumentCapture was already collected.")
        if not self._future.done():
            raise RetrievalFailure("The answer chain finished without retrieving any documents.")
        self._collected = True
        return self._future.result()


class GroundedRetriever(BaseRetriever):
    """
    Filtered top-K retriever bound to one request.

    Attributes
    ----------
    store
        Vector index (``similarity_search_by_vector``).
    embedder
        LangChain ``Embeddings`` used to embed the query.
    capture
        Receives the returned documents exactly once.
    source_filter
        ``None`` searches the whole corpus.
    k
        Number of passages to fetch.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    store: SkipValidation[VectorIndex]
    embedder: Embeddings
    capture: DocumentCapture
    source_filter: SkipValidation[SourceFilter | None] = None
    k: int = 9


    def _get_relevant_documents(self, query: str, *, run_manager: CallbackManagerForRetrieverRun) -> list[Document]:
        try:
            vector = self.embedder.embed_query(query)
            documents = self.store.similarity_search_by_vector(vector, self.k, self.source_filter)
        except Exception as exc:
            raise self._failed(exc) from exc
        return self._deliver(documents)


    async def _aget_relevant_documents(self, query: str, *, run_manager: AsyncCallbackManagerForRetrieverRun) -> list[Document]:
        try:
            vector = await self.embedder.aembed_query(query)
            documents = await run_in_executor(None, self.store.similarity_search_by_vector, vector, self.k, self.source_filter)
        except Exception as exc:
            raise self._failed(exc) from exc
        return self._deliver(documents)


    def _deliver(self, documents: list[Document]) -> list[Document]:
        documents = list(documents)
        self.capture.fulfil(documents)
        logger.info("[RETRIEVER] %d document(s) retrieved (k=%d).", len(documents), self.k)
        return documents


    def _failed(self, exc: Exception) -> RetrievalFailure:
        failure = RetrievalFailure(str(exc) or type(exc).__name__)
        logger.error("[RETRIEVER] Retrieval failed: %s", failure)
        if not self.capture.fulfilled:
            self.capture.fail(failure)
        return failure
