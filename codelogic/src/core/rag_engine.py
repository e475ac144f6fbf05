"""
CodeLogic - Answer Engine
==========================
Orchestrates one grounded question-answering request.

Flow (``AnswerEngine.answer``)
------------------------------
    1. Validate  → POST only, non-blank question.
    2. Resolve   → category codes → file names → ``SourceFilter``.
    3. Retrieve + generate
                 → fresh ``DocumentCapture`` + ``GroundedRetriever``,
                   answer chain invoked with the sanitised question and
                   the formatted history under a deadline, then the
                   capture is collected.
    4. Complete  → ``AnswerResult(text, documents)``.

Either both the answer and its documents come back, or a typed
``AnswerError`` is raised; there is no partial result.

Concurrency
-----------
The engine holds only read-only collaborators (vector index, embedder,
LLM, category table), so one instance serves concurrent requests.
Everything mutable (capture, retriever, chain) is built per request.

Usage:
    from codelogic.src.core.rag_engine import AnswerEngine
    engine = AnswerEngine.from_settings()
    result = await engine.answer("POST", ChatRequest(question="...", selectedDocs=["IBC"]))
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel
from langchain_core.retrievers import BaseRetriever
from langchain_core.runnables import Runnable

from codelogic.config.categories import load_category_map
from codelogic.config.settings import Settings, settings
from codelogic.src.core.categories import CategoryResolver, EmptySelectionPolicy, SourceFilter, SourceFilterBuilder
from codelogic.src.core.chain import build_answer_chain
from codelogic.src.core.errors import BadRequest, GenerationFailure, InternalFailure, MethodNotAllowed, RetrievalFailure, TimeoutFailure
from codelogic.src.core.history import format_chat_history
from codelogic.src.core.retriever import DocumentCapture, GroundedRetriever
from codelogic.src.core.schemas import AnswerResult, ChatRequest
from codelogic.src.database.vector_store import VectorIndex
from codelogic.src.utils.logger import get_logger, timed
from codelogic.src.utils.text_utils import is_blank, sanitize_question

logger = get_logger(__name__)

ChainFactory = Callable[[BaseChatModel, BaseRetriever], Runnable]


class AnswerEngine:
    """
    Grounded answer orchestrator.

    Parameters
    ----------
    vector_store
        Filtered similarity search over the corpus.
    embedder
        LangChain ``Embeddings`` for the query.
    llm
        Chat model driving the answer chain.
    resolver
        Category code → file names.
    filter_builder
        File names → ``SourceFilter`` (owns the empty-selection policy).
    k
        Passages retrieved per question.
    timeout
        Seconds allowed for retrieval + generation together.
    max_history_turns
        Most recent turns kept in the prompt; ``None`` keeps all.
    chain_factory
        Builds the answer chain around the request's retriever.
    """

    __slots__ = ("_store", "_embedder", "_llm", "_resolver", "_filters", "_k", "_timeout", "_max_turns", "_chain_factory")

    def __init__(self, vector_store: VectorIndex, embedder: Embeddings, llm: BaseChatModel, resolver: CategoryResolver, filter_builder: SourceFilterBuilder, k: int = 9, timeout: float = 60.0, max_history_turns: int | None = None, chain_factory: ChainFactory = build_answer_chain) -> None:
        self._store = vector_store
        self._embedder = embedder
        self._llm = llm
        self._resolver = resolver
        self._filters = filter_builder
        self._k = k
        self._timeout = timeout
        self._max_turns = max_history_turns
        self._chain_factory = chain_factory


    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> AnswerEngine:
        """Build the production engine: Gemini models + LanceDB corpus."""
        from langchain_google_genai import ChatGoogleGenerativeAI, GoogleGenerativeAIEmbeddings

        from codelogic.src.database.vector_store import CorpusVectorStore

        api_key = cfg.GOOGLE_API_KEY.get_secret_value()
        embedder = GoogleGenerativeAIEmbeddings(model=cfg.EMBEDDING_MODEL, google_api_key=api_key)
        llm = ChatGoogleGenerativeAI(model=cfg.LLM_MODEL, temperature=cfg.LLM_TEMPERATURE, google_api_key=api_key)
        logger.info("LLM initialised: %s (temperature=%.1f)", cfg.LLM_MODEL, cfg.LLM_TEMPERATURE)

        store = CorpusVectorStore(embedder, db_path=cfg.LANCEDB_PATH, table_name=cfg.LANCEDB_TABLE_NAME, dim=cfg.EMBEDDING_DIM)
        resolver = CategoryResolver(load_category_map(cfg.CATEGORY_MAP_PATH))
        builder = SourceFilterBuilder(cfg.CORPUS_ROOT, EmptySelectionPolicy(cfg.EMPTY_SELECTION_POLICY))

        return cls(store, embedder, llm, resolver, builder, k=cfg.RETRIEVAL_K, timeout=cfg.REQUEST_TIMEOUT_SECONDS, max_history_turns=cfg.HISTORY_MAX_TURNS)


    @property
    def categories(self) -> dict[str, list[str]]:
        return self._resolver.categories


    def build_filter(self, selected_docs: Iterable[str]) -> SourceFilter | None:
        """Category codes → ``SourceFilter`` (or ``None`` for the whole corpus)."""
        identifiers = self._resolver.resolve(selected_docs)
        source_filter = self._filters.build(identifiers)

        if source_filter is None:
            logger.info("[FILTER] No selection, searching the whole corpus.")
        elif source_filter.matches_nothing:
            logger.warning("[FILTER] Selection resolved to no documents; retrieval will match nothing.")
        else:
            logger.info("[FILTER] %d source(s): %s", len(source_filter.locators), sorted(source_filter.locators))
        return source_filter


    async def answer(self, method: str, request: ChatRequest | None) -> AnswerResult:
        """
        Run one request through validate → resolve → retrieve+generate.

        Raises
        ------
        MethodNotAllowed
            ``method`` is not POST.
        BadRequest
            The question is missing or blank.
        RetrievalFailure, GenerationFailure, TimeoutFailure, InternalFailure
            Anything that goes wrong after validation.
        """
        t_start = time.perf_counter()

        # ── 1. Validate ───────────────────────────────────────────────
        if method.upper() != "POST":
            raise MethodNotAllowed()
        if request is None or is_blank(request.question):
            raise BadRequest("No question in the request")

        question = sanitize_question(request.question)
        logger.info("[RAG] Question: '%s' (history=%d turn(s), docs=%s)", question[:80], len(request.history), request.selected_docs)

        try:
            # ── 2. Resolve ────────────────────────────────────────────
            source_filter = self.build_filter(request.selected_docs)

            # ── 3. Retrieve + generate ────────────────────────────────
            capture = DocumentCapture()
            retriever = GroundedRetriever(store=self._store, embedder=self._embedder, capture=capture, source_filter=source_filter, k=self._k)
            chain = self._chain_factory(self._llm, retriever)
            chat_history = format_chat_history(request.history, self._max_turns)

            text = await self._generate(chain, question, chat_history)
            documents = capture.collect()

        except InternalFailure as exc:
            logger.error("[RAG] %s: %s", type(exc).__name__, exc)
            raise
        except Exception as exc:
            logger.exception("[RAG] Unexpected failure.")
            raise InternalFailure(str(exc) or "Something went wrong") from exc

        # ── 4. Complete ───────────────────────────────────────────────
        logger.info("[RAG] Pipeline total: %.1fms (%d chars, %d source(s))", (time.perf_counter() - t_start) * 1000, len(text), len(documents))
        return AnswerResult(text=text, documents=documents)


    async def _generate(self, chain: Runnable, question: str, chat_history: str) -> str:
        """Invoke the chain under the deadline, classifying its failures."""
        try:
            with timed(logger, "[RAG] Answer chain"):
                text = await asyncio.wait_for(chain.ainvoke({"question": question, "chat_history": chat_history}), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise TimeoutFailure(f"Answer generation timed out after {self._timeout:g}s.") from exc
        except RetrievalFailure:
            raise
        except Exception as exc:
            raise GenerationFailure(str(exc) or type(exc).__name__) from exc
        return text
