"""
CodeLogic - CorpusVectorStore
==============================
OOP wrapper around LanceDB providing a clean interface for:
  • Table creation with a strict PyArrow schema
  • Chunk insertion (embedding + metadata), used to seed the index
  • Vector similarity search pre-filtered by ``SourceFilter``

Design decisions:
  • **Dependency Injection**: the connection path and embedder are
    passed in; the FastAPI lifespan builds one store per process.
  • **Vector in, Documents out**: ``similarity_search_by_vector`` takes
    an already-embedded query so the retriever owns embedding, and
    returns LangChain ``Document`` objects with ``metadata["source"]``.
  • **Empty filter short-circuit**: an empty ``SourceFilter`` never
    reaches LanceDB; it matches nothing by definition.

Usage:
    store = CorpusVectorStore(embedder, db_path="data/lancedb", table_name="building_codes", dim=768)
    docs = store.similarity_search_by_vector(vector, k=9, source_filter=flt)
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import lancedb
import pyarrow as pa
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from codelogic.src.core.categories import SourceFilter
from codelogic.src.utils.logger import get_logger

logger = get_logger(__name__)

# ── Type Aliases ──────────────────────────────────────────────────────
ChunkMetadata = dict[str, str | int]
ChunkRecord = dict[str, str | int | list[float]]

# ── Constants ──────────────────────────────────────────────────────────
_EMBED_BATCH_SIZE = 64


# ── Vector Index Protocol ─────────────────────────────────────────────

@runtime_checkable
class VectorIndex(Protocol):
    """Anything that can run a filtered top-K search for a query vector."""

    def similarity_search_by_vector(self, vector: list[float], k: int, source_filter: SourceFilter | None = None) -> list[Document]: ...


def corpus_schema(dim: int) -> pa.Schema:
    """LanceDB table schema; ``vector`` is fixed-width so it is searchable."""
    return pa.schema([
        pa.field("vector", pa.list_(pa.float32(), dim)),
        pa.field("text", pa.utf8()),
        pa.field("source", pa.utf8()),
        pa.field("chunk_index", pa.int32()),
    ])


class CorpusVectorStore:
    """
    High-level abstraction over the LanceDB table holding the corpus.

    Parameters
    ----------
    embedder
        LangChain ``Embeddings``; only needed by ``add_documents``.
    db_path
        LanceDB database directory.
    table_name
        Table holding the corpus chunks.
    dim
        Embedding width, used when the table has to be created.
    """

    __slots__ = ("embedder", "_db_path", "_table_name", "_dim", "db", "table")

    def __init__(self, embedder: Embeddings | None, db_path: str | Path, table_name: str, dim: int) -> None:
        self.embedder = embedder
        self._db_path: str = str(db_path)
        self._table_name: str = table_name
        self._dim: int = dim
        self.db: lancedb.DBConnection | None = None
        self.table: lancedb.table.Table | None = None
        self._connect()


    def _connect(self) -> None:
        """Open the LanceDB connection and open or create the table."""
        try:
            Path(self._db_path).mkdir(parents=True, exist_ok=True)
            self.db = lancedb.connect(self._db_path)

            if self._table_name in self.db.table_names():
                self.table = self.db.open_table(self._table_name)
                logger.info("Opened existing table '%s' (%d rows).", self._table_name, self.table.count_rows())
            else:
                self.table = self.db.create_table(self._table_name, schema=corpus_schema(self._dim))
                logger.info("Created new table '%s' (dim=%d).", self._table_name, self._dim)

        except OSError as exc:
            logger.error("LanceDB filesystem error at %s: %s", self._db_path, exc)
            raise


    def add_documents(self, texts: list[str], metadatas: list[ChunkMetadata]) -> int:
        """
        Embed text chunks and persist them with their ``source``.

        Returns
        -------
        int
            Number of rows added.

        Raises
        ------
        ValueError
            If ``texts`` and ``metadatas`` have mismatched lengths.
        RuntimeError
            If the store was built without an embedder.
        """
        if len(texts) != len(metadatas):
            raise ValueError(f"Length mismatch: {len(texts)} texts vs {len(metadatas)} metadatas.")
        if self.embedder is None:
            raise RuntimeError("CorpusVectorStore was created without an embedder; cannot add documents.")

        all_vectors: list[list[float]] = []
        for i in range(0, len(texts), _EMBED_BATCH_SIZE):
            all_vectors.extend(self.embedder.embed_documents(texts[i : i + _EMBED_BATCH_SIZE]))

        records: list[ChunkRecord] = [
            {"vector": [float(x) for x in vec], "text": txt, "source": str(meta.get("source", "unknown")), "chunk_index": int(meta.get("chunk_index", i))}
            for i, (txt, vec, meta) in enumerate(zip(texts, all_vectors, metadatas))
        ]
        self.table.add(records)

        logger.info("Added %d chunks. Table '%s' now has %d rows.", len(records), self._table_name, self.table.count_rows())
        return len(records)


    def similarity_search_by_vector(self, vector: list[float], k: int, source_filter: SourceFilter | None = None) -> list[Document]:
        """
        Top-*k* nearest chunks, restricted to ``source_filter`` when given.

        The filter is applied *before* the vector search so a narrow
        selection still yields up to *k* hits.
        """
        if source_filter is not None and source_filter.matches_nothing:
            logger.info("Empty source filter: skipping search.")
            return []

        query = self.table.search(vector).limit(k)
        if source_filter is not None:
            query = query.where(source_filter.to_where_clause(), prefilter=True)
            logger.debug("Searching with %d source(s), k=%d.", len(source_filter.locators), k)
        else:
            logger.debug("Searching whole corpus, k=%d.", k)

        rows = query.to_list()
        logger.info("Search returned %d results.", len(rows))
        return [
            Document(page_content=row["text"], metadata={"source": row["source"], "chunk_index": row["chunk_index"], "score": row.get("_distance")})
            for row in rows
        ]


    def count(self) -> int:
        return self.table.count_rows() if self.table is not None else 0


    def __repr__(self) -> str:
        return f"CorpusVectorStore(db='{self._db_path}', table='{self._table_name}', rows={self.count()})"
