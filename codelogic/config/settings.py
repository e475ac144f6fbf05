"""
CodeLogic - Centralized Configuration
======================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the project-level ``.env`` file.

Security
--------
- ``GOOGLE_API_KEY`` is typed as ``SecretStr`` and has **no default value**.
  If the key is missing at startup, Pydantic will raise a ``ValidationError``
  with a clear error message.  The raw value is never exposed in repr,
  logs, or tracebacks.

Paths
-----
All filesystem paths are ``Path.resolve()``-d at class level so they
work identically on Windows, WSL, and Linux.

Retrieval
---------
``CORPUS_ROOT`` is the prefix the indexer stored in every chunk's
``source`` field.  It is joined to the category table's file names to
build the retrieval filter, so it must match the ingestion-time value
byte for byte (trailing slash included).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).
    Fields *without* a default are **required**; the app will refuse
    to start until they are provided.

    Attributes
    ----------
    GOOGLE_API_KEY : SecretStr
        API key for Google AI Studio (Gemini).  **Required.**
    ENV : Literal["dev", "prod"]
        Environment mode controlling logging verbosity.
    EMBEDDING_MODEL : str
        Model identifier passed to ``GoogleGenerativeAIEmbeddings``.
    EMBEDDING_DIM : int
        Width of the ``vector`` column in the LanceDB table.
    LLM_MODEL : str
        Model identifier for the answer-generation LLM.
    LANCEDB_TABLE_NAME : str
        Table name inside the LanceDB on-disk database.
    CORPUS_ROOT : str
        Prefix turning a document file name into its source locator.
    CATEGORY_MAP_PATH : Path | None
        Optional JSON file ``{"CODE": ["file.pdf", ...]}`` replacing the
        built-in category table.
    EMPTY_SELECTION_POLICY : Literal["match_nothing", "match_all"]
        What an empty category selection means for retrieval.
    RETRIEVAL_K : int
        Number of passages fetched per question.
    HISTORY_MAX_TURNS : int | None
        Keep only the most recent N turns in the prompt (``None`` = all).
    REQUEST_TIMEOUT_SECONDS : float
        Upper bound on the combined retrieval + generation step.
    """

    # ── Resolved Absolute Paths ────────────────────────────────────────
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    LANCEDB_PATH: Path = BASE_DIR / "data" / "lancedb"

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "dev"

    # ── API Keys (REQUIRED — no default) ───────────────────────────────
    GOOGLE_API_KEY: SecretStr

    # ── Model Configuration ────────────────────────────────────────────
    EMBEDDING_MODEL: str = "models/text-embedding-004"
    EMBEDDING_DIM: int = 768
    LLM_MODEL: str = "gemini-2.0-flash"
    LLM_TEMPERATURE: float = 0.0

    # ── LanceDB ────────────────────────────────────────────────────────
    LANCEDB_TABLE_NAME: str = "building_codes"

    # ── Corpus & Categories ────────────────────────────────────────────
    CORPUS_ROOT: str = "docs/"
    CATEGORY_MAP_PATH: Path | None = None
    EMPTY_SELECTION_POLICY: Literal["match_nothing", "match_all"] = "match_nothing"

    # ── Retrieval & Generation ─────────────────────────────────────────
    RETRIEVAL_K: int = 9
    HISTORY_MAX_TURNS: int | None = None
    REQUEST_TIMEOUT_SECONDS: float = 60.0

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("RETRIEVAL_K")
    @classmethod
    def _k_range(cls, v: int) -> int:
        if not 1 <= v <= 50:
            raise ValueError(f"RETRIEVAL_K must be 1–50, got {v}")
        return v


    @field_validator("CORPUS_ROOT")
    @classmethod
    def _root_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("CORPUS_ROOT must not be blank")
        return v


    @field_validator("HISTORY_MAX_TURNS")
    @classmethod
    def _turns_positive(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError(f"HISTORY_MAX_TURNS must be ≥ 1, got {v}")
        return v


    @field_validator("REQUEST_TIMEOUT_SECONDS")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"REQUEST_TIMEOUT_SECONDS must be > 0, got {v}")
        return v

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=Path(__file__).resolve().parent.parent / ".env", env_file_encoding="utf-8", extra="ignore")


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from codelogic.config.settings import settings
settings = Settings()
