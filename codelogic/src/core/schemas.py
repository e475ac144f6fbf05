"""
CodeLogic - Request / Response Models
======================================
Wire shapes of the chat endpoint.  Field aliases keep the camelCase
names the front-end sends and reads (``selectedDocs``,
``sourceDocuments``, ``pageContent``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from langchain_core.documents import Document
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str | None = None
    history: list[tuple[str, str]] = Field(default_factory=list)
    selected_docs: list[str] = Field(default_factory=list, alias="selectedDocs")

    @field_validator("history", "selected_docs", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class SourceDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page_content: str = Field(alias="pageContent")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, document: Document) -> SourceDocument:
        return cls(page_content=document.page_content, metadata=dict(document.metadata))


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    source_documents: list[SourceDocument] = Field(alias="sourceDocuments")


class ErrorResponse(BaseModel):
    error: str


@dataclass(slots=True)
class AnswerResult:
    """Answer text plus the captured documents, in retriever order."""

    text: str
    documents: list[Document] = field(default_factory=list)

    def to_response(self) -> ChatResponse:
        return ChatResponse(text=self.text, source_documents=[SourceDocument.from_document(d) for d in self.documents])
