"""
CodeLogic - Error Taxonomy
===========================
Typed failures raised by the answer pipeline.  Core modules raise
these; only the HTTP boundary (``codelogic.src.main``) turns them into
``{"error": message}`` responses, using ``status_code``.

Hierarchy::

    AnswerError
    ├── BadRequest            400  missing / blank question, malformed body
    ├── MethodNotAllowed      405  anything but POST
    └── InternalFailure       500  everything else
        ├── RetrievalFailure       index / embedding error, capture never filled
        ├── GenerationFailure      answer-generator error
        └── TimeoutFailure         retrieval + generation exceeded the deadline
"""

from __future__ import annotations


class AnswerError(Exception):
    """Base class; ``str(exc)`` is the message shown to the caller."""

    status_code: int = 500

    def __init__(self, message: str = "Something went wrong") -> None:
        super().__init__(message)
        self.message = message


class BadRequest(AnswerError):
    status_code = 400


class MethodNotAllowed(AnswerError):
    status_code = 405

    def __init__(self, message: str = "Method not allowed") -> None:
        super().__init__(message)


class InternalFailure(AnswerError):
    status_code = 500


class RetrievalFailure(InternalFailure):
    pass


class GenerationFailure(InternalFailure):
    pass


class TimeoutFailure(InternalFailure):
    pass
