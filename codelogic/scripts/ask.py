"""
CodeLogic - Ask From The Command Line
======================================
CLI entry point that runs one question through the same ``AnswerEngine``
the API uses:
    1. Load settings (fail-fast on a missing ``GOOGLE_API_KEY``).
    2. Build the engine (Gemini models + LanceDB corpus).
    3. Ask the question against the selected codes.
    4. Print the answer, its sources and a timing summary.

Flags:
    --docs CODE [CODE ...]   Category codes to search (e.g. IBC IFC).
    --history Q A            Prior turn; repeat for several turns.
    --k N                    Passages to retrieve (overrides RETRIEVAL_K).

Usage:
    python -m codelogic.scripts.ask "Minimum stair width?" --docs IBC
    python -m codelogic.scripts.ask "And for dwellings?" --docs IRC --history "Minimum stair width?" "44 inches."
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time


# ── CLI Argument Parsing ───────────────────────────────────────────────

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="ask", description="CodeLogic — Ask a building-code question against the indexed corpus.")
    parser.add_argument("question", help="The question to ask.")
    parser.add_argument("--docs", nargs="*", default=[], metavar="CODE", help="Category codes to search (e.g. IBC IFC ADA).")
    parser.add_argument("--history", nargs=2, action="append", default=[], metavar=("QUESTION", "ANSWER"), help="A prior conversation turn; repeat for more.")
    parser.add_argument("--k", type=int, default=None, help="Passages to retrieve (defaults to RETRIEVAL_K).")
    args = parser.parse_args(argv)
    if args.k is not None and args.k < 1:
        parser.error("--k must be at least 1")
    return args


# ── Main Orchestration ─────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    t_start = time.perf_counter()

    try:
        from codelogic.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your .env file:\n")
        print(f"  {exc}")
        print()
        return 1

    # Settings are loaded, so the logger can resolve its level.
    from codelogic.src.core.errors import AnswerError
    from codelogic.src.core.rag_engine import AnswerEngine
    from codelogic.src.core.schemas import ChatRequest
    from codelogic.src.utils.logger import get_logger, quiet_third_party_loggers

    logger = get_logger(__name__)
    quiet_third_party_loggers()

    t_engine = time.perf_counter()
    cfg = settings if args.k is None else settings.model_copy(update={"RETRIEVAL_K": args.k})
    engine = AnswerEngine.from_settings(cfg)
    engine_ms = (time.perf_counter() - t_engine) * 1000
    logger.info("Engine initialised in %.1fms", engine_ms)

    request = ChatRequest(question=args.question, history=[tuple(turn) for turn in args.history], selected_docs=args.docs)

    t_answer = time.perf_counter()
    try:
        result = asyncio.run(engine.answer("POST", request))
    except AnswerError as exc:
        logger.error("Request failed (%d): %s", exc.status_code, exc.message)
        return 1
    answer_ms = (time.perf_counter() - t_answer) * 1000

    _print_answer(result.text, [(d.metadata.get("source", "unknown"), d.page_content) for d in result.documents])
    _print_footer(len(result.documents), engine_ms, answer_ms, time.perf_counter() - t_start)
    return 0


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_answer(text: str, sources: list[tuple[str, str]]) -> None:
    print()
    print("=" * 60)
    print("  ANSWER")
    print("-" * 60)
    print(text)
    print("-" * 60)
    print("  SOURCES")
    print("-" * 60)
    for i, (source, content) in enumerate(sources, 1):
        snippet = " ".join(content.split())[:160]
        print(f"  [{i}] {source}")
        print(f"      {snippet}")
    if not sources:
        print("  (none)")


def _print_footer(n_sources: int, engine_ms: float, answer_ms: float, elapsed: float) -> None:
    print("=" * 60)
    print(f"  Sources returned     : {n_sources}")
    print(f"  Engine init          : {engine_ms:>8.1f}ms")
    print(f"  Retrieval + answer   : {answer_ms:>8.1f}ms")
    print(f"  Total elapsed        : {elapsed:>8.2f}s")
    print("=" * 60)
    print()


# ── Entry point ────────────────────────────────────────────────────────

if __name__ == "__main__":
    sys.exit(main())
