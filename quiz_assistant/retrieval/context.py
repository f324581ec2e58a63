from __future__ import annotations

from typing import Sequence

from quiz_assistant.core.types import AnalysisContext, ScoredChunk

FRAGMENT_SEPARATOR = "\n\n---\n\n"


def format_fragment(scored: ScoredChunk) -> str:
    return f"[Pagina {scored.page}] {scored.chunk.text}"


def build_analysis_context(ranked: Sequence[ScoredChunk]) -> AnalysisContext:
    if not ranked:
        return AnalysisContext()
    text = FRAGMENT_SEPARATOR.join(format_fragment(s) for s in ranked)
    pages = tuple(dict.fromkeys(s.page for s in ranked))
    return AnalysisContext(fragments=tuple(ranked), text=text, pages=pages)
