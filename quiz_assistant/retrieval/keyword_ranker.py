from __future__ import annotations

import logging
from typing import AbstractSet, List

from quiz_assistant.core.types import Corpus, ScoredChunk

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 10


class KeywordRanker:
    """
    Scores chunks by plain substring containment of each keyword.

    Matching is not word-boundary aware: "time" also hits "sometimes".
    """

    def __init__(self, weight: int = KEYWORD_WEIGHT):
        self.weight = weight

    def rank(self, corpus: Corpus, keywords: AbstractSet[str], limit: int) -> List[ScoredChunk]:
        if limit <= 0:
            raise ValueError(f"limit must be > 0, got {limit}")
        if not corpus.chunks or not keywords:
            logger.info("Nothing to rank (%d chunks, %d keywords)", len(corpus.chunks), len(keywords))
            return []

        ordered_keywords = sorted(keywords)
        scored: List[ScoredChunk] = []
        for position, chunk in enumerate(corpus.chunks):
            text = chunk.text.lower()
            matched = tuple(k for k in ordered_keywords if k in text)
            if matched:
                scored.append(
                    ScoredChunk(
                        chunk=chunk,
                        position=position,
                        score=self.weight * len(matched),
                        matched_keywords=matched,
                    )
                )

        logger.info("%d of %d chunks matched at least one keyword", len(scored), len(corpus.chunks))

        # list.sort is stable, so equal scores keep corpus order
        scored.sort(key=lambda s: s.score, reverse=True)
        top = scored[:limit]

        for i, s in enumerate(top[:3], start=1):
            logger.info(
                "  %d. page %s (score %d) keywords: %s",
                i, s.page, s.score, ", ".join(s.matched_keywords[:5]),
            )
        return top
