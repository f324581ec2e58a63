from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from quiz_assistant.core.config import Settings
from quiz_assistant.core.errors import DataUnavailable
from quiz_assistant.core.types import (
    AnalysisContext,
    AnalysisMetadata,
    AnalysisResult,
    Corpus,
    ImageInput,
    PipelineStage,
    Question,
)
from quiz_assistant.generation.extraction import QuestionExtractor
from quiz_assistant.generation.prompting import build_analysis_prompt
from quiz_assistant.generation.vision_client import VisionCompletion
from quiz_assistant.indexing.corpus_store import CorpusStore
from quiz_assistant.retrieval.context import build_analysis_context
from quiz_assistant.retrieval.keyword_ranker import KeywordRanker
from quiz_assistant.retrieval.keywords import KeywordExtractor

logger = logging.getLogger(__name__)


class QuizOrchestrator:
    """
    One request: extract questions from the image, retrieve grounding passages,
    ask for the graded answers.

        START -> EXTRACT_QUESTIONS -> QUESTIONS_FOUND ---------------------> RETRIEVE -> ANALYZE -> DONE
                                   \\-> TOPIC_FALLBACK -> QUESTIONS_FOUND -/
                                                      \\-> NO_QUESTIONS --/

    Extraction or corpus problems only reduce grounding; a failed completion
    call for extraction or analysis propagates as UpstreamCallFailure.
    """

    def __init__(
        self,
        llm: VisionCompletion,
        store: CorpusStore,
        extractor: Optional[QuestionExtractor] = None,
        keyword_extractor: Optional[KeywordExtractor] = None,
        ranker: Optional[KeywordRanker] = None,
        context_top_k: int = 30,
        analysis_max_tokens: int = 4000,
        analysis_temperature: float = 0.05,
    ):
        self.llm = llm
        self.store = store
        self.extractor = extractor or QuestionExtractor(llm)
        self.keyword_extractor = keyword_extractor or KeywordExtractor()
        self.ranker = ranker or KeywordRanker()
        self.context_top_k = context_top_k
        self.analysis_max_tokens = analysis_max_tokens
        self.analysis_temperature = analysis_temperature

    @classmethod
    def from_settings(cls, settings: Settings, llm: VisionCompletion, store: CorpusStore) -> "QuizOrchestrator":
        return cls(
            llm=llm,
            store=store,
            extractor=QuestionExtractor(
                llm,
                extract_max_tokens=settings.extract_max_tokens,
                topic_max_tokens=settings.topic_max_tokens,
            ),
            context_top_k=settings.context_top_k,
            analysis_max_tokens=settings.analysis_max_tokens,
            analysis_temperature=settings.analysis_temperature,
        )

    def run(self, image: ImageInput) -> AnalysisResult:
        stages: List[PipelineStage] = [PipelineStage.START]

        corpus = self._load_corpus()
        questions = self._extract_questions(image, stages)

        stages.append(PipelineStage.RETRIEVE)
        context = self.retrieve(corpus, questions)

        stages.append(PipelineStage.ANALYZE)
        content = self.analyze(image, questions, context, corpus)

        stages.append(PipelineStage.DONE)
        metadata = AnalysisMetadata(
            model=self.llm.model,
            document_used=bool(context),
            questions_analyzed=len(questions),
            chunks_used=len(context.fragments),
            accuracy="high" if context else "medium",
        )
        logger.info(
            "Analysis done: %d questions, %d fragments, accuracy=%s",
            metadata.questions_analyzed, metadata.chunks_used, metadata.accuracy,
        )
        return AnalysisResult(
            content=content,
            metadata=metadata,
            questions=tuple(questions),
            context=context,
            stages=tuple(stages),
        )

    def _load_corpus(self) -> Optional[Corpus]:
        try:
            return self.store.load()
        except DataUnavailable as e:
            logger.warning("Corpus unavailable, answering without documents: %s", e.message)
            return None

    def _extract_questions(self, image: ImageInput, stages: List[PipelineStage]) -> List[Question]:
        stages.append(PipelineStage.EXTRACT_QUESTIONS)
        outcome = self.extractor.extract(image)
        if outcome.used_topic_fallback:
            stages.append(PipelineStage.TOPIC_FALLBACK)
        questions = outcome.questions

        stages.append(PipelineStage.QUESTIONS_FOUND if questions else PipelineStage.NO_QUESTIONS)
        return questions

    def retrieve(self, corpus: Optional[Corpus], questions: Sequence[Question]) -> AnalysisContext:
        if corpus is None or not questions:
            logger.info("No corpus or no questions, skipping retrieval")
            return AnalysisContext()

        keywords = self.keyword_extractor.extract(questions)
        logger.info(
            "%d unique keywords, e.g. %s", len(keywords), ", ".join(sorted(keywords)[:10])
        )
        ranked = self.ranker.rank(corpus, keywords, self.context_top_k)
        context = build_analysis_context(ranked)
        if context:
            logger.info(
                "%d relevant fragments from pages %s",
                len(context.fragments), ", ".join(str(p) for p in context.pages),
            )
        else:
            logger.warning("No relevant fragment found")
        return context

    def analyze(
        self,
        image: ImageInput,
        questions: Sequence[Question],
        context: AnalysisContext,
        corpus: Optional[Corpus] = None,
    ) -> List[dict]:
        prompt = build_analysis_prompt(
            questions,
            context,
            page_count=corpus.page_count if corpus is not None else None,
        )
        resp = self.llm.complete(
            image,
            prompt,
            stage="analisi finale",
            max_tokens=self.analysis_max_tokens,
            temperature=self.analysis_temperature,
        )
        return resp.content


def summarize_stages(stages: Tuple[PipelineStage, ...]) -> str:
    return " -> ".join(s.value for s in stages)
