from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from quiz_assistant.core.errors import ExtractionParseFailure, UpstreamCallFailure
from quiz_assistant.core.types import ImageInput, Question
from quiz_assistant.generation.prompting import EXTRACT_PROMPT, TOPIC_PROMPT
from quiz_assistant.generation.question_parser import require_questions
from quiz_assistant.generation.vision_client import VisionCompletion

logger = logging.getLogger(__name__)


@dataclass
class ExtractionOutcome:
    questions: List[Question] = field(default_factory=list)
    used_topic_fallback: bool = False


class QuestionExtractor:
    def __init__(self, llm: VisionCompletion, extract_max_tokens: int = 3000, topic_max_tokens: int = 100):
        self.llm = llm
        self.extract_max_tokens = extract_max_tokens
        self.topic_max_tokens = topic_max_tokens

    def extract_structured(self, image: ImageInput) -> List[Question]:
        """
        Transcribe the quiz into Questions.

        Raises UpstreamCallFailure if the call itself fails and
        ExtractionParseFailure if the answer holds no usable question.
        """
        resp = self.llm.complete(
            image,
            EXTRACT_PROMPT,
            stage="estrazione domande",
            max_tokens=self.extract_max_tokens,
            temperature=0.0,
        )
        logger.debug("Extraction response (first 500 chars): %s", resp.text[:500])
        questions = require_questions(resp.text)
        logger.info("Extracted %d questions", len(questions))
        for q in questions:
            logger.info("  Q%d: %s", q.number, q.text[:60])
        return questions

    def detect_topic(self, image: ImageInput) -> Optional[Question]:
        """Ask only for the quiz subject. Returns None when that fails too."""
        try:
            resp = self.llm.complete(
                image,
                TOPIC_PROMPT,
                stage="rilevamento argomento",
                max_tokens=self.topic_max_tokens,
                temperature=0.0,
            )
        except UpstreamCallFailure as e:
            logger.warning("Topic detection failed: %s", e.message)
            return None
        topic = resp.text.strip().lower()
        if not topic:
            logger.warning("Topic detection returned no text")
            return None
        logger.info("Detected topic: %s", topic)
        return Question(number=1, text=topic, options={})

    def extract(self, image: ImageInput) -> ExtractionOutcome:
        try:
            return ExtractionOutcome(questions=self.extract_structured(image))
        except ExtractionParseFailure as e:
            logger.warning("%s, falling back to topic detection", e.message)
        topic = self.detect_topic(image)
        return ExtractionOutcome(questions=[topic] if topic else [], used_topic_fallback=True)
